"""
doggo - appointment availability, dog matching and triage scoring.
"""

__version__ = "0.1.0"
