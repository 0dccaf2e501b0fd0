"""
Adapters layer - Local stand-ins for the record store, notifications and clock.
"""

from .console import ConsoleNotifier, SystemClock
from .json_store import JsonRecordStore

__all__ = ["ConsoleNotifier", "JsonRecordStore", "SystemClock"]
