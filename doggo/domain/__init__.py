"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import DoggoError, ValidationError
from .matching import CompatibilityScorer, score_compatibility
from .models import (
    BookedInterval,
    Coordinates,
    DayRule,
    MatchCandidate,
    TimeRange,
    WeeklySchedule,
)
from .slot_calculator import SlotCalculator, compute_available_slots
from .triage import TriageResponse, TriageResult, TriageScorer, score_triage

__all__ = [
    "BookedInterval",
    "CompatibilityScorer",
    "Coordinates",
    "DayRule",
    "DoggoError",
    "MatchCandidate",
    "SlotCalculator",
    "TimeRange",
    "TriageResponse",
    "TriageResult",
    "TriageScorer",
    "ValidationError",
    "WeeklySchedule",
    "compute_available_slots",
    "score_compatibility",
    "score_triage",
]
