"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, ScheduleRepository
from .booking import BookingDraft, BookingIntakeService
from .emergency import EmergencyAlertService
from .matching import CandidateRepository, MatchFinderService
from .ports import Clock, NotificationDispatcher, Recipient

__all__ = [
    "AvailabilityService",
    "BookingDraft",
    "BookingIntakeService",
    "CandidateRepository",
    "Clock",
    "EmergencyAlertService",
    "MatchFinderService",
    "NotificationDispatcher",
    "Recipient",
    "ScheduleRepository",
]
