"""
Application service for veterinarian availability.

The service fetches a provider's schedule and the day's bookings through a
repository protocol and delegates the actual slot computation to the
domain-level ``SlotCalculator``. The record store stays swappable (JSON file,
database adapter, test stub) without touching the calculation.
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from typing import List, Optional, Protocol

import pendulum
from pendulum import Date, DateTime

from ..domain.models import BookedInterval, WeeklySchedule, to_local_date
from ..domain.slot_calculator import DEFAULT_SLOT_SIZE_MINUTES, SlotCalculator

logger = logging.getLogger(__name__)


class ScheduleRepository(Protocol):
    """Protocol describing the record store queries needed for availability."""

    async def get_schedule(self, provider_id: str) -> WeeklySchedule:
        """Return the provider's weekly schedule; raise ``RecordNotFoundError`` if unknown."""

    async def get_booked_intervals(self, provider_id: str, date: Date) -> List[BookedInterval]:
        """Return the provider's non-cancelled bookings on ``date`` (provider-local day)."""


class AvailabilityService:
    """
    Orchestrates schedule retrieval and slot calculation.

    Each call reads a fresh snapshot; nothing is cached between requests.
    """

    def __init__(
        self,
        repository: ScheduleRepository,
        default_slot_size_minutes: int = DEFAULT_SLOT_SIZE_MINUTES,
    ) -> None:
        self._repository = repository
        self._default_slot_size = default_slot_size_minutes

    def _slot_size(self, slot_size_minutes: Optional[int]) -> int:
        # Only None falls back; 0 or negative sizes reach SlotCalculator and raise.
        return self._default_slot_size if slot_size_minutes is None else slot_size_minutes

    async def find_slots(
        self,
        provider_id: str,
        date: date_type,
        slot_size_minutes: Optional[int] = None,
    ) -> List[str]:
        """Return the provider's free ``HH:MM`` slots on ``date``."""
        schedule = await self._repository.get_schedule(provider_id)
        local_date = to_local_date(date, schedule.timezone)
        booked = await self._repository.get_booked_intervals(provider_id, local_date)

        calculator = SlotCalculator(slot_size_minutes=self._slot_size(slot_size_minutes))
        slots = calculator.find_available_slots(schedule, booked, local_date)

        logger.info(
            "Provider %s on %s: %d free slot(s)",
            provider_id,
            local_date.to_date_string(),
            len(slots),
        )
        return slots

    async def is_slot_available(
        self,
        provider_id: str,
        requested_at: DateTime,
        slot_size_minutes: Optional[int] = None,
    ) -> bool:
        """Check that ``requested_at`` is the start of a free slot."""
        schedule = await self._repository.get_schedule(provider_id)
        local = pendulum.instance(requested_at, tz=schedule.timezone).in_timezone(schedule.timezone)
        booked = await self._repository.get_booked_intervals(provider_id, local.date())

        calculator = SlotCalculator(slot_size_minutes=self._slot_size(slot_size_minutes))
        return calculator.is_slot_free(schedule, booked, local)
