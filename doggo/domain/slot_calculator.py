"""
Core business logic for calculating bookable time slots.

This is the heart of the scheduling side - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import date as date_type
from typing import List, Sequence

import pendulum
from pendulum import Date, DateTime

from .exceptions import ValidationError
from .models import BookedInterval, TimeRange, WeeklySchedule, format_hhmm, to_local_date

logger = logging.getLogger(__name__)

DEFAULT_SLOT_SIZE_MINUTES = 30


class SlotCalculator:
    """
    Calculates free booking slots for one provider and one day.

    Algorithm:
    1. Resolve the day's rule from the weekly schedule (closed day -> no slots)
    2. Walk the working window at a fixed stride, keeping only whole slots
    3. Drop every slot that overlaps any booked interval (half-open check)
    4. Return HH:MM labels in ascending order
    """

    def __init__(self, slot_size_minutes: int = DEFAULT_SLOT_SIZE_MINUTES):
        if slot_size_minutes <= 0:
            raise ValidationError(
                f"slot_size_minutes must be greater than zero, got {slot_size_minutes}"
            )
        self.slot_size_minutes = slot_size_minutes

    def find_available_slots(
        self,
        schedule: WeeklySchedule,
        booked_intervals: Sequence[BookedInterval],
        date: date_type,
    ) -> List[str]:
        """
        Find the free slots of a provider on a given day.

        Args:
            schedule: The provider's weekly working hours
            booked_intervals: Non-cancelled bookings of that provider
            date: Requested day (a DateTime is first moved into the schedule's timezone)

        Returns:
            Ordered list of ``HH:MM`` labels
        """
        local_date = to_local_date(date, schedule.timezone)
        candidates = self._candidate_slots(schedule, local_date)

        if not candidates:
            return []

        booked_ranges = [interval.time_range for interval in booked_intervals]

        free = [
            label
            for label, slot in candidates
            if not any(slot.overlaps(booked) for booked in booked_ranges)
        ]

        logger.debug(
            "%s: %d of %d slots free (%d bookings)",
            local_date.to_date_string(),
            len(free),
            len(candidates),
            len(booked_ranges),
        )
        return free

    def is_slot_free(
        self,
        schedule: WeeklySchedule,
        booked_intervals: Sequence[BookedInterval],
        requested_at: DateTime,
    ) -> bool:
        """Check whether ``requested_at`` starts one of the free slots of its day."""
        local = pendulum.instance(requested_at, tz=schedule.timezone).in_timezone(schedule.timezone)
        label = format_hhmm(local.hour * 60 + local.minute)

        if local.second or local.microsecond:
            return False

        return label in self.find_available_slots(schedule, booked_intervals, local.date())

    def _candidate_slots(self, schedule: WeeklySchedule, local_date: Date) -> List[tuple]:
        """
        Generate ``(label, TimeRange)`` pairs covering the day's working window.

        A trailing partial slot shorter than the stride is not generated.
        """
        rule = schedule.rule_for(local_date)

        if rule is None or not rule.is_available:
            return []

        candidates = []
        minutes = rule.start_minutes

        while minutes + self.slot_size_minutes <= rule.end_minutes:
            start = pendulum.datetime(
                local_date.year,
                local_date.month,
                local_date.day,
                minutes // 60,
                minutes % 60,
                tz=schedule.timezone,
            )
            slot = TimeRange(start=start, end=start.add(minutes=self.slot_size_minutes))
            candidates.append((format_hhmm(minutes), slot))
            minutes += self.slot_size_minutes

        return candidates


def compute_available_slots(
    schedule: WeeklySchedule,
    booked_intervals: Sequence[BookedInterval],
    date: date_type,
    slot_size_minutes: int = DEFAULT_SLOT_SIZE_MINUTES,
) -> List[str]:
    """Return the free ``HH:MM`` slots of ``schedule`` on ``date``."""
    calculator = SlotCalculator(slot_size_minutes=slot_size_minutes)
    return calculator.find_available_slots(schedule, booked_intervals, date)
