"""
Domain models for schedules, bookings and match candidates.
"""

import re
from dataclasses import dataclass, field
from datetime import date as date_type, datetime, time
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple

import pendulum
from pendulum import Date, DateTime

from .exceptions import ValidationError

DEFAULT_TIMEZONE = "Europe/Rome"

_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class TimeRange:
    """Half-open span of absolute time, ``[start, end)``, used for slots and bookings."""
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValidationError(f"Range start {self.start} is not before its end {self.end}")

    def overlaps(self, other: "TimeRange") -> bool:
        """True when the spans share an instant; back-to-back spans do not overlap."""
        return self.start < other.end and other.start < self.end


def parse_hhmm(value: str) -> time:
    """
    Parse a 24-hour ``HH:MM`` label into a time.

    Raises:
        ValidationError: If the label is not a valid ``HH:MM`` string
    """
    match = _HHMM_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError(f"Invalid time format (expected HH:MM): {value!r}")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def format_hhmm(minutes_of_day: int) -> str:
    """Format minutes since midnight as an ``HH:MM`` label."""
    return f"{minutes_of_day // 60:02d}:{minutes_of_day % 60:02d}"


def to_local_date(value: date_type, timezone: str) -> Date:
    """
    Resolve a calendar date in the given timezone.

    Plain dates are taken as-is. Datetimes are converted into ``timezone`` first
    (naive datetimes are assumed to already be local to it).
    """
    if isinstance(value, datetime):
        return pendulum.instance(value, tz=timezone).in_timezone(timezone).date()
    return pendulum.date(value.year, value.month, value.day)


@dataclass(frozen=True)
class DayRule:
    """
    Working hours for one day of the week.

    ``day_of_week`` follows the stored convention: 0=Sunday, 6=Saturday.
    """
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool = True

    def __post_init__(self):
        if self.day_of_week not in range(7):
            raise ValidationError(f"day_of_week must be between 0 and 6, got {self.day_of_week}")
        if self.is_available and self.start_time > self.end_time:
            raise ValidationError(
                f"Day {self.day_of_week}: start time {self.start_time:%H:%M} "
                f"is after end time {self.end_time:%H:%M}"
            )

    @classmethod
    def parse(cls, day_of_week: int, start: str, end: str, is_available: bool = True) -> "DayRule":
        """Build a rule from ``HH:MM`` labels."""
        return cls(
            day_of_week=day_of_week,
            start_time=parse_hhmm(start),
            end_time=parse_hhmm(end),
            is_available=is_available,
        )

    @property
    def start_minutes(self) -> int:
        return self.start_time.hour * 60 + self.start_time.minute

    @property
    def end_minutes(self) -> int:
        return self.end_time.hour * 60 + self.end_time.minute


@dataclass(frozen=True)
class WeeklySchedule:
    """
    A provider's recurring weekly working hours.

    Invariant: at most one rule per day of week, and ``timezone`` is a known
    IANA name.
    """
    rules: Tuple[DayRule, ...] = ()
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self):
        try:
            pendulum.timezone(self.timezone)
        except (KeyError, ValueError) as exc:
            raise ValidationError(f"Unknown timezone: {self.timezone!r}") from exc

        rules =tuple(sorted(self.rules, key=lambda rule: rule.day_of_week))
        seen: set[int] = set()
        for rule in rules:
            if rule.day_of_week in seen:
                raise ValidationError(f"Duplicate working hours for day {rule.day_of_week}")
            seen.add(rule.day_of_week)
        object.__setattr__(self, "rules", rules)

    def rule_for_day(self, day_of_week: int) -> Optional[DayRule]:
        for rule in self.rules:
            if rule.day_of_week == day_of_week:
                return rule
        return None

    def rule_for(self, value: date_type) -> Optional[DayRule]:
        """Return the rule for the weekday of ``value`` in the schedule's timezone."""
        local_date = to_local_date(value, self.timezone)
        return self.rule_for_day(local_date.isoweekday() % 7)


@dataclass(frozen=True)
class BookedInterval:
    """An existing, non-cancelled booking occupying part of a provider's day."""
    start: DateTime
    duration_minutes: int

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValidationError(
                f"Booking duration must be positive, got {self.duration_minutes}"
            )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.start.add(minutes=self.duration_minutes))


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude point in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValidationError(f"Latitude out of range: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValidationError(f"Longitude out of range: {self.longitude}")


class DogSize(str, Enum):
    TINY = "tiny"      # <5kg
    SMALL = "small"    # 5-15kg
    MEDIUM = "medium"  # 15-30kg
    LARGE = "large"    # 30-50kg
    GIANT = "giant"    # >50kg


class ActivityLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class Gender(str, Enum):
    MALE = "maschio"
    FEMALE = "femmina"


class MatchAction(str, Enum):
    PENDING = "pending"
    LIKED = "liked"
    PASSED = "passed"


class MatchStatus(str, Enum):
    PENDING = "pending"
    MATCHED = "matched"
    REJECTED = "rejected"


SIZE_ORDER: List[DogSize] = [
    DogSize.TINY,
    DogSize.SMALL,
    DogSize.MEDIUM,
    DogSize.LARGE,
    DogSize.GIANT,
]

ACTIVITY_ORDER: List[ActivityLevel] = [
    ActivityLevel.LOW,
    ActivityLevel.MODERATE,
    ActivityLevel.HIGH,
    ActivityLevel.VERY_HIGH,
]


def _coerce_enum(enum_cls, value, field_name: str):
    if value is None:
        raise ValidationError(f"Missing required field: {field_name}")
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field_name} {value!r} (expected one of: {allowed})"
        ) from exc


@dataclass(frozen=True)
class MatchCandidate:
    """
    A dog as seen by the compatibility scorer.

    ``dog_id`` and ``owner_id`` identify the record but never influence the score.
    """
    size: DogSize
    birth_date: Date
    activity_level: ActivityLevel
    gender: Gender
    temperament: FrozenSet[str] = field(default_factory=frozenset)
    owner_location: Optional[Coordinates] = None
    dog_id: str = ""
    owner_id: str = ""
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "size", _coerce_enum(DogSize, self.size, "size"))
        object.__setattr__(
            self,
            "activity_level",
            _coerce_enum(ActivityLevel, self.activity_level, "activity_level"),
        )
        object.__setattr__(self, "gender", _coerce_enum(Gender, self.gender, "gender"))

        if self.birth_date is None:
            raise ValidationError("Missing required field: birth_date")
        object.__setattr__(
            self,
            "birth_date",
            pendulum.date(self.birth_date.year, self.birth_date.month, self.birth_date.day),
        )

        temperament: Iterable[str] = self.temperament or ()
        object.__setattr__(self, "temperament", frozenset(temperament))

    def age_in_years(self, as_of: Date) -> int:
        """Whole years between birth date and ``as_of`` (never negative)."""
        if as_of <= self.birth_date:
            return 0
        return self.birth_date.diff(as_of).in_years()
