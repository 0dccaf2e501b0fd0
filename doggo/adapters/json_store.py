"""
JSON-file record store for running the services without a database.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pendulum
from pendulum import Date

from ..domain.exceptions import RecordNotFoundError, RecordStoreError, ValidationError
from ..domain.models import (
    DEFAULT_TIMEZONE,
    BookedInterval,
    Coordinates,
    DayRule,
    MatchCandidate,
    TimeRange,
    WeeklySchedule,
)
from ..services.ports import Recipient

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "sample_data.json"

CANCELLED_STATUS = "cancelled"


class JsonRecordStore:
    """
    Record store backed by a single JSON document.

    The document holds ``veterinarians``, ``bookings``, ``users``, ``dogs`` and
    ``matches`` collections using the platform's camelCase field names.
    Implements both ``ScheduleRepository`` and ``CandidateRepository``.
    """

    def __init__(self, data_file: Optional[Path] = None, default_timezone: str = DEFAULT_TIMEZONE):
        """
        Initialize the store.

        Args:
            data_file: Path to the JSON document (defaults to the bundled sample data)
            default_timezone: Timezone for providers that do not declare one

        Raises:
            FileNotFoundError: If the data file doesn't exist
            RecordStoreError: If the file is not valid JSON
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.default_timezone = default_timezone
        self._data = self._load(self.data_file)

    @staticmethod
    def _load(data_file: Path) -> Dict[str, List[Dict[str, Any]]]:
        if not data_file.exists():
            raise FileNotFoundError(f"Data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise RecordStoreError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise RecordStoreError("Data file must contain an object at the root level.")

        return data

    def _collection(self, name: str) -> List[Dict[str, Any]]:
        return self._data.get(name, [])

    def _find(self, collection: str, record_id: str) -> Dict[str, Any]:
        for record in self._collection(collection):
            if record.get("id") == record_id:
                return record
        raise RecordNotFoundError(f"No {collection} record with id '{record_id}'")

    # Veterinarians & bookings

    async def get_schedule(self, provider_id: str) -> WeeklySchedule:
        vet = self._find("veterinarians", provider_id)
        rules = [
            DayRule.parse(
                day_of_week=int(entry["dayOfWeek"]),
                start=entry["startTime"],
                end=entry["endTime"],
                is_available=bool(entry.get("isAvailable", True)),
            )
            for entry in vet.get("workingHours", [])
        ]
        return WeeklySchedule(rules=tuple(rules), timezone=vet.get("timezone") or self.default_timezone)

    async def get_booked_intervals(self, provider_id: str, date: Date) -> List[BookedInterval]:
        vet = self._find("veterinarians", provider_id)
        timezone = vet.get("timezone") or self.default_timezone
        day_start = pendulum.datetime(date.year, date.month, date.day, tz=timezone)
        day = TimeRange(start=day_start, end=day_start.add(days=1))
        intervals: List[BookedInterval] = []

        for booking in self._collection("bookings"):
            if booking.get("veterinarianId") != provider_id:
                continue
            if str(booking.get("status", "")).lower() == CANCELLED_STATUS:
                continue

            try:
                interval = BookedInterval(
                    start=pendulum.parse(booking["scheduledAt"], tz=timezone),
                    duration_minutes=int(booking.get("duration", 30)),
                )
            except (KeyError, ValueError, TypeError) as exc:
                logger.warning("Skipping invalid booking %s: %s", booking.get("id", "?"), exc)
                continue

            # Bookings running over midnight belong to both days.
            if interval.time_range.overlaps(day):
                intervals.append(interval)

        return intervals

    async def get_provider_contact(self, provider_id: str) -> Optional[str]:
        return self._find("veterinarians", provider_id).get("contact")

    async def get_provider_name(self, provider_id: str) -> str:
        return self._find("veterinarians", provider_id).get("name", provider_id)

    # Dogs & matches

    def _owner_location(self, owner_id: str) -> Optional[Coordinates]:
        try:
            owner = self._find("users", owner_id)
        except RecordNotFoundError:
            return None
        return _coordinates(owner.get("coordinates"))

    def _to_candidate(self, dog: Dict[str, Any]) -> MatchCandidate:
        owner_id = dog.get("ownerId", "")
        return MatchCandidate(
            size=dog.get("size"),
            birth_date=pendulum.parse(dog["birthDate"]).date() if dog.get("birthDate") else None,
            activity_level=dog.get("activityLevel"),
            gender=dog.get("gender"),
            temperament=frozenset(dog.get("temperament", [])),
            owner_location=self._owner_location(owner_id),
            dog_id=dog.get("id", ""),
            owner_id=owner_id,
            name=dog.get("name", ""),
        )

    async def get_candidate(self, dog_id: str) -> MatchCandidate:
        return self._to_candidate(self._find("dogs", dog_id))

    async def list_candidates(self) -> List[MatchCandidate]:
        candidates: List[MatchCandidate] = []
        for dog in self._collection("dogs"):
            if not dog.get("isActive", True):
                continue
            try:
                candidates.append(self._to_candidate(dog))
            except (ValidationError, ValueError) as exc:
                logger.warning("Skipping invalid dog %s: %s", dog.get("id", "?"), exc)
        return candidates

    async def list_matched_dog_ids(self, dog_id: str) -> Set[str]:
        matched: Set[str] = set()
        for match in self._collection("matches"):
            pair = {match.get("dog1Id"), match.get("dog2Id")}
            if dog_id in pair:
                matched.update(pair - {dog_id})
        return matched

    # Users

    async def list_recipients(self) -> List[Recipient]:
        return [
            Recipient(
                id=user.get("id", ""),
                contact=user.get("contact", ""),
                location=_coordinates(user.get("coordinates")),
                name=user.get("name", ""),
            )
            for user in self._collection("users")
            if user.get("isActive", True)
        ]


def _coordinates(raw: Optional[Dict[str, Any]]) -> Optional[Coordinates]:
    if not raw:
        return None
    try:
        return Coordinates(latitude=float(raw["latitude"]), longitude=float(raw["longitude"]))
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Ignoring invalid coordinates %r: %s", raw, exc)
        return None
