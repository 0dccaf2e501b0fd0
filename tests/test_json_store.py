"""
Tests for the JSON record store, using the bundled sample data.
"""

import asyncio
import json

import pendulum
import pytest

from doggo.adapters.json_store import JsonRecordStore
from doggo.domain.exceptions import RecordNotFoundError, RecordStoreError
from doggo.domain.models import DogSize
from doggo.services.availability import AvailabilityService
from doggo.services.matching import MatchFinderService


class FixedClock:
    def now(self):
        return pendulum.datetime(2024, 6, 1, 12, 0, tz="Europe/Rome")


@pytest.fixture
def store() -> JsonRecordStore:
    return JsonRecordStore()


def test_schedule_is_loaded(store):
    schedule = asyncio.run(store.get_schedule("vet-rossi"))

    assert schedule.timezone == "Europe/Rome"
    assert [rule.day_of_week for rule in schedule.rules] == [1, 2, 3, 5]
    assert schedule.rule_for_day(3).is_available is False


def test_provider_without_timezone_uses_default(store):
    schedule = asyncio.run(store.get_schedule("vet-bianchi"))

    assert schedule.timezone == "Europe/Rome"


def test_unknown_provider(store):
    with pytest.raises(RecordNotFoundError):
        asyncio.run(store.get_schedule("vet-nobody"))


def test_booked_intervals_skip_cancelled_and_other_days(store):
    intervals = asyncio.run(store.get_booked_intervals("vet-rossi", pendulum.date(2024, 11, 25)))

    starts = sorted(interval.start.in_timezone("Europe/Rome").format("HH:mm") for interval in intervals)
    assert starts == ["10:00", "11:45"]
    assert asyncio.run(store.get_booked_intervals("vet-rossi", pendulum.date(2024, 11, 26))) == []


@pytest.mark.parametrize(
    "vet_id, day, expected",
    [
        ("vet-rossi", pendulum.date(2024, 11, 25), ["09:00", "09:30", "10:30", "11:00"]),
        ("vet-rossi", pendulum.date(2024, 11, 27), []),
        (
            "vet-rossi",
            pendulum.date(2024, 11, 29),
            ["08:30", "09:00", "09:30", "10:00", "10:30", "11:00", "11:30", "12:00"],
        ),
        ("vet-bianchi", pendulum.date(2024, 11, 25), ["15:00", "15:30", "17:00", "17:30", "18:00", "18:30"]),
    ],
)
def test_sample_availability(store, vet_id, day, expected):
    slots = asyncio.run(AvailabilityService(store).find_slots(vet_id, day))

    assert slots == expected


def test_candidates_exclude_inactive_dogs(store):
    candidates = asyncio.run(store.list_candidates())

    ids = {candidate.dog_id for candidate in candidates}
    assert "dog-old" not in ids
    assert len(ids) == 5


def test_candidate_location_comes_from_owner(store):
    fido = asyncio.run(store.get_candidate("dog-fido"))
    kira = asyncio.run(store.get_candidate("dog-kira"))

    assert fido.size == DogSize.MEDIUM
    assert fido.owner_location.latitude == pytest.approx(45.4642)
    assert kira.owner_location is None
    assert kira.temperament == frozenset()


def test_matched_dog_ids(store):
    assert asyncio.run(store.list_matched_dog_ids("dog-kira")) == {"dog-birba"}
    assert asyncio.run(store.list_matched_dog_ids("dog-fido")) == set()


def test_sample_match_feed(store):
    ranked = asyncio.run(MatchFinderService(store, clock=FixedClock()).find_potential_matches("dog-fido"))

    assert [(entry.candidate.dog_id, entry.score) for entry in ranked] == [("dog-luna", 84), ("dog-kira", 71)]


def test_recipients(store):
    recipients = asyncio.run(store.list_recipients())

    by_id = {recipient.id: recipient for recipient in recipients}
    assert set(by_id) == {"u-anna", "u-luca", "u-sara", "u-paolo"}
    assert by_id["u-paolo"].location is None


def test_invalid_booking_is_skipped(tmp_path):
    data = {
        "veterinarians": [{"id": "vet-1", "workingHours": []}],
        "bookings": [
            {"id": "bad", "veterinarianId": "vet-1", "duration": 30},
            {"id": "ok", "veterinarianId": "vet-1", "scheduledAt": "2024-11-25T09:00:00+01:00"},
        ],
    }
    data_file = tmp_path / "records.json"
    data_file.write_text(json.dumps(data), encoding="utf-8")

    intervals = asyncio.run(JsonRecordStore(data_file).get_booked_intervals("vet-1", pendulum.date(2024, 11, 25)))

    assert len(intervals) == 1
    assert intervals[0].duration_minutes == 30


def test_booking_running_past_midnight_blocks_next_day(tmp_path):
    """Sunday 23:30 for 90 minutes occupies Monday until 01:00."""
    data = {
        "veterinarians": [
            {
                "id": "vet-night",
                "timezone": "Europe/Rome",
                "workingHours": [
                    {"dayOfWeek": 0, "startTime": "22:00", "endTime": "23:59"},
                    {"dayOfWeek": 1, "startTime": "00:00", "endTime": "02:00"},
                ],
            }
        ],
        "bookings": [
            {"id": "late", "veterinarianId": "vet-night", "scheduledAt": "2024-11-24T23:30:00+01:00", "duration": 90},
        ],
    }
    data_file = tmp_path / "records.json"
    data_file.write_text(json.dumps(data), encoding="utf-8")
    store = JsonRecordStore(data_file)
    service = AvailabilityService(store)

    monday = asyncio.run(store.get_booked_intervals("vet-night", pendulum.date(2024, 11, 25)))
    sunday = asyncio.run(store.get_booked_intervals("vet-night", pendulum.date(2024, 11, 24)))

    assert len(monday) == 1
    assert len(sunday) == 1
    assert asyncio.run(service.find_slots("vet-night", pendulum.date(2024, 11, 25))) == ["01:00", "01:30"]
    assert asyncio.run(service.find_slots("vet-night", pendulum.date(2024, 11, 24))) == [
        "22:00", "22:30", "23:00",
    ]


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        JsonRecordStore(tmp_path / "missing.json")


def test_invalid_json(tmp_path):
    data_file = tmp_path / "broken.json"
    data_file.write_text("{not json", encoding="utf-8")

    with pytest.raises(RecordStoreError, match="Invalid JSON"):
        JsonRecordStore(data_file)


def test_root_must_be_object(tmp_path):
    data_file = tmp_path / "list.json"
    data_file.write_text("[]", encoding="utf-8")

    with pytest.raises(RecordStoreError):
        JsonRecordStore(data_file)
