"""
Booking intake: the checks that run before a booking is persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from pendulum import DateTime

from ..domain.exceptions import NotificationError, SlotUnavailableError, ValidationError
from ..domain.triage import TriageResponse, TriageResult, TriageScorer, urgency_score
from .availability import AvailabilityService
from .ports import NotificationDispatcher

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 180


@dataclass(frozen=True)
class BookingDraft:
    """Everything the caller needs to persist a new booking."""
    provider_id: str
    scheduled_at: DateTime
    duration_minutes: int
    urgency_score: int
    triage_notes: str = ""
    triage_result: Optional[TriageResult] = None


class BookingIntakeService:
    """
    Validates a requested appointment and enriches it with triage data.

    The caller still owns persistence and must guard against two requests
    grabbing the same slot concurrently (e.g. a unique provider+time constraint).
    """

    def __init__(
        self,
        availability: AvailabilityService,
        notifier: Optional[NotificationDispatcher] = None,
        triage_scorer: Optional[TriageScorer] = None,
    ) -> None:
        self._availability = availability
        self._notifier = notifier
        self._triage = triage_scorer or TriageScorer()

    async def prepare_booking(
        self,
        *,
        provider_id: str,
        requested_at: DateTime,
        duration_minutes: int = 30,
        responses: Sequence[TriageResponse] = (),
        provider_contact: Optional[str] = None,
    ) -> BookingDraft:
        """
        Check the slot, score the triage answers and notify the provider.

        Raises:
            ValidationError: If the duration is out of range
            SlotUnavailableError: If ``requested_at`` is not a free slot
        """
        if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
            raise ValidationError(
                f"Duration must be between {MIN_DURATION_MINUTES} and "
                f"{MAX_DURATION_MINUTES} minutes, got {duration_minutes}"
            )

        if not await self._availability.is_slot_available(provider_id, requested_at):
            raise SlotUnavailableError(
                f"Time slot {requested_at.format('DD/MM/YYYY HH:mm')} is not available "
                f"for provider {provider_id}"
            )

        result: Optional[TriageResult] = None
        urgency = 1
        notes = ""

        if responses:
            result = self._triage.score(responses)
            urgency = urgency_score(result)
            notes = f"Triage score: {result.score}%. Urgency: {result.urgency_level.value}"

        draft = BookingDraft(
            provider_id=provider_id,
            scheduled_at=requested_at,
            duration_minutes=duration_minutes,
            urgency_score=urgency,
            triage_notes=notes,
            triage_result=result,
        )

        if provider_contact and self._notifier is not None:
            await self._notify_provider(provider_contact, draft)

        return draft

    async def _notify_provider(self, contact: str, draft: BookingDraft) -> None:
        message = (
            f"Nuova richiesta di prenotazione per il "
            f"{draft.scheduled_at.format('DD/MM/YYYY')} alle {draft.scheduled_at.format('HH:mm')} "
            f"(urgenza {draft.urgency_score}/10)"
        )
        try:
            await self._notifier.send(contact, message)
        except NotificationError as exc:
            logger.warning("Could not notify provider %s: %s", draft.provider_id, exc)
