"""
Emergency alerts for owners living near a reported emergency.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from ..domain.exceptions import NotificationError
from ..domain.geo import filter_by_radius
from ..domain.models import Coordinates
from .ports import NotificationDispatcher, Recipient

logger = logging.getLogger(__name__)

DEFAULT_ALERT_RADIUS_KM = 25.0


class EmergencyAlertService:
    """Notifies every recipient within the alert radius, nearest first."""

    def __init__(
        self,
        notifier: NotificationDispatcher,
        radius_km: float = DEFAULT_ALERT_RADIUS_KM,
    ) -> None:
        self._notifier = notifier
        self._radius_km = radius_km

    async def alert_nearby(
        self,
        *,
        location: Coordinates,
        recipients: Sequence[Recipient],
        reporter_id: str = "",
        description: str = "",
    ) -> List[Tuple[Recipient, float]]:
        """
        Send an alert to nearby recipients.

        The reporter and recipients without a location are skipped; a failed
        delivery is logged and does not stop the remaining alerts.

        Returns:
            ``(recipient, distance_km)`` pairs that were notified
        """
        nearby = filter_by_radius(
            [recipient for recipient in recipients if recipient.id != reporter_id],
            location,
            self._radius_km,
            lambda recipient: recipient.location,
        )

        notified: List[Tuple[Recipient, float]] = []
        for recipient, distance in nearby:
            message = f"Emergenza segnalata a {distance:.1f} km da te"
            if description:
                message = f"{message}: {description}"
            try:
                await self._notifier.send(recipient.contact, message)
            except NotificationError as exc:
                logger.warning("Failed to send emergency alert to %s: %s", recipient.id, exc)
                continue
            notified.append((recipient, distance))

        logger.info("Emergency alert sent to %d of %d nearby recipients", len(notified), len(nearby))
        return notified
