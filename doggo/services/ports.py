"""
Collaborator protocols shared by the application services.

The services never talk to a database, a message gateway or the system clock
directly; they receive objects matching these protocols.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from pendulum import DateTime

from ..domain.models import Coordinates


@dataclass(frozen=True)
class Recipient:
    """Someone who can be notified, optionally with a home location."""
    id: str
    contact: str
    location: Optional[Coordinates] = None
    name: str = ""


class NotificationDispatcher(Protocol):
    """Delivers a message to a recipient (email, SMS, push - not our concern)."""

    async def send(self, recipient: str, message: str) -> None:
        """Deliver ``message``; raise ``NotificationError`` on failure."""


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> DateTime:
        """Return the current instant."""
