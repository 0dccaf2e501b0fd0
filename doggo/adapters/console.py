"""
Local stand-ins for the notification gateway and the clock.
"""

from typing import List, Tuple

import pendulum
from pendulum import DateTime
from rich.console import Console

from ..domain.models import DEFAULT_TIMEZONE


class ConsoleNotifier:
    """
    Prints notifications instead of delivering them.

    Every message is also kept in ``sent`` so callers can report what went out.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.sent: List[Tuple[str, str]] = []

    async def send(self, recipient: str, message: str) -> None:
        self.sent.append((recipient, message))
        self.console.print(f"[dim]✉ {recipient}:[/dim] {message}")


class SystemClock:
    """Wall-clock time in a fixed timezone."""

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.timezone = timezone

    def now(self) -> DateTime:
        return pendulum.now(self.timezone)
