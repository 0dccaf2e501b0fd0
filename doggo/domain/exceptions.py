"""
Domain-specific exception hierarchy for the doggo scheduling and matching core.
"""


class DoggoError(Exception):
    """Base class for all application-level errors."""


class ValidationError(DoggoError, ValueError):
    """Raised when an input violates a precondition (bad schedule, missing field)."""


class RecordNotFoundError(DoggoError):
    """Raised when the record store has no entry for a requested id."""


class RecordStoreError(DoggoError):
    """Raised when record store data cannot be loaded or parsed."""


class SlotUnavailableError(DoggoError):
    """Raised when a requested booking time is not among the free slots."""


class NotificationError(DoggoError):
    """Raised by a notification dispatcher when a message cannot be delivered."""
