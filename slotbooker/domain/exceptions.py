"""
Domain-specific exception hierarchy for slot scheduling.

Every error carries a stable ``code`` so callers (the CLI, or any other
transport) can classify it without inspecting the message.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""

    code = "scheduling_error"


class InvalidConfiguration(SchedulingError):
    """Raised for a bad step, duration, availability window or request shape."""

    code = "invalid_configuration"


class InvalidTime(InvalidConfiguration):
    """Raised when an hour/minute pair falls outside a single day."""


class InvalidDate(SchedulingError):
    """Raised when a calendar date cannot be parsed."""

    code = "invalid_date"


class NotFound(SchedulingError):
    """Raised when a user or a user's weekday availability does not exist."""

    code = "not_found"


class SlotUnavailable(SchedulingError):
    """Raised when a slot is not open for both users, or was taken concurrently."""

    code = "slot_unavailable"


class PersistenceError(SchedulingError):
    """Raised when the storage backend fails."""

    code = "persistence_error"
