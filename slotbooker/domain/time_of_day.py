"""
Fixed-point hour:minute arithmetic within a single day.

A ``TimeOfDay`` never crosses midnight: arithmetic that would land past
23:59 raises ``InvalidTime`` instead of rolling over to the next day.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .exceptions import InvalidTime

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24
MINUTES_PER_DAY = MINUTES_PER_HOUR * HOURS_PER_DAY


def _validate(hour: int, minute: int) -> None:
    if not 0 <= hour < HOURS_PER_DAY:
        raise InvalidTime(f"Hour must be between 0 and 23, got {hour}")
    if not 0 <= minute < MINUTES_PER_HOUR:
        raise InvalidTime(f"Minute must be between 0 and 59, got {minute}")


def encode(hour: int, minute: int) -> int:
    """Pack an hour/minute pair into a single ``HHMM`` integer."""
    _validate(hour, minute)
    return hour * 100 + minute


def decode(packed: int) -> Tuple[int, int]:
    """Split a packed ``HHMM`` integer back into ``(hour, minute)``."""
    if packed < 0:
        raise InvalidTime(f"Packed time must not be negative, got {packed}")
    hour, minute = divmod(packed, 100)
    _validate(hour, minute)
    return hour, minute


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    Immutable time of day, ordered by (hour, minute).

    Invariant: 0 <= hour < 24 and 0 <= minute < 60.
    """
    hour: int
    minute: int = 0

    def __post_init__(self):
        _validate(self.hour, self.minute)

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        """
        Parse an ``HH:MM`` string.

        Raises:
            InvalidTime: If the string is malformed or out of range
        """
        parts = value.strip().split(":")
        if len(parts) != 2 or not all(part.isdigit() for part in parts):
            raise InvalidTime(f"Time must be formatted as HH:MM, got '{value}'")
        return cls(hour=int(parts[0]), minute=int(parts[1]))

    @classmethod
    def from_packed(cls, packed: int) -> "TimeOfDay":
        hour, minute = decode(packed)
        return cls(hour=hour, minute=minute)

    @classmethod
    def from_minutes(cls, total_minutes: int) -> "TimeOfDay":
        """Build a time from minutes since midnight."""
        if not 0 <= total_minutes < MINUTES_PER_DAY:
            raise InvalidTime(
                f"{total_minutes} minutes since midnight is outside a single day"
            )
        hour, minute = divmod(total_minutes, MINUTES_PER_HOUR)
        return cls(hour=hour, minute=minute)

    @property
    def packed(self) -> int:
        return encode(self.hour, self.minute)

    @property
    def key(self) -> str:
        """Canonical zero-padded ``HH:MM`` form, used as the slot key."""
        return f"{self.hour:02d}:{self.minute:02d}"

    def total_minutes(self) -> int:
        """Minutes since midnight."""
        return self.hour * MINUTES_PER_HOUR + self.minute

    def add(self, delta_minutes: int) -> "TimeOfDay":
        """
        Add (or, with a negative delta, subtract) minutes.

        Minute overflow carries into the hour. There is no wraparound:
        a result outside 00:00-23:59 raises ``InvalidTime``.
        """
        return TimeOfDay.from_minutes(self.total_minutes() + delta_minutes)

    def minutes_until(self, other: "TimeOfDay") -> int:
        """Signed number of minutes from this time to ``other``."""
        return other.total_minutes() - self.total_minutes()

    def __str__(self) -> str:
        return self.key


def add(t: TimeOfDay, delta_minutes: int) -> TimeOfDay:
    """Functional form of :meth:`TimeOfDay.add`."""
    return t.add(delta_minutes)
