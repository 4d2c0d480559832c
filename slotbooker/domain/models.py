"""
Domain models for availability windows, candidate slots and bookings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Tuple

from .exceptions import InvalidConfiguration
from .time_of_day import TimeOfDay

MIN_STEP_MINUTES = 15
MAX_STEP_MINUTES = 60


class Weekday(str, Enum):
    """Day of the week an availability window recurs on."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_name(cls, name: str) -> "Weekday":
        """Look up a weekday by (case-insensitive) name."""
        try:
            return cls(name.strip().lower())
        except ValueError as exc:
            raise InvalidConfiguration(f"Unknown weekday: '{name}'") from exc


class SlotGranularity(str, Enum):
    """Fixed slot durations."""
    HALF_HOURLY = "half-hourly"
    HOURLY = "hourly"

    @property
    def duration_minutes(self) -> int:
        return 30 if self is SlotGranularity.HALF_HOURLY else 60

    @classmethod
    def from_name(cls, name: str) -> "SlotGranularity":
        try:
            return cls(name.strip().lower())
        except ValueError as exc:
            raise InvalidConfiguration(
                f"Slot granularity must be 'half-hourly' or 'hourly', got '{name}'"
            ) from exc


def validate_step(step_minutes: int) -> int:
    """Ensure the search step is between 15 and 60 minutes."""
    if not MIN_STEP_MINUTES <= step_minutes <= MAX_STEP_MINUTES:
        raise InvalidConfiguration(
            f"Search step must be between {MIN_STEP_MINUTES} and "
            f"{MAX_STEP_MINUTES} minutes, got {step_minutes}"
        )
    return step_minutes


@dataclass(frozen=True)
class User:
    id: int
    name: str


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    A user's declared availability on one weekday.

    Invariant: start must be before end.
    """
    user_id: int
    weekday: Weekday
    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidConfiguration(
                f"Availability start {self.start} must be before end {self.end}"
            )

    def length_minutes(self) -> int:
        return self.start.minutes_until(self.end)


@dataclass(frozen=True)
class CandidateSlot:
    """
    A slot a user could be booked into.

    ``end`` is inclusive of the slot's last minute: an hourly slot
    starting at 14:00 ends at 14:59.
    """
    start: TimeOfDay
    end: TimeOfDay
    available: bool = True

    @property
    def key(self) -> str:
        return self.start.key

    def mark_unavailable(self) -> "CandidateSlot":
        return replace(self, available=False)


# user id -> slot key -> slot
UserSlots = Dict[str, CandidateSlot]
Grid = Dict[int, UserSlots]


@dataclass(frozen=True)
class BookedSlot:
    """
    A persisted booking between two users.

    The user pair is unordered; ``pair`` gives the normalized form.
    """
    user_id_1: int
    user_id_2: int
    date: str
    start: TimeOfDay
    end: TimeOfDay
    granularity: SlotGranularity

    @property
    def key(self) -> str:
        return self.start.key

    @property
    def pair(self) -> Tuple[int, int]:
        return normalize_pair(self.user_id_1, self.user_id_2)

    def involves(self, user_id: int) -> bool:
        return user_id in (self.user_id_1, self.user_id_2)


def normalize_pair(user_a: int, user_b: int) -> Tuple[int, int]:
    """Order a user pair so (a, b) and (b, a) compare equal."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)
