"""
Protocols describing the storage behaviour needed by the services.

Dependency inversion toward these protocols lets the SQL store and the
in-memory store be swapped freely, in the CLI as in tests.
"""

from __future__ import annotations

from typing import ContextManager, Iterable, List, Protocol

from ..domain.models import (
    AvailabilityWindow,
    BookedSlot,
    SlotGranularity,
    User,
    Weekday,
)
from ..domain.time_of_day import TimeOfDay


class AvailabilityProvider(Protocol):
    """Read and write access to users and their weekly availability."""

    def get_availability(self, user_id: int, weekday: Weekday) -> AvailabilityWindow:
        """Return the user's window, raising ``NotFound`` if none is declared."""

    def create_user(self, name: str) -> User:
        """Persist a new user."""

    def set_availability(self, window: AvailabilityWindow) -> AvailabilityWindow:
        """Create or replace the user's window for the window's weekday."""


class BookingSession(Protocol):
    """Operations available while a booking transaction is held."""

    def list_booked_slots(self, user_ids: Iterable[int], date: str) -> List[BookedSlot]:
        """Return every booking on ``date`` involving any of ``user_ids``."""

    def create_booked_slot(
        self,
        user_a: int,
        user_b: int,
        date: str,
        start: TimeOfDay,
        end: TimeOfDay,
        granularity: SlotGranularity,
    ) -> BookedSlot:
        """Insert a booking, raising ``SlotUnavailable`` on a duplicate."""


class BookingStore(Protocol):
    """Scoped access to booked slots."""

    def transaction(self) -> ContextManager[BookingSession]:
        """
        Open an exclusive booking transaction.

        Committed when the block exits cleanly, rolled back otherwise.
        Concurrent transactions touching the same bookings are serialized.
        """
