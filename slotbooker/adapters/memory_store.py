"""
In-memory calendar store for tests and throwaway sessions.
"""

from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Tuple

from ..domain.exceptions import NotFound, SlotUnavailable
from ..domain.models import (
    AvailabilityWindow,
    BookedSlot,
    SlotGranularity,
    User,
    Weekday,
    normalize_pair,
)
from ..domain.time_of_day import TimeOfDay

# (user pair, date, start key)
BookingKey = Tuple[Tuple[int, int], str, str]


class InMemoryCalendarStore:
    """
    Keeps users, availability and bookings in dictionaries.

    Booking transactions hold a single lock, so concurrent bookings are
    serialized just like with the SQL store. Writes made inside a
    transaction only become visible when the block exits cleanly.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.users: Dict[int, User] = {}
        self.availability: Dict[Tuple[int, Weekday], AvailabilityWindow] = {}
        self.bookings: Dict[BookingKey, BookedSlot] = {}

    def create_user(self, name: str) -> User:
        with self._lock:
            user = User(id=next(self._ids), name=name)
            self.users[user.id] = user
        return user

    def set_availability(self, window: AvailabilityWindow) -> AvailabilityWindow:
        with self._lock:
            if window.user_id not in self.users:
                raise NotFound(f"User {window.user_id} does not exist")
            self.availability[(window.user_id, window.weekday)] = window
        return window

    def get_availability(self, user_id: int, weekday: Weekday) -> AvailabilityWindow:
        window = self.availability.get((user_id, weekday))
        if window is None:
            raise NotFound(f"No availability set for user {user_id} on {weekday.value}")
        return window

    @contextmanager
    def transaction(self) -> Iterator["_InMemorySession"]:
        with self._lock:
            session = _InMemorySession(self.bookings)
            yield session
            self.bookings.update(session.pending)


class _InMemorySession:
    def __init__(self, committed: Dict[BookingKey, BookedSlot]):
        self._committed = committed
        self.pending: Dict[BookingKey, BookedSlot] = {}

    def list_booked_slots(self, user_ids: Iterable[int], date: str) -> List[BookedSlot]:
        wanted = set(user_ids)
        bookings = itertools.chain(self._committed.values(), self.pending.values())
        return [
            booking for booking in bookings
            if booking.date == date
            and (booking.user_id_1 in wanted or booking.user_id_2 in wanted)
        ]

    def create_booked_slot(
        self,
        user_a: int,
        user_b: int,
        date: str,
        start: TimeOfDay,
        end: TimeOfDay,
        granularity: SlotGranularity,
    ) -> BookedSlot:
        pair = normalize_pair(user_a, user_b)
        key = (pair, date, start.key)
        if key in self._committed or key in self.pending:
            raise SlotUnavailable(f"Slot {start.key} on {date} is already booked")

        booking = BookedSlot(
            user_id_1=pair[0],
            user_id_2=pair[1],
            date=date,
            start=start,
            end=end,
            granularity=granularity,
        )
        self.pending[key] = booking
        return booking
