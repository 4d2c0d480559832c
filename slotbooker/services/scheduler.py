"""
Application service for viewing schedules, finding and booking slots.

The service resolves dates, fetches availability windows through an
``AvailabilityProvider`` and bookings through a ``BookingStore``, and
delegates the slot arithmetic to the domain layer. This keeps the CLI
thin and lets tests run against the in-memory store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

from ..domain.calendar import canonical_date, resolve_weekday
from ..domain.exceptions import InvalidConfiguration
from ..domain.grid_builder import AvailabilityGridBuilder
from ..domain.intersection import open_intersection
from ..domain.models import (
    AvailabilityWindow,
    BookedSlot,
    SlotGranularity,
    User,
    Weekday,
    validate_step,
)
from ..domain.occupancy import mark_occupied
from ..domain.time_of_day import TimeOfDay
from .booking import BookingCommitter
from .ports import AvailabilityProvider, BookingStore

logger = logging.getLogger(__name__)

# Schedules are always viewed as hourly slots on the hour grid.
SCHEDULE_VIEW_GRANULARITY = SlotGranularity.HOURLY
SCHEDULE_VIEW_STEP_MINUTES = 60

MAX_USER_NAME_LENGTH = 20

GranularityLike = Union[SlotGranularity, str]


@dataclass(frozen=True)
class ScheduleView:
    """One user's day: booked slot keys and still-available slot keys."""
    date: str
    booked_slots: List[str]
    available_slots: List[str]


@dataclass(frozen=True)
class AvailableSlots:
    """Slot keys open for both users, in chronological order."""
    date: str
    slots: List[str]


class SchedulingService:
    """
    Orchestrates availability lookup, grid building and booking.

    Any ``NotFound`` for either user is raised before a grid is built;
    no partial results are returned.
    """

    def __init__(
        self,
        availability_provider: AvailabilityProvider,
        booking_store: BookingStore,
    ) -> None:
        self._availability = availability_provider
        self._bookings = booking_store

    def create_user(self, name: str) -> User:
        """Register a new user."""
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidConfiguration("User name is empty")
        if len(cleaned) > MAX_USER_NAME_LENGTH:
            raise InvalidConfiguration(
                f"User name must be at most {MAX_USER_NAME_LENGTH} characters"
            )
        user = self._availability.create_user(cleaned)
        logger.info("Created user %s (%s)", user.id, user.name)
        return user

    def set_availability(
        self,
        user_id: int,
        weekday: Union[Weekday, str],
        start: Union[TimeOfDay, str],
        end: Union[TimeOfDay, str],
    ) -> AvailabilityWindow:
        """Declare (or replace) a user's recurring window for one weekday."""
        window = AvailabilityWindow(
            user_id=user_id,
            weekday=weekday if isinstance(weekday, Weekday) else Weekday.from_name(weekday),
            start=start if isinstance(start, TimeOfDay) else TimeOfDay.parse(start),
            end=end if isinstance(end, TimeOfDay) else TimeOfDay.parse(end),
        )
        saved = self._availability.set_availability(window)
        logger.info(
            "Availability for user %s on %s set to %s-%s",
            user_id, saved.weekday.value, saved.start, saved.end,
        )
        return saved

    def view_schedule(self, user_id: int, date: str) -> ScheduleView:
        """
        Show a user's booked and available hourly slots on a date.

        Booked keys are taken from the bookings themselves, so a booking
        made on a finer grid is still listed even if it has no hourly key.
        """
        day = canonical_date(date)
        window = self._availability.get_availability(user_id, resolve_weekday(day))

        builder = AvailabilityGridBuilder(
            SCHEDULE_VIEW_GRANULARITY, SCHEDULE_VIEW_STEP_MINUTES
        )
        grid = builder.build_grid([window])

        with self._bookings.transaction() as session:
            booked = session.list_booked_slots({user_id}, day)

        grid = mark_occupied(grid, booked)
        user_slots = grid[user_id]

        booked_starts = sorted(
            {booking.start for booking in booked if booking.involves(user_id)}
        )
        available = sorted(
            (slot for slot in user_slots.values() if slot.available),
            key=lambda slot: slot.start,
        )

        return ScheduleView(
            date=day,
            booked_slots=[start.key for start in booked_starts],
            available_slots=[slot.key for slot in available],
        )

    def find_available_slots(
        self,
        user_id_1: int,
        user_id_2: int,
        date: str,
        granularity: GranularityLike,
        step_minutes: int,
    ) -> AvailableSlots:
        """Return the slots on ``date`` that are open for both users."""
        day, windows, builder = self._prepare(
            user_id_1, user_id_2, date, granularity, step_minutes
        )
        grid = builder.build_grid(windows)

        with self._bookings.transaction() as session:
            booked = session.list_booked_slots({user_id_1, user_id_2}, day)

        grid = mark_occupied(grid, booked)
        logger.debug(
            "Built %d and %d candidate slots for users %s and %s on %s",
            len(grid[user_id_1]), len(grid[user_id_2]), user_id_1, user_id_2, day,
        )

        return AvailableSlots(
            date=day,
            slots=open_intersection(grid, user_id_1, user_id_2),
        )

    def book_slot(
        self,
        user_id_1: int,
        user_id_2: int,
        date: str,
        granularity: GranularityLike,
        step_minutes: int,
        slot: str,
    ) -> BookedSlot:
        """
        Book ``slot`` (an ``HH:MM`` start key) for both users.

        Raises:
            SlotUnavailable: If the slot is not open for both users, or
                was booked by a concurrent request
        """
        day, windows, builder = self._prepare(
            user_id_1, user_id_2, date, granularity, step_minutes
        )
        slot_key = TimeOfDay.parse(slot).key

        committer = BookingCommitter(self._bookings, builder)
        return committer.commit(windows=windows, date=day, slot_key=slot_key)

    def _prepare(
        self,
        user_id_1: int,
        user_id_2: int,
        date: str,
        granularity: GranularityLike,
        step_minutes: int,
    ) -> Tuple[str, List[AvailabilityWindow], AvailabilityGridBuilder]:
        """Validate the request and fetch both users' windows."""
        if user_id_1 == user_id_2:
            raise InvalidConfiguration("A booking needs two different users")

        if not isinstance(granularity, SlotGranularity):
            granularity = SlotGranularity.from_name(granularity)
        validate_step(step_minutes)

        day = canonical_date(date)
        weekday = resolve_weekday(day)

        windows = [
            self._availability.get_availability(user_id, weekday)
            for user_id in (user_id_1, user_id_2)
        ]
        return day, windows, AvailabilityGridBuilder(granularity, step_minutes)
