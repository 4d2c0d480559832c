"""
Tests for the SchedulingService orchestration layer on the in-memory store.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from slotbooker.adapters.memory_store import InMemoryCalendarStore
from slotbooker.domain.exceptions import (
    InvalidConfiguration,
    InvalidDate,
    NotFound,
    SlotUnavailable,
)
from slotbooker.domain.models import SlotGranularity, Weekday
from slotbooker.domain.time_of_day import TimeOfDay
from slotbooker.services.scheduler import SchedulingService

MONDAY = "2024-11-25"
NEXT_MONDAY = "2024-12-02"


class SpyCalendarStore(InMemoryCalendarStore):
    """In-memory store that records which users' availability was looked up."""

    def __init__(self):
        super().__init__()
        self.availability_calls = []

    def get_availability(self, user_id, weekday):
        self.availability_calls.append((user_id, weekday))
        return super().get_availability(user_id, weekday)


@pytest.fixture
def store():
    return SpyCalendarStore()


@pytest.fixture
def service(store):
    return SchedulingService(availability_provider=store, booking_store=store)


@pytest.fixture
def users(service):
    """Alice 09:00-12:00 and Bob 11:00-14:00 on Mondays."""
    alice = service.create_user("alice")
    bob = service.create_user("bob")
    service.set_availability(alice.id, "monday", "09:00", "12:00")
    service.set_availability(bob.id, Weekday.MONDAY, TimeOfDay(11), TimeOfDay(14))
    return alice.id, bob.id


class TestFindAvailableSlots:
    """Tests for find_available_slots."""

    def test_no_bookings(self, service, users):
        """Overlapping windows share 11:00 and 11:30."""
        alice, bob = users

        result = service.find_available_slots(alice, bob, MONDAY, "half-hourly", 30)

        assert result.date == MONDAY
        assert result.slots == ["11:00", "11:30"]

    def test_booking_with_third_user_blocks_slot(self, service, users):
        """A booking between Alice and a third user takes 11:00 away."""
        alice, bob = users
        carol = service.create_user("carol").id
        service.set_availability(carol, "monday", "08:00", "18:00")
        service.book_slot(alice, carol, MONDAY, SlotGranularity.HALF_HOURLY, 30, "11:00")

        result = service.find_available_slots(alice, bob, MONDAY, SlotGranularity.HALF_HOURLY, 30)

        assert result.slots == ["11:30"]

    def test_bookings_on_other_dates_are_ignored(self, service, users):
        """Bookings only affect their own date."""
        alice, bob = users
        service.book_slot(alice, bob, NEXT_MONDAY, "half-hourly", 30, "11:00")

        assert service.find_available_slots(alice, bob, MONDAY, "half-hourly", 30).slots == [
            "11:00", "11:30",
        ]

    def test_order_independent_of_user_order(self, service, users):
        """Swapping the users yields the same slots."""
        alice, bob = users

        forward = service.find_available_slots(alice, bob, MONDAY, "hourly", 15)
        backward = service.find_available_slots(bob, alice, MONDAY, "hourly", 15)

        assert forward.slots == backward.slots == ["11:00"]

    def test_missing_availability_short_circuits(self, service, store, users):
        """No availability on Tuesday for the first user stops before the second lookup."""
        alice, bob = users
        store.availability_calls.clear()

        with pytest.raises(NotFound):
            service.find_available_slots(alice, bob, "2024-11-26", "hourly", 60)

        assert store.availability_calls == [(alice, Weekday.TUESDAY)]

    def test_invalid_step(self, service, users):
        """A step outside 15-60 minutes is rejected."""
        alice, bob = users

        with pytest.raises(InvalidConfiguration):
            service.find_available_slots(alice, bob, MONDAY, "hourly", 10)

    def test_invalid_granularity(self, service, users):
        """Only half-hourly and hourly slots exist."""
        alice, bob = users

        with pytest.raises(InvalidConfiguration):
            service.find_available_slots(alice, bob, MONDAY, "daily", 30)

    def test_invalid_date(self, service, users):
        """An unparseable date is rejected."""
        alice, bob = users

        with pytest.raises(InvalidDate):
            service.find_available_slots(alice, bob, "2024/11/25", "hourly", 30)

    def test_same_user_twice(self, service, users):
        """Searching with the same user on both sides is rejected."""
        alice, _ = users

        with pytest.raises(InvalidConfiguration):
            service.find_available_slots(alice, alice, MONDAY, "hourly", 30)


class TestBookSlot:
    """Tests for book_slot."""

    def test_book_then_rebook_fails(self, service, users):
        """The second identical booking is rejected."""
        alice, bob = users

        booking = service.book_slot(alice, bob, MONDAY, "half-hourly", 30, "11:30")

        assert booking.start == TimeOfDay(11, 30)
        assert booking.end == TimeOfDay(11, 59)
        assert booking.granularity is SlotGranularity.HALF_HOURLY
        assert booking.pair == (alice, bob)

        with pytest.raises(SlotUnavailable):
            service.book_slot(alice, bob, MONDAY, "half-hourly", 30, "11:30")

    def test_reversed_pair_is_the_same_booking(self, service, users):
        """Booking (bob, alice) after (alice, bob) for the same slot fails."""
        alice, bob = users
        service.book_slot(alice, bob, MONDAY, "half-hourly", 30, "11:00")

        with pytest.raises(SlotUnavailable):
            service.book_slot(bob, alice, MONDAY, "half-hourly", 30, "11:00")

    def test_slot_outside_intersection(self, service, users):
        """A slot only one user is available for cannot be booked."""
        alice, bob = users

        with pytest.raises(SlotUnavailable):
            service.book_slot(alice, bob, MONDAY, "half-hourly", 30, "09:00")

    def test_hourly_booking_end(self, service, users):
        """An hourly booking ends on the 59th minute of its hour."""
        alice, bob = users

        booking = service.book_slot(alice, bob, MONDAY, "hourly", 60, "11:00")

        assert booking.start.key == "11:00"
        assert booking.end == TimeOfDay(11, 59)

    def test_malformed_slot(self, service, users):
        """A slot that is not HH:MM is a configuration error."""
        alice, bob = users

        with pytest.raises(InvalidConfiguration):
            service.book_slot(alice, bob, MONDAY, "hourly", 60, "eleven")

    def test_concurrent_identical_bookings(self, service, users):
        """Exactly one of several simultaneous identical bookings succeeds."""
        alice, bob = users
        attempts = 8
        barrier = threading.Barrier(attempts)

        def attempt():
            barrier.wait()
            try:
                service.book_slot(alice, bob, MONDAY, "half-hourly", 30, "11:30")
                return "booked"
            except SlotUnavailable:
                return "unavailable"

        with ThreadPoolExecutor(max_workers=attempts) as pool:
            outcomes = list(pool.map(lambda _: attempt(), range(attempts)))

        assert outcomes.count("booked") == 1
        assert outcomes.count("unavailable") == attempts - 1


class TestViewSchedule:
    """Tests for view_schedule."""

    def test_hourly_view(self, service, users):
        """The schedule is shown as hourly slots."""
        alice, _ = users

        schedule = service.view_schedule(alice, MONDAY)

        assert schedule.booked_slots == []
        assert schedule.available_slots == ["09:00", "10:00", "11:00"]

    def test_booked_slots_are_listed(self, service, users):
        """Booked slots move from available to booked, including off-grid ones."""
        alice, bob = users
        service.book_slot(alice, bob, MONDAY, "hourly", 60, "11:00")
        carol = service.create_user("carol").id
        service.set_availability(carol, "monday", "09:00", "10:00")
        service.book_slot(carol, alice, MONDAY, "half-hourly", 30, "09:30")

        schedule = service.view_schedule(alice, MONDAY)

        assert schedule.booked_slots == ["09:30", "11:00"]
        assert schedule.available_slots == ["09:00", "10:00"]

    def test_no_availability(self, service, users):
        """A user without availability on that weekday has no schedule."""
        alice, _ = users

        with pytest.raises(NotFound):
            service.view_schedule(alice, "2024-11-24")


class TestUsersAndAvailability:
    """Tests for user creation and availability updates."""

    @pytest.mark.parametrize("name", ["", "   ", "x" * 21])
    def test_invalid_names(self, service, name):
        """Empty and overly long names are rejected."""
        with pytest.raises(InvalidConfiguration):
            service.create_user(name)

    def test_replace_availability(self, service, users):
        """Setting a window again replaces the previous one."""
        alice, bob = users
        service.set_availability(alice, "monday", "13:00", "15:00")

        result = service.find_available_slots(alice, bob, MONDAY, "hourly", 60)

        assert result.slots == ["13:00"]

    def test_window_must_open_before_it_closes(self, service, users):
        """A window with start after end is rejected."""
        alice, _ = users

        with pytest.raises(InvalidConfiguration):
            service.set_availability(alice, "monday", "17:00", "09:00")

    def test_unknown_weekday(self, service, users):
        """Weekday names are validated."""
        alice, _ = users

        with pytest.raises(InvalidConfiguration):
            service.set_availability(alice, "someday", "09:00", "10:00")

    def test_unknown_user(self, service):
        """Availability for a user that does not exist is rejected."""
        with pytest.raises(NotFound):
            service.set_availability(404, "monday", "09:00", "10:00")
