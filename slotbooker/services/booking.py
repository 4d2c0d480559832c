"""
Atomic validate-then-commit step for a single booking.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..domain.exceptions import SlotUnavailable
from ..domain.grid_builder import AvailabilityGridBuilder
from ..domain.intersection import require_open_slot
from ..domain.models import AvailabilityWindow, BookedSlot
from ..domain.occupancy import mark_occupied
from .ports import BookingStore

logger = logging.getLogger(__name__)


class BookingCommitter:
    """
    Books a slot for two users inside one store transaction.

    Bookings are re-read and the slot re-validated after the transaction
    is opened, so two requests that both saw the slot as open cannot both
    commit it. The store's uniqueness constraint on (user pair, date,
    start key) backs this up.
    """

    def __init__(self, booking_store: BookingStore, grid_builder: AvailabilityGridBuilder):
        self._booking_store = booking_store
        self._grid_builder = grid_builder

    def commit(
        self,
        *,
        windows: Sequence[AvailabilityWindow],
        date: str,
        slot_key: str,
    ) -> BookedSlot:
        """
        Validate ``slot_key`` against fresh bookings and persist it.

        Args:
            windows: The two users' availability windows for the date's weekday
            date: Canonical ``YYYY-MM-DD`` date
            slot_key: Requested slot start, ``HH:MM``

        Raises:
            SlotUnavailable: If the slot is not open for both users
            PersistenceError: If the store fails
        """
        user_a, user_b = (window.user_id for window in windows)
        granularity = self._grid_builder.granularity

        with self._booking_store.transaction() as session:
            grid = self._grid_builder.build_grid(windows)
            booked = session.list_booked_slots({user_a, user_b}, date)
            grid = mark_occupied(grid, booked)

            try:
                slot = require_open_slot(grid, user_a, user_b, slot_key)
            except SlotUnavailable:
                logger.warning(
                    "Slot %s on %s is no longer open for users %s and %s",
                    slot_key, date, user_a, user_b,
                )
                raise

            booking = session.create_booked_slot(
                user_a, user_b, date, slot.start, slot.end, granularity
            )

        logger.info(
            "Booked %s-%s on %s for users %s and %s (%s)",
            booking.start, booking.end, date, user_a, user_b, granularity.value,
        )
        return booking
