"""
Overlay existing bookings onto a grid.

Matching is by exact start-time key: a booking whose start does not
coincide with a grid key leaves the grid untouched, even if its time
range overlaps a candidate slot. Grids built with a different step than
the one a booking was made with can therefore miss occupied time.
"""

from typing import Iterable

from .models import BookedSlot, Grid


def mark_occupied(grid: Grid, booked_slots: Iterable[BookedSlot]) -> Grid:
    """
    Return a copy of ``grid`` with booked slots flipped to unavailable.

    Each booking marks its start key for whichever of its two users is in
    the grid; bookings for users outside the grid are ignored. Applying
    the same bookings twice yields the same grid.
    """
    marked: Grid = {user_id: dict(slots) for user_id, slots in grid.items()}

    for booking in booked_slots:
        for user_id in {booking.user_id_1, booking.user_id_2}:
            user_slots = marked.get(user_id)
            if user_slots is None:
                continue
            slot = user_slots.get(booking.key)
            if slot is not None and slot.available:
                user_slots[booking.key] = slot.mark_unavailable()

    return marked
