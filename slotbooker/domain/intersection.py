"""
Two-party intersection of occupancy-marked grids.
"""

from typing import List

from .exceptions import SlotUnavailable
from .models import CandidateSlot, Grid


def open_intersection(grid: Grid, user_a: int, user_b: int) -> List[str]:
    """
    Slot keys available to both users, in chronological order.

    A key generated for only one of the users is never part of the
    result, and the order does not depend on argument order.
    """
    slots_a = grid.get(user_a, {})
    slots_b = grid.get(user_b, {})

    open_slots = [
        slot for key, slot in slots_a.items()
        if slot.available and key in slots_b and slots_b[key].available
    ]
    open_slots.sort(key=lambda slot: slot.start)

    return [slot.key for slot in open_slots]


def require_open_slot(grid: Grid, user_a: int, user_b: int, slot_key: str) -> CandidateSlot:
    """
    Return the requested slot if it is open for both users.

    Raises:
        SlotUnavailable: If the key is not in the open intersection
    """
    slot_a = grid.get(user_a, {}).get(slot_key)
    slot_b = grid.get(user_b, {}).get(slot_key)

    if slot_a is None or slot_b is None or not (slot_a.available and slot_b.available):
        raise SlotUnavailable(
            f"Slot {slot_key} is not available for users {user_a} and {user_b}"
        )
    return slot_a
