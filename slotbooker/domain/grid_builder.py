"""
Turns availability windows into discrete candidate slots.

Pure domain logic: no storage, no I/O.
"""

from typing import Iterable

from .exceptions import InvalidConfiguration
from .models import (
    AvailabilityWindow,
    CandidateSlot,
    Grid,
    SlotGranularity,
    UserSlots,
    validate_step,
)


class AvailabilityGridBuilder:
    """
    Builds a user's candidate slots for one day.

    Algorithm:
    1. Start a cursor at the window start
    2. Stop as soon as a full slot (cursor + duration) no longer fits
    3. Emit a slot keyed by the cursor's ``HH:MM``
    4. Advance the cursor by ``step`` minutes

    Step and duration are independent: a 30 minute step with hourly
    slots yields overlapping candidates 09:00-09:59, 09:30-10:29, ...
    """

    def __init__(self, granularity: SlotGranularity, step_minutes: int):
        self.granularity = granularity
        self.step_minutes = validate_step(step_minutes)

    @property
    def duration_minutes(self) -> int:
        return self.granularity.duration_minutes

    def build_user_slots(self, window: AvailabilityWindow) -> UserSlots:
        """
        Generate the ordered candidate slots within a single window.

        Partial slots at the tail of the window are dropped. A window
        shorter than the slot duration yields no slots.
        """
        if window.start >= window.end:
            raise InvalidConfiguration(
                f"Availability start {window.start} must be before end {window.end}"
            )

        slots: UserSlots = {}
        cursor = window.start

        while cursor < window.end:
            # Fit is checked in minutes so a slot running to midnight is
            # rejected instead of overflowing the day.
            if cursor.minutes_until(window.end) < self.duration_minutes:
                break

            slot_end = cursor.add(self.duration_minutes - 1)
            slots[cursor.key] = CandidateSlot(start=cursor, end=slot_end)

            if cursor.minutes_until(window.end) <= self.step_minutes:
                break
            cursor = cursor.add(self.step_minutes)

        return slots

    def build_grid(self, windows: Iterable[AvailabilityWindow]) -> Grid:
        """Build a grid with one entry per window's user."""
        grid: Grid = {}
        for window in windows:
            grid[window.user_id] = self.build_user_slots(window)
        return grid
