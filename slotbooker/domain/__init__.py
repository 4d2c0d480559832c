"""
Domain layer - Pure business logic without external dependencies.
"""

from .grid_builder import AvailabilityGridBuilder
from .intersection import open_intersection, require_open_slot
from .models import (
    AvailabilityWindow,
    BookedSlot,
    CandidateSlot,
    Grid,
    SlotGranularity,
    User,
    Weekday,
)
from .occupancy import mark_occupied
from .time_of_day import TimeOfDay

__all__ = [
    "AvailabilityGridBuilder",
    "AvailabilityWindow",
    "BookedSlot",
    "CandidateSlot",
    "Grid",
    "SlotGranularity",
    "TimeOfDay",
    "User",
    "Weekday",
    "mark_occupied",
    "open_intersection",
    "require_open_slot",
]
