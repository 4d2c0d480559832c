"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking import BookingCommitter
from .ports import AvailabilityProvider, BookingSession, BookingStore
from .scheduler import AvailableSlots, ScheduleView, SchedulingService

__all__ = [
    "AvailabilityProvider",
    "AvailableSlots",
    "BookingCommitter",
    "BookingSession",
    "BookingStore",
    "ScheduleView",
    "SchedulingService",
]
