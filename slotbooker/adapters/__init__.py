"""
Adapters layer - Storage backends for users, availability and bookings.
"""

from .memory_store import InMemoryCalendarStore
from .sql_store import SqlBookingSession, SqlCalendarStore

__all__ = ["InMemoryCalendarStore", "SqlBookingSession", "SqlCalendarStore"]
