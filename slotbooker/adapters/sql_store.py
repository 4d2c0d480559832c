"""
SQLAlchemy-backed calendar store.

Booking transactions on SQLite are opened with ``BEGIN IMMEDIATE`` so
the read of existing bookings and the insert of a new one hold the
database write lock together. The unique constraint on (user pair, date,
start time) catches anything that slips past.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Iterable, Iterator, List

from sqlalchemy import create_engine, event, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..domain.exceptions import NotFound, PersistenceError, SlotUnavailable
from ..domain.models import (
    AvailabilityWindow,
    BookedSlot,
    SlotGranularity,
    User,
    Weekday,
    normalize_pair,
)
from ..domain.time_of_day import TimeOfDay
from .sql_models import Base, CalendarUser, CalendarUserAvailability, CalendarUserBookedSlot

logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def _enable_sqlite_locking(engine) -> None:
    """Turn on foreign keys and make every transaction take the write lock up front."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _):
        # Hand transaction control to SQLAlchemy so BEGIN IMMEDIATE below is used
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")


class SqlCalendarStore:
    """
    Users, availability windows and booked slots in a SQL database.

    Implements both ``AvailabilityProvider`` and ``BookingStore``.
    """

    def __init__(self, database_url: str, busy_timeout_seconds: float = 30.0):
        """
        Args:
            database_url: SQLAlchemy URL, e.g. ``sqlite:///slotbooker.db``
            busy_timeout_seconds: How long a SQLite writer waits for the lock
        """
        self.database_url = database_url
        is_sqlite = database_url.startswith("sqlite")
        in_memory = database_url in IN_MEMORY_SQLITE_URLS

        engine_kwargs = {}
        if is_sqlite:
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": busy_timeout_seconds,
            }
        if in_memory:
            # One shared connection, so transactions are serialized in-process
            engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(database_url, **engine_kwargs)
        if is_sqlite:
            _enable_sqlite_locking(self.engine)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self._lock = threading.Lock() if in_memory else nullcontext()

    def create_schema(self) -> None:
        """Create the calendar tables if they do not exist."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not create database schema: {exc}") from exc

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Database operation failed: %s", exc)
            raise PersistenceError(f"Database operation failed: {exc}") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @contextmanager
    def transaction(self) -> Iterator["SqlBookingSession"]:
        with self._lock, self._session() as db:
            yield SqlBookingSession(db)

    # ── Users and availability ────────────────────────────────────────────

    def create_user(self, name: str) -> User:
        with self._lock, self._session() as db:
            row = CalendarUser(name=name)
            db.add(row)
            db.flush()
            return User(id=row.id, name=row.name)

    def set_availability(self, window: AvailabilityWindow) -> AvailabilityWindow:
        with self._lock, self._session() as db:
            if db.get(CalendarUser, window.user_id) is None:
                raise NotFound(f"User {window.user_id} does not exist")

            row = db.get(CalendarUserAvailability, (window.user_id, window.weekday.value))
            if row is None:
                row = CalendarUserAvailability(user_id=window.user_id, day=window.weekday.value)
                db.add(row)

            row.start_time_hour = window.start.hour
            row.start_time_minutes = window.start.minute
            row.end_time_hour = window.end.hour
            row.end_time_minutes = window.end.minute
        return window

    def get_availability(self, user_id: int, weekday: Weekday) -> AvailabilityWindow:
        with self._lock, self._session() as db:
            row = db.get(CalendarUserAvailability, (user_id, weekday.value))
            if row is None:
                raise NotFound(f"No availability set for user {user_id} on {weekday.value}")
            return AvailabilityWindow(
                user_id=row.user_id,
                weekday=weekday,
                start=TimeOfDay(row.start_time_hour, row.start_time_minutes),
                end=TimeOfDay(row.end_time_hour, row.end_time_minutes),
            )


class SqlBookingSession:
    """Booking reads and writes bound to one open transaction."""

    def __init__(self, db: Session):
        self._db = db

    def list_booked_slots(self, user_ids: Iterable[int], date: str) -> List[BookedSlot]:
        ids = list(user_ids)
        rows = (
            self._db.query(CalendarUserBookedSlot)
            .filter(
                CalendarUserBookedSlot.date == date,
                or_(
                    CalendarUserBookedSlot.user_id_1.in_(ids),
                    CalendarUserBookedSlot.user_id_2.in_(ids),
                ),
            )
            .order_by(
                CalendarUserBookedSlot.start_time_hour,
                CalendarUserBookedSlot.start_time_minutes,
                CalendarUserBookedSlot.id,
            )
            .all()
        )
        return [_to_booked_slot(row) for row in rows]

    def create_booked_slot(
        self,
        user_a: int,
        user_b: int,
        date: str,
        start: TimeOfDay,
        end: TimeOfDay,
        granularity: SlotGranularity,
    ) -> BookedSlot:
        low, high = normalize_pair(user_a, user_b)
        row = CalendarUserBookedSlot(
            user_id_1=low,
            user_id_2=high,
            date=date,
            start_time_hour=start.hour,
            start_time_minutes=start.minute,
            end_time_hour=end.hour,
            end_time_minutes=end.minute,
            slot_type=granularity.value,
        )
        self._db.add(row)
        try:
            self._db.flush()
        except IntegrityError as exc:
            raise SlotUnavailable(f"Slot {start.key} on {date} is already booked") from exc
        return _to_booked_slot(row)


def _to_booked_slot(row: CalendarUserBookedSlot) -> BookedSlot:
    return BookedSlot(
        user_id_1=row.user_id_1,
        user_id_2=row.user_id_2,
        date=row.date,
        start=TimeOfDay(row.start_time_hour, row.start_time_minutes),
        end=TimeOfDay(row.end_time_hour, row.end_time_minutes),
        granularity=SlotGranularity(row.slot_type),
    )
