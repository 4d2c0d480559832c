"""
Calendar date parsing and weekday resolution.
"""

import pendulum
from pendulum import Date

from .exceptions import InvalidDate
from .models import Weekday

DATE_FORMAT = "YYYY-MM-DD"

# Indexed by ISO weekday - 1 (Monday first)
_WEEKDAYS = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)


def parse_date(value: str) -> Date:
    """
    Parse a ``YYYY-MM-DD`` calendar date.

    Raises:
        InvalidDate: If the value is not a valid date in that format
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidDate("Date is empty, expected format yyyy-mm-dd")
    try:
        return pendulum.from_format(value.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidDate(
            f"Invalid date '{value}', expected format yyyy-mm-dd"
        ) from exc


def canonical_date(value: str) -> str:
    """Normalize a date string to its ``YYYY-MM-DD`` form."""
    return parse_date(value).to_date_string()


def resolve_weekday(value: str) -> Weekday:
    """Resolve a ``YYYY-MM-DD`` date to the weekday it falls on."""
    return _WEEKDAYS[parse_date(value).isoweekday() - 1]
