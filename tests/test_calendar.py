"""
Tests for date parsing and weekday resolution.
"""

import pytest

from slotbooker.domain.calendar import canonical_date, resolve_weekday
from slotbooker.domain.exceptions import InvalidDate
from slotbooker.domain.models import Weekday


@pytest.mark.parametrize(
    "date, weekday",
    [
        ("2024-11-25", Weekday.MONDAY),
        ("2024-11-26", Weekday.TUESDAY),
        ("2024-11-27", Weekday.WEDNESDAY),
        ("2024-11-28", Weekday.THURSDAY),
        ("2024-11-29", Weekday.FRIDAY),
        ("2024-11-23", Weekday.SATURDAY),
        ("2024-11-24", Weekday.SUNDAY),
        ("2024-02-29", Weekday.THURSDAY),
    ],
)
def test_resolve_weekday(date, weekday):
    """Dates resolve to the weekday they fall on."""
    assert resolve_weekday(date) == weekday


@pytest.mark.parametrize("value", ["", "   ", "25.11.2024", "2024-13-01", "2023-02-29", "tomorrow"])
def test_invalid_dates_are_rejected(value):
    """Unparseable dates raise InvalidDate."""
    with pytest.raises(InvalidDate):
        resolve_weekday(value)


def test_canonical_date():
    """Surrounding whitespace is stripped from the canonical form."""
    assert canonical_date(" 2024-11-25 ") == "2024-11-25"


def test_weekday_from_name():
    """Weekday names are case-insensitive."""
    assert Weekday.from_name("Monday") == Weekday.MONDAY
    assert Weekday.from_name(" SUNDAY ") == Weekday.SUNDAY
