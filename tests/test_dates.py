from datetime import date, datetime

import pytest

from equiplend.dates import (
    add_days,
    days_between,
    format_date_readable,
    format_duration,
    inclusive_days,
    is_past_date,
    is_today,
    max_booking_date,
    ranges_overlap,
    status_text,
    to_date,
    validate_date,
    validate_date_range,
)
from equiplend.errors import InvalidRangeError, PastDateError, ValidationError

TODAY = date(2024, 5, 1)


def today():
    return TODAY


def test_to_date_accepts_strings_datetimes_and_dates():
    assert to_date("2024-06-01") == date(2024, 6, 1)
    assert to_date("2024-06-01T10:30:00") == date(2024, 6, 1)
    assert to_date(datetime(2024, 6, 1, 23, 59)) == date(2024, 6, 1)
    assert to_date(date(2024, 6, 1)) == date(2024, 6, 1)
    assert to_date(None) is None
    assert to_date("") is None


@pytest.mark.parametrize("raw", ["next tuesday", "2024-13-45", "06/01/2024"])
def test_to_date_rejects_garbage(raw):
    with pytest.raises(ValidationError) as exc:
        to_date(raw)
    assert exc.value.code == "validation"


def test_days_between_is_absolute():
    assert days_between("2024-06-01", "2024-06-05") == 4
    assert days_between("2024-06-05", "2024-06-01") == 4
    assert days_between("2024-06-01", "2024-06-01") == 0
    assert inclusive_days("2024-06-01", "2024-06-05") == 5


@pytest.mark.parametrize("r1,r2,expected", [
    (("2024-06-01", "2024-06-05"), ("2024-06-03", "2024-06-07"), True),
    (("2024-06-01", "2024-06-05"), ("2024-06-05", "2024-06-09"), True),   # shared boundary day
    (("2024-06-01", "2024-06-05"), ("2024-06-06", "2024-06-09"), False),
    (("2024-06-01", "2024-06-30"), ("2024-06-10", "2024-06-11"), True),   # containment
    (("2024-07-01", "2024-07-05"), ("2024-06-01", "2024-06-05"), False),
])
def test_ranges_overlap_is_symmetric(r1, r2, expected):
    assert ranges_overlap(*r1, *r2) is expected
    assert ranges_overlap(*r2, *r1) is expected


def test_ranges_overlap_reflexive():
    assert ranges_overlap("2024-06-01", "2024-06-01", "2024-06-01", "2024-06-01")
    assert ranges_overlap("2024-06-01", "2024-06-09", "2024-06-01", "2024-06-09")


def test_validate_date_range_ok():
    assert validate_date_range("2024-05-01", "2024-05-01", today) == (TODAY, TODAY)


def test_validate_date_range_missing():
    with pytest.raises(InvalidRangeError) as exc:
        validate_date_range(None, "2024-06-01", today)
    assert not isinstance(exc.value, PastDateError)


def test_validate_date_range_past_start():
    with pytest.raises(PastDateError):
        validate_date_range("2024-04-30", "2024-06-01", today)


def test_validate_date_range_inverted():
    with pytest.raises(InvalidRangeError) as exc:
        validate_date_range("2024-06-05", "2024-06-01", today)
    assert exc.value.code == "invalid_range"


def test_validate_date_single_field():
    assert validate_date("2024-05-02", "Start date", today) == date(2024, 5, 2)
    with pytest.raises(PastDateError, match="Start date cannot be in the past"):
        validate_date("2024-04-01", "Start date", today)
    with pytest.raises(InvalidRangeError, match="is required"):
        validate_date("", "Start date", today)


def test_calendar_helpers():
    assert is_past_date("2024-04-30", today)
    assert not is_past_date("2024-05-01", today)
    assert is_today("2024-05-01", today)
    assert add_days("2024-05-30", 3) == date(2024, 6, 2)
    assert max_booking_date(90, today) == date(2024, 7, 30)


def test_formatting():
    assert format_duration(1) == "1 day"
    assert format_duration(5) == "5 days"
    assert format_date_readable("2024-06-01") == "Jun 1, 2024"
    assert status_text("active") == "Active (Checked Out)"
    assert status_text("unknown") == "unknown"
