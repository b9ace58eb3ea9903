# equiplend/dates.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

from .errors import InvalidRangeError, PastDateError, ValidationError

DateLike = Union[date, datetime, str, None]

STATUS_TEXT = {
    "pending": "Pending Approval",
    "approved": "Approved",
    "rejected": "Rejected",
    "active": "Active (Checked Out)",
    "completed": "Completed",
    "cancelled": "Cancelled",
}


def to_date(value: DateLike) -> Optional[date]:
    """Coerce ISO strings, datetimes (incl. pandas Timestamps) and dates to a `date`."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError(f"Not a calendar date: {value!r}") from exc


def _today(today: Optional[Callable[[], date]] = None) -> date:
    return today() if today is not None else date.today()


# ---- Durations ------------------------------------------------------------------
def days_between(a: DateLike, b: DateLike) -> int:
    """Absolute number of calendar days between two dates (0 for the same day)."""
    return abs((to_date(b) - to_date(a)).days)


def inclusive_days(start: DateLike, end: DateLike) -> int:
    return days_between(start, end) + 1


def add_days(value: DateLike, days: int) -> date:
    return to_date(value) + timedelta(days=days)


def format_duration(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def format_date_readable(value: DateLike) -> str:
    d = to_date(value)
    if d is None:
        return ""
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def status_text(status: str) -> str:
    return STATUS_TEXT.get(status, status)


# ---- Calendar predicates --------------------------------------------------------
def is_past_date(value: DateLike, today: Optional[Callable[[], date]] = None) -> bool:
    return to_date(value) < _today(today)


def is_today(value: DateLike, today: Optional[Callable[[], date]] = None) -> bool:
    return to_date(value) == _today(today)


def is_future_date(value: DateLike, today: Optional[Callable[[], date]] = None) -> bool:
    return to_date(value) > _today(today)


def max_booking_date(days_ahead: int, today: Optional[Callable[[], date]] = None) -> date:
    return _today(today) + timedelta(days=days_ahead)


def ranges_overlap(s1: DateLike, e1: DateLike, s2: DateLike, e2: DateLike) -> bool:
    """Closed-interval overlap: ranges that share only a boundary day overlap."""
    return to_date(s1) <= to_date(e2) and to_date(s2) <= to_date(e1)


def is_valid_date_range(start: DateLike, end: DateLike) -> bool:
    if start in (None, "") or end in (None, ""):
        return False
    return to_date(start) <= to_date(end)


# ---- Validation -----------------------------------------------------------------
def validate_date(value: DateLike, field: str = "Date",
                  today: Optional[Callable[[], date]] = None) -> date:
    d = to_date(value)
    if d is None:
        raise InvalidRangeError(f"{field} is required")
    if d < _today(today):
        raise PastDateError(f"{field} cannot be in the past")
    return d


def validate_date_range(start: DateLike, end: DateLike,
                        today: Optional[Callable[[], date]] = None) -> tuple[date, date]:
    """
    Check a requested booking window and return it as a pair of dates.

    Raises InvalidRangeError when a date is missing or start > end, and
    PastDateError when start is before today.
    """
    s, e = to_date(start), to_date(end)
    if s is None or e is None:
        raise InvalidRangeError("Start date and end date are required")
    if s < _today(today):
        raise PastDateError("Start date cannot be in the past")
    if s > e:
        raise InvalidRangeError("End date must be on or after start date")
    return s, e
