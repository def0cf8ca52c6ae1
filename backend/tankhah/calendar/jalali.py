"""
Jalali (Persian solar Hijri) calendar engine.

Pure, synchronous helpers used by the date-picker, the dashboards and the
exporters: Gregorian <-> Jalali conversion, Persian formatting, month grids
and "is it today / this week / this month" predicates.

All day arithmetic is delegated to jdatetime. Every function accepts a
``datetime.date``; a ``datetime.datetime`` is reduced to its date part.
"""
from __future__ import annotations

import datetime as dt
from typing import List, NamedTuple, Optional, Tuple

import jdatetime

from tankhah.calendar.numerals import to_ascii_digits

MONTH_NAMES = (
    "فروردین", "اردیبهشت", "خرداد", "تیر", "مرداد", "شهریور",
    "مهر", "آبان", "آذر", "دی", "بهمن", "اسفند",
)

# Indexed by the Sunday-based weekday number (Sunday = 0), as used for chart labels
WEEKDAY_NAMES = (
    "یکشنبه", "دوشنبه", "سه‌شنبه", "چهارشنبه", "پنج‌شنبه", "جمعه", "شنبه",
)

# Column headers of the month grid, Saturday first
GRID_WEEKDAY_LABELS = ("ش", "ی", "د", "س", "چ", "پ", "ج")

MonthGrid = List[List[Optional[int]]]


class JalaliDate(NamedTuple):
    """Jalali (year, month, day) triple; always derived from a Gregorian date."""
    year: int
    month: int
    day: int


def _as_date(value: dt.date) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def _sunday_weekday(value: dt.date) -> int:
    # date.weekday() is Monday = 0; shift to Sunday = 0
    return (value.weekday() + 1) % 7


# ------------------------------------------------------------------------------
# Conversion
# ------------------------------------------------------------------------------
def to_jalali(value: dt.date) -> JalaliDate:
    j = jdatetime.date.fromgregorian(date=_as_date(value))
    return JalaliDate(j.year, j.month, j.day)


def to_gregorian(year: int, month: int, day: int) -> dt.date:
    """
    Convert a Jalali triple to a Gregorian date.

    Out-of-range input does not raise: a month outside 1..12 is carried into
    the year and the day is applied as an offset from the first of the month,
    so Esfand 30 of a common year lands on Farvardin 1 of the next year.
    """
    carry, month_index = divmod(month - 1, 12)
    first = jdatetime.date(year + carry, month_index + 1, 1).togregorian()
    return first + dt.timedelta(days=day - 1)


def is_leap_year(year: int) -> bool:
    return jdatetime.date(year, 1, 1).isleap()


def days_in_month(year: int, month: int) -> int:
    """Length of a Jalali month: 31 for months 1-6, 30 for 7-11, 29/30 for Esfand."""
    if month <= 6:
        return 31
    if month <= 11:
        return 30
    return 30 if is_leap_year(year) else 29


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move ``delta`` months forward (or back) from a Jalali (year, month)."""
    carry, month_index = divmod(month - 1 + delta, 12)
    return year + carry, month_index + 1


# ------------------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------------------
def format_short(value: dt.date) -> str:
    """``YYYY/MM/DD`` with ASCII digits."""
    j = to_jalali(value)
    return f"{j.year}/{j.month:02d}/{j.day:02d}"


def format_full(value: dt.date) -> str:
    """``D <month name> YYYY``, e.g. ``1 فروردین 1403``."""
    j = to_jalali(value)
    return f"{j.day} {MONTH_NAMES[j.month - 1]} {j.year}"


def format_month_key(value: dt.date) -> str:
    """``YYYY/MM`` key used to bucket records by Jalali month."""
    j = to_jalali(value)
    return f"{j.year}/{j.month:02d}"


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return ""


def weekday_name(value: dt.date) -> str:
    """Persian weekday name, looked up by the Sunday-based weekday number."""
    return WEEKDAY_NAMES[_sunday_weekday(_as_date(value))]


def grid_column(value: dt.date) -> int:
    """Column of ``value`` in a Saturday-first week (Saturday = 0, Friday = 6)."""
    return (_sunday_weekday(_as_date(value)) + 1) % 7


def parse_short(text: str, today: Optional[dt.date] = None) -> dt.date:
    """
    Parse ``YYYY/MM/DD`` back into a Gregorian date.

    Persian and Arabic-Indic digits are accepted. Anything that is not three
    numeric segments, or that names a date outside the representable range,
    yields ``today`` (the current date by default) instead of an error.
    """
    fallback = _as_date(today) if today is not None else dt.date.today()
    parts = to_ascii_digits(text or "").split("/")
    if len(parts) != 3:
        return fallback
    try:
        year, month, day = (int(p) for p in parts)
        return to_gregorian(year, month, day)
    except (ValueError, OverflowError):
        return fallback


# ------------------------------------------------------------------------------
# Predicates against "now"
# ------------------------------------------------------------------------------
def is_today(value: dt.date, today: Optional[dt.date] = None) -> bool:
    today = _as_date(today) if today is not None else dt.date.today()
    return _as_date(value) == today


def is_this_week(value: dt.date, today: Optional[dt.date] = None) -> bool:
    """True when ``value`` falls in the Sunday-started week containing ``today``."""
    today = _as_date(today) if today is not None else dt.date.today()
    week_start = today - dt.timedelta(days=_sunday_weekday(today))
    week_end = week_start + dt.timedelta(days=7)
    return week_start <= _as_date(value) < week_end


def is_this_month(value: dt.date, today: Optional[dt.date] = None) -> bool:
    """Compares Jalali (year, month), not Gregorian."""
    today = _as_date(today) if today is not None else dt.date.today()
    current = to_jalali(today)
    j = to_jalali(value)
    return (j.year, j.month) == (current.year, current.month)


# ------------------------------------------------------------------------------
# Date-picker grid
# ------------------------------------------------------------------------------
def build_month_grid(year: int, month: int) -> MonthGrid:
    """
    Lay out a Jalali month as Saturday-first weeks of 7 cells.

    Cells before day 1 and after the last day are None; every other cell is a
    day of the month, each exactly once.
    """
    total_days = days_in_month(year, month)
    leading = grid_column(to_gregorian(year, month, 1))

    weeks: MonthGrid = []
    week: List[Optional[int]] = [None] * leading
    for day in range(1, total_days + 1):
        week.append(day)
        if len(week) == 7:
            weeks.append(week)
            week = []

    if week:
        week.extend([None] * (7 - len(week)))
        weeks.append(week)

    return weeks
