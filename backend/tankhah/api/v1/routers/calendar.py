import datetime as dt

from fastapi import APIRouter, Query

from tankhah.calendar import jalali
from tankhah.calendar.numerals import to_persian_digits
from tankhah.schemas.calendar import JalaliDateOut, MonthGridOut

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _describe(day: dt.date) -> dict:
    j = jalali.to_jalali(day)
    short = jalali.format_short(day)
    return {
        "gregorian": day.isoformat(),
        "year": j.year,
        "month": j.month,
        "day": j.day,
        "short": short,
        "shortFa": to_persian_digits(short),
        "monthKey": jalali.format_month_key(day),
        "full": jalali.format_full(day),
        "monthName": jalali.month_name(j.month),
        "weekday": jalali.weekday_name(day),
        "gridColumn": jalali.grid_column(day),
    }


@router.get("/today", response_model=JalaliDateOut)
async def today():
    """Today's date in both calendars."""
    return _describe(dt.date.today())


@router.get("/jalali", response_model=JalaliDateOut)
async def gregorian_to_jalali(date: dt.date = Query(..., description="Gregorian date, YYYY-MM-DD")):
    """Convert a Gregorian date to its Jalali representation."""
    return _describe(date)


@router.get("/gregorian", response_model=JalaliDateOut)
async def jalali_to_gregorian(
    year: int = Query(..., ge=1, le=3000),
    month: int = Query(..., ge=1, le=12),
    day: int = Query(..., ge=1, le=31),
):
    """
    Convert a Jalali date to Gregorian.

    A day past the end of the month (e.g. Esfand 30 in a common year) rolls
    over into the following month.
    """
    return _describe(jalali.to_gregorian(year, month, day))


@router.get("/parse", response_model=JalaliDateOut)
async def parse_short_date(value: str = Query(..., description="Jalali date, YYYY/MM/DD")):
    """Parse a YYYY/MM/DD Jalali string; malformed input resolves to today."""
    return _describe(jalali.parse_short(value))


@router.get("/month-grid", response_model=MonthGridOut)
async def month_grid(
    year: int = Query(..., ge=1, le=3000),
    month: int = Query(..., ge=1, le=12),
):
    """
    Saturday-first month grid for the Jalali date-picker.

    Returns:
        MonthGridOut: weeks of 7 cells (null = blank), header labels and the
        neighbouring months for navigation.
    """
    prev_year, prev_month = jalali.shift_month(year, month, -1)
    next_year, next_month = jalali.shift_month(year, month, 1)
    return {
        "year": year,
        "month": month,
        "monthName": jalali.month_name(month),
        "daysInMonth": jalali.days_in_month(year, month),
        "isLeapYear": jalali.is_leap_year(year),
        "weekdays": list(jalali.GRID_WEEKDAY_LABELS),
        "weeks": jalali.build_month_grid(year, month),
        "previous": {"year": prev_year, "month": prev_month},
        "next": {"year": next_year, "month": next_month},
    }
