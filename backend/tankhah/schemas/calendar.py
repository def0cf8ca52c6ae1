"""
Pydantic schemas for the calendar endpoints.
Shapes the Jalali conversion results and month grids consumed by the date-picker.
"""
from pydantic import BaseModel
from typing import List, Optional


class JalaliDateOut(BaseModel):
    """
    A single day seen from both calendars.
    """
    gregorian: str  # ISO date, YYYY-MM-DD
    year: int
    month: int
    day: int
    short: str  # YYYY/MM/DD
    shortFa: str  # short date with Persian digits
    monthKey: str  # YYYY/MM bucket key
    full: str  # D <month name> YYYY
    monthName: str
    weekday: str  # Persian weekday name
    gridColumn: int  # Saturday-first column (0-6)


class MonthRef(BaseModel):
    year: int
    month: int


class MonthGridOut(BaseModel):
    """
    Month layout for the date-picker: Saturday-first weeks of 7 cells, None = blank.
    """
    year: int
    month: int
    monthName: str
    daysInMonth: int
    isLeapYear: bool
    weekdays: List[str]
    weeks: List[List[Optional[int]]]
    previous: MonthRef
    next: MonthRef
