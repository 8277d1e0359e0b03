"""
Local calendar-date helpers.

Every value here is a plain `datetime.date`: a user-local calendar day with
no time component and no timezone. Strings are decomposed into year/month/day
and handed straight to `date(...)`; nothing is routed through an epoch or a
UTC instant, so a user west of UTC never sees a date shift by one.

Public API
----------
parse_local_date(s)        -> date        (ParseError on bad input)
format_local_date(d)       -> "YYYY-MM-DD"
days_between(a, b)         -> int         (b - a, whole calendar days)
day_of_week(d)             -> 0..6        (0 = Sunday)
add_days(d, n)             -> date
CalendarWindow(start, end)                (inclusive, InvalidWindow if end < start)
enumerate_days(window)     -> Iterator[date]
month_window(year, month)  -> CalendarWindow
month_window_for(d)        -> CalendarWindow
"""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from cadence.core.errors import InvalidWindow, ParseError

_ISO_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)


# ---------------------------------------------------------------------------
# Parse / format
# ---------------------------------------------------------------------------

def parse_local_date(s: str) -> date:
    """Parse a strict `YYYY-MM-DD` string into a local calendar date."""
    if not isinstance(s, str):
        raise ParseError(s, reason="expected a string")
    m = _ISO_DATE.fullmatch(s)
    if m is None:
        raise ParseError(s)
    year, month, day = (int(part) for part in m.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ParseError(s, reason=str(exc)) from exc


def format_local_date(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def days_between(a: date, b: date) -> int:
    """Whole calendar days from `a` to `b` (negative when b is earlier)."""
    return b.toordinal() - a.toordinal()


def day_of_week(d: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    # date.weekday() is Monday=0..Sunday=6
    return (d.weekday() + 1) % 7


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalendarWindow:
    """Inclusive range of calendar dates [start, end]."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidWindow(self.start, self.end)

    def __contains__(self, d: object) -> bool:
        return isinstance(d, date) and self.start <= d <= self.end

    def __len__(self) -> int:
        return days_between(self.start, self.end) + 1


def enumerate_days(window: CalendarWindow) -> Iterator[date]:
    """Every date in the window, ascending. Each call returns a fresh iterator."""
    for offset in range(len(window)):
        yield window.start + timedelta(days=offset)


def month_window(year: int, month: int) -> CalendarWindow:
    """The window covering one displayed calendar month."""
    try:
        last = calendar.monthrange(year, month)[1]
        return CalendarWindow(date(year, month, 1), date(year, month, last))
    except ValueError as exc:
        raise ParseError(f"{year}-{month}", reason=str(exc)) from exc


def month_window_for(d: date) -> CalendarWindow:
    return month_window(d.year, d.month)
