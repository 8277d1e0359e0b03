"""
Streak calculator — current and best consecutive-active-day runs.

Input is a sparse activity log: one ActivityDay per calendar date that has a
record. A date without a record is inactive; absence is never an error.
Records may arrive in any order; when a date appears twice the later record
wins.

Current streak
--------------
Scan backward from `today` for i = 0 .. lookback_limit:
  * active  -> count it
  * inactive and i > 0 -> stop
  * inactive and i == 0 -> keep going without counting

The i == 0 grace means an unmarked today does not zero the streak: a run that
ended yesterday is still reported as current until today is over.

Best streak
-----------
One forward pass over the records in date order, counting consecutive active
records and resetting on an inactive one. The result is
max(longest closed run, current streak) so the live run can beat history.

`streak_snapshot` on a record is informational and never read here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from cadence.core.config import settings
from cadence.services.dates import CalendarWindow, enumerate_days


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ActivityDay:
    date: date
    is_active: bool
    streak_snapshot: Optional[int] = None


@dataclass(frozen=True)
class StreakState:
    current_streak: int
    best_streak: int


@dataclass
class MonthSummary:
    window: CalendarWindow
    active_days: int
    days: list[ActivityDay] = field(default_factory=list)   # one per date, ascending


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _index(log: Iterable[ActivityDay]) -> dict[date, bool]:
    """date -> is_active, later records overriding earlier ones."""
    return {day.date: bool(day.is_active) for day in log}


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def compute_current_streak(
    log: Iterable[ActivityDay],
    today: date,
    lookback_limit: Optional[int] = None,
) -> int:
    limit = lookback_limit if lookback_limit is not None else settings.STREAK_LOOKBACK_DAYS
    active_on = _index(log)

    streak = 0
    for i in range(limit + 1):
        if active_on.get(today - timedelta(days=i), False):
            streak += 1
        elif i > 0:
            break
    return streak


def compute_best_streak(log: Iterable[ActivityDay], current_streak: int = 0) -> int:
    best = 0
    running = 0
    for _, is_active in sorted(_index(log).items()):
        if is_active:
            running += 1
            best = max(best, running)
        else:
            running = 0
    return max(best, current_streak)


def compute_streaks(
    log: Iterable[ActivityDay],
    today: date,
    lookback_limit: Optional[int] = None,
) -> StreakState:
    """Current and best streak from one log slice."""
    days = list(log)
    current = compute_current_streak(days, today, lookback_limit)
    return StreakState(
        current_streak=current,
        best_streak=compute_best_streak(days, current),
    )


def total_active_days(log: Iterable[ActivityDay]) -> int:
    return sum(1 for is_active in _index(log).values() if is_active)


def summarize_month(log: Iterable[ActivityDay], window: CalendarWindow) -> MonthSummary:
    """Per-date activity cells for a calendar window, missing dates inactive."""
    active_on = _index(log)
    cells = [ActivityDay(date=d, is_active=active_on.get(d, False)) for d in enumerate_days(window)]
    return MonthSummary(
        window=window,
        active_days=sum(1 for c in cells if c.is_active),
        days=cells,
    )
