"""
Consumer surface of the recurrence & consistency engine.

    evaluate_recurrence(rule, anchor, window) -> list[date]
    compute_streaks(log, today)               -> StreakState
    detect_achievement(previous_best, new_best, catalog) -> Badge | None

All three are pure and synchronous.
"""
from .achievements import BADGE_CATALOG, Badge, IconKind
from .achievements import detect as detect_achievement
from .dates import CalendarWindow, format_local_date, parse_local_date
from .recurrence import RecurrenceRule
from .recurrence import evaluate as evaluate_recurrence
from .streaks import ActivityDay, StreakState, compute_streaks

__all__ = [
    "ActivityDay",
    "BADGE_CATALOG",
    "Badge",
    "CalendarWindow",
    "IconKind",
    "RecurrenceRule",
    "StreakState",
    "compute_streaks",
    "detect_achievement",
    "evaluate_recurrence",
    "format_local_date",
    "parse_local_date",
]
