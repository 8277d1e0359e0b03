"""
Recurrence rule evaluator.

Decides which calendar dates a recurring commitment falls on inside a
bounded display window, relative to an anchor date (the first, primary
occurrence of the commitment).

Rules
-----
  DAILY           every day on/after the anchor
  WEEKDAYS        Monday..Friday
  WEEKENDS        Saturday, Sunday
  WEEKLY_<DAY>    one fixed weekday
  BIWEEKLY        the anchor's weekday, every other week
  MONTHLY         the anchor's day-of-month

Contract
--------
evaluate() returns dates strictly after the anchor, inside the window,
ascending, without duplicates. The anchor is never returned: it is already
shown as the non-recurring occurrence.

MONTHLY on a day-of-month that a shorter month lacks (anchor on the 31st,
window in February) matches nothing in that month. No clamping.

Cost is O(len(window)); windows are meant to be one displayed month.
"""
from __future__ import annotations

import enum
from datetime import date
from typing import Callable, Optional

from cadence.core.config import settings
from cadence.core.errors import InvalidWindow, UnknownRuleKind
from cadence.services.dates import (
    FRIDAY,
    MONDAY,
    SATURDAY,
    SUNDAY,
    THURSDAY,
    TUESDAY,
    WEDNESDAY,
    CalendarWindow,
    add_days,
    day_of_week,
    days_between,
    enumerate_days,
)


# ---------------------------------------------------------------------------
# Rule enumeration
# ---------------------------------------------------------------------------

class RecurrenceRule(str, enum.Enum):
    DAILY = "DAILY"
    WEEKDAYS = "WEEKDAYS"
    WEEKENDS = "WEEKENDS"
    WEEKLY_MONDAY = "WEEKLY_MONDAY"
    WEEKLY_TUESDAY = "WEEKLY_TUESDAY"
    WEEKLY_WEDNESDAY = "WEEKLY_WEDNESDAY"
    WEEKLY_THURSDAY = "WEEKLY_THURSDAY"
    WEEKLY_FRIDAY = "WEEKLY_FRIDAY"
    WEEKLY_SATURDAY = "WEEKLY_SATURDAY"
    WEEKLY_SUNDAY = "WEEKLY_SUNDAY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"


RULE_LABELS: dict[RecurrenceRule, str] = {
    RecurrenceRule.DAILY: "Every day",
    RecurrenceRule.WEEKDAYS: "Weekdays (Mon-Fri)",
    RecurrenceRule.WEEKENDS: "Weekends (Sat-Sun)",
    RecurrenceRule.WEEKLY_MONDAY: "Every Monday",
    RecurrenceRule.WEEKLY_TUESDAY: "Every Tuesday",
    RecurrenceRule.WEEKLY_WEDNESDAY: "Every Wednesday",
    RecurrenceRule.WEEKLY_THURSDAY: "Every Thursday",
    RecurrenceRule.WEEKLY_FRIDAY: "Every Friday",
    RecurrenceRule.WEEKLY_SATURDAY: "Every Saturday",
    RecurrenceRule.WEEKLY_SUNDAY: "Every Sunday",
    RecurrenceRule.BIWEEKLY: "Every 2 weeks",
    RecurrenceRule.MONTHLY: "Every month",
}

WEEKLY_DAY: dict[RecurrenceRule, int] = {
    RecurrenceRule.WEEKLY_SUNDAY: SUNDAY,
    RecurrenceRule.WEEKLY_MONDAY: MONDAY,
    RecurrenceRule.WEEKLY_TUESDAY: TUESDAY,
    RecurrenceRule.WEEKLY_WEDNESDAY: WEDNESDAY,
    RecurrenceRule.WEEKLY_THURSDAY: THURSDAY,
    RecurrenceRule.WEEKLY_FRIDAY: FRIDAY,
    RecurrenceRule.WEEKLY_SATURDAY: SATURDAY,
}

_WORKDAYS = frozenset({MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY})
_WEEKEND = frozenset({SATURDAY, SUNDAY})


def parse_rule(token: str | RecurrenceRule) -> RecurrenceRule:
    """Map a persisted rule token to the enum. Unknown tokens are an error."""
    if isinstance(token, RecurrenceRule):
        return token
    try:
        return RecurrenceRule(token)
    except ValueError:
        raise UnknownRuleKind(token) from None


# ---------------------------------------------------------------------------
# Per-rule membership predicates
# ---------------------------------------------------------------------------
# Each predicate is only consulted for d >= anchor.

Predicate = Callable[[date, date], bool]


def _daily(d: date, anchor: date) -> bool:
    return True


def _weekdays(d: date, anchor: date) -> bool:
    return day_of_week(d) in _WORKDAYS


def _weekends(d: date, anchor: date) -> bool:
    return day_of_week(d) in _WEEKEND


def _weekly_on(dow: int) -> Predicate:
    def _match(d: date, anchor: date) -> bool:
        return day_of_week(d) == dow
    return _match


def _biweekly(d: date, anchor: date) -> bool:
    if day_of_week(d) != day_of_week(anchor):
        return False
    return (days_between(anchor, d) // 7) % 2 == 0


def _monthly(d: date, anchor: date) -> bool:
    return d.day == anchor.day


_PREDICATES: dict[RecurrenceRule, Predicate] = {
    RecurrenceRule.DAILY: _daily,
    RecurrenceRule.WEEKDAYS: _weekdays,
    RecurrenceRule.WEEKENDS: _weekends,
    **{rule: _weekly_on(dow) for rule, dow in WEEKLY_DAY.items()},
    RecurrenceRule.BIWEEKLY: _biweekly,
    RecurrenceRule.MONTHLY: _monthly,
}

_unmapped = set(RecurrenceRule) - set(_PREDICATES)
if _unmapped:
    raise RuntimeError(f"recurrence rules without a predicate: {sorted(_unmapped)}")


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def matches(rule: RecurrenceRule, anchor: date, d: date) -> bool:
    """True when `d` is a recurring occurrence (the anchor itself is not)."""
    if d <= anchor:
        return False
    return _PREDICATES[rule](d, anchor)


def evaluate(
    rule: str | RecurrenceRule,
    anchor: date,
    window: CalendarWindow,
    max_days: Optional[int] = None,
) -> list[date]:
    """
    Ordered occurrences of `rule` inside `window`, excluding the anchor.

    Any bounded window is accepted. `max_days` lets a service boundary cap
    the window length; the HTTP routers pass `MAX_WINDOW_DAYS`.
    """
    rule = parse_rule(rule)
    if max_days is not None and len(window) > max_days:
        raise InvalidWindow(
            window.start, window.end,
            reason=f"window spans {len(window)} days, maximum is {max_days}",
        )
    return [d for d in enumerate_days(window) if matches(rule, anchor, d)]


def anchor_date(start_date: Optional[date], due_date: Optional[date]) -> Optional[date]:
    """The reference occurrence of a task: start date when set, else due date."""
    return start_date if start_date is not None else due_date


def materialize(
    rule: str | RecurrenceRule,
    anchor: date,
    horizon_days: Optional[int] = None,
) -> list[date]:
    """
    Concrete instance dates for the `horizon_days` days beginning at the
    anchor. Unlike evaluate(), the anchor is included when it satisfies the
    rule itself (WEEKDAYS anchored on a Saturday starts on Monday).
    """
    rule = parse_rule(rule)
    horizon = horizon_days if horizon_days is not None else settings.MATERIALIZE_HORIZON_DAYS
    if horizon < 1:
        raise InvalidWindow(anchor, anchor, reason="horizon must be at least one day")
    if horizon > settings.MAX_WINDOW_DAYS:
        raise InvalidWindow(
            anchor, anchor,
            reason=f"horizon spans {horizon} days, maximum is {settings.MAX_WINDOW_DAYS}",
        )
    try:
        end = add_days(anchor, horizon - 1)
    except OverflowError:
        raise InvalidWindow(
            anchor, date.max, reason="horizon runs past the last calendar date"
        ) from None
    predicate = _PREDICATES[rule]
    return [d for d in enumerate_days(CalendarWindow(anchor, end)) if predicate(d, anchor)]
