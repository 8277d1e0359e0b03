"""
Recurrence router.

GET /recurrence/rules         — closed list of rule tokens
GET /recurrence/evaluate      — occurrences inside an explicit [start, end] window
GET /recurrence/month         — occurrences inside one calendar month
GET /recurrence/materialize   — concrete instance dates from the anchor onwards
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from cadence.core.config import settings
from cadence.schemas.recurrence import MaterializeResponse, RecurrenceResponse, RuleOut
from cadence.services.dates import CalendarWindow, format_local_date, month_window, parse_local_date
from cadence.services.recurrence import RULE_LABELS, RecurrenceRule, evaluate, materialize

router = APIRouter(prefix="/recurrence", tags=["recurrence"])


# ---------------------------------------------------------------------------
# Serialization helper
# ---------------------------------------------------------------------------

def _to_response(rule: RecurrenceRule, anchor, window: CalendarWindow, dates) -> RecurrenceResponse:
    return RecurrenceResponse(
        rule=rule,
        anchor=format_local_date(anchor),
        start=format_local_date(window.start),
        end=format_local_date(window.end),
        count=len(dates),
        dates=[format_local_date(d) for d in dates],
    )


# ---------------------------------------------------------------------------
# GET /recurrence/rules
# ---------------------------------------------------------------------------

@router.get("/rules", response_model=list[RuleOut], summary="Supported recurrence rules")
def list_rules():
    return [RuleOut(rule=rule, label=RULE_LABELS[rule]) for rule in RecurrenceRule]


# ---------------------------------------------------------------------------
# GET /recurrence/evaluate
# ---------------------------------------------------------------------------

@router.get(
    "/evaluate",
    response_model=RecurrenceResponse,
    summary="Occurrences of a rule inside a window",
    responses={
        200: {"description": "Matching dates, ascending, anchor excluded."},
        422: {"description": "PARSE_ERROR, UNKNOWN_RULE_KIND or INVALID_WINDOW."},
    },
)
def evaluate_window(
    rule: str = Query(description="Rule token, e.g. WEEKLY_MONDAY.", examples=["BIWEEKLY"]),
    anchor: str = Query(description="Anchor date, YYYY-MM-DD.", examples=["2024-01-01"]),
    start: str = Query(description="First day of the window (inclusive).", examples=["2024-02-01"]),
    end: str = Query(description="Last day of the window (inclusive).", examples=["2024-02-29"]),
):
    """
    Evaluate `rule` relative to `anchor` for every day in `[start, end]`.

    The anchor itself is never returned. Unknown rule tokens are rejected
    rather than treated as "no matches".
    """
    window = CalendarWindow(parse_local_date(start), parse_local_date(end))
    anchor_day = parse_local_date(anchor)
    dates = evaluate(rule, anchor_day, window, max_days=settings.MAX_WINDOW_DAYS)
    return _to_response(RecurrenceRule(rule), anchor_day, window, dates)


# ---------------------------------------------------------------------------
# GET /recurrence/month
# ---------------------------------------------------------------------------

@router.get(
    "/month",
    response_model=RecurrenceResponse,
    summary="Occurrences of a rule inside one calendar month",
)
def evaluate_month(
    rule: str = Query(examples=["MONTHLY"]),
    anchor: str = Query(examples=["2024-01-31"]),
    year: int = Query(ge=1, le=9999, examples=[2024]),
    month: int = Query(ge=1, le=12, examples=[2]),
):
    """Same as `/evaluate` with the window set to the displayed month."""
    window = month_window(year, month)
    anchor_day = parse_local_date(anchor)
    dates = evaluate(rule, anchor_day, window)
    return _to_response(RecurrenceRule(rule), anchor_day, window, dates)


# ---------------------------------------------------------------------------
# GET /recurrence/materialize
# ---------------------------------------------------------------------------

@router.get(
    "/materialize",
    response_model=MaterializeResponse,
    summary="Concrete instance dates for a recurring definition",
)
def materialize_instances(
    rule: str = Query(examples=["WEEKDAYS"]),
    anchor: str = Query(examples=["2024-01-01"]),
    horizon_days: Optional[int] = Query(
        default=None, ge=1, le=settings.MAX_WINDOW_DAYS,
        description="Days to cover starting at the anchor. Defaults to MATERIALIZE_HORIZON_DAYS.",
    ),
):
    """
    Dates a materializer would create task instances for: the anchor when
    the rule matches it, then every occurrence in the horizon.
    """
    anchor_day = parse_local_date(anchor)
    horizon = horizon_days if horizon_days is not None else settings.MATERIALIZE_HORIZON_DAYS
    dates = materialize(rule, anchor_day, horizon)
    return MaterializeResponse(
        rule=RecurrenceRule(rule),
        anchor=format_local_date(anchor_day),
        horizon_days=horizon,
        dates=[format_local_date(d) for d in dates],
    )
