"""
Consistency router — activity days and streaks.

POST /consistency/days      — activity-changed signal; marks a day and recomputes
GET  /consistency/streaks   — recompute and return current/best streak
GET  /consistency/month     — one month of activity cells
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cadence.db.base import get_db
from cadence.schemas.consistency import (
    BadgeOut,
    MarkDayRequest,
    MonthDayOut,
    MonthResponse,
    StreakResponse,
)
from cadence.services.achievements import Badge
from cadence.services.consistency import (
    ActivityChanged,
    RecomputeResult,
    handle_activity_changed,
    month_view,
    recompute,
)
from cadence.services.dates import format_local_date, month_window, parse_local_date

router = APIRouter(prefix="/consistency", tags=["consistency"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def badge_to_response(b: Badge) -> BadgeOut:
    return BadgeOut(threshold_days=b.threshold_days, label=b.label, icon_kind=b.icon_kind.value)


def _result_to_response(r: RecomputeResult) -> StreakResponse:
    return StreakResponse(
        user_id=r.user_id,
        today=format_local_date(r.today),
        current_streak=r.state.current_streak,
        best_streak=r.state.best_streak,
        total_active_days=r.total_active_days,
        previous_best=r.previous_best,
        achievement=badge_to_response(r.achievement.badge) if r.achievement else None,
    )


# ---------------------------------------------------------------------------
# POST /consistency/days
# ---------------------------------------------------------------------------

@router.post(
    "/days",
    response_model=StreakResponse,
    summary="Mark a day active/inactive and recompute streaks",
    responses={503: {"description": "Activity log unavailable."}},
)
def mark_day(
    payload: MarkDayRequest,
    today: Optional[str] = Query(
        default=None,
        description="User-local today (YYYY-MM-DD). Defaults to today (UTC).",
    ),
    db: Session = Depends(get_db),
):
    """
    Upsert the `(user_id, date)` activity record, then run the full
    recompute (streaks, achievement, ledger) as one unit.
    """
    message = ActivityChanged(
        user_id=payload.user_id,
        day=payload.date,
        is_active=payload.is_active,
        reason=payload.reason,
    )
    today_day = parse_local_date(today) if today else None
    return _result_to_response(handle_activity_changed(db, message, today=today_day))


# ---------------------------------------------------------------------------
# GET /consistency/streaks
# ---------------------------------------------------------------------------

@router.get(
    "/streaks",
    response_model=StreakResponse,
    summary="Current and best streak",
    responses={
        200: {"description": "Freshly recomputed streaks and any newly unlocked badge."},
        503: {"description": "Activity log unavailable; streak unknown."},
    },
)
def get_streaks(
    user_id: str = Query(min_length=1, max_length=64),
    today: Optional[str] = Query(
        default=None,
        description="User-local today (YYYY-MM-DD). Defaults to today (UTC).",
        examples=["2024-01-15"],
    ),
    db: Session = Depends(get_db),
):
    """
    Current streak counts consecutive active days ending today; an inactive
    today is skipped rather than ending the run. Best streak is the longest
    run ever, including the live one.
    """
    result = recompute(db, user_id, today=parse_local_date(today) if today else None)
    return _result_to_response(result)


# ---------------------------------------------------------------------------
# GET /consistency/month
# ---------------------------------------------------------------------------

@router.get("/month", response_model=MonthResponse, summary="Activity cells for one month")
def get_month(
    user_id: str = Query(min_length=1, max_length=64),
    year: int = Query(ge=1, le=9999, examples=[2024]),
    month: int = Query(ge=1, le=12, examples=[1]),
    db: Session = Depends(get_db),
):
    summary = month_view(db, user_id, month_window(year, month))
    return MonthResponse(
        user_id=user_id,
        year=year,
        month=month,
        active_days=summary.active_days,
        days=[
            MonthDayOut(date=format_local_date(d.date), is_active=d.is_active)
            for d in summary.days
        ],
    )
