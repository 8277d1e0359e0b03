"""
Activity log store: read and write the consistency_days table.

fetch_log(db, user_id)                       -> list[ActivityDay], oldest first
mark_day(db, user_id, day, is_active, reason) -> ConsistencyDay (upsert by user+date)

A failed read raises ActivityLogUnavailable so the caller can show
"streak unavailable" instead of a silent zero.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cadence.core.errors import ActivityLogUnavailable
from cadence.models.consistency_day import ConsistencyDay
from cadence.services.streaks import ActivityDay

log = structlog.get_logger(__name__)


def _to_activity_day(row: ConsistencyDay) -> ActivityDay:
    return ActivityDay(
        date=row.date,
        is_active=bool(row.is_active),
        streak_snapshot=row.streak_snapshot,
    )


def fetch_log(
    db: Session,
    user_id: str,
    since: Optional[date] = None,
    until: Optional[date] = None,
) -> list[ActivityDay]:
    """Time-ordered slice of one user's activity log."""
    try:
        q = db.query(ConsistencyDay).filter(ConsistencyDay.user_id == user_id)
        if since is not None:
            q = q.filter(ConsistencyDay.date >= since)
        if until is not None:
            q = q.filter(ConsistencyDay.date <= until)
        rows = q.order_by(ConsistencyDay.date.asc()).all()
    except SQLAlchemyError as exc:
        log.error("activity_log_fetch_failed", user_id=user_id, error=str(exc))
        db.rollback()
        raise ActivityLogUnavailable(user_id) from exc
    return [_to_activity_day(r) for r in rows]


def mark_day(
    db: Session,
    user_id: str,
    day: date,
    is_active: bool = True,
    reason: Optional[str] = None,
) -> ConsistencyDay:
    """Insert or update the (user_id, day) record. Does not commit."""
    row = (
        db.query(ConsistencyDay)
        .filter(ConsistencyDay.user_id == user_id, ConsistencyDay.date == day)
        .first()
    )
    if row is None:
        row = ConsistencyDay(user_id=user_id, date=day)
        db.add(row)
    row.is_active = is_active
    row.reason = reason if is_active else None
    db.flush()
    log.debug("activity_day_marked", user_id=user_id, day=str(day), is_active=is_active)
    return row
