"""
Recurring task router.

POST /tasks/recurring               — store a task's schedule fields
GET  /tasks/{task_id}/occurrences   — calendar highlight dates for one month
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from cadence.db.base import get_db
from cadence.models.task import RecurringTask
from cadence.schemas.recurrence import (
    RecurringTaskCreate,
    RecurringTaskOut,
    TaskOccurrencesResponse,
)
from cadence.services.consistency import task_occurrences
from cadence.services.dates import format_local_date, month_window
from cadence.services.recurrence import anchor_date

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _fmt(d) -> str | None:
    return format_local_date(d) if d else None


def _task_to_response(t: RecurringTask) -> RecurringTaskOut:
    return RecurringTaskOut(
        id=t.id,
        user_id=t.user_id,
        title=t.title,
        start_date=_fmt(t.start_date),
        due_date=_fmt(t.due_date),
        is_recurring=t.is_recurring,
        recurring_rule=t.recurring_rule,
        anchor=_fmt(anchor_date(t.start_date, t.due_date)),
    )


@router.post(
    "/recurring",
    response_model=RecurringTaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a task's recurrence fields",
)
def create_recurring_task(payload: RecurringTaskCreate, db: Session = Depends(get_db)):
    task = RecurringTask(
        user_id=payload.user_id,
        title=payload.title,
        start_date=payload.start_date,
        due_date=payload.due_date,
        is_recurring=payload.is_recurring,
        recurring_rule=payload.recurring_rule.value if payload.recurring_rule else None,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return _task_to_response(task)


@router.get(
    "/{task_id}/occurrences",
    response_model=TaskOccurrencesResponse,
    summary="Recurring highlight dates for a displayed month",
    responses={
        200: {"description": "Dates to highlight; empty if the stored rule is unusable."},
        404: {"description": "Task not found."},
    },
)
def get_task_occurrences(
    task_id: int,
    year: int = Query(ge=1, le=9999, examples=[2024]),
    month: int = Query(ge=1, le=12, examples=[1]),
    db: Session = Depends(get_db),
):
    """
    Evaluate the task's rule against its anchor (start date, else due date)
    over the month. A corrupted stored rule yields no highlights instead of
    an error, so one bad record cannot break the calendar view.
    """
    window = month_window(year, month)
    dates = task_occurrences(db, task_id, window)
    return TaskOccurrencesResponse(
        task_id=task_id,
        start=format_local_date(window.start),
        end=format_local_date(window.end),
        dates=[format_local_date(d) for d in dates],
    )
