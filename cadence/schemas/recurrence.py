"""
Recurrence schemas.

GET  /recurrence/rules                → list[RuleOut]
GET  /recurrence/evaluate             → RecurrenceResponse
GET  /recurrence/month                → RecurrenceResponse
GET  /recurrence/materialize          → MaterializeResponse
POST /tasks/recurring                 → RecurringTaskCreate → RecurringTaskOut
GET  /tasks/{task_id}/occurrences     → TaskOccurrencesResponse
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cadence.core.errors import ParseError
from cadence.services.dates import parse_local_date
from cadence.services.recurrence import RecurrenceRule


def _local_date(v):
    if v is None or isinstance(v, date):
        return v
    try:
        return parse_local_date(v)
    except ParseError as exc:
        raise ValueError(exc.message) from exc


class RuleOut(BaseModel):
    rule: RecurrenceRule
    label: str


class RecurrenceResponse(BaseModel):
    """Occurrences of a rule inside a window, anchor excluded."""
    rule: RecurrenceRule
    anchor: str = Field(description="Reference occurrence (YYYY-MM-DD); never listed in `dates`.")
    start: str
    end: str
    count: int
    dates: list[str] = Field(description="Matching dates, ascending.")


class MaterializeResponse(BaseModel):
    rule: RecurrenceRule
    anchor: str
    horizon_days: int
    dates: list[str] = Field(description="Concrete instance dates, ascending, starting at the anchor.")


# ---------------------------------------------------------------------------
# Recurring task
# ---------------------------------------------------------------------------

class RecurringTaskCreate(BaseModel):
    """Schedule fields of a task. The anchor is start_date, else due_date."""
    user_id: Annotated[str, Field(min_length=1, max_length=64)]
    title: Annotated[str, Field(min_length=1, max_length=256)]
    start_date: Optional[date] = Field(default=None, examples=["2024-01-01"])
    due_date: Optional[date] = Field(default=None, examples=["2024-01-01"])
    is_recurring: bool = False
    recurring_rule: Optional[RecurrenceRule] = Field(default=None, examples=["WEEKLY_MONDAY"])

    @field_validator("start_date", "due_date", mode="before")
    @classmethod
    def parse_local(cls, v):
        return _local_date(v)

    @model_validator(mode="after")
    def rule_required_when_recurring(self) -> "RecurringTaskCreate":
        if self.is_recurring and self.recurring_rule is None:
            raise ValueError("recurring_rule is required when is_recurring is true")
        if not self.is_recurring:
            self.recurring_rule = None
        return self


class RecurringTaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    start_date: Optional[str]
    due_date: Optional[str]
    is_recurring: bool
    recurring_rule: Optional[str]
    anchor: Optional[str] = Field(description="start_date if set, else due_date.")


class TaskOccurrencesResponse(BaseModel):
    task_id: int
    start: str
    end: str
    dates: list[str] = Field(
        description="Highlight dates. Empty when the task has no valid rule or anchor."
    )
