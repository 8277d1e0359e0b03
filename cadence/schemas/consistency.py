"""
Consistency (streak) and achievement schemas.

POST /consistency/days      → MarkDayRequest → StreakResponse
GET  /consistency/streaks   → StreakResponse
GET  /consistency/month     → MonthResponse
GET  /achievements/badges   → BadgeShelfResponse
"""
import datetime as dt
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_validator

from cadence.core.errors import ParseError
from cadence.services.dates import parse_local_date


class MarkDayRequest(BaseModel):
    """An activity-changed signal for one user and day."""
    user_id: Annotated[str, Field(min_length=1, max_length=64)]
    date: dt.date = Field(description="User-local calendar day, YYYY-MM-DD.", examples=["2024-01-15"])
    is_active: bool = True
    reason: Optional[str] = Field(
        default=None,
        max_length=32,
        description='Opaque label, e.g. "task", "habit", "finance".',
    )

    @field_validator("date", mode="before")
    @classmethod
    def parse_local(cls, v):
        if isinstance(v, dt.date):
            return v
        try:
            return parse_local_date(v)
        except ParseError as exc:
            raise ValueError(exc.message) from exc


class BadgeOut(BaseModel):
    threshold_days: int
    label: str
    icon_kind: str


class StreakResponse(BaseModel):
    user_id: str
    today: str
    current_streak: int = Field(ge=0)
    best_streak: int = Field(ge=0)
    total_active_days: int = Field(ge=0)
    previous_best: Optional[int] = Field(
        default=None,
        description="Best streak before this recompute; null on the first recompute.",
    )
    achievement: Optional[BadgeOut] = Field(
        default=None,
        description="Badge unlocked by this recompute, at most one.",
    )


class MonthDayOut(BaseModel):
    date: str
    is_active: bool


class MonthResponse(BaseModel):
    user_id: str
    year: int
    month: int
    active_days: int
    days: list[MonthDayOut] = Field(description="One cell per calendar day, ascending.")


class BadgeShelfItem(BadgeOut):
    unlocked: bool


class BadgeShelfResponse(BaseModel):
    user_id: str
    badges: list[BadgeShelfItem]
