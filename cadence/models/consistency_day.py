"""
ConsistencyDay — one row per (user_id, date): was the user active that day.

Written by whatever part of the app decides a day counts as active, through
handle_activity_changed(). `streak_snapshot` is the current streak computed
right after the day was last marked; it is informational and may go stale.
Streaks are always recomputed from `is_active`.
"""
import datetime as dt
from sqlalchemy import Integer, String, Boolean, DateTime, Date, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base


class ConsistencyDay(Base):
    __tablename__ = "consistency_days"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_consistency_day_user_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str | None] = mapped_column(String(32), nullable=True)
    streak_snapshot: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
