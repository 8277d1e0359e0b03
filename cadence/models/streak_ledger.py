"""
StreakLedger — caller-owned memory between streak recomputes.

best_streak        last accepted best streak (the next recompute's previous_best)
highest_badge_days highest badge threshold ever celebrated, 0 if none

One row per user. Written only by services.consistency, under a row lock.
"""
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base


class StreakLedger(Base):
    __tablename__ = "streak_ledgers"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    best_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    highest_badge_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
