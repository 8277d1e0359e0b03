from datetime import datetime, date
from sqlalchemy import Integer, String, Boolean, DateTime, Date, func
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base


class RecurringTask(Base):
    """Schedule fields of a task; the rest of the task record lives elsewhere."""

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Raw token as persisted; may be corrupted, so not an Enum column.
    recurring_rule: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
