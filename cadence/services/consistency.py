"""
Consistency service — the caller side of the streak pipeline.

    lock ledger -> fetch log -> compute streaks -> detect achievement -> update ledger -> commit

recompute() runs that sequence as one unit inside a single DB transaction.
The StreakLedger row is the only place previous_best lives; it is read with
SELECT ... FOR UPDATE before the log is fetched, so two recomputes for the
same user run one after the other. Two writers racing to insert the same
ledger or activity row hit a unique key; the loser rolls back and runs the
whole unit once more, this time finding the row.

Celebration ledger
------------------
The first recompute for a user only seeds the ledger (best streak plus the
highest badge already earned) and reports nothing, so existing history never
replays old celebrations. Afterwards detection starts from
max(best_streak, highest_badge_days): a best streak that drops (log
corrected) and climbs back never celebrates the same badge twice, and any
badge above the highest one celebrated is still reported.

Activity changes arrive as ActivityChanged messages; handle_activity_changed()
writes the day, recomputes, and stores the resulting current streak on the
day's row as `streak_snapshot`. Nothing here subscribes to anything.

StreakTracker is the in-process variant for clients that fetch the log
themselves: sequence numbers, stale responses dropped, previous_best mutated
once per accepted response.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional, Sequence, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cadence.core.errors import TaskNotFoundError, CadenceException
from cadence.models.streak_ledger import StreakLedger
from cadence.models.task import RecurringTask
from cadence.services import activity
from cadence.services.achievements import (
    BADGE_CATALOG,
    AchievementEvent,
    Badge,
    detect_event,
    unlocked_badges,
)
from cadence.services.dates import CalendarWindow
from cadence.services.recurrence import anchor_date, evaluate
from cadence.services.streaks import (
    ActivityDay,
    MonthSummary,
    StreakState,
    compute_streaks,
    summarize_month,
    total_active_days,
)

log = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Result / message types
# ---------------------------------------------------------------------------

@dataclass
class RecomputeResult:
    user_id: str
    today: date
    state: StreakState
    previous_best: Optional[int]       # None on the seeding recompute
    achievement: Optional[AchievementEvent]
    total_active_days: int


@dataclass(frozen=True)
class ActivityChanged:
    """Inbound signal: the activity log for user_id changed on `day`."""
    user_id: str
    day: date
    is_active: bool = True
    reason: Optional[str] = None


@dataclass
class BadgeStatus:
    badge: Badge
    unlocked: bool


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

_T = TypeVar("_T")

# The second attempt finds the row the first one collided with.
_UNIT_ATTEMPTS = 2


def _lock_ledger(db: Session, user_id: str) -> Optional[StreakLedger]:
    return (
        db.query(StreakLedger)
        .filter(StreakLedger.user_id == user_id)
        .with_for_update()
        .one_or_none()
    )


def _apply_to_ledger(
    db: Session,
    user_id: str,
    ledger: Optional[StreakLedger],
    state: StreakState,
    catalog: Sequence[Badge],
) -> tuple[Optional[int], Optional[AchievementEvent]]:
    """Detect against the locked ledger and write the new best. Returns (previous_best, event)."""
    if ledger is None:
        earned = unlocked_badges(state.best_streak, catalog)
        db.add(StreakLedger(
            user_id=user_id,
            best_streak=state.best_streak,
            highest_badge_days=earned[-1].threshold_days if earned else 0,
        ))
        db.flush()
        log.info("streak_ledger_seeded", user_id=user_id, best_streak=state.best_streak)
        return None, None

    previous_best = ledger.best_streak
    celebrated = max(previous_best, ledger.highest_badge_days)
    event = detect_event(celebrated, state.best_streak, catalog)
    if event is not None:
        ledger.highest_badge_days = event.badge.threshold_days
        log.info(
            "achievement_unlocked",
            user_id=user_id,
            threshold_days=event.badge.threshold_days,
            label=event.badge.label,
            previous_best=previous_best,
            new_best=state.best_streak,
        )
    ledger.best_streak = state.best_streak
    return previous_best, event


def _run_unit(db: Session, user_id: str, unit: Callable[[], _T]) -> _T:
    """Run `unit` and commit; on a unique-key collision roll back and run it again."""
    attempt = 1
    while True:
        try:
            result = unit()
            db.commit()
            return result
        except IntegrityError:
            db.rollback()
            if attempt >= _UNIT_ATTEMPTS:
                raise
            log.warning("consistency_write_conflict_retrying", user_id=user_id, attempt=attempt)
            attempt += 1


def _recompute_uncommitted(
    db: Session,
    user_id: str,
    today: date,
    lookback_limit: Optional[int],
    catalog: Sequence[Badge],
) -> RecomputeResult:
    ledger = _lock_ledger(db, user_id)
    days = activity.fetch_log(db, user_id)
    state = compute_streaks(days, today, lookback_limit)
    previous_best, event = _apply_to_ledger(db, user_id, ledger, state, catalog)
    log.info(
        "streaks_recomputed",
        user_id=user_id,
        today=str(today),
        current_streak=state.current_streak,
        best_streak=state.best_streak,
    )
    return RecomputeResult(
        user_id=user_id,
        today=today,
        state=state,
        previous_best=previous_best,
        achievement=event,
        total_active_days=total_active_days(days),
    )


# ---------------------------------------------------------------------------
# Public — recompute
# ---------------------------------------------------------------------------

def recompute(
    db: Session,
    user_id: str,
    today: Optional[date] = None,
    lookback_limit: Optional[int] = None,
    catalog: Sequence[Badge] = BADGE_CATALOG,
) -> RecomputeResult:
    """Recompute streaks for one user and commit the ledger update."""
    today = today or _today()
    return _run_unit(
        db, user_id,
        lambda: _recompute_uncommitted(db, user_id, today, lookback_limit, catalog),
    )


def handle_activity_changed(
    db: Session,
    message: ActivityChanged,
    today: Optional[date] = None,
    catalog: Sequence[Badge] = BADGE_CATALOG,
) -> RecomputeResult:
    """Apply an activity change and recompute in the same transaction."""
    today = today or _today()

    def unit() -> RecomputeResult:
        row = activity.mark_day(db, message.user_id, message.day, message.is_active, message.reason)
        result = _recompute_uncommitted(db, message.user_id, today, None, catalog)
        row.streak_snapshot = result.state.current_streak
        return result

    return _run_unit(db, message.user_id, unit)


# ---------------------------------------------------------------------------
# Public — read-only views
# ---------------------------------------------------------------------------

def month_view(db: Session, user_id: str, window: CalendarWindow) -> MonthSummary:
    days = activity.fetch_log(db, user_id, since=window.start, until=window.end)
    return summarize_month(days, window)


def badge_shelf(
    db: Session,
    user_id: str,
    catalog: Sequence[Badge] = BADGE_CATALOG,
) -> list[BadgeStatus]:
    """Catalog with unlocked flags, from the ledger's best streak."""
    ledger = db.get(StreakLedger, user_id)
    best = ledger.best_streak if ledger is not None else 0
    return [BadgeStatus(badge=b, unlocked=best >= b.threshold_days) for b in catalog]


def task_occurrences(db: Session, task_id: int, window: CalendarWindow) -> list[date]:
    """
    Highlight dates for a persisted recurring task inside `window`.
    A corrupted rule or a task without dates degrades to no highlighting.
    """
    task: Optional[RecurringTask] = db.get(RecurringTask, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    if not task.is_recurring or not task.recurring_rule:
        return []
    anchor = anchor_date(task.start_date, task.due_date)
    if anchor is None:
        return []
    try:
        return evaluate(task.recurring_rule, anchor, window)
    except CadenceException as exc:
        log.warning(
            "recurrence_highlighting_disabled",
            task_id=task_id,
            rule=task.recurring_rule,
            code=exc.code,
        )
        return []


# ---------------------------------------------------------------------------
# In-process tracker
# ---------------------------------------------------------------------------

@dataclass
class TrackerUpdate:
    sequence: int
    state: StreakState
    achievement: Optional[AchievementEvent]


class StreakTracker:
    """
    Caller-side owner of previous_best for push-driven refreshes.

        seq = tracker.begin()          # before fetching the log
        ...fetch...
        update = tracker.accept(seq, days, today)   # None if superseded

    Only the most recent request is accepted, and each at most once.
    previous_best=None means "unknown": the first accepted response seeds it
    without reporting an achievement.
    """

    def __init__(
        self,
        previous_best: Optional[int] = None,
        catalog: Sequence[Badge] = BADGE_CATALOG,
        lookback_limit: Optional[int] = None,
    ):
        self.previous_best = previous_best
        self._catalog = catalog
        self._lookback_limit = lookback_limit
        self._issued = 0
        self._accepted = 0
        self._lock = threading.Lock()

    def begin(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def accept(
        self,
        sequence: int,
        days: Iterable[ActivityDay],
        today: date,
    ) -> Optional[TrackerUpdate]:
        with self._lock:
            if sequence != self._issued or sequence <= self._accepted:
                log.debug(
                    "stale_streak_response_discarded",
                    sequence=sequence,
                    latest=self._issued,
                )
                return None
            state = compute_streaks(days, today, self._lookback_limit)
            event = None
            if self.previous_best is not None:
                event = detect_event(self.previous_best, state.best_streak, self._catalog)
            self.previous_best = state.best_streak
            self._accepted = sequence
            return TrackerUpdate(sequence=sequence, state=state, achievement=event)
