from .consistency_day import ConsistencyDay
from .task import RecurringTask
from .streak_ledger import StreakLedger

__all__ = [
    "ConsistencyDay",
    "RecurringTask",
    "StreakLedger",
]
