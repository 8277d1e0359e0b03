"""
Tests for the streak calculator.

Helpers build logs relative to a fixed TODAY so results never depend on the
wall clock.
"""
from __future__ import annotations

from datetime import date, timedelta

from cadence.services.dates import month_window
from cadence.services.streaks import (
    ActivityDay,
    StreakState,
    compute_best_streak,
    compute_current_streak,
    compute_streaks,
    summarize_month,
    total_active_days,
)

TODAY = date(2024, 1, 15)


def _ago(n: int) -> date:
    return TODAY - timedelta(days=n)


def _log_back(*flags: bool) -> list[ActivityDay]:
    """flags[0] is today, flags[1] yesterday, ..."""
    return [ActivityDay(date=_ago(i), is_active=f) for i, f in enumerate(flags)]


def _log_forward(start: date, *flags: bool) -> list[ActivityDay]:
    return [ActivityDay(date=start + timedelta(days=i), is_active=f) for i, f in enumerate(flags)]


class TestCurrentStreak:
    def test_simple_run(self):
        assert compute_current_streak(_log_back(True, True, False), TODAY) == 2

    def test_inactive_today_does_not_stop_scan(self):
        log = _log_back(False, True, True, False)
        assert compute_current_streak(log, TODAY) == 2

    def test_missing_today_record_treated_like_inactive_today(self):
        log = [ActivityDay(_ago(1), True), ActivityDay(_ago(2), True)]
        assert compute_current_streak(log, TODAY) == 2

    def test_gap_yesterday_ends_streak(self):
        assert compute_current_streak(_log_back(True, False, True, True), TODAY) == 1

    def test_inactive_today_and_yesterday_is_zero(self):
        assert compute_current_streak(_log_back(False, False, True, True), TODAY) == 0

    def test_empty_log(self):
        assert compute_current_streak([], TODAY) == 0

    def test_future_records_ignored(self):
        log = _log_back(True) + [ActivityDay(TODAY + timedelta(days=1), True)]
        assert compute_current_streak(log, TODAY) == 1

    def test_lookback_limit_caps_scan(self):
        log = _log_back(*([True] * 10))
        assert compute_current_streak(log, TODAY, lookback_limit=4) == 5
        assert compute_current_streak(log, TODAY, lookback_limit=365) == 10

    def test_order_of_records_irrelevant(self):
        log = _log_back(True, True, True, False)
        assert compute_current_streak(list(reversed(log)), TODAY) == 3

    def test_later_duplicate_wins(self):
        log = _log_back(True, True) + [ActivityDay(_ago(1), False)]
        assert compute_current_streak(log, TODAY) == 1


class TestBestStreak:
    def test_longest_closed_run(self):
        log = _log_forward(date(2024, 1, 1), True, True, False, True, True, True)
        assert compute_best_streak(log) == 3

    def test_unsorted_input_sorted_first(self):
        log = _log_forward(date(2024, 1, 1), True, True, False, True, True, True)
        assert compute_best_streak(list(reversed(log))) == 3

    def test_live_run_can_exceed_history(self):
        log = _log_forward(date(2024, 1, 1), True, True)
        assert compute_best_streak(log, current_streak=5) == 5

    def test_all_inactive(self):
        assert compute_best_streak(_log_forward(date(2024, 1, 1), False, False)) == 0

    def test_consecutive_records_not_calendar_adjacency(self):
        # Records on Jan 1 and Jan 3 with no Jan 2 record still chain.
        log = [ActivityDay(date(2024, 1, 1), True), ActivityDay(date(2024, 1, 3), True)]
        assert compute_best_streak(log) == 2


class TestComputeStreaks:
    def test_combined_state(self):
        log = (
            _log_forward(_ago(10), True, True, True, True, False)
            + _log_back(True, True)
        )
        assert compute_streaks(log, TODAY) == StreakState(current_streak=2, best_streak=4)

    def test_best_includes_current(self):
        log = _log_back(True, True, True)
        state = compute_streaks(log, TODAY)
        assert state.best_streak >= state.current_streak == 3

    def test_pure_and_repeatable(self):
        log = _log_back(False, True, True, False, True)
        assert compute_streaks(log, TODAY) == compute_streaks(log, TODAY)

    def test_accepts_generator(self):
        log = (d for d in _log_back(True, True))
        assert compute_streaks(log, TODAY) == StreakState(2, 2)

    def test_snapshot_is_not_authoritative(self):
        log = [ActivityDay(TODAY, True, streak_snapshot=99)]
        assert compute_streaks(log, TODAY) == StreakState(1, 1)


class TestMonthSummary:
    def test_cells_for_every_day(self):
        log = [
            ActivityDay(date(2024, 2, 1), True),
            ActivityDay(date(2024, 2, 2), False),
            ActivityDay(date(2024, 2, 29), True),
            ActivityDay(date(2024, 3, 1), True),
        ]
        summary = summarize_month(log, month_window(2024, 2))
        assert len(summary.days) == 29
        assert summary.active_days == 2
        assert summary.days[0] == ActivityDay(date(2024, 2, 1), True)
        assert summary.days[1].is_active is False
        assert summary.days[5].is_active is False

    def test_total_active_days(self):
        log = _log_back(True, False, True, True)
        assert total_active_days(log) == 3
