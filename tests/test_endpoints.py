"""
Integration tests for API endpoints using the SQLite test database.
"""
from datetime import datetime, timezone


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestRecurrenceEndpoints:
    def test_rules(self, client):
        r = client.get("/recurrence/rules")
        assert r.status_code == 200
        rules = [item["rule"] for item in r.json()]
        assert len(rules) == 12
        assert rules[0] == "DAILY"
        assert "BIWEEKLY" in rules

    def test_evaluate_biweekly(self, client):
        r = client.get("/recurrence/evaluate", params={
            "rule": "BIWEEKLY", "anchor": "2024-01-01",
            "start": "2024-02-01", "end": "2024-02-29",
        })
        assert r.status_code == 200
        body = r.json()
        assert body["dates"] == ["2024-02-12", "2024-02-26"]
        assert body["count"] == 2
        assert body["anchor"] == "2024-01-01"

    def test_evaluate_daily_excludes_anchor(self, client):
        r = client.get("/recurrence/evaluate", params={
            "rule": "DAILY", "anchor": "2024-01-01",
            "start": "2024-01-01", "end": "2024-01-31",
        })
        body = r.json()
        assert body["count"] == 30
        assert "2024-01-01" not in body["dates"]

    def test_month(self, client):
        r = client.get("/recurrence/month", params={
            "rule": "WEEKLY_MONDAY", "anchor": "2024-01-01", "year": 2024, "month": 1,
        })
        assert r.status_code == 200
        assert r.json()["dates"] == ["2024-01-08", "2024-01-15", "2024-01-22", "2024-01-29"]

    def test_month_monthly_on_31st_skips_february(self, client):
        r = client.get("/recurrence/month", params={
            "rule": "MONTHLY", "anchor": "2024-01-31", "year": 2024, "month": 2,
        })
        assert r.status_code == 200
        assert r.json()["dates"] == []

    def test_materialize(self, client):
        r = client.get("/recurrence/materialize", params={
            "rule": "WEEKDAYS", "anchor": "2024-01-01", "horizon_days": 7,
        })
        assert r.status_code == 200
        body = r.json()
        assert body["dates"] == [
            "2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05",
        ]
        assert body["horizon_days"] == 7

    def test_materialize_default_horizon(self, client):
        r = client.get("/recurrence/materialize", params={"rule": "DAILY", "anchor": "2024-01-01"})
        assert r.json()["horizon_days"] == 30
        assert len(r.json()["dates"]) == 30

    def test_materialize_horizon_too_large(self, client):
        r = client.get("/recurrence/materialize", params={
            "rule": "DAILY", "anchor": "2024-01-01", "horizon_days": 10000000,
        })
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_materialize_near_end_of_calendar(self, client):
        r = client.get("/recurrence/materialize", params={
            "rule": "DAILY", "anchor": "9999-12-30", "horizon_days": 30,
        })
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_WINDOW"


class TestTaskEndpoints:
    def test_create_and_highlight(self, client, user_id):
        r = client.post("/tasks/recurring", json={
            "user_id": user_id,
            "title": "Gym",
            "start_date": "2024-01-01",
            "due_date": "2024-01-01",
            "is_recurring": True,
            "recurring_rule": "WEEKLY_MONDAY",
        })
        assert r.status_code == 201
        task = r.json()
        assert task["anchor"] == "2024-01-01"
        assert task["recurring_rule"] == "WEEKLY_MONDAY"

        r = client.get(f"/tasks/{task['id']}/occurrences", params={"year": 2024, "month": 1})
        assert r.status_code == 200
        assert r.json()["dates"] == ["2024-01-08", "2024-01-15", "2024-01-22", "2024-01-29"]

    def test_rule_dropped_when_not_recurring(self, client, user_id):
        r = client.post("/tasks/recurring", json={
            "user_id": user_id, "title": "One-off", "due_date": "2024-03-03",
            "recurring_rule": "DAILY",
        })
        assert r.status_code == 201
        assert r.json()["recurring_rule"] is None
        assert r.json()["anchor"] == "2024-03-03"

    def test_recurring_without_rule_rejected(self, client, user_id):
        r = client.post("/tasks/recurring", json={
            "user_id": user_id, "title": "x", "start_date": "2024-01-01", "is_recurring": True,
        })
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_bad_date_rejected(self, client, user_id):
        r = client.post("/tasks/recurring", json={
            "user_id": user_id, "title": "x", "start_date": "2024-02-30",
        })
        assert r.status_code == 422

    def test_occurrences_missing_task(self, client):
        r = client.get("/tasks/99999999/occurrences", params={"year": 2024, "month": 1})
        assert r.status_code == 404
        assert r.json()["code"] == "TASK_NOT_FOUND"


class TestConsistencyEndpoints:
    def _mark(self, client, user_id, day, active=True, today=None):
        r = client.post(
            "/consistency/days",
            params={"today": today or day},
            json={"user_id": user_id, "date": day, "is_active": active, "reason": "task"},
        )
        assert r.status_code == 200
        return r.json()

    def test_mark_days_and_unlock_badge(self, client, user_id):
        first = self._mark(client, user_id, "2024-01-01")
        assert first["current_streak"] == 1
        assert first["previous_best"] is None

        self._mark(client, user_id, "2024-01-02")
        third = self._mark(client, user_id, "2024-01-03")
        assert third["current_streak"] == 3
        assert third["best_streak"] == 3
        assert third["achievement"]["threshold_days"] == 3
        assert third["achievement"]["icon_kind"] == "flame"

    def test_streaks_grace_rule(self, client, user_id):
        self._mark(client, user_id, "2024-01-13")
        self._mark(client, user_id, "2024-01-14")
        r = client.get("/consistency/streaks", params={"user_id": user_id, "today": "2024-01-15"})
        assert r.status_code == 200
        body = r.json()
        assert body["current_streak"] == 2
        assert body["today"] == "2024-01-15"

    def test_streaks_bad_today(self, client, user_id):
        r = client.get("/consistency/streaks", params={"user_id": user_id, "today": "15/01/2024"})
        assert r.status_code == 422
        assert r.json()["code"] == "PARSE_ERROR"

    def test_month(self, client, user_id):
        self._mark(client, user_id, "2024-02-01")
        self._mark(client, user_id, "2024-02-29")
        r = client.get("/consistency/month", params={"user_id": user_id, "year": 2024, "month": 2})
        assert r.status_code == 200
        body = r.json()
        assert body["active_days"] == 2
        assert len(body["days"]) == 29
        assert body["days"][-1] == {"date": "2024-02-29", "is_active": True}

    def test_badges(self, client, user_id):
        for day in ("2024-01-01", "2024-01-02", "2024-01-03"):
            self._mark(client, user_id, day)
        r = client.get("/achievements/badges", params={"user_id": user_id})
        assert r.status_code == 200
        flags = {b["threshold_days"]: b["unlocked"] for b in r.json()["badges"]}
        assert flags == {3: True, 7: False, 14: False, 30: False, 60: False, 100: False}

    def test_mark_day_bad_date(self, client, user_id):
        r = client.post("/consistency/days", json={"user_id": user_id, "date": "2024-13-01"})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_backfill_keeps_streak_anchored_on_today(self, client, user_id):
        for day in ("2024-01-10", "2024-01-11", "2024-01-12"):
            self._mark(client, user_id, day)
        body = self._mark(client, user_id, "2024-01-05", today="2024-01-12")
        assert body["today"] == "2024-01-12"
        assert body["current_streak"] == 3
        assert body["total_active_days"] == 4

    def test_mark_day_without_today_uses_current_date(self, client, user_id):
        self._mark(client, user_id, "2024-01-12")
        r = client.post("/consistency/days", json={"user_id": user_id, "date": "2024-01-05"})
        assert r.status_code == 200
        body = r.json()
        assert body["today"] == datetime.now(tz=timezone.utc).date().isoformat()
        assert body["current_streak"] == 0
        assert body["previous_best"] == 1
