"""
Tests for the monitoring watch list and the background sweep.

Run with: pytest backend/tests/test_monitoring.py -v
"""

from unittest.mock import patch

from guardian.errors import ProviderError
from guardian.models import MonitoredEmail, ScanResult
from guardian.monitoring.scheduler import start_monitor_scheduler
from guardian.monitoring.sweep import run_monitoring_sweep
from guardian.services import get_scan_orchestrator

from conftest import auth_headers, make_breach


class TestWatchList:

    def test_add_defaults_to_own_email(self, client, user_session):
        _, headers = user_session
        resp = client.post("/api/monitoring", json={}, headers=headers)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["email"] == "a@example.com"
        assert body["lastCheckedAt"] is None

    def test_add_other_email(self, client, user_session):
        _, headers = user_session
        client.post("/api/monitoring", json={"email": "Family@Example.com"}, headers=headers)

        monitors = client.get("/api/monitoring", headers=headers).get_json()["monitors"]
        assert [m["email"] for m in monitors] == ["family@example.com"]

    def test_duplicate_is_409(self, client, user_session):
        _, headers = user_session
        client.post("/api/monitoring", json={"email": "x@example.com"}, headers=headers)
        resp = client.post("/api/monitoring", json={"email": "x@example.com"}, headers=headers)
        assert resp.status_code == 409

    def test_invalid_email(self, client, user_session):
        _, headers = user_session
        resp = client.post("/api/monitoring", json={"email": "not-valid"}, headers=headers)
        assert resp.status_code == 400

    def test_non_object_body(self, client, user_session):
        _, headers = user_session
        resp = client.post("/api/monitoring", json=["x@example.com"], headers=headers)
        assert resp.status_code == 400
        assert MonitoredEmail.query.count() == 0

    def test_requires_premium(self, client, user_session, clock):
        _, headers = user_session
        clock.advance(hours=73)
        resp = client.post("/api/monitoring", json={}, headers=headers)
        assert resp.status_code == 403
        assert resp.get_json()["trialExpired"] is True

    def test_delete_own_only(self, client, register):
        owner = auth_headers(register(email="owner@example.com")["token"])
        other = auth_headers(register(email="other@example.com")["token"])
        monitor_id = client.post("/api/monitoring", json={}, headers=owner).get_json()["id"]

        assert client.delete(f"/api/monitoring/{monitor_id}", headers=other).status_code == 404
        assert client.delete(f"/api/monitoring/{monitor_id}", headers=owner).status_code == 200
        assert MonitoredEmail.query.count() == 0

    def test_dashboard_counts_monitors(self, client, user_session):
        _, headers = user_session
        client.post("/api/monitoring", json={}, headers=headers)
        stats = client.get("/api/dashboard", headers=headers).get_json()["stats"]
        assert stats["monitoredEmails"] == 1


class TestSweep:

    def test_records_new_breaches_only(self, app, client, user_session, breach_source, clock):
        _, headers = user_session
        client.post("/api/monitoring", json={"email": "watch@example.com"}, headers=headers)

        first = run_monitoring_sweep(get_scan_orchestrator())
        assert (first.checked, first.new_exposures) == (1, 3)

        breach_source.breaches.append(make_breach("FreshLeak", 10))
        clock.advance(hours=24)
        second = run_monitoring_sweep(get_scan_orchestrator())

        assert second.new_exposures == 1
        assert ScanResult.query.filter_by(email="watch@example.com").count() == 4
        monitor = MonitoredEmail.query.one()
        assert monitor.last_checked_at == clock()

    def test_skips_users_without_premium(self, app, client, user_session, breach_source, clock):
        _, headers = user_session
        client.post("/api/monitoring", json={}, headers=headers)
        clock.advance(hours=72)

        report = run_monitoring_sweep(get_scan_orchestrator())

        assert report.skipped == 1
        assert report.checked == 0
        assert breach_source.calls == []

    def test_provider_failure_continues(self, app, client, register, breach_source):
        for email in ("one@example.com", "two@example.com"):
            headers = auth_headers(register(email=email)["token"])
            client.post("/api/monitoring", json={}, headers=headers)
        breach_source.error = ProviderError("rate limited")

        report = run_monitoring_sweep(get_scan_orchestrator())

        assert report.failed == 2
        assert report.checked == 0
        assert ScanResult.query.count() == 0


class TestScheduler:

    def test_disabled_when_interval_zero(self, app):
        assert start_monitor_scheduler(app) is None

    def test_schedules_interval_job(self, app):
        app.config["GUARDIAN"].monitoring_interval_hours = 6
        with patch("guardian.monitoring.scheduler.BackgroundScheduler") as scheduler_cls:
            scheduler = start_monitor_scheduler(app)

        assert scheduler is scheduler_cls.return_value
        args, kwargs = scheduler.add_job.call_args
        assert args[1] == "interval"
        assert kwargs["hours"] == 6
        assert kwargs["id"] == "monitoring_sweep"
        scheduler.start.assert_called_once()
