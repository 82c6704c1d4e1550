"""
Tests for the scan, dashboard, subscription and audit-log routes.

Run with: pytest backend/tests/test_scan_routes.py -v
"""

from guardian.errors import ProviderError
from guardian.models import ScanResult

from conftest import auth_headers


class TestSelfScan:

    def test_scan_returns_persisted_exposures(self, client, user_session):
        _, headers = user_session
        resp = client.post("/api/scan", headers=headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["count"] == 3
        assert body["scanned"] == "a@example.com"
        risks = sorted(e["risk"] for e in body["exposures"])
        assert risks == ["high", "low", "medium"]
        assert ScanResult.query.count() == 3

    def test_requires_auth(self, client):
        assert client.post("/api/scan").status_code == 401

    def test_provider_failure_is_502(self, client, user_session, breach_source):
        _, headers = user_session
        breach_source.error = ProviderError("provider down")

        resp = client.post("/api/scan", headers=headers)

        assert resp.status_code == 502
        assert resp.get_json() == {"error": "Scan failed", "code": "ScanFailed"}
        assert ScanResult.query.count() == 0


class TestSearch:

    def test_trial_user_searches(self, client, user_session, breach_source):
        _, headers = user_session
        resp = client.post("/api/scan/search", json={"email": "someone@example.com"}, headers=headers)

        assert resp.status_code == 200
        assert resp.get_json()["scanned"] == "someone@example.com"
        assert breach_source.calls == ["someone@example.com"]
        assert ScanResult.query.count() == 0

    def test_expired_trial_gets_403(self, client, user_session, breach_source, clock):
        _, headers = user_session
        clock.advance(hours=72)

        resp = client.post("/api/scan/search", json={"email": "someone@example.com"}, headers=headers)

        assert resp.status_code == 403
        body = resp.get_json()
        assert body["code"] == "EntitlementRequired"
        assert body["trialExpired"] is True
        assert breach_source.calls == []

    def test_invalid_email(self, client, user_session):
        _, headers = user_session
        resp = client.post("/api/scan/search", json={"email": "bad"}, headers=headers)
        assert resp.status_code == 400

    def test_missing_body(self, client, user_session):
        _, headers = user_session
        resp = client.post("/api/scan/search", headers=headers)
        assert resp.status_code == 400

    def test_list_body_is_400(self, client, user_session, breach_source):
        _, headers = user_session
        resp = client.post("/api/scan/search", json=["a@example.com"], headers=headers)

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "JSON object body required"
        assert breach_source.calls == []

    def test_same_item_shape_as_self_scan(self, client, user_session):
        _, headers = user_session
        own = client.post("/api/scan", headers=headers).get_json()["exposures"]
        found = client.post(
            "/api/scan/search", json={"email": "x@example.com"}, headers=headers
        ).get_json()["exposures"]

        assert set(found[0]) == set(own[0])
        assert found[0]["id"] is None

    def test_exempt_user_never_expires(self, client, register, clock):
        body = register(email="VIP@example.com")
        clock.advance(days=400)
        resp = client.post(
            "/api/scan/search", json={"email": "x@example.com"}, headers=auth_headers(body["token"])
        )
        assert resp.status_code == 200


class TestResults:

    def test_lists_newest_first(self, client, user_session, breach_source, clock):
        _, headers = user_session
        client.post("/api/scan", headers=headers)
        clock.advance(hours=1)
        breach_source.breaches = breach_source.breaches[:1]
        client.post("/api/scan", headers=headers)

        body = client.get("/api/scan/results", headers=headers).get_json()

        assert len(body["exposures"]) == 4
        assert body["exposures"][0]["breach_name"] == "Adobe"
        assert body["exposures"][0]["id"] == max(e["id"] for e in body["exposures"])

    def test_get_own_result(self, client, user_session):
        _, headers = user_session
        first = client.post("/api/scan", headers=headers).get_json()["exposures"][0]

        resp = client.get(f"/api/scan/result/{first['id']}", headers=headers)

        assert resp.status_code == 200
        assert resp.get_json()["breach_name"] == first["breach_name"]

    def test_other_users_result_is_404(self, client, register):
        owner = auth_headers(register(email="owner@example.com")["token"])
        intruder = auth_headers(register(email="intruder@example.com")["token"])
        result_id = client.post("/api/scan", headers=owner).get_json()["exposures"][0]["id"]

        resp = client.get(f"/api/scan/result/{result_id}", headers=intruder)

        assert resp.status_code == 404
        assert resp.get_json()["code"] == "NotFound"

    def test_missing_result_is_404(self, client, user_session):
        _, headers = user_session
        assert client.get("/api/scan/result/999", headers=headers).status_code == 404


class TestDashboard:

    def test_stats(self, client, user_session):
        _, headers = user_session
        client.post("/api/scan", headers=headers)

        body = client.get("/api/dashboard", headers=headers).get_json()

        assert body["stats"] == {
            "totalExposures": 3,
            "highRisk": 1,
            "mediumRisk": 1,
            "lowRisk": 1,
            "removed": 0,
            "monitoredEmails": 0,
        }
        assert body["subscription"]["status"] == "trialing"

    def test_empty_dashboard(self, client, user_session):
        _, headers = user_session
        stats = client.get("/api/dashboard", headers=headers).get_json()["stats"]
        assert stats["totalExposures"] == 0


class TestSubscriptionView:

    def test_trial_then_expired(self, client, user_session, clock):
        _, headers = user_session
        assert client.get("/api/subscription", headers=headers).get_json()["isPremium"] is True

        clock.advance(hours=72)
        view = client.get("/api/subscription", headers=headers).get_json()

        assert view["isPremium"] is False
        assert view["trialActive"] is False
        assert view["entitlement"] == "trialing-expired"


class TestAuditLog:

    def test_lists_own_entries(self, client, user_session, register):
        _, headers = user_session
        client.post("/api/scan", headers=headers)
        client.post("/api/scan/search", json={"email": "x@example.com"}, headers=headers)
        other = auth_headers(register(email="other@example.com")["token"])
        client.post("/api/scan", headers=other)

        body = client.get("/api/audit-log", headers=headers).get_json()

        assert body["total"] == 2
        assert {e["action"] for e in body["entries"]} == {"scan_own", "scan_search"}

    def test_filter_by_action(self, client, user_session):
        _, headers = user_session
        client.post("/api/scan", headers=headers)
        client.post("/api/scan/search", json={"email": "x@example.com"}, headers=headers)

        body = client.get("/api/audit-log?action=scan_search", headers=headers).get_json()

        assert body["total"] == 1
        assert body["entries"][0]["email"] == "x@example.com"
