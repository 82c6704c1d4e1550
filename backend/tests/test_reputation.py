"""
Tests for the email reputation client and route.

Run with: pytest backend/tests/test_reputation.py -v
"""

from unittest.mock import MagicMock

import pytest
import requests

from guardian.errors import ProviderError, ProviderNotConfigured
from guardian.reputation.abstract import AbstractReputationClient

from conftest import StubBreachSource, auth_headers

ABSTRACT_PAYLOAD = {
    "email": "a@example.com",
    "deliverability": "DELIVERABLE",
    "quality_score": "0.90",
    "is_free_email": {"value": True, "text": "TRUE"},
    "is_disposable_email": {"value": False, "text": "FALSE"},
    "is_catchall_email": {"value": False, "text": "FALSE"},
    "is_role_email": {"value": False, "text": "FALSE"},
    "is_mx_found": {"value": True, "text": "TRUE"},
    "is_smtp_valid": {"value": True, "text": "TRUE"},
}


def client_with(status_code=200, payload=None, raises=None, api_key="abs-key"):
    session = MagicMock()
    if raises is not None:
        session.get.side_effect = raises
    else:
        response = MagicMock(status_code=status_code)
        response.json.return_value = payload
        session.get.return_value = response
    return AbstractReputationClient(api_key=api_key, session=session), session


class TestAbstractClient:

    def test_unwraps_flags(self):
        rep, session = client_with(payload=ABSTRACT_PAYLOAD)

        result = rep.fetch("A@Example.com")

        assert result["deliverability"] == "DELIVERABLE"
        assert result["quality_score"] == 0.9
        assert result["is_free_email"] is True
        assert result["is_disposable_email"] is False
        assert session.get.call_args.kwargs["params"] == {"api_key": "abs-key", "email": "a@example.com"}

    def test_missing_flags_are_none(self):
        rep, _ = client_with(payload={"email": "a@example.com"})
        result = rep.fetch("a@example.com")
        assert result["is_smtp_valid"] is None
        assert result["quality_score"] is None

    def test_not_configured(self):
        rep, session = client_with(api_key="")
        with pytest.raises(ProviderNotConfigured):
            rep.fetch("a@example.com")
        session.get.assert_not_called()

    def test_http_error(self):
        rep, _ = client_with(status_code=429)
        with pytest.raises(ProviderError):
            rep.fetch("a@example.com")

    def test_network_error(self):
        rep, _ = client_with(raises=requests.Timeout("slow"))
        with pytest.raises(ProviderError):
            rep.fetch("a@example.com")


class TestReputationRoute:

    @pytest.fixture
    def client(self, make_app):
        rep, _ = client_with(payload=ABSTRACT_PAYLOAD)
        app = make_app(breach_source=StubBreachSource(), reputation_client=rep)
        return app.test_client()

    def test_own_email_is_free(self, client, register, clock):
        headers = auth_headers(register(email="a@example.com")["token"])
        clock.advance(hours=100)

        resp = client.get("/api/reputation", headers=headers)

        assert resp.status_code == 200
        assert resp.get_json()["reputation"]["deliverability"] == "DELIVERABLE"

    def test_other_email_requires_premium(self, client, register, clock):
        headers = auth_headers(register(email="a@example.com")["token"])
        assert client.get("/api/reputation?email=b@example.com", headers=headers).status_code == 200

        clock.advance(hours=72)
        resp = client.get("/api/reputation?email=b@example.com", headers=headers)
        assert resp.status_code == 403

    def test_invalid_email(self, client, register):
        headers = auth_headers(register()["token"])
        assert client.get("/api/reputation?email=nope", headers=headers).status_code == 400


class TestUnconfiguredReputation:

    @pytest.fixture
    def client(self, make_app):
        app = make_app(breach_source=StubBreachSource(), reputation_client=AbstractReputationClient())
        return app.test_client()

    def test_is_503(self, client, register):
        headers = auth_headers(register()["token"])
        resp = client.get("/api/reputation", headers=headers)
        assert resp.status_code == 503
        assert resp.get_json()["code"] == "ProviderNotConfigured"
