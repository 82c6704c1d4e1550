"""
Guardian - Test Configuration
=============================
Pytest fixtures: in-memory SQLite app, frozen clock, stub breach source,
fake payment gateway and small request helpers.
"""

from datetime import datetime, timedelta

import pytest

from guardian import create_app
from guardian.billing.payments import StripeGateway
from guardian.breaches.base import BaseBreachSource, BreachLookup, NormalizedBreach
from guardian.config import GuardianConfig
from guardian.extensions import db as _db

START = datetime(2026, 1, 1, 12, 0, 0)
EXEMPT_EMAIL = "vip@example.com"


# ===========================================
# Test doubles
# ===========================================

class FrozenClock:
    """Injectable clock; tests move time explicitly."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class StubBreachSource(BaseBreachSource):
    """Returns canned breaches and records every lookup."""

    name = "stub"
    requires_api_key = False

    def __init__(self, breaches=None):
        super().__init__()
        self.breaches = list(breaches or [])
        self.calls = []
        self.error = None

    def lookup(self, email):
        self.calls.append(email)
        if self.error is not None:
            raise self.error
        return BreachLookup(email=email, source=self.name, breaches=list(self.breaches))


class FakePaymentGateway(StripeGateway):
    """StripeGateway without network calls; webhook bodies are parsed as JSON."""

    def __init__(self):
        super().__init__(secret_key="sk_test_fake", webhook_secret="", price_id="price_test")
        self.checkouts = []
        self.setup_intents = []
        self._customers = 0

    def ensure_customer(self, user, subscription):
        if not subscription.stripe_customer_id:
            self._customers += 1
            subscription.stripe_customer_id = f"cus_test_{self._customers}"
        return subscription.stripe_customer_id

    def create_checkout_session(self, customer_id, user_id, price_id=None):
        self.checkouts.append((customer_id, user_id, price_id or self.price_id))
        return f"https://checkout.stripe.test/{customer_id}"

    def create_setup_intent(self, customer_id):
        self.setup_intents.append(customer_id)
        return f"seti_{customer_id}_secret"


def make_breach(name="Adobe", hit_count=152_445_165, data_classes=None, **kwargs):
    return NormalizedBreach(
        name=name,
        title=kwargs.pop("title", name),
        domain=kwargs.pop("domain", f"{name.lower()}.com"),
        date=kwargs.pop("date", "2013-10-04"),
        description=kwargs.pop("description", f"{name} breach."),
        data_classes=data_classes if data_classes is not None else ["Email addresses", "Passwords"],
        hit_count=hit_count,
        verified=kwargs.pop("verified", True),
    )


# ===========================================
# App fixtures
# ===========================================

@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def breach_source():
    return StubBreachSource([
        make_breach("Adobe", 152_445_165, ["Email addresses", "Password hints", "Usernames"]),
        make_breach("Dropbox", 68_648_009, ["Email addresses", "Passwords"]),
        make_breach("SmallForum", 5_000, ["Usernames"]),
    ])


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def config():
    return GuardianConfig(
        database_uri="sqlite:///:memory:",
        secret_key="test-secret-key",
        exempt_email=EXEMPT_EMAIL,
        monitoring_interval_hours=0,
    )


@pytest.fixture
def make_app(config, clock):
    """Build an app with the shared config and clock; services can be overridden."""
    created = []

    def _make(**services):
        app = create_app(config, clock=clock, **services)
        app.config["TESTING"] = True
        ctx = app.app_context()
        ctx.push()
        _db.create_all()
        created.append(ctx)
        return app

    yield _make

    for ctx in reversed(created):
        _db.session.remove()
        _db.drop_all()
        ctx.pop()


@pytest.fixture
def app(make_app, breach_source, payment_gateway):
    return make_app(breach_source=breach_source, payment_gateway=payment_gateway)


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


# ===========================================
# Request helpers
# ===========================================

def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user through the API and return the JSON body."""

    def _register(email="a@example.com", password="correct horse battery", name="Alice"):
        resp = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _register


@pytest.fixture
def user_session(register):
    """A registered, trialing user: (body, headers)."""
    body = register()
    return body, auth_headers(body["token"])
