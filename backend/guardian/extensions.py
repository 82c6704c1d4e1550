# guardian/extensions.py
from __future__ import annotations
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, _connection_record):
    # PRAGMA is SQLite-only; skip for PostgreSQL
    module_name = type(dbapi_connection).__module__
    if "sqlite" in module_name.lower():
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

def init_extensions(app, breach_source=None, payment_gateway=None, reputation_client=None, clock=None):
    """Bind the database and the per-app service objects built from config."""
    from guardian.billing.payments import StripeGateway
    from guardian.breaches import build_breach_source
    from guardian.models import now_utc
    from guardian.reputation.abstract import AbstractReputationClient
    from guardian.subscriptions.entitlement import SubscriptionPolicy

    db.init_app(app)

    config = app.config["GUARDIAN"]
    app.extensions["guardian.clock"] = clock or now_utc
    app.extensions["guardian.policy"] = SubscriptionPolicy(
        exempt_email=config.exempt_email,
        trial_duration=config.trial_duration,
    )
    app.extensions["guardian.breach_source"] = breach_source or build_breach_source(config)
    app.extensions["guardian.payment_gateway"] = payment_gateway or StripeGateway(
        secret_key=config.stripe_secret_key,
        webhook_secret=config.stripe_webhook_secret,
        price_id=config.stripe_price_id,
        frontend_url=config.frontend_url,
    )
    app.extensions["guardian.reputation_client"] = reputation_client or AbstractReputationClient(
        api_key=config.abstract_email_api_key,
        timeout=config.provider_timeout,
    )
