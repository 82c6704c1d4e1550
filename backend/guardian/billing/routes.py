# =============================================================================
# File: guardian/billing/routes.py
# Description: Billing routes: Stripe checkout, card setup and the
#   subscription webhook receiver.
#
#   - POST /api/billing/create-checkout: any authenticated user
#   - POST /api/billing/setup-intent: any authenticated user
#   - POST /api/webhooks/stripe: unauthenticated, Stripe-signed
#
# Payment routes answer 503 when STRIPE_SECRET_KEY is not configured.
# =============================================================================

from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify

from guardian.errors import PaymentNotConfigured
from guardian.extensions import db
from guardian.models import Subscription, User
from guardian.auth.decorators import require_auth, current_user
from guardian.billing.events import BillingEventHandler
from guardian.services import get_clock, get_payment_gateway, get_policy, json_body, now, str_field

logger = logging.getLogger(__name__)

billing_bp = Blueprint("billing", __name__, url_prefix="/api/billing")
webhooks_bp = Blueprint("webhooks", __name__, url_prefix="/api/webhooks")


def _subscription_for(user: User) -> Subscription:
    """Existing subscription, or a fresh trial row created on first billing action."""
    sub = Subscription.query.filter_by(user_id=user.id).first()
    if sub is None:
        sub = get_policy().new_trial(user.id, now())
        db.session.add(sub)
        db.session.flush()
    return sub


@billing_bp.post("/create-checkout")
@require_auth
def create_checkout():
    gateway = get_payment_gateway()
    if not gateway.configured:
        raise PaymentNotConfigured()

    body = json_body()
    price_id = str_field(body, "priceId").strip() or None

    u = current_user()
    sub = _subscription_for(u)
    customer_id = gateway.ensure_customer(u, sub)
    db.session.commit()

    url = gateway.create_checkout_session(customer_id, u.id, price_id)
    return jsonify(url=url), 200


@billing_bp.post("/setup-intent")
@require_auth
def setup_intent():
    gateway = get_payment_gateway()
    if not gateway.configured:
        raise PaymentNotConfigured()

    u = current_user()
    sub = _subscription_for(u)
    customer_id = gateway.ensure_customer(u, sub)
    db.session.commit()

    client_secret = gateway.create_setup_intent(customer_id)
    return jsonify(clientSecret=client_secret), 200


@webhooks_bp.post("/stripe")
def stripe_webhook():
    # Raw body is required for signature verification
    payload = request.get_data()
    signature = request.headers.get("Stripe-Signature")

    event = get_payment_gateway().parse_event(payload, signature)
    logger.info("Stripe webhook received: %s", event.get("type"))

    handler = BillingEventHandler(policy=get_policy(), clock=get_clock())
    handler.apply(event)

    return jsonify(received=True), 200
