# guardian/billing/payments.py
"""
Stripe gateway.

Thin wrapper over the stripe library. The secret key is passed on every
call (api_key=...) instead of being set on the stripe module, so several
apps with different settings can coexist in one process.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import stripe

from guardian.errors import PaymentNotConfigured, ProviderError, WebhookRejected
from guardian.extensions import db
from guardian.models import Subscription, User

logger = logging.getLogger(__name__)

PAYMENT_METHOD_TYPES = ["card", "link"]


class StripeGateway:

    def __init__(
        self,
        secret_key: str = "",
        webhook_secret: str = "",
        price_id: str = "price_premium",
        frontend_url: str = "http://localhost:5173",
    ):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.price_id = price_id
        self.frontend_url = frontend_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def _require_stripe(self):
        if not self.configured:
            raise PaymentNotConfigured()

    # ── Customers ───────────────────────────────────────────────────

    def ensure_customer(self, user: User, subscription: Subscription) -> str:
        """Reuse the stored Stripe customer or create one; caller commits."""
        self._require_stripe()
        if subscription.stripe_customer_id:
            return subscription.stripe_customer_id

        try:
            customer = stripe.Customer.create(
                api_key=self.secret_key,
                email=user.email or f"user{user.id}@guardian.local",
                metadata={"userId": str(user.id)},
            )
        except stripe.StripeError as e:
            logger.warning("Stripe customer creation failed for user %s: %s", user.id, e)
            raise ProviderError("Payment provider error") from e

        subscription.stripe_customer_id = customer.id
        db.session.flush()
        return customer.id

    # ── Checkout / setup ────────────────────────────────────────────

    def create_checkout_session(self, customer_id: str, user_id: int, price_id: Optional[str] = None) -> str:
        self._require_stripe()
        metadata = {"userId": str(user_id)}
        try:
            session = stripe.checkout.Session.create(
                api_key=self.secret_key,
                customer=customer_id,
                mode="subscription",
                payment_method_types=PAYMENT_METHOD_TYPES,
                line_items=[{"price": price_id or self.price_id, "quantity": 1}],
                success_url=f"{self.frontend_url}/settings?success=true",
                cancel_url=f"{self.frontend_url}/settings?canceled=true",
                metadata=metadata,
                # Copied onto the subscription so its webhook events resolve to the user
                subscription_data={"metadata": metadata},
            )
        except stripe.StripeError as e:
            logger.warning("Stripe checkout failed for user %s: %s", user_id, e)
            raise ProviderError("Checkout failed") from e
        return session.url

    def create_setup_intent(self, customer_id: str) -> str:
        self._require_stripe()
        try:
            intent = stripe.SetupIntent.create(
                api_key=self.secret_key,
                customer=customer_id,
                usage="off_session",
                payment_method_types=PAYMENT_METHOD_TYPES,
            )
        except stripe.StripeError as e:
            logger.warning("Stripe setup intent failed: %s", e)
            raise ProviderError("Failed to create setup intent") from e
        return intent.client_secret

    # ── Webhooks ────────────────────────────────────────────────────

    def parse_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify and decode a webhook body. Without a webhook secret (local
        development) the body is trusted and parsed as JSON.
        """
        self._require_stripe()

        if self.webhook_secret:
            try:
                event = stripe.Webhook.construct_event(payload, signature or "", self.webhook_secret)
            except stripe.SignatureVerificationError as e:
                logger.warning("Stripe webhook signature verification failed")
                raise WebhookRejected(f"Webhook Error: {e}") from e
            except ValueError as e:
                raise WebhookRejected("Webhook Error: invalid payload") from e
            return event.to_dict() if hasattr(event, "to_dict") else dict(event)

        try:
            event = json.loads(payload or b"{}")
        except ValueError as e:
            raise WebhookRejected("Webhook Error: invalid payload") from e
        if not isinstance(event, dict):
            raise WebhookRejected("Webhook Error: invalid payload")
        return event
