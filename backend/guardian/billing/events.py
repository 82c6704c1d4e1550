# guardian/billing/events.py
"""
Billing event handler.

Applies verified Stripe subscription events to the user's Subscription row.
Signature verification happens before apply() is called (see payments.py).

Handled event types (uniformly):
    customer.subscription.created
    customer.subscription.updated

The internal user id travels in the Stripe subscription metadata as
"userId". Events that do not resolve to a known user, and event types not
listed above, are acknowledged and ignored so Stripe does not redeliver.

Ordering: Stripe does not guarantee delivery order. Each row remembers the
creation time of the newest event applied to it; an older event is ignored
instead of regressing the state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from guardian.errors import WebhookRejected
from guardian.extensions import db
from guardian.models import Subscription, User, now_utc
from guardian.subscriptions.entitlement import SubscriptionPolicy

logger = logging.getLogger(__name__)

HANDLED_EVENT_TYPES = frozenset({
    "customer.subscription.created",
    "customer.subscription.updated",
})

PREMIUM_PLAN = "premium"


def from_epoch(value: Any) -> Optional[datetime]:
    """Stripe epoch seconds -> naive UTC datetime."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc).replace(tzinfo=None)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _mapping(value: Any, field: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise WebhookRejected(f"Webhook Error: malformed {field}")
    return value


def _string(obj: Mapping[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    if value is not None and not isinstance(value, str):
        raise WebhookRejected(f"Webhook Error: malformed {key}")
    return value


def _period_end(obj: Mapping[str, Any]) -> Optional[datetime]:
    # Newer API versions moved current_period_end onto the subscription items
    if obj.get("current_period_end") is not None:
        return from_epoch(obj.get("current_period_end"))
    items = _mapping(obj.get("items"), "items").get("data") or []
    if not isinstance(items, list):
        raise WebhookRejected("Webhook Error: malformed items")
    if items and isinstance(items[0], Mapping):
        return from_epoch(items[0].get("current_period_end"))
    return None


def _user_id(obj: Mapping[str, Any]) -> Optional[int]:
    metadata = _mapping(obj.get("metadata"), "metadata")
    raw = metadata.get("userId") or metadata.get("user_id")
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


class BillingEventHandler:

    def __init__(self, policy: SubscriptionPolicy, clock: Callable = now_utc):
        self.policy = policy
        self.clock = clock

    def apply(self, event: Mapping[str, Any]) -> Optional[Subscription]:
        """
        Apply one event. Returns the updated Subscription, or None when the
        event was acknowledged without any change.
        """
        event_type = event.get("type")
        if event_type not in HANDLED_EVENT_TYPES:
            logger.debug("Billing: ignoring event type %s", event_type)
            return None

        obj = _mapping(_mapping(event.get("data"), "data").get("object"), "data.object")
        stripe_id, customer, status = (_string(obj, k) for k in ("id", "customer", "status"))
        period_end = _period_end(obj)
        uid = _user_id(obj)
        user = db.session.get(User, uid) if uid is not None else None
        if user is None:
            logger.info("Billing: %s without a resolvable user, acknowledged", event_type)
            return None

        event_at = from_epoch(event.get("created"))
        now = self.clock()

        sub = (
            Subscription.query.filter_by(user_id=user.id)
            .with_for_update()
            .first()
        )
        if sub is None:
            sub = self.policy.new_trial(user.id, now)
            db.session.add(sub)
        elif event_at and sub.last_event_at and event_at < sub.last_event_at:
            logger.info(
                "Billing: stale %s for user %s (event %s < applied %s), ignored",
                event_type, user.id, event_at.isoformat(), sub.last_event_at.isoformat(),
            )
            db.session.rollback()
            return None

        sub.stripe_subscription_id = stripe_id or sub.stripe_subscription_id
        if customer:
            sub.stripe_customer_id = customer
        sub.status = status or sub.status
        sub.plan = PREMIUM_PLAN
        sub.current_period_end = period_end
        if event_at:
            sub.last_event_at = event_at
        sub.updated_at = now

        db.session.commit()
        logger.info("Billing: user %s subscription now %s", user.id, sub.status)
        return sub
