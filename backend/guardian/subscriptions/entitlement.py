# guardian/subscriptions/entitlement.py
"""
Subscription state machine.

Derives a user's access tier from their persisted Subscription row and an
injected "now". Nothing here reads the clock or touches the database, so
the same inputs always give the same Entitlement.

Precedence:
    1. exempt email            -> EXEMPT
    2. no subscription row     -> NONE
    3. status == active        -> ACTIVE
    4. status == trialing      -> TRIAL_ACTIVE while now < trial_ends_at,
                                  TRIAL_EXPIRED from trial_ends_at onwards
    5. any other status        -> NONE
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from guardian.config import TRIAL_HOURS
from guardian.models import Subscription, iso_z


class Entitlement(str, Enum):
    NONE = "none"
    TRIAL_ACTIVE = "trialing-active"
    TRIAL_EXPIRED = "trialing-expired"
    ACTIVE = "active"
    EXEMPT = "exempt"

    @property
    def is_premium(self) -> bool:
        return self in PREMIUM_ENTITLEMENTS


PREMIUM_ENTITLEMENTS = frozenset({Entitlement.EXEMPT, Entitlement.ACTIVE, Entitlement.TRIAL_ACTIVE})


def normalize_email(email: Optional[str]) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


class SubscriptionPolicy:
    """Entitlement rules, parameterised by the exempt address and trial length."""

    def __init__(self, exempt_email: str = "", trial_duration: timedelta = timedelta(hours=TRIAL_HOURS)):
        self.exempt_email = normalize_email(exempt_email)
        self.trial_duration = trial_duration

    def is_exempt(self, email: Optional[str]) -> bool:
        return bool(self.exempt_email) and normalize_email(email) == self.exempt_email

    def trial_ends_at(self, created_at: datetime) -> datetime:
        # Exact duration, no calendar-day rounding
        return created_at + self.trial_duration

    def classify(self, email: Optional[str], subscription: Optional[Subscription], now: datetime) -> Entitlement:
        if self.is_exempt(email):
            return Entitlement.EXEMPT
        if subscription is None:
            return Entitlement.NONE
        if subscription.status == "active":
            return Entitlement.ACTIVE
        if subscription.status == "trialing":
            if subscription.trial_ends_at is not None and now < subscription.trial_ends_at:
                return Entitlement.TRIAL_ACTIVE
            return Entitlement.TRIAL_EXPIRED
        return Entitlement.NONE

    def has_premium_access(self, email: Optional[str], subscription: Optional[Subscription], now: datetime) -> bool:
        return self.classify(email, subscription, now).is_premium

    def view(self, email: Optional[str], subscription: Optional[Subscription], now: datetime) -> dict:
        """Subscription payload returned by auth, dashboard and /api/subscription."""
        entitlement = self.classify(email, subscription, now)
        exempt = entitlement is Entitlement.EXEMPT

        if subscription is None:
            return {
                "status": "none",
                "isPremium": exempt,
                "trialActive": False,
                "trialEndsAt": None,
                "exempt": exempt,
                "currentPeriodEnd": None,
                "plan": None,
                "entitlement": entitlement.value,
            }

        trial_active = (
            subscription.status == "trialing"
            and subscription.trial_ends_at is not None
            and now < subscription.trial_ends_at
        )
        return {
            "status": subscription.status,
            "isPremium": entitlement.is_premium,
            "trialActive": trial_active,
            "trialEndsAt": iso_z(subscription.trial_ends_at),
            "exempt": exempt,
            "currentPeriodEnd": iso_z(subscription.current_period_end),
            "plan": subscription.plan,
            "entitlement": entitlement.value,
        }

    def new_trial(self, user_id: int, now: datetime) -> Subscription:
        """Subscription row for a freshly created account."""
        return Subscription(
            user_id=user_id,
            status="trialing",
            trial_ends_at=self.trial_ends_at(now),
            plan="free",
            created_at=now,
            updated_at=now,
        )
