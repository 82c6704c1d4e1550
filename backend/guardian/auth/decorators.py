# guardian/auth/decorators.py

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import request, g, current_app

from guardian.errors import EntitlementRequired, Unauthorized
from guardian.extensions import db
from guardian.models import User
from guardian.services import get_policy, now
from guardian.subscriptions.entitlement import Entitlement
from .tokens import verify_access_token


def get_bearer_token() -> Optional[str]:
    auth = request.headers.get("Authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip()
    return None


def require_auth(fn: Callable):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = get_bearer_token()
        if not token:
            raise Unauthorized("Authentication required")

        config = current_app.config["GUARDIAN"]
        uid = verify_access_token(
            secret_key=config.secret_key, token=token, max_age_seconds=config.token_max_age
        )
        if not uid:
            raise Unauthorized("Invalid or expired token")

        user = db.session.get(User, uid)
        if not user:
            raise Unauthorized("User not found")

        g.current_user = user
        g.current_user_id = int(user.id)

        return fn(*args, **kwargs)

    return wrapper


# ────────────────────────────────────────────────────────────
# Context helpers
# ────────────────────────────────────────────────────────────

def current_user() -> User:
    return g.current_user


def current_user_id() -> int:
    """Get current user ID from context."""
    return int(getattr(g, "current_user_id", g.current_user.id))


def current_entitlement() -> Entitlement:
    user = current_user()
    return get_policy().classify(user.email, user.subscription, now())


def require_premium(fn: Callable):
    """
    Decorator for premium-gated routes. Must sit below @require_auth.
    Usage:
        @require_auth
        @require_premium
        def search(): ...
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        entitlement = current_entitlement()
        if not entitlement.is_premium:
            raise EntitlementRequired(
                trialExpired=entitlement is Entitlement.TRIAL_EXPIRED,
                entitlement=entitlement.value,
            )
        g.current_entitlement = entitlement
        return fn(*args, **kwargs)
    return wrapper
