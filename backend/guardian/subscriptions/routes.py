# guardian/subscriptions/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify

from guardian.auth.decorators import require_auth, current_user
from guardian.services import get_policy, now

subscriptions_bp = Blueprint("subscriptions", __name__, url_prefix="/api/subscription")


@subscriptions_bp.get("")
@require_auth
def get_subscription():
    u = current_user()
    return jsonify(get_policy().view(u.email, u.subscription, now())), 200
