# =============================================================================
# File: guardian/reputation/routes.py
# Description: Email reputation insights.
#
#   - GET /api/reputation?email=<addr>
#       own account email: any authenticated user
#       any other address: premium
# =============================================================================

from __future__ import annotations

from flask import Blueprint, request, jsonify

from guardian.errors import BadRequest, EntitlementRequired
from guardian.auth.decorators import require_auth, current_user, current_entitlement
from guardian.scans.orchestrator import is_valid_email
from guardian.services import get_reputation_client
from guardian.subscriptions.entitlement import Entitlement, normalize_email

reputation_bp = Blueprint("reputation", __name__, url_prefix="/api/reputation")


@reputation_bp.get("")
@require_auth
def get_reputation():
    u = current_user()
    email = normalize_email(request.args.get("email")) or normalize_email(u.email)

    if not is_valid_email(email):
        raise BadRequest("Valid email required")

    if email != normalize_email(u.email):
        entitlement = current_entitlement()
        if not entitlement.is_premium:
            raise EntitlementRequired(
                trialExpired=entitlement is Entitlement.TRIAL_EXPIRED,
                entitlement=entitlement.value,
            )

    return jsonify(reputation=get_reputation_client().fetch(email)), 200
