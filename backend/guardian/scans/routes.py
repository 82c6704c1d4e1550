# =============================================================================
# File: guardian/scans/routes.py
# Description: Breach scan routes.
#
#   - POST /api/scan               self-scan of the account email (any user)
#   - POST /api/scan/search        search any email (premium)
#   - GET  /api/scan/results       the caller's persisted exposures
#   - GET  /api/scan/result/<id>   one persisted exposure (own data only)
# =============================================================================

from __future__ import annotations

from flask import Blueprint, jsonify

from guardian.errors import NotFound
from guardian.models import ScanResult
from guardian.auth.decorators import require_auth, current_user, current_user_id
from guardian.scans.orchestrator import result_to_exposure
from guardian.services import get_scan_orchestrator, json_body

scans_bp = Blueprint("scans", __name__, url_prefix="/api/scan")


@scans_bp.post("")
@require_auth
def scan_own():
    outcome = get_scan_orchestrator().scan_own(current_user())
    return jsonify(outcome.to_dict()), 200


@scans_bp.post("/search")
@require_auth
def search():
    # Entitlement is checked by the orchestrator before any provider call
    body = json_body()
    outcome = get_scan_orchestrator().search(current_user(), body.get("email"))
    return jsonify(outcome.to_dict()), 200


@scans_bp.get("/results")
@require_auth
def list_results():
    rows = (
        ScanResult.query.filter_by(user_id=current_user_id())
        .order_by(ScanResult.created_at.desc(), ScanResult.id.desc())
        .all()
    )
    return jsonify(exposures=[result_to_exposure(r) for r in rows]), 200


@scans_bp.get("/result/<int:result_id>")
@require_auth
def get_result(result_id: int):
    row = ScanResult.query.filter_by(id=result_id, user_id=current_user_id()).first()
    if not row:
        raise NotFound("Not found")
    return jsonify(result_to_exposure(row)), 200
