# =============================================================================
# File: guardian/audit/routes.py
# Description: Scan audit log helper + API endpoint.
#
# Helper:
#   log_audit(...): record a scan attempt before the provider is called
#
# Endpoints:
#   GET /api/audit-log: the caller's own scan history (paginated)
#
# Actions:
#   scan_own      self-scan of the account email
#   scan_search   premium search of an arbitrary email
#   scan_monitor  scheduled re-check of a monitored email
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime

from flask import Blueprint, request, jsonify

from guardian.extensions import db
from guardian.models import AuditLog, iso_z
from guardian.auth.decorators import require_auth, current_user_id

logger = logging.getLogger(__name__)

audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit-log")

AUDIT_ACTIONS = ("scan_own", "scan_search", "scan_monitor")


# ---------------------------------------------------------------------------
# Helper: best-effort, never raises
# ---------------------------------------------------------------------------

def log_audit(*, user_id: int, action: str, email: str | None, at: datetime | None = None) -> bool:
    """
    Record a scan attempt. Safe to call from anywhere: a failed write is
    rolled back and logged, never raised, so it cannot block the scan.

    Usage:
        from guardian.audit.routes import log_audit

        log_audit(user_id=user.id, action="scan_own", email=email)
    """
    try:
        entry = AuditLog(user_id=user_id, action=action, email_scanned=email)
        if at is not None:
            entry.created_at = at
        db.session.add(entry)
        db.session.commit()
        return True
    except Exception as e:
        db.session.rollback()
        logger.warning(f"Failed to write audit log: {e}")
        return False


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@audit_bp.get("")
@require_auth
def list_audit_log():
    """List the caller's own audit entries, newest first."""
    uid = current_user_id()

    action = request.args.get("action")
    page = max(request.args.get("page", 1, type=int), 1)
    per_page = min(max(request.args.get("per_page", 50, type=int), 1), 200)

    query = AuditLog.query.filter_by(user_id=uid)
    if action:
        query = query.filter(AuditLog.action == action)

    total = query.count()
    rows = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )

    return jsonify(
        entries=[_entry_to_ui(e) for e in rows],
        total=total,
        page=page,
        perPage=per_page,
    ), 200


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _entry_to_ui(e: AuditLog) -> dict:
    return {
        "id": e.id,
        "action": e.action,
        "email": e.email_scanned,
        "createdAt": iso_z(e.created_at),
    }
