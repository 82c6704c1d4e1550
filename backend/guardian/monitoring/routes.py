# =============================================================================
# File: guardian/monitoring/routes.py
# Description: Continuous monitoring watch list.
#
#   - GET    /api/monitoring        list the caller's monitored emails
#   - POST   /api/monitoring        add an email (premium); defaults to own email
#   - DELETE /api/monitoring/<id>   stop monitoring (own rows only)
#
# The sweep that re-checks these addresses lives in sweep.py.
# =============================================================================

from __future__ import annotations

from flask import Blueprint, jsonify

from guardian.errors import BadRequest, DuplicateEmail, NotFound
from guardian.extensions import db
from guardian.models import MonitoredEmail, iso_z
from guardian.auth.decorators import require_auth, require_premium, current_user, current_user_id
from guardian.scans.orchestrator import is_valid_email
from guardian.services import json_body, now, str_field
from guardian.subscriptions.entitlement import normalize_email

monitoring_bp = Blueprint("monitoring", __name__, url_prefix="/api/monitoring")


@monitoring_bp.get("")
@require_auth
def list_monitors():
    rows = (
        MonitoredEmail.query.filter_by(user_id=current_user_id())
        .order_by(MonitoredEmail.created_at.asc(), MonitoredEmail.id.asc())
        .all()
    )
    return jsonify(monitors=[_monitor_to_ui(m) for m in rows]), 200


@monitoring_bp.post("")
@require_auth
@require_premium
def add_monitor():
    u = current_user()
    body = json_body()
    email = normalize_email(str_field(body, "email")) or normalize_email(u.email)

    if not is_valid_email(email):
        raise BadRequest("Valid email required")

    existing = MonitoredEmail.query.filter_by(user_id=u.id, email=email).first()
    if existing:
        raise DuplicateEmail("Email is already monitored")

    m = MonitoredEmail(user_id=u.id, email=email, created_at=now())
    db.session.add(m)
    db.session.commit()

    return jsonify(_monitor_to_ui(m)), 201


@monitoring_bp.delete("/<int:monitor_id>")
@require_auth
def remove_monitor(monitor_id: int):
    m = MonitoredEmail.query.filter_by(id=monitor_id, user_id=current_user_id()).first()
    if not m:
        raise NotFound("Not found")

    db.session.delete(m)
    db.session.commit()
    return jsonify(message="Monitoring stopped."), 200


def _monitor_to_ui(m: MonitoredEmail) -> dict:
    return {
        "id": m.id,
        "email": m.email,
        "lastCheckedAt": iso_z(m.last_checked_at),
        "createdAt": iso_z(m.created_at),
    }
