# =============================================================================
# File: guardian/dashboard/routes.py
# Description: Dashboard summary: exposure counts by severity for the
#   caller plus their current subscription view.
# =============================================================================

from __future__ import annotations

from flask import Blueprint, jsonify
from sqlalchemy import func

from guardian.extensions import db
from guardian.models import MonitoredEmail, ScanResult
from guardian.auth.decorators import require_auth, current_user
from guardian.services import get_policy, now

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
def dashboard_summary():
    u = current_user()

    sev_rows = (
        db.session.query(ScanResult.severity, func.count(ScanResult.id))
        .filter(ScanResult.user_id == u.id)
        .group_by(ScanResult.severity)
        .all()
    )
    severity_counts = {"high": 0, "medium": 0, "low": 0}
    total = 0
    for sev, count in sev_rows:
        total += int(count)
        key = (sev or "").lower()
        if key in severity_counts:
            severity_counts[key] = int(count)

    monitored = (
        db.session.query(func.count(MonitoredEmail.id))
        .filter(MonitoredEmail.user_id == u.id)
        .scalar()
        or 0
    )

    return jsonify(
        stats={
            "totalExposures": total,
            "highRisk": severity_counts["high"],
            "mediumRisk": severity_counts["medium"],
            "lowRisk": severity_counts["low"],
            "removed": 0,
            "monitoredEmails": int(monitored),
        },
        subscription=get_policy().view(u.email, u.subscription, now()),
    ), 200
