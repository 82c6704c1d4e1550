# guardian/monitoring/sweep.py
"""
Monitoring sweep.

Re-checks every monitored email whose owner still has premium access and
records breaches not seen before for that address. A failing lookup is
logged and skipped; the sweep carries on with the next address.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from guardian.errors import ScanFailed
from guardian.extensions import db
from guardian.models import MonitoredEmail
from guardian.scans.orchestrator import ScanOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    checked: int = 0
    skipped: int = 0
    failed: int = 0
    new_exposures: int = 0


def run_monitoring_sweep(orchestrator: ScanOrchestrator) -> SweepReport:
    report = SweepReport()
    monitors = MonitoredEmail.query.order_by(MonitoredEmail.id.asc()).all()

    for m in monitors:
        user = m.user
        if not orchestrator.policy.has_premium_access(user.email, user.subscription, orchestrator.clock()):
            report.skipped += 1
            continue

        try:
            outcome = orchestrator.monitor(user, m.email)
        except ScanFailed:
            report.failed += 1
            continue

        m.last_checked_at = orchestrator.clock()
        db.session.commit()
        report.checked += 1
        report.new_exposures += len(outcome.exposures)

    logger.info(
        "Monitoring sweep: %d checked, %d skipped, %d failed, %d new exposures",
        report.checked, report.skipped, report.failed, report.new_exposures,
    )
    return report
