# guardian/monitoring/scheduler.py
"""
Background scheduler for the monitoring sweep.

Started from create_app() only when this process runs schedulers and
MONITORING_INTERVAL_HOURS is above zero.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


def start_monitor_scheduler(app) -> BackgroundScheduler | None:
    hours = app.config["GUARDIAN"].monitoring_interval_hours
    if hours <= 0:
        logger.info("Monitoring sweep disabled (MONITORING_INTERVAL_HOURS=%s)", hours)
        return None

    scheduler = BackgroundScheduler(daemon=True)

    def _sweep():
        with app.app_context():
            from guardian.monitoring.sweep import run_monitoring_sweep
            from guardian.services import get_scan_orchestrator
            run_monitoring_sweep(get_scan_orchestrator())

    scheduler.add_job(_sweep, "interval", hours=hours, id="monitoring_sweep", max_instances=1)
    scheduler.start()
    logger.info("Monitoring sweep scheduled every %d hour(s)", hours)
    return scheduler
