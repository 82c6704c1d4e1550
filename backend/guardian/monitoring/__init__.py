# guardian/monitoring/__init__.py
"""
Monitoring module: premium watch list of email addresses.

Components:
    routes.py   : API endpoints (watch list CRUD)
    sweep.py    : re-checks monitored emails, records new exposures
    scheduler.py: APScheduler job that runs the sweep periodically
"""

from .routes import monitoring_bp

__all__ = ["monitoring_bp"]
