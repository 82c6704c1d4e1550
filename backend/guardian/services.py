# guardian/services.py
"""Accessors for the service objects create_app() attaches to the app,
plus the request body reader every JSON route shares."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from flask import current_app, request

from guardian.errors import BadRequest


def get_clock():
    return current_app.extensions["guardian.clock"]


def now() -> datetime:
    return get_clock()()


def get_config():
    return current_app.config["GUARDIAN"]


def get_policy():
    return current_app.extensions["guardian.policy"]


def get_breach_source():
    return current_app.extensions["guardian.breach_source"]


def get_payment_gateway():
    return current_app.extensions["guardian.payment_gateway"]


def get_reputation_client():
    return current_app.extensions["guardian.reputation_client"]


def get_scan_orchestrator():
    from guardian.scans.orchestrator import ScanOrchestrator
    return ScanOrchestrator(source=get_breach_source(), policy=get_policy(), clock=get_clock())


def json_body() -> Dict[str, Any]:
    """Parsed JSON object of the current request; {} when the body is empty."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise BadRequest("JSON object body required")
    return body


def str_field(body: Dict[str, Any], key: str) -> str:
    value = body.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise BadRequest(f"{key} must be a string")
    return value
