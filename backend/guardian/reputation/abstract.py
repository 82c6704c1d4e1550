# guardian/reputation/abstract.py
"""
Abstract email reputation / validation client.

Uses: https://emailvalidation.abstractapi.com/v1/?api_key=...&email=...
Docs: https://www.abstractapi.com/email-verification-validation-api

The raw reply wraps most flags as {"value": bool, "text": "TRUE"}; only the
values are kept.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from guardian.breaches.base import USER_AGENT
from guardian.errors import ProviderError, ProviderNotConfigured

logger = logging.getLogger(__name__)

BASE_URL = "https://emailvalidation.abstractapi.com/v1/"

FLAG_FIELDS = (
    "is_free_email",
    "is_disposable_email",
    "is_catchall_email",
    "is_role_email",
    "is_mx_found",
    "is_smtp_valid",
)


def _flag(value: Any) -> Optional[bool]:
    if isinstance(value, dict):
        value = value.get("value")
    return value if isinstance(value, bool) else None


def _score(value: Any) -> Optional[float]:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


class AbstractReputationClient:

    def __init__(self, api_key: str = "", timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def fetch(self, email: str) -> Dict[str, Any]:
        if not self.configured:
            raise ProviderNotConfigured("Email reputation API not configured")

        email = (email or "").strip().lower()
        try:
            r = self.session.get(
                BASE_URL,
                params={"api_key": self.api_key, "email": email},
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Abstract API request failed: %s", e)
            raise ProviderError("Email reputation lookup failed") from e

        if r.status_code != 200:
            logger.warning("Abstract API error: HTTP %d", r.status_code)
            raise ProviderError(f"Abstract API error: {r.status_code}")

        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError("Email reputation lookup returned a malformed payload") from e
        if not isinstance(data, dict):
            raise ProviderError("Email reputation lookup returned a malformed payload")

        result = {
            "email": data.get("email") or email,
            "deliverability": data.get("deliverability"),
            "quality_score": _score(data.get("quality_score")),
        }
        for name in FLAG_FIELDS:
            result[name] = _flag(data.get(name))
        return result
