# guardian/breaches/leakcheck.py
"""
LeakCheck breach source.

Uses: LeakCheck API v2, /query/{email}?type=email&limit=100
Auth: X-API-Key header (https://leakcheck.io)

Reply shape:
    {"success": true, "found": 2, "result": [
        {"source": {"name": "Adobe", "breach_date": "2013-10", "unverified": 0},
         "fields": ["email", "password"], ...},
        ...
    ]}
Older and aggregated records put name/domain/date/count on the item itself
instead of the nested "source" object; both are accepted.
"""

from __future__ import annotations

import logging
from typing import Any, Dict
from urllib.parse import quote

from guardian.errors import ProviderError
from .base import (
    BaseBreachSource, BreachLookup, NormalizedBreach,
    int_field, list_field, text_field,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://leakcheck.io/api/v2"
MIN_KEY_LENGTH = 40


class LeakCheckSource(BaseBreachSource):
    name = "leakcheck"
    description = "LeakCheck: leaked credential search"
    requires_api_key = True

    def is_available(self) -> bool:
        return len(self.api_key or "") >= MIN_KEY_LENGTH

    def lookup(self, email: str) -> BreachLookup:
        email = (email or "").strip().lower()
        r = self._get(
            f"{BASE_URL}/query/{quote(email, safe='')}",
            params={"type": "email", "limit": 100},
            headers={"X-API-Key": self.api_key},
        )

        if r.status_code == 404:
            return BreachLookup(email=email, source=self.name)
        if r.status_code != 200:
            logger.warning("LeakCheck: HTTP %d for lookup", r.status_code)
            raise ProviderError(f"LeakCheck API error: {r.status_code}")

        data = self._json(r)
        if not isinstance(data, dict):
            raise ProviderError("LeakCheck returned an unexpected payload")

        if not data.get("success"):
            error = text_field(data.get("error")).lower()
            if "not found" in error:
                return BreachLookup(email=email, source=self.name)
            logger.warning("LeakCheck: query unsuccessful: %s", error or "no error given")
            raise ProviderError("LeakCheck query failed")

        result = data.get("result") or []
        if not isinstance(result, list):
            raise ProviderError("LeakCheck returned an unexpected payload")

        breaches = [self._normalize(item) for item in result if isinstance(item, dict)]
        logger.info("LeakCheck: %d breaches found", len(breaches))
        return BreachLookup(email=email, source=self.name, breaches=breaches)

    @staticmethod
    def _normalize(item: Dict[str, Any]) -> NormalizedBreach:
        src = item.get("source")
        if not isinstance(src, dict):
            src = item

        name = text_field(src.get("name") or item.get("name"), "Unknown")
        data_classes = list_field(item.get("fields")) or ["Email addresses"]

        return NormalizedBreach(
            name=name,
            title=name,
            domain=text_field(src.get("domain") or item.get("domain"), "unknown"),
            date=text_field(item.get("date") or src.get("breach_date") or src.get("date"), "unknown"),
            description=text_field(src.get("description") or item.get("description"), "Breach detected."),
            data_classes=data_classes,
            hit_count=int_field(item.get("count") or item.get("pwn_count") or src.get("count")),
            verified=not bool(src.get("unverified", 0)),
        )
