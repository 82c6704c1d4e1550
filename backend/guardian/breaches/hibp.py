# guardian/breaches/hibp.py
"""
HaveIBeenPwned breach source.

Uses: HIBP API v3, /breachedaccount/{account}?truncateResponse=false
Auth: hibp-api-key header (https://haveibeenpwned.com/API/Key)

Payload is a flat list of breach objects:
    {"Name", "Title", "Domain", "BreachDate", "Description",
     "DataClasses": [...], "PwnCount", "IsVerified", ...}
404 means the account is in no known breach.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List
from urllib.parse import quote

from guardian.errors import ProviderError
from .base import (
    BaseBreachSource, BreachLookup, NormalizedBreach,
    int_field, list_field, text_field,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://haveibeenpwned.com/api/v3"
PLACEHOLDER_KEY = "your-hibp-api-key"


class HIBPSource(BaseBreachSource):
    name = "hibp"
    description = "HaveIBeenPwned: breached account lookup"
    requires_api_key = True

    def is_available(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_KEY

    def lookup(self, email: str) -> BreachLookup:
        email = (email or "").strip().lower()
        r = self._get(
            f"{BASE_URL}/breachedaccount/{quote(email, safe='')}",
            params={"truncateResponse": "false"},
            headers={"hibp-api-key": self.api_key},
        )

        if r.status_code == 404:
            return BreachLookup(email=email, source=self.name)
        if r.status_code != 200:
            logger.warning("HIBP: HTTP %d for lookup", r.status_code)
            raise ProviderError(f"HIBP API error: {r.status_code}")

        data = self._json(r)
        if not isinstance(data, list):
            raise ProviderError("HIBP returned an unexpected payload")

        breaches = [self._normalize(item) for item in data if isinstance(item, dict)]
        logger.info("HIBP: %d breaches found", len(breaches))
        return BreachLookup(email=email, source=self.name, breaches=breaches)

    @staticmethod
    def _normalize(item: Dict[str, Any]) -> NormalizedBreach:
        name = text_field(item.get("Name"), "Unknown")
        return NormalizedBreach(
            name=name,
            title=text_field(item.get("Title"), name),
            domain=text_field(item.get("Domain"), "unknown"),
            date=text_field(item.get("BreachDate"), "unknown"),
            description=text_field(item.get("Description")),
            data_classes=list_field(item.get("DataClasses")),
            hit_count=int_field(item.get("PwnCount")),
            verified=bool(item.get("IsVerified", False)),
        )


def parse_breaches(payload: List[Dict[str, Any]]) -> List[NormalizedBreach]:
    """Normalize an already-fetched HIBP payload."""
    return [HIBPSource._normalize(item) for item in payload if isinstance(item, dict)]
