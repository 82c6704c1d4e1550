# guardian/breaches/demo.py
"""
Offline demonstration dataset.

Used only when the configured provider has no usable API key, so the scan
pipeline stays exercisable in development. Every lookup is flagged demo=True.
"""

from __future__ import annotations

from .base import BaseBreachSource, BreachLookup
from .hibp import parse_breaches

DEMO_PAYLOAD = [
    {
        "Name": "Adobe",
        "Title": "Adobe",
        "Domain": "adobe.com",
        "BreachDate": "2013-10-04",
        "Description": "In October 2013, 153 million Adobe accounts were breached.",
        "DataClasses": ["Email addresses", "Password hints", "Usernames"],
        "IsVerified": True,
        "PwnCount": 152445165,
    },
    {
        "Name": "LinkedIn",
        "Title": "LinkedIn",
        "Domain": "linkedin.com",
        "BreachDate": "2012-05-01",
        "Description": "LinkedIn breach affecting millions of accounts.",
        "DataClasses": ["Email addresses", "Passwords", "Usernames"],
        "IsVerified": True,
        "PwnCount": 164611595,
    },
    {
        "Name": "Collection1",
        "Title": "Collection #1",
        "Domain": "multiple",
        "BreachDate": "2018-12-01",
        "Description": "Collection of credentials from various breaches.",
        "DataClasses": ["Email addresses", "Passwords"],
        "IsVerified": True,
        "PwnCount": 773000000,
    },
]


class DemoBreachSource(BaseBreachSource):
    name = "demo"
    description = "Fixed synthetic breaches for development without provider keys"
    requires_api_key = False

    def lookup(self, email: str) -> BreachLookup:
        return BreachLookup(
            email=(email or "").strip().lower(),
            source=self.name,
            breaches=parse_breaches(DEMO_PAYLOAD),
            demo=True,
        )
