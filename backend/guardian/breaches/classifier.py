# guardian/breaches/classifier.py
"""
Exposure classifier.

Turns a NormalizedBreach plus the subject email into an Exposure with a
severity and an inferred exposure type. Breach sources never classify;
this module never fetches.

Severity (by accounts in the breach):
    > 100,000,000  high
    > 1,000,000    medium
    otherwise      low

Type (first match in the lower-cased data classes):
    password -> Credentials, email -> Email, phone -> Phone,
    address -> Address, otherwise Account
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .base import NormalizedBreach

HIGH_THRESHOLD = 100_000_000
MEDIUM_THRESHOLD = 1_000_000

TYPE_RULES = (
    ("password", "Credentials"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("address", "Address"),
)
DEFAULT_TYPE = "Account"


def classify_severity(hit_count: Optional[int]) -> str:
    count = hit_count or 0
    if count > HIGH_THRESHOLD:
        return "high"
    if count > MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def infer_exposure_type(data_classes: Optional[str]) -> str:
    joined = (data_classes or "").lower()
    for needle, label in TYPE_RULES:
        if needle in joined:
            return label
    return DEFAULT_TYPE


@dataclass
class Exposure:
    email: str
    breach_name: str
    breach_domain: str
    breach_date: str
    breach_description: str
    data_classes: str
    severity: str
    source: str
    exposure_type: str


def classify(breach: NormalizedBreach, subject_email: str) -> Exposure:
    data_classes = ", ".join(breach.data_classes)
    return Exposure(
        email=subject_email,
        breach_name=breach.name,
        breach_domain=breach.domain or "unknown",
        breach_date=breach.date or "unknown",
        breach_description=breach.description or "",
        data_classes=data_classes,
        severity=classify_severity(breach.hit_count),
        source=breach.title or breach.name,
        exposure_type=infer_exposure_type(data_classes),
    )
