# guardian/scans/orchestrator.py
"""
Scan orchestrator.

Coordinates one scan: normalize the subject email, check entitlement where
required, write the audit entry, query the breach source, classify every
hit and (for self-scans) persist it.

Flows:
    scan_own(user)          account email, always allowed, persisted (append-only)
    search(user, email)     arbitrary email, premium only, returned transiently
    monitor(user, email)    monitored email, persists breaches not yet recorded

Provider failures are caught here and surface as ScanFailed. Nothing is
persisted unless the lookup itself succeeded.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from guardian.audit.routes import log_audit
from guardian.breaches.base import BaseBreachSource, BreachLookup
from guardian.breaches.classifier import Exposure, classify, infer_exposure_type
from guardian.errors import BadRequest, EntitlementRequired, ProviderError, ScanFailed
from guardian.extensions import db
from guardian.models import ScanResult, User, now_utc
from guardian.subscriptions.entitlement import Entitlement, SubscriptionPolicy, normalize_email

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or "")) and len(value) <= 254


@dataclass
class ScanOutcome:
    scanned: str
    exposures: List[Exposure] = field(default_factory=list)
    results: List[ScanResult] = field(default_factory=list)
    demo: bool = False

    def to_dict(self) -> dict:
        if self.results:
            items = [result_to_exposure(r) for r in self.results]
        else:
            items = [exposure_to_item(e) for e in self.exposures]
        payload = {
            "exposures": items,
            "count": len(self.exposures),
            "scanned": self.scanned,
        }
        if self.demo:
            payload["demo"] = True
        return payload


class ScanOrchestrator:

    def __init__(
        self,
        source: BaseBreachSource,
        policy: SubscriptionPolicy,
        clock: Callable = now_utc,
    ):
        self.source = source
        self.policy = policy
        self.clock = clock

    # ── Public flows ────────────────────────────────────────────────

    def scan_own(self, user: User) -> ScanOutcome:
        email = normalize_email(user.email)
        if not email:
            raise BadRequest("No email to scan")

        log_audit(user_id=user.id, action="scan_own", email=email, at=self.clock())
        lookup = self._lookup(email, failure="Scan failed")

        exposures = [classify(b, email) for b in lookup]
        results = self._persist(user, exposures)
        logger.info("Self-scan for user %s: %d exposures", user.id, len(exposures))
        return ScanOutcome(scanned=email, exposures=exposures, results=results, demo=lookup.demo)

    def search(self, user: User, email: Optional[str]) -> ScanOutcome:
        entitlement = self.policy.classify(user.email, user.subscription, self.clock())
        if not entitlement.is_premium:
            raise EntitlementRequired(
                trialExpired=entitlement is Entitlement.TRIAL_EXPIRED,
                entitlement=entitlement.value,
            )

        if not isinstance(email, str):
            raise BadRequest("Valid email required")
        email = normalize_email(email)
        if not is_valid_email(email):
            raise BadRequest("Valid email required")

        log_audit(user_id=user.id, action="scan_search", email=email, at=self.clock())
        lookup = self._lookup(email, failure="Search failed")

        exposures = [classify(b, email) for b in lookup]
        logger.info("Premium search by user %s: %d exposures", user.id, len(exposures))
        return ScanOutcome(scanned=email, exposures=exposures, demo=lookup.demo)

    def monitor(self, user: User, email: str) -> ScanOutcome:
        email = normalize_email(email)

        log_audit(user_id=user.id, action="scan_monitor", email=email, at=self.clock())
        lookup = self._lookup(email, failure="Monitoring check failed")

        known = {
            name for (name,) in db.session.query(ScanResult.breach_name)
            .filter(ScanResult.user_id == user.id, ScanResult.email == email)
            .distinct()
        }
        exposures = [classify(b, email) for b in lookup]
        fresh = [e for e in exposures if e.breach_name not in known]
        results = self._persist(user, fresh)
        if fresh:
            logger.info("Monitoring: %d new exposures for user %s", len(fresh), user.id)
        return ScanOutcome(scanned=email, exposures=fresh, results=results, demo=lookup.demo)

    # ── Internals ───────────────────────────────────────────────────

    def _lookup(self, email: str, failure: str) -> BreachLookup:
        try:
            return self.source.lookup(email)
        except ProviderError as e:
            logger.warning("%s via %s: %s", failure, self.source.name, e.message)
            raise ScanFailed(failure) from e

    def _persist(self, user: User, exposures: List[Exposure]) -> List[ScanResult]:
        if not exposures:
            return []
        created = self.clock()
        rows = [
            ScanResult(
                user_id=user.id,
                email=e.email,
                breach_name=e.breach_name,
                breach_domain=e.breach_domain,
                breach_date=e.breach_date,
                breach_description=e.breach_description,
                data_classes=e.data_classes,
                severity=e.severity,
                source=e.source,
                created_at=created,
            )
            for e in exposures
        ]
        db.session.add_all(rows)
        db.session.commit()
        return rows


# ---------------------------------------------------------------------------
# Exposure items (stored results and unsaved search hits)
# ---------------------------------------------------------------------------

def _item(item_id, exposure_type, source, email, date, breach_name, breach_domain,
          breach_date, breach_description, data_classes, severity) -> dict:
    return {
        "id": item_id,
        "type": exposure_type,
        "source": source or breach_name,
        "data": email,
        "risk": severity or "medium",
        "date": date,
        "status": "active",
        "aiAssessment": breach_description or "Breach detected.",
        "breach_name": breach_name,
        "breach_domain": breach_domain,
        "breach_date": breach_date,
        "breach_description": breach_description,
        "data_classes": data_classes,
        "severity": severity,
    }


def result_to_exposure(r: ScanResult) -> dict:
    return _item(
        r.id,
        infer_exposure_type(r.data_classes),
        r.source,
        r.email,
        r.breach_date or (r.created_at.date().isoformat() if r.created_at else None),
        r.breach_name,
        r.breach_domain,
        r.breach_date,
        r.breach_description,
        r.data_classes,
        r.severity,
    )


def exposure_to_item(e: Exposure) -> dict:
    """Unsaved search hit, in the same item shape as a stored result (id is None)."""
    return _item(
        None,
        e.exposure_type,
        e.source,
        e.email,
        e.breach_date,
        e.breach_name,
        e.breach_domain,
        e.breach_date,
        e.breach_description,
        e.data_classes,
        e.severity,
    )
