# guardian/breaches/base.py
"""
Base classes for breach data sources.

Every provider (HaveIBeenPwned, LeakCheck, the offline demo set) implements
BaseBreachSource and returns the same NormalizedBreach shape. Provider field
names, nesting and missing values are resolved inside the adapter; nothing
provider-specific leaks to the classifier or the orchestrator.

To add a new provider:
    1. Create a module in guardian/breaches/
    2. Subclass BaseBreachSource and implement lookup()
    3. Register it in guardian/breaches/__init__.py PROVIDERS
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

import requests

from guardian.errors import ProviderError

logger = logging.getLogger(__name__)

USER_AGENT = "Guardian-BreachCheck/1.0"


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class NormalizedBreach:
    """
    Provider-neutral breach record. All fields are populated.

    Fields:
        name:          Provider's identifier for the breach, e.g. "Adobe"
        title:         Human-readable title, falls back to name
        domain:        Breached site domain, "unknown" when absent
        date:          Breach date as reported (YYYY-MM-DD or YYYY-MM), "unknown" when absent
        description:   Free text, "" when absent
        data_classes:  Kinds of data exposed, e.g. ["Email addresses", "Passwords"]
        hit_count:     Number of accounts in the breach, 0 when unknown
        verified:      Whether the provider considers the breach verified
    """
    name: str
    title: str = ""
    domain: str = "unknown"
    date: str = "unknown"
    description: str = ""
    data_classes: List[str] = field(default_factory=list)
    hit_count: int = 0
    verified: bool = False

    def __post_init__(self):
        if not self.title:
            self.title = self.name


@dataclass
class BreachLookup:
    """
    Result of one lookup. `demo` is True only for the offline demonstration
    dataset, so callers can tell fabricated results from real ones.
    """
    email: str
    source: str
    breaches: List[NormalizedBreach] = field(default_factory=list)
    demo: bool = False

    def __iter__(self) -> Iterator[NormalizedBreach]:
        return iter(self.breaches)

    def __len__(self) -> int:
        return len(self.breaches)


# ---------------------------------------------------------------------------
# Field parsing: every optional provider field is defaulted here, once
# ---------------------------------------------------------------------------

def text_field(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def int_field(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def list_field(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


# ---------------------------------------------------------------------------
# Abstract base class
# ---------------------------------------------------------------------------

class BaseBreachSource(ABC):

    name: str = "base"
    description: str = ""
    requires_api_key: bool = True

    def __init__(self, api_key: str = "", timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @abstractmethod
    def lookup(self, email: str) -> BreachLookup:
        """
        Return every breach the provider knows for this address.
        "Not found" is an empty result; any other failure raises ProviderError.
        """
        pass

    def is_available(self) -> bool:
        """Check if this source can run (API key configured, etc.)."""
        return bool(self.api_key) or not self.requires_api_key

    def _get(self, url: str, **kwargs) -> requests.Response:
        """Single GET with the configured timeout. Network failures become ProviderError."""
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        headers.update(kwargs.pop("headers", {}) or {})
        try:
            return self.session.get(url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.warning("%s: request timed out: %s", self.name, e)
            raise ProviderError(f"{self.name} request timed out") from e
        except requests.RequestException as e:
            logger.warning("%s: request failed: %s", self.name, e)
            raise ProviderError(f"{self.name} request failed") from e

    def _json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.warning("%s: malformed JSON payload (HTTP %s)", self.name, response.status_code)
            raise ProviderError(f"{self.name} returned a malformed payload") from e
