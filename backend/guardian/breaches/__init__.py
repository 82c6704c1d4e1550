# guardian/breaches/__init__.py
"""
Breach source registry.

build_breach_source() picks the provider named by BREACH_PROVIDER and falls
back to the demo dataset when that provider has no usable API key.

Providers:
    leakcheck: LeakCheck v2 (default)
    hibp:      HaveIBeenPwned v3
"""
from __future__ import annotations

import logging
from typing import Dict, Type

from .base import BaseBreachSource, BreachLookup, NormalizedBreach
from .demo import DemoBreachSource
from .hibp import HIBPSource
from .leakcheck import LeakCheckSource

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[BaseBreachSource]] = {
    "leakcheck": LeakCheckSource,
    "hibp": HIBPSource,
}


def build_breach_source(config) -> BaseBreachSource:
    provider = (config.breach_provider or "leakcheck").lower()
    cls = PROVIDERS.get(provider)
    if cls is None:
        raise RuntimeError(
            f"Unknown BREACH_PROVIDER '{provider}'. Choose one of: {', '.join(sorted(PROVIDERS))}"
        )

    api_key = config.hibp_api_key if provider == "hibp" else config.leakcheck_api_key
    source = cls(api_key=api_key, timeout=config.provider_timeout)
    if not source.is_available():
        logger.warning(
            "No usable API key for breach provider '%s', serving the demo dataset", provider
        )
        return DemoBreachSource(timeout=config.provider_timeout)
    return source


__all__ = [
    "BaseBreachSource",
    "BreachLookup",
    "NormalizedBreach",
    "DemoBreachSource",
    "HIBPSource",
    "LeakCheckSource",
    "PROVIDERS",
    "build_breach_source",
]
