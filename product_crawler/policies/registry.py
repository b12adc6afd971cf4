from __future__ import annotations

import logging
from importlib import metadata
from typing import Any, Dict, Mapping

from .base import DEFAULT_CONFIG, DomainConfig, merge_config
from .sites import DOMAIN_OVERRIDES
from ..errors import PolicyResolutionError
from ..utils.urls import hostname_of

logger = logging.getLogger(__name__)


class PolicyRegistry:
    """
    Per-domain policy lookup: a default config plus overrides keyed by hostname.
    Supports built-ins, config-defined overrides, and entry-point plugins.
    """
    def __init__(
        self,
        default: DomainConfig = DEFAULT_CONFIG,
        overrides: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self.default = default
        source = DOMAIN_OVERRIDES if overrides is None else overrides
        self._overrides: Dict[str, Dict[str, Any]] = {host: dict(o) for host, o in source.items()}

    # ---- Introspection / Management ----

    def register(self, hostname: str, override: Mapping[str, Any]) -> None:
        """Replace the override for ``hostname``."""
        merge_config(self.default, override)  # fail fast on unknown fields
        self._overrides[hostname.lower()] = dict(override)

    def update(self, overrides: Mapping[str, Mapping[str, Any]]) -> None:
        for hostname, override in overrides.items():
            self.register(hostname, override)

    def resolve(self, domain_root: str) -> DomainConfig:
        try:
            hostname = hostname_of(domain_root)
        except PolicyResolutionError as exc:
            logger.error("%s; using default policy", exc)
            return self.default
        return merge_config(self.default, self._overrides.get(hostname))

    # ---- Discovery ----

    def discover_entry_points(self, group: str = "product_crawler.policies") -> int:
        """
        Register policy overrides shipped by installed plugins.
        Each entry point must load a mapping of hostname -> override.
        Returns count of registered hostnames.
        """
        added = 0
        for ep in metadata.entry_points().select(group=group):
            try:
                table = ep.load()
                self.update(table)
            except Exception as exc:
                # plugins are optional
                logger.warning("Failed to load policy plugin %s: %r", ep.name, exc)
                continue
            added += len(table)
        return added
