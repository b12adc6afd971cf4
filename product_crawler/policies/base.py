from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Pattern, Tuple


def _compile_all(patterns: Any) -> Tuple[Pattern[str], ...]:
    if isinstance(patterns, (str, re.Pattern)):
        patterns = [patterns]
    return tuple(p if isinstance(p, re.Pattern) else re.compile(p) for p in patterns)


@dataclass(frozen=True)
class DomainConfig:
    """
    Resolved crawl policy for one origin.
    Patterns may be given as strings (e.g. from a JSON config) and are compiled on creation.
    """
    concurrency_limit: int = 100
    max_depth: int = 20
    page_load_timeout_ms: int = 10_000
    navigation_timeout_ms: int = 100_000
    block_resources: Tuple[str, ...] = ("image", "stylesheet", "font", "media")
    wait_for_selector: str = "html"
    wait_until: str = "domcontentloaded"
    product_patterns: Tuple[Pattern[str], ...] = field(default_factory=lambda: _compile_all([
        r"/products/",
        r"/p/",
        r"/items/",
        r"/product/",
        r"/prod/",
        r"/p-[a-zA-Z0-9]+",
    ]))
    headful_fallback: bool = False
    min_links_threshold: int = 1
    exclude_url_patterns: Tuple[Pattern[str], ...] = ()

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        blocked = self.block_resources
        if isinstance(blocked, str):
            blocked = [blocked]
        object.__setattr__(self, "block_resources", tuple(blocked))
        object.__setattr__(self, "product_patterns", _compile_all(self.product_patterns))
        object.__setattr__(self, "exclude_url_patterns", _compile_all(self.exclude_url_patterns))

    def is_product_url(self, url: str) -> bool:
        return any(p.search(url) for p in self.product_patterns)

    def is_excluded(self, url: str) -> bool:
        return any(p.search(url) for p in self.exclude_url_patterns)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("product_patterns", "exclude_url_patterns"):
                value = [p.pattern for p in value]
            elif isinstance(value, tuple):
                value = list(value)
            out[f.name] = value
        return out


DEFAULT_CONFIG = DomainConfig()

POLICY_FIELDS = frozenset(f.name for f in fields(DomainConfig))


def merge_config(base: DomainConfig, override: Mapping[str, Any] | None) -> DomainConfig:
    """
    Shallow field-level merge: every field present in ``override`` replaces the base value.
    List-valued fields are replaced as a whole, never merged element-wise.
    """
    if not override:
        return base
    unknown = set(override) - POLICY_FIELDS
    if unknown:
        raise ValueError(f"Unknown policy field(s): {', '.join(sorted(unknown))}")
    return replace(base, **dict(override))


def validate_override(override: Mapping[str, Any]) -> None:
    """Reject overrides that would produce an unusable policy."""
    merged = merge_config(DEFAULT_CONFIG, override)
    if merged.concurrency_limit <= 0:
        raise ValueError("concurrency_limit must be > 0")
    if merged.max_depth < 1:
        raise ValueError("max_depth must be >= 1")
    if merged.min_links_threshold < 0:
        raise ValueError("min_links_threshold must be >= 0")

