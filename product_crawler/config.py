from __future__ import annotations

from dataclasses import dataclass, field, fields, asdict
from typing import List, Dict, Any
from pathlib import Path
import os
import json

from .version import CONFIG_SCHEMA_VERSION
from .policies.base import validate_override
from .policies.sites import DOMAINS

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
)


@dataclass
class CrawlConfig:
    """
    Canonical run configuration passed throughout the system.
    Per-domain crawl policy lives in ``policies``; this only carries run-wide overrides of it.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    domains: List[str] = field(default_factory=lambda: list(DOMAINS))
    output_dir: str = "./results"
    # Policy fields applied to every domain, below the per-hostname overrides.
    defaults: Dict[str, Any] = field(default_factory=dict)
    # hostname -> policy fields, on top of the built-in table
    overrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    # Dotted paths for fetcher/exporter to allow runtime swapping without code changes.
    fetcher: str = "product_crawler.fetchers.browser:PlaywrightFetcher"
    exporter: str = "product_crawler.export.json_exporter:JSONExporter"
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1920
    viewport_height: int = 1080

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from environment variables (all optional).
        """
        cfg = cls()
        domains = [d.strip() for d in os.getenv("CRAWLER_DOMAINS", "").split(",") if d.strip()]
        if domains:
            cfg.domains = domains

        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        cfg.output_dir = _get("CRAWLER_OUTPUT_DIR", cfg.output_dir)
        cfg.fetcher = _get("CRAWLER_FETCHER", cfg.fetcher)
        cfg.exporter = _get("CRAWLER_EXPORTER", cfg.exporter)
        cfg.user_agent = _get("CRAWLER_USER_AGENT", cfg.user_agent)
        if os.getenv("CRAWLER_MAX_DEPTH"):
            cfg.defaults["max_depth"] = int(_get("CRAWLER_MAX_DEPTH", "0"))
        if os.getenv("CRAWLER_CONCURRENCY"):
            cfg.defaults["concurrency_limit"] = int(_get("CRAWLER_CONCURRENCY", "0"))
        return cfg

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Supports schema migration for future versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        unknown = set(data) - {fd.name for fd in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown config field(s) in {path}: {', '.join(sorted(unknown))}")
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.domains:
            raise ValueError("domains cannot be empty; provide at least one URL.")
        validate_override(self.defaults)
        for hostname, override in self.overrides.items():
            try:
                validate_override({**self.defaults, **override})
            except ValueError as exc:
                raise ValueError(f"{hostname}: {exc}") from exc
        # Validate output dir exists or is creatable
        Path(self.output_dir).mkdir(parents=True, exist_ok=True)


# v1 keys with no counterpart in the per-domain policy model.
_V1_DROPPED = ("allowed_domains", "request_timeout", "retries", "engine", "extra_adapters")

# v1 exporter paths predate the package rename.
_V1_EXPORTERS = {
    "export.json_exporter:JSONExporter": "product_crawler.export.json_exporter:JSONExporter",
    "export.csv_exporter:CSVExporter": "product_crawler.export.csv_exporter:CSVExporter",
}


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    schema = raw.get("schema_version", 1)

    if schema < 2:
        # v1 had flat crawl limits; they are policy defaults now.
        defaults = dict(raw.get("defaults") or {})
        if "max_depth" in raw:
            defaults.setdefault("max_depth", raw.pop("max_depth"))
        if "max_concurrency" in raw:
            defaults.setdefault("concurrency_limit", raw.pop("max_concurrency"))
        if "start_urls" in raw:
            raw.setdefault("domains", raw.pop("start_urls"))
        # v1 wrote a single file; results are now a directory of files.
        if "output_path" in raw:
            raw.setdefault("output_dir", str(Path(raw.pop("output_path")).parent))
        if raw.get("exporter") in _V1_EXPORTERS:
            raw["exporter"] = _V1_EXPORTERS[raw["exporter"]]
        for key in _V1_DROPPED:
            raw.pop(key, None)
        raw["defaults"] = defaults
        raw["schema_version"] = 2

    raw.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    return raw
