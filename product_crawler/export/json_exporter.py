from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Dict, List
from pathlib import Path

from .base import ExportResult, domain_slug
from ..errors import PersistenceError

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "all_products.json"


def iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JSONExporter:
    """
    One ``<host>_products.json`` per domain plus an ``all_products.json`` summary.
    """
    def export(self, data: Dict[str, List[str]], output_dir: str) -> ExportResult:
        out = Path(output_dir)
        result = ExportResult()
        try:
            out.mkdir(parents=True, exist_ok=True)
            for domain, products in data.items():
                path = out / f"{domain_slug(domain)}_products.json"
                payload = {
                    "domain": domain,
                    "productCount": len(products),
                    "crawlDate": iso_timestamp(),
                    "products": products,
                }
                self._write(path, payload)
                logger.info("Saved %d product URLs to %s", len(products), path)
                result.domain_files[domain] = str(path)

            summary = out / SUMMARY_FILENAME
            self._write(summary, {domain: products for domain, products in data.items()})
        except OSError as exc:
            raise PersistenceError(f"Could not write results to {out}: {exc}") from exc

        logger.info("Summary saved to %s", summary)
        result.summary_file = str(summary)
        return result

    @staticmethod
    def _write(path: Path, payload: object) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
