from __future__ import annotations

import csv
import logging
from typing import Dict, List
from pathlib import Path

from .base import ExportResult
from ..errors import PersistenceError

logger = logging.getLogger(__name__)


class CSVExporter:
    """
    Writes one ``domain,url`` row per product into ``all_products.csv``.
    """

    _headers = ["domain", "url"]
    filename = "all_products.csv"

    def export(self, data: Dict[str, List[str]], output_dir: str) -> ExportResult:
        path = Path(output_dir) / self.filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                w = csv.writer(f)
                w.writerow(self._headers)
                for domain, products in data.items():
                    for url in products:
                        w.writerow([domain, url])
        except OSError as exc:
            raise PersistenceError(f"Could not write {path}: {exc}") from exc
        logger.info("Saved %d product URLs to %s", sum(len(v) for v in data.values()), path)
        return ExportResult(summary_file=str(path))
