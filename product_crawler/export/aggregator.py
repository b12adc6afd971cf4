from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .base import Exporter, ExportResult
from .json_exporter import JSONExporter


class ResultAggregator:
    """Ordered, duplicate-free product URLs per domain."""

    def __init__(self, domains: Iterable[str] = ()) -> None:
        self._results: Dict[str, List[str]] = {d: [] for d in domains}

    def accept(self, domain: str, product_urls: Iterable[str]) -> int:
        """Append URLs not seen before for ``domain``; returns how many were new."""
        found = self._results.setdefault(domain, [])
        added = 0
        for url in product_urls:
            if url not in found:
                found.append(url)
                added += 1
        return added

    @property
    def results(self) -> Dict[str, List[str]]:
        return {domain: list(urls) for domain, urls in self._results.items()}

    @property
    def total(self) -> int:
        return sum(len(v) for v in self._results.values())

    def persist(self, output_dir: str, exporter: Optional[Exporter] = None) -> ExportResult:
        exporter = exporter or JSONExporter()
        return exporter.export(self.results, output_dir)
