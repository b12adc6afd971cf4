from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from abc import ABC, abstractmethod

from ..export.base import ExportResult


@dataclass(frozen=True)
class CrawlTask:
    url: str
    depth: int  # seed pages are depth 1
    domain: str  # configured domain root the task belongs to


@dataclass
class CrawlReport:
    discovered: Dict[str, List[str]] = field(default_factory=dict)  # domain -> product URLs
    visited_count: int = 0
    rounds: int = 0
    duration_s: float = 0.0
    export: Optional[ExportResult] = None

    @property
    def product_count(self) -> int:
        return sum(len(v) for v in self.discovered.values())


class CrawlEngine(ABC):
    """
    Abstract engine interface. Implementations own the crawl lifecycle.
    """
    @abstractmethod
    async def crawl(self) -> CrawlReport:  # pragma: no cover - interface
        ...
