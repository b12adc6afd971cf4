from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from ..policies.base import DomainConfig


@dataclass(frozen=True)
class FetchOptions:
    navigation_timeout_ms: int
    page_timeout_ms: int
    wait_until: str = "domcontentloaded"
    ready_selector: str = "html"
    block_resource_types: Tuple[str, ...] = ()

    @classmethod
    def from_policy(cls, config: DomainConfig, *, block_resources: bool) -> "FetchOptions":
        return cls(
            navigation_timeout_ms=config.navigation_timeout_ms,
            page_timeout_ms=config.page_load_timeout_ms,
            wait_until=config.wait_until,
            ready_selector=config.wait_for_selector,
            block_resource_types=tuple(config.block_resources) if block_resources else (),
        )


class PageFetcher(ABC):
    """
    Turns a URL into rendered HTML. One instance is a long-lived execution
    context (e.g. a browser) shared by many fetches; ``close`` must be idempotent.
    """
    headless: bool = True

    @property
    def mode(self) -> str:
        return "headless" if self.headless else "headful"

    @abstractmethod
    async def open(self) -> None:  # pragma: no cover - interface
        ...

    @abstractmethod
    async def close(self) -> None:  # pragma: no cover - interface
        ...

    @abstractmethod
    async def fetch_page(self, url: str, options: FetchOptions) -> str:  # pragma: no cover - interface
        """Return the page HTML or raise FetchError."""
        ...
