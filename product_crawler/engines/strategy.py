from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .classifier import LinkClassifier, PageScan
from ..errors import FetchError
from ..fetchers.base import FetchOptions
from ..fetchers.pool import ExecutionContexts
from ..policies.base import DomainConfig

logger = logging.getLogger(__name__)


class FetchMode(enum.Enum):
    HEADLESS = "headless"
    HEADFUL = "headful"


@dataclass
class FetchOutcome:
    url: str
    html: str
    modes: Tuple[FetchMode, ...]
    scan: PageScan
    # set when the headful fallback recovered from a failed headless fetch
    headless_error: Optional[FetchError] = None

    @property
    def product_links(self):
        return self.scan.product_links

    @property
    def crawl_links(self):
        return self.scan.crawl_links


class FetchStrategy:
    """
    Headless first; escalate to a headful fetch when the headless one fails
    or finds fewer product links than the domain's threshold.
    """
    def __init__(self, contexts: ExecutionContexts, classifier: LinkClassifier) -> None:
        self.contexts = contexts
        self.classifier = classifier

    async def fetch(self, url: str, domain_root: str, config: DomainConfig) -> FetchOutcome:
        try:
            html = await self._load(url, config, FetchMode.HEADLESS)
        except FetchError as exc:
            if not config.headful_fallback:
                raise
            logger.info("Headless fetch failed for %s, trying headful mode as fallback...", url)
            try:
                html = await self._load(url, config, FetchMode.HEADFUL)
            except FetchError:
                logger.error("Both headless and headful mode failed for %s", url)
                raise
            scan = self.classifier.scan(html, url, domain_root, config)
            return FetchOutcome(url, html, (FetchMode.HEADFUL,), scan, headless_error=exc)

        scan = self.classifier.scan(html, url, domain_root, config)
        if not config.headful_fallback or len(scan.product_links) >= config.min_links_threshold:
            return FetchOutcome(url, html, (FetchMode.HEADLESS,), scan)

        logger.info(
            "Found %d product links in headless mode for %s (threshold %d), trying headful mode...",
            len(scan.product_links), url, config.min_links_threshold,
        )
        try:
            headful_html = await self._load(url, config, FetchMode.HEADFUL)
        except FetchError:
            # keep what the headless pass found
            return FetchOutcome(url, html, (FetchMode.HEADLESS,), scan)
        headful_scan = self.classifier.scan(headful_html, url, domain_root, config)
        return FetchOutcome(
            url, headful_html, (FetchMode.HEADLESS, FetchMode.HEADFUL), scan.union(headful_scan)
        )

    async def _load(self, url: str, config: DomainConfig, mode: FetchMode) -> str:
        headless = mode is FetchMode.HEADLESS
        options = FetchOptions.from_policy(config, block_resources=headless)
        logger.info("Loading %s in %s mode", url, mode.value)
        try:
            fetcher = self.contexts.headless if headless else await self.contexts.headful()
            return await fetcher.fetch_page(url, options)
        except FetchError as exc:
            logger.error("Error fetching %s in %s mode: %s", url, mode.value, exc)
            raise
