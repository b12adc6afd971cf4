from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Set

from ..policies.base import DomainConfig
from ..utils.parsing import has_product_markup, iter_hrefs, parse_html
from ..utils.urls import has_skipped_extension, normalize_url, resolve_link, same_origin


class LinkKind(enum.Enum):
    PRODUCT = "product"
    CRAWLABLE = "crawlable"
    IGNORED = "ignored"


@dataclass
class PageScan:
    """Distinct product and crawlable links of one page, in first-seen order."""
    product_links: List[str] = field(default_factory=list)
    crawl_links: List[str] = field(default_factory=list)

    def add_product(self, url: str) -> None:
        if url not in self.product_links:
            self.product_links.append(url)

    def add_crawl(self, url: str) -> None:
        if url not in self.crawl_links:
            self.crawl_links.append(url)

    def union(self, other: "PageScan") -> "PageScan":
        merged = PageScan(list(self.product_links), list(self.crawl_links))
        for url in other.product_links:
            merged.add_product(url)
        for url in other.crawl_links:
            merged.add_crawl(url)
        return merged


class LinkClassifier:
    """
    Sorts the links of a page into product pages, pages worth crawling, and noise.
    Shares the run's visited set so already-fetched pages are never re-queued.
    """
    def __init__(self, visited: Optional[Set[str]] = None) -> None:
        self.visited: Set[str] = visited if visited is not None else set()

    def classify(self, raw_link: str, page_url: str, domain_root: str, config: DomainConfig) -> LinkKind:
        url = resolve_link(raw_link, page_url)
        if url is None:
            return LinkKind.IGNORED
        return self._kind_of(raw_link, url, domain_root, config)

    def scan(self, html: str, page_url: str, domain_root: str, config: DomainConfig) -> PageScan:
        soup = parse_html(html)
        result = PageScan()
        for href in iter_hrefs(soup):
            url = resolve_link(href, page_url)
            if url is None:
                continue
            kind = self._kind_of(href, url, domain_root, config)
            if kind is LinkKind.PRODUCT:
                result.add_product(url)
            elif kind is LinkKind.CRAWLABLE:
                result.add_crawl(url)

        # Pages that only declare themselves products in their metadata.
        if has_product_markup(soup):
            result.add_product(normalize_url(page_url))
        return result

    def _kind_of(self, raw_link: str, url: str, domain_root: str, config: DomainConfig) -> LinkKind:
        if config.is_product_url(url):
            return LinkKind.PRODUCT

        raw = raw_link.strip().lower()
        if not raw or raw.startswith("#") or raw.startswith("javascript:"):
            return LinkKind.IGNORED
        if has_skipped_extension(url):
            return LinkKind.IGNORED
        if not same_origin(url, domain_root):
            return LinkKind.IGNORED
        if url in self.visited:
            return LinkKind.IGNORED
        if config.is_excluded(url):
            return LinkKind.IGNORED
        return LinkKind.CRAWLABLE
