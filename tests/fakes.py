"""In-memory page fetchers used across the test-suite."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Set, Tuple

from product_crawler.errors import FetchError
from product_crawler.fetchers.base import FetchOptions, PageFetcher


class FakeWeb:
    """
    A tiny fake internet: URL -> HTML, plus URLs that fail in a given mode.
    Every fetch is recorded as (url, mode, options).
    """

    def __init__(self, pages: Optional[Dict[str, str]] = None) -> None:
        self.pages: Dict[str, str] = dict(pages or {})
        self.headful_pages: Dict[str, str] = {}
        self.fail: Set[Tuple[str, str]] = set()
        self.calls: List[Tuple[str, str, FetchOptions]] = []
        self.opened: List[str] = []
        self.closed: List[str] = []

    def fail_in(self, url: str, *modes: str) -> None:
        for mode in modes:
            self.fail.add((url, mode))

    def factory(self, headless: bool) -> "FakeFetcher":
        return FakeFetcher(self, headless)

    def urls_fetched(self, mode: Optional[str] = None) -> List[str]:
        return [url for url, m, _ in self.calls if mode is None or m == mode]


class FakeFetcher(PageFetcher):
    def __init__(self, web: FakeWeb, headless: bool) -> None:
        self.web = web
        self.headless = headless
        self.is_open = False

    async def open(self) -> None:
        self.is_open = True
        self.web.opened.append(self.mode)

    async def close(self) -> None:
        if self.is_open:
            self.is_open = False
            self.web.closed.append(self.mode)

    async def fetch_page(self, url: str, options: FetchOptions) -> str:
        assert self.is_open, "fetch on a closed fetcher"
        self.web.calls.append((url, self.mode, options))
        await asyncio.sleep(0)
        if (url, self.mode) in self.web.fail:
            raise FetchError(url, "Navigation timeout exceeded", self.mode)
        if not self.headless and url in self.web.headful_pages:
            return self.web.headful_pages[url]
        if url not in self.web.pages:
            raise FetchError(url, "net::ERR_NAME_NOT_RESOLVED", self.mode)
        return self.web.pages[url]


#: Pages served by ``StaticSiteFetcher`` (used where only a dotted path can be passed).
STATIC_SITE: Dict[str, str] = {
    "https://shop.test/": '<a href="/p/1">one</a><a href="/about">about</a>',
    "https://shop.test/about": '<a href="/p/2">two</a>',
}


class StaticSiteFetcher(PageFetcher):
    def __init__(self, config, *, headless: bool = True) -> None:
        self.headless = headless

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def fetch_page(self, url: str, options: FetchOptions) -> str:
        try:
            return STATIC_SITE[url]
        except KeyError:
            raise FetchError(url, "not found", self.mode) from None


def page(*hrefs: str, jsonld: Optional[str] = None) -> str:
    anchors = "".join(f'<a href="{h}">link</a>' for h in hrefs)
    script = f'<script type="application/ld+json">{jsonld}</script>' if jsonld is not None else ""
    return f"<html><head>{script}</head><body>{anchors}</body></html>"
