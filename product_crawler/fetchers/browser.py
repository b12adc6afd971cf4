from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional

from playwright.async_api import Browser, Page, Playwright, Route, async_playwright
from playwright.async_api import Error as PlaywrightError

from .base import FetchOptions, PageFetcher
from ..config import CrawlConfig
from ..errors import FetchError

logger = logging.getLogger(__name__)

_COMMON_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--window-size=1920,1080"]
_HEADLESS_ARGS = _COMMON_ARGS + [
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]

_EXTRA_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}


def app_data_dir() -> Optional[Path]:
    # Packaged Windows builds keep their own browser download next to the app data.
    base = os.getenv("LOCALAPPDATA")
    if not base:
        return None
    p = Path(base) / "product-crawler"
    p.mkdir(parents=True, exist_ok=True)
    return p


_data_dir = app_data_dir()
if _data_dir is not None:
    os.environ.setdefault("PLAYWRIGHT_BROWSERS_PATH", str(_data_dir / "ms-playwright"))


class PlaywrightFetcher(PageFetcher):
    """
    Chromium rendered through Playwright. One browser per instance; every fetch
    gets its own browser context and page, closed on every exit path.
    """
    def __init__(self, config: CrawlConfig, *, headless: bool = True) -> None:
        self.headless = headless
        self.user_agent = config.user_agent
        self.viewport = {"width": config.viewport_width, "height": config.viewport_height}
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def open(self) -> None:
        if self._browser is not None:
            return
        args: List[str] = _HEADLESS_ARGS if self.headless else _COMMON_ARGS
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless, args=args)
        except PlaywrightError as exc:
            await self.close()
            raise FetchError("", f"Could not launch {self.mode} browser: {exc}", self.mode) from exc
        logger.info("%s browser initialized", self.mode.capitalize())

    async def close(self) -> None:
        browser, self._browser = self._browser, None
        pw, self._playwright = self._playwright, None
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.warning("Closing %s browser failed: %r", self.mode, exc)
            else:
                logger.info("%s browser closed", self.mode.capitalize())
        if pw is not None:
            await pw.stop()

    @asynccontextmanager
    async def _page(self) -> AsyncIterator[Page]:
        if self._browser is None:
            raise RuntimeError("PlaywrightFetcher used before open()")
        context = await self._browser.new_context(
            user_agent=self.user_agent,
            viewport=self.viewport,
            extra_http_headers=_EXTRA_HEADERS,
        )
        try:
            yield await context.new_page()
        finally:
            try:
                await context.close()
            except PlaywrightError as exc:
                logger.debug("Closing page context failed: %r", exc)

    async def fetch_page(self, url: str, options: FetchOptions) -> str:
        try:
            async with self._page() as page:
                page.set_default_navigation_timeout(options.navigation_timeout_ms)
                page.set_default_timeout(options.page_timeout_ms)

                blocked = frozenset(options.block_resource_types)
                if blocked:
                    async def _block(route: Route) -> None:
                        if route.request.resource_type in blocked:
                            await route.abort()
                        else:
                            await route.continue_()

                    await page.route("**/*", _block)

                await page.goto(url, wait_until=options.wait_until)
                await page.wait_for_selector(options.ready_selector)
                return await page.content()
        except PlaywrightError as exc:
            # playwright's TimeoutError subclasses Error
            raise FetchError(url, str(exc), self.mode) from exc
