from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from .base import FetchOptions, PageFetcher
from ..config import CrawlConfig
from ..errors import FetchError

logger = logging.getLogger(__name__)


def create_session(user_agent: Optional[str] = None) -> ClientSession:
    """
    Create a shared aiohttp ClientSession.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=0)  # unlimited; concurrency managed by the engine
    headers = {"User-Agent": user_agent} if user_agent else None
    return aiohttp.ClientSession(connector=connector, headers=headers)


class HttpFetcher(PageFetcher):
    """
    Static fetcher for sites that serve their links without JavaScript.
    Subresources are never loaded, so resource blocking and the ready selector do not apply.
    """
    def __init__(self, config: CrawlConfig, *, headless: bool = True) -> None:
        self.headless = headless
        self.user_agent = config.user_agent
        self._session: Optional[ClientSession] = None

    async def open(self) -> None:
        if self._session is None:
            self._session = create_session(self.user_agent)

    async def close(self) -> None:
        if self._session is not None:
            session, self._session = self._session, None
            await session.close()

    async def fetch_page(self, url: str, options: FetchOptions) -> str:
        if self._session is None:
            raise FetchError(url, "HttpFetcher used before open()", self.mode)
        timeout = ClientTimeout(total=options.navigation_timeout_ms / 1000)
        try:
            async with self._session.get(url, timeout=timeout) as resp:
                resp.raise_for_status()
                return await resp.text()
        # wrong or unknown declared charset surfaces from resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError, LookupError) as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}", self.mode) from exc
