from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .base import PageFetcher

logger = logging.getLogger(__name__)

FetcherFactory = Callable[[bool], PageFetcher]  # headless flag -> unopened fetcher


class ExecutionContexts:
    """
    The two long-lived fetchers of a crawl run.
    The headless one is opened by ``open()``; the headful one on first use.
    ``close()`` tears both down once and is safe to call again.
    """
    def __init__(self, factory: FetcherFactory) -> None:
        self._factory = factory
        self._headless: Optional[PageFetcher] = None
        self._headful: Optional[PageFetcher] = None
        self._headful_lock = asyncio.Lock()
        self._closed = False

    @property
    def headless(self) -> PageFetcher:
        if self._headless is None:
            raise RuntimeError("Execution contexts are not open")
        return self._headless

    @property
    def headful_started(self) -> bool:
        return self._headful is not None

    async def open(self) -> "ExecutionContexts":
        if self._closed:
            raise RuntimeError("Execution contexts already closed")
        if self._headless is None:
            fetcher = self._factory(True)
            await fetcher.open()
            self._headless = fetcher
        return self

    async def headful(self) -> PageFetcher:
        if self._headful is not None:
            return self._headful
        # launching suspends; concurrent first users must not launch twice
        async with self._headful_lock:
            if self._closed:
                raise RuntimeError("Execution contexts already closed")
            if self._headful is None:
                fetcher = self._factory(False)
                await fetcher.open()
                self._headful = fetcher
                logger.info("Initialized headful fetcher for fallback")
        return self._headful

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for fetcher in (self._headless, self._headful):
            if fetcher is None:
                continue
            try:
                await fetcher.close()
            except Exception as exc:
                logger.warning("Closing %s fetcher failed: %r", fetcher.mode, exc)
        self._headless = None
        self._headful = None

    async def __aenter__(self) -> "ExecutionContexts":
        return await self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
