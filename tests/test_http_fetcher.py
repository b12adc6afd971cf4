"""
Tests for the static aiohttp page fetcher.
"""

import asyncio

import pytest
from aiohttp import web as aioweb
from aiohttp import test_utils

from product_crawler.config import CrawlConfig
from product_crawler.errors import FetchError
from product_crawler.fetchers.base import FetchOptions
from product_crawler.fetchers.http import HttpFetcher

OPTIONS = FetchOptions(navigation_timeout_ms=5000, page_timeout_ms=1000)


def make_app():
    async def index(request):
        return aioweb.Response(
            text=f'<a href="/p/1">{request.headers.get("User-Agent")}</a>', content_type="text/html",
        )

    async def bad_charset(request):
        return aioweb.Response(body=b'<a href="/p/\xff">x</a>', headers={"Content-Type": "text/html; charset=utf-8"})

    app = aioweb.Application()
    app.router.add_get("/", index)
    app.router.add_get("/bad-charset", bad_charset)
    return app


def fetch(path):
    async def _run():
        async with test_utils.TestServer(make_app()) as server:
            fetcher = HttpFetcher(CrawlConfig(user_agent="test-agent/1.0"))
            await fetcher.open()
            try:
                return await fetcher.fetch_page(str(server.make_url(path)), OPTIONS)
            finally:
                await fetcher.close()
                await fetcher.close()

    return asyncio.run(_run())


class TestHttpFetcher:

    def test_returns_body(self):
        html = fetch("/")
        assert '<a href="/p/1">' in html
        assert "test-agent/1.0" in html

    def test_http_error_raises_fetch_error(self):
        with pytest.raises(FetchError) as info:
            fetch("/missing")
        assert info.value.url.endswith("/missing")
        assert info.value.mode == "headless"

    def test_undecodable_body_raises_fetch_error(self):
        with pytest.raises(FetchError, match="UnicodeDecodeError"):
            fetch("/bad-charset")

    def test_requires_open(self):
        fetcher = HttpFetcher(CrawlConfig())
        with pytest.raises(FetchError):
            asyncio.run(fetcher.fetch_page("http://127.0.0.1/", OPTIONS))
