from __future__ import annotations


class CrawlerError(Exception):
    """Base class for errors raised by the crawler."""


class PolicyResolutionError(CrawlerError):
    """A domain root URL could not be turned into a hostname."""


class FetchError(CrawlerError):
    """Navigation, timeout or network failure reported by a page fetcher."""

    def __init__(self, url: str, message: str, mode: str | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.mode = mode


class PersistenceError(CrawlerError):
    """Writing crawl artifacts to disk failed."""
