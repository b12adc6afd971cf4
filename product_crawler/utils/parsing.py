from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Iterator

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def iter_hrefs(soup: BeautifulSoup) -> Iterator[str]:
    """Raw ``href`` values of every anchor, in document order."""
    for a in soup.select("a[href]"):
        href = a.get("href")
        if href:
            yield href


def iter_jsonld(soup: BeautifulSoup) -> Iterator[Any]:
    """Decoded JSON-LD blocks; malformed blocks are skipped."""
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        payload = script.string or script.get_text() or ""
        try:
            yield json.loads(payload)
        except json.JSONDecodeError as exc:
            logger.debug("Skipping malformed JSON-LD block: %s", exc)


def has_product_markup(soup: BeautifulSoup) -> bool:
    """True if any JSON-LD block declares an item of type ``Product``."""
    return any(
        _is_product(item)
        for data in iter_jsonld(soup)
        for item in _iter_jsonld_items(data)
    )


def _iter_jsonld_items(data: Any) -> Iterable[Any]:
    if isinstance(data, list):
        for item in data:
            yield from _iter_jsonld_items(item)
    elif isinstance(data, dict):
        if "@graph" in data:
            yield from _iter_jsonld_items(data["@graph"])
        else:
            yield data


def _is_product(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    type_field = item.get("@type")
    if isinstance(type_field, list):
        return "Product" in type_field
    return type_field == "Product"
