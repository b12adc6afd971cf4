from __future__ import annotations

from typing import Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from ..errors import PolicyResolutionError

#: Query parameters dropped during normalization.
TRACKING_PARAMS = frozenset({"utm_source", "utm_medium", "utm_campaign", "ref"})

#: Link targets never worth rendering.
SKIP_EXTENSIONS = (".jpg", ".png", ".pdf")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str, base: Optional[str] = None) -> str:
    """
    Canonical form used as page identity: no fragment, no tracking parameters,
    lowercase scheme/host, no default port, no trailing slash on the path.
    Best effort: anything that is not an absolute URL is returned unchanged.
    """
    try:
        absolute = urljoin(base, url) if base else url
        parts = urlsplit(absolute)
        if not parts.scheme or not parts.netloc:
            return url
        netloc = _normalize_netloc(parts.scheme.lower(), parts)
    except ValueError:
        return url

    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in TRACKING_PARAMS]
    path = parts.path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), netloc, path, urlencode(query), ""))


def _normalize_netloc(scheme: str, parts) -> str:
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = parts.port  # raises ValueError on garbage ports
    netloc = host
    if port is not None and _DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{host}:{port}"
    userinfo, sep, _ = parts.netloc.rpartition("@")
    if sep:
        netloc = f"{userinfo}@{netloc}"
    return netloc


def resolve_link(raw_link: str, page_url: str) -> Optional[str]:
    """Absolute, normalized form of ``raw_link`` relative to ``page_url``; None when unresolvable."""
    try:
        absolute = urljoin(page_url, raw_link.strip())
    except ValueError:
        return None
    return normalize_url(absolute)


def origin_of(url: str) -> Optional[Tuple[str, str, Optional[int]]]:
    try:
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        port = parts.port or _DEFAULT_PORTS.get(scheme)
    except ValueError:
        return None
    if not scheme or not parts.hostname:
        return None
    return scheme, parts.hostname, port


def same_origin(url: str, root: str) -> bool:
    a = origin_of(url)
    return a is not None and a == origin_of(root)


def hostname_of(url: str) -> str:
    """Hostname of a domain root URL; raises PolicyResolutionError when there is none."""
    try:
        host = urlsplit(url).hostname
    except ValueError as exc:
        raise PolicyResolutionError(f"Invalid domain URL: {url}") from exc
    if not host:
        raise PolicyResolutionError(f"Invalid domain URL: {url}")
    return host


def has_skipped_extension(url: str) -> bool:
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url
    return path.lower().endswith(SKIP_EXTENSIONS)
