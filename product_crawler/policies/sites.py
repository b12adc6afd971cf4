"""Built-in crawl targets and their policy overrides, keyed by hostname."""

from __future__ import annotations

from typing import Any, Dict, List

DOMAINS: List[str] = [
    "https://www.tatacliq.com/",
    "https://www.virgio.com/",
    "https://www.nykaafashion.com/",
    "https://www.westside.com/",
]

DOMAIN_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "www.tatacliq.com": {
        "concurrency_limit": 50,
        "headful_fallback": True,
    },
    "www.virgio.com": {"max_depth": 10},
    "www.nykaafashion.com": {"max_depth": 5},
    "www.westside.com": {
        "max_depth": 10,
        "exclude_url_patterns": ["/apps/buy/"],
        "concurrency_limit": 100,
        "headful_fallback": True,
    },
}
