from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol
from urllib.parse import urlsplit


@dataclass
class ExportResult:
    domain_files: Dict[str, str] = field(default_factory=dict)  # domain -> path
    summary_file: Optional[str] = None


class Exporter(Protocol):
    def export(self, data: Dict[str, List[str]], output_dir: str) -> ExportResult:
        ...


def domain_slug(domain: str) -> str:
    """``https://www.example.com/`` -> ``www_example_com``."""
    host = urlsplit(domain).hostname or domain
    return "".join(c if c.isalnum() or c in "-_" else "_" for c in host.replace(".", "_"))
