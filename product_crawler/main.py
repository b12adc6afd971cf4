from __future__ import annotations

from typing import List, Optional

from .ui.cli import run_cli


def main(argv: Optional[List[str]] = None) -> int:
    """Console script ``product-crawler``; argv defaults to the process arguments."""
    return run_cli(argv)


if __name__ == "__main__":
    raise SystemExit(main())
