from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List

from ..config import CrawlConfig
from ..engines.base import CrawlReport
from ..engines.round_engine import run_crawl
from ..errors import CrawlerError
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Discover product URLs on e-commerce sites")
    p.add_argument("domains", nargs="*", help="Domain root URLs (default: built-in list)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--output-dir", type=str, default=None, help="Directory for result files")
    p.add_argument("--max-depth", type=int, default=None,
                   help="Max crawl depth for every domain without its own override")
    p.add_argument("--concurrency", type=int, default=None,
                   help="Pages per round per domain, for every domain without its own override")
    p.add_argument("--headful-fallback", action="store_true", default=None,
                   help="Retry failed or sparse pages in a headful browser on every domain")
    p.add_argument("--fetcher", type=str, default=None, help="Page fetcher dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of CLI crawl")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.domains:
        cfg.domains = list(args.domains)
    if args.output_dir:
        cfg.output_dir = args.output_dir
    if args.max_depth is not None:
        cfg.defaults["max_depth"] = args.max_depth
    if args.concurrency is not None:
        cfg.defaults["concurrency_limit"] = args.concurrency
    if args.headful_fallback:
        cfg.defaults["headful_fallback"] = True
    if args.fetcher:
        cfg.fetcher = args.fetcher
    if args.exporter:
        cfg.exporter = args.exporter

    cfg.validate()
    return cfg


def run_server(host: str, port: int) -> None:
    try:
        import uvicorn  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dep
        raise SystemExit("To run the API, install dependencies: pip install 'product-crawler[api]'") from exc
    uvicorn.run("product_crawler.apis.app:app", host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    try:
        cfg = _load_config(args)
    except (OSError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    try:
        report: CrawlReport = asyncio.run(run_crawl(cfg))
    except CrawlerError as exc:
        logger.error("Crawl failed: %s", exc)
        return 1

    logger.info("Visited: %s | Products: %s | Output: %s",
                report.visited_count, report.product_count, cfg.output_dir)
    return 0
