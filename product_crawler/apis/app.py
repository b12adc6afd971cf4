from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

try:
    from fastapi import FastAPI, HTTPException
    from pydantic import BaseModel
except Exception as exc:  # pragma: no cover - optional dependency
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install 'product-crawler[api]'` "
        "or avoid using the API server."
    ) from exc

from ..config import CrawlConfig
from ..engines.round_engine import run_crawl
from ..errors import CrawlerError
from ..version import __version__

logger = logging.getLogger(__name__)

app = FastAPI(title="product_crawler API", version=__version__)


class CrawlRequest(BaseModel):
    domains: List[str]
    max_depth: Optional[int] = None
    concurrency: Optional[int] = None
    overrides: Optional[Dict[str, Dict[str, Any]]] = None
    fetcher: Optional[str] = None
    output_dir: Optional[str] = None  # results are only written when set


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/crawl")
async def crawl(req: CrawlRequest) -> Dict[str, Any]:
    cfg = CrawlConfig.from_env()
    cfg.domains = req.domains or cfg.domains
    if req.max_depth is not None:
        cfg.defaults["max_depth"] = req.max_depth
    if req.concurrency is not None:
        cfg.defaults["concurrency_limit"] = req.concurrency
    if req.overrides:
        cfg.overrides.update(req.overrides)
    if req.fetcher:
        cfg.fetcher = req.fetcher
    if req.output_dir:
        cfg.output_dir = req.output_dir

    try:
        cfg.validate()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        report = await run_crawl(cfg, persist=bool(req.output_dir))
    except CrawlerError as exc:
        logger.error("Crawl failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return {
        "visited": report.visited_count,
        "rounds": report.rounds,
        "discovered": report.discovered,
    }
