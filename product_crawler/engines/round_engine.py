from __future__ import annotations

import asyncio
import enum
import logging
import time
from typing import Dict, List, Optional, Set

from .base import CrawlEngine, CrawlReport, CrawlTask
from .classifier import LinkClassifier
from .frontier import Frontier
from .strategy import FetchStrategy
from ..config import CrawlConfig
from ..errors import FetchError
from ..export.aggregator import ResultAggregator
from ..export.base import Exporter
from ..fetchers.pool import ExecutionContexts, FetcherFactory
from ..policies.base import DEFAULT_CONFIG, DomainConfig, merge_config
from ..policies.registry import PolicyRegistry
from ..utils.loader import load_symbol
from ..utils.urls import normalize_url

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    RUNNING = "running"
    DONE = "done"


class RoundCrawlEngine(CrawlEngine):
    """
    Round-based crawler over a fixed set of domains.
    - Each round drains up to ``concurrency_limit`` tasks per domain and awaits them all.
    - Fetching and link classification are delegated to FetchStrategy.
    - Visited set and frontier are only touched between awaits, so no locks are needed.
    """
    def __init__(
        self,
        domains: List[str],
        contexts: ExecutionContexts,
        registry: PolicyRegistry | None = None,
        aggregator: ResultAggregator | None = None,
    ) -> None:
        self.domains = list(dict.fromkeys(domains))
        self.registry = registry or PolicyRegistry()
        self.aggregator = aggregator or ResultAggregator(self.domains)
        self.visited: Set[str] = set()
        self.frontier = Frontier()
        self.strategy = FetchStrategy(contexts, LinkClassifier(self.visited))
        self.policies: Dict[str, DomainConfig] = {}
        self.gates: Dict[str, asyncio.Semaphore] = {}
        self.state = EngineState.DONE
        self.rounds = 0

    async def crawl(self) -> CrawlReport:
        started = time.monotonic()
        for domain in self.domains:
            policy = self.registry.resolve(domain)
            self.policies[domain] = policy
            logger.debug("Policy for %s: %s", domain, policy.to_dict())
            self.gates[domain] = asyncio.Semaphore(policy.concurrency_limit)
            self.frontier.push(CrawlTask(url=domain, depth=1, domain=domain))

        self.state = EngineState.RUNNING
        while self.frontier:
            batch = self._drain_round()
            if not batch:
                raise RuntimeError(f"Frontier holds tasks for unknown domains: {list(self.frontier.domains())}")

            found = await asyncio.gather(*(self._run_gated(task) for task in batch))
            for task, links in zip(batch, found):
                if links:
                    self.aggregator.accept(task.domain, links)

            self.rounds += 1
            logger.info(
                "Round %d: Queue: %d, Visited: %d, Products found: %d",
                self.rounds, len(self.frontier), len(self.visited), self.aggregator.total,
            )
        self.state = EngineState.DONE

        return CrawlReport(
            discovered=self.aggregator.results,
            visited_count=len(self.visited),
            rounds=self.rounds,
            duration_s=time.monotonic() - started,
        )

    def _drain_round(self) -> List[CrawlTask]:
        batch: List[CrawlTask] = []
        for domain in self.domains:
            batch.extend(self.frontier.drain(domain, self.policies[domain].concurrency_limit))
        return batch

    async def _run_gated(self, task: CrawlTask) -> List[str]:
        async with self.gates[task.domain]:
            try:
                return await self.process(task)
            except FetchError as exc:
                logger.error("Error processing %s: %s", task.url, exc)
            except Exception:
                # one broken page must not take down the round
                logger.exception("Unexpected error processing %s", task.url)
            return []

    async def process(self, task: CrawlTask) -> List[str]:
        """Fetch one page, queue its crawlable links and return its product links."""
        policy = self.policies[task.domain]
        normalized = normalize_url(task.url)
        if task.depth > policy.max_depth or normalized in self.visited:
            logger.debug("Skipping %s at depth %d", task.url, task.depth)
            return []
        self.visited.add(normalized)

        logger.info("Crawling: %s at depth %d", task.url, task.depth)
        outcome = await self.strategy.fetch(task.url, task.domain, policy)

        for link in outcome.crawl_links:
            self.frontier.push(CrawlTask(url=link, depth=task.depth + 1, domain=task.domain))
        if outcome.product_links:
            logger.info("Found %d product links on %s", len(outcome.product_links), task.url)
        return list(outcome.product_links)


def fetcher_factory_from_config(config: CrawlConfig) -> FetcherFactory:
    fetcher_cls = load_symbol(config.fetcher)
    return lambda headless: fetcher_cls(config, headless=headless)


def build_registry(config: CrawlConfig) -> PolicyRegistry:
    registry = PolicyRegistry(default=merge_config(DEFAULT_CONFIG, config.defaults))
    registry.discover_entry_points()
    registry.update(config.overrides)
    return registry


async def run_crawl(
    config: CrawlConfig,
    *,
    registry: Optional[PolicyRegistry] = None,
    fetcher_factory: Optional[FetcherFactory] = None,
    exporter: Optional[Exporter] = None,
    persist: bool = True,
) -> CrawlReport:
    """
    Run one crawl end to end: open the fetchers, crawl until the frontier is empty,
    write results once, and always release both fetchers.
    """
    registry = registry or build_registry(config)
    factory = fetcher_factory or fetcher_factory_from_config(config)
    if persist and exporter is None:
        exporter = load_symbol(config.exporter)()

    logger.debug("Run config: %s", config.to_dict())
    contexts = ExecutionContexts(factory)
    try:
        logger.info("Launching headless fetcher...")
        await contexts.open()
        engine = RoundCrawlEngine(config.domains, contexts, registry=registry)
        report = await engine.crawl()
        if persist:
            report.export = engine.aggregator.persist(config.output_dir, exporter)
    finally:
        await contexts.close()

    logger.info("Crawling completed in %d seconds!", round(report.duration_s))
    logger.info("Visited %d URLs", report.visited_count)
    logger.info("Found %d product URLs", report.product_count)
    if persist:
        logger.info("Results saved to %s", config.output_dir)
    return report
