"""Core orchestration pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from .config import CrawlConfig
from .extraction import hostname_from_url
from .extractor import EmailExtractor
from .fetchers import PageFetcher, build_engine
from .io_json import write_results
from .models import BrowserEngine, DomainResult
from .orchestrator import DomainCrawlOrchestrator
from .pool import BrowserSessionPool
from .progress import ProgressRenderer, ProgressSink
from .validation import mx_check, validate_seed_urls

EngineFactory = Callable[[], BrowserEngine]
MxCheckFn = Callable[[str], bool]


def discover_contacts(
    seeds: Sequence[str],
    *,
    config: CrawlConfig,
    engine_factory: EngineFactory,
    logger: logging.Logger,
    progress: ProgressSink | None = None,
) -> list[DomainResult]:
    """Crawl every seed and return one DomainResult per seed, in input order.

    Seeds are validated before the engine is created, so a bad entry aborts
    the run without launching anything.
    """
    targets = validate_seed_urls(seeds)
    engine = engine_factory()
    pool = BrowserSessionPool(
        engine,
        capacity=config.pool_size,
        acquire_timeout=config.pool_acquire_timeout,
        logger=logger,
    )
    fetcher = PageFetcher(logger=logger, dom_ready_timeout=config.dom_ready_timeout)
    extractor = EmailExtractor(
        pool=pool,
        fetcher=fetcher,
        logger=logger,
        navigation_timeout=config.navigation_timeout,
    )
    orchestrator = DomainCrawlOrchestrator(
        pool=pool,
        fetcher=fetcher,
        extractor=extractor,
        logger=logger,
        concurrent_sublinks=config.concurrent_sublinks,
        navigation_timeout=config.navigation_timeout,
        progress=progress,
    )

    logger.info("Contact discovery in progress for %d domains", len(targets))
    try:
        with ThreadPoolExecutor(
            max_workers=config.concurrent_websites, thread_name_prefix="domain"
        ) as executor:
            futures = [
                executor.submit(orchestrator.crawl, url, index) for index, url in enumerate(targets)
            ]
            return [future.result() for future in futures]
    finally:
        pool.shutdown()
        close_fn = getattr(engine, "close", None)
        if callable(close_fn):
            close_fn()


def run_pipeline(
    config: CrawlConfig,
    *,
    logger: logging.Logger,
    mx_checker: MxCheckFn = mx_check,
) -> tuple[list[DomainResult], str]:
    """Build concrete dependencies, run discovery and write the JSON report."""
    seeds = validate_seed_urls(config.seeds)

    def engine_factory() -> BrowserEngine:
        return build_engine(
            config.engine,
            user_agent=config.user_agent,
            pool_size=config.pool_size,
            logger=logger,
        )

    domains = [hostname_from_url(url) for url in seeds]
    with ProgressRenderer(domains, enabled=config.show_progress) as renderer:
        results = discover_contacts(
            seeds,
            config=config,
            engine_factory=engine_factory,
            logger=logger,
            progress=renderer.sink,
        )

    output = write_results(
        config.output_dir,
        results,
        mx_checker=mx_checker if config.check_mx else None,
    )
    return results, output
