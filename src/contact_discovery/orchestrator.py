"""Per-seed crawl: fetch seed, discover links, fan out extraction, aggregate."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from .aggregation import aggregate, to_email_sources
from .errors import ExtractionError, FetchError, PoolError
from .extraction import discover_links, hostname_from_url
from .extractor import EmailExtractor
from .fetchers import PageFetcher
from .models import CrawlState, DiscoveredLink, DomainResult, EmailSource, ExtractedEmailSet
from .pool import BrowserSessionPool
from .progress import (
    EmailsFound,
    ProgressSink,
    StatusChanged,
    SubLinkProgress,
    SubLinksFound,
    emit,
)

DEFAULT_CONCURRENT_SUBLINKS = 20


class DomainCrawlOrchestrator:
    """Runs the crawl for one seed target at a time; safe to share across threads."""

    def __init__(
        self,
        *,
        pool: BrowserSessionPool,
        fetcher: PageFetcher,
        extractor: EmailExtractor,
        logger: logging.Logger,
        concurrent_sublinks: int = DEFAULT_CONCURRENT_SUBLINKS,
        navigation_timeout: float = 30.0,
        progress: ProgressSink | None = None,
    ) -> None:
        self._pool = pool
        self._fetcher = fetcher
        self._extractor = extractor
        self._logger = logger
        self._concurrent_sublinks = concurrent_sublinks
        self._navigation_timeout = navigation_timeout
        self._progress = progress

    def _emit_state(self, index: int, state: CrawlState) -> None:
        emit(self._progress, StatusChanged(domain_index=index, state=state), self._logger)

    def _fetch_seed(self, seed_url: str) -> str:
        with self._pool.lease() as session:
            return self._fetcher.fetch(session, seed_url, timeout=self._navigation_timeout)

    def crawl(self, seed_url: str, index: int = 0) -> DomainResult:
        """Crawl one seed URL. Never raises for network or browser failures."""
        domain = hostname_from_url(seed_url)
        self._emit_state(index, CrawlState.FETCHING_SEED)
        self._logger.info("Analyzing %s", domain)
        try:
            html = self._fetch_seed(seed_url)
        except (FetchError, PoolError) as exc:
            self._logger.warning("Error processing %s: %s", seed_url, exc)
            self._emit_state(index, CrawlState.FAILED)
            return aggregate(domain, [], error=str(exc), state=CrawlState.FAILED)

        self._emit_state(index, CrawlState.DISCOVERING_LINKS)
        links = discover_links(seed_url, html)
        total = len(links)
        emit(self._progress, SubLinksFound(domain_index=index, total=total), self._logger)
        self._logger.info("Found %d sub-links in %s", total, domain)

        self._emit_state(index, CrawlState.EXTRACTING_SUBLINKS)
        seed_sources, link_sources = self._extract_all(seed_url, links, index)

        self._emit_state(index, CrawlState.AGGREGATING)
        sources: list[EmailSource] = list(seed_sources)
        failed = 0
        for found in link_sources:
            if found is None:
                failed += 1
                continue
            sources.extend(found)

        result = aggregate(domain, sources, sublinks_total=total, sublinks_failed=failed)
        emit(
            self._progress,
            EmailsFound(domain_index=index, count=len(result.emails), failed=failed),
            self._logger,
        )
        self._emit_state(index, result.state)
        self._log_outcome(result)
        return result

    def _extract_all(
        self, seed_url: str, links: list[DiscoveredLink], index: int
    ) -> tuple[list[EmailSource], list[list[EmailSource] | None]]:
        """Extract the seed page and every sub-link; wait for all of them to settle.

        Sub-link sources come back in discovery order, with None for failures.
        Each source is stamped when its extraction finished.
        """
        total = len(links)
        link_sources: list[list[EmailSource] | None] = [None] * total
        seed_sources: list[EmailSource] = []
        done = failed = 0

        with ThreadPoolExecutor(
            max_workers=self._concurrent_sublinks, thread_name_prefix="sublink"
        ) as executor:
            seed_future = executor.submit(self._extractor.extract, seed_url)
            futures: dict[Future[ExtractedEmailSet], int] = {
                executor.submit(self._extractor.extract, link.url): position
                for position, link in enumerate(links)
            }
            for future in as_completed(futures):
                position = futures[future]
                try:
                    link_sources[position] = to_email_sources(links[position].url, future.result())
                    done += 1
                except ExtractionError as exc:
                    failed += 1
                    self._logger.debug("Sub-link failed: %s", exc)
                except Exception as exc:
                    failed += 1
                    self._logger.debug("Sub-link worker failed on %s: %s", links[position].url, exc)
                emit(
                    self._progress,
                    SubLinkProgress(domain_index=index, done=done, failed=failed, total=total),
                    self._logger,
                )

            try:
                seed_sources = to_email_sources(seed_url, seed_future.result())
            except Exception as exc:
                self._logger.warning("Could not extract emails from seed page %s: %s", seed_url, exc)
        return seed_sources, link_sources

    def _log_outcome(self, result: DomainResult) -> None:
        if result.failed:
            self._logger.warning("Failed processing all sub-links for %s", result.domain)
        elif result.partial:
            self._logger.info(
                "Completed %s with %d failed sub-links (%d emails)",
                result.domain,
                result.sublinks_failed,
                len(result.emails),
            )
        else:
            self._logger.info("Completed processing %s (%d emails)", result.domain, len(result.emails))
