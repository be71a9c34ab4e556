"""Per-link email extraction on a pooled browser session."""

from __future__ import annotations

import logging

from .errors import ExtractionError, FetchError, PoolError
from .extraction import partition_emails
from .fetchers import PageFetcher
from .models import ExtractedEmailSet
from .pool import BrowserSessionPool

DEFAULT_NAVIGATION_TIMEOUT = 30.0


class EmailExtractor:
    """Fetch one URL on its own leased session and partition the emails found there."""

    def __init__(
        self,
        *,
        pool: BrowserSessionPool,
        fetcher: PageFetcher,
        logger: logging.Logger,
        navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT,
    ) -> None:
        self._pool = pool
        self._fetcher = fetcher
        self._logger = logger
        self._navigation_timeout = navigation_timeout

    def extract(self, url: str) -> ExtractedEmailSet:
        """Return the emails on ``url`` or raise ExtractionError."""
        try:
            with self._pool.lease() as session:
                html = self._fetcher.fetch(session, url, timeout=self._navigation_timeout)
        except PoolError as exc:
            raise ExtractionError(FetchError(url, str(exc))) from exc
        except FetchError as exc:
            raise ExtractionError(exc) from exc

        emails = partition_emails(html, url)
        self._logger.debug(
            "%s: %d primary, %d other emails",
            url,
            len(emails.primary_emails),
            len(emails.other_emails),
        )
        return emails
