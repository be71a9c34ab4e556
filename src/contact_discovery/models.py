"""Protocols and lightweight model types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol


class BrowserSession(Protocol):
    """Contract for one running headless-browser instance."""

    def navigate(self, url: str, timeout: float) -> None:
        """Load a URL, raising on timeout or network failure."""

    def content(self) -> str:
        """Return the rendered HTML of the current page."""

    def close(self) -> None:
        """Release the underlying browser process."""


class BrowserEngine(Protocol):
    """Contract for something that can start browser sessions."""

    def launch(self) -> BrowserSession:
        """Start a fresh, isolated session."""


class CrawlState(str, Enum):
    """Lifecycle of one seed target."""

    PENDING = "pending"
    FETCHING_SEED = "fetching_seed"
    DISCOVERING_LINKS = "discovering_links"
    EXTRACTING_SUBLINKS = "extracting_sublinks"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DiscoveredLink:
    """A same-site link found on a seed page."""

    url: str


@dataclass(frozen=True)
class ExtractedEmailSet:
    """Emails found on one page, split by whether they belong to the page's site."""

    primary_emails: frozenset[str] = frozenset()
    other_emails: frozenset[str] = frozenset()

    def __len__(self) -> int:
        return len(self.primary_emails) + len(self.other_emails)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class EmailSource:
    """An email seen on a given link at a given time."""

    email: str
    source_link: str
    is_primary_domain: bool
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class DomainResult:
    """Final, deduplicated report for one seed target."""

    domain: str
    emails: tuple[EmailSource, ...] = ()
    error: str | None = None
    state: CrawlState = CrawlState.COMPLETED
    sublinks_total: int = 0
    sublinks_failed: int = 0

    @property
    def primary_emails(self) -> list[EmailSource]:
        return [item for item in self.emails if item.is_primary_domain]

    @property
    def other_emails(self) -> list[EmailSource]:
        return [item for item in self.emails if not item.is_primary_domain]

    @property
    def failed(self) -> bool:
        return self.state is CrawlState.FAILED

    @property
    def partial(self) -> bool:
        """True when the domain completed but some sub-links failed."""
        return not self.failed and self.sublinks_failed > 0

    @property
    def status(self) -> str:
        if self.failed:
            return "failed"
        return "partial" if self.partial else "complete"
