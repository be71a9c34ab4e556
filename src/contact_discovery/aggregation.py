"""Merge per-link email findings into one report per domain."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .models import CrawlState, DomainResult, EmailSource, ExtractedEmailSet, utc_now


def to_email_sources(
    link: str, emails: ExtractedEmailSet, *, timestamp: datetime | None = None
) -> list[EmailSource]:
    """Primary emails first, each group sorted so repeated runs line up."""
    seen_at = timestamp or utc_now()
    sources = [
        EmailSource(email=email, source_link=link, is_primary_domain=True, timestamp=seen_at)
        for email in sorted(emails.primary_emails)
    ]
    sources.extend(
        EmailSource(email=email, source_link=link, is_primary_domain=False, timestamp=seen_at)
        for email in sorted(emails.other_emails)
    )
    return sources


def dedupe_sources(sources: Iterable[EmailSource]) -> tuple[EmailSource, ...]:
    """Keep the first record per email, preserving input order."""
    kept: dict[str, EmailSource] = {}
    for item in sources:
        kept.setdefault(item.email, item)
    return tuple(kept.values())


def classify(*, emails_found: int, sublinks_total: int, sublinks_failed: int) -> CrawlState:
    """Every sub-link failing with nothing found is a failure; anything else completed."""
    if sublinks_total > 0 and sublinks_failed == sublinks_total and emails_found == 0:
        return CrawlState.FAILED
    return CrawlState.COMPLETED


def sublink_error(sublinks_failed: int) -> str | None:
    return f"{sublinks_failed} sub-links failed" if sublinks_failed > 0 else None


def aggregate(
    domain: str,
    sources: Iterable[EmailSource],
    *,
    sublinks_total: int = 0,
    sublinks_failed: int = 0,
    error: str | None = None,
    state: CrawlState | None = None,
) -> DomainResult:
    """Build the final DomainResult for one seed target."""
    emails = dedupe_sources(sources)
    if state is None:
        state = classify(
            emails_found=len(emails),
            sublinks_total=sublinks_total,
            sublinks_failed=sublinks_failed,
        )
    return DomainResult(
        domain=domain,
        emails=emails,
        error=error if error is not None else sublink_error(sublinks_failed),
        state=state,
        sublinks_total=sublinks_total,
        sublinks_failed=sublinks_failed,
    )
