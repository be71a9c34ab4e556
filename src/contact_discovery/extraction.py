"""Pure extraction and URL normalization utilities."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .models import DiscoveredLink, ExtractedEmailSet

EMAIL_REGEX = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}", re.IGNORECASE)
NON_NAVIGABLE_PREFIXES = ("mailto:", "tel:", "javascript:")
HTTP_SCHEMES = {"http", "https"}


def hostname_from_url(url: str) -> str:
    """Extract lowercase hostname from URL, or an empty string."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def registrable_domain(host_or_url: str) -> str:
    """Return the site a hostname belongs to.

    Keeps the last two labels, or the last three when the second-to-last label
    is at most two characters long and there are more than three labels, so
    ``www.example.co.uk`` becomes ``example.co.uk``. Accepts a full URL too.
    """
    value = host_or_url.strip().lower()
    if "/" in value:
        value = hostname_from_url(value)
    parts = value.rstrip(".").split(".")
    if len(parts) <= 2:
        return ".".join(parts)
    if len(parts[-2]) <= 2 and len(parts) > 3:
        return ".".join(parts[-3:])
    return ".".join(parts[-2:])


def normalize_url(base_url: str, href: str) -> str | None:
    """Resolve an anchor href to an absolute http(s) URL, or None if it is not navigable."""
    href = (href or "").strip()
    if not href or href == "#" or href.lower().startswith(NON_NAVIGABLE_PREFIXES):
        return None
    try:
        if href.startswith("//"):
            resolved = f"https:{href}"
        else:
            resolved = urljoin(base_url, href)
        parsed = urlparse(resolved)
        if parsed.scheme not in HTTP_SCHEMES or not parsed.hostname:
            return None
    except ValueError:
        return None
    return resolved


def extract_hrefs(html: str) -> list[str]:
    """Return every anchor href in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    return [str(anchor["href"]) for anchor in soup.find_all("a", href=True)]


def discover_links(base_url: str, html: str) -> list[DiscoveredLink]:
    """Find same-site http(s) links on a page, in anchor order, duplicates kept."""
    if urlparse(base_url).scheme not in HTTP_SCHEMES:
        return []
    base_domain = registrable_domain(hostname_from_url(base_url))
    links: list[DiscoveredLink] = []
    for href in extract_hrefs(html):
        url = normalize_url(base_url, href)
        if url is None:
            continue
        if registrable_domain(hostname_from_url(url)) != base_domain:
            continue
        links.append(DiscoveredLink(url=url))
    return links


def extract_emails(text: str) -> set[str]:
    """Return normalized emails discovered in plain text."""
    return {match.group(0).lower() for match in EMAIL_REGEX.finditer(text or "")}


def is_primary_email(email: str, site_domain: str) -> bool:
    """True when the email's domain part belongs to the given registrable domain."""
    _, _, domain_part = email.rpartition("@")
    return registrable_domain(domain_part) == site_domain


def partition_emails(html: str, page_url: str) -> ExtractedEmailSet:
    """Split the emails found on a page into primary-domain and other emails."""
    site_domain = registrable_domain(hostname_from_url(page_url))
    primary: set[str] = set()
    other: set[str] = set()
    for email in extract_emails(html):
        if site_domain and is_primary_email(email, site_domain):
            primary.add(email)
        else:
            other.add(email)
    return ExtractedEmailSet(primary_emails=frozenset(primary), other_emails=frozenset(other))
