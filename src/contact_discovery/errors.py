"""Custom exceptions for the contact discovery domain."""

from __future__ import annotations


class ContactDiscoveryError(Exception):
    """Base exception for this project."""


class ConfigError(ContactDiscoveryError):
    """Raised when runtime configuration is invalid."""


class ValidationError(ConfigError):
    """Raised when one or more seed URLs are malformed."""

    def __init__(self, invalid_urls: list[str]) -> None:
        self.invalid_urls = tuple(invalid_urls)
        super().__init__("Invalid URLs detected: " + ", ".join(self.invalid_urls))


class PoolError(ContactDiscoveryError):
    """Raised when the browser session pool cannot hand out a session."""


class PoolTimeout(PoolError):
    """Raised when no browser session became available in time."""


class SessionLaunchError(PoolError):
    """Raised when the browser engine fails to start a session."""


class FetchError(ContactDiscoveryError):
    """Raised when navigating to a URL fails."""

    def __init__(self, url: str, cause: str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {cause}")


class ExtractionError(ContactDiscoveryError):
    """Raised when emails could not be extracted from a link."""

    def __init__(self, fetch_error: FetchError) -> None:
        self.url = fetch_error.url
        self.fetch_error = fetch_error
        super().__init__(str(fetch_error))
