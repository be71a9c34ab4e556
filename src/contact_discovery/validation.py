"""Validation and runtime guardrails."""

from __future__ import annotations

import ipaddress
import re
import socket
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import urlparse

import dns.resolver

from .errors import ConfigError, ValidationError


HOST_LABEL_REGEX = re.compile(r"^(?!-)[a-z0-9_-]{1,63}(?<!-)$")


def is_valid_hostname(hostname: str) -> bool:
    """Accept IP literals and DNS names whose labels survive IDNA encoding."""
    if ":" in hostname:
        try:
            ipaddress.ip_address(hostname)
        except ValueError:
            return False
        return True
    try:
        ascii_host = hostname.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    labels = ascii_host.lower().rstrip(".").split(".")
    return all(HOST_LABEL_REGEX.match(label) for label in labels)


def is_supported_url(url: str) -> bool:
    """Allow only absolute HTTP(S) URLs with a well-formed hostname."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False
    if parsed.scheme not in {"http", "https"} or not hostname:
        return False
    return is_valid_hostname(hostname)


def ensure_scheme(value: str) -> str:
    """Prepend https:// to bare domains."""
    value = value.strip()
    if value.startswith(("http://", "https://")):
        return value
    return f"https://{value}"


def validate_seed_urls(urls: Sequence[str]) -> tuple[str, ...]:
    """Return the seeds unchanged or raise ValidationError listing every bad entry."""
    invalid = [url for url in urls if not is_supported_url(url)]
    if invalid:
        raise ValidationError(invalid)
    return tuple(urls)


def load_lines_from_file(path: str) -> list[str]:
    """Load non-empty lines from a UTF-8 text file."""
    content = Path(path).read_text(encoding="utf-8")
    return [line.strip() for line in content.splitlines() if line.strip()]


def validate_runtime_constraints(
    *,
    seeds: tuple[str, ...],
    pool_size: int,
    concurrent_websites: int,
    concurrent_sublinks: int,
    navigation_timeout: float,
    dom_ready_timeout: float,
    pool_acquire_timeout: float,
    engine: str,
    supported_engines: tuple[str, ...],
) -> None:
    """Validate CLI/runtime configuration and raise ConfigError on invalid values."""
    if not seeds:
        raise ConfigError("Provide at least one domain or --seeds-file.")
    if pool_size < 1:
        raise ConfigError("--pool-size must be >= 1.")
    if concurrent_websites < 1:
        raise ConfigError("--concurrent-websites must be >= 1.")
    if concurrent_sublinks < 1:
        raise ConfigError("--concurrent-sublinks must be >= 1.")
    if navigation_timeout <= 0:
        raise ConfigError("--timeout must be > 0.")
    if dom_ready_timeout < 0:
        raise ConfigError("DOM ready timeout must be >= 0.")
    if pool_acquire_timeout <= 0:
        raise ConfigError("Pool acquire timeout must be > 0.")
    if engine not in supported_engines:
        raise ConfigError(
            f"--engine must be one of {', '.join(supported_engines)} (got {engine!r})."
        )


def mx_check(email: str) -> bool:
    """Return True when target domain has MX or A record."""
    try:
        domain = email.split("@", maxsplit=1)[1]
    except IndexError:
        return False
    try:
        answers = dns.resolver.resolve(domain, "MX", lifetime=8)
        return bool(answers)
    except (dns.resolver.NoAnswer, dns.resolver.NXDOMAIN, dns.resolver.NoNameservers):
        try:
            socket.gethostbyname(domain)
            return True
        except OSError:
            return False
    except dns.exception.DNSException:
        return False
