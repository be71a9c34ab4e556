from pathlib import Path

import dns.resolver
import pytest

from contact_discovery.config import CrawlConfig
from contact_discovery.errors import ConfigError, ValidationError
from contact_discovery.validation import (
    ensure_scheme,
    is_supported_url,
    load_lines_from_file,
    mx_check,
    validate_seed_urls,
)


def test_is_supported_url() -> None:
    assert is_supported_url("https://example.com/a") is True
    assert is_supported_url("http://example.com") is True
    assert is_supported_url("ftp://example.com/file") is False
    assert is_supported_url("not a url") is False
    assert is_supported_url("https://") is False
    assert is_supported_url("http://[::1") is False


def test_is_supported_url_checks_hostname_shape() -> None:
    assert is_supported_url("https://not a url") is False
    assert is_supported_url("https://-bad.example.com") is False
    assert is_supported_url("https://a..b.com") is False
    assert is_supported_url("https://bücher.de/kontakt") is True
    assert is_supported_url("http://127.0.0.1:8080/") is True
    assert is_supported_url("http://[::1]:8080/") is True
    assert is_supported_url("https://www.example.com./") is True


def test_bare_entry_with_spaces_fails_validation_after_scheme_is_added() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_seed_urls([ensure_scheme("not a url"), "https://ok.com"])
    assert excinfo.value.invalid_urls == ("https://not a url",)


def test_ensure_scheme() -> None:
    assert ensure_scheme(" example.com ") == "https://example.com"
    assert ensure_scheme("http://example.com") == "http://example.com"


def test_validate_seed_urls_lists_every_invalid_entry() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_seed_urls(["not a url", "https://ok.com", "mailto:x@y.com"])
    assert excinfo.value.invalid_urls == ("not a url", "mailto:x@y.com")
    assert "not a url" in str(excinfo.value)
    assert validate_seed_urls(["https://ok.com"]) == ("https://ok.com",)


@pytest.mark.parametrize(
    "overrides",
    [
        {"seeds": ()},
        {"pool_size": 0},
        {"concurrent_websites": 0},
        {"concurrent_sublinks": 0},
        {"navigation_timeout": 0},
        {"pool_acquire_timeout": -1},
        {"engine": "lynx"},
    ],
)
def test_crawl_config_rejects_invalid_values(overrides: dict[str, object]) -> None:
    values: dict[str, object] = {"seeds": ("https://example.com",)}
    values.update(overrides)
    with pytest.raises(ConfigError):
        CrawlConfig(**values)  # type: ignore[arg-type]


def test_load_lines_from_file(tmp_path: Path) -> None:
    sample = tmp_path / "sample.txt"
    sample.write_text("one\n\n two \n", encoding="utf-8")
    assert load_lines_from_file(str(sample)) == ["one", "two"]


def test_mx_check_fallback_to_a_record(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_resolve(*_args: object, **_kwargs: object) -> object:
        raise dns.resolver.NoAnswer()

    monkeypatch.setattr("contact_discovery.validation.dns.resolver.resolve", fake_resolve)
    monkeypatch.setattr(
        "contact_discovery.validation.socket.gethostbyname", lambda _domain: "127.0.0.1"
    )
    assert mx_check("user@example.com") is True


def test_mx_check_invalid_email_and_dns_exception(monkeypatch: pytest.MonkeyPatch) -> None:
    assert mx_check("invalid-email") is False

    def fake_resolve(*_args: object, **_kwargs: object) -> object:
        raise dns.exception.Timeout()

    monkeypatch.setattr("contact_discovery.validation.dns.resolver.resolve", fake_resolve)
    assert mx_check("user@example.com") is False
