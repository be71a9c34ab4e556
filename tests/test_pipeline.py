import json
import logging
import threading
from pathlib import Path

import pytest

from contact_discovery.config import CrawlConfig
from contact_discovery.errors import ValidationError
from contact_discovery.models import CrawlState
from contact_discovery.pipeline import discover_contacts, run_pipeline


class SiteSession:
    def __init__(self, engine: "SiteEngine") -> None:
        self._engine = engine
        self._html = ""

    def navigate(self, url: str, _timeout: float) -> None:
        if url not in self._engine.pages:
            raise TimeoutError(f"Timeout accessing {url}")
        self._html = self._engine.pages[url]

    def content(self) -> str:
        return self._html

    def close(self) -> None:
        with self._engine.lock:
            self._engine.live -= 1


class SiteEngine:
    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.lock = threading.Lock()
        self.live = 0
        self.closed = False

    def launch(self) -> SiteSession:
        with self.lock:
            self.live += 1
        return SiteSession(self)

    def close(self) -> None:
        self.closed = True


PAGES = {
    "https://alpha.com": '<a href="/contact">Contact</a> hi@alpha.com',
    "https://alpha.com/contact": "booking@alpha.com agent@bands.org",
    "https://beta.co.uk/": "<p>nothing</p>",
}


def _config(**overrides: object) -> CrawlConfig:
    values: dict[str, object] = {
        "seeds": ("https://alpha.com",),
        "pool_size": 2,
        "concurrent_websites": 2,
        "concurrent_sublinks": 2,
        "pool_acquire_timeout": 2.0,
        "dom_ready_timeout": 0.0,
        "show_progress": False,
    }
    values.update(overrides)
    return CrawlConfig(**values)  # type: ignore[arg-type]


def test_discover_contacts_rejects_invalid_seeds_before_launching() -> None:
    calls: list[str] = []

    def factory() -> SiteEngine:
        calls.append("launch")
        return SiteEngine(PAGES)

    with pytest.raises(ValidationError) as excinfo:
        discover_contacts(
            ["not a url", "https://ok.com", "ftp://files.example.com"],
            config=_config(),
            engine_factory=factory,
            logger=logging.getLogger("test"),
        )
    assert excinfo.value.invalid_urls == ("not a url", "ftp://files.example.com")
    assert calls == []


def test_discover_contacts_returns_results_in_seed_order() -> None:
    engine = SiteEngine(PAGES)
    seeds = ["https://beta.co.uk/", "https://alpha.com", "https://gone.example.net"]
    results = discover_contacts(
        seeds,
        config=_config(seeds=tuple(seeds)),
        engine_factory=lambda: engine,
        logger=logging.getLogger("test"),
    )

    assert [result.domain for result in results] == ["beta.co.uk", "alpha.com", "gone.example.net"]
    assert results[0].state is CrawlState.COMPLETED
    assert {item.email for item in results[1].emails} == {
        "hi@alpha.com",
        "booking@alpha.com",
        "agent@bands.org",
    }
    assert results[2].state is CrawlState.FAILED
    assert engine.live == 0
    assert engine.closed is True


def test_run_pipeline_writes_json_report(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    engine = SiteEngine(PAGES)
    monkeypatch.setattr(
        "contact_discovery.pipeline.build_engine", lambda *_args, **_kwargs: engine
    )
    config = _config(output_dir=str(tmp_path), check_mx=True)

    results, output = run_pipeline(
        config, logger=logging.getLogger("test"), mx_checker=lambda email: email.endswith(".com")
    )

    assert len(results) == 1
    payload = json.loads(Path(output).read_text(encoding="utf-8"))
    assert Path(output).parent == tmp_path
    assert payload[0]["domain"] == "alpha.com"
    assert payload[0]["status"] == "complete"
    assert [item["email"] for item in payload[0]["primaryEmails"]] == [
        "hi@alpha.com",
        "booking@alpha.com",
    ]
    assert payload[0]["otherEmails"][0] == {
        "email": "agent@bands.org",
        "source": "https://alpha.com/contact",
        "timestamp": payload[0]["otherEmails"][0]["timestamp"],
        "mxOk": False,
    }
    assert payload[0]["error"] is None
