import json
from datetime import datetime, timezone
from pathlib import Path

from contact_discovery.io_json import write_results
from contact_discovery.models import CrawlState, DomainResult, EmailSource

SEEN = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_write_results_creates_directory_and_schema(tmp_path: Path) -> None:
    results = [
        DomainResult(
            domain="example.com",
            emails=(
                EmailSource("a@example.com", "https://example.com", True, SEEN),
                EmailSource("b@other.org", "https://example.com/contact", False, SEEN),
            ),
            error="1 sub-links failed",
            sublinks_total=4,
            sublinks_failed=1,
        ),
        DomainResult(domain="down.org", error="Failed to fetch", state=CrawlState.FAILED),
    ]
    output = write_results(str(tmp_path / "results"), results, now=SEEN)

    assert Path(output).name == "contact-discovery-2026-01-01T12-00-00Z.json"
    payload = json.loads(Path(output).read_text(encoding="utf-8"))
    assert payload[0] == {
        "domain": "example.com",
        "status": "partial",
        "primaryEmails": [
            {"email": "a@example.com", "source": "https://example.com", "timestamp": "2026-01-01T12:00:00Z"}
        ],
        "otherEmails": [
            {
                "email": "b@other.org",
                "source": "https://example.com/contact",
                "timestamp": "2026-01-01T12:00:00Z",
            }
        ],
        "sublinksTotal": 4,
        "sublinksFailed": 1,
        "error": "1 sub-links failed",
    }
    assert payload[1]["status"] == "failed"
    assert payload[1]["primaryEmails"] == []
