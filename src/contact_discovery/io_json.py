"""JSON serialization helpers."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import DomainResult, EmailSource

FILENAME_PREFIX = "contact-discovery-"


def isoformat_utc(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _email_record(
    item: EmailSource, mx_checker: Callable[[str], bool] | None
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "email": item.email,
        "source": item.source_link,
        "timestamp": isoformat_utc(item.timestamp),
    }
    if mx_checker is not None:
        record["mxOk"] = mx_checker(item.email)
    return record


def to_records(
    results: list[DomainResult], mx_checker: Callable[[str], bool] | None = None
) -> list[dict[str, Any]]:
    """Convert results to the stable report schema."""
    return [
        {
            "domain": result.domain,
            "status": result.status,
            "primaryEmails": [_email_record(item, mx_checker) for item in result.primary_emails],
            "otherEmails": [_email_record(item, mx_checker) for item in result.other_emails],
            "sublinksTotal": result.sublinks_total,
            "sublinksFailed": result.sublinks_failed,
            "error": result.error,
        }
        for result in results
    ]


def write_results(
    output_dir: str,
    results: list[DomainResult],
    *,
    mx_checker: Callable[[str], bool] | None = None,
    now: datetime | None = None,
) -> str:
    """Write results to a timestamped JSON file and return its path."""
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stamp = isoformat_utc(now or datetime.now(timezone.utc)).replace(":", "-").replace(".", "-")
    output_path = directory / f"{FILENAME_PREFIX}{stamp}.json"
    with output_path.open("w", encoding="utf-8") as file_obj:
        json.dump(to_records(results, mx_checker), file_obj, indent=2)
    return str(output_path)
