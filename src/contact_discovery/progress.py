"""Typed progress events and the single consumer that renders them."""

from __future__ import annotations

import logging
import queue
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from threading import Thread
from typing import Union

from tqdm import tqdm

from .models import CrawlState


@dataclass(frozen=True)
class StatusChanged:
    domain_index: int
    state: CrawlState


@dataclass(frozen=True)
class SubLinksFound:
    domain_index: int
    total: int


@dataclass(frozen=True)
class SubLinkProgress:
    domain_index: int
    done: int
    failed: int
    total: int


@dataclass(frozen=True)
class EmailsFound:
    domain_index: int
    count: int
    failed: int


ProgressEvent = Union[StatusChanged, SubLinksFound, SubLinkProgress, EmailsFound]
ProgressSink = Callable[[ProgressEvent], None]

STATUS_LABELS = {
    CrawlState.PENDING: "Pending",
    CrawlState.FETCHING_SEED: "Analyzing links",
    CrawlState.DISCOVERING_LINKS: "Discovering links",
    CrawlState.EXTRACTING_SUBLINKS: "Extracting emails",
    CrawlState.AGGREGATING: "Aggregating",
    CrawlState.COMPLETED: "Complete",
    CrawlState.FAILED: "Failed",
}


def emit(sink: ProgressSink | None, event: ProgressEvent, logger: logging.Logger) -> None:
    """Deliver an event; a broken sink never affects the crawl."""
    if sink is None:
        return
    try:
        sink(event)
    except Exception as exc:
        logger.debug("Progress sink failed on %s: %s", type(event).__name__, exc)


class QueueSink:
    """Sink that hands events to another thread through a queue."""

    def __init__(self, events: queue.Queue | None = None) -> None:
        self.events: queue.Queue = events if events is not None else queue.Queue()

    def __call__(self, event: ProgressEvent) -> None:
        self.events.put(event)


_STOP = object()


class ProgressRenderer:
    """Draws one tqdm bar per domain from events read off a queue.

    Only the renderer thread touches the bars.
    """

    def __init__(self, domains: Sequence[str], *, enabled: bool = True) -> None:
        self._domains = list(domains)
        self._enabled = enabled
        self.sink = QueueSink()
        self._thread = Thread(target=self._run, name="progress-renderer", daemon=True)
        self._bars: dict[int, tqdm] = {}
        self._labels: dict[int, dict[str, str]] = {}

    def start(self) -> ProgressRenderer:
        self._thread.start()
        return self

    def stop(self) -> None:
        self.sink.events.put(_STOP)
        self._thread.join()

    def __enter__(self) -> ProgressRenderer:
        return self.start()

    def __exit__(self, *_exc_info: object) -> None:
        self.stop()

    def _run(self) -> None:
        for index, domain in enumerate(self._domains):
            self._bars[index] = tqdm(
                total=0,
                desc=domain,
                position=index,
                unit="link",
                leave=True,
                disable=not self._enabled,
            )
            self._labels[index] = {"status": STATUS_LABELS[CrawlState.PENDING]}
            self._bars[index].set_postfix_str(self._labels[index]["status"])
        try:
            while True:
                event = self.sink.events.get()
                if event is _STOP:
                    break
                self.apply(event)
        finally:
            for bar in self._bars.values():
                bar.close()

    def apply(self, event: ProgressEvent) -> None:
        bar = self._bars.get(event.domain_index)
        if bar is None:
            return
        labels = self._labels[event.domain_index]
        if isinstance(event, StatusChanged):
            labels["status"] = STATUS_LABELS[event.state]
        elif isinstance(event, SubLinksFound):
            bar.total = event.total
        elif isinstance(event, SubLinkProgress):
            bar.total = event.total
            bar.n = event.done + event.failed
        elif isinstance(event, EmailsFound):
            label = f"{event.count} emails"
            if event.failed:
                label += f" ({event.failed} errors)"
            labels["emails"] = label
        bar.set_postfix_str(" | ".join(labels.values()))
