"""Bounded pool of single-use browser sessions."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Condition

from .errors import PoolTimeout, SessionLaunchError
from .models import BrowserEngine, BrowserSession

DEFAULT_ACQUIRE_TIMEOUT = 10.0


class BrowserSessionPool:
    """Hands out at most ``capacity`` live sessions at a time.

    Sessions are never recycled: ``release`` closes the session and frees its
    slot, so the next ``acquire`` launches a new one. Waiters are woken by
    releases rather than polling.
    """

    def __init__(
        self,
        engine: BrowserEngine,
        *,
        capacity: int,
        acquire_timeout: float = DEFAULT_ACQUIRE_TIMEOUT,
        logger: logging.Logger,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._engine = engine
        self._capacity = capacity
        self._acquire_timeout = acquire_timeout
        self._logger = logger
        self._condition = Condition()
        self._outstanding: list[BrowserSession] = []
        self._launching = 0
        self._generation = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def outstanding(self) -> int:
        """Number of sessions currently leased or being launched."""
        with self._condition:
            return len(self._outstanding) + self._launching

    def _has_free_slot(self) -> bool:
        return len(self._outstanding) + self._launching < self._capacity

    def acquire(self) -> BrowserSession:
        """Launch a new session once a slot is free, or raise PoolTimeout."""
        with self._condition:
            if not self._condition.wait_for(self._has_free_slot, timeout=self._acquire_timeout):
                raise PoolTimeout(
                    f"Timeout waiting for available browser after {self._acquire_timeout:g}s"
                )
            self._launching += 1
            generation = self._generation

        try:
            session = self._engine.launch()
        except Exception as exc:
            with self._condition:
                self._launching -= 1
                self._condition.notify()
            raise SessionLaunchError(f"Failed to launch browser: {exc}") from exc

        with self._condition:
            self._launching -= 1
            stale = generation != self._generation
            if stale:
                self._condition.notify()
            else:
                self._outstanding.append(session)
        if stale:
            self._close(session)
            raise SessionLaunchError("Pool was shut down while the browser was launching")
        self._logger.debug("Leased browser session (%d/%d)", self.outstanding, self._capacity)
        return session

    def release(self, session: BrowserSession) -> None:
        """Close and discard a leased session. Unknown sessions are ignored."""
        with self._condition:
            if not self._remove(session):
                return
            self._condition.notify()
        self._close(session)

    @contextmanager
    def lease(self) -> Iterator[BrowserSession]:
        """Acquire a session and release it on every exit path."""
        session = self.acquire()
        try:
            yield session
        finally:
            self.release(session)

    def shutdown(self) -> None:
        """Force-close every outstanding session. Safe to call repeatedly.

        Sessions still launching when this runs are closed as soon as they
        arrive, and their callers get SessionLaunchError.
        """
        with self._condition:
            sessions = list(self._outstanding)
            self._outstanding.clear()
            self._generation += 1
            self._condition.notify_all()
        if sessions:
            self._logger.debug("Closing %d outstanding browser sessions", len(sessions))
        for session in sessions:
            self._close(session)

    def _remove(self, session: BrowserSession) -> bool:
        # identity, not equality: sessions may define __eq__
        for position, candidate in enumerate(self._outstanding):
            if candidate is session:
                del self._outstanding[position]
                return True
        return False

    def _close(self, session: BrowserSession) -> None:
        try:
            session.close()
        except Exception as exc:
            self._logger.warning("Error closing browser: %s", exc)

    def __enter__(self) -> BrowserSessionPool:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.shutdown()
