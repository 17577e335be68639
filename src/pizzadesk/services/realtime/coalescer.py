"""Debounced full reloads for a board."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Sequence

from ...persistence.store import StoreUnavailableError

logger = logging.getLogger(__name__)


class RefetchCoalescer:
    """Collapses bursts of refetch requests into a single reload.

    ``notify`` marks the board dirty. ``pump`` reloads once the board has been
    quiet for ``debounce_seconds`` (or immediately with ``force``). Only one
    reload runs at a time; a notify that lands while a reload is in flight keeps
    the board dirty so the next pump reloads again. A failed reload leaves the
    last applied records in place.
    """

    def __init__(
        self,
        fetch: Callable[[], Sequence],
        apply: Callable[[Sequence], None],
        is_alive: Callable[[], bool] = lambda: True,
        debounce_seconds: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._apply = apply
        self._is_alive = is_alive
        self.debounce_seconds = debounce_seconds
        self._clock = clock
        self._state_lock = threading.Lock()
        self._fetch_lock = threading.Lock()
        self._dirty = False
        self._generation = 0
        self._last_notice = 0.0
        self.fetch_count = 0

    @property
    def dirty(self) -> bool:
        return self._dirty

    def notify(self) -> None:
        with self._state_lock:
            self._dirty = True
            self._generation += 1
            self._last_notice = self._clock()

    def due(self) -> bool:
        with self._state_lock:
            return self._dirty and self._clock() - self._last_notice >= self.debounce_seconds

    def pump(self, force: bool = False) -> bool:
        """Run a reload if one is due. True when records were applied."""
        if not (self._dirty and (force or self.due())):
            return False
        if not self._fetch_lock.acquire(blocking=False):
            return False
        try:
            with self._state_lock:
                generation = self._generation
                self._dirty = False
            self.fetch_count += 1
            try:
                records = self._fetch()
            except StoreUnavailableError as exc:
                logger.warning(f"Board reload failed, keeping last known records: {exc}")
                with self._state_lock:
                    self._dirty = True
                return False
            if not self._is_alive():
                return False
            self._apply(records)
            with self._state_lock:
                if self._generation != generation:
                    self._dirty = True
            return True
        finally:
            self._fetch_lock.release()
