"""Open boards keyed by shift and courier filter."""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Optional

from ...models.domain import DeliveryRecord, ShiftWindow
from ..reports.filtering import ALL_COURIERS
from .board import DeliveryBoard
from .events import ChangeEvent

logger = logging.getLogger(__name__)

DELIVERIES_TABLE = "deliveries"

FetchFactory = Callable[[ShiftWindow, str], Callable[[], list[DeliveryRecord]]]


class BoardRegistry:
    """Routes store change events to every open board."""

    def __init__(self, debounce_seconds: float = 0.5, clock: Optional[Callable[[], float]] = None) -> None:
        self._boards: dict[tuple[date, str], DeliveryBoard] = {}
        self._lock = threading.Lock()
        self.debounce_seconds = debounce_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._boards)

    def open(
        self,
        window: ShiftWindow,
        courier_id: str = ALL_COURIERS,
        fetch_factory: Optional[FetchFactory] = None,
    ) -> tuple[DeliveryBoard, bool]:
        """Return the board for ``window``/``courier_id`` and whether it is new."""
        key = (window.reference_date, courier_id or ALL_COURIERS)
        with self._lock:
            board = self._boards.get(key)
            if board is not None and board.alive:
                return board, False
            fetch = fetch_factory(window, key[1]) if fetch_factory else None
            board = DeliveryBoard(
                window,
                key[1],
                fetch=fetch,
                debounce_seconds=self.debounce_seconds,
                clock=self._clock,
            )
            self._boards[key] = board
            return board, True

    def boards(self) -> list[DeliveryBoard]:
        with self._lock:
            return [board for board in self._boards.values() if board.alive]

    def dispatch(self, event: ChangeEvent) -> int:
        """Apply ``event`` to all boards. Returns how many scheduled a reload."""
        if event.table != DELIVERIES_TABLE:
            logging.debug(f"Ignoring change on table '{event.table}'")
            return 0
        return sum(1 for board in self.boards() if board.apply(event))

    def pump(self, force: bool = False) -> int:
        return sum(1 for board in self.boards() if board.refresh(force=force))

    def evict_before(self, reference_date: date) -> int:
        """Close boards for shifts older than ``reference_date``."""
        with self._lock:
            stale = [key for key in self._boards if key[0] < reference_date]
            for key in stale:
                self._boards.pop(key).close()
        if stale:
            logger.info(f"Closed {len(stale)} board(s) older than {reference_date.isoformat()}")
        return len(stale)

    def close_all(self) -> None:
        with self._lock:
            for board in self._boards.values():
                board.close()
            self._boards.clear()


_registry: Optional[BoardRegistry] = None


def get_registry() -> BoardRegistry:
    global _registry
    if _registry is None:
        from ...config import settings

        _registry = BoardRegistry(debounce_seconds=settings.refetch_debounce_seconds)
    return _registry


def reset_registry() -> None:
    global _registry
    if _registry is not None:
        _registry.close_all()
    _registry = None
