"""Live per-screen view of the deliveries inside one shift window."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Sequence

from ...models.domain import DeliveryRecord, ShiftWindow, SyncState
from ...persistence.deliveries import row_to_record
from ..reports.filtering import ALL_COURIERS, matches, sort_newest_first
from .coalescer import RefetchCoalescer
from .events import DELETE, INSERT, ChangeEvent


@dataclass(frozen=True, slots=True)
class BoardState:
    window: ShiftWindow
    courier_id: str = ALL_COURIERS
    records: tuple[DeliveryRecord, ...] = ()
    needs_refetch: bool = False

    def has(self, record_id: str) -> bool:
        return any(record.id == record_id for record in self.records)


def _with_records(state: BoardState, records: Sequence[DeliveryRecord]) -> BoardState:
    return replace(state, records=tuple(sort_newest_first(records)))


def apply_change(state: BoardState, event: ChangeEvent) -> BoardState:
    """Fold one change into the board.

    Changes that cannot be placed with certainty (unparseable rows, or an
    update that moves a record across the window boundary) set
    ``needs_refetch`` instead of guessing.
    """
    if event.event_type == DELETE:
        target = event.row_id
        if target is None:
            return replace(state, needs_refetch=True)
        return replace(state, records=tuple(r for r in state.records if r.id != target))

    try:
        record = row_to_record(event.record or {})
    except (KeyError, ValueError, TypeError, ArithmeticError):
        return replace(state, needs_refetch=True)

    present = state.has(record.id)
    inside = matches(record, state.window, state.courier_id)

    if event.event_type == INSERT:
        if present or not inside:
            return state
        return _with_records(state, [*state.records, record])

    if present and inside:
        return _with_records(state, [record if r.id == record.id else r for r in state.records])
    if present or inside:
        return replace(state, needs_refetch=True)
    return state


class DeliveryBoard:
    """Mutable holder of a ``BoardState`` for one screen.

    Pending entries are keyed by a client-generated temp id and reconciled with
    the store-assigned id on confirmation. After ``close()`` no fetch result or
    confirmation is applied any more.
    """

    def __init__(
        self,
        window: ShiftWindow,
        courier_id: str = ALL_COURIERS,
        fetch: Callable[[], list[DeliveryRecord]] | None = None,
        debounce_seconds: float = 0.5,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._state = BoardState(window=window, courier_id=courier_id or ALL_COURIERS)
        self._alive = True
        self.coalescer = None
        if fetch is not None:
            kwargs = {"clock": clock} if clock else {}
            self.coalescer = RefetchCoalescer(
                fetch=fetch,
                apply=self.replace_records,
                is_alive=lambda: self._alive,
                debounce_seconds=debounce_seconds,
                **kwargs,
            )

    @property
    def window(self) -> ShiftWindow:
        return self._state.window

    @property
    def courier_id(self) -> str:
        return self._state.courier_id

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def records(self) -> list[DeliveryRecord]:
        with self._lock:
            return list(self._state.records)

    def close(self) -> None:
        self._alive = False

    def apply(self, event: ChangeEvent) -> bool:
        """Apply a change. True when a refetch was scheduled instead."""
        if not self._alive:
            return False
        with self._lock:
            state = apply_change(self._state, event)
            refetch = state.needs_refetch
            self._state = replace(state, needs_refetch=False)
        if refetch and self.coalescer is not None:
            self.coalescer.notify()
        return refetch

    def replace_records(self, records: Sequence[DeliveryRecord]) -> None:
        if not self._alive:
            return
        with self._lock:
            fetched_ids = {record.id for record in records}
            pending = [r for r in self._state.records if r.sync_state is SyncState.PENDING]
            kept = [r for r in records if matches(r, self._state.window, self._state.courier_id)]
            self._state = _with_records(
                self._state, [*kept, *(r for r in pending if r.id not in fetched_ids)]
            )

    def refresh(self, force: bool = False) -> bool:
        if self.coalescer is None:
            return False
        return self.coalescer.pump(force=force)

    def add_pending(self, record: DeliveryRecord) -> str:
        temp_id = f"tmp-{uuid.uuid4().hex}"
        pending = replace(record, id=temp_id, temp_id=temp_id, sync_state=SyncState.PENDING)
        with self._lock:
            if matches(pending, self._state.window, self._state.courier_id):
                self._state = _with_records(self._state, [*self._state.records, pending])
        return temp_id

    def confirm(self, temp_id: str, stored: DeliveryRecord) -> None:
        if not self._alive:
            return
        confirmed = replace(stored, sync_state=SyncState.CONFIRMED, temp_id=None)
        with self._lock:
            records = [r for r in self._state.records if r.temp_id != temp_id and r.id != confirmed.id]
            if matches(confirmed, self._state.window, self._state.courier_id):
                records.append(confirmed)
            self._state = _with_records(self._state, records)

    def rollback(self, temp_id: str) -> None:
        with self._lock:
            self._state = replace(
                self._state, records=tuple(r for r in self._state.records if r.temp_id != temp_id)
            )

    def drop(self, record_id: str) -> None:
        with self._lock:
            self._state = replace(
                self._state, records=tuple(r for r in self._state.records if r.id != record_id)
            )
