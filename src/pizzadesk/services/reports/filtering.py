"""Selection of delivery records for a shift window."""

from __future__ import annotations

from typing import Iterable, Sequence

from ...models.domain import DeliveryRecord, ShiftWindow

ALL_COURIERS = "all"


def matches(record: DeliveryRecord, window: ShiftWindow, courier_id: str | None = ALL_COURIERS) -> bool:
    if not window.contains(record.created_at):
        return False
    if courier_id and courier_id != ALL_COURIERS and record.courier_id != courier_id:
        return False
    return True


def filter_records(
    records: Iterable[DeliveryRecord],
    window: ShiftWindow,
    courier_id: str | None = ALL_COURIERS,
) -> list[DeliveryRecord]:
    """Keep records created inside the window, optionally for one courier.

    The relative order of the input is preserved.
    """
    return [record for record in records if matches(record, window, courier_id)]


def sort_newest_first(records: Sequence[DeliveryRecord]) -> list[DeliveryRecord]:
    return sorted(records, key=lambda record: record.created_at, reverse=True)
