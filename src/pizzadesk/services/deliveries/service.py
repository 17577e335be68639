"""Delivery registration, edits and removal with live board reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

from ...config import settings
from ...models.domain import DeliveryRecord, Notice, ShiftWindow, is_known_payment_type
from ...persistence import deliveries as store
from ...persistence.catalog import get_courier
from ...persistence.store import StoreUnavailableError
from ..catalog.service import clean_name, find_neighborhood
from ..realtime import UPDATE, ChangeEvent, DeliveryBoard, get_registry
from ..reports.aggregator import parse_amount
from ..reports.filtering import ALL_COURIERS
from ..routing import DistanceAdvisory, RoutePlan, get_advisory
from ..shifts import current_reference_date, get_timezone, policy_from_settings, resolve

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DeliveryOutcome:
    record: Optional[DeliveryRecord]
    notices: list[Notice] = field(default_factory=list)
    degraded: bool = False
    gone: bool = False


def active_window(reference_date: Optional[date] = None, now: Optional[datetime] = None) -> ShiftWindow:
    tz = get_timezone(settings.timezone)
    policy = policy_from_settings()
    if reference_date is None:
        reference_date = current_reference_date(policy, tz, now or datetime.now(tz))
    return resolve(reference_date, policy, tz)


def _window_fetch(window: ShiftWindow, courier_id: str):
    courier = None if courier_id == ALL_COURIERS else courier_id
    return lambda: store.select_deliveries(window.start, window.end, courier)


def open_board(courier_id: str = ALL_COURIERS, now: Optional[datetime] = None) -> DeliveryBoard:
    """Live board for the current shift, loaded from the store on first open."""
    window = active_window(now=now)
    registry = get_registry()
    registry.evict_before(window.reference_date)
    board, created = registry.open(window, courier_id, _window_fetch)
    if created:
        try:
            board.replace_records(_window_fetch(window, board.courier_id)())
        except StoreUnavailableError:
            board.close()
            raise
    else:
        board.refresh()
    return board


def _row_event(record: DeliveryRecord) -> ChangeEvent:
    row = store.record_to_row(record)
    row["id"] = record.id
    return ChangeEvent(event_type=UPDATE, table=store.TABLE, record=row)


def _validate_payment_type(payment_type: Optional[str]) -> str:
    code = (payment_type or "").strip().lower()
    if not code:
        raise ValueError("Payment type is required.")
    if not is_known_payment_type(code):
        raise ValueError(f"Unknown payment type '{payment_type}'.")
    return code


def register_delivery(
    courier_id: str,
    address: str,
    neighborhood: str,
    payment_type: str,
    order_value: Any,
    delivery_fee: Any = None,
    *,
    now: Optional[datetime] = None,
    advisory: Optional[DistanceAdvisory] = None,
) -> DeliveryOutcome:
    """Validate, look up distance, then insert.

    Validation runs before any store call. A failed distance lookup still
    saves the delivery, without distance data and with a warning notice.
    The delivery is shown as pending on open boards until the insert
    returns; it is rolled back from them when the insert fails.
    """
    address = clean_name(address, "Address")
    neighborhood_name = clean_name(neighborhood, "Neighborhood")
    code = _validate_payment_type(payment_type)
    order_amount = parse_amount(order_value, "Order value")
    fee_amount = parse_amount(delivery_fee, "Delivery fee") if delivery_fee not in (None, "") else None

    courier = get_courier(courier_id)
    if courier is None:
        raise ValueError(f"Courier '{courier_id}' not found.")
    hood = find_neighborhood(neighborhood_name)
    if hood is None:
        raise ValueError(f"Neighborhood '{neighborhood_name}' is not registered.")
    if fee_amount is None:
        fee_amount = hood.delivery_fee

    notices: list[Notice] = []
    lookup = (advisory or get_advisory()).lookup(address)
    if not lookup.resolved:
        notices.append(Notice.warning(f"Distance unavailable for '{address}'; saved without km. ({lookup.error})"))

    draft = DeliveryRecord(
        id="",
        courier_id=courier.id,
        courier_name=courier.name,
        address=address,
        neighborhood_name=hood.name,
        payment_type=code,
        order_value=order_amount,
        delivery_fee=fee_amount,
        created_at=now or datetime.now(timezone.utc),
        distance_km=lookup.distance_km,
        round_trip_km=lookup.round_trip_km,
    )

    pending = [(board, board.add_pending(draft)) for board in get_registry().boards()]
    try:
        stored = store.insert_delivery(draft)
    except (StoreUnavailableError, ValueError):
        for board, temp_id in pending:
            board.rollback(temp_id)
        raise
    for board, temp_id in pending:
        board.confirm(temp_id, stored)

    degraded = not lookup.resolved
    message = "Delivery saved with degraded data." if degraded else "Delivery saved."
    notices.insert(0, Notice.info(message))
    logger.info(f"Registered delivery {stored.id} for courier {courier.name}")
    return DeliveryOutcome(record=stored, notices=notices, degraded=degraded)


def update_delivery(
    delivery_id: str,
    *,
    address: Optional[str] = None,
    neighborhood: Optional[str] = None,
    payment_type: Optional[str] = None,
    order_value: Any = None,
    delivery_fee: Any = None,
    advisory: Optional[DistanceAdvisory] = None,
) -> DeliveryOutcome:
    changes: dict[str, Any] = {}
    notices: list[Notice] = []
    degraded = False

    if payment_type is not None:
        changes["payment_type"] = _validate_payment_type(payment_type)
    if order_value is not None:
        changes["order_value"] = float(parse_amount(order_value, "Order value"))
    if delivery_fee is not None:
        changes["delivery_fee"] = float(parse_amount(delivery_fee, "Delivery fee"))
    if neighborhood is not None:
        hood = find_neighborhood(clean_name(neighborhood, "Neighborhood"))
        if hood is None:
            raise ValueError(f"Neighborhood '{neighborhood}' is not registered.")
        changes["neighborhood_name"] = hood.name
        changes.setdefault("delivery_fee", float(hood.delivery_fee))
    if address is not None:
        changes["address"] = clean_name(address, "Address")
        lookup = (advisory or get_advisory()).lookup(changes["address"])
        changes["distance_km"] = lookup.distance_km
        changes["round_trip_km"] = lookup.round_trip_km
        if not lookup.resolved:
            degraded = True
            notices.append(Notice.warning(f"Distance unavailable for '{changes['address']}'. ({lookup.error})"))
    if not changes:
        raise ValueError("No changes supplied.")

    updated = store.update_delivery(delivery_id, changes)
    registry = get_registry()
    if updated is None:
        for board in registry.boards():
            board.drop(delivery_id)
        return DeliveryOutcome(
            record=None,
            notices=[Notice.warning("Delivery was already removed by another session.")],
            gone=True,
        )
    for board in registry.boards():
        board.apply(_row_event(updated))
    notices.insert(0, Notice.info("Delivery updated."))
    return DeliveryOutcome(record=updated, notices=notices, degraded=degraded)


def delete_delivery(delivery_id: str, confirm: bool = False) -> DeliveryOutcome:
    if not confirm:
        raise ValueError("Deleting a delivery requires confirm=true.")
    removed = store.delete_delivery(delivery_id)
    for board in get_registry().boards():
        board.drop(delivery_id)
    if not removed:
        return DeliveryOutcome(
            record=None,
            notices=[Notice.warning("Delivery was already removed by another session.")],
            gone=True,
        )
    return DeliveryOutcome(record=None, notices=[Notice.info("Delivery removed.")])


def clear_deliveries(
    reference_date: Optional[date] = None,
    confirm: bool = False,
) -> tuple[date, int, list[Notice]]:
    """Remove every delivery of one operational day."""
    if not confirm:
        raise ValueError("Clearing deliveries requires confirm=true.")
    window = active_window(reference_date)
    removed = store.delete_deliveries_between(window.start, window.end)
    for board in get_registry().boards():
        if board.window.reference_date == window.reference_date:
            board.replace_records([])
    logger.warning(f"Cleared {removed} deliveries for {window.reference_date.isoformat()}")
    label = window.reference_date.strftime("%d/%m/%Y")
    return window.reference_date, removed, [Notice.info(f"{removed} deliveries removed for {label}.")]


def plan_delivery_route(
    delivery_ids: Sequence[str] = (),
    stops: Sequence[str] = (),
    *,
    persist: bool = True,
    advisory: Optional[DistanceAdvisory] = None,
) -> tuple[RoutePlan, list[Notice]]:
    """Optimize a multi-stop trip.

    With ``delivery_ids`` the stops are those deliveries' addresses and, when
    ``persist`` is set, each leg's credited distance is written back onto its
    delivery as ``round_trip_km``.
    """
    records: list[DeliveryRecord] = []
    notices: list[Notice] = []
    for delivery_id in delivery_ids:
        record = store.get_delivery(delivery_id)
        if record is None:
            notices.append(Notice.warning(f"Delivery {delivery_id} no longer exists; skipped."))
            continue
        records.append(record)
    addresses = [record.address for record in records] if delivery_ids else [clean_name(s, "Stop") for s in stops]
    if not addresses:
        raise ValueError("At least one stop is required.")

    plan = (advisory or get_advisory()).plan_route(addresses)
    if not plan.resolved:
        notices.append(Notice.warning(f"Route optimization unavailable. ({plan.error})"))
        return plan, notices

    if records and persist:
        registry = get_registry()
        for leg in plan.legs:
            record = records[leg.stop_index]
            updated = store.update_delivery(
                record.id,
                {"distance_km": leg.distance_km, "round_trip_km": leg.credited_km},
            )
            if updated is None:
                notices.append(Notice.warning(f"Delivery {record.id} was removed before the route was saved."))
                continue
            for board in registry.boards():
                board.apply(_row_event(updated))
        notices.insert(0, Notice.info(f"Route distances saved for {len(plan.legs)} deliveries."))
    return plan, notices
