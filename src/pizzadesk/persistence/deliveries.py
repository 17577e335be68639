"""Database persistence for delivery records."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..models.domain import DeliveryRecord
from ..services.reports.aggregator import to_decimal
from .store import optional_float, parse_timestamp, run_query

TABLE = "deliveries"

logger = logging.getLogger(__name__)


def row_to_record(row: dict[str, Any]) -> DeliveryRecord:
    return DeliveryRecord(
        id=str(row["id"]),
        courier_id=str(row.get("courier_id") or ""),
        courier_name=row.get("courier_name") or "",
        address=row.get("address") or "",
        neighborhood_name=row.get("neighborhood_name") or "",
        payment_type=row.get("payment_type") or "",
        order_value=to_decimal(row.get("order_value")),
        delivery_fee=to_decimal(row.get("delivery_fee")),
        created_at=parse_timestamp(row["created_at"]),
        distance_km=optional_float(row.get("distance_km")),
        round_trip_km=optional_float(row.get("round_trip_km")),
    )


def record_to_row(record: DeliveryRecord) -> dict[str, Any]:
    """Insert payload; the store assigns the id."""
    return {
        "courier_id": record.courier_id,
        "courier_name": record.courier_name,
        "address": record.address,
        "neighborhood_name": record.neighborhood_name,
        "payment_type": record.payment_type,
        "order_value": float(record.order_value),
        "delivery_fee": float(record.delivery_fee),
        "distance_km": record.distance_km,
        "round_trip_km": record.round_trip_km,
        "created_at": record.created_at.isoformat(),
    }


def insert_delivery(record: DeliveryRecord) -> DeliveryRecord:
    payload = record_to_row(record)
    response = run_query("insert delivery", lambda db: db.table(TABLE).insert(payload).execute())
    rows = response.data or []
    if not rows:
        raise ValueError("Store did not return the inserted delivery.")
    return row_to_record(rows[0])


def update_delivery(delivery_id: str, changes: dict[str, Any]) -> DeliveryRecord | None:
    """Apply ``changes`` to one delivery. Returns None when the row is gone."""
    if not changes:
        raise ValueError("No changes supplied.")
    response = run_query(
        "update delivery",
        lambda db: db.table(TABLE).update(changes).eq("id", delivery_id).execute(),
    )
    rows = response.data or []
    if not rows:
        logger.info(f"Delivery {delivery_id} not found for update; treating as already deleted")
        return None
    return row_to_record(rows[0])


def delete_delivery(delivery_id: str) -> bool:
    """Delete one delivery. False means no row was affected."""
    response = run_query(
        "delete delivery",
        lambda db: db.table(TABLE).delete().eq("id", delivery_id).execute(),
    )
    return bool(response.data)


def get_delivery(delivery_id: str) -> DeliveryRecord | None:
    response = run_query(
        "load delivery",
        lambda db: db.table(TABLE).select("*").eq("id", delivery_id).limit(1).execute(),
    )
    rows = response.data or []
    return row_to_record(rows[0]) if rows else None


def select_deliveries(
    start: datetime,
    end: datetime,
    courier_id: str | None = None,
) -> list[DeliveryRecord]:
    """Records with ``start <= created_at < end``, newest first."""

    def _query(db):
        query = (
            db.table(TABLE)
            .select("*")
            .gte("created_at", start.isoformat())
            .lt("created_at", end.isoformat())
        )
        if courier_id:
            query = query.eq("courier_id", courier_id)
        return query.order("created_at", desc=True).execute()

    response = run_query("load deliveries", _query)
    records: list[DeliveryRecord] = []
    for row in response.data or []:
        try:
            records.append(row_to_record(row))
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            logging.warning(f"Skipping invalid delivery row {row.get('id')}: {e}")
            continue
    return records


def delete_deliveries_between(start: datetime, end: datetime) -> int:
    response = run_query(
        "clear deliveries",
        lambda db: db.table(TABLE)
        .delete()
        .gte("created_at", start.isoformat())
        .lt("created_at", end.isoformat())
        .execute(),
    )
    return len(response.data or [])
