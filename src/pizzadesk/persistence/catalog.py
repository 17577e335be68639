"""Database persistence for neighborhoods, couriers and pizzeria config."""

from __future__ import annotations

from typing import Any

from ..models.domain import Courier, Neighborhood, PizzeriaConfig
from ..services.reports.aggregator import to_decimal
from .store import run_query

NEIGHBORHOODS = "neighborhoods"
DELIVERERS = "deliverers"
CONFIG = "config"


def _neighborhood(row: dict[str, Any]) -> Neighborhood:
    return Neighborhood(id=str(row["id"]), name=row["name"], delivery_fee=to_decimal(row.get("delivery_fee")))


def _courier(row: dict[str, Any]) -> Courier:
    return Courier(
        id=str(row["id"]),
        name=row["name"],
        phone=row.get("phone") or None,
        password_hash=row.get("password_hash"),
    )


def list_neighborhoods() -> list[Neighborhood]:
    response = run_query(
        "load neighborhoods",
        lambda db: db.table(NEIGHBORHOODS).select("*").order("name").execute(),
    )
    return [_neighborhood(row) for row in response.data or []]


def insert_neighborhood(name: str, delivery_fee) -> Neighborhood:
    payload = {"name": name, "delivery_fee": float(delivery_fee)}
    response = run_query("insert neighborhood", lambda db: db.table(NEIGHBORHOODS).insert(payload).execute())
    return _neighborhood(response.data[0])


def update_neighborhood(neighborhood_id: str, changes: dict[str, Any]) -> Neighborhood | None:
    response = run_query(
        "update neighborhood",
        lambda db: db.table(NEIGHBORHOODS).update(changes).eq("id", neighborhood_id).execute(),
    )
    rows = response.data or []
    return _neighborhood(rows[0]) if rows else None


def delete_neighborhood(neighborhood_id: str) -> bool:
    response = run_query(
        "delete neighborhood",
        lambda db: db.table(NEIGHBORHOODS).delete().eq("id", neighborhood_id).execute(),
    )
    return bool(response.data)


def list_couriers() -> list[Courier]:
    response = run_query(
        "load couriers",
        lambda db: db.table(DELIVERERS).select("*").order("name").execute(),
    )
    return [_courier(row) for row in response.data or []]


def get_courier(courier_id: str) -> Courier | None:
    response = run_query(
        "load courier",
        lambda db: db.table(DELIVERERS).select("*").eq("id", courier_id).limit(1).execute(),
    )
    rows = response.data or []
    return _courier(rows[0]) if rows else None


def find_courier_by_name(name: str) -> Courier | None:
    response = run_query(
        "find courier",
        lambda db: db.table(DELIVERERS).select("*").eq("name", name).limit(1).execute(),
    )
    rows = response.data or []
    return _courier(rows[0]) if rows else None


def insert_courier(name: str, phone: str | None, password_hash: str) -> Courier:
    payload = {"name": name, "phone": phone, "password_hash": password_hash}
    response = run_query("insert courier", lambda db: db.table(DELIVERERS).insert(payload).execute())
    return _courier(response.data[0])


def update_courier(courier_id: str, changes: dict[str, Any]) -> Courier | None:
    response = run_query(
        "update courier",
        lambda db: db.table(DELIVERERS).update(changes).eq("id", courier_id).execute(),
    )
    rows = response.data or []
    return _courier(rows[0]) if rows else None


def delete_courier(courier_id: str) -> bool:
    response = run_query(
        "delete courier",
        lambda db: db.table(DELIVERERS).delete().eq("id", courier_id).execute(),
    )
    return bool(response.data)


def load_pizzeria_config() -> PizzeriaConfig | None:
    response = run_query(
        "load pizzeria config",
        lambda db: db.table(CONFIG).select("id, pizzaria_address, google_maps_api_key").limit(1).execute(),
    )
    rows = response.data or []
    if not rows:
        return None
    row = rows[0]
    return PizzeriaConfig(
        id=str(row["id"]),
        address=row.get("pizzaria_address") or "",
        google_maps_api_key=row.get("google_maps_api_key") or None,
    )


def save_pizzeria_config(config: PizzeriaConfig) -> PizzeriaConfig:
    payload = {"pizzaria_address": config.address, "google_maps_api_key": config.google_maps_api_key}
    if config.id:
        response = run_query(
            "update pizzeria config",
            lambda db: db.table(CONFIG).update(payload).eq("id", config.id).execute(),
        )
    else:
        response = run_query("insert pizzeria config", lambda db: db.table(CONFIG).insert(payload).execute())
    row = (response.data or [{}])[0]
    row_id = row.get("id", config.id)
    return PizzeriaConfig(
        id=str(row_id) if row_id is not None else None,
        address=row.get("pizzaria_address", config.address),
        google_maps_api_key=row.get("google_maps_api_key", config.google_maps_api_key),
    )
