"""Neighborhoods, couriers and pizzeria configuration."""

from __future__ import annotations

import logging
import unicodedata
from typing import Iterable, Optional

from ...config import settings
from ...models.domain import Courier, Neighborhood, PizzeriaConfig
from ...persistence import catalog
from ..auth.passwords import hash_password
from ..reports.aggregator import parse_amount
from ..routing.advisory import reset_advisory

logger = logging.getLogger(__name__)


def clean_name(value: Optional[str], label: str = "Name") -> str:
    cleaned = " ".join((value or "").split())
    if not cleaned:
        raise ValueError(f"{label} is required.")
    return cleaned


def normalize_name(value: str) -> str:
    """Comparison key: accents stripped, case folded, whitespace collapsed."""
    decomposed = unicodedata.normalize("NFKD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.casefold().split())


def _ensure_unique(name: str, existing: Iterable, exclude_id: Optional[str] = None, kind: str = "Neighborhood") -> None:
    key = normalize_name(name)
    for item in existing:
        if item.id != exclude_id and normalize_name(item.name) == key:
            raise ValueError(f"{kind} '{item.name}' already exists.")


# Neighborhoods


def list_neighborhoods() -> list[Neighborhood]:
    return catalog.list_neighborhoods()


def find_neighborhood(name: str, neighborhoods: Optional[Iterable[Neighborhood]] = None) -> Optional[Neighborhood]:
    key = normalize_name(name)
    for neighborhood in neighborhoods if neighborhoods is not None else catalog.list_neighborhoods():
        if normalize_name(neighborhood.name) == key:
            return neighborhood
    return None


def create_neighborhood(name: str, delivery_fee) -> Neighborhood:
    name = clean_name(name, "Neighborhood name")
    fee = parse_amount(delivery_fee, "Delivery fee")
    _ensure_unique(name, catalog.list_neighborhoods())
    neighborhood = catalog.insert_neighborhood(name, fee)
    logger.info(f"Created neighborhood '{neighborhood.name}' with fee {fee}")
    return neighborhood


def update_neighborhood(
    neighborhood_id: str,
    name: Optional[str] = None,
    delivery_fee=None,
) -> Optional[Neighborhood]:
    """Returns None when the neighborhood no longer exists."""
    changes: dict = {}
    if name is not None:
        changes["name"] = clean_name(name, "Neighborhood name")
        _ensure_unique(changes["name"], catalog.list_neighborhoods(), exclude_id=neighborhood_id)
    if delivery_fee is not None:
        changes["delivery_fee"] = float(parse_amount(delivery_fee, "Delivery fee"))
    if not changes:
        raise ValueError("No changes supplied.")
    return catalog.update_neighborhood(neighborhood_id, changes)


def delete_neighborhood(neighborhood_id: str, confirm: bool = False) -> bool:
    if not confirm:
        raise ValueError("Deleting a neighborhood requires confirm=true.")
    return catalog.delete_neighborhood(neighborhood_id)


# Couriers


def list_couriers() -> list[Courier]:
    return catalog.list_couriers()


def create_courier(name: str, phone: Optional[str] = None, password: Optional[str] = None) -> Courier:
    name = clean_name(name, "Courier name")
    _ensure_unique(name, catalog.list_couriers(), kind="Courier")
    password_hash = hash_password(password or settings.default_courier_password)
    courier = catalog.insert_courier(name, (phone or "").strip() or None, password_hash)
    logger.info(f"Created courier '{courier.name}'")
    return courier


def update_courier(
    courier_id: str,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[Courier]:
    changes: dict = {}
    if name is not None:
        changes["name"] = clean_name(name, "Courier name")
        _ensure_unique(changes["name"], catalog.list_couriers(), exclude_id=courier_id, kind="Courier")
    if phone is not None:
        changes["phone"] = phone.strip() or None
    if password:
        changes["password_hash"] = hash_password(password)
    if not changes:
        raise ValueError("No changes supplied.")
    return catalog.update_courier(courier_id, changes)


def delete_courier(courier_id: str, confirm: bool = False) -> bool:
    if not confirm:
        raise ValueError("Deleting a courier requires confirm=true.")
    return catalog.delete_courier(courier_id)


# Pizzeria configuration


def mask_key(key: Optional[str]) -> Optional[str]:
    if not key:
        return None
    return f"{'*' * max(len(key) - 4, 4)}{key[-4:]}"


def get_pizzeria_config() -> PizzeriaConfig:
    """Stored configuration, falling back to the environment defaults."""
    stored = catalog.load_pizzeria_config()
    if stored is None:
        return PizzeriaConfig(address=settings.pizzeria_address, google_maps_api_key=settings.google_maps_api_key)
    if not stored.address:
        stored.address = settings.pizzeria_address
    return stored


def update_pizzeria_config(address: Optional[str] = None, google_maps_api_key: Optional[str] = None) -> PizzeriaConfig:
    current = catalog.load_pizzeria_config() or PizzeriaConfig(address=settings.pizzeria_address)
    if address is not None:
        current.address = clean_name(address, "Pizzeria address")
    if google_maps_api_key is not None:
        current.google_maps_api_key = google_maps_api_key.strip() or None
    saved = catalog.save_pizzeria_config(current)
    reset_advisory()
    return saved
