"""Catalog services: neighborhoods, couriers and pizzeria configuration."""

from .service import (
    create_courier,
    create_neighborhood,
    delete_courier,
    delete_neighborhood,
    find_neighborhood,
    get_pizzeria_config,
    list_couriers,
    list_neighborhoods,
    mask_key,
    normalize_name,
    update_courier,
    update_neighborhood,
    update_pizzeria_config,
)

__all__ = [
    "create_courier",
    "create_neighborhood",
    "delete_courier",
    "delete_neighborhood",
    "find_neighborhood",
    "get_pizzeria_config",
    "list_couriers",
    "list_neighborhoods",
    "mask_key",
    "normalize_name",
    "update_courier",
    "update_neighborhood",
    "update_pizzeria_config",
]
