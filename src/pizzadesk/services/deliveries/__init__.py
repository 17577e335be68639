"""Delivery services."""

from .service import (
    DeliveryOutcome,
    active_window,
    clear_deliveries,
    delete_delivery,
    open_board,
    plan_delivery_route,
    register_delivery,
    update_delivery,
)

__all__ = [
    "DeliveryOutcome",
    "active_window",
    "clear_deliveries",
    "delete_delivery",
    "open_board",
    "plan_delivery_route",
    "register_delivery",
    "update_delivery",
]
