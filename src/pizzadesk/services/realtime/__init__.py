"""Live delivery boards kept in sync with store change events."""

from .board import BoardState, DeliveryBoard, apply_change
from .coalescer import RefetchCoalescer
from .events import DELETE, INSERT, UPDATE, ChangeEvent
from .registry import BoardRegistry, get_registry, reset_registry

__all__ = [
    "BoardRegistry",
    "BoardState",
    "ChangeEvent",
    "DELETE",
    "DeliveryBoard",
    "INSERT",
    "RefetchCoalescer",
    "UPDATE",
    "apply_change",
    "get_registry",
    "reset_registry",
]
