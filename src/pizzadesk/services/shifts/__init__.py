"""Shift window services."""

from .policy import (
    ShiftPolicy,
    belongs_to_today,
    classify,
    current_reference_date,
    get_timezone,
    minutes_since,
    policy_from_settings,
    resolve,
)

__all__ = [
    "ShiftPolicy",
    "belongs_to_today",
    "classify",
    "current_reference_date",
    "get_timezone",
    "minutes_since",
    "policy_from_settings",
    "resolve",
]
