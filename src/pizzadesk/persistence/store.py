"""Shared helpers for Supabase-backed tables."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

from ..db.supabase import get_supabase_client

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreUnavailableError(RuntimeError):
    """The Record Store is not configured or a query against it failed."""


def require_client():
    supabase = get_supabase_client()
    if not supabase:
        raise StoreUnavailableError(
            "Supabase not configured. Set PIZZADESK_SUPABASE_URL and PIZZADESK_SUPABASE_KEY environment variables."
        )
    return supabase


def run_query(description: str, query: Callable[[Any], T]) -> T:
    """Execute ``query`` against the store client, translating failures."""
    supabase = require_client()
    try:
        return query(supabase)
    except StoreUnavailableError:
        raise
    except Exception as exc:
        logger.warning(f"Store query failed ({description}): {exc}")
        raise StoreUnavailableError(f"Failed to {description}: {exc}") from exc


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        moment = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        # timestamptz columns always carry an offset; bare values are UTC
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)
