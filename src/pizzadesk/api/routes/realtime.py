"""Record store change feed receiver."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, status

from ...services.realtime import ChangeEvent, get_registry
from ..errors import bad_request

router = APIRouter(prefix="/realtime", tags=["realtime"])


@router.post("/webhook", status_code=status.HTTP_202_ACCEPTED)
def receive_change(payload: Dict[str, Any] = Body(...)) -> dict:
    """Apply a Supabase database webhook to every open delivery board."""
    try:
        event = ChangeEvent.from_webhook(payload)
    except ValueError as exc:
        raise bad_request(exc) from exc
    registry = get_registry()
    scheduled = registry.dispatch(event)
    reloaded = registry.pump()
    logging.debug(f"{event.event_type} on {event.table}: {scheduled} reload(s) scheduled, {reloaded} applied")
    return {"accepted": True, "boards": len(registry.boards()), "reloadsScheduled": scheduled, "reloaded": reloaded}
