"""Row change notifications from the Record Store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
EVENT_TYPES = (INSERT, UPDATE, DELETE)


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    event_type: str
    table: str
    record: Optional[dict[str, Any]] = None
    old_record: Optional[dict[str, Any]] = None

    @property
    def row_id(self) -> Optional[str]:
        for row in (self.record, self.old_record):
            if row and row.get("id") is not None:
                return str(row["id"])
        return None

    @classmethod
    def from_webhook(cls, payload: dict[str, Any]) -> "ChangeEvent":
        """Parse a Supabase database webhook body.

        ``{"type": "INSERT", "table": "deliveries", "record": {...}, "old_record": null}``
        """
        event_type = str(payload.get("type") or payload.get("eventType") or "").upper()
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unsupported change type '{event_type}'")
        table = payload.get("table")
        if not table:
            raise ValueError("Change event is missing the table name")
        return cls(
            event_type=event_type,
            table=str(table),
            record=payload.get("record") or payload.get("new") or None,
            old_record=payload.get("old_record") or payload.get("old") or None,
        )
