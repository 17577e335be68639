"""Daily closing: load a shift's deliveries, aggregate and export them."""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from ...config import settings
from ...models.domain import DeliveryRecord, Notice, ShiftWindow
from ...persistence.deliveries import select_deliveries
from ...persistence.filesystem import ArchiveStorage
from ...persistence.store import StoreUnavailableError
from ..shifts import current_reference_date, get_timezone, policy_from_settings, resolve
from .aggregator import ClosingReport, aggregate
from .filtering import ALL_COURIERS, filter_records, sort_newest_first
from .formatter import ALL_COURIERS_LABEL, closing_to_csv, closing_to_json, closing_to_receipt, closing_to_xlsx

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {
    "json": "application/json",
    "csv": "text/csv",
    "txt": "text/plain",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(slots=True)
class ClosingResult:
    reference_date: date
    courier_id: str
    window: ShiftWindow
    records: list[DeliveryRecord]
    closing: ClosingReport
    notices: list[Notice] = field(default_factory=list)
    stale: bool = False

    @property
    def courier_label(self) -> str:
        if self.courier_id == ALL_COURIERS:
            return ALL_COURIERS_LABEL
        report = self.closing.report_for(self.courier_id)
        return report.courier_name if report else self.courier_id


# Last successfully loaded closing per (date, courier filter), least recent first.
_LAST_GOOD: OrderedDict[tuple[date, str], ClosingResult] = OrderedDict()
LAST_GOOD_LIMIT = 32


def clear_cache() -> None:
    _LAST_GOOD.clear()


def _remember(key: tuple[date, str], result: ClosingResult) -> None:
    _LAST_GOOD[key] = result
    _LAST_GOOD.move_to_end(key)
    while len(_LAST_GOOD) > LAST_GOOD_LIMIT:
        _LAST_GOOD.popitem(last=False)


def build_closing(
    reference_date: Optional[date] = None,
    courier_id: Optional[str] = ALL_COURIERS,
    *,
    now: Optional[datetime] = None,
) -> ClosingResult:
    """Closing for one operational day.

    When the store cannot be reached the last report loaded for the same date
    and courier is returned with ``stale=True`` and an error notice. Without a
    cached report the ``StoreUnavailableError`` propagates.
    """
    tz = get_timezone(settings.timezone)
    policy = policy_from_settings()
    if reference_date is None:
        reference_date = current_reference_date(policy, tz, now or datetime.now(tz))
    courier_id = courier_id or ALL_COURIERS
    window = resolve(reference_date, policy, tz)
    key = (reference_date, courier_id)

    try:
        fetched = select_deliveries(
            window.start,
            window.end,
            None if courier_id == ALL_COURIERS else courier_id,
        )
    except StoreUnavailableError as exc:
        cached = _LAST_GOOD.get(key)
        if cached is None:
            raise
        logger.warning(f"Serving cached closing for {reference_date.isoformat()} ({courier_id}): {exc}")
        return replace(
            cached,
            stale=True,
            notices=[Notice.error(f"Could not reach the record store; showing the last loaded report. ({exc})")],
        )

    # exact [start, end) containment, independent of store-side comparison
    records = sort_newest_first(filter_records(fetched, window, courier_id))
    result = ClosingResult(
        reference_date=reference_date,
        courier_id=courier_id,
        window=window,
        records=records,
        closing=aggregate(records),
    )
    _remember(key, result)
    return result


def closing_payload(result: ClosingResult) -> dict:
    return closing_to_json(result.reference_date, result.courier_id, result.closing, result.records)


def render_export(result: ClosingResult, export_format: str) -> tuple[bytes, str, str]:
    """Returns ``(content, media_type, filename)``."""
    export_format = export_format.lower()
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{export_format}'. Use one of: {', '.join(EXPORT_FORMATS)}.")
    tz = get_timezone(settings.timezone)
    stem = f"fechamento_{result.reference_date.isoformat()}"
    if result.courier_id != ALL_COURIERS:
        stem = f"{stem}_{result.courier_id}"

    if export_format == "json":
        content = json.dumps(closing_payload(result), ensure_ascii=False, indent=2).encode("utf-8")
    elif export_format == "csv":
        content = closing_to_csv(result.records, result.closing, tz).encode("utf-8")
    elif export_format == "txt":
        content = closing_to_receipt(result.reference_date, result.courier_label, result.closing).encode("utf-8")
    else:
        content = closing_to_xlsx(result.reference_date, result.courier_label, result.closing, result.records, tz)
    return content, EXPORT_FORMATS[export_format], f"{stem}.{export_format}"


def archive_closing(result: ClosingResult, storage: Optional[ArchiveStorage] = None) -> Path:
    """Write every export of ``result`` into a new run directory."""
    tz = get_timezone(settings.timezone)
    run_dir = (storage or ArchiveStorage()).save_all(
        {
            "summary.json": closing_payload(result),
            "closing.csv": closing_to_csv(result.records, result.closing, tz),
            "receipt.txt": closing_to_receipt(result.reference_date, result.courier_label, result.closing),
            "closing.xlsx": closing_to_xlsx(result.reference_date, result.courier_label, result.closing, result.records, tz),
        }
    )
    logging.info(f"Archived closing for {result.reference_date.isoformat()} in {run_dir.name}")
    return run_dir
