"""Archive of saved closing exports."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...config import settings
from ...persistence.filesystem import RUN_PREFIX, RUN_TIMESTAMP_FORMAT

OUTPUT_ROOT = (settings.data_root / "outputs").resolve()

_TIMESTAMP_FORMAT = RUN_TIMESTAMP_FORMAT


def list_runs(
    *,
    reference_date: Optional[str] = None,
    courier: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    if not OUTPUT_ROOT.exists():
        return []

    normalized_courier = _normalize(courier) if courier else None

    runs: List[dict] = []
    for run_dir in sorted((p for p in OUTPUT_ROOT.iterdir() if p.is_dir()), key=_sort_key, reverse=True):
        run_info = _build_run_summary(run_dir)
        if not run_info:
            continue
        if reference_date and run_info.get("reference_date") != reference_date:
            continue
        if normalized_courier and _normalize(run_info.get("courier_filter")) != normalized_courier:
            continue

        runs.append(run_info)
        if limit and len(runs) >= limit:
            break
    return runs


def list_export_files(
    *,
    reference_date: Optional[str] = None,
    file_type: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    normalized_file_type = _normalize(file_type) if file_type else None

    exports: List[dict] = []
    for run_summary in list_runs(reference_date=reference_date):
        run_dir = OUTPUT_ROOT / run_summary["id"]
        for file_path in sorted(run_dir.glob("*")):
            if not file_path.is_file():
                continue
            export_info = _build_file_record(file_path, run_dir, run_summary)
            if normalized_file_type and _normalize(export_info.get("file_type")) != normalized_file_type:
                continue
            exports.append(export_info)
            if limit and len(exports) >= limit:
                return exports
    return exports


def resolve_export_file(run_id: str, filename: str) -> Path:
    candidate = (OUTPUT_ROOT / run_id / filename).resolve()
    if not candidate.is_file():
        raise FileNotFoundError(filename)
    if OUTPUT_ROOT not in candidate.parents:
        raise FileNotFoundError(filename)
    return candidate


def _build_run_summary(run_dir: Path) -> Optional[dict]:
    name_parts = run_dir.name.split("_")
    if len(name_parts) < 2 or name_parts[0] != RUN_PREFIX:
        return None
    summary_data = _load_summary(run_dir / "summary.json") or {}
    summary = summary_data.get("summary") if isinstance(summary_data.get("summary"), dict) else {}

    info: Dict[str, Any] = {
        "id": run_dir.name,
        "run_type": RUN_PREFIX,
        "created_at": _parse_timestamp(name_parts[-1]),
        "reference_date": summary_data.get("date"),
        "courier_filter": summary_data.get("courierFilter"),
        "total_deliveries": summary.get("totalDeliveries") or 0,
        "status": "complete" if summary_data else "incomplete",
    }
    return info


def _build_file_record(file_path: Path, run_dir: Path, run_summary: dict) -> dict:
    file_suffix = file_path.suffix[1:].upper() if file_path.suffix else ""
    run_id = run_dir.name

    return {
        "id": f"{run_id}:{file_path.name}",
        "run_id": run_id,
        "file_name": file_path.name,
        "file_type": file_suffix or "FILE",
        "size_bytes": file_path.stat().st_size,
        "created_at": run_summary.get("created_at"),
        "reference_date": run_summary.get("reference_date"),
        "courier_filter": run_summary.get("courier_filter"),
        "description": _describe_file(file_path.name),
        "download_path": f"{settings.api_prefix}/reports/exports/{run_id}/{file_path.name}",
    }


def _load_summary(path: Path) -> Optional[dict]:
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError:
        return None


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value, _TIMESTAMP_FORMAT)
    except ValueError:
        return None


def _describe_file(filename: str) -> str:
    lower = filename.lower()
    if lower == "summary.json":
        return "Closing summary"
    if lower.endswith(".csv"):
        return "CSV export"
    if lower.endswith(".txt"):
        return "Thermal receipt"
    if lower.endswith(".xlsx"):
        return "Spreadsheet export"
    return "Export file"


def _sort_key(path: Path) -> float:
    timestamp = _parse_timestamp(path.name.split("_")[-1])
    if timestamp:
        return timestamp.timestamp()
    return path.stat().st_mtime


def _normalize(value: Optional[str]) -> str:
    return value.lower().strip() if isinstance(value, str) else ""
