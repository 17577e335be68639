"""Closing report and export archive endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, HTTPException, Path, Query, status
from fastapi.responses import FileResponse, Response

from ...persistence.store import StoreUnavailableError
from ...schemas.common import NoticeModel, notices_to_models
from ...schemas.reports import ArchiveResponse, ClosingResponse, ReportExportModel, ReportRunModel
from ...services.reports import ALL_COURIERS, list_export_files, list_runs, resolve_export_file
from ...services.reports.closing import (
  EXPORT_FORMATS,
  ClosingResult,
  archive_closing,
  build_closing,
  closing_payload,
  render_export,
)
from ..errors import bad_request, store_unavailable, unexpected

router = APIRouter(prefix="/reports", tags=["reports"])


def _load_closing(reference_date: date | None, courier: str) -> ClosingResult:
  try:
    return build_closing(reference_date, courier)
  except StoreUnavailableError as exc:
    raise store_unavailable(exc) from exc


@router.get("/closing", response_model=ClosingResponse, status_code=status.HTTP_200_OK)
def get_closing(
  reference_date: date | None = Query(default=None, alias="date", description="Operational day (YYYY-MM-DD); defaults to the current shift"),
  courier: str = Query(default=ALL_COURIERS, description="Courier id or 'all'"),
) -> ClosingResponse:
  result = _load_closing(reference_date, courier)
  payload = closing_payload(result)
  payload.update(
    courierLabel=result.courier_label,
    windowStart=result.window.start,
    windowEnd=result.window.end,
    stale=result.stale,
    notices=[notice.model_dump() for notice in notices_to_models(result.notices)],
  )
  return ClosingResponse.model_validate(payload)


@router.get("/closing/export", status_code=status.HTTP_200_OK)
def export_closing(
  reference_date: date | None = Query(default=None, alias="date", description="Operational day (YYYY-MM-DD)"),
  courier: str = Query(default=ALL_COURIERS, description="Courier id or 'all'"),
  export_format: str = Query(default="json", alias="format", description=f"One of: {', '.join(EXPORT_FORMATS)}"),
) -> Response:
  result = _load_closing(reference_date, courier)
  try:
    content, media_type, filename = render_export(result, export_format)
  except ValueError as exc:
    raise bad_request(exc) from exc
  headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
  if result.stale:
    headers["X-Closing-Stale"] = "true"
  return Response(content=content, media_type=media_type, headers=headers)


@router.post("/closing/archive", response_model=ArchiveResponse, status_code=status.HTTP_201_CREATED)
def archive_closing_exports(
  reference_date: date | None = Query(default=None, alias="date", description="Operational day (YYYY-MM-DD)"),
  courier: str = Query(default=ALL_COURIERS, description="Courier id or 'all'"),
) -> ArchiveResponse:
  result = _load_closing(reference_date, courier)
  try:
    run_dir = archive_closing(result)
  except OSError as exc:
    raise unexpected("archive closing", exc) from exc
  notices = notices_to_models(result.notices)
  notices.insert(0, NoticeModel(level="info", message=f"Closing archived as {run_dir.name}."))
  return ArchiveResponse(
    run_id=run_dir.name,
    files=sorted(path.name for path in run_dir.iterdir() if path.is_file()),
    notices=notices,
  )


@router.get("/exports", response_model=list[ReportExportModel])
def get_report_exports(
  reference_date: str | None = Query(default=None, alias="date", description="Filter by operational day"),
  file_type: str | None = Query(default=None, description="Filter by file type (CSV, JSON, TXT, XLSX)"),
  limit: int | None = Query(default=None, gt=0, description="Maximum number of exports to return"),
) -> list[ReportExportModel]:
  exports = list_export_files(reference_date=reference_date, file_type=file_type, limit=limit)
  return [ReportExportModel.model_validate(item) for item in exports]


@router.get("/runs", response_model=list[ReportRunModel])
def get_report_runs(
  reference_date: str | None = Query(default=None, alias="date", description="Filter by operational day"),
  courier: str | None = Query(default=None, description="Filter by courier filter used"),
  limit: int | None = Query(default=None, gt=0, description="Maximum number of runs to return"),
) -> list[ReportRunModel]:
  runs = list_runs(reference_date=reference_date, courier=courier, limit=limit)
  return [ReportRunModel.model_validate(item) for item in runs]


@router.get(
  "/exports/{run_id}/{file_name:path}",
  response_class=FileResponse,
  status_code=status.HTTP_200_OK,
)
def download_export_file(
  run_id: str = Path(..., description="Run directory identifier"),
  file_name: str = Path(..., description="File name within the run directory"),
) -> FileResponse:
  try:
    file_path = resolve_export_file(run_id, file_name)
  except FileNotFoundError as exc:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

  return FileResponse(
    path=file_path,
    filename=file_path.name,
    media_type=EXPORT_FORMATS.get(file_path.suffix.lower().lstrip("."), "application/octet-stream"),
    headers={"Content-Disposition": f'attachment; filename="{file_path.name}"'},
  )
