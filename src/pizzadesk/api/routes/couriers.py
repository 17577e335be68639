"""Courier endpoints: roster, today's panel and maintenance."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, HTTPException, Path, Query, status

from ...persistence.catalog import get_courier
from ...persistence.store import StoreUnavailableError
from ...schemas.catalog import (
    CourierCreateRequest,
    CourierModel,
    CourierMutationResponse,
    CourierOverviewModel,
    CourierUpdateRequest,
)
from ...schemas.common import NoticeModel
from ...schemas.deliveries import CourierTodayResponse, DeliveryModel
from ...services.catalog import create_courier, delete_courier, list_couriers, update_courier
from ...services.deliveries import open_board
from ...services.reports.aggregator import aggregate
from ...services.reports.closing import build_closing
from ...services.shifts import minutes_since
from ..errors import bad_request, store_unavailable, unexpected

router = APIRouter(prefix="/couriers", tags=["couriers"])


@router.get("", response_model=List[CourierOverviewModel], status_code=status.HTTP_200_OK)
def list_courier_overview() -> List[CourierOverviewModel]:
    """All couriers with their totals for the current shift."""
    try:
        couriers = list_couriers()
        closing = build_closing().closing
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc

    overview: List[CourierOverviewModel] = []
    for courier in couriers:
        report = closing.report_for(courier.id)
        overview.append(
            CourierOverviewModel(
                id=courier.id,
                name=courier.name,
                phone=courier.phone,
                todayDeliveries=report.total_deliveries if report else 0,
                todayDeliveryFees=float(report.total_delivery_fees) if report else 0.0,
                todayKm=float(report.total_km) if report else 0.0,
            )
        )
    return overview


@router.get("/{courier_id}/today", response_model=CourierTodayResponse, status_code=status.HTTP_200_OK)
def get_courier_today(courier_id: str = Path(..., description="Courier identifier")) -> CourierTodayResponse:
    try:
        courier = get_courier(courier_id)
        if courier is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Courier '{courier_id}' not found.")
        board = open_board(courier.id)
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc

    records = board.records
    report = aggregate(records).report_for(courier.id)
    now = datetime.now(timezone.utc)
    return CourierTodayResponse(
        courierId=courier.id,
        courierName=courier.name,
        date=board.window.reference_date.isoformat(),
        windowStart=board.window.start,
        windowEnd=board.window.end,
        totalDeliveries=report.total_deliveries if report else 0,
        totalDeliveryFees=float(report.total_delivery_fees) if report else 0.0,
        totalOrderValue=float(report.total_order_value) if report else 0.0,
        totalKm=float(report.total_km) if report else 0.0,
        deliveries=[DeliveryModel.from_record(record, minutes_since(record.created_at, now)) for record in records],
    )


@router.post("", response_model=CourierMutationResponse, status_code=status.HTTP_201_CREATED)
def add_courier(payload: CourierCreateRequest) -> CourierMutationResponse:
    try:
        courier = create_courier(payload.name, payload.phone, payload.password)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("create courier", exc) from exc
    return CourierMutationResponse(
        courier=CourierModel.from_domain(courier),
        notices=[NoticeModel(level="info", message=f"Courier '{courier.name}' created.")],
    )


@router.patch("/{courier_id}", response_model=CourierMutationResponse, status_code=status.HTTP_200_OK)
def edit_courier(
    payload: CourierUpdateRequest,
    courier_id: str = Path(..., description="Courier identifier"),
) -> CourierMutationResponse:
    try:
        courier = update_courier(courier_id, payload.name, payload.phone, payload.password)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("update courier", exc) from exc
    if courier is None:
        return CourierMutationResponse(
            gone=True,
            notices=[NoticeModel(level="warning", message="Courier was already removed by another session.")],
        )
    return CourierMutationResponse(
        courier=CourierModel.from_domain(courier),
        notices=[NoticeModel(level="info", message="Courier updated.")],
    )


@router.delete("/{courier_id}", response_model=CourierMutationResponse, status_code=status.HTTP_200_OK)
def remove_courier(
    courier_id: str = Path(..., description="Courier identifier"),
    confirm: bool = Query(default=False, description="Must be true to delete"),
) -> CourierMutationResponse:
    try:
        removed = delete_courier(courier_id, confirm=confirm)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("delete courier", exc) from exc
    if not removed:
        return CourierMutationResponse(
            gone=True,
            notices=[NoticeModel(level="warning", message="Courier was already removed by another session.")],
        )
    return CourierMutationResponse(notices=[NoticeModel(level="info", message="Courier removed.")])
