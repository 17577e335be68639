"""Delivery registration and maintenance endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Path, Query, status

from ...persistence.store import StoreUnavailableError
from ...schemas.common import notices_to_models
from ...schemas.deliveries import (
    ClearDeliveriesResponse,
    DeliveryCreateRequest,
    DeliveryModel,
    DeliveryMutationResponse,
    DeliveryUpdateRequest,
)
from ...services.deliveries import DeliveryOutcome, clear_deliveries, delete_delivery, register_delivery, update_delivery
from ..errors import bad_request, store_unavailable, unexpected

router = APIRouter(prefix="/deliveries", tags=["deliveries"])


def _to_response(outcome: DeliveryOutcome) -> DeliveryMutationResponse:
    return DeliveryMutationResponse(
        delivery=DeliveryModel.from_record(outcome.record) if outcome.record else None,
        degraded=outcome.degraded,
        gone=outcome.gone,
        notices=notices_to_models(outcome.notices),
    )


@router.post("", response_model=DeliveryMutationResponse, status_code=status.HTTP_201_CREATED)
def create_delivery(payload: DeliveryCreateRequest) -> DeliveryMutationResponse:
    try:
        outcome = register_delivery(
            courier_id=payload.courier_id,
            address=payload.address,
            neighborhood=payload.neighborhood,
            payment_type=payload.payment_type,
            order_value=payload.order_value,
            delivery_fee=payload.delivery_fee,
        )
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("register delivery", exc) from exc
    return _to_response(outcome)


@router.patch("/{delivery_id}", response_model=DeliveryMutationResponse, status_code=status.HTTP_200_OK)
def edit_delivery(
    payload: DeliveryUpdateRequest,
    delivery_id: str = Path(..., description="Delivery identifier"),
) -> DeliveryMutationResponse:
    try:
        outcome = update_delivery(
            delivery_id,
            address=payload.address,
            neighborhood=payload.neighborhood,
            payment_type=payload.payment_type,
            order_value=payload.order_value,
            delivery_fee=payload.delivery_fee,
        )
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("update delivery", exc) from exc
    return _to_response(outcome)


@router.delete("/{delivery_id}", response_model=DeliveryMutationResponse, status_code=status.HTTP_200_OK)
def remove_delivery(
    delivery_id: str = Path(..., description="Delivery identifier"),
    confirm: bool = Query(default=False, description="Must be true to delete"),
) -> DeliveryMutationResponse:
    try:
        outcome = delete_delivery(delivery_id, confirm=confirm)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("delete delivery", exc) from exc
    return _to_response(outcome)


@router.delete("", response_model=ClearDeliveriesResponse, status_code=status.HTTP_200_OK)
def clear_day(
    reference_date: date | None = Query(default=None, alias="date", description="Operational day (YYYY-MM-DD)"),
    confirm: bool = Query(default=False, description="Must be true to clear"),
) -> ClearDeliveriesResponse:
    """Remove every delivery of an operational day (defaults to the current shift)."""
    try:
        cleared_date, removed, notices = clear_deliveries(reference_date, confirm=confirm)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("clear deliveries", exc) from exc
    return ClearDeliveriesResponse(
        date=cleared_date.isoformat(),
        removed=removed,
        notices=notices_to_models(notices),
    )
