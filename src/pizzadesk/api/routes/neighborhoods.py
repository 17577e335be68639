"""Neighborhood endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Path, Query, status

from ...persistence.store import StoreUnavailableError
from ...schemas.catalog import (
    NeighborhoodCreateRequest,
    NeighborhoodModel,
    NeighborhoodMutationResponse,
    NeighborhoodUpdateRequest,
)
from ...schemas.common import NoticeModel
from ...services.catalog import create_neighborhood, delete_neighborhood, list_neighborhoods, update_neighborhood
from ..errors import bad_request, store_unavailable, unexpected

router = APIRouter(prefix="/neighborhoods", tags=["neighborhoods"])

_GONE = NoticeModel(level="warning", message="Neighborhood was already removed by another session.")


@router.get("", response_model=List[NeighborhoodModel], status_code=status.HTTP_200_OK)
def get_neighborhoods() -> List[NeighborhoodModel]:
    try:
        return [NeighborhoodModel.from_domain(item) for item in list_neighborhoods()]
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc


@router.post("", response_model=NeighborhoodMutationResponse, status_code=status.HTTP_201_CREATED)
def add_neighborhood(payload: NeighborhoodCreateRequest) -> NeighborhoodMutationResponse:
    try:
        neighborhood = create_neighborhood(payload.name, payload.delivery_fee)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("create neighborhood", exc) from exc
    return NeighborhoodMutationResponse(
        neighborhood=NeighborhoodModel.from_domain(neighborhood),
        notices=[NoticeModel(level="info", message=f"Neighborhood '{neighborhood.name}' created.")],
    )


@router.patch("/{neighborhood_id}", response_model=NeighborhoodMutationResponse, status_code=status.HTTP_200_OK)
def edit_neighborhood(
    payload: NeighborhoodUpdateRequest,
    neighborhood_id: str = Path(..., description="Neighborhood identifier"),
) -> NeighborhoodMutationResponse:
    try:
        neighborhood = update_neighborhood(neighborhood_id, payload.name, payload.delivery_fee)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("update neighborhood", exc) from exc
    if neighborhood is None:
        return NeighborhoodMutationResponse(gone=True, notices=[_GONE])
    return NeighborhoodMutationResponse(
        neighborhood=NeighborhoodModel.from_domain(neighborhood),
        notices=[NoticeModel(level="info", message="Neighborhood updated.")],
    )


@router.delete("/{neighborhood_id}", response_model=NeighborhoodMutationResponse, status_code=status.HTTP_200_OK)
def remove_neighborhood(
    neighborhood_id: str = Path(..., description="Neighborhood identifier"),
    confirm: bool = Query(default=False, description="Must be true to delete"),
) -> NeighborhoodMutationResponse:
    try:
        removed = delete_neighborhood(neighborhood_id, confirm=confirm)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("delete neighborhood", exc) from exc
    if not removed:
        return NeighborhoodMutationResponse(gone=True, notices=[_GONE])
    return NeighborhoodMutationResponse(notices=[NoticeModel(level="info", message="Neighborhood removed.")])
