"""Pizzeria configuration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...models.domain import PizzeriaConfig
from ...persistence.store import StoreUnavailableError
from ...schemas.catalog import PizzeriaConfigModel, PizzeriaConfigResponse, PizzeriaConfigUpdateRequest
from ...schemas.common import NoticeModel
from ...services.catalog import get_pizzeria_config, mask_key, update_pizzeria_config
from ..errors import bad_request, store_unavailable, unexpected

router = APIRouter(prefix="/config", tags=["config"])


def _to_model(config: PizzeriaConfig) -> PizzeriaConfigModel:
    return PizzeriaConfigModel(
        address=config.address,
        googleMapsApiKey=mask_key(config.google_maps_api_key),
        hasApiKey=bool(config.google_maps_api_key),
    )


@router.get("", response_model=PizzeriaConfigResponse, status_code=status.HTTP_200_OK)
def read_config() -> PizzeriaConfigResponse:
    try:
        return PizzeriaConfigResponse(config=_to_model(get_pizzeria_config()))
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc


@router.put("", response_model=PizzeriaConfigResponse, status_code=status.HTTP_200_OK)
def write_config(payload: PizzeriaConfigUpdateRequest) -> PizzeriaConfigResponse:
    try:
        saved = update_pizzeria_config(payload.address, payload.google_maps_api_key)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("save pizzeria config", exc) from exc
    return PizzeriaConfigResponse(
        config=_to_model(saved),
        notices=[NoticeModel(level="info", message="Configuration saved.")],
    )
