"""Route planning endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...persistence.store import StoreUnavailableError
from ...schemas.common import notices_to_models
from ...schemas.routing import RouteLegModel, RoutePlanRequest, RoutePlanResponse
from ...services.deliveries import plan_delivery_route
from ..errors import bad_request, store_unavailable, unexpected

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    try:
        route, notices = plan_delivery_route(payload.delivery_ids, payload.stops, persist=payload.persist)
    except ValueError as exc:
        raise bad_request(exc) from exc
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    except Exception as exc:
        raise unexpected("plan route", exc) from exc
    return RoutePlanResponse(
        origin=route.origin,
        resolved=route.resolved,
        totalKm=round(route.total_km, 1),
        legs=[
            RouteLegModel(
                sequence=leg.sequence,
                stopIndex=leg.stop_index,
                address=leg.address,
                distanceKm=leg.distance_km,
                creditedKm=leg.credited_km,
                duration=leg.duration,
            )
            for leg in route.legs
        ],
        error=route.error,
        notices=notices_to_models(notices),
    )
