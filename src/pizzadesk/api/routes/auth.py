"""Login endpoints for couriers and the restaurant."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...config import settings
from ...persistence.store import StoreUnavailableError
from ...schemas.auth import CourierLoginRequest, LoginResponse, RestaurantLoginRequest
from ...services.auth import CourierAuthenticator, verify_restaurant
from ..errors import store_unavailable

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/courier", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def courier_login(payload: CourierLoginRequest) -> LoginResponse:
    try:
        courier = CourierAuthenticator().verify(payload.name, payload.password)
    except StoreUnavailableError as exc:
        raise store_unavailable(exc) from exc
    if courier is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid courier name or password.")
    return LoginResponse(role="courier", id=courier.id, name=courier.name)


@router.post("/restaurant", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def restaurant_login(payload: RestaurantLoginRequest) -> LoginResponse:
    if not verify_restaurant(payload.username, payload.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password.")
    return LoginResponse(role="restaurant", name=settings.restaurant_username)
