"""Login schemas."""

from __future__ import annotations

from pydantic import BaseModel


class CourierLoginRequest(BaseModel):
    name: str
    password: str


class RestaurantLoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    role: str
    id: str | None = None
    name: str
