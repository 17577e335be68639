"""Neighborhood, courier and pizzeria config schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import Courier, Neighborhood
from .common import NoticeModel


class NeighborhoodCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    delivery_fee: Union[Decimal, str] = Field(..., alias="deliveryFee")


class NeighborhoodUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    delivery_fee: Union[Decimal, str, None] = Field(None, alias="deliveryFee")


class NeighborhoodModel(BaseModel):
    id: str
    name: str
    deliveryFee: float

    @classmethod
    def from_domain(cls, neighborhood: Neighborhood) -> "NeighborhoodModel":
        return cls(id=neighborhood.id, name=neighborhood.name, deliveryFee=float(neighborhood.delivery_fee))


class NeighborhoodMutationResponse(BaseModel):
    neighborhood: Optional[NeighborhoodModel] = None
    gone: bool = False
    notices: List[NoticeModel] = []


class CourierCreateRequest(BaseModel):
    name: str
    phone: Optional[str] = None
    password: Optional[str] = Field(None, description="Defaults to the configured initial password.")


class CourierUpdateRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class CourierModel(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None

    @classmethod
    def from_domain(cls, courier: Courier) -> "CourierModel":
        return cls(id=courier.id, name=courier.name, phone=courier.phone)


class CourierMutationResponse(BaseModel):
    courier: Optional[CourierModel] = None
    gone: bool = False
    notices: List[NoticeModel] = []


class CourierOverviewModel(CourierModel):
    todayDeliveries: int = 0
    todayDeliveryFees: float = 0.0
    todayKm: float = 0.0


class PizzeriaConfigModel(BaseModel):
    address: str
    googleMapsApiKey: Optional[str] = Field(None, description="Masked; only the last four characters are shown.")
    hasApiKey: bool = False


class PizzeriaConfigUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address: Optional[str] = None
    google_maps_api_key: Optional[str] = Field(None, alias="googleMapsApiKey")


class PizzeriaConfigResponse(BaseModel):
    config: PizzeriaConfigModel
    notices: List[NoticeModel] = []
