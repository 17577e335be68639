"""Delivery request/response schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import DeliveryRecord, payment_type_label
from .common import NoticeModel

Amount = Union[Decimal, str, None]


class DeliveryCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    courier_id: str = Field(..., alias="courierId")
    address: str = ""
    neighborhood: str = ""
    payment_type: str = Field("", alias="paymentType")
    order_value: Amount = Field(None, alias="orderValue")
    delivery_fee: Amount = Field(None, alias="deliveryFee", description="Defaults to the neighborhood's fee.")


class DeliveryUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address: Optional[str] = None
    neighborhood: Optional[str] = None
    payment_type: Optional[str] = Field(None, alias="paymentType")
    order_value: Amount = Field(None, alias="orderValue")
    delivery_fee: Amount = Field(None, alias="deliveryFee")


class DeliveryModel(BaseModel):
    id: str
    courierId: str
    courierName: str
    address: str
    neighborhoodName: str
    paymentType: str
    paymentLabel: str
    orderValue: float
    deliveryFee: float
    distanceKm: Optional[float] = None
    roundTripKm: Optional[float] = None
    createdAt: datetime
    syncState: str = "confirmed"
    minutesAgo: Optional[int] = None

    @classmethod
    def from_record(cls, record: DeliveryRecord, minutes_ago: Optional[int] = None) -> "DeliveryModel":
        return cls(
            id=record.id,
            courierId=record.courier_id,
            courierName=record.courier_name,
            address=record.address,
            neighborhoodName=record.neighborhood_name,
            paymentType=record.payment_type,
            paymentLabel=payment_type_label(record.payment_type),
            orderValue=float(record.order_value),
            deliveryFee=float(record.delivery_fee),
            distanceKm=record.distance_km,
            roundTripKm=record.round_trip_km,
            createdAt=record.created_at,
            syncState=record.sync_state.value,
            minutesAgo=minutes_ago,
        )


class DeliveryMutationResponse(BaseModel):
    delivery: Optional[DeliveryModel] = None
    degraded: bool = False
    gone: bool = False
    notices: List[NoticeModel] = []


class ClearDeliveriesResponse(BaseModel):
    date: str
    removed: int
    notices: List[NoticeModel] = []


class CourierTodayResponse(BaseModel):
    courierId: str
    courierName: str
    date: str
    windowStart: datetime
    windowEnd: datetime
    totalDeliveries: int
    totalDeliveryFees: float
    totalOrderValue: float
    totalKm: float
    deliveries: List[DeliveryModel]
