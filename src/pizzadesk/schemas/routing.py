"""Route planning schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import NoticeModel


class RoutePlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    delivery_ids: List[str] = Field(default_factory=list, alias="deliveryIds")
    stops: List[str] = Field(default_factory=list, description="Free addresses, used when no delivery ids are given.")
    persist: bool = Field(True, description="Write each leg's credited distance back onto its delivery.")


class RouteLegModel(BaseModel):
    sequence: int
    stopIndex: int
    address: str
    distanceKm: float
    creditedKm: float
    duration: str = ""


class RoutePlanResponse(BaseModel):
    origin: str
    resolved: bool
    totalKm: float
    legs: List[RouteLegModel] = []
    error: Optional[str] = None
    notices: List[NoticeModel] = []
