"""Closing report and export archive API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import NoticeModel


class ClosingSummaryModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  total_deliveries: int = Field(..., alias='totalDeliveries')
  total_delivery_fees: float = Field(..., alias='totalDeliveryFees')
  total_order_value: float = Field(..., alias='totalOrderValue')
  total_km: float = Field(..., alias='totalKm')
  average_fee: float = Field(0.0, alias='averageFee')
  average_ticket: float = Field(0.0, alias='averageTicket')
  km_per_delivery: float = Field(0.0, alias='kmPerDelivery')


class DelivererReportModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  courier_id: str = Field(..., alias='courierId')
  courier_name: str = Field(..., alias='courierName')
  total_deliveries: int = Field(..., alias='totalDeliveries')
  total_delivery_fees: float = Field(..., alias='totalDeliveryFees')
  total_order_value: float = Field(..., alias='totalOrderValue')
  total_km: float = Field(..., alias='totalKm')
  deliveries_by_type: Dict[str, int] = Field(default_factory=dict, alias='deliveriesByType')
  values_by_type: Dict[str, float] = Field(default_factory=dict, alias='valuesByType')


class ClosingRecordModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  id: str
  courier_id: str = Field(..., alias='courierId')
  courier_name: str = Field(..., alias='courierName')
  address: str
  neighborhood_name: str = Field(..., alias='neighborhoodName')
  payment_type: str = Field(..., alias='paymentType')
  order_value: float = Field(..., alias='orderValue')
  delivery_fee: float = Field(..., alias='deliveryFee')
  distance_km: Optional[float] = Field(None, alias='distanceKm')
  round_trip_km: Optional[float] = Field(None, alias='roundTripKm')
  created_at: datetime = Field(..., alias='createdAt')


class ClosingResponse(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  date: str
  courier_filter: str = Field(..., alias='courierFilter')
  courier_label: str = Field(..., alias='courierLabel')
  window_start: datetime = Field(..., alias='windowStart')
  window_end: datetime = Field(..., alias='windowEnd')
  summary: ClosingSummaryModel
  per_courier_reports: List[DelivererReportModel] = Field(default_factory=list, alias='perCourierReports')
  records: List[ClosingRecordModel] = Field(default_factory=list)
  stale: bool = False
  notices: List[NoticeModel] = Field(default_factory=list)


class ArchiveResponse(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  run_id: str = Field(..., alias='runId')
  files: List[str]
  notices: List[NoticeModel] = Field(default_factory=list)


class ReportExportModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  id: str
  run_id: str = Field(..., alias='runId')
  file_name: str = Field(..., alias='fileName')
  file_type: str = Field(..., alias='fileType')
  size_bytes: int = Field(..., alias='sizeBytes')
  created_at: Optional[datetime] = Field(None, alias='createdAt')
  reference_date: Optional[str] = Field(None, alias='referenceDate')
  courier_filter: Optional[str] = Field(None, alias='courierFilter')
  description: Optional[str] = None
  download_path: str = Field(..., alias='downloadPath')


class ReportRunModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  id: str
  run_type: str = Field(..., alias='runType')
  created_at: Optional[datetime] = Field(None, alias='createdAt')
  reference_date: Optional[str] = Field(None, alias='referenceDate')
  courier_filter: Optional[str] = Field(None, alias='courierFilter')
  total_deliveries: int = Field(0, alias='totalDeliveries')
  status: str
