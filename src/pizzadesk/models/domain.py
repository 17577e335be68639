"""Domain models for deliveries, couriers and neighborhoods."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentType(str, Enum):
    """Channel or method through which an order was paid."""

    IFOOD = "ifood"
    APP = "app"
    CARD = "card"
    CASH = "cash"
    PIX = "pix"
    RAPPI = "rappi"


PAYMENT_TYPE_LABELS: dict[str, str] = {
    PaymentType.IFOOD.value: "iFood",
    PaymentType.APP.value: "App Próprio",
    PaymentType.CARD.value: "Cartão",
    PaymentType.CASH.value: "Dinheiro",
    PaymentType.PIX.value: "PIX",
    PaymentType.RAPPI.value: "Rappi",
}


def payment_type_label(code: str) -> str:
    """Display label for a payment code; unknown codes are shown as stored."""
    return PAYMENT_TYPE_LABELS.get(code, code)


def is_known_payment_type(code: str) -> bool:
    return code in PAYMENT_TYPE_LABELS


class SyncState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


@dataclass(slots=True)
class DeliveryRecord:
    """One delivery transaction as stored in the `deliveries` table."""

    id: str
    courier_id: str
    courier_name: str
    address: str
    neighborhood_name: str
    payment_type: str
    order_value: Decimal
    delivery_fee: Decimal
    created_at: datetime
    distance_km: Optional[float] = None
    round_trip_km: Optional[float] = None
    sync_state: SyncState = SyncState.CONFIRMED
    temp_id: Optional[str] = None


@dataclass(slots=True)
class Neighborhood:
    id: str
    name: str
    delivery_fee: Decimal


@dataclass(slots=True)
class Courier:
    """Represents a delivery courier. The password is only ever kept hashed."""

    id: str
    name: str
    phone: Optional[str] = None
    password_hash: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class ShiftWindow:
    """Resolved `[start, end)` interval of one operational day."""

    start: datetime
    end: datetime
    reference_date: date

    def contains(self, moment: datetime) -> bool:
        # same-zone aware datetimes compare by wall clock; bounds are instants
        instant = moment.astimezone(timezone.utc)
        return self.start.astimezone(timezone.utc) <= instant < self.end.astimezone(timezone.utc)


@dataclass(slots=True)
class PizzeriaConfig:
    address: str
    google_maps_api_key: Optional[str] = None
    id: Optional[str] = None


@dataclass(slots=True)
class Notice:
    """Operator-facing feedback attached to a mutating response."""

    level: str
    message: str

    @classmethod
    def info(cls, message: str) -> "Notice":
        return cls("info", message)

    @classmethod
    def warning(cls, message: str) -> "Notice":
        return cls("warning", message)

    @classmethod
    def error(cls, message: str) -> "Notice":
        return cls("error", message)
