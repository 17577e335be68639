"""Fold delivery records into closing totals and per-courier reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from ...models.domain import DeliveryRecord

ZERO = Decimal("0")
CENTS = Decimal("0.01")
TENTHS = Decimal("0.1")


def to_decimal(value: object) -> Decimal:
    """Convert store/JSON numbers to Decimal without inheriting float noise."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def parse_amount(value: object, label: str) -> Decimal:
    """Validate operator-entered money: numeric, finite and not negative."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{label} is required.")
    text = value.strip().replace(",", ".") if isinstance(value, str) else value
    try:
        amount = to_decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"{label} must be a number, got {value!r}.") from exc
    if not amount.is_finite():
        raise ValueError(f"{label} must be a number, got {value!r}.")
    if amount < ZERO:
        raise ValueError(f"{label} must not be negative.")
    return amount


def km_of(record: DeliveryRecord) -> Decimal:
    return to_decimal(record.round_trip_km) if record.round_trip_km is not None else ZERO


@dataclass(slots=True)
class ClosingTotals:
    total_deliveries: int = 0
    total_delivery_fees: Decimal = ZERO
    total_order_value: Decimal = ZERO
    total_km: Decimal = ZERO

    def add(self, record: DeliveryRecord) -> None:
        self.total_deliveries += 1
        self.total_delivery_fees += to_decimal(record.delivery_fee)
        self.total_order_value += to_decimal(record.order_value)
        self.total_km += km_of(record)

    @property
    def average_fee(self) -> Decimal:
        if not self.total_deliveries:
            return ZERO
        return (self.total_delivery_fees / self.total_deliveries).quantize(CENTS, rounding=ROUND_HALF_UP)

    @property
    def average_ticket(self) -> Decimal:
        if not self.total_deliveries:
            return ZERO
        return (self.total_order_value / self.total_deliveries).quantize(CENTS, rounding=ROUND_HALF_UP)

    @property
    def km_per_delivery(self) -> Decimal:
        if not self.total_deliveries:
            return ZERO
        return (self.total_km / self.total_deliveries).quantize(TENTHS, rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class DelivererReport:
    courier_id: str
    courier_name: str
    total_deliveries: int = 0
    total_delivery_fees: Decimal = ZERO
    total_order_value: Decimal = ZERO
    total_km: Decimal = ZERO
    deliveries_by_type: dict[str, int] = field(default_factory=dict)
    values_by_type: dict[str, Decimal] = field(default_factory=dict)

    def add(self, record: DeliveryRecord) -> None:
        order_value = to_decimal(record.order_value)
        self.total_deliveries += 1
        self.total_delivery_fees += to_decimal(record.delivery_fee)
        self.total_order_value += order_value
        self.total_km += km_of(record)
        kind = record.payment_type
        self.deliveries_by_type[kind] = self.deliveries_by_type.get(kind, 0) + 1
        self.values_by_type[kind] = self.values_by_type.get(kind, ZERO) + order_value


@dataclass(slots=True)
class ClosingReport:
    totals: ClosingTotals
    reports: list[DelivererReport]

    def report_for(self, courier_id: str) -> DelivererReport | None:
        for report in self.reports:
            if report.courier_id == courier_id:
                return report
        return None


def aggregate(records: Iterable[DeliveryRecord]) -> ClosingReport:
    """Single pass over ``records``.

    Per-courier reports are listed in the order each courier first appears in
    the input; for the usual newest-first input this puts the courier with the
    most recent delivery first. Sums do not depend on input order.
    """
    totals = ClosingTotals()
    by_courier: dict[str, DelivererReport] = {}
    for record in records:
        totals.add(record)
        report = by_courier.get(record.courier_id)
        if report is None:
            report = DelivererReport(courier_id=record.courier_id, courier_name=record.courier_name)
            by_courier[record.courier_id] = report
        report.add(record)
    return ClosingReport(totals=totals, reports=list(by_courier.values()))


def _merge_counts(left: dict, right: dict) -> dict:
    merged = dict(left)
    for key, value in right.items():
        merged[key] = merged.get(key, 0) + value
    return merged


def merge_reports(first: ClosingReport, second: ClosingReport) -> ClosingReport:
    """Combine aggregates of two disjoint record sets."""
    totals = ClosingTotals(
        total_deliveries=first.totals.total_deliveries + second.totals.total_deliveries,
        total_delivery_fees=first.totals.total_delivery_fees + second.totals.total_delivery_fees,
        total_order_value=first.totals.total_order_value + second.totals.total_order_value,
        total_km=first.totals.total_km + second.totals.total_km,
    )
    merged: dict[str, DelivererReport] = {}
    for report in [*first.reports, *second.reports]:
        current = merged.get(report.courier_id)
        if current is None:
            merged[report.courier_id] = DelivererReport(
                courier_id=report.courier_id,
                courier_name=report.courier_name,
                total_deliveries=report.total_deliveries,
                total_delivery_fees=report.total_delivery_fees,
                total_order_value=report.total_order_value,
                total_km=report.total_km,
                deliveries_by_type=dict(report.deliveries_by_type),
                values_by_type=dict(report.values_by_type),
            )
            continue
        current.total_deliveries += report.total_deliveries
        current.total_delivery_fees += report.total_delivery_fees
        current.total_order_value += report.total_order_value
        current.total_km += report.total_km
        current.deliveries_by_type = _merge_counts(current.deliveries_by_type, report.deliveries_by_type)
        current.values_by_type = _merge_counts(current.values_by_type, report.values_by_type)
    return ClosingReport(totals=totals, reports=list(merged.values()))


def format_money(value: Decimal) -> str:
    return f"{to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)}"


def format_km(value: Decimal) -> str:
    return f"{to_decimal(value).quantize(TENTHS, rounding=ROUND_HALF_UP)}"
