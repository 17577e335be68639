"""Serializers for closing reports."""

from __future__ import annotations

import csv
import io
from datetime import date, tzinfo
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from ...models.domain import DeliveryRecord, payment_type_label
from .aggregator import ClosingReport, DelivererReport, format_km, format_money, to_decimal

RECEIPT_WIDTH = 40
ALL_COURIERS_LABEL = "Todos"


def _money(value) -> float:
    return float(format_money(value))


def _km(value) -> float:
    return float(format_km(value))


def record_to_json(record: DeliveryRecord) -> dict:
    return {
        "id": record.id,
        "courierId": record.courier_id,
        "courierName": record.courier_name,
        "address": record.address,
        "neighborhoodName": record.neighborhood_name,
        "paymentType": record.payment_type,
        "orderValue": _money(record.order_value),
        "deliveryFee": _money(record.delivery_fee),
        "distanceKm": record.distance_km,
        "roundTripKm": record.round_trip_km,
        "createdAt": record.created_at.isoformat(),
    }


def deliverer_report_to_json(report: DelivererReport) -> dict:
    return {
        "courierId": report.courier_id,
        "courierName": report.courier_name,
        "totalDeliveries": report.total_deliveries,
        "totalDeliveryFees": _money(report.total_delivery_fees),
        "totalOrderValue": _money(report.total_order_value),
        "totalKm": _km(report.total_km),
        "deliveriesByType": dict(report.deliveries_by_type),
        "valuesByType": {kind: _money(value) for kind, value in report.values_by_type.items()},
    }


def closing_to_json(
    reference_date: date,
    courier_filter: str,
    closing: ClosingReport,
    records: Sequence[DeliveryRecord],
) -> dict:
    totals = closing.totals
    return {
        "date": reference_date.isoformat(),
        "courierFilter": courier_filter,
        "summary": {
            "totalDeliveries": totals.total_deliveries,
            "totalDeliveryFees": _money(totals.total_delivery_fees),
            "totalOrderValue": _money(totals.total_order_value),
            "totalKm": _km(totals.total_km),
            "averageFee": _money(totals.average_fee),
            "averageTicket": _money(totals.average_ticket),
            "kmPerDelivery": _km(totals.km_per_delivery),
        },
        "perCourierReports": [deliverer_report_to_json(report) for report in closing.reports],
        "records": [record_to_json(record) for record in records],
    }


def closing_to_csv(records: Sequence[DeliveryRecord], closing: ClosingReport, tz: tzinfo) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "section",
        "time",
        "courier_id",
        "courier_name",
        "address",
        "neighborhood",
        "payment_type",
        "order_value",
        "delivery_fee",
        "round_trip_km",
        "deliveries",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for record in records:
        writer.writerow(
            {
                "section": "delivery",
                "time": record.created_at.astimezone(tz).strftime("%H:%M"),
                "courier_id": record.courier_id,
                "courier_name": record.courier_name,
                "address": record.address,
                "neighborhood": record.neighborhood_name,
                "payment_type": record.payment_type,
                "order_value": format_money(record.order_value),
                "delivery_fee": format_money(record.delivery_fee),
                "round_trip_km": format_km(record.round_trip_km) if record.round_trip_km is not None else "",
                "deliveries": 1,
            }
        )
    for report in closing.reports:
        writer.writerow(
            {
                "section": "courier",
                "courier_id": report.courier_id,
                "courier_name": report.courier_name,
                "order_value": format_money(report.total_order_value),
                "delivery_fee": format_money(report.total_delivery_fees),
                "round_trip_km": format_km(report.total_km),
                "deliveries": report.total_deliveries,
            }
        )
    totals = closing.totals
    writer.writerow(
        {
            "section": "total",
            "order_value": format_money(totals.total_order_value),
            "delivery_fee": format_money(totals.total_delivery_fees),
            "round_trip_km": format_km(totals.total_km),
            "deliveries": totals.total_deliveries,
        }
    )
    return buffer.getvalue()


def _receipt_line(label: str, value: str, width: int = RECEIPT_WIDTH) -> str:
    room = max(width - len(value) - 1, 1)
    return f"{label[:room]:<{room}} {value}"


def closing_to_receipt(
    reference_date: date,
    courier_filter: str,
    closing: ClosingReport,
    *,
    title: str = "FECHAMENTO",
    width: int = RECEIPT_WIDTH,
) -> str:
    """Plain-text rendering sized for a thermal printer."""
    rule = "-" * width
    totals = closing.totals
    lines = [
        title.center(width).rstrip(),
        f"Data: {reference_date.strftime('%d/%m/%Y')}".center(width).rstrip(),
        f"Entregador: {courier_filter}".center(width).rstrip(),
        rule,
        _receipt_line("Entregas", str(totals.total_deliveries), width),
        _receipt_line("Taxas", f"R$ {format_money(totals.total_delivery_fees)}", width),
        _receipt_line("Pedidos", f"R$ {format_money(totals.total_order_value)}", width),
        _receipt_line("Km rodados", f"{format_km(totals.total_km)} km", width),
    ]
    for report in closing.reports:
        lines.append(rule)
        lines.append(report.courier_name[:width])
        lines.append(_receipt_line("  Entregas", str(report.total_deliveries), width))
        lines.append(_receipt_line("  Taxas", f"R$ {format_money(report.total_delivery_fees)}", width))
        lines.append(_receipt_line("  Pedidos", f"R$ {format_money(report.total_order_value)}", width))
        lines.append(_receipt_line("  Km", f"{format_km(report.total_km)} km", width))
        for kind, count in report.deliveries_by_type.items():
            value = report.values_by_type.get(kind, to_decimal(0))
            lines.append(
                _receipt_line(f"  {payment_type_label(kind)} ({count})", f"R$ {format_money(value)}", width)
            )
    lines.append(rule)
    return "\n".join(lines) + "\n"


def closing_to_xlsx(
    reference_date: date,
    courier_filter: str,
    closing: ClosingReport,
    records: Sequence[DeliveryRecord],
    tz: tzinfo,
) -> bytes:
    workbook = Workbook()
    summary = workbook.active
    summary.title = "Resumo"
    summary.append(["Data", reference_date.isoformat()])
    summary.append(["Entregador", courier_filter])
    summary.append([])
    header = ["Entregador", "Entregas", "Taxas", "Pedidos", "Km"]
    summary.append(header)
    for report in closing.reports:
        summary.append(
            [
                report.courier_name,
                report.total_deliveries,
                _money(report.total_delivery_fees),
                _money(report.total_order_value),
                _km(report.total_km),
            ]
        )
    totals = closing.totals
    summary.append(
        [
            "Total",
            totals.total_deliveries,
            _money(totals.total_delivery_fees),
            _money(totals.total_order_value),
            _km(totals.total_km),
        ]
    )
    for cell in summary[4]:
        cell.font = Font(bold=True)

    detail = workbook.create_sheet("Entregas")
    detail.append(["Hora", "Entregador", "Endereço", "Bairro", "Tipo", "Valor", "Taxa", "Km"])
    for cell in detail[1]:
        cell.font = Font(bold=True)
    for record in records:
        detail.append(
            [
                record.created_at.astimezone(tz).strftime("%H:%M"),
                record.courier_name,
                record.address,
                record.neighborhood_name,
                payment_type_label(record.payment_type),
                _money(record.order_value),
                _money(record.delivery_fee),
                record.round_trip_km,
            ]
        )

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
