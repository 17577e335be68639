import csv
import io
from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from pizzadesk.models.domain import payment_type_label
from pizzadesk.services.reports import aggregate, filter_records, format_money, merge_reports, sort_newest_first
from pizzadesk.services.reports.aggregator import parse_amount
from pizzadesk.services.reports.formatter import closing_to_csv, closing_to_json, closing_to_receipt, closing_to_xlsx
from pizzadesk.services.shifts import ShiftPolicy, resolve

from conftest import SAO_PAULO, local, make_record


def _closing_records():
    # newest first, as the store returns them
    return [
        make_record("3", "bruno", local(2024, 1, 10, 21, 0), courier_name="Bruno", fee="6.00", order="55.00", payment_type="card"),
        make_record("2", "ana", local(2024, 1, 10, 20, 0), courier_name="Ana", fee="5.00", order="20.00", payment_type="cash"),
        make_record("1", "ana", local(2024, 1, 10, 19, 0), courier_name="Ana", fee="5.00", order="40.00", payment_type="pix"),
    ]


def test_daily_closing_scenario() -> None:
    closing = aggregate(_closing_records())

    assert closing.totals.total_deliveries == 3
    assert closing.totals.total_delivery_fees == Decimal("16.00")
    assert closing.totals.total_order_value == Decimal("115.00")

    ana = closing.report_for("ana")
    bruno = closing.report_for("bruno")
    assert ana.total_deliveries == 2
    assert ana.total_delivery_fees == Decimal("10.00")
    assert ana.total_order_value == Decimal("60.00")
    assert ana.deliveries_by_type == {"cash": 1, "pix": 1}
    assert bruno.total_deliveries == 1
    assert bruno.total_delivery_fees == Decimal("6.00")
    assert bruno.total_order_value == Decimal("55.00")
    assert bruno.deliveries_by_type == {"card": 1}


def test_reports_follow_first_seen_order() -> None:
    closing = aggregate(_closing_records())

    assert [report.courier_id for report in closing.reports] == ["bruno", "ana"]


def test_aggregation_is_additive() -> None:
    records = _closing_records() + [
        make_record("4", "ana", local(2024, 1, 10, 22), fee="4.50", order="33.10", round_trip_km=6.4),
        make_record("5", "carla", local(2024, 1, 10, 23), fee="7.25", order="12.00", payment_type="ifood", round_trip_km=3.3),
    ]
    whole = aggregate(records)
    merged = merge_reports(aggregate(records[:2]), aggregate(records[2:]))

    assert merged.totals.total_deliveries == whole.totals.total_deliveries
    assert merged.totals.total_delivery_fees == whole.totals.total_delivery_fees
    assert merged.totals.total_order_value == whole.totals.total_order_value
    assert merged.totals.total_km == whole.totals.total_km
    for report in whole.reports:
        other = merged.report_for(report.courier_id)
        assert other.total_deliveries == report.total_deliveries
        assert other.total_delivery_fees == report.total_delivery_fees
        assert other.deliveries_by_type == report.deliveries_by_type
        assert other.values_by_type == report.values_by_type


def test_monetary_rounding_has_no_float_artifacts() -> None:
    records = [
        make_record(str(i), "ana", local(2024, 1, 10, 19, i), fee=fee)
        for i, fee in enumerate(["10.00", "0.10", "0.05"])
    ]

    assert format_money(aggregate(records).totals.total_delivery_fees) == "10.15"


def test_float_inputs_are_converted_exactly() -> None:
    from pizzadesk.services.reports.aggregator import to_decimal

    assert to_decimal(0.1) + to_decimal(0.2) == Decimal("0.3")


def test_unresolved_distance_counts_but_adds_no_km() -> None:
    records = [
        make_record("1", "ana", local(2024, 1, 10, 19), round_trip_km=5.0),
        make_record("2", "ana", local(2024, 1, 10, 20), round_trip_km=None),
    ]
    closing = aggregate(records)

    assert closing.totals.total_deliveries == 2
    assert closing.totals.total_km == Decimal("5.0")


def test_filtering_is_idempotent_and_stable() -> None:
    window = resolve(date(2024, 1, 10), ShiftPolicy.night_shift(), SAO_PAULO)
    records = [
        make_record("a", "ana", local(2024, 1, 10, 17, 59)),
        make_record("b", "ana", local(2024, 1, 10, 18, 0)),
        make_record("c", "bruno", local(2024, 1, 11, 1, 0)),
        make_record("d", "ana", local(2024, 1, 11, 2, 30)),
        make_record("e", "ana", local(2024, 1, 11, 0, 15)),
    ]

    once = filter_records(records, window)
    twice = filter_records(once, window)

    assert [r.id for r in once] == ["b", "c", "e"]
    assert twice == once
    assert [r.id for r in filter_records(records, window, "ana")] == ["b", "e"]
    assert filter_records(records, window, "nobody") == []


def test_sort_newest_first() -> None:
    records = [
        make_record("old", "ana", local(2024, 1, 10, 18)),
        make_record("new", "ana", local(2024, 1, 10, 23)),
    ]

    assert [r.id for r in sort_newest_first(records)] == ["new", "old"]


def test_averages() -> None:
    totals = aggregate(_closing_records()).totals

    assert totals.average_fee == Decimal("5.33")
    assert totals.average_ticket == Decimal("38.33")


def test_parse_amount_validation() -> None:
    assert parse_amount("12,50", "Order value") == Decimal("12.50")
    assert parse_amount(0, "Fee") == Decimal("0")
    with pytest.raises(ValueError, match="required"):
        parse_amount("  ", "Order value")
    with pytest.raises(ValueError, match="must be a number"):
        parse_amount("abc", "Order value")
    with pytest.raises(ValueError, match="negative"):
        parse_amount("-1", "Order value")


def test_unknown_payment_type_is_displayed_raw() -> None:
    assert payment_type_label("pix") == "PIX"
    assert payment_type_label("voucher") == "voucher"


def test_closing_json_shape() -> None:
    records = _closing_records()
    payload = closing_to_json(date(2024, 1, 10), "all", aggregate(records), records)

    assert payload["date"] == "2024-01-10"
    assert payload["courierFilter"] == "all"
    assert payload["summary"]["totalDeliveries"] == 3
    assert payload["summary"]["totalDeliveryFees"] == 16.0
    assert payload["perCourierReports"][1]["deliveriesByType"] == {"cash": 1, "pix": 1}
    assert [record["id"] for record in payload["records"]] == ["3", "2", "1"]


def test_closing_csv_sections() -> None:
    records = _closing_records()
    rows = list(csv.DictReader(io.StringIO(closing_to_csv(records, aggregate(records), SAO_PAULO))))

    assert [row["section"] for row in rows] == ["delivery"] * 3 + ["courier", "courier", "total"]
    assert rows[0]["time"] == "21:00"
    assert rows[-1]["delivery_fee"] == "16.00"
    assert rows[-1]["deliveries"] == "3"


def test_receipt_fits_printer_width() -> None:
    receipt = closing_to_receipt(date(2024, 1, 10), "Todos", aggregate(_closing_records()))

    assert all(len(line) <= 40 for line in receipt.splitlines())
    assert "Data: 10/01/2024" in receipt
    assert "R$ 16.00" in receipt
    assert "Dinheiro (1)" in receipt


def test_xlsx_workbook_sheets() -> None:
    records = _closing_records()
    content = closing_to_xlsx(date(2024, 1, 10), "Todos", aggregate(records), records, SAO_PAULO)
    workbook = load_workbook(io.BytesIO(content))

    assert workbook.sheetnames == ["Resumo", "Entregas"]
    assert workbook["Entregas"].max_row == 4
