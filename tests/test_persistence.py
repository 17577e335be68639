from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from pizzadesk.models.domain import PizzeriaConfig
from pizzadesk.persistence import catalog, deliveries
from pizzadesk.persistence.filesystem import ArchiveStorage
from pizzadesk.persistence.store import StoreUnavailableError, parse_timestamp
from pizzadesk.services.reports import manifest
from pizzadesk.services.shifts import ShiftPolicy, resolve

from conftest import SAO_PAULO, local, make_record


def test_archive_storage_names_runs_by_utc_timestamp(tmp_path: Path) -> None:
    storage = ArchiveStorage(root=tmp_path)
    run_dir = storage.open_run(now=local(2024, 1, 10, 23, 5))

    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path.resolve() / "outputs"
    assert run_dir.name == "closing_20240111T020500000000Z"
    with pytest.raises(FileExistsError):
        storage.open_run(now=local(2024, 1, 10, 23, 5))


def test_archive_storage_saves_by_content_type(tmp_path: Path) -> None:
    run_dir = ArchiveStorage(root=tmp_path).save_all(
        {
            "summary.json": {"date": "2024-01-10", "courierFilter": "Todos"},
            "closing.csv": "a,b\r\n1,2\r\n",
            "closing.xlsx": b"PK\x03\x04",
        }
    )

    assert (run_dir / "summary.json").read_text(encoding="utf-8") == '{\n  "date": "2024-01-10",\n  "courierFilter": "Todos"\n}'
    assert (run_dir / "closing.csv").read_bytes() == b"a,b\r\n1,2\r\n"
    assert (run_dir / "closing.xlsx").read_bytes() == b"PK\x03\x04"


def test_manifest_lists_closing_runs(tmp_path: Path, monkeypatch) -> None:
    storage = ArchiveStorage(root=tmp_path)
    monkeypatch.setattr(manifest, "OUTPUT_ROOT", storage.output_root)
    run_dir = storage.save_all(
        {
            "summary.json": {"date": "2024-01-10", "courierFilter": "all", "summary": {"totalDeliveries": 3}},
            "receipt.txt": "FECHAMENTO\n",
        }
    )
    (storage.output_root / "zones_20240101T000000000000Z").mkdir()

    runs = manifest.list_runs()
    files = manifest.list_export_files(reference_date="2024-01-10", file_type="txt")

    assert [run["id"] for run in runs] == [run_dir.name]
    assert runs[0]["total_deliveries"] == 3
    assert runs[0]["status"] == "complete"
    assert [item["file_name"] for item in files] == ["receipt.txt"]
    assert files[0]["download_path"].endswith(f"/reports/exports/{run_dir.name}/receipt.txt")
    assert manifest.resolve_export_file(run_dir.name, "receipt.txt") == (run_dir / "receipt.txt").resolve()
    with pytest.raises(FileNotFoundError):
        manifest.resolve_export_file(run_dir.name, "../../etc/passwd")


def test_parse_timestamp_variants() -> None:
    assert parse_timestamp("2024-01-10T21:00:00Z").utcoffset().total_seconds() == 0
    assert parse_timestamp("2024-01-10T18:00:00-03:00") == local(2024, 1, 10, 18)
    assert parse_timestamp("2024-01-10T21:00:00").tzinfo is not None


def test_store_not_configured(monkeypatch) -> None:
    from pizzadesk.persistence import store

    monkeypatch.setattr(store, "get_supabase_client", lambda: None)

    with pytest.raises(StoreUnavailableError, match="not configured"):
        deliveries.select_deliveries(local(2024, 1, 10), local(2024, 1, 11))


def test_query_failure_is_translated(fake_db) -> None:
    fake_db.fail = True

    with pytest.raises(StoreUnavailableError, match="load deliveries"):
        deliveries.select_deliveries(local(2024, 1, 10), local(2024, 1, 11))


def test_delivery_round_trip_through_store(fake_db) -> None:
    stored = deliveries.insert_delivery(make_record("", "ana", local(2024, 1, 10, 19), fee="5.50", round_trip_km=4.2))

    assert stored.id == "100"
    assert stored.delivery_fee == Decimal("5.5")
    assert stored.round_trip_km == 4.2
    assert stored.created_at == local(2024, 1, 10, 19)


def test_select_deliveries_uses_half_open_range(fake_db) -> None:
    window = resolve(date(2024, 1, 10), ShiftPolicy.night_shift(), SAO_PAULO)
    for created in (local(2024, 1, 10, 18), local(2024, 1, 11, 2, 30), local(2024, 1, 10, 23)):
        deliveries.insert_delivery(make_record("", "ana", created))
    deliveries.insert_delivery(make_record("", "bruno", local(2024, 1, 10, 20)))

    everyone = deliveries.select_deliveries(window.start, window.end)
    ana = deliveries.select_deliveries(window.start, window.end, "ana")

    assert [r.created_at.hour for r in everyone] == [23, 20, 18]
    assert [r.courier_id for r in ana] == ["ana", "ana"]


def test_zero_row_update_and_delete_report_gone(fake_db) -> None:
    assert deliveries.update_delivery("missing", {"delivery_fee": 1.0}) is None
    assert deliveries.delete_delivery("missing") is False


def test_invalid_rows_are_skipped(fake_db) -> None:
    fake_db.tables["deliveries"] = [
        {"id": "1", "courier_id": "ana", "created_at": "2024-01-10T20:00:00-03:00", "order_value": 10},
        {"id": "2", "courier_id": "ana", "created_at": "2024-01-10T21:00:00-03:00", "order_value": "oops"},
    ]

    records = deliveries.select_deliveries(local(2024, 1, 10), local(2024, 1, 11))

    assert [r.id for r in records] == ["1"]


def test_pizzeria_config_save_and_load(fake_db) -> None:
    assert catalog.load_pizzeria_config() is None

    saved = catalog.save_pizzeria_config(PizzeriaConfig(address="Rua Nova, 1", google_maps_api_key="abc"))
    loaded = catalog.load_pizzeria_config()

    assert loaded.id == saved.id
    assert loaded.address == "Rua Nova, 1"
    assert fake_db.tables["config"][0]["pizzaria_address"] == "Rua Nova, 1"
