from __future__ import annotations

import itertools
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from pizzadesk.models.domain import DeliveryRecord
from pizzadesk.persistence import store as store_module
from pizzadesk.services.realtime import reset_registry
from pizzadesk.services.reports.closing import clear_cache
from pizzadesk.services.routing import DistanceAdvisory, MappingConfig, MappingProviderError, reset_advisory
from pizzadesk.services.shifts import get_timezone

SAO_PAULO = get_timezone("America/Sao_Paulo")


def _comparable(value):
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


class FakeQuery:
    """Just enough of the PostgREST builder for the persistence layer."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.row_limit = None

    def select(self, columns: str = "*", count=None):
        self.operation = "select"
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: _comparable(row.get(column)) >= _comparable(value))
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: _comparable(row.get(column)) < _comparable(value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matching(self):
        return [row for row in self.db.tables.setdefault(self.table, []) if all(f(row) for f in self.filters)]

    def execute(self):
        self.db.calls.append((self.table, self.operation))
        if self.db.fail:
            raise RuntimeError("connection refused")
        rows = self.db.tables.setdefault(self.table, [])
        if self.operation == "insert":
            row = {"id": str(next(self.db.ids)), **self.payload}
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])
        if self.operation == "update":
            matched = self._matching()
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(row) for row in matched])
        if self.operation == "delete":
            matched = self._matching()
            self.db.tables[self.table] = [row for row in rows if row not in matched]
            return SimpleNamespace(data=[dict(row) for row in matched])
        result = [dict(row) for row in self._matching()]
        if self.order_by:
            column, desc = self.order_by
            result.sort(key=lambda row: _comparable(row.get(column)), reverse=desc)
        if self.row_limit is not None:
            result = result[: self.row_limit]
        return SimpleNamespace(data=result)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.fail = False
        self.calls: list[tuple[str, str]] = []
        self.ids = itertools.count(100)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture(autouse=True)
def reset_process_state():
    reset_registry()
    clear_cache()
    reset_advisory()
    yield
    reset_registry()
    clear_cache()
    reset_advisory()


@pytest.fixture
def fake_db(monkeypatch) -> FakeSupabase:
    db = FakeSupabase()
    monkeypatch.setattr(store_module, "get_supabase_client", lambda: db)
    return db


class FakeMapsClient:
    def __init__(self, meters: int = 3200, fail: bool = False) -> None:
        self.meters = meters
        self.fail = fail
        self.calls: list[str] = []

    def distance(self, origin, destination):
        self.calls.append(destination)
        if self.fail:
            raise MappingProviderError("Address could not be resolved: NOT_FOUND")
        return {"distance_meters": self.meters, "duration_text": "9 mins"}

    def optimize_route(self, origin, stops):
        if self.fail:
            raise MappingProviderError("OVER_QUERY_LIMIT")
        # visit in reverse order; one leg per stop plus the way back
        order = list(reversed(range(len(stops))))
        legs = [{"distance_meters": 1000 * (i + 1), "duration_text": f"{i + 1} mins"} for i in range(len(stops) + 1)]
        return {"order": order, "legs": legs}


def make_advisory(client: FakeMapsClient) -> DistanceAdvisory:
    config = MappingConfig(api_key="test-key", origin_address="Rua Principal, 123, Centro")
    return DistanceAdvisory(config, client_factory=lambda _config: client)


def make_record(
    record_id: str,
    courier_id: str,
    created_at: datetime,
    *,
    courier_name: str | None = None,
    fee: str = "5.00",
    order: str = "40.00",
    payment_type: str = "pix",
    round_trip_km: float | None = None,
) -> DeliveryRecord:
    return DeliveryRecord(
        id=record_id,
        courier_id=courier_id,
        courier_name=courier_name or courier_id.title(),
        address=f"Rua {record_id}, 10",
        neighborhood_name="Centro",
        payment_type=payment_type,
        order_value=Decimal(order),
        delivery_fee=Decimal(fee),
        created_at=created_at,
        round_trip_km=round_trip_km,
        distance_km=round_trip_km / 2 if round_trip_km is not None else None,
    )


def local(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=SAO_PAULO)
