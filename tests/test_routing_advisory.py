import httpx
import pytest

from pizzadesk.services.routing import (
    DistanceAdvisory,
    GoogleMapsClient,
    MappingConfig,
    MappingProviderError,
    get_advisory,
    reset_advisory,
)

from conftest import FakeMapsClient, make_advisory


def test_lookup_round_trip_is_twice_the_distance() -> None:
    advisory = make_advisory(FakeMapsClient(meters=3250))

    lookup = advisory.lookup("Rua das Flores, 45")

    assert lookup.resolved
    assert lookup.distance_km == 3.25
    assert lookup.round_trip_km == 2 * lookup.distance_km
    assert lookup.duration == "9 mins"


def test_lookup_failure_is_unresolved_not_raised() -> None:
    advisory = make_advisory(FakeMapsClient(fail=True))

    lookup = advisory.lookup("Endereço inexistente")

    assert not lookup.resolved
    assert lookup.distance_km is None
    assert lookup.round_trip_km is None
    assert "NOT_FOUND" in lookup.error


def test_provider_handle_is_created_once() -> None:
    created = []

    def factory(config):
        created.append(config)
        return FakeMapsClient()

    from pizzadesk.services.routing import DistanceAdvisory, MappingConfig

    advisory = DistanceAdvisory(MappingConfig(api_key="k", origin_address="Origem"), client_factory=factory)
    advisory.lookup("A")
    advisory.lookup("B")

    assert len(created) == 1


def test_missing_api_key_degrades_lookup() -> None:
    from pizzadesk.services.routing import DistanceAdvisory, MappingConfig

    advisory = DistanceAdvisory(MappingConfig(api_key=None, origin_address="Origem"))

    lookup = advisory.lookup("Rua A")

    assert not lookup.resolved
    assert "API key" in lookup.error


def test_plan_route_credits_return_leg_to_last_stop() -> None:
    advisory = make_advisory(FakeMapsClient())

    plan = advisory.plan_route(["A", "B", "C"])

    assert plan.resolved
    assert plan.order == [2, 1, 0]
    assert [leg.address for leg in plan.legs] == ["C", "B", "A"]
    assert [leg.distance_km for leg in plan.legs] == [1.0, 2.0, 3.0]
    assert plan.legs[-1].credited_km == 7.0
    assert plan.total_km == 10.0
    assert sum(leg.credited_km for leg in plan.legs) == plan.total_km


def test_plan_route_failure_keeps_error() -> None:
    plan = make_advisory(FakeMapsClient(fail=True)).plan_route(["A"])

    assert not plan.resolved
    assert plan.legs == []
    assert "OVER_QUERY_LIMIT" in plan.error


def _client(handler) -> GoogleMapsClient:
    return GoogleMapsClient(
        api_key="secret",
        base_url="https://maps.test/api",
        max_retries=2,
        backoff_seconds=0,
        transport=httpx.MockTransport(handler),
    )


def test_distance_matrix_request_and_parsing() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "rows": [{"elements": [{"status": "OK", "distance": {"value": 4100}, "duration": {"text": "12 mins"}}]}],
            },
        )

    result = _client(handler).distance("Rua Principal, 123", "Rua B, 9")

    assert result == {"distance_meters": 4100, "duration_text": "12 mins"}
    assert seen["path"] == "/api/distancematrix/json"
    assert seen["params"]["origins"] == "Rua Principal, 123"
    assert seen["params"]["key"] == "secret"
    assert seen["params"]["language"] == "pt-BR"


def test_unresolvable_address_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "OK", "rows": [{"elements": [{"status": "NOT_FOUND"}]}]})

    with pytest.raises(MappingProviderError, match="NOT_FOUND"):
        _client(handler).distance("Origem", "???")


def test_server_errors_are_retried() -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503)
        return httpx.Response(
            200,
            json={"status": "OK", "rows": [{"elements": [{"status": "OK", "distance": {"value": 1000}}]}]},
        )

    result = _client(handler).distance("Origem", "Destino")

    assert len(attempts) == 3
    assert result["distance_meters"] == 1000


def test_client_errors_are_not_retried() -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(403)

    with pytest.raises(MappingProviderError, match="403"):
        _client(handler).distance("Origem", "Destino")
    assert len(attempts) == 1


def test_network_failure_after_retries() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(MappingProviderError, match="not reachable"):
        _client(handler).distance("Origem", "Destino")


def test_optimize_route_uses_waypoint_order() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["waypoints"] = request.url.params["waypoints"]
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "routes": [
                    {
                        "waypoint_order": [1, 0],
                        "legs": [
                            {"distance": {"value": 1500}, "duration": {"text": "4 mins"}},
                            {"distance": {"value": 800}, "duration": {"text": "2 mins"}},
                            {"distance": {"value": 2100}, "duration": {"text": "6 mins"}},
                        ],
                    }
                ],
            },
        )

    result = _client(handler).optimize_route("Origem", ["Rua A", "Rua B"])

    assert seen["waypoints"] == "optimize:true|Rua A|Rua B"
    assert result["order"] == [1, 0]
    assert [leg["distance_meters"] for leg in result["legs"]] == [1500, 800, 2100]


def test_optimize_route_rejects_too_many_stops() -> None:
    with pytest.raises(ValueError):
        _client(lambda request: httpx.Response(500)).optimize_route("Origem", [f"Rua {i}" for i in range(26)])


def test_protocol_errors_become_provider_errors() -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.RemoteProtocolError("peer closed connection", request=request)

    with pytest.raises(MappingProviderError, match="distancematrix request failed"):
        _client(handler).distance("Origem", "Destino")
    assert len(attempts) == 1


def test_ok_element_without_distance_is_a_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "OK", "rows": [{"elements": [{"status": "OK"}]}]})

    with pytest.raises(MappingProviderError, match="malformed"):
        _client(handler).distance("Origem", "Destino")


def test_route_leg_without_distance_is_a_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"status": "OK", "routes": [{"waypoint_order": [0], "legs": [{"duration": {}}, {"distance": None}]}]},
        )

    with pytest.raises(MappingProviderError, match="malformed"):
        _client(handler).optimize_route("Origem", ["Rua A"])


def test_transport_failure_leaves_lookup_unresolved() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.RemoteProtocolError("peer closed connection", request=request)

    config = MappingConfig(api_key="secret", origin_address="Rua Principal, 123")
    advisory = DistanceAdvisory(config, client_factory=lambda _config: _client(handler))

    lookup = advisory.lookup("Rua B, 9")
    plan = advisory.plan_route(["Rua B, 9"])

    assert not lookup.resolved
    assert lookup.round_trip_km is None
    assert "peer closed connection" in lookup.error
    assert not plan.resolved


class ClosableClient(FakeMapsClient):
    closed = False

    def close(self) -> None:
        self.closed = True


def test_reset_advisory_closes_provider_handle(fake_db) -> None:
    client = ClosableClient()
    advisory = get_advisory()
    advisory._client = client

    reset_advisory()

    assert client.closed is True
    assert advisory._client is None
    assert get_advisory() is not advisory
