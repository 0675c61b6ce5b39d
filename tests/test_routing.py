"""Routing client tests against a mocked OSRM endpoint."""

import httpx
import pytest

from loadboard.models import Coordinates
from loadboard.routing import RoutingClient
from loadboard.services import LoadLifecycleManager

RIYADH = Coordinates(lat=24.7136, lng=46.6753)
JEDDAH = Coordinates(lat=21.4858, lng=39.1925)


def client_for(handler) -> RoutingClient:
    return RoutingClient(base_url="https://osrm.example.test/", timeout=1, transport=httpx.MockTransport(handler))


def test_route_parses_distance_and_duration():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={
            "code": "Ok",
            "routes": [{"distance": 949_512.3, "duration": 33_660.0}],
        })

    info = client_for(handler).route(RIYADH, JEDDAH)

    assert info.distance_km == 949.5
    assert info.duration_minutes == 561.0
    assert seen["url"].path == "/route/v1/driving/46.6753,24.7136;39.1925,21.4858", "Coordinates go lng,lat"
    assert seen["url"].params["overview"] == "false"


@pytest.mark.parametrize("response", [
    httpx.Response(200, json={"code": "NoRoute", "routes": []}),
    httpx.Response(200, json={"code": "Ok", "routes": []}),
    httpx.Response(500, text="upstream down"),
    httpx.Response(200, text="<html>not json</html>"),
    httpx.Response(200, json=[]),
    httpx.Response(200, json={"code": "Ok", "routes": [{}]}),
    httpx.Response(200, json={"code": "Ok", "routes": [{"distance": "far", "duration": 60}]}),
    httpx.Response(200, json={"routes": [{"distance": 1000, "duration": 60}]}),
])
def test_unusable_responses_give_none(response):
    assert client_for(lambda request: response).route(RIYADH, JEDDAH) is None


def test_network_error_gives_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    assert client_for(handler).route(RIYADH, JEDDAH) is None


def test_malformed_answer_does_not_block_posting(services, shipper, riyadh_jeddah):
    routing = client_for(lambda request: httpx.Response(200, json=[]))
    manager = LoadLifecycleManager(services.repository, services.profiles, routing)

    load = manager.post_load(shipper.id, {
        **riyadh_jeddah,
        "origin_coords": RIYADH.model_dump(),
        "destination_coords": JEDDAH.model_dump(),
    })

    stored = manager.get_load_by_id(load.id)
    assert stored.status == "available"
    assert stored.distance_km is None
