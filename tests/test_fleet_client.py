import json

import httpx
import pytest

from src.simulator.models.domain import TransportStatus
from src.simulator.services.fleet import client as client_module
from src.simulator.services.fleet.client import FleetClient, RemoteCommodity, RemoteTransport


def _client(monkeypatch, handler, requests: list, **kwargs) -> FleetClient:
    client = FleetClient(base_url="http://fleet.test/api/", token="secret", backoff_seconds=0, **kwargs)

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    monkeypatch.setattr(
        client,
        "_get_client",
        lambda: httpx.Client(transport=httpx.MockTransport(recording_handler), headers=client._headers()),
    )
    return client


def test_create_transport_returns_remote_handle(monkeypatch):
    requests = []
    client = _client(monkeypatch, lambda request: httpx.Response(201, json={"id": 17}), requests, max_retries=0)

    transport = client.create_transport(43.0, -80.0, TransportStatus.ONLINE, {"mpg": 30, "capacity": 4})

    assert transport.transport_id == "17"
    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/transports"
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content) == {
        "latitude": 43.0,
        "longitude": -80.0,
        "status": "ONLINE",
        "metadata": {"mpg": 30, "capacity": 4},
    }


def test_remote_transport_updates(monkeypatch):
    requests = []
    client = _client(monkeypatch, lambda request: httpx.Response(204), requests, max_retries=0)

    handle = RemoteTransport("17", client)
    handle.update_location(43.1, -80.2)
    handle.update_status(TransportStatus.OFFLINE)

    assert [(r.method, r.url.path) for r in requests] == [
        ("PUT", "/api/transports/17/location"),
        ("PUT", "/api/transports/17/status"),
    ]
    assert json.loads(requests[1].content) == {"status": "OFFLINE"}


def test_remote_commodity_reports_carrier(monkeypatch):
    requests = []
    client = _client(monkeypatch, lambda request: httpx.Response(204), requests, max_retries=0)

    class Carrier:
        transport_id = "17"

    commodity = RemoteCommodity("C-9", client)
    commodity.picked_up(Carrier())
    commodity.dropped_off()

    assert [(r.method, r.url.path) for r in requests] == [
        ("PUT", "/api/commodities/C-9/picked-up"),
        ("PUT", "/api/commodities/C-9/dropped-off"),
    ]
    assert json.loads(requests[0].content) == {"transport_id": "17"}


def test_remote_commodity_without_fleet_is_silent():
    commodity = RemoteCommodity("C-9", None)

    commodity.picked_up(object())
    commodity.dropped_off()


def test_network_failure_raises_connection_error(monkeypatch):
    requests = []

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(monkeypatch, refuse, requests, max_retries=2)

    with pytest.raises(ConnectionError):
        client.update_transport_location("17", 43.0, -80.0)
    assert len(requests) == 3


def test_requires_base_url(monkeypatch):
    monkeypatch.setattr(client_module.settings, "fleet_base_url", None)
    with pytest.raises(ValueError):
        FleetClient()


def test_server_errors_are_retried_then_raise_connection_error(monkeypatch):
    requests = []
    client = _client(monkeypatch, lambda request: httpx.Response(503), requests, max_retries=3)

    with pytest.raises(ConnectionError):
        client.update_transport_location("17", 43.0, -80.0)
    assert len(requests) == 4


def test_server_error_then_success_is_recovered(monkeypatch):
    requests = []
    responses = iter([httpx.Response(502), httpx.Response(204)])
    client = _client(monkeypatch, lambda request: next(responses), requests, max_retries=2)

    client.update_transport_status("17", TransportStatus.ONLINE)

    assert len(requests) == 2
