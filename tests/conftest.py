"""Shared fixtures: a fake IPWS backend and rate feed behind httpx.MockTransport."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from railfare.core.config import IpwsClientConfig, settings
from railfare.services.exchange import ExchangeRateService
from railfare.services.ipws import IpwsService
from railfare.services.journey import JourneyService

IPWS_BASE = "https://ipws.test/IP.svc"
RATES_URL = "https://rates.test/v1/latest"

STATIONS = {
    "Praha": {"iListID": 1001, "sName": "Praha hl.n."},
    "Brno": {"iListID": 2002, "sName": "Brno hl.n."},
}


def ipws_leg(
    dep_ms: int,
    arr_ms: int,
    dep_name: str,
    arr_name: str,
    train_type: Optional[str] = "EC",
    num1: Optional[str] = "123",
    num2: Optional[str] = None,
    num3: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "dtDateTime1": f"/Date({dep_ms})/",
        "dtDateTime2": f"/Date({arr_ms})/",
        "sStationName1": dep_name,
        "sStationName2": arr_name,
        "sType": train_type,
        "sNum1": num1,
        "sNum2": num2,
        "sNum3": num3,
    }


def default_connections() -> List[Dict[str, Any]]:
    return [
        {"iID": 11, "aoTrains": [
            ipws_leg(1700000000000, 1700009000000, "Praha hl.n.", "Brno hl.n.", "EC", "171"),
        ]},
        {"iID": 12, "aoTrains": [
            ipws_leg(1700003600000, 1700007200000, "Praha hl.n.", "Pardubice hl.n.", "R", "881"),
            ipws_leg(1700007800000, 1700014400000, "Pardubice hl.n.", "Brno hl.n.", "Os", "5011", ""),
        ]},
        {"iID": 13, "aoTrains": [
            ipws_leg(1700010000000, 1700019000000, "Praha hl.n.", "Brno hl.n.", "RJ", "1011"),
        ]},
    ]


class FakeBackend:
    """Records outbound calls and answers them like IPWS and the rate feed would."""

    def __init__(self):
        self.calls: List[httpx.Request] = []
        self.stations = dict(STATIONS)
        self.session_reply: Dict[str, Any] = {"d": {"sSessionID": "session-abc"}}
        self.search_reply: Dict[str, Any] = {
            "d": {"iHandle": 77, "oConnInfo": {"aoConnections": default_connections()}}
        }
        self.price_reply: Dict[str, Any] = {
            "d": [{"iPrice": 12900}, {"iPrice": 25050}, {"iPrice": 9999}]
        }
        self.rate_reply: Any = {"amount": 1.0, "base": "EUR", "rates": {"CZK": 25.0}}
        self.failures: Dict[str, httpx.Response] = {}

    def calls_to(self, name: str) -> List[httpx.Request]:
        return [r for r in self.calls if r.url.path.endswith(name)]

    def body_of(self, request: httpx.Request) -> Dict[str, Any]:
        return json.loads(request.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        name = request.url.path.rsplit("/", 1)[-1]
        if name in self.failures:
            return self.failures[name]

        if name == "latest":
            return httpx.Response(200, json=self.rate_reply)
        if name == "SearchGlobalListItemInfoExt":
            mask = self.body_of(request)["sMask"]
            item = self.stations.get(mask)
            return httpx.Response(200, json={"d": [{"oItem": item}] if item else []})
        if name == "CreateSession":
            return httpx.Response(200, json=self.session_reply)
        if name == "SearchConnectionInfo1":
            return httpx.Response(200, json=self.search_reply)
        if name == "GetConnectionsPrice":
            return httpx.Response(200, json=self.price_reply)
        return httpx.Response(404, text="unknown procedure")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def ipws_config() -> IpwsClientConfig:
    return IpwsClientConfig.from_settings(settings).model_copy(update={"base_url": IPWS_BASE})


@pytest.fixture
def make_client(backend: FakeBackend) -> Callable[[], httpx.AsyncClient]:
    def factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
    return factory


@pytest.fixture
def journey_service(make_client, ipws_config) -> JourneyService:
    client = make_client()
    return JourneyService(
        ipws=IpwsService(client, ipws_config),
        exchange=ExchangeRateService(client, RATES_URL, "CZK"),
    )


@pytest.fixture
def api_client(backend: FakeBackend, monkeypatch):
    """TestClient whose outbound HTTP goes to the fake backend"""
    from fastapi.testclient import TestClient

    from railfare.core.http import get_http_client
    from railfare.main import app

    monkeypatch.setattr(settings, "IPWS_BASE_URL", IPWS_BASE)
    monkeypatch.setattr(settings, "RATES_URL", RATES_URL)

    async def override_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)) as client:
            yield client

    app.dependency_overrides[get_http_client] = override_client
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
