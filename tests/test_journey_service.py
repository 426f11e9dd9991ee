"""Tests for the journey query orchestration."""

import asyncio

import httpx
import pytest

from railfare.core.errors import NotFoundError, RemoteServiceError, SessionError


@pytest.mark.asyncio
async def test_pipeline_returns_priced_connections(journey_service, backend) -> None:
    records = await journey_service.find_connections("Praha", "Brno", 1700000000000, 2, 25)

    assert [r.id for r in records] == [11, 12, 13]
    assert [r.priceEur for r in records] == [5.16, 10.02, 4.0]


@pytest.mark.asyncio
async def test_session_token_and_handle_flow_into_price_request(journey_service, backend) -> None:
    await journey_service.find_connections("Praha", "Brno", 1700000000000, 1, 30)

    search = backend.body_of(backend.calls_to("SearchConnectionInfo1")[0])
    prices = backend.body_of(backend.calls_to("GetConnectionsPrice")[0])
    assert search["sSessionID"] == prices["sSessionID"] == "session-abc"
    assert prices["iHandle"] == 77
    assert prices["aiConnID"] == [11, 12, 13]
    assert prices["oPriceRequest"]["oClass"]["iClass"] == 1
    assert prices["oPriceRequest"]["aoPassengers"][0]["iAge"] == 30


@pytest.mark.asyncio
async def test_each_remote_procedure_called_once_per_station_pair(journey_service, backend) -> None:
    await journey_service.find_connections("Praha", "Brno", 1700000000000)

    assert len(backend.calls_to("SearchGlobalListItemInfoExt")) == 2
    assert len(backend.calls_to("CreateSession")) == 1
    assert len(backend.calls_to("SearchConnectionInfo1")) == 1
    assert len(backend.calls_to("GetConnectionsPrice")) == 1
    assert len(backend.calls_to("latest")) == 1


@pytest.mark.asyncio
async def test_station_lookups_overlap(make_client, ipws_config, backend) -> None:
    from railfare.services.exchange import ExchangeRateService
    from railfare.services.ipws import IpwsService
    from railfare.services.journey import JourneyService

    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        if request.url.path.endswith("SearchGlobalListItemInfoExt"):
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
        return backend.handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    service = JourneyService(
        IpwsService(client, ipws_config),
        ExchangeRateService(client, "https://rates.test/v1/latest"),
    )

    await service.find_connections("Praha", "Brno", 1700000000000)

    assert peak == 2


@pytest.mark.asyncio
async def test_unknown_station_aborts_before_session(journey_service, backend) -> None:
    with pytest.raises(NotFoundError, match="Station not found: Atlantis"):
        await journey_service.find_connections("Atlantis", "Brno", 1700000000000)

    assert backend.calls_to("CreateSession") == []
    assert backend.calls_to("GetConnectionsPrice") == []


@pytest.mark.asyncio
async def test_session_failure_aborts_pipeline(journey_service, backend) -> None:
    backend.session_reply = {"d": {"sSessionID": ""}}

    with pytest.raises(SessionError):
        await journey_service.find_connections("Praha", "Brno", 1700000000000)

    assert backend.calls_to("SearchConnectionInfo1") == []


@pytest.mark.asyncio
async def test_rate_error_status_leaves_prices_unconverted(journey_service, backend) -> None:
    backend.failures["latest"] = httpx.Response(404, json={"message": "not found"})

    records = await journey_service.find_connections("Praha", "Brno", 1700000000000)

    assert len(records) == 3
    assert all(r.priceEur == r.priceCzk for r in records)


@pytest.mark.asyncio
async def test_rate_timeout_aborts_pipeline(make_client, ipws_config, backend) -> None:
    from railfare.services.exchange import ExchangeRateService
    from railfare.services.ipws import IpwsService
    from railfare.services.journey import JourneyService

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("latest"):
            raise httpx.ReadTimeout("too slow", request=request)
        return backend.handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    service = JourneyService(
        IpwsService(client, ipws_config),
        ExchangeRateService(client, "https://rates.test/v1/latest"),
    )

    with pytest.raises(RemoteServiceError, match="timed out"):
        await service.find_connections("Praha", "Brno", 1700000000000)


@pytest.mark.asyncio
async def test_missing_rate_leaves_prices_unconverted(journey_service, backend) -> None:
    backend.rate_reply = {"base": "EUR", "rates": {}}

    records = await journey_service.find_connections("Praha", "Brno", 1700000000000)

    assert all(r.priceEur == r.priceCzk for r in records)
