"""
Controllers for the connections endpoint.

This module handles the business logic for:
- GET /connections - priced train connections between two stations
"""

import httpx
from typing import List, Optional

from railfare.core.config import settings, IpwsClientConfig
from railfare.core.errors import ValidationError
from railfare.core.logger import log_success
from railfare.schemas.connection import ConnectionResponse
from railfare.services.exchange import ExchangeRateService
from railfare.services.ipws import IpwsService
from railfare.services.journey import JourneyService

DEFAULT_AGE = -1
DEFAULT_CLASS = 2


def _parse_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def build_journey_service(client: httpx.AsyncClient) -> JourneyService:
    """Wire the pipeline services onto one outbound HTTP client"""
    return JourneyService(
        ipws=IpwsService(client, IpwsClientConfig.from_settings(settings)),
        exchange=ExchangeRateService(client, settings.RATES_URL, settings.SOURCE_CURRENCY),
    )


async def get_connections(
    client: httpx.AsyncClient,
    from_mask: Optional[str],
    to_mask: Optional[str],
    dep: Optional[str],
    age: Optional[str] = None,
    travel_class: Optional[str] = None
) -> List[ConnectionResponse]:
    """
    Get priced connections between two station masks.

    Validates the query before any remote call is made.

    Raises:
        ValidationError: If from, to or dep is missing, or a number does not parse
    """
    if not from_mask or not to_mask or not dep:
        raise ValidationError("Missing from, to, or dep")

    departure_ms = _parse_int("dep", dep, 0)
    passenger_age = _parse_int("age", age, DEFAULT_AGE)
    class_number = _parse_int("class", travel_class, DEFAULT_CLASS)

    service = build_journey_service(client)
    connections = await service.find_connections(
        from_mask=from_mask,
        to_mask=to_mask,
        departure_ms=departure_ms,
        travel_class=class_number,
        age=passenger_age
    )

    log_success("/connections", f"{from_mask} -> {to_mask}: {len(connections)} connections")
    return connections
