"""
IPWS booking API service.

Wraps the four JSON-over-POST procedures the journey query needs:
- SearchGlobalListItemInfoExt (station lookup)
- CreateSession (booking session)
- SearchConnectionInfo1 (journey search)
- GetConnectionsPrice (batched prices)

The service holds no per-call state, so one instance can serve concurrent
lookups within a request.
"""

import httpx
from typing import Any, Dict, List
from pydantic import ValidationError as PydanticValidationError

from railfare.core.config import IpwsClientConfig
from railfare.core.errors import (
    MalformedResponseError,
    NotFoundError,
    RemoteServiceError,
    SessionError,
)
from railfare.core.logger import logger, log_ipws_request
from railfare.schemas.ipws import Connection, SearchResult, Station, format_ipws_date


class IpwsService:
    """Service for interacting with the IPWS booking API"""

    def __init__(self, client: httpx.AsyncClient, config: IpwsClientConfig):
        self.client = client
        self.config = config

    async def _post(self, method: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON body to an IPWS procedure and return the decoded reply.

        Raises:
            RemoteServiceError: On non-2xx status, timeout or transport failure
            MalformedResponseError: If the reply is not a JSON object
        """
        url = f"{self.config.base_url}/{method}"
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.config.user_agent,
        }
        try:
            response = await self.client.post(url, json=body, headers=headers)
        except httpx.TimeoutException:
            log_ipws_request(method, success=False, error="Timeout")
            raise RemoteServiceError("POST", url, None, "request timed out")
        except httpx.HTTPError as e:
            log_ipws_request(method, success=False, error=str(e))
            raise RemoteServiceError("POST", url, None, f"{type(e).__name__}: {e}")

        if not response.is_success:
            log_ipws_request(method, success=False, error=f"HTTP {response.status_code}")
            raise RemoteServiceError("POST", url, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            log_ipws_request(method, success=False, error="Invalid JSON")
            raise MalformedResponseError(f"{method} returned invalid JSON")

        if not isinstance(data, dict):
            raise MalformedResponseError(f"{method} returned an unexpected payload")

        log_ipws_request(method, success=True)
        return data

    def _identity(self) -> Dict[str, Any]:
        return {"sAppID": self.config.app_id, "sUserDesc": self.config.user_desc}

    def _passengers(self, age: int) -> List[Dict[str, Any]]:
        # Exactly one passenger per query
        return [{
            "oPassenger": {"iPassengerId": self.config.passenger_id},
            "iCount": 1,
            "iAge": age,
        }]

    async def search_station(self, mask: str) -> Station:
        """
        Resolve a free-text station mask to the best matching station.

        Only the first ranked match is used.

        Raises:
            NotFoundError: If nothing matches the mask
        """
        body = {
            "iLang": self.config.lang,
            "sMask": mask,
            "iMaxCount": self.config.max_stations,
            **self._identity(),
        }
        data = await self._post("SearchGlobalListItemInfoExt", body)

        matches = data.get("d") or []
        if not isinstance(matches, list):
            raise MalformedResponseError(f"Malformed station search response for '{mask}'")
        item = matches[0].get("oItem") if matches and isinstance(matches[0], dict) else None
        if not item:
            logger.warning(f"No station matches mask '{mask}'")
            raise NotFoundError(f"Station not found: {mask}")

        try:
            station = Station.model_validate(item)
        except PydanticValidationError as e:
            raise MalformedResponseError(f"Malformed station item for '{mask}': {e.error_count()} error(s)")

        logger.debug(f"Resolved '{mask}' -> {station.name} ({station.id})")
        return station

    async def create_session(self) -> str:
        """
        Open a fresh booking session.

        Raises:
            SessionError: If the reply carries no session id
        """
        body = {
            "iLang": self.config.lang,
            **self._identity(),
            "sUser": "",
            "sPwd": "",
            "iTokenType": 1,
            "oRegisterNotificationsSettings": self.config.notifications.model_dump(),
        }
        data = await self._post("CreateSession", body)

        result = data.get("d")
        session_id = result.get("sSessionID") if isinstance(result, dict) else None
        if not session_id:
            raise SessionError("Session could not be created: no session id in response")
        return session_id

    async def search_connections(
        self,
        session_id: str,
        origin: Station,
        destination: Station,
        departure_ms: int,
        travel_class: int,
        age: int
    ) -> SearchResult:
        """
        Search connections departing after the given instant.

        Args:
            session_id: Token from create_session
            origin: Resolved departure station
            destination: Resolved arrival station
            departure_ms: Departure time as epoch milliseconds
            travel_class: IPWS travel class (1 or 2)
            age: Passenger age, -1 when unspecified

        Returns:
            SearchResult with the handle and connections in remote order

        Raises:
            MalformedResponseError: If the result envelope is missing
        """
        body = {
            "iLang": self.config.lang,
            "sSessionID": session_id,
            "oFrom": origin.descriptor(),
            "oTo": destination.descriptor(),
            "aoVia": [],
            "aoChange": [],
            "dtDateTime": format_ipws_date(departure_ms),
            "bIsDep": True,
            "oConnParms": {"iSearchConnectionFlags": 0, "iCarrier": self.config.carrier},
            "iMaxObjectsCount": 0,
            "iMaxCount": self.config.max_connections,
            "oPriceRequestClass": {"iClass": travel_class, "bBusiness": False},
            "aoPassengers": self._passengers(age),
        }
        data = await self._post("SearchConnectionInfo1", body)

        result = data.get("d")
        if not isinstance(result, dict):
            raise MalformedResponseError("Malformed journey response")

        raw_connections = (result.get("oConnInfo") or {}).get("aoConnections") or []
        try:
            connections = [Connection.model_validate(c) for c in raw_connections]
            search_result = SearchResult(handle=result.get("iHandle"), connections=connections)
        except PydanticValidationError as e:
            raise MalformedResponseError(f"Malformed journey response: {e.error_count()} invalid field(s)")

        logger.debug(
            f"Journey search {origin.name} -> {destination.name}: "
            f"{len(connections)} connections (handle {search_result.handle})"
        )
        return search_result

    async def get_prices(
        self,
        session_id: str,
        handle: int,
        connection_ids: List[int],
        travel_class: int,
        age: int
    ) -> List[int]:
        """
        Fetch prices for all connections of a search in one request.

        Returns:
            Prices in minor units (haléř), same order and length as connection_ids

        Raises:
            MalformedResponseError: If the number of prices does not match
        """
        body = {
            "iLang": self.config.lang,
            "sSessionID": session_id,
            "iHandle": handle,
            "aiConnID": list(connection_ids),
            "oPriceRequest": {
                "aoPassengers": self._passengers(age),
                "iConnHandleThere": 0,
                "iConnIDThere": 0,
                "oClass": {"iClass": travel_class, "bBusiness": False},
                "iDocType": self.config.doc_type,
            },
            "bStopIfAgeError": True,
        }
        data = await self._post("GetConnectionsPrice", body)

        items = data.get("d") or []
        if not isinstance(items, list) or not all(isinstance(item, dict) or item is None for item in items):
            raise MalformedResponseError("Malformed price response")
        try:
            prices = [int((item or {}).get("iPrice") or 0) for item in items]
        except (TypeError, ValueError):
            raise MalformedResponseError("Malformed price response: non-numeric iPrice")

        if len(prices) != len(connection_ids):
            raise MalformedResponseError(
                f"Expected {len(connection_ids)} prices, got {len(prices)}"
            )
        return prices
