"""
Routes for the connections endpoint.

Public endpoint for querying priced train connections.
"""

import httpx
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from railfare.core.http import get_http_client
from railfare.core.logger import log_request
from railfare.schemas.connection import ConnectionResponse, ErrorResponse
from railfare.api.client import controllers_connections

router = APIRouter(tags=["Connections"])


@router.get(
    "/connections",
    response_model=List[ConnectionResponse],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def get_connections(
    from_mask: Optional[str] = Query(None, alias="from", description="Origin station (free text)"),
    to_mask: Optional[str] = Query(None, alias="to", description="Destination station (free text)"),
    dep: Optional[str] = Query(None, description="Departure time, epoch milliseconds"),
    age: Optional[str] = Query(None, description="Passenger age (default -1, unspecified)"),
    travel_class: Optional[str] = Query(None, alias="class", description="Travel class (default 2)"),
    client: httpx.AsyncClient = Depends(get_http_client)
):
    """
    Get train connections with prices between two stations.

    **Query Parameters:**
    - `from` (required): Origin station mask
    - `to` (required): Destination station mask
    - `dep` (required): Departure time as epoch milliseconds
    - `age` (optional): Passenger age (default: -1)
    - `class` (optional): Travel class (default: 2)

    **Error Responses:**
    - `400`: Missing from, to, or dep
    - `500`: Any upstream failure, `{"error": "<message>"}`

    **Example:**
    ```
    GET /connections?from=Praha&to=Brno&dep=1700000000000&age=25&class=2
    ```
    """
    log_request("/connections", "GET", f"from={from_mask} to={to_mask} dep={dep}")
    return await controllers_connections.get_connections(
        client=client,
        from_mask=from_mask,
        to_mask=to_mask,
        dep=dep,
        age=age,
        travel_class=travel_class
    )
