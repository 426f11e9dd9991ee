from dataclasses import dataclass
from typing import List

from railfare.core.errors import ConsistencyError
from railfare.schemas.connection import ConnectionResponse, LegResponse
from railfare.schemas.ipws import Connection, Leg, SearchResult, to_iso_instant
from railfare.services.exchange import Price, convert_price


@dataclass(frozen=True)
class PricedConnection:
    """A connection paired with its price"""
    connection: Connection
    price: Price


def pair_prices(
    result: SearchResult,
    prices: List[int],
    connection_ids: List[int],
    rate: float
) -> List[PricedConnection]:
    """
    Pair each connection with the price fetched at the same position.

    Raises:
        ConsistencyError: If lengths differ or the identifiers no longer line up
    """
    connections = result.connections
    if not (len(connections) == len(prices) == len(connection_ids)):
        raise ConsistencyError(
            f"Length mismatch: {len(connections)} connections, "
            f"{len(prices)} prices, {len(connection_ids)} ids"
        )

    paired = []
    for connection, raw_price, requested_id in zip(connections, prices, connection_ids):
        if connection.id != requested_id:
            raise ConsistencyError(
                f"Connection {connection.id} paired with price for {requested_id}"
            )
        paired.append(PricedConnection(connection=connection, price=convert_price(raw_price, rate)))
    return paired


def flatten_leg(leg: Leg) -> LegResponse:
    return LegResponse(
        depTime=to_iso_instant(leg.departure_time),
        arrTime=to_iso_instant(leg.arrival_time),
        depName=leg.departure_station_name,
        destName=leg.arrival_station_name,
        lineName=leg.line_label,
    )


def flatten_connection(item: PricedConnection) -> ConnectionResponse:
    return ConnectionResponse(
        id=item.connection.id,
        priceCzk=item.price.amount_source,
        priceEur=item.price.amount_target,
        transfers=item.connection.transfers,
        legs=[flatten_leg(leg) for leg in item.connection.legs],
    )


def assemble_connections(
    result: SearchResult,
    prices: List[int],
    connection_ids: List[int],
    rate: float
) -> List[ConnectionResponse]:
    """Build the flat response records, keeping the remote connection order"""
    return [flatten_connection(item) for item in pair_prices(result, prices, connection_ids, rate)]
