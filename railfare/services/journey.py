"""
Journey query orchestration.

Runs the fixed pipeline for one incoming request:
- resolve origin and destination concurrently
- open a booking session
- search connections
- fetch all prices in one batch
- convert with the exchange rate (fetched in the background meanwhile)
- assemble the flat response

Any stage failure aborts the whole query; nothing is retried.
"""

import asyncio
from typing import List

from railfare.core.logger import logger
from railfare.schemas.connection import ConnectionResponse
from railfare.services.assembler import assemble_connections
from railfare.services.exchange import ExchangeRateService
from railfare.services.ipws import IpwsService


class JourneyService:
    """Orchestrates the journey query pipeline for one request"""

    def __init__(self, ipws: IpwsService, exchange: ExchangeRateService):
        self.ipws = ipws
        self.exchange = exchange

    async def find_connections(
        self,
        from_mask: str,
        to_mask: str,
        departure_ms: int,
        travel_class: int = 2,
        age: int = -1
    ) -> List[ConnectionResponse]:
        """
        Find priced connections between two station masks.

        Args:
            from_mask: Free-text origin station
            to_mask: Free-text destination station
            departure_ms: Departure time as epoch milliseconds
            travel_class: Travel class (default 2)
            age: Passenger age, -1 when unspecified

        Returns:
            Connection records in the order the booking API returned them
        """
        lookups = [
            asyncio.ensure_future(self.ipws.search_station(from_mask)),
            asyncio.ensure_future(self.ipws.search_station(to_mask)),
        ]
        try:
            origin, destination = await asyncio.gather(*lookups)
        except BaseException:
            # Fail fast: drop the other lookup
            for lookup in lookups:
                lookup.cancel()
            raise

        # The rate has no dependency on the booking session
        rate_task = asyncio.create_task(self.exchange.get_rate())
        try:
            session_id = await self.ipws.create_session()
            result = await self.ipws.search_connections(
                session_id, origin, destination, departure_ms, travel_class, age
            )
            connection_ids = result.connection_ids
            prices = await self.ipws.get_prices(
                session_id, result.handle, connection_ids, travel_class, age
            )
            rate = await rate_task
        finally:
            if not rate_task.done():
                rate_task.cancel()
            elif not rate_task.cancelled():
                # Mark a failed rate lookup as retrieved when an earlier stage already raised
                rate_task.exception()

        logger.debug(f"Pricing {len(connection_ids)} connections at rate {rate}")
        return assemble_connections(result, prices, connection_ids, rate)
