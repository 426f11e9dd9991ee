"""
Exchange-rate service for converting CZK prices to EUR.

The rate feed is EUR-based, so rates["CZK"] is the number of CZK in one EUR
and a CZK amount converts to EUR by division.
"""

import httpx
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from railfare.core.errors import MalformedResponseError, RemoteServiceError
from railfare.core.logger import logger, log_rate_request

FALLBACK_RATE = 1.0
CENT = Decimal("0.01")


def round2(value: float) -> float:
    """Round half-up to 2 decimals on the exact binary value, like Number.toFixed(2)"""
    return float(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Price:
    """Price of one connection in source and target currency"""
    amount_source: float
    amount_target: float


def convert_price(minor_units: int, rate: float) -> Price:
    """
    Convert a minor-unit price into rounded source and target amounts.

    Both amounts are rounded independently from the unrounded source value.
    """
    source = minor_units / 100.0
    return Price(amount_source=round2(source), amount_target=round2(source / rate))


class ExchangeRateService:
    """Service for fetching the current source-currency rate"""

    def __init__(self, client: httpx.AsyncClient, url: str, currency: str = "CZK"):
        self.client = client
        self.url = url
        self.currency = currency

    def _extract_rate(self, data: Any) -> Optional[float]:
        if not isinstance(data, dict):
            return None
        rates = data.get("rates")
        if not isinstance(rates, dict):
            return None
        rate = rates.get(self.currency)
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            return None
        if rate <= 0:
            return None
        return float(rate)

    async def get_rate(self) -> float:
        """
        Fetch units of source currency per one unit of the feed's base currency.

        The status code is not decisive: an error reply with a JSON body
        simply carries no rate.

        Returns:
            The rate, or 1.0 when the feed carries no usable value

        Raises:
            RemoteServiceError: On timeout or transport failure
            MalformedResponseError: If the body is not JSON
        """
        try:
            response = await self.client.get(self.url, params={"symbols": self.currency})
        except httpx.TimeoutException:
            log_rate_request(self.currency, success=False, error="Timeout")
            raise RemoteServiceError("GET", self.url, None, "request timed out")
        except httpx.HTTPError as e:
            log_rate_request(self.currency, success=False, error=str(e))
            raise RemoteServiceError("GET", self.url, None, f"{type(e).__name__}: {e}")

        if not response.is_success:
            log_rate_request(self.currency, success=False, error=f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            log_rate_request(self.currency, success=False, error="Invalid JSON")
            raise MalformedResponseError(
                f"Rate service returned invalid JSON (HTTP {response.status_code})"
            )

        rate = self._extract_rate(data)
        if rate is None:
            # Degraded mode: prices come out unconverted
            logger.warning(f"No usable {self.currency} rate in response, falling back to {FALLBACK_RATE}")
            return FALLBACK_RATE

        log_rate_request(self.currency, success=True)
        return rate
