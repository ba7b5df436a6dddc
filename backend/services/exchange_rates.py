"""
Exchange rate lookup for the currency conversion tool.
Uses the open ExchangeRate-API `latest/{base}` endpoint; no API key required.
"""
import os
import logging
import httpx
from typing import Dict

logger = logging.getLogger(__name__)

EXCHANGE_RATE_API_URL = os.getenv("EXCHANGE_RATE_API_URL", "https://open.er-api.com/v6/latest")


class ExchangeRateClient:
    """Thin async client around the exchange rate API."""

    def __init__(self, base_url: str = EXCHANGE_RATE_API_URL):
        self.base_url = base_url.rstrip("/")

    async def get_rates(self, base: str) -> Dict[str, float]:
        """Return {currency: rate} for one unit of `base`.

        Raises ValueError when the provider rejects the request or is unreachable.
        """
        url = f"{self.base_url}/{base.upper()}"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, timeout=10.0)
                data = response.json()
        except httpx.TimeoutException:
            logger.error(f"Exchange rate API timeout for {base}")
            raise ValueError("Exchange rate service timed out. Please try again.")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Exchange rate API error for {base}: {e}")
            raise ValueError("Failed to fetch exchange rates")

        if data.get("result") != "success":
            logger.warning(f"Exchange rate API returned error for {base}: {data.get('error-type')}")
            raise ValueError("Failed to fetch exchange rates")

        return data.get("rates", {})


exchange_rate_client = ExchangeRateClient()
