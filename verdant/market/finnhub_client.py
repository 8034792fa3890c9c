"""
Finnhub market data client for Verdant.

Thin wrapper over two Finnhub REST endpoints:
- /quote: latest price (field "c"); a price of 0 means "no quote"
- /stock/metric?metric=all: basic financials used for display

Requires FINNHUB_API_KEY environment variable to be set.
"""

import logging
import os
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from verdant.config import DEFAULT_MARKET_DATA_CONFIG, MarketDataConfig
from verdant.exceptions import UpstreamUnavailable
from verdant.models import BasicFinancials, Quote

logger = logging.getLogger(__name__)


class FinnhubClient:
    """
    Finnhub client implementing the QuoteSource Protocol.

    Attributes:
        config: Base URL and timeout
        client: httpx client used for every request
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: MarketDataConfig = DEFAULT_MARKET_DATA_CONFIG,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            api_key: Finnhub API key (defaults to FINNHUB_API_KEY env var)
            config: Market data configuration
            client: Pre-built httpx client (tests pass one with a MockTransport)

        Raises:
            ValueError: If no API key is provided or found in environment
        """
        key = api_key or os.environ.get("FINNHUB_API_KEY")
        if not key:
            raise ValueError(
                "Finnhub API key required. Set FINNHUB_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self._api_key = key
        self.config = config
        self.client = client if client is not None else httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )

    def close(self) -> None:
        self.client.close()

    def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        """
        GET a Finnhub endpoint and decode its JSON object.

        Raises:
            UpstreamUnavailable: On transport errors, non-2xx status, or a
                payload that is not a JSON object
        """
        try:
            resp = self.client.get(path, params={**params, "token": self._api_key})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Finnhub {path} returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Cannot reach Finnhub {path}: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailable(f"Finnhub {path} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"Finnhub {path} returned unexpected payload")
        return data

    def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch the latest quote for a symbol.

        Returns:
            Quote, or None when Finnhub reports no price (c == 0 or missing)

        Raises:
            UpstreamUnavailable: If Finnhub cannot be reached or returns
                malformed data
        """
        data = self._get("/quote", {"symbol": symbol})
        current = data.get("c")
        if not isinstance(current, (int, float)) or current <= 0:
            logger.info(f"No live quote for {symbol}")
            return None

        try:
            return Quote(
                symbol=symbol,
                current=current,
                change=data.get("d"),
                percent_change=data.get("dp"),
                high=data.get("h"),
                low=data.get("l"),
                open=data.get("o"),
                previous_close=data.get("pc"),
                timestamp=data.get("t"),
            )
        except PydanticValidationError as e:
            raise UpstreamUnavailable(
                f"Finnhub /quote returned malformed data for {symbol}: {e}"
            ) from e

    def get_basic_financials(self, symbol: str) -> BasicFinancials:
        """
        Fetch basic financial metrics for a symbol.

        Missing metrics come back as None.

        Raises:
            UpstreamUnavailable: If Finnhub cannot be reached or returns
                malformed data
        """
        data = self._get("/stock/metric", {"symbol": symbol, "metric": "all"})
        metric = data.get("metric") or {}
        if not isinstance(metric, dict):
            raise UpstreamUnavailable(f"Finnhub /stock/metric returned unexpected metrics for {symbol}")
        try:
            return BasicFinancials(
                symbol=symbol,
                pe_ttm=metric.get("peExclExtraTTM"),
                beta=metric.get("beta"),
                week52_high=metric.get("52WeekHigh"),
                week52_low=metric.get("52WeekLow"),
                eps_ttm=metric.get("epsTTM"),
                average_volume_10d=metric.get("10DayAverageTradingVolume"),
            )
        except PydanticValidationError as e:
            raise UpstreamUnavailable(
                f"Finnhub /stock/metric returned malformed data for {symbol}: {e}"
            ) from e
