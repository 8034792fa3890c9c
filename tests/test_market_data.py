"""Tests for the market data layer.

FinnhubClient is exercised against httpx.MockTransport; no network calls
are made.
"""

import httpx
import pytest

from verdant.exceptions import UpstreamUnavailable
from verdant.market import QuoteSource, StaticQuoteSource, fetch_live_prices
from verdant.market.finnhub_client import FinnhubClient


BASE_URL = "https://finnhub.io/api/v1"


def make_client(handler) -> FinnhubClient:
    http = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return FinnhubClient(api_key="test-key", client=http)


def json_handler(payload, status_code: int = 200, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)
    return handler


# =============================================================================
# FinnhubClient
# =============================================================================


class TestFinnhubQuote:
    """Tests for FinnhubClient.get_quote."""

    def test_parses_quote(self):
        seen: list = []
        client = make_client(json_handler(
            {"c": 420.5, "d": 2.1, "dp": 0.5, "h": 421, "l": 415, "o": 416, "pc": 418.4, "t": 1700000000},
            seen=seen,
        ))

        quote = client.get_quote("MSFT")

        assert quote.symbol == "MSFT"
        assert quote.current == 420.5
        assert quote.previous_close == 418.4
        assert quote.timestamp == 1700000000
        assert seen[0].url.path == "/api/v1/quote"
        assert seen[0].url.params["symbol"] == "MSFT"
        assert seen[0].url.params["token"] == "test-key"

    def test_zero_price_means_no_quote(self):
        client = make_client(json_handler({"c": 0, "d": None, "dp": None}))

        assert client.get_quote("ZZZZ") is None

    def test_missing_price_means_no_quote(self):
        client = make_client(json_handler({}))

        assert client.get_quote("ZZZZ") is None

    def test_server_error_is_upstream(self):
        client = make_client(json_handler({"error": "down"}, status_code=502))

        with pytest.raises(UpstreamUnavailable):
            client.get_quote("MSFT")

    def test_unauthorized_is_upstream(self):
        client = make_client(json_handler({"error": "Invalid API key"}, status_code=401))

        with pytest.raises(UpstreamUnavailable):
            client.get_quote("MSFT")

    def test_transport_error_is_upstream(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)

        with pytest.raises(UpstreamUnavailable):
            client.get_quote("MSFT")

    def test_invalid_json_is_upstream(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(UpstreamUnavailable):
            client.get_quote("MSFT")

    def test_non_object_payload_is_upstream(self):
        client = make_client(json_handler([1, 2, 3]))

        with pytest.raises(UpstreamUnavailable):
            client.get_quote("MSFT")

    def test_malformed_side_field_is_upstream(self):
        client = make_client(json_handler({"c": 10.0, "d": "n/a"}))

        with pytest.raises(UpstreamUnavailable):
            client.get_quote("MSFT")

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("FINNHUB_API_KEY", raising=False)

        with pytest.raises(ValueError):
            FinnhubClient()

    def test_implements_protocol(self):
        assert isinstance(make_client(json_handler({})), QuoteSource)


class TestFinnhubFinancials:
    """Tests for FinnhubClient.get_basic_financials."""

    def test_parses_metrics(self):
        seen: list = []
        client = make_client(json_handler(
            {"metric": {
                "peExclExtraTTM": 35.2,
                "beta": 0.9,
                "52WeekHigh": 468.35,
                "52WeekLow": 309.45,
                "epsTTM": 11.8,
                "10DayAverageTradingVolume": 21.4,
            }},
            seen=seen,
        ))

        financials = client.get_basic_financials("MSFT")

        assert financials.pe_ttm == 35.2
        assert financials.week52_high == 468.35
        assert financials.average_volume_10d == 21.4
        assert seen[0].url.path == "/api/v1/stock/metric"
        assert seen[0].url.params["metric"] == "all"

    def test_non_object_metric_is_upstream(self):
        client = make_client(json_handler({"metric": [1, 2]}))

        with pytest.raises(UpstreamUnavailable):
            client.get_basic_financials("F")

    def test_malformed_metric_is_upstream(self):
        client = make_client(json_handler({"metric": {"beta": "high"}}))

        with pytest.raises(UpstreamUnavailable):
            client.get_basic_financials("F")

    def test_missing_metrics_are_none(self):
        client = make_client(json_handler({"metric": {}}))

        financials = client.get_basic_financials("F")

        assert financials.beta is None
        assert financials.eps_ttm is None


# =============================================================================
# Refresh
# =============================================================================


class TestFetchLivePrices:
    """Tests for fetch_live_prices."""

    def test_collects_prices(self):
        source = StaticQuoteSource({"MSFT": 420.0, "NEE": 80.0})

        prices = fetch_live_prices(source, ["MSFT", "NEE"])

        assert prices == {"MSFT": 420.0, "NEE": 80.0}

    def test_skips_missing_quotes(self):
        source = StaticQuoteSource({"MSFT": 420.0})

        assert fetch_live_prices(source, ["MSFT", "XOM"]) == {"MSFT": 420.0}

    def test_partial_failure_keeps_others(self):
        source = StaticQuoteSource({"MSFT": 420.0, "NEE": 80.0}, failing=["NEE"])

        prices = fetch_live_prices(source, ["MSFT", "NEE"])

        assert prices == {"MSFT": 420.0}
        assert source.requested == ["MSFT", "NEE"]

    def test_malformed_quote_keeps_others(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["symbol"] == "BAD":
                return httpx.Response(200, json={"c": 10.0, "d": "n/a"})
            return httpx.Response(200, json={"c": 50.0})

        prices = fetch_live_prices(make_client(handler), ["GOOD", "BAD", "OTHER"])

        assert prices == {"GOOD": 50.0, "OTHER": 50.0}

    def test_total_failure_raises(self):
        source = StaticQuoteSource(failing=["MSFT", "NEE"])

        with pytest.raises(UpstreamUnavailable):
            fetch_live_prices(source, ["MSFT", "NEE"])

    def test_no_tickers(self):
        assert fetch_live_prices(StaticQuoteSource(), []) == {}

    def test_static_source_implements_protocol(self):
        assert isinstance(StaticQuoteSource(), QuoteSource)

    def test_static_financials(self):
        source = StaticQuoteSource(failing=["XOM"])

        assert source.get_basic_financials("MSFT").symbol == "MSFT"
        with pytest.raises(UpstreamUnavailable):
            source.get_basic_financials("XOM")
