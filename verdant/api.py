"""
FastAPI Application for Verdant.

This module provides the HTTP API layer. It is a thin layer that delegates
all business logic to the engine, the calculation session, the advisor and
the market data client.

Endpoints:
    GET /health - Health check
    GET /api/instruments - Catalog listing
    POST /api/calculate - Run and publish a calculation
    GET /api/results/latest - Latest result (optionally filtered by search)
    POST /api/prices - Push live prices (silent recompute)
    POST /api/prices/refresh - Pull live prices from Finnhub
    GET /api/quote/{symbol} - Quote proxy
    GET /api/financials/{symbol} - Basic financials proxy
    POST /api/recommend - Narrative recommendation for the latest result
"""

import logging
import os
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
    print(f"[ENV] Loaded .env from {env_path}")
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status

from verdant.advisor import generate_narrative
from verdant.catalog import load_catalog
from verdant.config import DEFAULT_ENGINE_CONFIG
from verdant.engine.ranking import search_instruments
from verdant.exceptions import (
    DivisionUndefined,
    InvalidParameter,
    NoResultError,
    StaleResultError,
    UpstreamUnavailable,
)
from verdant.llm.interface import NarrativeClient
from verdant.llm.mock import MockNarrativeClient
from verdant.llm.openai_client import LLMError, OpenAINarrativeClient
from verdant.market.finnhub_client import FinnhubClient
from verdant.market.interface import QuoteSource
from verdant.market.refresh import fetch_live_prices
from verdant.models import (
    BasicFinancials,
    CalculationRequest,
    CalculationResult,
    ErrorResponse,
    LivePriceUpdate,
    PriceUpdateResponse,
    Quote,
    RecommendationResponse,
)
from verdant.session import CalculationSession
from verdant.validation import build_parameters


logger = logging.getLogger(__name__)


def get_llm_client() -> NarrativeClient:
    """
    Get the narrative client based on environment configuration.

    Returns OpenAINarrativeClient if OPENAI_API_KEY is set, otherwise MockNarrativeClient.
    """
    if os.environ.get("OPENAI_API_KEY"):
        print("[LLM] Using OpenAINarrativeClient (OPENAI_API_KEY is set)")
        return OpenAINarrativeClient()
    print("[LLM] Using MockNarrativeClient (no OPENAI_API_KEY)")
    return MockNarrativeClient()


def get_market_client() -> Optional[QuoteSource]:
    """
    Get the market data client based on environment configuration.

    Returns FinnhubClient if FINNHUB_API_KEY is set, otherwise None
    (the engine then runs on static catalog prices).
    """
    if os.environ.get("FINNHUB_API_KEY"):
        return FinnhubClient()
    return None


def _error(status_code: int, error: str, detail: str, code: str) -> HTTPException:
    error_response = ErrorResponse(error=error, detail=detail, code=code)
    return HTTPException(status_code=status_code, detail=error_response.model_dump())


def _require_market_client() -> QuoteSource:
    market = get_market_client()
    if market is None:
        raise _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Market data unavailable",
            "No market data provider configured (set FINNHUB_API_KEY)",
            "MARKET_DATA_UNAVAILABLE",
        )
    return market


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Verdant API",
    version="1.0.0",
    description="Green investment screener: carbon-weighted ranking and allocation",
)

# Single in-memory session (price overlay + latest result)
session = CalculationSession(load_catalog(), DEFAULT_ENGINE_CONFIG)


# =============================================================================
# Endpoints
# =============================================================================


@app.get(
    "/health",
    summary="Health check",
    description="Returns service health status",
    tags=["System"],
)
def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Verdant API",
        "version": "1.0.0",
        "instruments": len(session.catalog),
    }


@app.get(
    "/api/instruments",
    summary="List catalog instruments",
    tags=["Catalog"],
)
def list_instruments() -> dict:
    """Catalog records in catalog order, plus any stored-grade mismatches."""
    return {
        "instruments": [i.model_dump(mode="json") for i in session.catalog],
        "grade_mismatches": list(session.catalog.grade_mismatches),
    }


# =============================================================================
# Calculation Endpoints
# =============================================================================


@app.post(
    "/api/calculate",
    response_model=CalculationResult,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid parameters"},
        500: {"model": ErrorResponse, "description": "Allocation undefined"},
    },
    tags=["Calculation"],
)
def create_calculation(request: CalculationRequest) -> CalculationResult:
    """
    Validate parameters, run the engine and publish the result.

    Status Codes:
        200: Result published
        400: Invalid parameters (nothing is published)
        422: Pydantic validation error (automatic)
        500: Allocation undefined (zero composite total)
    """
    try:
        params = build_parameters(
            request.investment_amount,
            request.horizon_years,
            request.risk_tier,
            environmental_weight=request.environmental_weight,
            financial_weight=request.financial_weight,
            config=session.config,
        )
        return session.calculate(params)
    except InvalidParameter as e:
        logger.info(f"Rejected calculation: {e}")
        raise _error(400, "Invalid parameters", str(e), "INVALID_PARAMETER")
    except DivisionUndefined as e:
        logger.error(f"Allocation undefined: {e}")
        raise _error(500, "Allocation undefined", str(e), "DIVISION_UNDEFINED")


@app.get(
    "/api/results/latest",
    response_model=CalculationResult,
    responses={404: {"model": ErrorResponse, "description": "Nothing calculated yet"}},
    tags=["Calculation"],
)
def get_latest_result(
    q: str = Query("", description="Filter display rows by ticker or name"),
) -> CalculationResult:
    """
    Latest published result.

    The search query filters display rows only; ranking, allocation and
    highlights are unchanged.
    """
    result = session.latest
    if result is None:
        raise _error(
            status.HTTP_404_NOT_FOUND,
            "No result",
            "No calculation has been run yet",
            "NO_RESULT",
        )
    if not q.strip():
        return result
    return result.model_copy(update={"rows": search_instruments(result.rows, q)})


# =============================================================================
# Live Price Endpoints
# =============================================================================


@app.post(
    "/api/prices",
    response_model=PriceUpdateResponse,
    tags=["Prices"],
)
def push_prices(update: LivePriceUpdate) -> PriceUpdateResponse:
    """
    Merge live prices into the overlay.

    Invalid prices and unknown tickers are ignored. If a result exists it
    is silently recomputed with the same parameters.
    """
    applied, result = session.apply_live_prices(update.prices)
    return PriceUpdateResponse(
        applied=applied,
        recalculated=result is not None,
        generation=session.generation,
    )


@app.post(
    "/api/prices/refresh",
    response_model=PriceUpdateResponse,
    responses={503: {"model": ErrorResponse, "description": "Market data unavailable"}},
    tags=["Prices"],
)
def refresh_prices() -> PriceUpdateResponse:
    """
    Pull live prices for every catalog ticker and silently recompute.

    Status Codes:
        200: Prices applied (possibly zero)
        503: No provider configured, or every quote request failed
    """
    market = _require_market_client()
    try:
        prices = fetch_live_prices(market, session.catalog.tickers)
    except UpstreamUnavailable as e:
        logger.error(f"Price refresh failed: {e}")
        raise _error(503, "Market data unavailable", str(e), "MARKET_DATA_UNAVAILABLE")
    finally:
        market.close()

    applied, result = session.apply_live_prices(prices)
    return PriceUpdateResponse(
        applied=applied,
        recalculated=result is not None,
        generation=session.generation,
    )


@app.get(
    "/api/quote/{symbol}",
    response_model=Quote,
    responses={
        404: {"model": ErrorResponse, "description": "No quote for symbol"},
        503: {"model": ErrorResponse, "description": "Market data unavailable"},
    },
    tags=["Prices"],
)
def get_quote(symbol: str) -> Quote:
    """Latest quote for a symbol, proxied from Finnhub."""
    market = _require_market_client()
    try:
        quote = market.get_quote(symbol.upper())
    except UpstreamUnavailable as e:
        raise _error(503, "Market data unavailable", str(e), "MARKET_DATA_UNAVAILABLE")
    finally:
        market.close()

    if quote is None:
        raise _error(404, "No quote", f"No live quote for {symbol.upper()}", "NO_QUOTE")
    return quote


@app.get(
    "/api/financials/{symbol}",
    response_model=BasicFinancials,
    responses={503: {"model": ErrorResponse, "description": "Market data unavailable"}},
    tags=["Prices"],
)
def get_financials(symbol: str) -> BasicFinancials:
    """Basic financial metrics for a symbol, proxied from Finnhub."""
    market = _require_market_client()
    try:
        return market.get_basic_financials(symbol.upper())
    except UpstreamUnavailable as e:
        raise _error(503, "Market data unavailable", str(e), "MARKET_DATA_UNAVAILABLE")
    finally:
        market.close()


# =============================================================================
# Narrative Endpoint
# =============================================================================


@app.post(
    "/api/recommend",
    response_model=RecommendationResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Nothing calculated yet"},
        409: {"model": ErrorResponse, "description": "Result superseded"},
        503: {"model": ErrorResponse, "description": "LLM unavailable"},
    },
    tags=["Narrative"],
)
def create_recommendation() -> RecommendationResponse:
    """
    Generate a narrative recommendation for the latest result.

    Status Codes:
        200: Narrative generated and attached to the current result
        404: No calculation has been run yet
        409: A newer result was published while the narrative was generated
        500: LLM rejected the request
        503: LLM unreachable
    """
    try:
        llm = get_llm_client()
        generation, narrative = generate_narrative(session, llm, session.config)
        return RecommendationResponse(generation=generation, narrative=narrative)
    except NoResultError as e:
        raise _error(404, "No result", str(e), "NO_RESULT")
    except StaleResultError as e:
        logger.info(f"Narrative discarded: {e}")
        raise _error(409, "Stale result", str(e), "STALE_RESULT")
    except UpstreamUnavailable as e:
        logger.error(f"Narrative failed (infrastructure): {e}")
        raise _error(503, "Infrastructure error", str(e), "LLM_UNAVAILABLE")
    except LLMError as e:
        logger.error(f"Narrative failed (LLM): {e}")
        raise _error(500, "Internal error", str(e), "LLM_ERROR")
