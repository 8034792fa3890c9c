"""
Market data module for Verdant.

Live prices are optional: without a quote source the engine runs on the
static catalog prices.
"""

from verdant.market.interface import QuoteSource
from verdant.market.mock import StaticQuoteSource
from verdant.market.refresh import fetch_live_prices

__all__ = [
    "QuoteSource",
    "StaticQuoteSource",
    "fetch_live_prices",
]
