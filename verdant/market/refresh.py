"""
Live price refresh.

Fetches a quote per ticker and collects the usable prices. A failure for
one ticker never aborts the others; that ticker keeps its previous price.
"""

import logging
from typing import Iterable

from verdant.exceptions import UpstreamUnavailable
from verdant.market.interface import QuoteSource

logger = logging.getLogger(__name__)


def fetch_live_prices(source: QuoteSource, tickers: Iterable[str]) -> dict[str, float]:
    """
    Fetch live prices for the given tickers.

    Returns:
        ticker -> current price for every ticker that produced a quote

    Raises:
        UpstreamUnavailable: Only if every requested ticker failed upstream
    """
    prices: dict[str, float] = {}
    failures: list[str] = []
    requested = 0

    for ticker in tickers:
        requested += 1
        try:
            quote = source.get_quote(ticker)
        except UpstreamUnavailable as e:
            logger.warning(f"Quote fetch failed for {ticker}: {e}")
            failures.append(ticker)
            continue
        if quote is not None:
            prices[ticker] = quote.current

    if requested and len(failures) == requested:
        raise UpstreamUnavailable(f"All {requested} quote requests failed")

    logger.info(
        f"Fetched {len(prices)}/{requested} live prices"
        + (f" ({len(failures)} failed)" if failures else "")
    )
    return prices
