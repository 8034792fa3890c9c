"""
Price overlay for Verdant.

Live prices shadow the catalog's static price for one field only. The
overlay never mutates the catalog; a calculation reads an immutable
snapshot of it through effective_price().
"""

import logging
import math
from types import MappingProxyType
from typing import Mapping, Optional

from verdant.models import InstrumentRecord, PriceSource

logger = logging.getLogger(__name__)


def _is_valid_price(price: object) -> bool:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return False
    return math.isfinite(price) and price > 0


class PriceOverlay:
    """
    Mapping of ticker -> latest known live price.

    Absence of an entry means "use the catalog default price". Prices are
    authoritative until superseded; arrival order does not matter.
    """

    def __init__(self, prices: Optional[Mapping[str, float]] = None) -> None:
        self._prices: dict[str, float] = {}
        if prices:
            self.update(prices)

    def set_price(self, ticker: str, price: float) -> bool:
        """
        Record a live price.

        Returns:
            True if accepted, False if the price was not a positive number
        """
        if not _is_valid_price(price):
            logger.warning(f"Ignoring invalid live price for {ticker}: {price!r}")
            return False
        self._prices[ticker] = float(price)
        return True

    def update(self, prices: Mapping[str, float]) -> int:
        """Record several live prices. Returns how many were accepted."""
        return sum(1 for ticker, price in prices.items() if self.set_price(ticker, price))

    def get(self, ticker: str) -> Optional[float]:
        return self._prices.get(ticker)

    def clear(self) -> None:
        self._prices.clear()

    def snapshot(self) -> Mapping[str, float]:
        """Read-only copy for a single calculation pass."""
        return MappingProxyType(dict(self._prices))

    def __contains__(self, ticker: object) -> bool:
        return ticker in self._prices

    def __len__(self) -> int:
        return len(self._prices)


def effective_price(
    instrument: InstrumentRecord,
    prices: Mapping[str, float],
) -> tuple[float, PriceSource]:
    """
    Resolve the price used for one instrument in a scoring pass.

    Args:
        instrument: Catalog record (never modified)
        prices: Live price snapshot (never modified)

    Returns:
        (price, source) - the live price if known, else the catalog price
    """
    live = prices.get(instrument.ticker)
    if live is not None:
        return live, PriceSource.LIVE
    return instrument.price, PriceSource.STATIC
