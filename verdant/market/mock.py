"""
Static quote source for testing.

Serves quotes from a fixed ticker -> price mapping. Tickers listed in
`failing` raise UpstreamUnavailable so partial-failure paths can be tested.
"""

from typing import Iterable, Mapping, Optional

from verdant.exceptions import UpstreamUnavailable
from verdant.models import BasicFinancials, Quote


class StaticQuoteSource:
    """Deterministic QuoteSource backed by dicts."""

    def __init__(
        self,
        prices: Optional[Mapping[str, float]] = None,
        failing: Iterable[str] = (),
        financials: Optional[Mapping[str, BasicFinancials]] = None,
    ):
        self.prices = dict(prices or {})
        self.failing = set(failing)
        self.financials = dict(financials or {})
        self.requested: list[str] = []

    def _check(self, symbol: str) -> None:
        self.requested.append(symbol)
        if symbol in self.failing:
            raise UpstreamUnavailable(f"Static quote source configured to fail for {symbol}")

    def get_quote(self, symbol: str) -> Optional[Quote]:
        self._check(symbol)
        price = self.prices.get(symbol)
        if price is None or price <= 0:
            return None
        return Quote(symbol=symbol, current=price)

    def get_basic_financials(self, symbol: str) -> BasicFinancials:
        self._check(symbol)
        return self.financials.get(symbol, BasicFinancials(symbol=symbol))

    def close(self) -> None:
        pass
