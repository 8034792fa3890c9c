"""
Quote source interface for Verdant.

Defines the Protocol that live-price providers must implement. The
session and API depend only on this Protocol, never on a concrete client.
"""

from typing import Optional, Protocol, runtime_checkable

from verdant.models import BasicFinancials, Quote


@runtime_checkable
class QuoteSource(Protocol):
    """
    Protocol for live-price providers.

    Implementations:
    - FinnhubClient: Real implementation over the Finnhub REST API
    - StaticQuoteSource: Deterministic in-memory implementation for tests
    """

    def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch the latest quote for a symbol.

        Returns:
            Quote, or None if the provider has no usable price

        Raises:
            UpstreamUnavailable: If the provider cannot be reached
        """
        ...

    def get_basic_financials(self, symbol: str) -> BasicFinancials:
        """
        Fetch basic financial metrics for a symbol; missing metrics are None.

        Raises:
            UpstreamUnavailable: If the provider cannot be reached
        """
        ...

    def close(self) -> None:
        """Release any underlying connection resources."""
        ...
