"""Tests for CalculationSession.

Tests cover:
- Publishing stamps generation and timestamp
- Failed calculations leave the previous result in place
- Live prices trigger a silent recompute with the same parameters
- Stale narratives are discarded
"""

import threading

import pytest

from verdant.catalog import load_catalog
from verdant.exceptions import InvalidParameter
from verdant.models import NarrativeResult, PriceSource, UserParameters
from verdant.session import CalculationSession


@pytest.fixture
def session() -> CalculationSession:
    return CalculationSession(load_catalog())


def make_params(risk_tier: str = "medium", environmental_weight: int = 50) -> UserParameters:
    return UserParameters(
        investment_amount=10_000,
        horizon_years=10,
        risk_tier=risk_tier,
        environmental_weight=environmental_weight,
    )


def make_narrative(text: str = "text") -> NarrativeResult:
    return NarrativeResult(kind="unstructured", raw_text=text)


# =============================================================================
# Publishing
# =============================================================================


class TestPublishing:
    """Tests for calculate / latest / generation."""

    def test_empty_session(self, session):
        assert session.latest is None
        assert session.generation == 0
        assert session.recalculate() is None

    def test_calculate_publishes(self, session):
        result = session.calculate(make_params())

        assert result.generation == 1
        assert result.calculated_at is not None
        assert session.latest == result
        assert session.is_current(1)

    def test_generation_increments(self, session):
        session.calculate(make_params())
        second = session.calculate(make_params(risk_tier="high"))

        assert second.generation == 2
        assert not session.is_current(1)
        assert session.latest.parameters.risk_tier.value == "high"

    def test_failed_calculation_keeps_previous_result(self, session, monkeypatch):
        first = session.calculate(make_params())

        def boom(*args, **kwargs):
            raise InvalidParameter(["bad input"])

        monkeypatch.setattr("verdant.session.calculate", boom)

        with pytest.raises(InvalidParameter):
            session.calculate(make_params(risk_tier="low"))

        assert session.latest == first
        assert session.generation == 1

    def test_concurrent_calculations_publish_whole_results(self, session):
        def run(tier: str) -> None:
            session.calculate(make_params(risk_tier=tier))

        threads = [threading.Thread(target=run, args=(t,)) for t in ("low", "medium", "high")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        latest = session.latest
        assert session.generation == 3
        assert latest.generation == 3
        assert len(latest.ranked) == 13


# =============================================================================
# Live Prices
# =============================================================================


class TestLivePrices:
    """Tests for apply_live_prices."""

    def test_prices_before_any_calculation(self, session):
        applied, result = session.apply_live_prices({"MSFT": 420.0})

        assert applied == 1
        assert result is None
        assert session.overlay.get("MSFT") == 420.0

    def test_silent_recompute_keeps_parameters(self, session):
        first = session.calculate(make_params(environmental_weight=70))

        applied, result = session.apply_live_prices({"LRCX": 500.0})

        assert applied == 1
        assert result.generation == first.generation + 1
        assert result.parameters == first.parameters
        assert result.used_live_prices is True
        lrcx = next(s for s in result.ranked if s.ticker == "LRCX")
        assert lrcx.price_source == PriceSource.LIVE

    def test_unknown_and_invalid_prices_ignored(self, session):
        session.calculate(make_params())

        applied, result = session.apply_live_prices({"ZZZZ": 10.0, "MSFT": -1.0})

        assert applied == 0
        assert result is None
        assert session.generation == 1

    def test_catalog_price_untouched(self, session):
        session.apply_live_prices({"MSFT": 999.0})

        assert session.catalog.get("MSFT").price == 415.26


# =============================================================================
# Narrative
# =============================================================================


class TestNarrative:
    """Tests for publish_narrative / narrative."""

    def test_current_narrative_is_kept(self, session):
        result = session.calculate(make_params())

        assert session.publish_narrative(result.generation, make_narrative()) is True
        assert session.narrative.raw_text == "text"

    def test_stale_narrative_discarded(self, session):
        first = session.calculate(make_params())
        session.calculate(make_params(risk_tier="high"))

        assert session.publish_narrative(first.generation, make_narrative()) is False
        assert session.narrative is None

    def test_new_result_clears_narrative(self, session):
        result = session.calculate(make_params())
        session.publish_narrative(result.generation, make_narrative())

        session.calculate(make_params(risk_tier="low"))

        assert session.narrative is None

    def test_reset(self, session):
        session.calculate(make_params())
        session.apply_live_prices({"MSFT": 420.0})

        session.reset()

        assert session.latest is None
        assert session.generation == 0
        assert len(session.overlay) == 0
