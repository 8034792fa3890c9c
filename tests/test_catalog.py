"""Tests for catalog loading and validation."""

import json
import logging

import pytest

from verdant.catalog import (
    Catalog,
    carbon_grade_for,
    find_grade_mismatches,
    load_catalog,
    validate_instruments,
)
from verdant.config import CatalogConfig
from verdant.exceptions import CatalogError
from verdant.models import CarbonGrade, InstrumentRecord, Recommendation


def make_record(
    ticker: str = "NEE",
    carbon_score: int = 87,
    carbon_grade: str = "A",
    returns: dict | None = None,
) -> dict:
    """Raw JSON-shaped instrument record."""
    return {
        "ticker": ticker,
        "name": f"{ticker} Energy",
        "sector": "Utilities",
        "price": 76.14,
        "market_cap": "$156B",
        "price_to_earnings": 21.4,
        "carbon_score": carbon_score,
        "carbon_grade": carbon_grade,
        "esg_rating": "AA",
        "scope1_emissions": 1000,
        "scope2_emissions": 100,
        "scope3_emissions": 5000,
        "carbon_intensity": 12.5,
        "net_zero_target_year": 2045,
        "renewables_percent": 70,
        "annual_return_by_risk_tier": returns or {"low": 6, "medium": 9, "high": 13},
        "recommendation_label": "STRONG BUY",
    }


def write_catalog(tmp_path, records) -> str:
    path = tmp_path / "instruments.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


# =============================================================================
# Grade Bands
# =============================================================================


class TestCarbonGradeFor:
    """Tests for carbon_grade_for."""

    @pytest.mark.parametrize(
        "score,grade",
        [(100, "A"), (80, "A"), (79, "B"), (60, "B"), (59, "C"), (40, "C"),
         (39, "D"), (20, "D"), (19, "F"), (0, "F")],
    )
    def test_band_edges(self, score, grade):
        assert carbon_grade_for(score) == CarbonGrade(grade)

    def test_out_of_range_raises(self):
        with pytest.raises(ValueError):
            carbon_grade_for(101)


# =============================================================================
# Shipped Dataset
# =============================================================================


class TestShippedCatalog:
    """Tests for the packaged instruments.json."""

    def test_loads_thirteen_instruments_in_order(self):
        catalog = load_catalog()

        assert len(catalog) == 13
        assert catalog.tickers[:3] == ["INTU", "MSFT", "LRCX"]
        assert catalog.tickers[-1] == "F"

    def test_exclusions(self):
        catalog = load_catalog()

        avoid = [i.ticker for i in catalog if i.recommendation_label == Recommendation.AVOID]
        assert avoid == ["XOM", "CVX"]

    def test_known_grade_mismatches_are_recorded(self):
        catalog = load_catalog()

        assert len(catalog.grade_mismatches) == 3
        joined = " ".join(catalog.grade_mismatches)
        for ticker in ("TSLA", "XOM", "CVX"):
            assert ticker in joined

    def test_strict_mode_refuses_shipped_data(self):
        with pytest.raises(CatalogError):
            load_catalog(config=CatalogConfig(strict_grade_check=True))

    def test_lookup(self):
        catalog = load_catalog()

        assert "MSFT" in catalog
        assert catalog.get("MSFT").carbon_score == 91
        assert catalog.get("ZZZZ") is None


# =============================================================================
# Validation
# =============================================================================


class TestCatalogValidation:
    """Tests for catalog validation rules."""

    def test_valid_records(self):
        instruments = [InstrumentRecord.model_validate(make_record())]

        assert validate_instruments(instruments) == []
        assert find_grade_mismatches(instruments) == []

    def test_empty_catalog(self):
        assert validate_instruments([]) != []

    def test_duplicate_ticker(self):
        record = InstrumentRecord.model_validate(make_record())

        errors = validate_instruments([record, record])

        assert any("NEE" in e for e in errors)

    def test_missing_risk_tier(self):
        record = InstrumentRecord.model_validate(make_record(returns={"low": 1, "medium": 2}))

        errors = validate_instruments([record])

        assert any("high" in e for e in errors)

    def test_grade_mismatch_logged(self, caplog):
        record = InstrumentRecord.model_validate(make_record(carbon_score=82, carbon_grade="B"))

        with caplog.at_level(logging.WARNING, logger="verdant.catalog"):
            catalog = Catalog([record])

        assert len(catalog.grade_mismatches) == 1
        assert "grade mismatch" in caplog.text


# =============================================================================
# Loading Errors
# =============================================================================


class TestLoadCatalogErrors:
    """Tests for load_catalog failure modes."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_not_a_list(self, tmp_path):
        path = write_catalog(tmp_path, {"ticker": "NEE"})

        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_invalid_record(self, tmp_path):
        path = write_catalog(tmp_path, [make_record(carbon_score=150)])

        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_custom_file(self, tmp_path):
        path = write_catalog(tmp_path, [make_record("NEE"), make_record("BEP")])

        catalog = load_catalog(path)

        assert catalog.tickers == ["NEE", "BEP"]
