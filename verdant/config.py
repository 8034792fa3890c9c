"""
Configuration for Verdant.

All configurable parameters live here - no magic numbers in engine code.
Config objects are passed explicitly to engine functions.
"""

from pydantic import BaseModel, Field, model_validator

from verdant.models import CarbonGrade


# =============================================================================
# Return Normalization Bounds
# =============================================================================

# Realistic min/max annual return (%) across the whole catalog and all risk
# tiers. Fixed calibration constants, not derived from the live dataset, so
# scores stay comparable across runs; values outside saturate at 0 or 100.
RETURN_MIN = 3.0
RETURN_MAX = 40.0


# =============================================================================
# Carbon Grade Bands
# =============================================================================

# (grade, lowest score in band), highest band first
CARBON_GRADE_BANDS: list[tuple[CarbonGrade, int]] = [
    (CarbonGrade.A, 80),
    (CarbonGrade.B, 60),
    (CarbonGrade.C, 40),
    (CarbonGrade.D, 20),
    (CarbonGrade.F, 0),
]


# =============================================================================
# Engine Configuration
# =============================================================================


class EngineConfig(BaseModel):
    """
    All configurable parameters for the scoring/ranking/allocation engine.

    Enables unit testing with controlled parameters and alternative
    calibrations without touching engine code.
    """

    return_min: float = Field(
        default=RETURN_MIN, description="Annual return % mapped to a return score of 0"
    )
    return_max: float = Field(
        default=RETURN_MAX, description="Annual return % mapped to a return score of 100"
    )

    # Portfolio allocation
    allocation_top_n: int = Field(
        default=5, ge=1, description="Investable instruments included in the allocation"
    )

    # Narrative snapshot
    summary_top_k: int = Field(
        default=5, ge=1, description="Top investable instruments passed to the summarizer"
    )

    # Horizons offered to the user (years)
    offered_horizons: list[int] = Field(
        default_factory=lambda: [1, 3, 5, 10, 15, 20, 30],
        min_length=1,
    )

    # Ranked-row badges
    best_green_threshold: int = Field(
        default=88, ge=0, le=100, description="Carbon score earning the BEST GREEN badge"
    )

    # Highlights
    highlight_carbon_top_n: int = Field(
        default=3, ge=1, description="Top instruments averaged for the carbon highlight"
    )

    @model_validator(mode="after")
    def _check_return_bounds(self) -> "EngineConfig":
        if self.return_max <= self.return_min:
            raise ValueError("return_max must be greater than return_min")
        if any(h <= 0 for h in self.offered_horizons):
            raise ValueError("offered_horizons must be positive")
        return self


DEFAULT_ENGINE_CONFIG = EngineConfig()


# =============================================================================
# Catalog Configuration
# =============================================================================


class CatalogConfig(BaseModel):
    """
    Controls how the instrument catalog is validated at load time.

    The stored carbon_grade is redundant with carbon_score. By default a
    mismatch is logged and recorded; strict mode refuses to load.
    """

    strict_grade_check: bool = Field(
        default=False, description="Raise CatalogError on grade/score mismatch"
    )


DEFAULT_CATALOG_CONFIG = CatalogConfig()


# =============================================================================
# LLM Configuration
# =============================================================================


class LLMConfig(BaseModel):
    """
    Configuration for the narrative LLM client.

    Controls model selection, temperature, and token limits.
    """

    model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used for narrative recommendations",
    )
    temperature: float = Field(
        default=0.4,
        ge=0,
        le=2,
        description="Sampling temperature",
    )
    max_tokens: int = Field(
        default=1000,
        gt=0,
        description="Maximum tokens in response",
    )


DEFAULT_LLM_CONFIG = LLMConfig()


# =============================================================================
# Market Data Configuration
# =============================================================================


class MarketDataConfig(BaseModel):
    """Configuration for the market-data (Finnhub) client."""

    base_url: str = Field(default="https://finnhub.io/api/v1")
    timeout_seconds: float = Field(default=10.0, gt=0)


DEFAULT_MARKET_DATA_CONFIG = MarketDataConfig()
