"""
Pydantic models for Verdant.

This module contains all data models: catalog records, user parameters,
engine outputs, narrative results and API payloads.
Models handle validation and serialization only - no business logic.
"""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


# =============================================================================
# Enums
# =============================================================================


class RiskTier(str, Enum):
    """Risk tolerance; selects which annual-return estimate is used."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CarbonGrade(str, Enum):
    """Letter band derived from the carbon score."""

    A = "A"  # 80-100
    B = "B"  # 60-79
    C = "C"  # 40-59
    D = "D"  # 20-39
    F = "F"  # 0-19


class Recommendation(str, Enum):
    """Categorical recommendation carried by every catalog record."""

    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    AVOID = "AVOID"


class Volatility(str, Enum):
    """Informational volatility bucket from the source dataset."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PriceSource(str, Enum):
    """Where the effective price of an instrument came from."""

    STATIC = "static"
    LIVE = "live"


class SectionKey(str, Enum):
    """Named sections expected in a narrative recommendation."""

    PROFILE = "YOUR INVESTMENT PROFILE"
    TOP_RECOMMENDATION = "TOP RECOMMENDATION"
    ALLOCATION = "SUGGESTED ALLOCATION"
    ENVIRONMENTAL_IMPACT = "ENVIRONMENTAL IMPACT"
    RISKS = "KEY RISKS TO WATCH"
    FINAL_VERDICT = "FINAL VERDICT"


# =============================================================================
# Catalog Models
# =============================================================================


class InstrumentRecord(BaseModel):
    """
    A single equity in the static catalog.

    Immutable once loaded. carbon_grade is stored redundantly and is used
    for display only; all ranking math reads carbon_score.
    """

    model_config = ConfigDict(frozen=True)

    # Identity
    ticker: str = Field(..., min_length=1, description="Unique ticker symbol")
    name: str = Field(..., description="Company name")
    sector: str = Field(..., description="Sector label")
    description: str = Field("", description="Free-text company description")

    # Market fundamentals
    price: float = Field(..., gt=0, description="Static default price ($)")
    market_cap: str = Field(..., description="Display string, e.g. '$3.09T'")
    price_to_earnings: float = Field(..., description="Price / earnings ratio")

    # ESG attributes
    carbon_score: int = Field(..., ge=0, le=100, description="Carbon score [0, 100]")
    carbon_grade: CarbonGrade = Field(..., description="Stored letter grade")
    esg_rating: str = Field(..., description="External agency rating (e.g. 'AAA')")
    scope1_emissions: float = Field(..., ge=0, description="Direct emissions, tCO2e/yr")
    scope2_emissions: float = Field(..., ge=0, description="Purchased energy, tCO2e/yr")
    scope3_emissions: float = Field(..., ge=0, description="Value chain, tCO2e/yr")
    carbon_intensity: float = Field(..., ge=0, description="tCO2e per $1M revenue")
    net_zero_target_year: Optional[int] = Field(None, description="None = no target")
    renewables_percent: float = Field(..., ge=0, le=100)
    reduction_headline: str = Field("", description="Short reduction claim")
    commitment_detail: str = Field("", description="Climate commitment detail")

    # Qualitative
    pros: tuple[str, ...] = Field(default_factory=tuple)
    cons: tuple[str, ...] = Field(default_factory=tuple)

    # Financial projection inputs (percent per year)
    annual_return_by_risk_tier: dict[RiskTier, float] = Field(
        ..., description="Estimated annual return % keyed by risk tier"
    )
    volatility: Optional[Volatility] = Field(None, description="Informational only")

    # Recommendation
    recommendation_label: Recommendation
    recommendation_class: str = Field("", description="Presentation tag")


# =============================================================================
# User Parameters
# =============================================================================

# Largest accepted investment amount ($); keeps projections and allocation
# amounts finite and exactly roundable.
MAX_INVESTMENT_AMOUNT = 1e12


class UserParameters(BaseModel):
    """
    Snapshot of the user's inputs for one calculation.

    The environmental/financial split is stored as a single field;
    financial_weight is derived, so the pair always sums to 100.
    Input may supply either weight (or both, when consistent).
    """

    model_config = ConfigDict(frozen=True)

    investment_amount: float = Field(
        ..., gt=0, le=MAX_INVESTMENT_AMOUNT, description="Amount to invest ($)"
    )
    horizon_years: int = Field(..., gt=0, description="Investment horizon in years")
    risk_tier: RiskTier
    environmental_weight: int = Field(50, ge=0, le=100, description="Env weight %")

    @model_validator(mode="before")
    @classmethod
    def _derive_environmental_weight(cls, data):
        if not isinstance(data, dict) or "financial_weight" not in data:
            return data
        data = dict(data)
        financial = data.pop("financial_weight")
        if financial is None:
            return data
        if not isinstance(financial, int):
            raise ValueError("financial_weight must be an integer")
        if "environmental_weight" in data and data["environmental_weight"] is not None:
            if data["environmental_weight"] + financial != 100:
                raise ValueError("environmental_weight and financial_weight must sum to 100")
        else:
            data["environmental_weight"] = 100 - financial
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def financial_weight(self) -> int:
        return 100 - self.environmental_weight


# =============================================================================
# Engine Output Models
# =============================================================================


class ProjectedReturn(BaseModel):
    """Compound-growth projection for one instrument."""

    future_value: float
    gain_absolute: float
    gain_percent: float
    annual_rate_percent: float


class ScoredInstrument(BaseModel):
    """
    An instrument scored for one parameter snapshot.

    Ephemeral: recomputed on every calculation, never persisted.
    """

    model_config = ConfigDict(frozen=True)

    instrument: InstrumentRecord
    effective_price: float = Field(..., gt=0)
    price_source: PriceSource = PriceSource.STATIC
    return_score: int = Field(..., ge=0, le=100, description="Normalized return score")
    composite_score: int = Field(..., ge=0, le=100, description="Weighted blend, drives rank")
    future_value: float
    gain_absolute: float
    gain_percent: float
    annual_rate_percent: float

    @property
    def ticker(self) -> str:
        return self.instrument.ticker

    @property
    def is_excluded(self) -> bool:
        return self.instrument.recommendation_label == Recommendation.AVOID


class ShareEstimate(BaseModel):
    """Whole shares affordable if the entire amount went into one instrument."""

    shares: int = Field(..., ge=0)
    estimated_cost: float = Field(..., ge=0)


class AllocationSlice(BaseModel):
    """One instrument's share of the top-N portfolio."""

    ticker: str
    allocation_percent: int = Field(..., ge=0, le=100)
    allocation_amount: int = Field(..., ge=0)


class RankedRow(BaseModel):
    """Display row for an investable instrument."""

    rank: int = Field(..., ge=1)
    rank_label: str
    badges: list[str] = Field(default_factory=list)
    scored: ScoredInstrument
    shares: ShareEstimate


class ResultHighlights(BaseModel):
    """Headline numbers for a calculation."""

    top_pick_ticker: str
    top_pick_future_value: float
    top_pick_gain: float
    leaders_average_carbon_score: int
    best_return_ticker: str
    best_return_gain_percent: float


class CalculationResult(BaseModel):
    """
    The full scored-and-ranked view for one parameter snapshot.

    Published as a whole; never updated in place.
    """

    model_config = ConfigDict(frozen=True)

    parameters: UserParameters
    ranked: list[ScoredInstrument] = Field(default_factory=list)
    investable: list[ScoredInstrument] = Field(default_factory=list)
    excluded: list[ScoredInstrument] = Field(default_factory=list)
    rows: list[RankedRow] = Field(default_factory=list)
    allocation: list[AllocationSlice] = Field(default_factory=list)
    highlights: Optional[ResultHighlights] = None
    used_live_prices: bool = False
    warnings: list[str] = Field(default_factory=list)
    generation: int = Field(0, ge=0, description="0 = not yet published")
    calculated_at: Optional[str] = Field(None, description="ISO format timestamp")


# =============================================================================
# Narrative Models
# =============================================================================


class SummaryPick(BaseModel):
    """A top-ranked investable instrument as seen by the summarizer."""

    ticker: str
    name: str
    composite_score: int
    carbon_score: int
    carbon_grade: CarbonGrade
    esg_rating: str
    gain_percent: float
    annual_rate_percent: float
    net_zero_target_year: Optional[int] = None


class SummaryExclusion(BaseModel):
    """An excluded instrument as seen by the summarizer."""

    ticker: str
    carbon_grade: CarbonGrade
    carbon_intensity: float


class SummaryContext(BaseModel):
    """
    Structured snapshot handed to the narrative summarizer.

    IMPORTANT: Build with advisor.build_summary_context() so the fields stay
    aligned with CalculationResult.
    """

    generation: int
    parameters: UserParameters
    top_picks: list[SummaryPick] = Field(default_factory=list)
    excluded: list[SummaryExclusion] = Field(default_factory=list)
    allocation: list[AllocationSlice] = Field(default_factory=list)


class NarrativeSection(BaseModel):
    """One recognised section of a narrative."""

    key: SectionKey
    body: str


class NarrativeResult(BaseModel):
    """
    Best-effort parse of free-text model output.

    kind == "structured": sections holds the recognised blocks.
    kind == "unstructured": no headers matched; raw_text is the whole answer.
    """

    kind: Literal["structured", "unstructured"]
    sections: list[NarrativeSection] = Field(default_factory=list)
    disclaimer: Optional[str] = None
    raw_text: str = ""


# =============================================================================
# Market Data Models
# =============================================================================


class Quote(BaseModel):
    """Real-time quote for one symbol."""

    symbol: str
    current: float = Field(..., gt=0)
    change: Optional[float] = None
    percent_change: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None
    previous_close: Optional[float] = None
    timestamp: Optional[int] = None


class BasicFinancials(BaseModel):
    """Selected basic financial metrics for one symbol (None = not reported)."""

    symbol: str
    pe_ttm: Optional[float] = None
    beta: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    eps_ttm: Optional[float] = None
    average_volume_10d: Optional[float] = None


# =============================================================================
# API Models
# =============================================================================


class CalculationRequest(BaseModel):
    """
    Request body for POST /api/calculate.

    Fields are loosely typed on purpose: semantic validation happens in
    validation.build_parameters so bad input surfaces as INVALID_PARAMETER.
    """

    investment_amount: Union[float, str]
    horizon_years: int
    risk_tier: str
    environmental_weight: Optional[int] = None
    financial_weight: Optional[int] = None


class LivePriceUpdate(BaseModel):
    """Request body for POST /api/prices."""

    prices: dict[str, float] = Field(..., description="ticker -> latest price")


class PriceUpdateResponse(BaseModel):
    """Response body for price pushes and refreshes."""

    applied: int = Field(..., ge=0, description="Prices accepted into the overlay")
    recalculated: bool = Field(..., description="Whether a silent recompute happened")
    generation: int = Field(..., ge=0, description="Latest published generation")


class RecommendationResponse(BaseModel):
    """Response body for POST /api/recommend."""

    generation: int
    narrative: NarrativeResult


class ErrorResponse(BaseModel):
    """Error response body for API errors."""

    error: str = Field(..., description="Short error description")
    detail: Optional[str] = Field(None, description="Detailed error message")
    code: str = Field(..., description="Error code (e.g., 'INVALID_PARAMETER')")
