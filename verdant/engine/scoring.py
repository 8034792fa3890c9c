"""
Scoring engine for Verdant.

All functions are:
- Pure (no side effects)
- Deterministic (same inputs → same outputs)
- Explicit about their inputs: weights and risk tier come from
  UserParameters, never from ambient state

Key components:
- round_half_up: the single rounding rule for every ranked/displayed integer
- compute_return_score: annual return → 0-100 against fixed bounds
- compute_composite_score: weighted blend of carbon and return scores
- project_return: compound-growth projection
- score_instrument: all of the above for one instrument
"""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

from verdant.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from verdant.exceptions import InvalidParameter
from verdant.models import (
    InstrumentRecord,
    PriceSource,
    ProjectedReturn,
    RiskTier,
    ScoredInstrument,
    UserParameters,
)


# =============================================================================
# Rounding
# =============================================================================


def _to_decimal(value: Union[int, float, Decimal]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps the shortest repr, so 60.5 stays 60.5 rather than 60.4999...
    return Decimal(str(value))


def round_half_up(value: Union[int, float, Decimal]) -> int:
    """Round to the nearest integer, halves away from zero (60.5 → 61)."""
    d = _to_decimal(value)
    if not d.is_finite():
        raise ValueError(f"Cannot round non-finite value {value!r}")
    with localcontext() as ctx:
        # quantize needs every integer digit to fit in the context precision
        ctx.prec = max(ctx.prec, d.adjusted() + 2)
        return int(d.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# Risk Tier Resolution
# =============================================================================


def resolve_risk_tier(risk_tier: Union[RiskTier, str]) -> RiskTier:
    """
    Coerce a risk tier value.

    Raises:
        InvalidParameter: If the value is not low / medium / high
    """
    try:
        return RiskTier(risk_tier)
    except ValueError:
        valid = [t.value for t in RiskTier]
        raise InvalidParameter([f"risk_tier must be one of {valid} (got {risk_tier!r})"])


def annual_return_for(instrument: InstrumentRecord, risk_tier: Union[RiskTier, str]) -> float:
    """
    Look up the instrument's annual return (%) for a risk tier.

    Raises:
        InvalidParameter: If the tier is unknown or missing on the instrument
    """
    tier = resolve_risk_tier(risk_tier)
    if tier not in instrument.annual_return_by_risk_tier:
        raise InvalidParameter(
            [f"Instrument {instrument.ticker}: no annual return for risk tier '{tier.value}'"]
        )
    return instrument.annual_return_by_risk_tier[tier]


# =============================================================================
# Return Score
# =============================================================================


def normalize_return(
    annual_return: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> Decimal:
    """
    Map an annual return (%) onto [0, 100] using the fixed calibration bounds.

    Values below return_min saturate at 0, above return_max at 100.
    """
    low = _to_decimal(config.return_min)
    high = _to_decimal(config.return_max)
    raw = (_to_decimal(annual_return) - low) / (high - low) * 100
    return min(Decimal(100), max(Decimal(0), raw))


def compute_return_score(
    annual_return: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Normalized return score, rounded half-up. 14% → 30 with default bounds."""
    return round_half_up(normalize_return(annual_return, config))


# =============================================================================
# Composite Score
# =============================================================================


def compute_composite_score(
    carbon_score: int,
    return_score: int,
    environmental_weight: int,
) -> int:
    """
    Weighted blend of the carbon and return scores.

    composite = round_half_up(carbon × env% + return × (100 - env)%)

    Both inputs are in [0, 100], so the result is too. The return score is
    blended after rounding, not from the unrounded normalized value; this
    keeps the composite reproducible from the displayed scores (MSFT at
    medium risk, 50/50: 61 rather than 60).

    Args:
        carbon_score: Instrument carbon score [0, 100]
        return_score: Normalized return score [0, 100]
        environmental_weight: Environmental weight % [0, 100]; the financial
            weight is its complement

    Returns:
        Integer composite score in [0, 100]
    """
    if not (0 <= environmental_weight <= 100):
        raise InvalidParameter(
            [f"environmental_weight must be in [0, 100] (got {environmental_weight})"]
        )
    financial_weight = 100 - environmental_weight
    blended = (
        Decimal(carbon_score) * environmental_weight
        + Decimal(return_score) * financial_weight
    ) / 100
    return round_half_up(blended)


# =============================================================================
# Return Projection
# =============================================================================


def project_return(
    amount: float,
    years: int,
    annual_return_percent: float,
) -> ProjectedReturn:
    """
    Compound-growth projection.

    future_value = amount × (1 + r)^years, r = annual_return_percent / 100

    years = 0 yields future_value == amount and zero gain.

    Raises:
        InvalidParameter: If amount <= 0, years < 0, or the projection
            is not a finite number
    """
    errors: list[str] = []
    if amount <= 0:
        errors.append(f"amount must be > 0 (got {amount})")
    if years < 0:
        errors.append(f"years must be >= 0 (got {years})")
    if errors:
        raise InvalidParameter(errors)

    rate = annual_return_percent / 100
    try:
        future_value = amount * (1 + rate) ** years
    except OverflowError:
        future_value = math.inf
    if not math.isfinite(future_value):
        raise InvalidParameter(
            [f"projection overflows for amount {amount} over {years} years at {annual_return_percent}%"]
        )
    gain = future_value - amount

    return ProjectedReturn(
        future_value=future_value,
        gain_absolute=gain,
        gain_percent=gain / amount * 100,
        annual_rate_percent=annual_return_percent,
    )


# =============================================================================
# Instrument Scoring
# =============================================================================


def score_instrument(
    instrument: InstrumentRecord,
    effective_price: float,
    params: UserParameters,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    price_source: PriceSource = PriceSource.STATIC,
) -> ScoredInstrument:
    """
    Score one instrument for a parameter snapshot.

    Ranking math reads carbon_score only; the stored carbon_grade is
    carried along for display.

    Args:
        instrument: Catalog record
        effective_price: Live price if known, else the catalog price
        params: User parameters (amount, horizon, risk tier, weighting)
        config: Engine configuration with return normalization bounds
        price_source: Where effective_price came from

    Returns:
        ScoredInstrument with scores and projection

    Raises:
        InvalidParameter: Unknown risk tier, missing tier data, or bad price
    """
    if effective_price <= 0:
        raise InvalidParameter(
            [f"Instrument {instrument.ticker}: effective price must be > 0 (got {effective_price})"]
        )

    annual_return = annual_return_for(instrument, params.risk_tier)
    return_score = compute_return_score(annual_return, config)
    composite = compute_composite_score(
        instrument.carbon_score,
        return_score,
        params.environmental_weight,
    )
    projection = project_return(params.investment_amount, params.horizon_years, annual_return)

    return ScoredInstrument(
        instrument=instrument,
        effective_price=effective_price,
        price_source=price_source,
        return_score=return_score,
        composite_score=composite,
        future_value=projection.future_value,
        gain_absolute=projection.gain_absolute,
        gain_percent=projection.gain_percent,
        annual_rate_percent=projection.annual_rate_percent,
    )
