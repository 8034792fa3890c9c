"""
Input validation for Verdant.

All validate_* functions are pure and return lists of error messages.
build_parameters is the API-boundary convenience that raises InvalidParameter.
"""

import math
from typing import Any, Optional

from verdant.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from verdant.exceptions import InvalidParameter
from verdant.models import MAX_INVESTMENT_AMOUNT, RiskTier, UserParameters


def _coerce_amount(value: Any) -> Optional[float]:
    """Parse an investment amount; None if it is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.replace(",", "").strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def validate_parameters(
    investment_amount: Any,
    horizon_years: Any,
    risk_tier: Any,
    environmental_weight: Optional[int] = None,
    financial_weight: Optional[int] = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[str]:
    """
    Validate raw user inputs. Returns list of errors (empty = valid).

    Checks:
    - Amount is numeric, > 0 and within MAX_INVESTMENT_AMOUNT
    - Horizon is one of the offered horizons
    - Risk tier is low / medium / high
    - Weights are in [0, 100] and, when both are given, sum to 100
    """
    errors: list[str] = []

    amount = _coerce_amount(investment_amount)
    if amount is None:
        errors.append(f"investment_amount must be a number (got {investment_amount!r})")
    elif amount <= 0:
        errors.append(f"investment_amount must be > 0 (got {amount})")
    elif amount > MAX_INVESTMENT_AMOUNT:
        errors.append(
            f"investment_amount must be <= {MAX_INVESTMENT_AMOUNT:,.0f} (got {amount})"
        )

    if isinstance(horizon_years, bool) or not isinstance(horizon_years, int):
        errors.append(f"horizon_years must be an integer (got {horizon_years!r})")
    elif horizon_years not in config.offered_horizons:
        errors.append(
            f"horizon_years must be one of {config.offered_horizons} (got {horizon_years})"
        )

    valid_tiers = [t.value for t in RiskTier]
    if risk_tier not in valid_tiers:
        errors.append(f"risk_tier must be one of {valid_tiers} (got {risk_tier!r})")

    for label, weight in (
        ("environmental_weight", environmental_weight),
        ("financial_weight", financial_weight),
    ):
        if weight is None:
            continue
        if isinstance(weight, bool) or not isinstance(weight, int):
            errors.append(f"{label} must be an integer (got {weight!r})")
        elif not (0 <= weight <= 100):
            errors.append(f"{label} must be in [0, 100] (got {weight})")

    if isinstance(environmental_weight, int) and isinstance(financial_weight, int):
        if environmental_weight + financial_weight != 100:
            errors.append(
                "environmental_weight and financial_weight must sum to 100 "
                f"(got {environmental_weight} + {financial_weight})"
            )

    return errors


def build_parameters(
    investment_amount: Any,
    horizon_years: Any,
    risk_tier: Any,
    environmental_weight: Optional[int] = None,
    financial_weight: Optional[int] = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> UserParameters:
    """
    Validate raw inputs and build UserParameters.

    Weights default to an even 50/50 split when neither is supplied.

    Raises:
        InvalidParameter: If any input is invalid
    """
    errors = validate_parameters(
        investment_amount,
        horizon_years,
        risk_tier,
        environmental_weight=environmental_weight,
        financial_weight=financial_weight,
        config=config,
    )
    if errors:
        raise InvalidParameter(errors)

    if environmental_weight is None:
        environmental_weight = 100 - financial_weight if financial_weight is not None else 50

    return UserParameters(
        investment_amount=_coerce_amount(investment_amount),
        horizon_years=horizon_years,
        risk_tier=RiskTier(risk_tier),
        environmental_weight=environmental_weight,
    )
