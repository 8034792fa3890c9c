"""
Allocation engine for Verdant.

Splits an amount across a top-N subset in proportion to composite score,
and sizes single-instrument share purchases.

Rounding is applied per instrument and is not reconciled: percentages need
not sum to exactly 100, and amounts are derived from the rounded percent.
Summaries echo these numbers verbatim, so they are left as computed.
"""

import math
from decimal import Decimal
from typing import Sequence

from verdant.engine.scoring import round_half_up
from verdant.exceptions import DivisionUndefined, InvalidParameter
from verdant.models import AllocationSlice, ScoredInstrument, ShareEstimate


def allocate(
    selected: Sequence[ScoredInstrument],
    total_amount: float,
) -> list[AllocationSlice]:
    """
    Proportional allocation by composite score.

    allocation_percent = round_half_up(composite / Σ composite × 100)
    allocation_amount  = round_half_up(total_amount × allocation_percent / 100)

    Args:
        selected: The subset to allocate over (any N; top 5 by default upstream)
        total_amount: Amount to split ($)

    Returns:
        One AllocationSlice per selected instrument, in input order

    Raises:
        DivisionUndefined: If the subset is empty or its composites sum to 0
        InvalidParameter: If total_amount is negative
    """
    if total_amount < 0:
        raise InvalidParameter([f"total_amount must be >= 0 (got {total_amount})"])
    if not selected:
        raise DivisionUndefined("Cannot allocate over an empty selection")

    total_composite = sum(s.composite_score for s in selected)
    if total_composite == 0:
        raise DivisionUndefined("Cannot allocate: composite scores sum to zero")

    amount = Decimal(str(total_amount))
    slices: list[AllocationSlice] = []
    for scored in selected:
        percent = round_half_up(Decimal(scored.composite_score) * 100 / total_composite)
        slices.append(AllocationSlice(
            ticker=scored.ticker,
            allocation_percent=percent,
            allocation_amount=round_half_up(amount * percent / 100),
        ))
    return slices


def estimate_shares(amount: float, price: float) -> ShareEstimate:
    """
    Whole shares affordable with the entire amount at the given price.

    Raises:
        InvalidParameter: If price <= 0 or amount < 0
    """
    errors: list[str] = []
    if price <= 0:
        errors.append(f"price must be > 0 (got {price})")
    if amount < 0:
        errors.append(f"amount must be >= 0 (got {amount})")
    if errors:
        raise InvalidParameter(errors)

    shares = math.floor(amount / price)
    return ShareEstimate(shares=shares, estimated_cost=shares * price)
