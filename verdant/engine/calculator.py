"""
Calculation pipeline for Verdant.

Catalog + price snapshot + user parameters → scored, ranked, partitioned
and allocated CalculationResult. Synchronous, no I/O; this is the SINGLE
entry point for a calculation - API/session/LLM layers must not recompute
scores themselves.
"""

from typing import Iterable, Mapping, Optional

from verdant.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from verdant.engine.allocation import allocate
from verdant.engine.ranking import build_ranked_rows, rank_and_partition
from verdant.engine.scoring import round_half_up, score_instrument
from verdant.models import (
    CalculationResult,
    InstrumentRecord,
    PriceSource,
    ResultHighlights,
    ScoredInstrument,
    UserParameters,
)
from verdant.pricing import effective_price


def compute_highlights(
    investable: list[ScoredInstrument],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> Optional[ResultHighlights]:
    """
    Headline numbers: top pick projection, average carbon of the leaders,
    and the best projected return among investable instruments.

    Returns None when nothing is investable.
    """
    if not investable:
        return None

    top = investable[0]
    leaders = investable[: config.highlight_carbon_top_n]
    average_carbon = round_half_up(
        sum(s.instrument.carbon_score for s in leaders) / len(leaders)
    )

    # First instrument wins ties, matching rank order
    best = investable[0]
    for scored in investable[1:]:
        if scored.gain_percent > best.gain_percent:
            best = scored

    return ResultHighlights(
        top_pick_ticker=top.ticker,
        top_pick_future_value=top.future_value,
        top_pick_gain=top.gain_absolute,
        leaders_average_carbon_score=average_carbon,
        best_return_ticker=best.ticker,
        best_return_gain_percent=best.gain_percent,
    )


def calculate(
    instruments: Iterable[InstrumentRecord],
    params: UserParameters,
    prices: Optional[Mapping[str, float]] = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> CalculationResult:
    """
    Run one full calculation.

    Args:
        instruments: Catalog records in catalog order
        params: User parameter snapshot
        prices: Live price snapshot (ticker → price); missing = catalog price
        config: Engine configuration

    Returns:
        Unpublished CalculationResult (generation 0); the session stamps it

    Raises:
        InvalidParameter: If an instrument lacks data for the risk tier
        DivisionUndefined: If the allocation subset sums to zero composite
    """
    prices = prices or {}
    warnings: list[str] = []

    # Step 1: Score every instrument against its effective price
    scored: list[ScoredInstrument] = []
    used_live_prices = False
    for instrument in instruments:
        price, source = effective_price(instrument, prices)
        if source == PriceSource.LIVE:
            used_live_prices = True
        scored.append(score_instrument(instrument, price, params, config, price_source=source))

    # Step 2: Rank and partition
    partition = rank_and_partition(scored)

    # Step 3: Allocate across the top N investable
    allocation = []
    if partition.investable:
        top_n = partition.investable[: config.allocation_top_n]
        allocation = allocate(top_n, params.investment_amount)
    else:
        warnings.append("No investable instruments; allocation skipped")

    # Step 4: Display rows and highlights
    rows = build_ranked_rows(partition.investable, params.investment_amount, config)
    highlights = compute_highlights(partition.investable, config)

    return CalculationResult(
        parameters=params,
        ranked=partition.all,
        investable=partition.investable,
        excluded=partition.excluded,
        rows=rows,
        allocation=allocation,
        highlights=highlights,
        used_live_prices=used_live_prices,
        warnings=warnings,
    )
