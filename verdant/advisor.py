"""
Narrative advisor for Verdant.

Builds the structured snapshot handed to a NarrativeClient, calls it, and
attaches the split result to the session only if the snapshot is still the
latest one. The engine never depends on this module.
"""

import logging

from verdant.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from verdant.exceptions import NoResultError, StaleResultError
from verdant.llm.interface import NarrativeClient
from verdant.llm.sections import split_sections
from verdant.models import (
    CalculationResult,
    NarrativeResult,
    SummaryContext,
    SummaryExclusion,
    SummaryPick,
)
from verdant.session import CalculationSession

logger = logging.getLogger(__name__)


def build_summary_context(result: CalculationResult, top_k: int = 5) -> SummaryContext:
    """
    Snapshot the numbers a narrative may cite.

    Top picks come from the investable ranking in rank order; exclusions
    and the allocation are echoed as computed.
    """
    top_picks = [
        SummaryPick(
            ticker=s.ticker,
            name=s.instrument.name,
            composite_score=s.composite_score,
            carbon_score=s.instrument.carbon_score,
            carbon_grade=s.instrument.carbon_grade,
            esg_rating=s.instrument.esg_rating,
            gain_percent=s.gain_percent,
            annual_rate_percent=s.annual_rate_percent,
            net_zero_target_year=s.instrument.net_zero_target_year,
        )
        for s in result.investable[:top_k]
    ]
    excluded = [
        SummaryExclusion(
            ticker=s.ticker,
            carbon_grade=s.instrument.carbon_grade,
            carbon_intensity=s.instrument.carbon_intensity,
        )
        for s in result.excluded
    ]
    return SummaryContext(
        generation=result.generation,
        parameters=result.parameters,
        top_picks=top_picks,
        excluded=excluded,
        allocation=list(result.allocation),
    )


def generate_narrative(
    session: CalculationSession,
    client: NarrativeClient,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> tuple[int, NarrativeResult]:
    """
    Generate and publish a narrative for the session's latest result.

    Args:
        session: Session holding the latest published result
        client: Narrative generator (real or mock)
        config: Engine configuration (summary_top_k)

    Returns:
        (generation the narrative belongs to, split narrative)

    Raises:
        NoResultError: If nothing has been calculated yet
        StaleResultError: If a newer result was published during the call
        UpstreamUnavailable: Propagated from the client
    """
    result = session.latest
    if result is None:
        raise NoResultError("No calculation result to summarize")

    context = build_summary_context(result, config.summary_top_k)
    logger.info(
        f"Requesting narrative for generation={context.generation} "
        f"({len(context.top_picks)} picks, {len(context.excluded)} excluded)"
    )

    text = client.generate_recommendation(context)
    narrative = split_sections(text)

    if not session.publish_narrative(context.generation, narrative):
        raise StaleResultError(context.generation, session.generation)

    logger.info(
        f"Narrative for generation={context.generation} is {narrative.kind} "
        f"({len(narrative.sections)} sections)"
    )
    return context.generation, narrative
