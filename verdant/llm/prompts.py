"""
Prompt templates for narrative LLM calls.

Templates are string constants formatted with runtime values taken from a
SummaryContext. Numbers (composites, allocation percents and amounts) are
echoed exactly as the engine produced them.
"""

from verdant.models import (
    AllocationSlice,
    RiskTier,
    SectionKey,
    SummaryContext,
    SummaryExclusion,
    SummaryPick,
)

DISCLAIMER = "This is for educational purposes only and does not constitute financial advice."

RISK_LABELS: dict[RiskTier, str] = {
    RiskTier.LOW: "conservative",
    RiskTier.MEDIUM: "balanced",
    RiskTier.HIGH: "aggressive",
}

# =============================================================================
# generate_recommendation Prompts
# =============================================================================

RECOMMENDATION_SYSTEM = """You are VERDANT, an expert green investment advisor specialising in S&P 500 ESG analysis.
You write succinct, actionable, personalised recommendations using the actual numbers you are given.
Respond in plain text only (no markdown)."""

RECOMMENDATION_USER = """A user wants to invest {amount} with a {years}-year horizon and {risk_label} risk tolerance.
They've weighted their priorities as {env_weight}% environmental and {fin_weight}% financial return.

Top {top_count} stocks ranked by composite score ({env_weight}% environmental + {fin_weight}% financial):
{top_picks}

Engine allocation across the leaders (by composite score):
{allocation}

ESG stocks to avoid: {excluded}

Structure your text-only response with these exact section headers:

{profile}
What {amount} + {years}-year + {risk_label} risk + {env_weight}/{fin_weight} env/fin weighting means strategically.

{top_recommendation}
Why the #1 stock is the best fit. Include specific shares they can buy and projected portfolio value.

{allocation_header}
How to split {amount} across 2-4 of the top stocks. Give specific dollar amounts and rationale.

{environmental_impact}
What choosing these stocks means for their environmental footprint vs. investing in the stocks to avoid.

{risks}
2-3 specific risks: market, regulatory, and ESG-washing considerations.

{final_verdict}
A crisp, confident recommendation they can act on today.

End with exactly: "{disclaimer}\""""


# =============================================================================
# Formatting Helpers
# =============================================================================


def format_money(value: float) -> str:
    """$10,000 style; cents dropped."""
    return f"${value:,.0f}"


def format_pick(rank: int, pick: SummaryPick, years: int) -> str:
    """One numbered line per top pick."""
    net_zero = pick.net_zero_target_year if pick.net_zero_target_year is not None else "none"
    return (
        f"{rank}. {pick.ticker} ({pick.name}) - "
        f"Composite: {pick.composite_score}/100, "
        f"Carbon: {pick.carbon_score}/100 (Grade {pick.carbon_grade.value}), "
        f"ESG rating: {pick.esg_rating}, "
        f"Projected {years}yr gain: +{pick.gain_percent:.0f}%, "
        f"Annual return est: {pick.annual_rate_percent:g}%, "
        f"Net Zero target: {net_zero}"
    )


def format_exclusions(excluded: list[SummaryExclusion]) -> str:
    if not excluded:
        return "none"
    return ", ".join(
        f"{e.ticker} (Grade {e.carbon_grade.value}, {e.carbon_intensity:g} tCO2e/$M revenue)"
        for e in excluded
    )


def format_allocation(allocation: list[AllocationSlice]) -> str:
    if not allocation:
        return "none"
    return "\n".join(
        f"- {s.ticker}: {s.allocation_percent}% ({format_money(s.allocation_amount)})"
        for s in allocation
    )


# =============================================================================
# Prompt Builders
# =============================================================================


def format_recommendation_system() -> str:
    """Format the system prompt for generate_recommendation."""
    return RECOMMENDATION_SYSTEM


def format_recommendation_user(context: SummaryContext) -> str:
    """Format the user prompt for generate_recommendation."""
    params = context.parameters
    top_picks = "\n".join(
        format_pick(i + 1, pick, params.horizon_years)
        for i, pick in enumerate(context.top_picks)
    )
    return RECOMMENDATION_USER.format(
        amount=format_money(params.investment_amount),
        years=params.horizon_years,
        risk_label=RISK_LABELS[params.risk_tier],
        env_weight=params.environmental_weight,
        fin_weight=params.financial_weight,
        top_count=len(context.top_picks),
        top_picks=top_picks or "none",
        allocation=format_allocation(context.allocation),
        excluded=format_exclusions(context.excluded),
        profile=SectionKey.PROFILE.value,
        top_recommendation=SectionKey.TOP_RECOMMENDATION.value,
        allocation_header=SectionKey.ALLOCATION.value,
        environmental_impact=SectionKey.ENVIRONMENTAL_IMPACT.value,
        risks=SectionKey.RISKS.value,
        final_verdict=SectionKey.FINAL_VERDICT.value,
        disclaimer=DISCLAIMER,
    )
