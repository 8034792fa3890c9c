"""
Mock Narrative Client for testing.

This module provides a deterministic MockNarrativeClient for exercising the
advisor and API without making real LLM calls.

The mock is designed to be:
- Deterministic (same inputs → same outputs)
- Controllable (custom text, or a configured failure)
- Realistic (uses the same section headers the prompt asks for)
"""

from typing import Optional

from verdant.exceptions import UpstreamUnavailable
from verdant.llm.prompts import DISCLAIMER, RISK_LABELS, format_money
from verdant.models import SectionKey, SummaryContext


class MockNarrativeClient:
    """
    Mock narrative client for testing.

    Attributes:
        custom_text: If set, returned verbatim instead of the generated text
        fail: If True, every call raises UpstreamUnavailable
        call_count: Number of generate_recommendation calls
        call_history: Contexts received, for inspection

    Example:
        ```python
        mock = MockNarrativeClient()
        text = mock.generate_recommendation(context)
        assert "TOP RECOMMENDATION" in text
        ```
    """

    def __init__(
        self,
        custom_text: Optional[str] = None,
        fail: bool = False,
    ):
        self.custom_text = custom_text
        self.fail = fail
        self.call_count = 0
        self.call_history: list[SummaryContext] = []

    def generate_recommendation(self, context: SummaryContext) -> str:
        """
        Generate a deterministic recommendation from the snapshot numbers.

        Raises:
            UpstreamUnavailable: If configured with fail=True
        """
        self.call_count += 1
        self.call_history.append(context)

        if self.fail:
            raise UpstreamUnavailable("Mock narrative client configured to fail")

        if self.custom_text is not None:
            return self.custom_text

        params = context.parameters
        amount = format_money(params.investment_amount)
        risk_label = RISK_LABELS[params.risk_tier]

        if context.top_picks:
            top = context.top_picks[0]
            top_line = (
                f"{top.ticker} leads with a composite of {top.composite_score}/100 "
                f"(carbon {top.carbon_score}, grade {top.carbon_grade.value}) and a projected "
                f"{params.horizon_years}-year gain of {top.gain_percent:.0f}%."
            )
        else:
            top_line = "No investable stocks matched your profile."

        allocation_lines = [
            f"{s.ticker}: {s.allocation_percent}% ({format_money(s.allocation_amount)})"
            for s in context.allocation
        ] or ["No allocation available."]

        avoid = ", ".join(e.ticker for e in context.excluded) or "none"

        return "\n".join([
            SectionKey.PROFILE.value,
            f"{amount} over {params.horizon_years} years with {risk_label} risk, weighted "
            f"{params.environmental_weight}/{params.financial_weight} env/fin.",
            "",
            SectionKey.TOP_RECOMMENDATION.value,
            top_line,
            "",
            SectionKey.ALLOCATION.value,
            *allocation_lines,
            "",
            SectionKey.ENVIRONMENTAL_IMPACT.value,
            f"Avoiding {avoid} keeps the highest-intensity emitters out of the portfolio.",
            "",
            SectionKey.RISKS.value,
            "Market drawdowns, regulatory change, and ESG-washing in reported targets.",
            "",
            SectionKey.FINAL_VERDICT.value,
            "Follow the engine allocation and review it when prices move.",
            "",
            DISCLAIMER,
        ])
