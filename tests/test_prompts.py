"""Tests for prompt formatting.

Prompts must echo engine numbers verbatim and name every expected section.
"""

from verdant.advisor import build_summary_context
from verdant.catalog import load_catalog
from verdant.engine.calculator import calculate
from verdant.llm.prompts import (
    DISCLAIMER,
    format_allocation,
    format_exclusions,
    format_money,
    format_recommendation_system,
    format_recommendation_user,
)
from verdant.models import SectionKey, UserParameters


def make_context():
    params = UserParameters(
        investment_amount=10_000, horizon_years=10, risk_tier="medium", environmental_weight=50
    )
    result = calculate(load_catalog(), params).model_copy(update={"generation": 4})
    return build_summary_context(result)


class TestFormatting:
    """Tests for formatting helpers."""

    def test_format_money(self):
        assert format_money(10_000) == "$10,000"
        assert format_money(2_100.4) == "$2,100"

    def test_empty_exclusions(self):
        assert format_exclusions([]) == "none"

    def test_empty_allocation(self):
        assert format_allocation([]) == "none"


class TestRecommendationPrompt:
    """Tests for the recommendation prompts."""

    def test_system_prompt_asks_for_plain_text(self):
        assert "plain text" in format_recommendation_system()

    def test_user_prompt_contains_parameters(self):
        prompt = format_recommendation_user(make_context())

        assert "$10,000" in prompt
        assert "10-year" in prompt
        assert "balanced" in prompt
        assert "50% environmental" in prompt

    def test_user_prompt_echoes_engine_numbers(self):
        prompt = format_recommendation_user(make_context())

        assert "1. LRCX" in prompt
        assert "Composite: 62/100" in prompt
        assert "- LRCX: 21% ($2,100)" in prompt
        assert "XOM (Grade F" in prompt

    def test_user_prompt_names_every_section(self):
        prompt = format_recommendation_user(make_context())

        for key in SectionKey:
            assert key.value in prompt
        assert DISCLAIMER in prompt
