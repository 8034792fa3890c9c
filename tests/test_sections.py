"""Tests for the narrative section splitter."""

from verdant.llm.prompts import DISCLAIMER
from verdant.llm.sections import split_sections
from verdant.models import SectionKey


WELL_FORMED = f"""YOUR INVESTMENT PROFILE
$10,000 over 10 years, balanced.

TOP RECOMMENDATION
LRCX leads with 62/100.

SUGGESTED ALLOCATION
LRCX 21%, MSFT 21%.

ENVIRONMENTAL IMPACT
Far below XOM and CVX.

KEY RISKS TO WATCH
Semiconductor cycles.

FINAL VERDICT
Buy LRCX.

{DISCLAIMER}"""


class TestSplitSections:
    """Tests for split_sections."""

    def test_all_sections_in_order(self):
        result = split_sections(WELL_FORMED)

        assert result.kind == "structured"
        assert [s.key for s in result.sections] == list(SectionKey)
        assert result.sections[1].body == "LRCX leads with 62/100."

    def test_disclaimer_lifted_out(self):
        result = split_sections(WELL_FORMED)

        assert result.disclaimer == DISCLAIMER
        assert all("educational" not in s.body for s in result.sections)

    def test_markdown_and_case_tolerated(self):
        text = "**Top Recommendation:**\nMSFT.\n\n## final verdict\nHold it."

        result = split_sections(text)

        assert [s.key for s in result.sections] == [
            SectionKey.TOP_RECOMMENDATION,
            SectionKey.FINAL_VERDICT,
        ]
        assert result.sections[0].body == "MSFT."

    def test_preamble_dropped(self):
        result = split_sections("Sure! Here you go.\nTOP RECOMMENDATION\nNEE.")

        assert len(result.sections) == 1
        assert result.sections[0].body == "NEE."

    def test_empty_body_skipped(self):
        result = split_sections("TOP RECOMMENDATION\n\nFINAL VERDICT\nGo.")

        assert [s.key for s in result.sections] == [SectionKey.FINAL_VERDICT]

    def test_free_text_is_unstructured(self):
        result = split_sections("Just buy index funds.")

        assert result.kind == "unstructured"
        assert result.sections == []
        assert result.raw_text == "Just buy index funds."

    def test_empty_text(self):
        result = split_sections("")

        assert result.kind == "unstructured"
        assert result.raw_text == ""

    def test_headers_without_bodies_are_unstructured(self):
        result = split_sections("TOP RECOMMENDATION\nFINAL VERDICT")

        assert result.kind == "unstructured"

    def test_numbered_and_emoji_headers(self):
        result = split_sections("1. TOP RECOMMENDATION\nLRCX.\n\n🌱 Environmental Impact\nLow.")

        assert [s.key for s in result.sections] == [
            SectionKey.TOP_RECOMMENDATION,
            SectionKey.ENVIRONMENTAL_IMPACT,
        ]

    def test_section_name_mid_sentence_stays_in_body(self):
        text = "FINAL VERDICT\nBuy MSFT.\nOur top recommendation is MSFT for its score."

        result = split_sections(text)

        assert [s.key for s in result.sections] == [SectionKey.FINAL_VERDICT]
        assert result.sections[0].body == (
            "Buy MSFT.\nOur top recommendation is MSFT for its score."
        )
