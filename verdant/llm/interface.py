"""
Narrative Client Interface for Verdant.

This module defines the abstract interface for narrative LLM clients.
All implementations (mock, OpenAI, etc.) must implement this Protocol.

The engine never depends on a narrative: output is free text that is
parsed best-effort by verdant.llm.sections.
"""

from typing import Protocol, runtime_checkable

from verdant.models import SummaryContext


@runtime_checkable
class NarrativeClient(Protocol):
    """
    Protocol defining the narrative client interface.

    Methods:
        generate_recommendation: Write a sectioned recommendation from a result snapshot
    """

    def generate_recommendation(self, context: SummaryContext) -> str:
        """
        Generate a personalised recommendation from a calculation snapshot.

        Args:
            context: Top picks, excluded instruments, allocation and user parameters

        Returns:
            Free text, ideally organised under the SectionKey headers and
            ending with the educational-purposes disclaimer

        Raises:
            UpstreamUnavailable: If the model service is unreachable
        """
        ...
