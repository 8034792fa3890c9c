"""
LLM module for Verdant.

Contains the narrative client interface, its implementations, and the
best-effort section splitter for their output.
"""

from verdant.llm.interface import NarrativeClient
from verdant.llm.mock import MockNarrativeClient
from verdant.llm.sections import split_sections

__all__ = [
    "NarrativeClient",
    "MockNarrativeClient",
    "split_sections",
]
