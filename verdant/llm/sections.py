"""
Best-effort section splitter for narrative output.

split_sections is a pure function from free text to a NarrativeResult:
structured when at least one expected header is found with a body,
unstructured (the whole text) otherwise. It never raises on odd input.
"""

import re
from typing import Optional

from verdant.models import NarrativeResult, NarrativeSection, SectionKey

DISCLAIMER_MARKER = "educational purposes"

_HEADER_PREFIX = re.compile(r"^[^A-Z]*")


def _match_header(line: str) -> Optional[SectionKey]:
    # leading markdown, numbering or emoji may precede the section name
    upper = _HEADER_PREFIX.sub("", line.upper())
    for key in SectionKey:
        if upper.startswith(key.value):
            return key
    return None


def split_sections(text: str) -> NarrativeResult:
    """
    Split model output into the expected named sections.

    Rules:
    - Markdown emphasis (*) is stripped before parsing
    - A line starting with a section name (case-insensitive, after any
      leading markdown, numbering or emoji) starts that section
    - Text before the first header is dropped
    - Sections with an empty body are skipped
    - The disclaimer line is lifted out into its own field

    Args:
        text: Raw model output (may be empty or malformed)

    Returns:
        NarrativeResult with kind "structured" or "unstructured"
    """
    cleaned = (text or "").replace("*", "")

    disclaimer: Optional[str] = None
    sections: list[NarrativeSection] = []
    current_key: Optional[SectionKey] = None
    current_lines: list[str] = []

    def _flush() -> None:
        if current_key is None:
            return
        body = "\n".join(current_lines).strip()
        if body:
            sections.append(NarrativeSection(key=current_key, body=body))

    for line in cleaned.split("\n"):
        if DISCLAIMER_MARKER in line.lower():
            if disclaimer is None:
                disclaimer = line.strip()
            continue

        key = _match_header(line)
        if key is not None:
            _flush()
            current_key = key
            current_lines = []
        elif current_key is not None:
            current_lines.append(line)
    _flush()

    if not sections:
        return NarrativeResult(kind="unstructured", raw_text=cleaned.strip(), disclaimer=disclaimer)

    return NarrativeResult(
        kind="structured",
        sections=sections,
        disclaimer=disclaimer,
        raw_text=cleaned.strip(),
    )
