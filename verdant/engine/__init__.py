"""
Engine module for Verdant.

Contains pure functions for scoring, ranking, allocation and the full
calculation pipeline.
"""

from verdant.engine.allocation import allocate, estimate_shares
from verdant.engine.calculator import calculate, compute_highlights
from verdant.engine.ranking import (
    RankedPartition,
    build_ranked_rows,
    rank_and_partition,
    search_instruments,
)
from verdant.engine.scoring import (
    compute_composite_score,
    compute_return_score,
    normalize_return,
    project_return,
    round_half_up,
    score_instrument,
)

__all__ = [
    # Scoring
    "round_half_up",
    "normalize_return",
    "compute_return_score",
    "compute_composite_score",
    "project_return",
    "score_instrument",
    # Ranking
    "RankedPartition",
    "rank_and_partition",
    "build_ranked_rows",
    "search_instruments",
    # Allocation
    "allocate",
    "estimate_shares",
    # Pipeline
    "calculate",
    "compute_highlights",
]
