"""
Ranking and partition for Verdant.

Sorting is stable: equal composite scores keep catalog order, so a
recomputation with unchanged inputs yields an identical sequence.
"""

from typing import NamedTuple, Sequence, TypeVar

from verdant.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from verdant.engine.allocation import estimate_shares
from verdant.models import RankedRow, ScoredInstrument

TOP_PICK_BADGE = "TOP PICK"
BEST_GREEN_BADGE = "BEST GREEN"


class RankedPartition(NamedTuple):
    """Sorted instruments split into investable and excluded."""

    all: list[ScoredInstrument]
    investable: list[ScoredInstrument]
    excluded: list[ScoredInstrument]


def rank_instruments(scored: Sequence[ScoredInstrument]) -> list[ScoredInstrument]:
    """Sort by composite score descending; ties keep input order."""
    return sorted(scored, key=lambda s: s.composite_score, reverse=True)


def rank_and_partition(scored: Sequence[ScoredInstrument]) -> RankedPartition:
    """
    Rank instruments and split them on the recommendation label.

    AVOID → excluded, every other label → investable. Every instrument
    lands in exactly one bucket, regardless of its rank.
    """
    ranked = rank_instruments(scored)
    investable = [s for s in ranked if not s.is_excluded]
    excluded = [s for s in ranked if s.is_excluded]
    return RankedPartition(all=ranked, investable=investable, excluded=excluded)


def rank_label(rank: int) -> str:
    """BEST, 2ND, 3RD, then NTH."""
    if rank == 1:
        return "BEST"
    if rank == 2:
        return "2ND"
    if rank == 3:
        return "3RD"
    return f"{rank}TH"


def build_ranked_rows(
    investable: Sequence[ScoredInstrument],
    amount: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[RankedRow]:
    """
    Build display rows for the investable list.

    Each row carries a share estimate for putting the entire amount into
    that one instrument; informational, not an allocation.
    """
    rows: list[RankedRow] = []
    for index, scored in enumerate(investable):
        rank = index + 1
        badges: list[str] = []
        if rank == 1:
            badges.append(TOP_PICK_BADGE)
        if scored.instrument.carbon_score >= config.best_green_threshold:
            badges.append(BEST_GREEN_BADGE)

        rows.append(RankedRow(
            rank=rank,
            rank_label=rank_label(rank),
            badges=badges,
            scored=scored,
            shares=estimate_shares(amount, scored.effective_price),
        ))
    return rows


T = TypeVar("T", ScoredInstrument, RankedRow)


def search_instruments(items: Sequence[T], query: str) -> list[T]:
    """
    Filter scored instruments or ranked rows by ticker/name substring.

    Case-insensitive; an empty query keeps everything.
    """
    needle = query.strip().lower()
    if not needle:
        return list(items)

    def _matches(item: T) -> bool:
        scored = item.scored if isinstance(item, RankedRow) else item
        return (
            needle in scored.instrument.ticker.lower()
            or needle in scored.instrument.name.lower()
        )

    return [item for item in items if _matches(item)]
