"""
Instrument catalog for Verdant.

The catalog is loaded once at process start from packaged JSON and is
immutable afterwards. Live prices never touch it; see verdant.pricing.
"""

import json
import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from verdant.config import CARBON_GRADE_BANDS, DEFAULT_CATALOG_CONFIG, CatalogConfig
from verdant.exceptions import CatalogError
from verdant.models import CarbonGrade, InstrumentRecord, RiskTier

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "instruments.json"


# =============================================================================
# Grade Derivation
# =============================================================================


def carbon_grade_for(carbon_score: int) -> CarbonGrade:
    """
    Derive the letter grade band for a carbon score.

    A: 80-100, B: 60-79, C: 40-59, D: 20-39, F: 0-19
    """
    if not (0 <= carbon_score <= 100):
        raise ValueError(f"carbon_score must be in [0, 100] (got {carbon_score})")
    for grade, floor in CARBON_GRADE_BANDS:
        if carbon_score >= floor:
            return grade
    return CarbonGrade.F


# =============================================================================
# Catalog Validation
# =============================================================================


def validate_instruments(instruments: list[InstrumentRecord]) -> list[str]:
    """
    Validate catalog structure. Returns list of hard errors.

    Checks:
    - Catalog is not empty
    - Tickers are unique
    - Every instrument has a return estimate for every risk tier
    """
    errors: list[str] = []

    if not instruments:
        errors.append("Catalog cannot be empty")
        return errors

    seen: set[str] = set()
    duplicates: set[str] = set()
    for instrument in instruments:
        if instrument.ticker in seen:
            duplicates.add(instrument.ticker)
        seen.add(instrument.ticker)
    if duplicates:
        errors.append(f"Tickers must be unique; duplicates: {sorted(duplicates)}")

    for instrument in instruments:
        missing = [t.value for t in RiskTier if t not in instrument.annual_return_by_risk_tier]
        if missing:
            errors.append(f"Instrument {instrument.ticker}: missing return for tiers {missing}")

    return errors


def find_grade_mismatches(instruments: list[InstrumentRecord]) -> list[str]:
    """Return a message for every instrument whose stored grade disagrees with its score."""
    mismatches: list[str] = []
    for instrument in instruments:
        derived = carbon_grade_for(instrument.carbon_score)
        if derived != instrument.carbon_grade:
            mismatches.append(
                f"{instrument.ticker}: carbon_score {instrument.carbon_score} implies grade "
                f"{derived.value}, stored grade is {instrument.carbon_grade.value}"
            )
    return mismatches


# =============================================================================
# Catalog
# =============================================================================


class Catalog:
    """
    Immutable, ordered collection of InstrumentRecord.

    Iteration follows insertion order, which is also the tie-break order
    for ranking.
    """

    def __init__(
        self,
        instruments: list[InstrumentRecord],
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> None:
        errors = validate_instruments(instruments)
        if errors:
            raise CatalogError("; ".join(errors))

        mismatches = find_grade_mismatches(instruments)
        if mismatches:
            if config.strict_grade_check:
                raise CatalogError("; ".join(mismatches))
            for message in mismatches:
                logger.warning(f"Catalog grade mismatch: {message}")

        self._instruments: tuple[InstrumentRecord, ...] = tuple(instruments)
        self._by_ticker: dict[str, InstrumentRecord] = {i.ticker: i for i in instruments}
        self._grade_mismatches: tuple[str, ...] = tuple(mismatches)

    @property
    def instruments(self) -> tuple[InstrumentRecord, ...]:
        return self._instruments

    @property
    def tickers(self) -> list[str]:
        return [i.ticker for i in self._instruments]

    @property
    def grade_mismatches(self) -> tuple[str, ...]:
        return self._grade_mismatches

    def get(self, ticker: str) -> Optional[InstrumentRecord]:
        return self._by_ticker.get(ticker)

    def __contains__(self, ticker: object) -> bool:
        return ticker in self._by_ticker

    def __iter__(self) -> Iterator[InstrumentRecord]:
        return iter(self._instruments)

    def __len__(self) -> int:
        return len(self._instruments)


def load_catalog(
    path: Optional[Union[str, Path]] = None,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> Catalog:
    """
    Load the instrument catalog from a JSON file.

    Args:
        path: JSON file holding a list of instrument objects
            (defaults to the packaged dataset)
        config: Catalog validation settings

    Returns:
        Immutable Catalog

    Raises:
        CatalogError: If the file is unreadable, malformed, or fails validation
    """
    catalog_path = Path(path) if path is not None else DEFAULT_CATALOG_PATH

    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read catalog {catalog_path}: {e}") from e

    if not isinstance(raw, list):
        raise CatalogError(f"Catalog {catalog_path} must contain a JSON list")

    try:
        instruments = [InstrumentRecord.model_validate(item) for item in raw]
    except PydanticValidationError as e:
        raise CatalogError(f"Invalid instrument record in {catalog_path}: {e}") from e

    catalog = Catalog(instruments, config=config)
    logger.info(f"Loaded catalog: {len(catalog)} instruments from {catalog_path.name}")
    return catalog
