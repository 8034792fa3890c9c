"""
Calculation session for Verdant.

Owns the two pieces of shared mutable state: the price overlay and the
single "latest calculation result" slot. Results are published as whole
snapshots; the latest publish wins and nothing is merged.

Every published result carries a generation number. Asynchronous side
tasks (narratives, quote refreshes) are tagged with the generation they
were issued for and their output is discarded if a newer snapshot has
been published since.

Note: This is an in-memory, single-user session. Data is lost on restart.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Mapping, Optional

from verdant.catalog import Catalog
from verdant.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from verdant.engine.calculator import calculate
from verdant.models import CalculationResult, NarrativeResult, UserParameters
from verdant.pricing import PriceOverlay

logger = logging.getLogger(__name__)


class CalculationSession:
    """
    Thread-safe holder of the price overlay and latest CalculationResult.

    Computation runs outside the lock on an overlay snapshot; only the
    publish step is serialized, so the later-completing calculation wins.
    """

    def __init__(
        self,
        catalog: Catalog,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        overlay: Optional[PriceOverlay] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config
        self.overlay = overlay if overlay is not None else PriceOverlay()
        self._latest: Optional[CalculationResult] = None
        self._generation = 0
        self._narrative: Optional[tuple[int, NarrativeResult]] = None
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Snapshot access
    # -------------------------------------------------------------------------

    @property
    def latest(self) -> Optional[CalculationResult]:
        with self._lock:
            return self._latest

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def is_current(self, generation: int) -> bool:
        """True if no newer snapshot has been published since `generation`."""
        with self._lock:
            return generation == self._generation

    # -------------------------------------------------------------------------
    # Calculation
    # -------------------------------------------------------------------------

    def calculate(self, params: UserParameters) -> CalculationResult:
        """
        Compute and publish a result for the given parameters.

        Raises:
            InvalidParameter / DivisionUndefined: propagated from the engine;
                the previously published result stays in place
        """
        with self._lock:
            prices = self.overlay.snapshot()

        result = calculate(self.catalog, params, prices, self.config)
        return self._publish(result)

    def _publish(self, result: CalculationResult) -> CalculationResult:
        with self._lock:
            self._generation += 1
            published = result.model_copy(update={
                "generation": self._generation,
                "calculated_at": datetime.now(timezone.utc).isoformat(),
            })
            self._latest = published
            self._narrative = None

        logger.info(
            f"Published calculation generation={published.generation} "
            f"risk={published.parameters.risk_tier.value} "
            f"live_prices={published.used_live_prices}"
        )
        return published

    def recalculate(self) -> Optional[CalculationResult]:
        """Silently recompute with the last parameters. None if nothing calculated yet."""
        latest = self.latest
        if latest is None:
            return None
        return self.calculate(latest.parameters)

    # -------------------------------------------------------------------------
    # Live prices
    # -------------------------------------------------------------------------

    def apply_live_prices(self, prices: Mapping[str, float]) -> tuple[int, Optional[CalculationResult]]:
        """
        Merge live prices into the overlay and silently recompute.

        Unknown tickers are ignored. If a result has already been published,
        it is recomputed with the same user parameters.

        Returns:
            (number of prices accepted, new result or None)
        """
        known = {t: p for t, p in prices.items() if t in self.catalog}
        unknown = sorted(set(prices) - set(known))
        if unknown:
            logger.warning(f"Ignoring live prices for unknown tickers: {unknown}")

        with self._lock:
            applied = self.overlay.update(known)

        logger.info(f"Applied {applied} live prices ({len(self.overlay)} in overlay)")

        if applied == 0:
            return applied, None
        return applied, self.recalculate()

    # -------------------------------------------------------------------------
    # Narrative
    # -------------------------------------------------------------------------

    def publish_narrative(self, generation: int, narrative: NarrativeResult) -> bool:
        """
        Attach a narrative to the snapshot it was generated for.

        Returns:
            False (and drops the narrative) if that snapshot is stale
        """
        with self._lock:
            if generation != self._generation:
                logger.warning(
                    f"Discarding stale narrative for generation {generation} "
                    f"(current {self._generation})"
                )
                return False
            self._narrative = (generation, narrative)
            return True

    @property
    def narrative(self) -> Optional[NarrativeResult]:
        """Narrative for the current snapshot, if one was published."""
        with self._lock:
            if self._narrative is None or self._narrative[0] != self._generation:
                return None
            return self._narrative[1]

    def reset(self) -> None:
        """Clear overlay, result and narrative. Useful for testing."""
        with self._lock:
            self.overlay.clear()
            self._latest = None
            self._narrative = None
            self._generation = 0
