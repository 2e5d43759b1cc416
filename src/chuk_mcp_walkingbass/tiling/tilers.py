"""
Tiling strategies - how candidates from the store are placed on a tiling.

Every strategy implements tile(tiling, store, usage=None). Strategies hold
only their configuration: per-request counters live in a SourceUsage object
which is passed in, or created for the call.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Protocol

from chuk_mcp_walkingbass.constants import StrategyName
from chuk_mcp_walkingbass.models.settings import EngineSettings
from chuk_mcp_walkingbass.tiling.placement import PatternPlacement
from chuk_mcp_walkingbass.tiling.store import DEFAULT_SIZES, CandidateStore
from chuk_mcp_walkingbass.tiling.tiling import Tiling

logger = logging.getLogger(__name__)


class SourceUsage:
    """Request-local record of the placements made by strategies."""

    def __init__(self) -> None:
        self._history: list[PatternPlacement] = []

    def record(self, placement: PatternPlacement) -> None:
        """Record a placement."""
        self._history.append(placement)

    @property
    def history(self) -> list[PatternPlacement]:
        """Placements in the order they were made."""
        return list(self._history)

    def __len__(self) -> int:
        return len(self._history)


class TilingStrategy(Protocol):
    """A way to fill a tiling with candidates of a store."""

    def tile(self, tiling: Tiling, store: CandidateStore, usage: SourceUsage | None = None) -> None: ...


def place_ranked(
    tiling: Tiling,
    candidates: Iterable[PatternPlacement],
    used_ids: set[str],
    usage: SourceUsage | None = None,
    key: Callable[[PatternPlacement], Any] = PatternPlacement.sort_key,
) -> list[PatternPlacement]:
    """
    Place candidates best first, skipping used sources and taken bars.

    Args:
        tiling: Tiling to fill
        candidates: Scored placements, any order
        used_ids: Source ids which must not be placed, updated with placed ones
        usage: Optional usage record, updated with placed ones
        key: Sort key, best candidate first (default: score then source id)

    Returns:
        The placements added to the tiling
    """
    placed = []
    for candidate in sorted(candidates, key=key):
        if candidate.source.id in used_ids or not tiling.is_usable_and_free(candidate.bar_range):
            continue
        tiling.add(candidate)
        used_ids.add(candidate.source.id)
        if usage is not None:
            usage.record(candidate)
        placed.append(candidate)
    return placed


def _by_score_then_size(placement: PatternPlacement) -> tuple[float, int, int, str]:
    return (-placement.score.overall, -placement.size, placement.start_bar, placement.source.id)


class MostCompatibleFirst:
    """
    Place the best candidates of one size, round after round.

    In each round a source is placed at most once; ranks are walked from the
    best candidate of each bar down to the nb_best_max-th. Rounds continue until
    one places nothing.
    """

    def __init__(self, size: int):
        self.size = size

    def tile(self, tiling: Tiling, store: CandidateStore, usage: SourceUsage | None = None) -> None:
        usage = usage if usage is not None else SourceUsage()
        while True:
            used_ids: set[str] = set()
            placed = 0
            for rank in range(store.nb_best_max):
                candidates = store.get_ranked(rank, self.size).values()
                placed += len(place_ranked(tiling, candidates, used_ids, usage))
            logger.debug("MostCompatibleFirst(%d) round placed %d", self.size, placed)
            if placed == 0:
                break

    def __repr__(self) -> str:
        return f"MostCompatibleFirst({self.size})"


class SizeCascade:
    """Run MostCompatibleFirst for each size, largest first."""

    def __init__(self, sizes: Sequence[int] = DEFAULT_SIZES):
        self.strategies = [MostCompatibleFirst(size) for size in sorted(sizes, reverse=True)]

    def tile(self, tiling: Tiling, store: CandidateStore, usage: SourceUsage | None = None) -> None:
        usage = usage if usage is not None else SourceUsage()
        for strategy in self.strategies:
            strategy.tile(tiling, store, usage)

    def __repr__(self) -> str:
        return f"SizeCascade({[s.size for s in self.strategies]})"


class DiversityCappedTiler:
    """
    Scan bars in order and place the best candidate passing diversity caps.

    Caps:
    - one_out_of: a source is not reused within the previous one_out_of - 1
      placements of the pass
    - coverage: a source never covers more than coverage * usable bars
    """

    def __init__(self, one_out_of: int = 1, coverage: float = 1.0):
        """
        Initialize the strategy.

        Raises:
            ValueError: If one_out_of < 1 or coverage is not in ]0, 1]
        """
        if one_out_of < 1:
            raise ValueError(f"one_out_of must be >= 1, got {one_out_of}")
        if not 0 < coverage <= 1:
            raise ValueError(f"coverage must be in ]0, 1], got {coverage}")
        self.one_out_of = one_out_of
        self.coverage = coverage

    def tile(self, tiling: Tiling, store: CandidateStore, usage: SourceUsage | None = None) -> None:
        usage = usage if usage is not None else SourceUsage()
        usable = tiling.usable_bars
        if not usable:
            return

        max_bars = self.coverage * len(usable)
        covered: Counter[str] = Counter()
        for placement in tiling.placements():
            covered[placement.source.id] += placement.size
        recent: list[str] = []

        bar = usable[0]
        while bar <= usable[-1]:
            if not tiling.is_usable(bar) or tiling.placement_at(bar) is not None:
                bar += 1
                continue

            accepted = self._first_acceptable(tiling, store, bar, recent, covered, max_bars)
            if accepted is None:
                bar += 1
                continue

            tiling.add(accepted)
            usage.record(accepted)
            recent.append(accepted.source.id)
            covered[accepted.source.id] += accepted.size
            bar += accepted.size

    def _first_acceptable(
        self,
        tiling: Tiling,
        store: CandidateStore,
        bar: int,
        recent: list[str],
        covered: Counter[str],
        max_bars: float,
    ) -> PatternPlacement | None:
        candidates = [c for size in store.sizes for c in store.get(bar, size)]
        window = recent[-(self.one_out_of - 1) :] if self.one_out_of > 1 else []
        for candidate in sorted(candidates, key=_by_score_then_size):
            source_id = candidate.source.id
            if source_id in window:
                continue
            if covered[source_id] + candidate.size > max_bars:
                continue
            if tiling.is_usable_and_free(candidate.bar_range):
                return candidate
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(one_out_of={self.one_out_of}, coverage={self.coverage:g})"


class OneOutOfTwo(DiversityCappedTiler):
    """
    A source is never placed twice in a row.

    The window counts placements, not visited bars: a bar skipped because
    nothing fits does not free the previous source.
    """

    def __init__(self) -> None:
        super().__init__(one_out_of=2)


class OneOutOfX(DiversityCappedTiler):
    """A source is placed at most once every x placements (skipped bars do not count)."""

    def __init__(self, x: int):
        super().__init__(one_out_of=x)


class MaxCoveragePercentage(DiversityCappedTiler):
    """A source covers at most a percentage of the usable bars."""

    def __init__(self, percentage: float):
        super().__init__(coverage=percentage)


class BestFirstNoRepeat:
    """
    Place all candidates best first, each source at most once.

    Sources already present in the tiling count as used.
    """

    def tile(self, tiling: Tiling, store: CandidateStore, usage: SourceUsage | None = None) -> None:
        usage = usage if usage is not None else SourceUsage()
        used_ids = {p.source.id for p in tiling.placements()}
        place_ranked(tiling, store.candidates(), used_ids, usage, key=_by_score_then_size)

    def __repr__(self) -> str:
        return "BestFirstNoRepeat()"


class MaxDistance:
    """
    Repeatedly place the candidate farthest from other uses of its source.

    Ties are broken by the score in the tiling context (store.rescore), then by
    size, then by the earliest bar and source id.
    """

    def tile(self, tiling: Tiling, store: CandidateStore, usage: SourceUsage | None = None) -> None:
        usage = usage if usage is not None else SourceUsage()
        candidates = sorted(store.candidates(), key=lambda c: (c.start_bar, c.source.id, -c.size))

        while True:
            best: PatternPlacement | None = None
            best_key: tuple[float, float, int] | None = None
            for candidate in candidates:
                if not tiling.is_usable_and_free(candidate.bar_range):
                    continue
                score = store.rescore(candidate, tiling)
                if score.overall <= 0:
                    continue
                key = (self._distance(tiling, candidate), score.overall, candidate.size)
                if best_key is None or key > best_key:
                    best, best_key = candidate.with_score(score), key

            if best is None:
                break
            tiling.add(best)
            usage.record(best)

    @staticmethod
    def _distance(tiling: Tiling, candidate: PatternPlacement) -> float:
        starts = tiling.start_bars(candidate.source)
        if not starts:
            return float("inf")
        return min(abs(candidate.start_bar - bar) for bar in starts)

    def __repr__(self) -> str:
        return "MaxDistance()"


def create_strategy(name: StrategyName, settings: EngineSettings) -> TilingStrategy:
    """
    Create a strategy from its name.

    Args:
        name: Strategy name
        settings: Provides sizes and diversity parameters

    Returns:
        A new strategy instance
    """
    if name == StrategyName.SIZE_CASCADE:
        return SizeCascade(settings.sizes)
    if name == StrategyName.MOST_COMPATIBLE_FIRST:
        return MostCompatibleFirst(max(settings.sizes))
    if name == StrategyName.ONE_OUT_OF_TWO:
        return OneOutOfTwo()
    if name == StrategyName.ONE_OUT_OF_X:
        return OneOutOfX(settings.one_out_of_x)
    if name == StrategyName.MAX_COVERAGE_PERCENTAGE:
        return MaxCoveragePercentage(settings.coverage_percentage)
    if name == StrategyName.BEST_FIRST_NO_REPEAT:
        return BestFirstNoRepeat()
    if name == StrategyName.MAX_DISTANCE:
        return MaxDistance()
    raise ValueError(f"Unknown strategy: {name}")
