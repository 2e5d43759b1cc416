"""
Candidate store - the best scored placements per (bar, size).

The store is built once per engine iteration and holds, for every usable bar
and every source size, a bounded list of placements ranked by score.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable, Sequence

from chuk_mcp_walkingbass.constants import MAX_SOURCE_SIZE, MIN_SOURCE_SIZE
from chuk_mcp_walkingbass.core.chord_sequence import ChordSequence
from chuk_mcp_walkingbass.core.rhythm import BarRange
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.tiling.placement import PatternPlacement, Score
from chuk_mcp_walkingbass.tiling.scorer import CompatibilityScorer
from chuk_mcp_walkingbass.tiling.tiling import Tiling

logger = logging.getLogger(__name__)

DEFAULT_SIZES: tuple[int, ...] = (4, 3, 2, 1)


class CandidateStore:
    """
    Top-K placements per (start bar, size).

    Lists are ordered by descending overall score, then ascending source id.
    They never exceed nb_best_max entries and never hold a placement scoring 0
    or below min_score.
    """

    def __init__(
        self,
        scorer: CompatibilityScorer | None = None,
        sizes: Sequence[int] = DEFAULT_SIZES,
        nb_best_max: int = 5,
        min_score: float = 0.0,
    ):
        """
        Initialize an empty store.

        Args:
            scorer: Scorer used by rescore() (default: a plain CompatibilityScorer)
            sizes: Source sizes handled, in bars
            nb_best_max: Maximum number of placements per (bar, size)
            min_score: Placements scoring below are rejected

        Raises:
            ValueError: If sizes is empty or invalid, or nb_best_max < 1
        """
        if not sizes or any(not MIN_SOURCE_SIZE <= s <= MAX_SOURCE_SIZE for s in sizes):
            raise ValueError(f"Invalid sizes {list(sizes)}, expected values in 1-4")
        if nb_best_max < 1:
            raise ValueError(f"nb_best_max must be >= 1, got {nb_best_max}")

        self.scorer = scorer or CompatibilityScorer()
        self.sizes = tuple(sizes)
        self.nb_best_max = nb_best_max
        self.min_score = min_score
        self._lists: dict[tuple[int, int], list[PatternPlacement]] = {}

    @classmethod
    def build(
        cls,
        sequence: ChordSequence,
        database: PatternDatabase,
        scorer: CompatibilityScorer,
        sizes: Sequence[int] = DEFAULT_SIZES,
        nb_best_max: int = 5,
        min_score: float = 0.0,
        bars: Iterable[int] | None = None,
    ) -> CandidateStore:
        """
        Score every matching source on every usable bar range.

        Args:
            sequence: The target chord sequence
            database: Where sources are looked up, by root profile and size
            scorer: Scorer used without tiling context
            sizes: Source sizes to consider
            nb_best_max: Maximum number of placements kept per (bar, size)
            min_score: Placements scoring below are rejected
            bars: Restrict to these start bars (default: every usable bar)

        Returns:
            The populated store
        """
        store = cls(scorer, sizes, nb_best_max, min_score)
        start_bars = sequence.usable_bars if bars is None else sorted(set(bars))

        for bar in start_bars:
            for size in store.sizes:
                bar_range = BarRange.of_size(bar, size)
                if not sequence.bar_range.contains(bar_range) or not sequence.is_usable(bar_range):
                    continue
                chord_slice = sequence.sub_sequence(bar_range, shift_to_zero=True)
                profile = chord_slice.root_profile()
                for source in database.get(profile, size):
                    placement = PatternPlacement(source, bar_range, chord_slice)
                    store.add(placement.with_score(scorer.score(placement)))

        logger.debug("Candidate store built: %d candidates", len(store.candidates()))
        return store

    def add(self, placement: PatternPlacement) -> bool:
        """
        Insert a scored placement in its (bar, size) list.

        Returns:
            True if the placement is retained
        """
        if placement.score.overall <= 0 or placement.score.overall < self.min_score:
            return False
        if placement.size not in self.sizes:
            return False

        ranked = self._lists.setdefault((placement.start_bar, placement.size), [])
        keys = [p.sort_key() for p in ranked]
        index = bisect.bisect_right(keys, placement.sort_key())
        ranked.insert(index, placement)
        if len(ranked) > self.nb_best_max:
            evicted = ranked.pop()
            if evicted is placement:
                return False
        return True

    def get(self, bar: int, size: int) -> list[PatternPlacement]:
        """Ranked placements for (bar, size), best first (possibly empty)."""
        return list(self._lists.get((bar, size), ()))

    def get_ranked(self, rank: int, size: int) -> dict[int, PatternPlacement]:
        """
        The placement of a given rank for every bar.

        Bars with fewer than rank+1 placements give their lowest ranked
        placement, bars with no placement are absent.

        Returns:
            Map start bar -> placement
        """
        result = {}
        for (bar, list_size), ranked in self._lists.items():
            if list_size == size and ranked:
                result[bar] = ranked[min(rank, len(ranked) - 1)]
        return dict(sorted(result.items()))

    def candidates(self, size: int | None = None) -> list[PatternPlacement]:
        """All placements, optionally for one size, ordered by bar then rank."""
        result = []
        for bar, list_size in sorted(self._lists):
            if size is None or list_size == size:
                result.extend(self._lists[(bar, list_size)])
        return result

    def bars(self, size: int) -> list[int]:
        """Start bars having at least one placement of size."""
        return sorted(bar for (bar, list_size), ranked in self._lists.items() if list_size == size and ranked)

    def rescore(self, placement: PatternPlacement, tiling: Tiling) -> Score:
        """Score a placement in the context of a tiling."""
        return self.scorer.score(placement, tiling)

    def to_debug_string(self) -> str:
        """One line per (bar, size) list."""
        lines = [f"CandidateStore nb_best_max={self.nb_best_max} min_score={self.min_score:g}"]
        for bar, size in sorted(self._lists):
            entries = ", ".join(f"{p.source.id}={p.score.overall:g}" for p in self._lists[(bar, size)])
            lines.append(f"  bar {bar:03d} size {size}: {entries}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return sum(len(ranked) for ranked in self._lists.values())
