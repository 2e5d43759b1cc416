"""
Tiling - non-overlapping placements over the usable bars of a chord sequence.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from chuk_mcp_walkingbass.constants import MAX_SOURCE_SIZE, MIN_SOURCE_SIZE
from chuk_mcp_walkingbass.core.chord_sequence import ChordSequence
from chuk_mcp_walkingbass.core.phrase import Phrase
from chuk_mcp_walkingbass.core.rhythm import BarRange
from chuk_mcp_walkingbass.database.source import PatternSource
from chuk_mcp_walkingbass.tiling.placement import PatternPlacement


class Tiling:
    """
    A sparse assignment of bar ranges to pattern placements.

    Every covered range is usable, ranges never overlap. Placements are only
    added, a tiling belongs to a single generation request.
    """

    def __init__(self, sequence: ChordSequence):
        """
        Initialize an empty tiling.

        Args:
            sequence: The target chord sequence
        """
        self.sequence = sequence
        self._by_start: dict[int, PatternPlacement] = {}
        self._by_bar: dict[int, PatternPlacement] = {}

    @property
    def bar_range(self) -> BarRange:
        return self.sequence.bar_range

    @property
    def usable_bars(self) -> list[int]:
        return self.sequence.usable_bars

    # --- Mutation ---

    def add(self, placement: PatternPlacement) -> None:
        """
        Add a placement.

        Raises:
            ValueError: If the placement range is not usable and free
        """
        if not self.is_usable_and_free(placement.bar_range):
            raise ValueError(f"Bar range {placement.bar_range} is not usable and free: {placement}")
        self._by_start[placement.start_bar] = placement
        for bar in placement.bar_range:
            self._by_bar[bar] = placement

    # --- Queries ---

    def is_usable(self, bar_or_range: int | BarRange) -> bool:
        """Check if a bar or a whole bar range is usable."""
        if isinstance(bar_or_range, BarRange) and not self.bar_range.contains(bar_or_range):
            return False
        return self.sequence.is_usable(bar_or_range)

    def is_usable_and_free(self, bar_range: BarRange) -> bool:
        """Check if a bar range is usable and not covered by any placement."""
        return self.is_usable(bar_range) and all(bar not in self._by_bar for bar in bar_range)

    def placements(
        self, predicate: Callable[[PatternPlacement], bool] | None = None
    ) -> list[PatternPlacement]:
        """Placements ordered by start bar, optionally filtered."""
        result = [self._by_start[bar] for bar in sorted(self._by_start)]
        if predicate is not None:
            result = [p for p in result if predicate(p)]
        return result

    def placements_of(self, source: PatternSource) -> list[PatternPlacement]:
        """Placements using source, ordered by start bar."""
        return self.placements(lambda p: p.source == source)

    def start_bars(self, source: PatternSource) -> list[int]:
        """Start bars of the placements using source."""
        return [p.start_bar for p in self.placements_of(source)]

    def placement_starting_at(self, bar: int) -> PatternPlacement | None:
        """The placement starting at bar, if any."""
        return self._by_start.get(bar)

    def placement_at(self, bar: int) -> PatternPlacement | None:
        """The placement covering bar, if any."""
        return self._by_bar.get(bar)

    def tiled_bars(self) -> list[int]:
        """Usable bars covered by a placement, ascending."""
        return [b for b in self.usable_bars if b in self._by_bar]

    def untiled_bars(self) -> list[int]:
        """Usable bars not covered by a placement, ascending."""
        return [b for b in self.usable_bars if b not in self._by_bar]

    def is_fully_tiled(self) -> bool:
        """True when every usable bar is covered."""
        return not self.untiled_bars()

    def untiled_zones(self) -> list[BarRange]:
        """Maximal runs of consecutive untiled usable bars."""
        zones: list[BarRange] = []
        start = previous = None
        for bar in self.untiled_bars():
            if previous is not None and bar == previous + 1:
                previous = bar
                continue
            if start is not None and previous is not None:
                zones.append(BarRange(start, previous))
            start = previous = bar
        if start is not None and previous is not None:
            zones.append(BarRange(start, previous))
        return zones

    # --- Rendering ---

    def render(self) -> Phrase:
        """
        Build the complete bass phrase.

        Each placement phrase is transposed to its target and moved to its start
        bar. Untiled bars are silent.
        """
        beats_per_bar = self.sequence.time_signature.beats_per_bar
        phrase = Phrase()
        for placement in self.placements():
            offset = (placement.start_bar - self.bar_range.start) * beats_per_bar
            phrase = phrase.merged(placement.adapted_phrase(offset))
        return phrase

    # --- Display ---

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary of the placements."""
        return {
            "tiled_bars": len(self.tiled_bars()),
            "usable_bars": len(self.usable_bars),
            "placements": [
                {
                    "bars": [p.bar_range.start, p.bar_range.end],
                    "source": p.source.id,
                    "score": p.score.overall,
                    "transposition": p.transposition,
                }
                for p in self.placements()
            ],
        }

    def to_stats_string(self) -> str:
        """How often each source is used, grouped by size, most used first."""
        uses: dict[PatternSource, list[int]] = {}
        for placement in self.placements():
            uses.setdefault(placement.source, []).append(placement.start_bar)

        lines = []
        for size in range(MAX_SOURCE_SIZE, MIN_SOURCE_SIZE - 1, -1):
            sources = sorted(
                (s for s in uses if s.size == size), key=lambda s: (-len(uses[s]), s.id)
            )
            lines.append(f">>> {len(sources)} * {size}-bar:")
            lines.extend(f"{s.id}: {uses[s]}" for s in sources)
        return "\n".join(lines)

    def to_multiline_string(self) -> str:
        """One line per usable bar."""
        lines = [f"TILING {len(self.tiled_bars())}/{len(self.usable_bars)}:"]
        for bar in self.usable_bars:
            start = self.placement_starting_at(bar)
            if start is not None:
                text = str(start)
            elif bar in self._by_bar:
                text = "  (repeat)"
            else:
                text = ""
            lines.append(f" {bar:03d}: {text}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._by_start)

    def __str__(self) -> str:
        return f"Tiling{self.tiled_bars()}"
