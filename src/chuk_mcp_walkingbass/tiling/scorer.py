"""
Compatibility scorer - how well a placed source fits the target chords.

The score is a pure function of the placement and, optionally, of the tiling
it is placed in: neighbour placements contribute the pre/post target scores.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from chuk_mcp_walkingbass.constants import BassStyle
from chuk_mcp_walkingbass.core.chord import harmonic_compatibility
from chuk_mcp_walkingbass.tiling.placement import PatternPlacement, Score
from chuk_mcp_walkingbass.tiling.tiling import Tiling

logger = logging.getLogger(__name__)


class CompatibilityScorer:
    """
    Scores pattern placements.

    Components:
    - harmonic: mean per-chord compatibility of the notes played by the source
      with the target chord types. Any incompatible chord gives Score.ZERO.
    - transposability: how well the source phrase keeps a bass register once
      moved to the target root.
    - pre_target: 100 when the previous placement targets our first pitch.
    - post_target: 100 when the next placement starts on our target pitch.
    """

    def __init__(
        self,
        styles: Iterable[BassStyle] | None = None,
        min_score: float = 0.0,
    ):
        """
        Initialize the scorer.

        Args:
            styles: Accepted source styles (None accepts every style)
            min_score: Overall scores below this value become Score.ZERO
        """
        self.styles = frozenset(styles) if styles is not None else None
        self.min_score = min_score

    def restricted(
        self, styles: Iterable[BassStyle] | None = None, min_score: float | None = None
    ) -> CompatibilityScorer:
        """
        A scorer accepting fewer placements than this one.

        Args:
            styles: Accepted styles, intersected with ours (None keeps ours)
            min_score: Raised minimum overall score (None keeps ours)
        """
        accepted = self.styles
        if styles is not None:
            accepted = frozenset(styles) if accepted is None else accepted & frozenset(styles)
        threshold = self.min_score if min_score is None else max(self.min_score, min_score)
        return CompatibilityScorer(styles=accepted, min_score=threshold)

    def score(self, placement: PatternPlacement, tiling: Tiling | None = None) -> Score:
        """
        Compute the score of a placement.

        Args:
            placement: The placement to score
            tiling: Tiling used for the pre/post target components (optional)

        Returns:
            The score, Score.ZERO if the placement is not acceptable
        """
        source = placement.source
        if self.styles is not None and source.style not in self.styles:
            return Score.ZERO

        if source.chords.time_signature != placement.chord_slice.time_signature:
            return Score.ZERO

        harmonic = self.harmonic_scores(placement)
        if not harmonic:
            return Score.ZERO

        first = placement.chord_slice.first_chord()
        assert first is not None
        transposability = source.transposability(first.symbol.root)

        pre_target = post_target = 0.0
        if tiling is not None:
            pre_target = self._pre_target(placement, tiling)
            post_target = self._post_target(placement, tiling)

        result = Score.of(sum(harmonic) / len(harmonic), transposability, pre_target, post_target)
        if result.overall < self.min_score:
            return Score.ZERO
        return result

    def harmonic_scores(self, placement: PatternPlacement) -> list[float]:
        """
        Per-chord harmonic compatibility values.

        Returns:
            One value in ]0, 100] per chord, or an empty list if the chord counts
            differ or one chord is incompatible
        """
        source = placement.source
        source_chords = source.chords.chords
        target_chords = placement.chord_slice.chords
        if len(source_chords) != len(target_chords):
            return []

        result = []
        for index, (src, target) in enumerate(zip(source_chords, target_chords)):
            played = [src.symbol.root.asc_interval(n.pitch_class) for n in source.chord_notes(index)]
            value = harmonic_compatibility(src.symbol.chord_type, played, target.symbol.chord_type)
            if value <= 0:
                logger.debug("%s incompatible with %s at chord %d", source.id, target.symbol, index)
                return []
            result.append(value)
        return result

    def _pre_target(self, placement: PatternPlacement, tiling: Tiling) -> float:
        previous = tiling.placement_at(placement.bar_range.start - 1)
        if previous is None or previous is placement:
            return 0.0
        return 100.0 if previous.adapted_target_pitch == placement.adapted_first_pitch else 0.0

    def _post_target(self, placement: PatternPlacement, tiling: Tiling) -> float:
        following = tiling.placement_at(placement.bar_range.end + 1)
        if following is None or following is placement:
            return 0.0
        target = placement.adapted_target_pitch
        return 100.0 if target is not None and target == following.adapted_first_pitch else 0.0
