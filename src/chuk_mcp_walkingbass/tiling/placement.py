"""
Placement primitives - Score and PatternPlacement.

A PatternPlacement is a source positioned on a bar range of the target chord
sequence, together with its compatibility score.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar

from chuk_mcp_walkingbass.core.chord_sequence import ChordSequence
from chuk_mcp_walkingbass.core.phrase import Phrase
from chuk_mcp_walkingbass.core.rhythm import BarRange
from chuk_mcp_walkingbass.database.source import PatternSource


@dataclass(frozen=True)
class Score:
    """
    Compatibility of a placement, each component in [0, 100].

    overall is always 0 when harmonic is 0.
    """

    harmonic: float = 0.0
    transposability: float = 0.0
    pre_target: float = 0.0  # Previous phrase targets our first note
    post_target: float = 0.0  # Our target note starts the next phrase
    overall: float = 0.0

    ZERO: ClassVar[Score]

    # Weights of the overall score
    HARMONIC_WEIGHT: ClassVar[float] = 0.6
    TRANSPOSABILITY_WEIGHT: ClassVar[float] = 0.3
    PRE_TARGET_WEIGHT: ClassVar[float] = 0.05
    POST_TARGET_WEIGHT: ClassVar[float] = 0.05

    @classmethod
    def of(
        cls,
        harmonic: float,
        transposability: float,
        pre_target: float = 0.0,
        post_target: float = 0.0,
    ) -> Score:
        """Create a score, computing overall from the components."""
        if harmonic <= 0:
            return cls.ZERO
        overall = (
            cls.HARMONIC_WEIGHT * harmonic
            + cls.TRANSPOSABILITY_WEIGHT * transposability
            + cls.PRE_TARGET_WEIGHT * pre_target
            + cls.POST_TARGET_WEIGHT * post_target
        )
        return cls(
            harmonic=harmonic,
            transposability=transposability,
            pre_target=pre_target,
            post_target=post_target,
            overall=round(min(100.0, max(0.0, overall)), 2),
        )

    def __bool__(self) -> bool:
        return self.overall > 0

    def __str__(self) -> str:
        return (
            f"{self.overall:g} (h={self.harmonic:g} t={self.transposability:g} "
            f"pre={self.pre_target:g} post={self.post_target:g})"
        )


Score.ZERO = Score()


@dataclass(frozen=True)
class PatternPlacement:
    """
    A source placed on a bar range of the target sequence.

    chord_slice is the target sub-sequence for bar_range, shifted to bar 0 so it
    aligns with the source chord sequence.
    """

    source: PatternSource
    bar_range: BarRange
    chord_slice: ChordSequence
    score: Score = Score.ZERO

    @property
    def size(self) -> int:
        """Number of bars covered."""
        return self.bar_range.size

    @property
    def start_bar(self) -> int:
        return self.bar_range.start

    @property
    def transposition(self) -> int:
        """Semitones applied to the source phrase."""
        first = self.chord_slice.first_chord()
        if first is None:
            return 0
        return self.source.required_transposition(first.symbol.root)

    @property
    def adapted_first_pitch(self) -> int:
        """First pitch of the placed phrase."""
        return self.source.first_note.pitch + self.transposition

    @property
    def adapted_target_pitch(self) -> int | None:
        """Target pitch of the placed phrase, if the source has one."""
        if self.source.target_note is None:
            return None
        return self.source.target_note + self.transposition

    def adapted_phrase(self, beat_offset: float = 0.0) -> Phrase:
        """The source phrase transposed to the target and moved by beat_offset."""
        return self.source.phrase.transposed(self.transposition).shifted(beat_offset)

    def with_score(self, score: Score) -> PatternPlacement:
        """Get a copy with another score."""
        return replace(self, score=score)

    def sort_key(self) -> tuple[float, str]:
        """Ranking key: best score first, then source id."""
        return (-self.score.overall, self.source.id)

    def __str__(self) -> str:
        return f"{self.bar_range} {self.source.id} score={self.score.overall:g}"
