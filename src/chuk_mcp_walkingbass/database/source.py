"""
PatternSource - a recorded bass fragment of 1 to 4 bars.

A source carries its own zero-based chord sequence and the phrase played over
it. It can be transposed so that its first chord root matches any target root;
transposability() scores how well the phrase survives that transposition in
terms of bass register.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field

from chuk_mcp_walkingbass.constants import (
    GENERATED_ID_PREFIX,
    MAX_SOURCE_SIZE,
    MIN_SOURCE_SIZE,
    BassStyle,
)
from chuk_mcp_walkingbass.core.chord_sequence import ChordSequence
from chuk_mcp_walkingbass.core.phrase import NoteEvent, Phrase
from chuk_mcp_walkingbass.core.pitch import (
    BASS_EXTENDED_RANGE,
    BASS_GOOD_RANGE,
    BASS_IDEAL_CENTER,
    PitchClass,
    in_range,
)

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class _RegisterCount:
    """Notes of a transposed phrase per bass register."""

    good: int
    extended: int
    outside: int

    @classmethod
    def of(cls, pitches: list[int]) -> _RegisterCount:
        good = sum(1 for p in pitches if in_range(p, BASS_GOOD_RANGE))
        extended = sum(
            1 for p in pitches if not in_range(p, BASS_GOOD_RANGE) and in_range(p, BASS_EXTENDED_RANGE)
        )
        return cls(good, extended, len(pitches) - good - extended)


@dataclass(frozen=True, eq=False)
class PatternSource:
    """
    A recorded bass phrase over a zero-based chord sequence.

    Sources are equal when their ids are equal.
    """

    id: str
    chords: ChordSequence
    phrase: Phrase
    style: BassStyle = BassStyle.WALKING
    target_note: int | None = None  # Pitch the next phrase should start on

    # Per destination root: (score, transposition)
    _transpositions: dict[PitchClass, tuple[int, int]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate the source."""
        if not self.id:
            raise ValueError("Source id must not be empty")
        if self.chords.bar_range.start != 0:
            raise ValueError(f"Source '{self.id}' chord sequence must start at bar 0")
        if not MIN_SOURCE_SIZE <= self.size <= MAX_SOURCE_SIZE:
            raise ValueError(
                f"Source '{self.id}' size must be {MIN_SOURCE_SIZE}-{MAX_SOURCE_SIZE} bars, got {self.size}"
            )
        first = self.chords.first_chord()
        if first is None or (first.bar, first.beat) != (0, 0.0):
            raise ValueError(f"Source '{self.id}' must have a chord at bar 0 beat 0")
        if not self.phrase:
            raise ValueError(f"Source '{self.id}' phrase is empty")
        length = self.size * self.chords.time_signature.beats_per_bar
        if any(n.position >= length for n in self.phrase):
            raise ValueError(f"Source '{self.id}' has notes beyond its {self.size} bars")
        if self.target_note is not None and not 0 <= self.target_note <= 127:
            raise ValueError(f"Source '{self.id}' target note must be 0-127")

    # --- Properties ---

    @property
    def size(self) -> int:
        """Number of bars."""
        return self.chords.bar_range.size

    @property
    def root_profile(self) -> str:
        """Root profile of the source chord sequence."""
        return self.chords.root_profile()

    @property
    def first_root(self) -> PitchClass:
        """Root of the first chord."""
        first = self.chords.first_chord()
        assert first is not None
        return first.symbol.root

    @property
    def first_note(self) -> NoteEvent:
        """First note of the phrase."""
        first = self.phrase.first()
        assert first is not None
        return first

    @property
    def is_generated(self) -> bool:
        """True for sources created by the fallback synthesizer."""
        return self.id.startswith(GENERATED_ID_PREFIX)

    def is_equivalent(self, other: PatternSource) -> bool:
        """Check if two sources hold the same chords and phrase (ids ignored)."""
        return (
            self.chords == other.chords
            and self.phrase == other.phrase
            and self.target_note == other.target_note
        )

    def chord_notes(self, index: int) -> list[NoteEvent]:
        """
        Notes played over chord number index, approach note excluded.

        The approach note is the last note of the chord span when the span holds
        more than one note: it usually targets the next chord, not this one.
        """
        start, end = self.chords.chord_span(index)
        notes = self.phrase.notes_between(start, end)
        return notes[:-1] if len(notes) > 1 else notes

    # --- Transposition ---

    def transposability(self, root: PitchClass) -> int:
        """
        Score how well the phrase keeps a bass register when moved to root.

        The phrase is transposed so that its first chord root becomes root,
        choosing between up and down the direction with the fewest notes out of
        the bass ranges. Results are cached per destination root.

        Args:
            root: Destination root of the first chord

        Returns:
            Score in [0, 100], below 50 if a note leaves the extended bass range
        """
        return self._transposition_for(root)[0]

    def required_transposition(self, root: PitchClass) -> int:
        """Semitones to add to the phrase so the first chord root becomes root."""
        return self._transposition_for(root)[1]

    def _transposition_for(self, root: PitchClass) -> tuple[int, int]:
        with self._lock:
            cached = self._transpositions.get(root)
        if cached is not None:
            return cached

        result = self._compute_transposition(root)
        with self._lock:
            self._transpositions[root] = result
        return result

    def _compute_transposition(self, root: PitchClass) -> tuple[int, int]:
        if root == self.first_root:
            return 100, 0

        pitches = [n.pitch for n in self.phrase]
        average = _round_half_up(sum(pitches) / len(pitches))

        up = self.first_root.asc_interval(root)
        down = self.first_root.desc_interval(root)
        count_up = _RegisterCount.of([p + up for p in pitches])
        count_down = _RegisterCount.of([p - down for p in pitches])

        if count_up.outside != count_down.outside:
            use_down = count_down.outside < count_up.outside
        elif count_up.extended != count_down.extended:
            use_down = count_down.extended < count_up.extended
        else:
            use_down = abs(average - down - BASS_IDEAL_CENTER) < abs(average + up - BASS_IDEAL_CENTER)

        count = count_down if use_down else count_up
        transposition = -down if use_down else up

        distance = min(11, abs(average + transposition - BASS_IDEAL_CENTER))
        good_to_outside = count.good / (count.good + count.outside) if count.good + count.outside else 0.0
        good_to_extended = count.good / (count.good + count.extended) if count.good + count.extended else 0.0
        factor = 0.49 if count.outside > 0 else 1.0
        score = _round_half_up(
            factor * (60 * good_to_outside + 20 * good_to_extended + 20 * (11 - distance) / 11)
        )

        logger.debug(
            "Transposability of %s to %s: transposition=%d score=%d %s",
            self.id,
            root.spell(),
            transposition,
            score,
            count,
        )
        return score, transposition

    # --- Dunder ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PatternSource):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return f"{self.id} ({self.style.value}, {self.size} bars) {self.chords}"
