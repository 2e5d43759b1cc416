"""
ChordSequence - the harmonic input of the bass engine.

A ChordSequence is an immutable list of chords positioned by (bar, beat) over
a bar range, plus the set of "usable" bars: bars whose harmonic content is
stable enough to be matched against recorded bass patterns.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from .chord import ChordSymbol
from .rhythm import BarRange, TimeSignature


@dataclass(frozen=True, order=True)
class ChordEvent:
    """A chord symbol at a (bar, beat) position."""

    bar: int
    beat: float
    symbol: ChordSymbol = field(compare=False)

    def shifted(self, bar_offset: int) -> ChordEvent:
        """Get a copy moved by bar_offset bars."""
        return ChordEvent(self.bar + bar_offset, self.beat, self.symbol)

    def __str__(self) -> str:
        return f"{self.symbol}({self.bar}:{self.beat:g})"


class ChordSequence:
    """
    Ordered chord symbols over a bar range, with usable bars.

    Bars before the first chord are never usable (pickup bars).
    Immutable once built.
    """

    def __init__(
        self,
        chords: Iterable[ChordEvent],
        bar_range: BarRange,
        time_signature: TimeSignature = TimeSignature.COMMON_TIME,
        usable_bars: Iterable[int] | None = None,
    ):
        """
        Initialize a chord sequence.

        Args:
            chords: Chord events, any order
            bar_range: Bars covered by the sequence
            time_signature: Time signature of every bar
            usable_bars: Usable bars (default: every bar from the first chord on)

        Raises:
            ValueError: If a chord is outside the bar range or two chords share a position
        """
        self._chords: tuple[ChordEvent, ...] = tuple(sorted(chords))
        self._bar_range = bar_range
        self._time_signature = time_signature

        positions = set()
        for chord in self._chords:
            if not bar_range.contains(chord.bar):
                raise ValueError(f"Chord {chord} is outside bar range {bar_range}")
            if not 0 <= chord.beat < time_signature.beats_per_bar:
                raise ValueError(f"Chord {chord} has an invalid beat for {time_signature}")
            if (chord.bar, chord.beat) in positions:
                raise ValueError(f"Two chords at the same position: {chord}")
            positions.add((chord.bar, chord.beat))

        first_bar = self._chords[0].bar if self._chords else bar_range.end + 1
        candidates = bar_range.bars() if usable_bars is None else usable_bars
        self._usable_bars: frozenset[int] = frozenset(
            b for b in candidates if bar_range.contains(b) and b >= first_bar
        )

    # --- Construction helpers ---

    @classmethod
    def from_bars(
        cls,
        bars: Sequence[str],
        time_signature: TimeSignature = TimeSignature.COMMON_TIME,
        start_bar: int = 0,
    ) -> ChordSequence:
        """
        Build a sequence from one string per bar.

        Chords in a bar are separated by spaces and spread evenly across the bar.
        '%' repeats the previous bar's chords, '_' marks an unusable bar which keeps
        the previous harmony.

        Example:
            ChordSequence.from_bars(["Dm7 G7", "Cmaj7", "%", "A7"])
        """
        if not bars:
            raise ValueError("At least one bar is required")

        chords: list[ChordEvent] = []
        unusable: set[int] = set()
        previous: list[str] = []
        for index, text in enumerate(bars):
            bar = start_bar + index
            tokens = text.split()
            if tokens == ["_"]:
                unusable.add(bar)
                continue
            if tokens == ["%"]:
                tokens = previous
            if not tokens:
                raise ValueError(f"Bar {bar} has no chord")
            step = time_signature.beats_per_bar / len(tokens)
            for i, token in enumerate(tokens):
                chords.append(ChordEvent(bar, i * step, ChordSymbol.parse(token)))
            previous = tokens

        bar_range = BarRange(start_bar, start_bar + len(bars) - 1)
        usable = [b for b in bar_range.bars() if b not in unusable]
        return cls(chords, bar_range, time_signature, usable)

    # --- Accessors ---

    @property
    def chords(self) -> tuple[ChordEvent, ...]:
        """Chord events ordered by position."""
        return self._chords

    @property
    def bar_range(self) -> BarRange:
        """The bars covered by this sequence."""
        return self._bar_range

    @property
    def time_signature(self) -> TimeSignature:
        """The time signature of every bar."""
        return self._time_signature

    @property
    def usable_bars(self) -> list[int]:
        """Usable bars in ascending order."""
        return sorted(self._usable_bars)

    def first_chord(self) -> ChordEvent | None:
        """The first chord event, or None if empty."""
        return self._chords[0] if self._chords else None

    def is_usable(self, bar_or_range: int | BarRange) -> bool:
        """Check if a bar, or every bar of a range, is usable."""
        if isinstance(bar_or_range, BarRange):
            return all(b in self._usable_bars for b in bar_or_range.bars())
        return bar_or_range in self._usable_bars

    def position_in_beats(self, chord: ChordEvent) -> float:
        """Position of a chord in beats from the start of the sequence."""
        return (chord.bar - self._bar_range.start) * self._time_signature.beats_per_bar + chord.beat

    def chord_span(self, index: int) -> tuple[float, float]:
        """
        The beat span [start, end) during which chord number index is active.

        Positions are relative to the start of the sequence.
        """
        start = self.position_in_beats(self._chords[index])
        if index + 1 < len(self._chords):
            end = self.position_in_beats(self._chords[index + 1])
        else:
            end = float(self._bar_range.size * self._time_signature.beats_per_bar)
        return start, end

    def chord_at(self, bar: int, beat: float = 0.0) -> ChordEvent | None:
        """Get the chord active at (bar, beat), or None before the first chord."""
        result = None
        for chord in self._chords:
            if (chord.bar, chord.beat) <= (bar, beat):
                result = chord
            else:
                break
        return result

    def chords_in(self, bar_range: BarRange) -> list[ChordEvent]:
        """Chord events located in bar_range."""
        return [c for c in self._chords if bar_range.contains(c.bar)]

    # --- Derived sequences ---

    def sub_sequence(self, bar_range: BarRange, shift_to_zero: bool = False) -> ChordSequence:
        """
        Extract the part of this sequence covering bar_range.

        If no chord starts the range, the chord active at that point is copied at
        the range start.

        Args:
            bar_range: Must be inside this sequence's bar range
            shift_to_zero: If True, the returned sequence starts at bar 0
        """
        if not self._bar_range.contains(bar_range):
            raise ValueError(f"{bar_range} is not inside {self._bar_range}")

        chords = self.chords_in(bar_range)
        if not chords or (chords[0].bar, chords[0].beat) != (bar_range.start, 0.0):
            active = self.chord_at(bar_range.start, 0.0)
            if active is not None:
                chords.insert(0, ChordEvent(bar_range.start, 0.0, active.symbol))

        usable = [b for b in bar_range.bars() if b in self._usable_bars]
        result = ChordSequence(chords, bar_range, self._time_signature, usable)
        return result.shifted(-bar_range.start) if shift_to_zero else result

    def shifted(self, bar_offset: int) -> ChordSequence:
        """Get a copy moved by bar_offset bars."""
        if bar_offset == 0:
            return self
        return ChordSequence(
            [c.shifted(bar_offset) for c in self._chords],
            self._bar_range.shifted(bar_offset),
            self._time_signature,
            [b + bar_offset for b in self._usable_bars],
        )

    def merge(self, other: ChordSequence) -> ChordSequence:
        """
        Merge two sequences with disjoint bar ranges.

        Bars between the two ranges are not usable and carry no chord.

        Raises:
            ValueError: If the bar ranges intersect or time signatures differ
        """
        if self._bar_range.intersects(other._bar_range):
            raise ValueError(f"Can not merge intersecting ranges {self._bar_range} and {other._bar_range}")
        if self._time_signature != other._time_signature:
            raise ValueError("Can not merge sequences with different time signatures")

        bar_range = BarRange(
            min(self._bar_range.start, other._bar_range.start),
            max(self._bar_range.end, other._bar_range.end),
        )
        return ChordSequence(
            self._chords + other._chords,
            bar_range,
            self._time_signature,
            self._usable_bars | other._usable_bars,
        )

    # --- Harmonic analysis ---

    def root_profile(self, bar_range: BarRange | None = None) -> str:
        """
        Transposition-independent summary of the chord roots over bar_range.

        Each chord contributes '<interval>@<beat>': its root distance in semitones
        (ascending, 0-11) from the first chord root, and its position in beats from
        the start of the range.

        Example: 'Dm7 | G7' gives '0@0 5@4'.
        """
        seq = self if bar_range is None else self.sub_sequence(bar_range)
        if not seq._chords:
            return ""
        first_root = seq._chords[0].symbol.root
        parts = []
        for chord in seq._chords:
            interval = first_root.asc_interval(chord.symbol.root)
            parts.append(f"{interval}@{seq.position_in_beats(chord):g}")
        return " ".join(parts)

    def is_two_chords_per_bar(self, tolerance: float = 0.25) -> bool:
        """
        Check if every bar holds exactly two chords, on the bar start and mid-bar.

        Args:
            tolerance: Accepted distance in beats from the expected positions
        """
        if not self._chords:
            return False
        half = self._time_signature.half_bar
        for bar in self._bar_range.bars():
            beats = [c.beat for c in self._chords if c.bar == bar]
            if len(beats) != 2:
                return False
            if beats[0] > tolerance or abs(beats[1] - half) > tolerance:
                return False
        return True

    # --- Dunder ---

    def __len__(self) -> int:
        return len(self._chords)

    def __iter__(self) -> Iterator[ChordEvent]:
        return iter(self._chords)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChordSequence):
            return NotImplemented
        return (
            self._chords == other._chords
            and self._bar_range == other._bar_range
            and self._time_signature == other._time_signature
            and self._usable_bars == other._usable_bars
            and [c.symbol for c in self._chords] == [c.symbol for c in other._chords]
        )

    def __hash__(self) -> int:
        return hash((self._chords, self._bar_range, self._usable_bars))

    def __str__(self) -> str:
        return f"{self._bar_range} " + " ".join(str(c) for c in self._chords)

    def __repr__(self) -> str:
        return f"ChordSequence({self})"
