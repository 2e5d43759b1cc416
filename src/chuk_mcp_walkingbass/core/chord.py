"""
Chord primitives - ChordType, ChordSymbol and degree compatibility.

Chord types are interval sets measured from the root. A ChordSymbol is a
concrete chord (root + type + optional slash bass) parsed from text such as
'Dm7', 'Bbmaj7' or 'G7/B'.

The degree compatibility helpers answer the one question the bass engine asks
of chord theory: can notes played over one chord be reused over another?
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .pitch import PitchClass


class DegreeFamily(str, Enum):
    """Chord degree slot an interval belongs to."""

    ROOT = "root"
    NINTH = "ninth"
    THIRD = "third"
    FOURTH = "fourth"
    FIFTH = "fifth"
    SEVENTH = "seventh"  # Includes the sixth (and the diminished 7th)


_FAMILY_BY_SEMITONE: dict[int, DegreeFamily] = {
    0: DegreeFamily.ROOT,
    1: DegreeFamily.NINTH,
    2: DegreeFamily.NINTH,
    3: DegreeFamily.THIRD,
    4: DegreeFamily.THIRD,
    5: DegreeFamily.FOURTH,
    6: DegreeFamily.FIFTH,
    7: DegreeFamily.FIFTH,
    8: DegreeFamily.FIFTH,
    9: DegreeFamily.SEVENTH,
    10: DegreeFamily.SEVENTH,
    11: DegreeFamily.SEVENTH,
}


def degree_family(semitones: int) -> DegreeFamily:
    """Get the degree family of an interval (any octave)."""
    return _FAMILY_BY_SEMITONE[semitones % 12]


class DegreeCompatibility(str, Enum):
    """How a source phrase relates to one degree of a target chord."""

    COMPATIBLE_USE = "compatible_use"  # Degree is played
    COMPATIBLE_NO_USE = "compatible_no_use"  # Degree is not played, no conflict
    INCOMPATIBLE = "incompatible"  # Another interval of the same family is played


@dataclass(frozen=True)
class ChordType:
    """
    A chord type defined by its intervals from the root (0-11).

    Immutable and hashable.
    """

    name: str
    intervals: tuple[int, ...]

    # Lookup table built after class definition
    BY_SUFFIX: ClassVar[dict[str, ChordType]]
    MAJOR: ClassVar[ChordType]

    @property
    def nb_degrees(self) -> int:
        """Number of chord degrees."""
        return len(self.intervals)

    @property
    def third_or_fourth(self) -> int:
        """The third (or the fourth of a sus chord, or the second of sus2)."""
        for semitones in (4, 3, 5, 2):
            if semitones in self.intervals:
                return semitones
        return 0

    @property
    def seventh(self) -> int | None:
        """The sixth/seventh degree, if any."""
        for semitones in self.intervals:
            if degree_family(semitones) == DegreeFamily.SEVENTH:
                return semitones
        return None

    def is_sixth_seventh_equivalent(self, other: ChordType) -> bool:
        """
        True for C6 vs Cmaj7 style pairs.

        A walking line over a 6 chord generally works over a maj7 chord with
        the same triad, and vice versa.
        """
        if self.intervals == other.intervals:
            return False
        triad = {i for i in self.intervals if degree_family(i) != DegreeFamily.SEVENTH}
        other_triad = {i for i in other.intervals if degree_family(i) != DegreeFamily.SEVENTH}
        return (
            triad == other_triad
            and {self.seventh, other.seventh} == {9, 11}
            and self.nb_degrees == other.nb_degrees
        )

    def __str__(self) -> str:
        return self.name


_CHORD_TYPES: list[tuple[str, tuple[int, ...], tuple[str, ...]]] = [
    ("major", (0, 4, 7), ("", "M", "maj")),
    ("minor", (0, 3, 7), ("m", "-", "min")),
    ("diminished", (0, 3, 6), ("dim", "°")),
    ("augmented", (0, 4, 8), ("aug", "+")),
    ("sus2", (0, 2, 7), ("sus2",)),
    ("sus4", (0, 5, 7), ("sus4", "sus")),
    ("6", (0, 4, 7, 9), ("6",)),
    ("minor 6", (0, 3, 7, 9), ("m6", "-6")),
    ("major 7", (0, 4, 7, 11), ("maj7", "M7", "Δ", "Δ7", "j7")),
    ("minor 7", (0, 3, 7, 10), ("m7", "-7", "min7")),
    ("dominant 7", (0, 4, 7, 10), ("7",)),
    ("minor major 7", (0, 3, 7, 11), ("mmaj7", "m(maj7)", "-Δ7")),
    ("half-diminished 7", (0, 3, 6, 10), ("m7b5", "ø", "ø7", "-7b5")),
    ("diminished 7", (0, 3, 6, 9), ("dim7", "°7")),
    ("7sus4", (0, 5, 7, 10), ("7sus4", "7sus")),
    ("augmented 7", (0, 4, 8, 10), ("7#5", "aug7", "+7")),
    ("dominant 9", (0, 2, 4, 7, 10), ("9",)),
    ("major 9", (0, 2, 4, 7, 11), ("maj9", "M9")),
    ("minor 9", (0, 2, 3, 7, 10), ("m9", "-9")),
    ("6/9", (0, 2, 4, 7, 9), ("69", "6/9")),
    ("dominant 7b9", (0, 1, 4, 7, 10), ("7b9",)),
]

ChordType.BY_SUFFIX = {}
for _name, _intervals, _suffixes in _CHORD_TYPES:
    _chord_type = ChordType(_name, _intervals)
    for _suffix in _suffixes:
        ChordType.BY_SUFFIX[_suffix] = _chord_type
ChordType.MAJOR = ChordType.BY_SUFFIX[""]


@dataclass(frozen=True)
class ChordSymbol:
    """
    A concrete chord: root, chord type and optional slash bass.

    Parse from text with ChordSymbol.parse('Bbmaj7').
    """

    root: PitchClass
    chord_type: ChordType
    bass: PitchClass | None = None
    suffix: str = ""

    @property
    def bass_note(self) -> PitchClass:
        """The bass note (slash bass or root)."""
        return self.bass if self.bass is not None else self.root

    def pitch_classes(self) -> list[PitchClass]:
        """Pitch classes of the chord, ordered by interval."""
        return [self.root.transpose(i) for i in self.chord_type.intervals]

    def contains(self, pitch_class: PitchClass) -> bool:
        """Check if a pitch class is a chord tone (or the slash bass)."""
        return pitch_class in self.pitch_classes() or pitch_class == self.bass_note

    @classmethod
    def parse(cls, text: str) -> ChordSymbol:
        """
        Parse a chord symbol like 'C', 'F#m7', 'Bbmaj7', 'G7/B'.

        Raises:
            ValueError: If the root or the chord type is unknown
        """
        text = text.strip()
        if not text:
            raise ValueError("Empty chord symbol")

        body, _, bass_text = text.partition("/")
        # '6/9' is a chord type, not a slash chord
        if bass_text == "9" and body.endswith("6"):
            body, bass_text = text, ""

        root_len = 2 if len(body) > 1 and body[1] in "#b" else 1
        root = PitchClass.parse(body[:root_len])
        suffix = body[root_len:]

        chord_type = ChordType.BY_SUFFIX.get(suffix)
        if chord_type is None:
            raise ValueError(f"Unknown chord type '{suffix}' in chord symbol '{text}'")

        bass = PitchClass.parse(bass_text) if bass_text else None
        return cls(root, chord_type, bass, suffix)

    def __str__(self) -> str:
        result = f"{self.root.spell(prefer_flats=True)}{self.suffix}"
        if self.bass is not None and self.bass != self.root:
            result += f"/{self.bass.spell(prefer_flats=True)}"
        return result


def degree_compatibility(played: Iterable[int], target_interval: int) -> DegreeCompatibility:
    """
    Check one target chord degree against the intervals actually played.

    Args:
        played: Intervals (relative to the chord root, any octave) of the notes played
        target_interval: The target degree interval (0-11)

    Returns:
        The degree compatibility
    """
    family = degree_family(target_interval)
    used = {i % 12 for i in played}
    if any(degree_family(i) == family and i != target_interval for i in used):
        return DegreeCompatibility.INCOMPATIBLE
    if target_interval in used:
        return DegreeCompatibility.COMPATIBLE_USE
    return DegreeCompatibility.COMPATIBLE_NO_USE


def harmonic_compatibility(
    source_type: ChordType, played: Iterable[int], target_type: ChordType
) -> float:
    """
    Score how well notes played over source_type fit target_type.

    Returns:
        A value in [0, 100]. 0 means incompatible.
    """
    if source_type.is_sixth_seventh_equivalent(target_type):
        return 100.0

    if source_type.nb_degrees > target_type.nb_degrees:
        return 0.0

    played = list(played)
    score = 100.0
    for interval in target_type.intervals:
        compatibility = degree_compatibility(played, interval)
        if compatibility == DegreeCompatibility.INCOMPATIBLE:
            return 0.0
        if compatibility == DegreeCompatibility.COMPATIBLE_NO_USE:
            # Slight penalty when a degree is absent, a bit more for the root
            score -= 15 if interval == 0 else 10

    return max(score, 0.0)
