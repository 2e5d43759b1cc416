"""
Pitch primitives - PitchClass and bass register helpers.

PitchClass represents the 12 chromatic pitches (octave-independent).
The register helpers describe where a bass line is comfortable to play.
"""

from __future__ import annotations

from enum import IntEnum

# Display name mappings (module level to avoid IntEnum member issues)
_SHARP_NAMES: list[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
_FLAT_NAMES: list[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Bass register (MIDI note numbers)
BASS_GOOD_RANGE: tuple[int, int] = (28, 55)  # E1 - G3
BASS_EXTENDED_RANGE: tuple[int, int] = (23, 64)  # B0 - E4
BASS_IDEAL_CENTER = 40  # E2


class PitchClass(IntEnum):
    """
    The 12 chromatic pitch classes (0-11).

    Octave-independent - C2 and C3 are both PitchClass.C.
    Enharmonic equivalents share the same value (C# == Db == 1).
    """

    C = 0
    Cs = 1  # C# / Db
    D = 2
    Ds = 3  # D# / Eb
    E = 4
    F = 5
    Fs = 6  # F# / Gb
    G = 7
    Gs = 8  # G# / Ab
    A = 9
    As = 10  # A# / Bb
    B = 11

    def transpose(self, semitones: int) -> PitchClass:
        """Transpose by a number of semitones (positive or negative)."""
        return PitchClass((self.value + semitones) % 12)

    def asc_interval(self, other: PitchClass) -> int:
        """Semitones going up from this pitch class to other (0-11)."""
        return (other.value - self.value) % 12

    def desc_interval(self, other: PitchClass) -> int:
        """Semitones going down from this pitch class to other (0-11)."""
        return (self.value - other.value) % 12

    def to_midi(self, octave: int = 2) -> int:
        """Convert to MIDI note number. C4 = 60, so C2 = 36."""
        return self.value + (octave + 1) * 12

    def spell(self, prefer_flats: bool = False) -> str:
        """Get human-readable name."""
        names = _FLAT_NAMES if prefer_flats else _SHARP_NAMES
        return names[self.value]

    @classmethod
    def from_midi(cls, midi_note: int) -> PitchClass:
        """Extract pitch class from MIDI note number."""
        return cls(midi_note % 12)

    @classmethod
    def parse(cls, name: str) -> PitchClass:
        """Parse a pitch class from a string like 'C', 'C#', 'Db'."""
        name = name.strip()

        if name in _SHARP_NAMES:
            return cls(_SHARP_NAMES.index(name))

        if name in _FLAT_NAMES:
            return cls(_FLAT_NAMES.index(name))

        # Enharmonic spellings not in the tables (Cb, E#, Fb, B#)
        if len(name) == 2 and name[0] in "ABCDEFG" and name[1] in "#b":
            base = cls.parse(name[0])
            return base.transpose(1 if name[1] == "#" else -1)

        raise ValueError(f"Unknown pitch class: {name}")


def in_range(pitch: int, pitch_range: tuple[int, int]) -> bool:
    """Check if a MIDI pitch lies within an inclusive (low, high) range."""
    return pitch_range[0] <= pitch <= pitch_range[1]


def bass_pitch(pitch_class: PitchClass, low: int = 28) -> int:
    """Lowest MIDI pitch of pitch_class which is >= low."""
    return low + (pitch_class.value - low) % 12
