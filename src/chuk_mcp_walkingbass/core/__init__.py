"""
Core music primitives.

These are the building blocks the bass engine composes on:
- PitchClass: The 12 chromatic pitch classes (0-11)
- ChordType: Interval sets defining chord types
- ChordSymbol: Concrete chord parsed from text ('Dm7', 'G7/B')
- TimeSignature: Beats per bar and beat unit
- BarRange: Inclusive range of bars
- NoteEvent / Phrase: Notes positioned in beats
- ChordSequence: Chords positioned by (bar, beat) with usable bars
"""

from chuk_mcp_walkingbass.core.chord import (
    ChordSymbol,
    ChordType,
    DegreeCompatibility,
    DegreeFamily,
    degree_compatibility,
    degree_family,
    harmonic_compatibility,
)
from chuk_mcp_walkingbass.core.chord_sequence import ChordEvent, ChordSequence
from chuk_mcp_walkingbass.core.phrase import NoteEvent, Phrase
from chuk_mcp_walkingbass.core.pitch import (
    BASS_EXTENDED_RANGE,
    BASS_GOOD_RANGE,
    BASS_IDEAL_CENTER,
    PitchClass,
    bass_pitch,
    in_range,
)
from chuk_mcp_walkingbass.core.rhythm import BarRange, TimeSignature

__all__ = [
    # Pitch
    "PitchClass",
    "BASS_GOOD_RANGE",
    "BASS_EXTENDED_RANGE",
    "BASS_IDEAL_CENTER",
    "bass_pitch",
    "in_range",
    # Chord
    "ChordType",
    "ChordSymbol",
    "DegreeFamily",
    "DegreeCompatibility",
    "degree_family",
    "degree_compatibility",
    "harmonic_compatibility",
    # Rhythm
    "TimeSignature",
    "BarRange",
    # Phrase
    "NoteEvent",
    "Phrase",
    # Sequence
    "ChordEvent",
    "ChordSequence",
]
