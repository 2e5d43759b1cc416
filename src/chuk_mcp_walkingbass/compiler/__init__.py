"""
Compilation pipeline - transforms a bass phrase to MIDI.

The pipeline:
    Phrase (notes in beats)
    → MidiEvent list (ticks, channel)
    → MIDI File
"""

from chuk_mcp_walkingbass.compiler.midi import (
    TICKS_PER_BEAT,
    MidiEvent,
    beats_to_ticks,
    events_to_midi,
    phrase_to_events,
    phrase_to_midi,
)

__all__ = [
    "TICKS_PER_BEAT",
    "MidiEvent",
    "beats_to_ticks",
    "events_to_midi",
    "phrase_to_events",
    "phrase_to_midi",
]
