"""
Fallback synthesizer - builds a bass source for a zone no source fits.

Two kinds of lines are produced:
- two chords per bar: root on the chord, then its third (or fourth) one beat
  later (half a chord in short bars), in the C2 octave
- anything else: a walk cycling through the chord tones, one note per beat,
  ending each chord on a chromatic approach to the next root
"""

from __future__ import annotations

import itertools
import logging
import threading

from chuk_mcp_walkingbass.constants import GENERATED_ID_PREFIX, BassStyle
from chuk_mcp_walkingbass.core.chord_sequence import ChordSequence
from chuk_mcp_walkingbass.core.phrase import NoteEvent, Phrase
from chuk_mcp_walkingbass.core.pitch import PitchClass, bass_pitch
from chuk_mcp_walkingbass.database.source import PatternSource

logger = logging.getLogger(__name__)

VELOCITY = 80
TWO_CHORDS_BASE_PITCH = 36  # C2
WALK_LOW_PITCH = 28  # E1, roots are placed in [28, 40)


class FallbackSynthesizer:
    """Creates generated pattern sources. Ids are unique per synthesizer."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def synthesize(self, zone_sequence: ChordSequence, target_pitch: int | None = None) -> PatternSource:
        """
        Create a source fitting a zone.

        Args:
            zone_sequence: Chords of the zone, starting at bar 0 with a chord on beat 0
            target_pitch: First pitch of the phrase following the zone, if known

        Returns:
            A generated source (style CUSTOM) whose chords are zone_sequence
        """
        if zone_sequence.is_two_chords_per_bar():
            phrase = self._two_chords_phrase(zone_sequence)
            prefix = f"{GENERATED_ID_PREFIX}2Chords"
        else:
            phrase = self._walk_phrase(zone_sequence, target_pitch)
            prefix = f"{GENERATED_ID_PREFIX}Default"

        with self._lock:
            source_id = f"{prefix}-{next(self._counter)}"

        logger.debug("Synthesized %s for %s", source_id, zone_sequence)
        return PatternSource(
            id=source_id,
            chords=zone_sequence,
            phrase=phrase,
            style=BassStyle.CUSTOM,
            target_note=target_pitch,
        )

    def _two_chords_phrase(self, sequence: ChordSequence) -> Phrase:
        notes = []
        for index, chord in enumerate(sequence.chords):
            start, end = sequence.chord_span(index)
            # One beat, or half the chord when it lasts less than two beats
            step = min(1.0, (end - start) / 2)
            root = TWO_CHORDS_BASE_PITCH + chord.symbol.root.value
            third = chord.symbol.chord_type.third_or_fourth or 7
            notes.append(NoteEvent(start, root, step, VELOCITY))
            notes.append(NoteEvent(start + step, root + third, step, VELOCITY))
        return Phrase(notes)

    def _walk_phrase(self, sequence: ChordSequence, target_pitch: int | None) -> Phrase:
        notes = []
        chords = sequence.chords
        for index, chord in enumerate(chords):
            start, end = sequence.chord_span(index)
            root = bass_pitch(chord.symbol.root, WALK_LOW_PITCH)
            tones = [root + interval for interval in chord.symbol.chord_type.intervals]

            approach = None
            if index + 1 < len(chords):
                approach = _approach_pitch(chords[index + 1].symbol.root)
            elif target_pitch is not None:
                approach = max(0, target_pitch - 1)

            positions = []
            position = start
            while position < end:
                positions.append(position)
                position += 1

            for beat, position in enumerate(positions):
                pitch = tones[beat % len(tones)]
                if approach is not None and beat == len(positions) - 1 and beat > 0:
                    pitch = approach
                duration = min(1.0, end - position)
                notes.append(NoteEvent(position, pitch, duration, VELOCITY))
        return Phrase(notes)


def _approach_pitch(next_root: PitchClass) -> int:
    """Half step below the next root."""
    return bass_pitch(next_root, WALK_LOW_PITCH) - 1
