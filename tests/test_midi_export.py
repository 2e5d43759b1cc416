"""
MIDI export tests - the end of the pipeline.

If these tests pass, a generated bass line can be heard.
"""

from pathlib import Path

import pytest
from mido import MidiFile

from chuk_mcp_walkingbass.compiler.midi import (
    TICKS_PER_BEAT,
    MidiEvent,
    beats_to_ticks,
    events_to_midi,
    phrase_to_events,
    phrase_to_midi,
)
from chuk_mcp_walkingbass.core import ChordSequence, NoteEvent, Phrase, TimeSignature
from chuk_mcp_walkingbass.tiling import TilingEngine


class TestMidiEvent:
    """Test MidiEvent dataclass."""

    def test_defaults_to_bass_channel(self) -> None:
        """Events default to the bass channel."""
        event = MidiEvent(pitch=40, start_ticks=0, duration_ticks=480, velocity=80)
        assert event.channel == 1

    def test_event_validation(self) -> None:
        """MIDI ranges are validated."""
        with pytest.raises(ValueError, match="Pitch must be 0-127"):
            MidiEvent(pitch=128, start_ticks=0, duration_ticks=480, velocity=100)
        with pytest.raises(ValueError, match="Velocity must be 0-127"):
            MidiEvent(pitch=60, start_ticks=0, duration_ticks=480, velocity=128)
        with pytest.raises(ValueError, match="Channel must be 0-15"):
            MidiEvent(pitch=60, start_ticks=0, duration_ticks=480, velocity=100, channel=16)
        with pytest.raises(ValueError, match="Start ticks"):
            MidiEvent(pitch=60, start_ticks=-1, duration_ticks=480, velocity=100)


class TestPhraseToEvents:
    """Test phrase conversion."""

    def test_ticks(self) -> None:
        """Positions and durations become ticks."""
        phrase = Phrase([NoteEvent(0.0, 36), NoteEvent(1.5, 43, duration=0.5, velocity=90)])
        events = phrase_to_events(phrase)
        assert [(e.pitch, e.start_ticks, e.duration_ticks, e.velocity) for e in events] == [
            (36, 0, 480, 80),
            (43, 720, 240, 90),
        ]

    def test_beats_to_ticks(self) -> None:
        """Beat to tick conversion rounds to the nearest tick."""
        assert beats_to_ticks(0) == 0
        assert beats_to_ticks(1) == TICKS_PER_BEAT
        assert beats_to_ticks(0.5) == TICKS_PER_BEAT // 2
        assert beats_to_ticks(1 / 3) == 160


class TestEventsToMidi:
    """Test the events_to_midi function."""

    def test_empty_events(self) -> None:
        """Can create a MIDI file with no events."""
        mid = events_to_midi([])
        assert len(mid.tracks) == 1
        assert mid.ticks_per_beat == TICKS_PER_BEAT
        assert not [msg for msg in mid.tracks[0] if msg.type == "program_change"]

    def test_meta_messages(self) -> None:
        """Track name, tempo and time signature are written."""
        mid = events_to_midi([], tempo_bpm=140, time_signature=TimeSignature.WALTZ)
        track = mid.tracks[0]
        assert next(msg for msg in track if msg.type == "track_name").name == "Bass"
        assert next(msg for msg in track if msg.type == "set_tempo").tempo == int(60_000_000 / 140)
        signature = next(msg for msg in track if msg.type == "time_signature")
        assert (signature.numerator, signature.denominator) == (3, 4)

    def test_program_change(self) -> None:
        """The bass program is set on the channel used."""
        events = [MidiEvent(pitch=40, start_ticks=0, duration_ticks=480, velocity=80)]
        programs = [msg for msg in events_to_midi(events).tracks[0] if msg.type == "program_change"]
        assert [(msg.channel, msg.program) for msg in programs] == [(1, 32)]

    def test_legato_ordering(self) -> None:
        """A note_off comes before the note_on at the same tick."""
        events = [
            MidiEvent(pitch=40, start_ticks=480, duration_ticks=480, velocity=80),
            MidiEvent(pitch=36, start_ticks=0, duration_ticks=480, velocity=80),
        ]
        notes = [msg for msg in events_to_midi(events).tracks[0] if msg.type in ("note_on", "note_off")]
        assert [(msg.type, msg.note, msg.time) for msg in notes] == [
            ("note_on", 36, 0),
            ("note_off", 36, 480),
            ("note_on", 40, 0),
            ("note_off", 40, 480),
        ]


class TestPhraseToMidi:
    """Test exporting generated bass lines."""

    def test_save_and_reload(self, temp_midi_path: Path, library_database) -> None:
        """A generated bass line survives a save/load cycle."""
        result = TilingEngine(library_database).generate(ChordSequence.from_bars(["Dm7", "G7", "Cmaj7", "%"]))
        mid = phrase_to_midi(result.phrase, tempo_bpm=160)
        mid.save(str(temp_midi_path))

        loaded = MidiFile(str(temp_midi_path))
        note_ons = [msg for msg in loaded.tracks[0] if msg.type == "note_on" and msg.velocity > 0]
        assert len(note_ons) == len(result.phrase)
        assert [msg.note for msg in note_ons] == [n.pitch for n in result.phrase]
        assert loaded.ticks_per_beat == TICKS_PER_BEAT

    def test_deterministic(self, temp_dir: Path) -> None:
        """Same phrase, same bytes."""
        phrase = Phrase(NoteEvent(float(i), 36 + i) for i in range(8))
        first, second = temp_dir / "a.mid", temp_dir / "b.mid"
        phrase_to_midi(phrase).save(str(first))
        phrase_to_midi(phrase).save(str(second))
        assert first.read_bytes() == second.read_bytes()
