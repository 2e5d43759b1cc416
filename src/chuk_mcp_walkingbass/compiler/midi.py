"""
MIDI export - the end of the pipeline.

Converts a rendered bass Phrase to a MIDI file using mido.
All operations are deterministic: same phrase → same MIDI file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mido import Message, MetaMessage, MidiFile, MidiTrack

from chuk_mcp_walkingbass.constants import DEFAULT_BASS_CHANNEL, DEFAULT_BASS_PROGRAM, DEFAULT_TEMPO
from chuk_mcp_walkingbass.core.rhythm import TimeSignature

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chuk_mcp_walkingbass.core.phrase import Phrase


# Standard ticks per beat (quarter note)
TICKS_PER_BEAT = 480


@dataclass(frozen=True)
class MidiEvent:
    """
    A single MIDI note event.

    All times are in ticks (absolute from start of track).
    """

    pitch: int  # MIDI note number (0-127)
    start_ticks: int  # Absolute start time in ticks
    duration_ticks: int  # Duration in ticks
    velocity: int  # 0-127
    channel: int = DEFAULT_BASS_CHANNEL  # 0-15

    def __post_init__(self) -> None:
        """Validate MIDI ranges."""
        if not 0 <= self.pitch <= 127:
            raise ValueError(f"Pitch must be 0-127, got {self.pitch}")
        if not 0 <= self.velocity <= 127:
            raise ValueError(f"Velocity must be 0-127, got {self.velocity}")
        if not 0 <= self.channel <= 15:
            raise ValueError(f"Channel must be 0-15, got {self.channel}")
        if self.start_ticks < 0:
            raise ValueError(f"Start ticks must be >= 0, got {self.start_ticks}")
        if self.duration_ticks < 0:
            raise ValueError(f"Duration ticks must be >= 0, got {self.duration_ticks}")


def beats_to_ticks(beats: float, ticks_per_beat: int = TICKS_PER_BEAT) -> int:
    """Convert a beat position to ticks."""
    return round(beats * ticks_per_beat)


def phrase_to_events(
    phrase: Phrase,
    channel: int = DEFAULT_BASS_CHANNEL,
    ticks_per_beat: int = TICKS_PER_BEAT,
) -> list[MidiEvent]:
    """
    Convert a phrase to MIDI events.

    Args:
        phrase: Notes positioned in beats
        channel: MIDI channel (0-15)
        ticks_per_beat: Resolution

    Returns:
        One MidiEvent per note, in phrase order
    """
    return [
        MidiEvent(
            pitch=note.pitch,
            start_ticks=beats_to_ticks(note.position, ticks_per_beat),
            duration_ticks=beats_to_ticks(note.duration, ticks_per_beat),
            velocity=note.velocity,
            channel=channel,
        )
        for note in phrase
    ]


def events_to_midi(
    events: Sequence[MidiEvent],
    tempo_bpm: int = DEFAULT_TEMPO,
    ticks_per_beat: int = TICKS_PER_BEAT,
    time_signature: TimeSignature = TimeSignature.COMMON_TIME,
    program: int | None = DEFAULT_BASS_PROGRAM,
    track_name: str = "Bass",
) -> MidiFile:
    """
    Convert a sequence of MidiEvents to a single track MidiFile.

    Args:
        events: Sequence of MidiEvent objects
        tempo_bpm: Tempo in beats per minute
        ticks_per_beat: Resolution (default 480)
        time_signature: Written as a meta message
        program: GM program set on the channels used (None to skip)
        track_name: Name of the track

    Returns:
        A mido MidiFile ready to be saved
    """
    mid = MidiFile(ticks_per_beat=ticks_per_beat)
    track = MidiTrack()
    mid.tracks.append(track)

    track.append(MetaMessage("track_name", name=track_name, time=0))
    track.append(MetaMessage("set_tempo", tempo=int(60_000_000 / tempo_bpm), time=0))
    track.append(
        MetaMessage(
            "time_signature",
            numerator=time_signature.beats_per_bar,
            denominator=time_signature.beat_unit,
            time=0,
        )
    )
    if program is not None:
        for channel in sorted({e.channel for e in events}):
            track.append(Message("program_change", channel=channel, program=program, time=0))

    # (absolute ticks, message) pairs, converted to delta times below
    messages: list[tuple[int, Message]] = []
    for event in events:
        messages.append(
            (
                event.start_ticks,
                Message("note_on", channel=event.channel, note=event.pitch, velocity=event.velocity, time=0),
            )
        )
        messages.append(
            (
                event.start_ticks + event.duration_ticks,
                Message("note_off", channel=event.channel, note=event.pitch, velocity=0, time=0),
            )
        )

    # note_off before note_on at the same time for clean legato
    messages.sort(key=lambda x: (x[0], x[1].type != "note_off"))

    current_time = 0
    for abs_time, msg in messages:
        msg.time = abs_time - current_time
        track.append(msg)
        current_time = abs_time

    track.append(MetaMessage("end_of_track", time=0))
    return mid


def phrase_to_midi(
    phrase: Phrase,
    tempo_bpm: int = DEFAULT_TEMPO,
    time_signature: TimeSignature = TimeSignature.COMMON_TIME,
    channel: int = DEFAULT_BASS_CHANNEL,
    program: int | None = DEFAULT_BASS_PROGRAM,
) -> MidiFile:
    """
    Convert a bass phrase to a MidiFile.

    Example:
        result = engine.generate(sequence)
        phrase_to_midi(result.phrase, tempo_bpm=160).save("bass.mid")
    """
    events = phrase_to_events(phrase, channel=channel)
    return events_to_midi(events, tempo_bpm=tempo_bpm, time_signature=time_signature, program=program)
