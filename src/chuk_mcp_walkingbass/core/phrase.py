"""
Phrase primitives - NoteEvent and Phrase.

A Phrase is an immutable, position-ordered sequence of note events.
Positions and durations are in beats.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .pitch import PitchClass


@dataclass(frozen=True, order=True)
class NoteEvent:
    """
    A single note.

    Ordered by: (position, pitch) for deterministic sorting.
    """

    position: float  # In beats
    pitch: int  # MIDI note number (0-127)
    duration: float = 1.0  # In beats
    velocity: int = 80  # 1-127

    def __post_init__(self) -> None:
        """Validate MIDI ranges."""
        if not 0 <= self.pitch <= 127:
            raise ValueError(f"Pitch must be 0-127, got {self.pitch}")
        if not 1 <= self.velocity <= 127:
            raise ValueError(f"Velocity must be 1-127, got {self.velocity}")
        if self.position < 0:
            raise ValueError(f"Position must be >= 0, got {self.position}")
        if self.duration <= 0:
            raise ValueError(f"Duration must be positive, got {self.duration}")

    @property
    def pitch_class(self) -> PitchClass:
        """Pitch class of the note."""
        return PitchClass.from_midi(self.pitch)

    @property
    def end(self) -> float:
        """Position where the note stops."""
        return self.position + self.duration

    def moved(self, beats: float = 0.0, semitones: int = 0) -> NoteEvent:
        """Get a copy shifted in time and/or pitch."""
        return NoteEvent(
            position=self.position + beats,
            pitch=self.pitch + semitones,
            duration=self.duration,
            velocity=self.velocity,
        )


class Phrase:
    """
    An ordered, immutable sequence of NoteEvents.
    """

    __slots__ = ("_notes",)

    def __init__(self, notes: Iterable[NoteEvent] = ()) -> None:
        self._notes: tuple[NoteEvent, ...] = tuple(sorted(notes))

    @property
    def notes(self) -> tuple[NoteEvent, ...]:
        """The notes, ordered by position."""
        return self._notes

    def first(self) -> NoteEvent | None:
        """The first note, or None for an empty phrase."""
        return self._notes[0] if self._notes else None

    def last(self) -> NoteEvent | None:
        """The last note, or None for an empty phrase."""
        return self._notes[-1] if self._notes else None

    def notes_between(self, start: float, end: float) -> list[NoteEvent]:
        """Notes starting in [start, end)."""
        return [n for n in self._notes if start <= n.position < end]

    def transposed(self, semitones: int) -> Phrase:
        """Get a transposed copy."""
        if semitones == 0:
            return self
        return Phrase(n.moved(semitones=semitones) for n in self._notes)

    def shifted(self, beats: float) -> Phrase:
        """Get a copy moved in time."""
        if beats == 0:
            return self
        return Phrase(n.moved(beats=beats) for n in self._notes)

    def merged(self, other: Phrase) -> Phrase:
        """Get a phrase containing the notes of both phrases."""
        return Phrase(self._notes + other._notes)

    def average_pitch(self) -> float:
        """Average MIDI pitch (0 for an empty phrase)."""
        if not self._notes:
            return 0.0
        return sum(n.pitch for n in self._notes) / len(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[NoteEvent]:
        return iter(self._notes)

    def __bool__(self) -> bool:
        return bool(self._notes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Phrase):
            return NotImplemented
        return self._notes == other._notes

    def __hash__(self) -> int:
        return hash(self._notes)

    def __repr__(self) -> str:
        return f"Phrase({len(self._notes)} notes)"
