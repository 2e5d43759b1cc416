"""
Pytest configuration and shared fixtures.
"""

import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from chuk_mcp_walkingbass.constants import BassStyle
from chuk_mcp_walkingbass.core import BarRange, ChordSequence, NoteEvent, Phrase, TimeSignature
from chuk_mcp_walkingbass.database import PatternSource
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.tiling import PatternPlacement

SourceFactory = Callable[..., PatternSource]


def build_source(
    source_id: str,
    bars: Sequence[str],
    pitches: Sequence[int],
    style: BassStyle = BassStyle.WALKING,
    target_note: int | None = None,
    time_signature: TimeSignature = TimeSignature.COMMON_TIME,
) -> PatternSource:
    """Build a source with one quarter note per pitch, starting at beat 0."""
    chords = ChordSequence.from_bars(bars, time_signature)
    phrase = Phrase(NoteEvent(float(i), pitch) for i, pitch in enumerate(pitches))
    return PatternSource(source_id, chords, phrase, style, target_note)


def build_placement(source: PatternSource, sequence: ChordSequence, start_bar: int = 0) -> PatternPlacement:
    """Place a source on sequence at start_bar, unscored."""
    bar_range = BarRange.of_size(start_bar, source.size)
    return PatternPlacement(source, bar_range, sequence.sub_sequence(bar_range, shift_to_zero=True))


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_midi_path(temp_dir: Path) -> Path:
    """Path for a temporary MIDI file."""
    return temp_dir / "test.mid"


@pytest.fixture
def make_source() -> SourceFactory:
    """Factory building sources from bar strings and pitches."""
    return build_source


@pytest.fixture
def make_placement() -> Callable[..., PatternPlacement]:
    """Factory placing a source on a chord sequence."""
    return build_placement


@pytest.fixture
def empty_database() -> PatternDatabase:
    """A database without library."""
    return PatternDatabase(library_path=None)


@pytest.fixture
def library_database() -> PatternDatabase:
    """A database loaded from the built-in library."""
    return PatternDatabase()
