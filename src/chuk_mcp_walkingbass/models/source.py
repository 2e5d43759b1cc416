"""
Pattern source models - the YAML/JSON face of PatternSource.

These models validate library files and MCP tool input, then convert to the
engine's immutable PatternSource.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from chuk_mcp_walkingbass.constants import BassStyle
from chuk_mcp_walkingbass.core.chord import ChordSymbol
from chuk_mcp_walkingbass.core.chord_sequence import ChordEvent, ChordSequence
from chuk_mcp_walkingbass.core.phrase import NoteEvent, Phrase
from chuk_mcp_walkingbass.core.rhythm import BarRange, TimeSignature
from chuk_mcp_walkingbass.database.source import PatternSource


class ChordEntry(BaseModel):
    """A chord symbol at a (bar, beat) position."""

    bar: int = Field(0, ge=0, le=3, description="Bar index within the source (0-3)")
    beat: float = Field(0.0, ge=0, description="Beat position within the bar")
    symbol: str = Field(..., description="Chord symbol, e.g. 'Dm7' or 'G7/B'")

    model_config = {"frozen": True}

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        """Validate chord symbol format."""
        ChordSymbol.parse(v)
        return v


class NoteEntry(BaseModel):
    """A note of a source phrase."""

    pitch: int = Field(..., ge=0, le=127, description="MIDI note number")
    position: float = Field(..., ge=0, description="Position in beats from the source start")
    duration: float = Field(1.0, gt=0, description="Duration in beats")
    velocity: int = Field(80, ge=1, le=127, description="MIDI velocity")

    model_config = {"frozen": True}


class SourceDefinition(BaseModel):
    """
    A pattern source as stored in a library file.

    Example (YAML):
        id: ii-V-walk-1
        style: walking
        chords:
          - {bar: 0, beat: 0, symbol: Dm7}
          - {bar: 0, beat: 2, symbol: G7}
        notes:
          - {pitch: 38, position: 0}
          ...
        target_note: 36
    """

    id: str = Field(..., min_length=1, description="Unique source id")
    style: BassStyle = Field(BassStyle.WALKING, description="Bass playing style")
    time_signature: str = Field("4/4", description="Time signature")
    bars: int | None = Field(None, ge=1, le=4, description="Size in bars (default: from chords)")
    chords: list[ChordEntry] = Field(..., min_length=1, description="Chord symbols")
    notes: list[NoteEntry] = Field(..., min_length=1, description="Phrase notes")
    target_note: int | None = Field(None, ge=0, le=127, description="Pitch the next phrase should start on")
    description: str = Field("", description="Human-readable description")

    @field_validator("time_signature")
    @classmethod
    def validate_time_signature(cls, v: str) -> str:
        """Validate time signature format."""
        TimeSignature.parse(v)
        return v

    def to_source(self) -> PatternSource:
        """
        Build the engine PatternSource.

        Raises:
            ValueError: If the chords or notes do not form a valid source
        """
        time_signature = TimeSignature.parse(self.time_signature)
        size = self.bars if self.bars is not None else max(c.bar for c in self.chords) + 1
        chords = ChordSequence(
            [ChordEvent(c.bar, c.beat, ChordSymbol.parse(c.symbol)) for c in self.chords],
            BarRange.of_size(0, size),
            time_signature,
        )
        phrase = Phrase(NoteEvent(n.position, n.pitch, n.duration, n.velocity) for n in self.notes)
        return PatternSource(
            id=self.id,
            chords=chords,
            phrase=phrase,
            style=self.style,
            target_note=self.target_note,
        )

    @classmethod
    def from_source(cls, source: PatternSource) -> SourceDefinition:
        """Describe an engine PatternSource."""
        return cls(
            id=source.id,
            style=source.style,
            time_signature=str(source.chords.time_signature),
            bars=source.size,
            chords=[ChordEntry(bar=c.bar, beat=c.beat, symbol=str(c.symbol)) for c in source.chords],
            notes=[
                NoteEntry(pitch=n.pitch, position=n.position, duration=n.duration, velocity=n.velocity)
                for n in source.phrase
            ],
            target_note=source.target_note,
        )


class SourceSummary(BaseModel):
    """Lightweight view of a source for listings."""

    id: str
    style: BassStyle
    size: int
    root_profile: str
    chords: str
    generated: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_source(cls, source: PatternSource) -> SourceSummary:
        """Create a summary from a source."""
        return cls(
            id=source.id,
            style=source.style,
            size=source.size,
            root_profile=source.root_profile,
            chords=" ".join(str(c.symbol) for c in source.chords),
            generated=source.is_generated,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
