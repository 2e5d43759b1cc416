"""
chuk-mcp-walkingbass - walking bass generation by pattern tiling.

A chord progression is covered with recorded 1-4 bar bass patterns, selected
by harmonic compatibility and diversity rules, and exported to MIDI.

Example:
    from chuk_mcp_walkingbass import ChordSequence, PatternDatabase, TilingEngine

    sequence = ChordSequence.from_bars(["Dm7", "G7", "Cmaj7", "%"])
    result = TilingEngine(PatternDatabase()).generate(sequence)
    print(result.state, result.tiling.to_multiline_string())
"""

from chuk_mcp_walkingbass.core import BarRange, ChordSequence, ChordSymbol, Phrase, TimeSignature
from chuk_mcp_walkingbass.database import PatternSource
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.models import EngineSettings
from chuk_mcp_walkingbass.tiling import TilingEngine, TilingResult

__version__ = "0.1.0"

__all__ = [
    "BarRange",
    "ChordSequence",
    "ChordSymbol",
    "EngineSettings",
    "PatternDatabase",
    "PatternSource",
    "Phrase",
    "TilingEngine",
    "TilingResult",
    "TimeSignature",
    "__version__",
]
