"""
Pydantic models for the walking bass engine.

This module provides:
- EngineSettings: Tunables of a generation request
- SourceDefinition: Pattern source as stored in YAML or received by tools
- ChordEntry / NoteEntry: Parts of a SourceDefinition
- SourceSummary: Lightweight listing view of a source
"""

from chuk_mcp_walkingbass.models.settings import EngineSettings
from chuk_mcp_walkingbass.models.source import ChordEntry, NoteEntry, SourceDefinition, SourceSummary

__all__ = [
    "EngineSettings",
    "ChordEntry",
    "NoteEntry",
    "SourceDefinition",
    "SourceSummary",
]
