"""
Constants and enums for the walking bass engine.

No magic strings - use enums and Literal types for constrained values.
"""

from enum import Enum
from typing import Literal


class BassStyle(str, Enum):
    """Playing style of a recorded bass pattern."""

    WALKING = "walking"  # One note per beat
    TWO_FEEL = "two_feel"  # Half notes
    BASIC = "basic"  # Root/fifth style
    CUSTOM = "custom"  # Generated or user-provided

    @property
    def is_custom(self) -> bool:
        return self is BassStyle.CUSTOM


class TilingState(str, Enum):
    """Progress of a generation request."""

    UNRESOLVED = "unresolved"  # Nothing placed yet
    PARTIALLY_TILED = "partially_tiled"  # Some usable bars still free
    FULLY_TILED = "fully_tiled"  # Every usable bar covered
    EXHAUSTED = "exhausted"  # Gave up with free usable bars left


class StrategyName(str, Enum):
    """Tiling strategies selectable from settings."""

    SIZE_CASCADE = "size_cascade"
    MOST_COMPATIBLE_FIRST = "most_compatible_first"
    ONE_OUT_OF_TWO = "one_out_of_two"
    ONE_OUT_OF_X = "one_out_of_x"
    MAX_COVERAGE_PERCENTAGE = "max_coverage_percentage"
    BEST_FIRST_NO_REPEAT = "best_first_no_repeat"
    MAX_DISTANCE = "max_distance"


# Pattern sources cover 1 to 4 bars
MIN_SOURCE_SIZE = 1
MAX_SOURCE_SIZE = 4

# Prefix of the ids of sources created by the fallback synthesizer
GENERATED_ID_PREFIX = "Gen"

# Environment variables read by the MCP server (set by the CLI options)
SETTINGS_ENV = "WALKINGBASS_SETTINGS"
LIBRARY_ENV = "WALKINGBASS_LIBRARY"
OUTPUT_DIR_ENV = "WALKINGBASS_OUTPUT_DIR"

# Default MIDI settings for exported bass lines
DEFAULT_BASS_CHANNEL = 1
DEFAULT_BASS_PROGRAM = 32  # GM Acoustic Bass
DEFAULT_TEMPO = 120

# Schema versions - frozen for v1
SchemaVersion = Literal[
    "bass-sources/v1",
    "engine-settings/v1",
]


class ErrorMessages:
    """Standardized error messages."""

    SOURCE_NOT_FOUND = "Pattern source '{source_id}' not found."
    SOURCE_EXISTS = "Pattern source '{source_id}' already exists or duplicates an existing source."
    EMPTY_PROGRESSION = "No bars given. Expected a list like ['Dm7 G7', 'Cmaj7']."
    INVALID_TIME_SIGNATURE = "Invalid time signature: '{value}'. Expected format like '4/4'."


class SuccessMessages:
    """Standardized success messages."""

    SOURCE_ADDED = "Added pattern source '{source_id}' ({size} bars)."
    BASS_GENERATED = "Generated walking bass over {bars} bars ({state})."
    MIDI_EXPORTED = "Exported walking bass to {path}."
