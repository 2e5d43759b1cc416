"""
Generation tools - MCP tools for walking bass generation and MIDI export.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_walkingbass.compiler.midi import phrase_to_midi
from chuk_mcp_walkingbass.constants import ErrorMessages, StrategyName, SuccessMessages
from chuk_mcp_walkingbass.core.chord_sequence import ChordSequence
from chuk_mcp_walkingbass.core.rhythm import TimeSignature
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.models.settings import EngineSettings
from chuk_mcp_walkingbass.tiling.engine import TilingEngine, TilingResult

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def parse_progression(bars: list[str], time_signature: str = "4/4") -> ChordSequence:
    """
    Build a chord sequence from one string per bar.

    Raises:
        ValueError: If bars is empty or a chord symbol is invalid
    """
    if not bars:
        raise ValueError(ErrorMessages.EMPTY_PROGRESSION)
    try:
        ts = TimeSignature.parse(time_signature)
    except ValueError as e:
        raise ValueError(ErrorMessages.INVALID_TIME_SIGNATURE.format(value=time_signature)) from e
    return ChordSequence.from_bars(bars, ts)


def register_generation_tools(
    mcp: ChukMCPServer,
    database: PatternDatabase,
    settings: EngineSettings,
    output_dir: Path,
) -> dict[str, Any]:
    """
    Register generation tools with the MCP server.

    Args:
        mcp: The MCP server instance
        database: The pattern source database
        settings: Default engine settings
        output_dir: Directory for output files

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    def _generate(bars: list[str], time_signature: str, strategy: str | None) -> TilingResult:
        engine_settings = settings
        if strategy:
            engine_settings = settings.model_copy(update={"primary_strategy": StrategyName(strategy)})
        engine = TilingEngine(database, engine_settings)
        return engine.generate(parse_progression(bars, time_signature))

    @mcp.tool  # type: ignore[arg-type]
    async def bass_generate(
        bars: list[str],
        time_signature: str = "4/4",
        strategy: str | None = None,
        include_notes: bool = False,
    ) -> str:
        """
        Generate a walking bass line over a chord progression.

        Each bar is a string of chord symbols separated by spaces, spread evenly
        across the bar. Use '%' to repeat the previous bar and '_' for a bar
        without bass.

        Args:
            bars: One string per bar, e.g. ["Dm7 G7", "Cmaj7", "%"]
            time_signature: Time signature (default '4/4')
            strategy: Optional primary tiling strategy ('size_cascade',
                'most_compatible_first', 'one_out_of_two', 'one_out_of_x',
                'max_coverage_percentage', 'best_first_no_repeat', 'max_distance')
            include_notes: Whether to include the generated notes

        Returns:
            JSON string with the tiling summary

        Example:
            bass_generate(bars=["Dm7", "G7", "Cmaj7", "%"])
        """
        try:
            result = _generate(bars, time_signature, strategy)
            response: dict[str, Any] = {
                "status": "success",
                "result": result.to_dict(),
                "message": SuccessMessages.BASS_GENERATED.format(
                    bars=len(bars), state=result.state.value
                ),
            }
            if include_notes:
                response["notes"] = [
                    {
                        "pitch": n.pitch,
                        "position": n.position,
                        "duration": n.duration,
                        "velocity": n.velocity,
                    }
                    for n in result.phrase
                ]
            return json.dumps(response)
        except ValueError as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to generate bass")
            return json.dumps({"status": "error", "message": str(e)})

    tools["bass_generate"] = bass_generate

    @mcp.tool  # type: ignore[arg-type]
    async def bass_export_midi(
        bars: list[str],
        output_name: str = "walking-bass",
        tempo: int = 120,
        time_signature: str = "4/4",
        strategy: str | None = None,
    ) -> str:
        """
        Generate a walking bass line and save it as a MIDI file.

        Args:
            bars: One string per bar, e.g. ["Dm7 G7", "Cmaj7", "%"]
            output_name: Output filename (without .mid extension)
            tempo: Tempo in BPM (40-320)
            time_signature: Time signature (default '4/4')
            strategy: Optional primary tiling strategy

        Returns:
            JSON string with the output file path

        Example:
            bass_export_midi(bars=["F7", "Bb7", "F7", "%"], output_name="blues", tempo=140)
        """
        try:
            if not 40 <= tempo <= 320:
                return json.dumps(
                    {"status": "error", "message": f"Invalid tempo: {tempo}. Must be between 40 and 320 BPM."}
                )

            result = _generate(bars, time_signature, strategy)
            midi_file = phrase_to_midi(
                result.phrase,
                tempo_bpm=tempo,
                time_signature=result.tiling.sequence.time_signature,
            )

            output_path = output_dir / f"{output_name}.mid"
            output_dir.mkdir(parents=True, exist_ok=True)
            midi_file.save(str(output_path))

            return json.dumps(
                {
                    "status": "success",
                    "path": str(output_path),
                    "state": result.state.value,
                    "notes": len(result.phrase),
                    "untiled_bars": result.untiled_bars,
                    "message": SuccessMessages.MIDI_EXPORTED.format(path=output_path),
                }
            )
        except ValueError as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to export MIDI")
            return json.dumps({"status": "error", "message": str(e)})

    tools["bass_export_midi"] = bass_export_midi

    return tools
