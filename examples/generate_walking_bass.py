#!/usr/bin/env python3
"""
Example: Generate walking bass lines and export them to MIDI.

This demonstrates the whole pipeline: chord progression → tiling → MIDI.
Run this script to create playable MIDI files you can open in any DAW.

Usage:
    python examples/generate_walking_bass.py
    # Creates: examples/output/*.mid
"""

from pathlib import Path

from chuk_mcp_walkingbass import ChordSequence, EngineSettings, PatternDatabase, TilingEngine
from chuk_mcp_walkingbass.compiler import phrase_to_midi
from chuk_mcp_walkingbass.constants import StrategyName
from chuk_mcp_walkingbass.core import TimeSignature

PROGRESSIONS = {
    "ii_v_i": (["Dm7", "G7", "Cmaj7", "%"], TimeSignature.COMMON_TIME),
    "rhythm_changes_a": (["Bb6 G7", "Cm7 F7", "Bb6 G7", "Cm7 F7"], TimeSignature.COMMON_TIME),
    "blues_in_f": (
        ["F7", "Bb7", "F7", "%", "Bb7", "%", "F7", "D7", "Gm7", "C7", "F7 D7", "Gm7 C7"],
        TimeSignature.COMMON_TIME,
    ),
    "jazz_waltz": (["Cmaj7", "Am7", "Dm7", "G7"], TimeSignature.WALTZ),
}


def main() -> None:
    """Generate example MIDI files."""
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    database = PatternDatabase()
    print(database.to_stats_string())

    for name, (bars, time_signature) in PROGRESSIONS.items():
        print(f"\nGenerating {name}.mid...")
        sequence = ChordSequence.from_bars(bars, time_signature)
        result = TilingEngine(database).generate(sequence)

        print(result.tiling.to_multiline_string())
        print(f"  State: {result.state.value}, generated sources: {len(result.generated_sources)}")

        mid = phrase_to_midi(result.phrase, tempo_bpm=160, time_signature=time_signature)
        mid.save(str(output_dir / f"{name}.mid"))
        print(f"  Created: {output_dir / f'{name}.mid'}")

    # Same progression, more variety: a source is never reused back to back
    print("\nGenerating blues_in_f_varied.mid...")
    settings = EngineSettings(primary_strategy=StrategyName.ONE_OUT_OF_TWO)
    bars, time_signature = PROGRESSIONS["blues_in_f"]
    result = TilingEngine(database, settings).generate(ChordSequence.from_bars(bars, time_signature))
    print(result.tiling.to_stats_string())
    phrase_to_midi(result.phrase, tempo_bpm=160).save(str(output_dir / "blues_in_f_varied.mid"))

    print("\nDone! Open the MIDI files in your DAW to hear them.")


if __name__ == "__main__":
    main()
