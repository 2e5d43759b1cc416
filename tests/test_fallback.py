"""
Tests for the FallbackSynthesizer.
"""

from chuk_mcp_walkingbass.constants import BassStyle
from chuk_mcp_walkingbass.core import ChordSequence, TimeSignature
from chuk_mcp_walkingbass.tiling import CompatibilityScorer, FallbackSynthesizer, PatternPlacement


class TestFallbackSynthesizer:
    """Tests for synthesized sources."""

    def test_walk_line(self) -> None:
        """Chord tones one per beat, approaching the next root."""
        source = FallbackSynthesizer().synthesize(ChordSequence.from_bars(["C", "F"]))
        assert [n.pitch for n in source.phrase] == [36, 40, 43, 28, 29, 33, 36, 29]
        assert [n.position for n in source.phrase] == [float(i) for i in range(8)]
        assert source.target_note is None

    def test_walk_line_targets_next_phrase(self) -> None:
        """The last beat approaches the given target pitch."""
        source = FallbackSynthesizer().synthesize(ChordSequence.from_bars(["C"]), target_pitch=40)
        assert [n.pitch for n in source.phrase] == [36, 40, 43, 39]
        assert source.target_note == 40

    def test_seventh_chord_cycles_tones(self) -> None:
        """Four-note chords use every tone before the approach."""
        source = FallbackSynthesizer().synthesize(ChordSequence.from_bars(["G7", "C"]))
        assert [n.pitch for n in source.phrase][:4] == [31, 35, 38, 35]

    def test_two_chords_per_bar(self) -> None:
        """Root then third for each chord."""
        source = FallbackSynthesizer().synthesize(ChordSequence.from_bars(["Dm7 G7"]))
        assert [n.pitch for n in source.phrase] == [38, 41, 43, 47]
        assert source.id.startswith("Gen2Chords-")

    def test_two_chords_per_bar_in_two_four(self) -> None:
        """One-beat chords get two eighth notes."""
        sequence = ChordSequence.from_bars(["C G7", "F C"], TimeSignature(2, 4))
        source = FallbackSynthesizer().synthesize(sequence)
        assert [n.pitch for n in source.phrase] == [36, 40, 43, 47, 41, 45, 36, 40]
        assert [n.position for n in source.phrase] == [0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5]
        assert {n.duration for n in source.phrase} == {0.5}

    def test_sus_chord_uses_fourth(self) -> None:
        """Sus chords have no third."""
        source = FallbackSynthesizer().synthesize(ChordSequence.from_bars(["Csus4 G7"]))
        assert [n.pitch for n in source.phrase][:2] == [36, 41]

    def test_waltz(self) -> None:
        """One note per beat in 3/4."""
        source = FallbackSynthesizer().synthesize(ChordSequence.from_bars(["C", "G7"], TimeSignature.WALTZ))
        assert len(source.phrase) == 6
        assert source.size == 2

    def test_ids_unique(self) -> None:
        """Each synthesized source gets a new id."""
        synthesizer = FallbackSynthesizer()
        first = synthesizer.synthesize(ChordSequence.from_bars(["C"]))
        second = synthesizer.synthesize(ChordSequence.from_bars(["C"]))
        assert first.id == "GenDefault-1"
        assert second.id == "GenDefault-2"
        assert first.is_generated
        assert first.style == BassStyle.CUSTOM

    def test_generated_source_fits_its_zone(self) -> None:
        """A synthesized source scores above zero on the zone it was made for."""
        sequence = ChordSequence.from_bars(["Dm7", "G7", "Cmaj7", "A7"])
        source = FallbackSynthesizer().synthesize(sequence)
        placement = PatternPlacement(source, sequence.bar_range, sequence)
        assert CompatibilityScorer().score(placement).overall > 0
