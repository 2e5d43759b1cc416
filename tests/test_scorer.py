"""
Tests for Score and the CompatibilityScorer.
"""

from chuk_mcp_walkingbass.constants import BassStyle
from chuk_mcp_walkingbass.core import ChordSequence, TimeSignature
from chuk_mcp_walkingbass.tiling import CompatibilityScorer, Score, Tiling

DM7_WALK = [38, 41, 45, 48]


class TestScore:
    """Tests for the Score value object."""

    def test_weights(self) -> None:
        """Overall is the weighted sum of the components."""
        score = Score.of(90, 100, 100, 0)
        assert score.overall == 89.0
        assert score

    def test_zero_harmonic(self) -> None:
        """No harmonic compatibility means no score at all."""
        assert Score.of(0, 100, 100, 100) is Score.ZERO
        assert not Score.ZERO

    def test_clamped(self) -> None:
        """Overall never exceeds 100."""
        assert Score.of(100, 100, 100, 100).overall == 100.0


class TestCompatibilityScorer:
    """Tests for placement scoring."""

    def test_same_chord(self, make_source, make_placement) -> None:
        """A m7 line over a m7 chord on the same root."""
        source = make_source("m7", ["Dm7"], DM7_WALK)
        score = CompatibilityScorer().score(make_placement(source, ChordSequence.from_bars(["Dm7"])))
        assert score.harmonic == 90.0
        assert score.transposability == 100
        assert score.overall == 84.0

    def test_transposed(self, make_source, make_placement) -> None:
        """Moving to another root costs transposability."""
        source = make_source("m7", ["Dm7"], DM7_WALK)
        placement = make_placement(source, ChordSequence.from_bars(["Em7"]))
        score = CompatibilityScorer().score(placement)
        assert score.transposability == 91
        assert score.overall == 81.3
        assert placement.transposition == 2

    def test_incompatible_chord(self, make_source, make_placement) -> None:
        """A minor third over a dominant chord scores zero."""
        source = make_source("m7", ["Dm7"], DM7_WALK)
        score = CompatibilityScorer().score(make_placement(source, ChordSequence.from_bars(["D7"])))
        assert score is Score.ZERO

    def test_incompatible_chord_in_multi_chord_source(self, make_source, make_placement) -> None:
        """One incompatible chord is enough."""
        source = make_source("ii-V", ["Dm7", "G7"], [38, 41, 45, 44, 43, 47, 50, 49])
        assert CompatibilityScorer().score(make_placement(source, ChordSequence.from_bars(["Dm7", "G7"])))
        assert not CompatibilityScorer().score(make_placement(source, ChordSequence.from_bars(["Dm7", "Gm7"])))

    def test_chord_count_mismatch(self, make_source, make_placement) -> None:
        """Sources must have as many chords as the slice."""
        source = make_source("m7", ["Dm7"], DM7_WALK)
        target = ChordSequence.from_bars(["Dm7 G7"])
        assert CompatibilityScorer().harmonic_scores(make_placement(source, target)) == []

    def test_style_filter(self, make_source, make_placement) -> None:
        """Sources of other styles are rejected."""
        source = make_source("m7", ["Dm7"], DM7_WALK)
        placement = make_placement(source, ChordSequence.from_bars(["Dm7"]))
        assert not CompatibilityScorer(styles=[BassStyle.TWO_FEEL]).score(placement)
        assert CompatibilityScorer(styles=[BassStyle.WALKING]).score(placement)

    def test_min_score(self, make_source, make_placement) -> None:
        """Scores below min_score become zero."""
        source = make_source("m7", ["Dm7"], DM7_WALK)
        placement = make_placement(source, ChordSequence.from_bars(["Dm7"]))
        assert CompatibilityScorer(min_score=84).score(placement).overall == 84.0
        assert CompatibilityScorer(min_score=90).score(placement) is Score.ZERO

    def test_restricted(self) -> None:
        """A restricted scorer never accepts more than the original."""
        scorer = CompatibilityScorer(styles=[BassStyle.WALKING, BassStyle.TWO_FEEL], min_score=50)
        assert scorer.restricted(min_score=75).min_score == 75
        assert scorer.restricted(min_score=10).min_score == 50
        assert scorer.restricted(styles=[BassStyle.WALKING, BassStyle.BASIC]).styles == {BassStyle.WALKING}
        assert CompatibilityScorer().restricted(styles=[BassStyle.CUSTOM]).styles == {BassStyle.CUSTOM}
        assert CompatibilityScorer().restricted().styles is None

    def test_time_signature_mismatch(self, make_source, make_placement) -> None:
        """A 4/4 source does not fit a 3/4 bar."""
        source = make_source("m7", ["Dm7"], DM7_WALK)
        target = ChordSequence.from_bars(["Dm7"], TimeSignature.WALTZ)
        assert CompatibilityScorer().score(make_placement(source, target)) is Score.ZERO


class TestTargetScores:
    """Tests for the pre/post target components."""

    def _tiled(self, make_source, make_placement, target_note: int):
        sequence = ChordSequence.from_bars(["Dm7", "Dm7"])
        first = make_placement(make_source("a", ["Dm7"], DM7_WALK, target_note=target_note), sequence, 0)
        second = make_placement(make_source("b", ["Dm7"], [38, 41, 45, 43]), sequence, 1)
        tiling = Tiling(sequence)
        tiling.add(first)
        tiling.add(second)
        return tiling, first, second

    def test_targets_match(self, make_source, make_placement) -> None:
        """The first phrase targets the first note of the second."""
        tiling, first, second = self._tiled(make_source, make_placement, target_note=38)
        scorer = CompatibilityScorer()
        assert scorer.score(second, tiling).pre_target == 100.0
        assert scorer.score(second, tiling).overall == 89.0
        assert scorer.score(first, tiling).post_target == 100.0
        assert scorer.score(first, tiling).pre_target == 0.0

    def test_targets_miss(self, make_source, make_placement) -> None:
        """Another target note gives no bonus."""
        tiling, first, second = self._tiled(make_source, make_placement, target_note=40)
        scorer = CompatibilityScorer()
        assert scorer.score(second, tiling).pre_target == 0.0
        assert scorer.score(first, tiling).post_target == 0.0

    def test_no_tiling_context(self, make_source, make_placement) -> None:
        """Without a tiling, target components are zero."""
        _, first, _ = self._tiled(make_source, make_placement, target_note=38)
        assert CompatibilityScorer().score(first).post_target == 0.0
