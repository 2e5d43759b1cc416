"""
Tests for the CandidateStore.
"""

import pytest

from chuk_mcp_walkingbass.core import ChordSequence
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.tiling import CandidateStore, CompatibilityScorer, Score


@pytest.fixture
def minor_database(empty_database: PatternDatabase, make_source) -> PatternDatabase:
    """One-bar sources over Dm7 (84, 84, 78) plus an incompatible D7 line."""
    empty_database.add_source(make_source("m7-b", ["Dm7"], [38, 41, 45, 43]))
    empty_database.add_source(make_source("m7-a", ["Dm7"], [38, 41, 45, 48]))
    empty_database.add_source(make_source("m7-c", ["Dm7"], [38, 41, 38, 36]))
    empty_database.add_source(make_source("dom", ["D7"], [38, 42, 45, 48]))
    empty_database.add_source(make_source("m7-2bar", ["Dm7", "Dm7"], [38, 41, 45, 48] * 2))
    return empty_database


def build(database: PatternDatabase, nb_bars: int = 2, **kwargs) -> CandidateStore:
    sequence = ChordSequence.from_bars(["Dm7"] * nb_bars)
    return CandidateStore.build(sequence, database, CompatibilityScorer(), **kwargs)


class TestCandidateStore:
    """Tests for store construction and ranking."""

    def test_ranked_by_score_then_id(self, minor_database: PatternDatabase) -> None:
        """Best score first, ties by ascending id."""
        store = build(minor_database, sizes=[1])
        ranked = store.get(0, 1)
        assert [p.source.id for p in ranked] == ["m7-a", "m7-b", "m7-c"]
        assert [p.score.overall for p in ranked] == [84.0, 84.0, 78.0]

    def test_incompatible_never_stored(self, minor_database: PatternDatabase) -> None:
        """Zero scores are never retained."""
        store = build(minor_database)
        assert all(p.source.id != "dom" for p in store.candidates())
        assert all(p.score.overall > 0 for p in store.candidates())

    def test_bounded(self, minor_database: PatternDatabase) -> None:
        """Lists keep the nb_best_max best placements."""
        store = build(minor_database, sizes=[1], nb_best_max=2)
        assert [p.source.id for p in store.get(0, 1)] == ["m7-a", "m7-b"]
        assert len(store) == 4

    def test_min_score(self, minor_database: PatternDatabase) -> None:
        """Placements below min_score are rejected."""
        store = build(minor_database, sizes=[1], min_score=80)
        assert [p.source.id for p in store.get(1, 1)] == ["m7-a", "m7-b"]

    def test_sizes(self, minor_database: PatternDatabase) -> None:
        """Multi-bar sources only start where they fit."""
        store = build(minor_database)
        assert store.bars(2) == [0]
        assert store.bars(1) == [0, 1]
        assert [p.source.id for p in store.candidates(size=2)] == ["m7-2bar"]

    def test_restrict_bars(self, minor_database: PatternDatabase) -> None:
        """Only the requested start bars are scored."""
        sequence = ChordSequence.from_bars(["Dm7"] * 4)
        store = CandidateStore.build(sequence, minor_database, CompatibilityScorer(), sizes=[1], bars=[3, 1])
        assert store.bars(1) == [1, 3]

    def test_unusable_bars_skipped(self, minor_database: PatternDatabase) -> None:
        """No candidate covers an unusable bar."""
        sequence = ChordSequence.from_bars(["Dm7", "_", "Dm7"])
        store = CandidateStore.build(sequence, minor_database, CompatibilityScorer())
        assert store.bars(1) == [0, 2]
        assert store.bars(2) == []

    def test_get_ranked(self, minor_database: PatternDatabase) -> None:
        """Ranks past the end give the lowest entry."""
        store = build(minor_database, sizes=[1])
        assert {bar: p.source.id for bar, p in store.get_ranked(0, 1).items()} == {0: "m7-a", 1: "m7-a"}
        assert {bar: p.source.id for bar, p in store.get_ranked(7, 1).items()} == {0: "m7-c", 1: "m7-c"}
        assert store.get_ranked(0, 3) == {}

    def test_add_rejects_zero(self, make_source, make_placement) -> None:
        """Unscored placements are not added."""
        store = CandidateStore()
        placement = make_placement(make_source("m7", ["Dm7"], [38]), ChordSequence.from_bars(["Dm7"]))
        assert not store.add(placement)
        assert store.add(placement.with_score(Score.of(90, 100)))
        assert len(store) == 1

    def test_add_evicts_worst(self, make_source, make_placement) -> None:
        """A full list drops its lowest entry, or refuses a worse one."""
        sequence = ChordSequence.from_bars(["Dm7"])
        store = CandidateStore(nb_best_max=1)
        good = make_placement(make_source("good", ["Dm7"], [38]), sequence).with_score(Score.of(90, 100))
        bad = make_placement(make_source("bad", ["Dm7"], [38]), sequence).with_score(Score.of(50, 100))
        assert store.add(bad)
        assert store.add(good)
        assert not store.add(bad)
        assert store.get(0, 1) == [good]

    def test_debug_string(self, minor_database: PatternDatabase) -> None:
        """One line per list."""
        text = build(minor_database, sizes=[1]).to_debug_string()
        assert "bar 000 size 1: m7-a=84, m7-b=84, m7-c=78" in text

    def test_invalid_configuration(self) -> None:
        """Sizes and list bounds are validated."""
        with pytest.raises(ValueError):
            CandidateStore(sizes=[])
        with pytest.raises(ValueError):
            CandidateStore(sizes=[5])
        with pytest.raises(ValueError):
            CandidateStore(nb_best_max=0)
