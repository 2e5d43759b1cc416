"""
Tests for the tiling strategies.
"""

from collections import Counter

import pytest

from chuk_mcp_walkingbass.constants import StrategyName
from chuk_mcp_walkingbass.core import ChordSequence
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.models import EngineSettings
from chuk_mcp_walkingbass.tiling import (
    BestFirstNoRepeat,
    CandidateStore,
    CompatibilityScorer,
    MaxCoveragePercentage,
    MaxDistance,
    MostCompatibleFirst,
    OneOutOfTwo,
    OneOutOfX,
    SizeCascade,
    SourceUsage,
    Tiling,
    create_strategy,
    place_ranked,
)

# One-bar C lines: "b" scores 90, "a" and "c" score 84
C_SOURCES = {
    "a": [36, 38, 40, 43],
    "b": [36, 40, 43, 41],
    "c": [36, 40, 36, 38],
}


@pytest.fixture
def c_database(empty_database: PatternDatabase, make_source) -> PatternDatabase:
    for source_id, pitches in C_SOURCES.items():
        empty_database.add_source(make_source(source_id, ["C"], pitches))
    return empty_database


def prepare(database: PatternDatabase, bars: list[str], sizes=(1,)) -> tuple[Tiling, CandidateStore]:
    sequence = ChordSequence.from_bars(bars)
    store = CandidateStore.build(sequence, database, CompatibilityScorer(), sizes=sizes)
    return Tiling(sequence), store


def layout(tiling: Tiling) -> list[tuple[int, str]]:
    return [(p.start_bar, p.source.id) for p in tiling.placements()]


def assert_valid(tiling: Tiling) -> None:
    covered: list[int] = []
    for placement in tiling.placements():
        assert tiling.sequence.is_usable(placement.bar_range)
        covered.extend(placement.bar_range.bars())
    assert len(covered) == len(set(covered))


class TestPlaceRanked:
    """Tests for the place_ranked helper."""

    def test_skips_used_and_taken(self, c_database: PatternDatabase) -> None:
        """A source is placed once, taken bars are skipped."""
        tiling, store = prepare(c_database, ["C", "C"])
        used: set[str] = set()
        placed = place_ranked(tiling, store.get_ranked(0, 1).values(), used)
        assert [(p.start_bar, p.source.id) for p in placed] == [(0, "b")]
        assert used == {"b"}

        placed = place_ranked(tiling, store.get_ranked(1, 1).values(), used)
        assert [(p.start_bar, p.source.id) for p in placed] == [(1, "a")]

    def test_custom_order(self, c_database: PatternDatabase) -> None:
        """The sort key decides which candidate is placed first."""
        tiling, store = prepare(c_database, ["C"])
        usage = SourceUsage()
        placed = place_ranked(tiling, store.get(0, 1), set(), usage, key=lambda p: p.source.id)
        assert [p.source.id for p in placed] == ["a"]
        assert usage.history == placed


class TestMostCompatibleFirst:
    """Tests for MostCompatibleFirst and SizeCascade."""

    def test_two_four_bar_sources_cover_eight_bars(self, empty_database: PatternDatabase, make_source) -> None:
        """Each half gets the only source matching its chords."""
        # Chord tones then an approach note in every bar
        x_pitches = [36, 40, 43, 40, 41, 45, 48, 42, 43, 47, 50, 35, 36, 40, 43, 38]
        # Roots only: every chord misses its third, fifth and seventh
        y_pitches = [38, 38, 38, 42, 43, 43, 43, 47, 36, 36, 36, 44, 45, 45, 45, 37]
        empty_database.add_source(make_source("x-4bar", ["C", "F", "G7", "C"], x_pitches))
        empty_database.add_source(make_source("y-4bar", ["Dm7", "G7", "Cmaj7", "A7"], y_pitches))
        tiling, store = prepare(
            empty_database, ["C", "F", "G7", "C", "Dm7", "G7", "Cmaj7", "A7"], sizes=[4]
        )

        assert [p.source.id for p in store.get(0, 4)] == ["x-4bar"]
        assert [p.source.id for p in store.get(4, 4)] == ["y-4bar"]
        assert all(not store.get(bar, 4) for bar in (1, 2, 3))
        assert store.get(0, 4)[0].score.overall == pytest.approx(88.5)
        assert store.get(4, 4)[0].score.overall == pytest.approx(72.0)

        MostCompatibleFirst(4).tile(tiling, store)

        assert layout(tiling) == [(0, "x-4bar"), (4, "y-4bar")]
        assert tiling.is_fully_tiled()

    def test_one_source_per_round(self, c_database: PatternDatabase) -> None:
        """Rounds repeat until nothing more can be placed."""
        tiling, store = prepare(c_database, ["C", "F", "G"])
        MostCompatibleFirst(1).tile(tiling, store)
        assert tiling.is_fully_tiled()
        assert len(tiling) == 3
        assert_valid(tiling)

    def test_only_one_bar_sources(self, c_database: PatternDatabase) -> None:
        """A cascade with only one-bar sources places one-bar placements."""
        tiling, store = prepare(c_database, ["C", "F", "G"], sizes=[4, 3, 2, 1])
        SizeCascade([4, 3, 2, 1]).tile(tiling, store)
        assert [p.size for p in tiling.placements()] == [1, 1, 1]

    def test_cascade_prefers_large_sources(self, c_database: PatternDatabase, make_source) -> None:
        """Larger sizes are tried first."""
        c_database.add_source(make_source("two", ["C", "C"], [36, 40, 43, 41] * 2))
        tiling, store = prepare(c_database, ["C", "C", "C"], sizes=[2, 1])
        usage = SourceUsage()
        SizeCascade([1, 2]).tile(tiling, store, usage)
        assert usage.history[0].source.id == "two"
        assert tiling.is_fully_tiled()


class TestDiversityCappedTilers:
    """Tests for the diversity-capped strategies."""

    def test_one_out_of_two_alternates(self, c_database: PatternDatabase) -> None:
        """A source is never placed twice in a row."""
        tiling, store = prepare(c_database, ["C"] * 4)
        OneOutOfTwo().tile(tiling, store)
        assert layout(tiling) == [(0, "b"), (1, "a"), (2, "b"), (3, "a")]

    def test_one_out_of_two_single_source(self, empty_database: PatternDatabase, make_source) -> None:
        """With one source, bars are left untiled rather than repeated."""
        empty_database.add_source(make_source("a", ["C"], C_SOURCES["a"]))
        tiling, store = prepare(empty_database, ["C"] * 3)
        OneOutOfTwo().tile(tiling, store)
        assert layout(tiling) == [(0, "a")]

    def test_one_out_of_x(self, c_database: PatternDatabase) -> None:
        """Any x consecutive placements use distinct sources."""
        tiling, store = prepare(c_database, ["C"] * 6)
        OneOutOfX(3).tile(tiling, store)
        ids = [source_id for _, source_id in layout(tiling)]
        assert ids == ["b", "a", "c", "b", "a", "c"]
        for i in range(len(ids) - 2):
            assert len(set(ids[i : i + 3])) == 3

    def test_max_coverage(self, c_database: PatternDatabase) -> None:
        """No source covers more than the allowed share of usable bars."""
        tiling, store = prepare(c_database, ["C"] * 8)
        MaxCoveragePercentage(0.25).tile(tiling, store)
        covered = Counter(p.source.id for p in tiling.placements() for _ in p.bar_range.bars())
        assert max(covered.values()) <= 2
        assert tiling.tiled_bars() == [0, 1, 2, 3, 4, 5]
        assert layout(tiling)[:2] == [(0, "b"), (1, "b")]

    def test_invalid_parameters(self) -> None:
        """Caps are validated."""
        with pytest.raises(ValueError):
            OneOutOfX(0)
        with pytest.raises(ValueError):
            MaxCoveragePercentage(0)
        with pytest.raises(ValueError):
            MaxCoveragePercentage(1.5)


class TestBestFirstNoRepeat:
    """Tests for BestFirstNoRepeat."""

    def test_each_source_once(self, c_database: PatternDatabase) -> None:
        """Sources are placed at most once, best first."""
        tiling, store = prepare(c_database, ["C"] * 5)
        BestFirstNoRepeat().tile(tiling, store)
        assert layout(tiling) == [(0, "b"), (1, "a"), (2, "c")]

    def test_placed_sources_count_as_used(self, c_database: PatternDatabase) -> None:
        """A source already in the tiling is not placed again."""
        tiling, store = prepare(c_database, ["C"] * 3)
        tiling.add(next(p for p in store.get(2, 1) if p.source.id == "b"))
        usage = SourceUsage()
        BestFirstNoRepeat().tile(tiling, store, usage)
        assert layout(tiling) == [(0, "a"), (1, "c"), (2, "b")]
        assert [p.source.id for p in usage.history] == ["a", "c"]


class TestMaxDistance:
    """Tests for MaxDistance."""

    def test_spreads_uses(self, empty_database: PatternDatabase, make_source) -> None:
        """Each placement is as far as possible from the previous uses."""
        empty_database.add_source(make_source("a", ["C"], C_SOURCES["a"]))
        tiling, store = prepare(empty_database, ["C"] * 4)
        usage = SourceUsage()
        MaxDistance().tile(tiling, store, usage)
        assert [p.start_bar for p in usage.history] == [0, 3, 1, 2]
        assert tiling.is_fully_tiled()

    def test_rescored_in_context(self, c_database: PatternDatabase) -> None:
        """Placements carry their score in the tiling context."""
        tiling, store = prepare(c_database, ["C"] * 2)
        MaxDistance().tile(tiling, store)
        assert all(p.score.overall > 0 for p in tiling.placements())


class TestStrategies:
    """Properties shared by every strategy."""

    PROGRESSION = ["Dm7", "G7", "Cmaj7", "%", "Em7", "A7", "Dm7", "G7", "C6", "_", "F7", "Bb7"]

    @pytest.mark.parametrize("name", list(StrategyName))
    def test_placements_never_overlap(self, library_database: PatternDatabase, name: StrategyName) -> None:
        """Placements cover usable bars only, at most once."""
        settings = EngineSettings()
        tiling, store = prepare(library_database, self.PROGRESSION, sizes=settings.sizes)
        create_strategy(name, settings).tile(tiling, store)
        assert len(tiling) > 0
        assert_valid(tiling)

    def test_create_strategy(self) -> None:
        """Names map to configured strategies."""
        settings = EngineSettings(sizes=[2, 1], one_out_of_x=3, coverage_percentage=0.5)
        assert isinstance(create_strategy(StrategyName.SIZE_CASCADE, settings), SizeCascade)
        assert create_strategy(StrategyName.MOST_COMPATIBLE_FIRST, settings).size == 2
        assert create_strategy(StrategyName.ONE_OUT_OF_X, settings).one_out_of == 3
        assert create_strategy(StrategyName.MAX_COVERAGE_PERCENTAGE, settings).coverage == 0.5
        assert isinstance(create_strategy(StrategyName.MAX_DISTANCE, settings), MaxDistance)
