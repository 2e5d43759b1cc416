"""
Tiling engine - generates a walking bass tiling for a chord sequence.

Each iteration:
1. premium phase: only candidates scoring at least settings.premium_score,
   primary strategy then secondary strategy
2. standard phase: same strategies, every acceptable candidate
3. custom phase: MaxDistance over generated (CUSTOM) sources
4. synthesizes and registers sources for the remaining zones (if enabled),
   the next iteration places them like any other source

The loop stops when every usable bar is covered, when robustness iterations
are spent, or when the request is cancelled. On the last iteration, and when
an equivalent source was already registered, synthesized sources are placed
directly on their zone.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from chuk_mcp_walkingbass.constants import MAX_SOURCE_SIZE, BassStyle, TilingState
from chuk_mcp_walkingbass.core.chord_sequence import ChordSequence
from chuk_mcp_walkingbass.core.phrase import Phrase
from chuk_mcp_walkingbass.core.rhythm import BarRange
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.database.source import PatternSource
from chuk_mcp_walkingbass.models.settings import EngineSettings
from chuk_mcp_walkingbass.tiling.fallback import FallbackSynthesizer
from chuk_mcp_walkingbass.tiling.placement import PatternPlacement
from chuk_mcp_walkingbass.tiling.scorer import CompatibilityScorer
from chuk_mcp_walkingbass.tiling.store import CandidateStore
from chuk_mcp_walkingbass.tiling.tilers import MaxDistance, SourceUsage, TilingStrategy, create_strategy
from chuk_mcp_walkingbass.tiling.tiling import Tiling

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cancels a generation request explicitly or after a deadline."""

    def __init__(self, deadline_seconds: float | None = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + deadline_seconds if deadline_seconds is not None else None

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called or the deadline has passed."""
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline


@dataclass
class TilingResult:
    """Outcome of a generation request."""

    tiling: Tiling
    state: TilingState
    iterations: int
    generated_sources: list[PatternSource] = field(default_factory=list)
    cancelled: bool = False

    @property
    def phrase(self) -> Phrase:
        """The rendered bass phrase, untiled bars are silent."""
        return self.tiling.render()

    @property
    def untiled_bars(self) -> list[int]:
        """Usable bars left without bass."""
        return self.tiling.untiled_bars()

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary."""
        return {
            "state": self.state.value,
            "iterations": self.iterations,
            "cancelled": self.cancelled,
            "untiled_bars": self.untiled_bars,
            "generated_sources": [s.id for s in self.generated_sources],
            "notes": len(self.phrase),
            **self.tiling.to_dict(),
        }


def split_zone(zone: BarRange, max_size: int = MAX_SOURCE_SIZE) -> list[BarRange]:
    """
    Split a bar range into consecutive chunks of at most max_size bars.

    Example: a 6-bar zone gives a 4-bar chunk then a 2-bar chunk.
    """
    chunks = []
    start = zone.start
    while start <= zone.end:
        size = min(max_size, zone.end - start + 1)
        chunks.append(BarRange.of_size(start, size))
        start += size
    return chunks


@dataclass(frozen=True)
class TilingPhase:
    """A scorer and the strategies run with its candidates."""

    name: str
    scorer: CompatibilityScorer
    strategies: tuple[TilingStrategy, ...]


class TilingEngine:
    """
    Orchestrates strategies and fallback synthesis over bounded iterations.

    The engine holds no per-request state: generate() can be called repeatedly,
    each call works on its own tiling, stores and usage counters.
    """

    def __init__(
        self,
        database: PatternDatabase,
        settings: EngineSettings | None = None,
        scorer: CompatibilityScorer | None = None,
        fallback: FallbackSynthesizer | None = None,
    ):
        """
        Initialize the engine.

        Args:
            database: Source database, synthesized sources are added to it
            settings: Engine settings (default: EngineSettings())
            scorer: Standard phase scorer (default: accepts settings.styles)
            fallback: Synthesizer used for untiled zones
        """
        self.database = database
        self.settings = settings or EngineSettings()
        self.scorer = scorer or CompatibilityScorer(styles=self.settings.styles)
        self.fallback = fallback or FallbackSynthesizer()

    def phases(self) -> list[TilingPhase]:
        """The phases run by each iteration, in order."""
        settings = self.settings
        strategies: tuple[TilingStrategy, ...] = (create_strategy(settings.primary_strategy, settings),)
        if settings.secondary_strategy:
            strategies += (create_strategy(settings.secondary_strategy, settings),)

        phases = []
        if settings.premium_score is not None:
            premium = self.scorer.restricted(min_score=settings.premium_score)
            phases.append(TilingPhase("premium", premium, strategies))
        phases.append(TilingPhase("standard", self.scorer, strategies))
        custom = CompatibilityScorer(styles=[BassStyle.CUSTOM], min_score=self.scorer.min_score)
        phases.append(TilingPhase("custom", custom, (MaxDistance(),)))
        return phases

    def generate(self, sequence: ChordSequence, cancel_token: CancellationToken | None = None) -> TilingResult:
        """
        Tile a chord sequence.

        Args:
            sequence: The chord sequence to cover
            cancel_token: Optional cancellation (default: settings deadline, if any)

        Returns:
            The result, FULLY_TILED or EXHAUSTED
        """
        settings = self.settings
        token = cancel_token or CancellationToken(settings.deadline_seconds)
        phases = self.phases()

        tiling = Tiling(sequence)
        usage = SourceUsage()
        generated: list[PatternSource] = []
        state = TilingState.UNRESOLVED
        iterations = 0
        cancelled = False
        robustness = settings.robustness

        while not tiling.is_fully_tiled() and robustness > 0:
            if token.cancelled:
                logger.info("Generation cancelled after %d iterations", iterations)
                cancelled = True
                break

            iterations += 1
            robustness -= 1
            for phase in phases:
                if tiling.is_fully_tiled():
                    break
                self._run_phase(phase, tiling, usage)

            if len(tiling) > 0:
                state = TilingState.PARTIALLY_TILED
            logger.debug("Iteration %d (%s):\n%s", iterations, state.value, tiling.to_multiline_string())

            if settings.fallback_enabled and not tiling.is_fully_tiled():
                generated.extend(self._synthesize(tiling, place_all=robustness == 0))

        state = TilingState.FULLY_TILED if tiling.is_fully_tiled() else TilingState.EXHAUSTED
        if state == TilingState.EXHAUSTED:
            logger.warning("Untiled bars left after %d iterations: %s", iterations, tiling.untiled_bars())
        logger.info(
            "Tiled %d/%d bars in %d iterations (%s), %d sources generated",
            len(tiling.tiled_bars()),
            len(tiling.usable_bars),
            iterations,
            state.value,
            len(generated),
        )
        logger.debug("Source usage:\n%s", tiling.to_stats_string())

        return TilingResult(tiling, state, iterations, generated, cancelled)

    def _run_phase(self, phase: TilingPhase, tiling: Tiling, usage: SourceUsage) -> None:
        settings = self.settings
        store = CandidateStore.build(
            tiling.sequence,
            self.database,
            phase.scorer,
            sizes=settings.sizes,
            nb_best_max=settings.nb_best_max,
            min_score=settings.min_score,
            bars=tiling.untiled_bars(),
        )
        logger.debug("Phase %s store:\n%s", phase.name, store.to_debug_string())
        for strategy in phase.strategies:
            if tiling.is_fully_tiled():
                break
            strategy.tile(tiling, store, usage)

    def _synthesize(self, tiling: Tiling, place_all: bool = False) -> list[PatternSource]:
        """
        Synthesize and register one source per untiled chunk.

        Chunks are processed from the last one so that each synthesized phrase
        can target the first note of the phrase that follows it. A new source is
        left to the next iteration. One already registered was passed over by
        the phases and is placed directly, as is every source when place_all.

        Returns:
            The sources added to the database
        """
        created = []
        first_pitches: dict[int, int] = {}
        chunks = [chunk for zone in tiling.untiled_zones() for chunk in split_zone(zone)]

        for chunk in reversed(chunks):
            zone_sequence = tiling.sequence.sub_sequence(chunk, shift_to_zero=True)
            following = tiling.placement_starting_at(chunk.end + 1)
            if following is not None:
                target_pitch: int | None = following.adapted_first_pitch
            else:
                target_pitch = first_pitches.get(chunk.end + 1)

            source = self.fallback.synthesize(zone_sequence, target_pitch)
            added = self.database.add_source(source)
            if added:
                created.append(source)
            else:
                source = self._registered_equivalent(source)
            first_pitches[chunk.start] = source.first_note.pitch

            if added and not place_all:
                continue
            placement = PatternPlacement(source, chunk, zone_sequence)
            score = self.scorer.score(placement, tiling)
            if score.overall <= 0:
                logger.warning("Placing %s on bars %s with a zero score", source.id, chunk)
            tiling.add(placement.with_score(score))

        return created

    def _registered_equivalent(self, source: PatternSource) -> PatternSource:
        for existing in self.database.get(source.root_profile, source.size):
            if existing.is_equivalent(source):
                return existing
        logger.warning("Synthesized source %s was not added to the database", source.id)
        return source
