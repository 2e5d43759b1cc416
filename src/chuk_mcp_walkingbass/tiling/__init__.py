"""
Tiling engine - covers a chord sequence with pattern sources.

The pipeline:
    ChordSequence → CandidateStore (PatternDatabase + CompatibilityScorer)
    → strategies fill a Tiling → fallback synthesis for leftover zones
    → Tiling.render() → Phrase
"""

from chuk_mcp_walkingbass.tiling.engine import (
    CancellationToken,
    TilingEngine,
    TilingPhase,
    TilingResult,
    split_zone,
)
from chuk_mcp_walkingbass.tiling.fallback import FallbackSynthesizer
from chuk_mcp_walkingbass.tiling.placement import PatternPlacement, Score
from chuk_mcp_walkingbass.tiling.scorer import CompatibilityScorer
from chuk_mcp_walkingbass.tiling.store import CandidateStore
from chuk_mcp_walkingbass.tiling.tilers import (
    BestFirstNoRepeat,
    DiversityCappedTiler,
    MaxCoveragePercentage,
    MaxDistance,
    MostCompatibleFirst,
    OneOutOfTwo,
    OneOutOfX,
    SizeCascade,
    SourceUsage,
    TilingStrategy,
    create_strategy,
    place_ranked,
)
from chuk_mcp_walkingbass.tiling.tiling import Tiling

__all__ = [
    # Placement
    "PatternPlacement",
    "Score",
    "Tiling",
    # Scoring
    "CompatibilityScorer",
    "CandidateStore",
    # Strategies
    "TilingStrategy",
    "SourceUsage",
    "place_ranked",
    "MostCompatibleFirst",
    "SizeCascade",
    "DiversityCappedTiler",
    "OneOutOfTwo",
    "OneOutOfX",
    "MaxCoveragePercentage",
    "BestFirstNoRepeat",
    "MaxDistance",
    "create_strategy",
    # Engine
    "CancellationToken",
    "FallbackSynthesizer",
    "TilingEngine",
    "TilingPhase",
    "TilingResult",
    "split_zone",
]
