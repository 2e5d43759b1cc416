"""
Engine settings - every tunable of a generation request.

Settings are passed explicitly to the engine; there is no global instance.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from chuk_mcp_walkingbass.constants import (
    MAX_SOURCE_SIZE,
    MIN_SOURCE_SIZE,
    BassStyle,
    StrategyName,
)


class EngineSettings(BaseModel):
    """
    Configuration of the tiling engine.

    Example (YAML):
        nb_best_max: 5
        min_score: 30
        robustness: 20
        premium_score: 75
        primary_strategy: size_cascade
        secondary_strategy: max_distance
    """

    # Candidate store
    nb_best_max: int = Field(5, ge=1, description="Candidates kept per (bar, size)")
    min_score: float = Field(30.0, ge=0, le=100, description="Candidates scoring below are dropped")
    sizes: list[int] = Field(
        default_factory=lambda: [4, 3, 2, 1], min_length=1, description="Source sizes tried, in bars"
    )

    # Engine loop
    robustness: int = Field(20, ge=1, description="Maximum number of engine iterations")
    primary_strategy: StrategyName = Field(StrategyName.SIZE_CASCADE, description="First tiling pass")
    secondary_strategy: StrategyName | None = Field(
        StrategyName.MAX_DISTANCE, description="Second tiling pass (None to skip)"
    )
    fallback_enabled: bool = Field(True, description="Synthesize sources for untiled zones")
    deadline_seconds: float | None = Field(None, gt=0, description="Wall-clock limit per request")

    # Diversity strategies
    one_out_of_x: int = Field(2, ge=1, description="A source is reused at most once every x placements")
    coverage_percentage: float = Field(
        0.25, gt=0, le=1, description="Max share of usable bars covered by one source"
    )

    # Scoring
    styles: list[BassStyle] | None = Field(None, description="Accepted source styles (None = all)")
    premium_score: float | None = Field(
        75.0, ge=0, le=100, description="Minimum score of the first, premium-only phase (None to skip)"
    )

    model_config = {"frozen": True}

    @field_validator("sizes")
    @classmethod
    def validate_sizes(cls, v: list[int]) -> list[int]:
        """Ensure sizes are valid source sizes, without duplicates."""
        for size in v:
            if not MIN_SOURCE_SIZE <= size <= MAX_SOURCE_SIZE:
                raise ValueError(f"Invalid size {size}, expected {MIN_SOURCE_SIZE}-{MAX_SOURCE_SIZE}")
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate sizes: {v}")
        return v

    @classmethod
    def from_yaml(cls, path: Path) -> EngineSettings:
        """
        Load settings from a YAML file.

        Missing keys use defaults. An empty file gives default settings.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        data.pop("schema", None)
        return cls.model_validate(data)
