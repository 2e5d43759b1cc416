"""
Rhythm primitives - TimeSignature and BarRange.

Positions in the engine are expressed in beats (floats) relative to the
start of a chord sequence, bars are zero-based integers.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class TimeSignature:
    """
    A time signature defining beats per bar and beat unit.

    Examples:
        TimeSignature(4, 4) = 4/4
        TimeSignature(3, 4) = 3/4
    """

    beats_per_bar: int
    beat_unit: int = 4

    COMMON_TIME: ClassVar[TimeSignature]  # 4/4
    WALTZ: ClassVar[TimeSignature]  # 3/4

    def __post_init__(self) -> None:
        if self.beats_per_bar <= 0:
            raise ValueError(f"Beats per bar must be positive, got {self.beats_per_bar}")
        if self.beat_unit not in (1, 2, 4, 8, 16):
            raise ValueError(f"Invalid beat unit: {self.beat_unit}")

    @property
    def half_bar(self) -> float:
        """Position in beats of the middle of a bar."""
        return self.beats_per_bar / 2

    @classmethod
    def parse(cls, text: str) -> TimeSignature:
        """Parse a time signature like '4/4' or '3/4'."""
        parts = text.strip().split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid time signature: {text}")
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError as e:
            raise ValueError(f"Invalid time signature: {text}") from e

    def __str__(self) -> str:
        return f"{self.beats_per_bar}/{self.beat_unit}"


TimeSignature.COMMON_TIME = TimeSignature(4, 4)
TimeSignature.WALTZ = TimeSignature(3, 4)


@dataclass(frozen=True, order=True)
class BarRange:
    """
    An inclusive range of bars [start, end].

    Immutable, hashable and ordered by start bar.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid bar range [{self.start}, {self.end}]")

    @classmethod
    def of_size(cls, start: int, size: int) -> BarRange:
        """Create a range of size bars starting at start."""
        return cls(start, start + size - 1)

    @property
    def size(self) -> int:
        """Number of bars."""
        return self.end - self.start + 1

    def contains(self, bar_or_range: int | BarRange) -> bool:
        """Check if a bar or a whole bar range is inside this range."""
        if isinstance(bar_or_range, BarRange):
            return self.start <= bar_or_range.start and bar_or_range.end <= self.end
        return self.start <= bar_or_range <= self.end

    def intersects(self, other: BarRange) -> bool:
        """Check if the two ranges share at least one bar."""
        return self.start <= other.end and other.start <= self.end

    def shifted(self, offset: int) -> BarRange:
        """Get a copy moved by offset bars."""
        return BarRange(self.start + offset, self.end + offset)

    def bars(self) -> range:
        """The bar indexes of this range."""
        return range(self.start, self.end + 1)

    def __iter__(self) -> Iterator[int]:
        return iter(self.bars())

    def __str__(self) -> str:
        return f"[{self.start}-{self.end}]"
