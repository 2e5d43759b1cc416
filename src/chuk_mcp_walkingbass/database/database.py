"""
Pattern Database - the process-wide registry of pattern sources.

The database provides access to the built-in source library and to sources
added at runtime (user sources, synthesized fallback sources). It is append
only: sources are never removed or replaced.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from pathlib import Path

from chuk_mcp_walkingbass.constants import BassStyle
from chuk_mcp_walkingbass.database.loader import load_library
from chuk_mcp_walkingbass.database.source import PatternSource

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_PATH = Path(__file__).parent / "library"


class PatternDatabase:
    """
    Thread-safe, append-only index of pattern sources.

    Sources are indexed by (root profile, size). Lookups return snapshot lists
    so readers never see a source being added.
    """

    def __init__(self, library_path: Path | None = DEFAULT_LIBRARY_PATH):
        """
        Initialize the database.

        Args:
            library_path: Directory of YAML source files, loaded on first access
                (None for an empty database)
        """
        self.library_path = library_path
        self._lock = threading.RLock()
        self._by_id: dict[str, PatternSource] = {}
        self._by_profile: dict[tuple[str, int], list[PatternSource]] = {}
        self._loaded = library_path is None

    def get(self, root_profile: str, size: int) -> list[PatternSource]:
        """
        Get the sources matching a root profile and a size.

        Args:
            root_profile: Root profile of a chord sequence
            size: Size in bars

        Returns:
            Snapshot list of matching sources, in insertion order
        """
        with self._lock:
            self._ensure_loaded()
            return list(self._by_profile.get((root_profile, size), ()))

    def add_source(self, source: PatternSource) -> bool:
        """
        Add a source.

        Args:
            source: Source to add

        Returns:
            False if a source with the same id or the same content already exists
        """
        with self._lock:
            self._ensure_loaded()
            return self._add(source)

    def get_source(self, source_id: str) -> PatternSource | None:
        """Get a source by id."""
        with self._lock:
            self._ensure_loaded()
            return self._by_id.get(source_id)

    def sources(
        self,
        size: int | None = None,
        style: BassStyle | None = None,
    ) -> list[PatternSource]:
        """
        List sources with optional filtering.

        Args:
            size: Filter by size in bars
            style: Filter by bass style

        Returns:
            Sources sorted by id
        """
        with self._lock:
            self._ensure_loaded()
            result = list(self._by_id.values())

        if size is not None:
            result = [s for s in result if s.size == size]
        if style is not None:
            result = [s for s in result if s.style == style]

        return sorted(result, key=lambda s: s.id)

    def to_stats_string(self) -> str:
        """One line summary: number of sources per size."""
        with self._lock:
            self._ensure_loaded()
            counts = Counter(s.size for s in self._by_id.values())
            total = len(self._by_id)
        parts = ", ".join(f"{size}-bar: {counts[size]}" for size in sorted(counts))
        return f"PatternDatabase {total} sources ({parts})"

    def __len__(self) -> int:
        with self._lock:
            self._ensure_loaded()
            return len(self._by_id)

    def __contains__(self, source_id: object) -> bool:
        with self._lock:
            self._ensure_loaded()
            return source_id in self._by_id

    def _add(self, source: PatternSource) -> bool:
        if source.id in self._by_id:
            logger.debug("Source %s already exists", source.id)
            return False

        key = (source.root_profile, source.size)
        bucket = self._by_profile.setdefault(key, [])
        for existing in bucket:
            if existing.is_equivalent(source):
                logger.debug("Source %s duplicates %s", source.id, existing.id)
                return False

        bucket.append(source)
        self._by_id[source.id] = source
        return True

    def _ensure_loaded(self) -> None:
        """Load the library on first access."""
        if self._loaded:
            return
        self._loaded = True

        assert self.library_path is not None
        for source in load_library(self.library_path):
            if not self._add(source):
                logger.warning("Skipping duplicate library source %s", source.id)

        logger.info("Loaded %d pattern sources from %s", len(self._by_id), self.library_path)
