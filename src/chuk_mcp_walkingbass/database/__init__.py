"""
Pattern source database - the recorded bass fragments.

The database indexes sources by (root profile, size) and is shared by every
generation request of the process.
"""

# Import the source model first (no circular dependencies)
from chuk_mcp_walkingbass.database.source import PatternSource


def __getattr__(name: str):
    """Lazy imports for the database and loader, which depend on the models."""
    if name in ("PatternDatabase", "DEFAULT_LIBRARY_PATH"):
        from chuk_mcp_walkingbass.database.database import DEFAULT_LIBRARY_PATH, PatternDatabase

        return {"PatternDatabase": PatternDatabase, "DEFAULT_LIBRARY_PATH": DEFAULT_LIBRARY_PATH}[name]
    if name in ("load_library", "load_source_file"):
        from chuk_mcp_walkingbass.database.loader import load_library, load_source_file

        return {"load_library": load_library, "load_source_file": load_source_file}[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "DEFAULT_LIBRARY_PATH",
    "PatternDatabase",
    "PatternSource",
    "load_library",
    "load_source_file",
]
