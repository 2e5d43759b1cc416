"""
Source loader - reads pattern sources from YAML library files.

A library file holds a list of sources:

    schema: bass-sources/v1
    sources:
      - id: ...
        chords: [...]
        notes: [...]

Malformed entries are logged and skipped, they never abort a load.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from chuk_mcp_walkingbass.database.source import PatternSource
from chuk_mcp_walkingbass.models.source import SourceDefinition

logger = logging.getLogger(__name__)

SOURCES_SCHEMA = "bass-sources/v1"


def load_source_file(path: Path) -> list[PatternSource]:
    """
    Load the sources of one YAML file.

    Args:
        path: Path to a bass-sources/v1 YAML file

    Returns:
        The valid sources of the file (possibly empty)
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Skipping unreadable source file %s: %s", path, e)
        return []

    if not isinstance(data, dict):
        logger.warning("Skipping source file %s: expected a mapping", path)
        return []

    schema = data.get("schema", SOURCES_SCHEMA)
    if schema != SOURCES_SCHEMA:
        logger.warning("Skipping source file %s: unsupported schema %r", path, schema)
        return []

    sources = []
    for index, entry in enumerate(data.get("sources") or []):
        try:
            sources.append(SourceDefinition.model_validate(entry).to_source())
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning("Skipping source #%d of %s: %s", index, path.name, e)

    logger.debug("Loaded %d sources from %s", len(sources), path)
    return sources


def load_library(library_path: Path) -> list[PatternSource]:
    """
    Load the sources of every *.yaml file of a directory, sorted by file name.

    Args:
        library_path: Directory holding source files

    Returns:
        All valid sources
    """
    if not library_path.exists():
        logger.warning("Source library %s does not exist", library_path)
        return []

    sources: list[PatternSource] = []
    for path in sorted(library_path.glob("*.yaml")):
        sources.extend(load_source_file(path))
    return sources
