#!/usr/bin/env python3
"""
Async Walking Bass MCP Server using chuk-mcp-server

This server provides MCP tools to generate walking bass lines over chord
progressions. Bass lines are tiled from a library of recorded 1-4 bar
patterns, chosen for harmonic compatibility and diversity; zones no pattern
fits get a synthesized line.

The server provides tools for:
- Generating a walking bass line and inspecting the tiling
- Exporting the bass line to a MIDI file
- Browsing and extending the pattern source library
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_walkingbass.constants import LIBRARY_ENV, OUTPUT_DIR_ENV, SETTINGS_ENV
from chuk_mcp_walkingbass.database.database import DEFAULT_LIBRARY_PATH, PatternDatabase
from chuk_mcp_walkingbass.models.settings import EngineSettings
from chuk_mcp_walkingbass.tools import register_generation_tools, register_source_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-walkingbass")

# Paths - use standard project structure, the CLI may override them
BASE_PATH = Path.cwd()
OUTPUT_DIR = Path(os.environ.get(OUTPUT_DIR_ENV, BASE_PATH / "output"))
SETTINGS_PATH = Path(os.environ.get(SETTINGS_ENV, BASE_PATH / "walkingbass.yaml"))
LIBRARY_PATH = Path(os.environ.get(LIBRARY_ENV, DEFAULT_LIBRARY_PATH))

# Engine settings (project file overrides defaults)
engine_settings = EngineSettings.from_yaml(SETTINGS_PATH) if SETTINGS_PATH.exists() else EngineSettings()

# Shared source database
pattern_database = PatternDatabase(library_path=LIBRARY_PATH)

# Register all tools
generation_tools = register_generation_tools(mcp, pattern_database, engine_settings, OUTPUT_DIR)
source_tools = register_source_tools(mcp, pattern_database)

# Export tool functions for direct access
bass_generate = generation_tools["bass_generate"]
bass_export_midi = generation_tools["bass_export_midi"]

bass_list_sources = source_tools["bass_list_sources"]
bass_describe_source = source_tools["bass_describe_source"]
bass_add_source = source_tools["bass_add_source"]

logger.info("CHUK Walking Bass MCP Server initialized")
logger.info(f"  Library path: {LIBRARY_PATH}")
logger.info(f"  Settings: {SETTINGS_PATH if SETTINGS_PATH.exists() else 'defaults'}")
logger.info(f"  Output dir: {OUTPUT_DIR}")
