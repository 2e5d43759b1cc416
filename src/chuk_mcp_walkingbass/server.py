#!/usr/bin/env python3
"""
Entry point for the CHUK Walking Bass MCP Server.

Parses the transport options plus the walking bass paths (engine settings
file, pattern library, MIDI output directory). The paths are handed to the
server module through environment variables, so they must be set before it
is imported.
"""

import argparse
import asyncio
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from chuk_mcp_walkingbass.constants import LIBRARY_ENV, OUTPUT_DIR_ENV, SETTINGS_ENV
from chuk_mcp_walkingbass.models.settings import EngineSettings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description="CHUK Walking Bass MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        help="Engine settings YAML (default: ./walkingbass.yaml when present)",
    )
    parser.add_argument(
        "--library",
        type=Path,
        help="Directory of pattern source YAML files (default: bundled library)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for exported MIDI files (default: ./output)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def configure_environment(args: argparse.Namespace) -> None:
    """
    Export the path options for the server module.

    Raises:
        FileNotFoundError: If the settings file or library directory is missing
        pydantic.ValidationError: If the settings file is invalid
    """
    if args.settings is not None:
        if not args.settings.is_file():
            raise FileNotFoundError(f"Settings file not found: {args.settings}")
        # Fail before the server starts rather than at import time
        EngineSettings.from_yaml(args.settings)
        os.environ[SETTINGS_ENV] = str(args.settings)
    if args.library is not None:
        if not args.library.is_dir():
            raise FileNotFoundError(f"Pattern library not found: {args.library}")
        os.environ[LIBRARY_ENV] = str(args.library)
    if args.output_dir is not None:
        os.environ[OUTPUT_DIR_ENV] = str(args.output_dir)


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point with transport detection."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        configure_environment(args)
    except (FileNotFoundError, ValueError) as e:
        parser.error(str(e))

    # Import after configuration so the server sees the chosen paths
    from chuk_mcp_walkingbass.async_server import mcp, pattern_database

    logger.info(f"Serving walking bass from {len(pattern_database)} pattern sources")
    if args.transport == "stdio":
        logger.info("Starting CHUK Walking Bass MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info(f"Starting CHUK Walking Bass MCP Server (http:{args.port})")
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
