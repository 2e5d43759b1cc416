"""
Source tools - MCP tools for pattern source discovery and registration.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_walkingbass.constants import BassStyle, ErrorMessages, SuccessMessages
from chuk_mcp_walkingbass.database.database import PatternDatabase
from chuk_mcp_walkingbass.models.source import SourceDefinition, SourceSummary

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_source_tools(
    mcp: ChukMCPServer,
    database: PatternDatabase,
) -> dict[str, Any]:
    """
    Register pattern source tools with the MCP server.

    Args:
        mcp: The MCP server instance
        database: The pattern source database

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def bass_list_sources(
        size: int | None = None,
        style: str | None = None,
        include_generated: bool = True,
    ) -> str:
        """
        List available bass pattern sources.

        Args:
            size: Optional filter by size in bars (1-4)
            style: Optional filter by style ('walking', 'two_feel', 'basic', 'custom')
            include_generated: Whether to include synthesized sources

        Returns:
            JSON string with list of source summaries

        Example:
            bass_list_sources(size=2)
        """
        try:
            style_enum = BassStyle(style) if style else None
            sources = database.sources(size=size, style=style_enum)
            if not include_generated:
                sources = [s for s in sources if not s.is_generated]

            return json.dumps(
                {
                    "status": "success",
                    "sources": [SourceSummary.from_source(s).to_dict() for s in sources],
                    "count": len(sources),
                }
            )
        except Exception as e:
            logger.exception("Failed to list sources")
            return json.dumps({"status": "error", "message": str(e)})

    tools["bass_list_sources"] = bass_list_sources

    @mcp.tool  # type: ignore[arg-type]
    async def bass_describe_source(source_id: str) -> str:
        """
        Get the chords and notes of a pattern source.

        Args:
            source_id: Source identifier (e.g., 'ii-V-2bar-1')

        Returns:
            JSON string with source details

        Example:
            bass_describe_source(source_id="ii-V-2bar-1")
        """
        try:
            source = database.get_source(source_id)
            if source is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SOURCE_NOT_FOUND.format(source_id=source_id)}
                )

            return json.dumps(
                {
                    "status": "success",
                    "source": SourceDefinition.from_source(source).model_dump(mode="json"),
                    "root_profile": source.root_profile,
                    "generated": source.is_generated,
                }
            )
        except Exception as e:
            logger.exception("Failed to describe source")
            return json.dumps({"status": "error", "message": str(e)})

    tools["bass_describe_source"] = bass_describe_source

    @mcp.tool  # type: ignore[arg-type]
    async def bass_add_source(source: dict[str, Any]) -> str:
        """
        Register a new pattern source.

        The source uses the library format: id, style, time_signature, chords
        (bar, beat, symbol) and notes (pitch, position, duration, velocity).

        Args:
            source: The source definition

        Returns:
            JSON string with the registration result

        Example:
            bass_add_source(source={
                "id": "my-ii-V",
                "chords": [{"bar": 0, "beat": 0, "symbol": "Dm7"},
                           {"bar": 0, "beat": 2, "symbol": "G7"}],
                "notes": [{"pitch": 38, "position": 0}, {"pitch": 41, "position": 1},
                          {"pitch": 43, "position": 2}, {"pitch": 47, "position": 3}]
            })
        """
        try:
            pattern_source = SourceDefinition.model_validate(source).to_source()
            if not database.add_source(pattern_source):
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.SOURCE_EXISTS.format(source_id=pattern_source.id),
                    }
                )

            return json.dumps(
                {
                    "status": "success",
                    "source": SourceSummary.from_source(pattern_source).to_dict(),
                    "message": SuccessMessages.SOURCE_ADDED.format(
                        source_id=pattern_source.id, size=pattern_source.size
                    ),
                }
            )
        except ValueError as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to add source")
            return json.dumps({"status": "error", "message": str(e)})

    tools["bass_add_source"] = bass_add_source

    return tools
