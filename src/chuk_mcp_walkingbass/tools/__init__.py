"""
MCP tool implementations.

Tools are organized by domain:
- generation - Walking bass generation and MIDI export
- sources - Pattern source discovery and registration
"""

from chuk_mcp_walkingbass.tools.generation import register_generation_tools
from chuk_mcp_walkingbass.tools.sources import register_source_tools

__all__ = [
    "register_generation_tools",
    "register_source_tools",
]
