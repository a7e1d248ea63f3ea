"""
MCP tools for Android USB Options.
"""
from .handlers import register_tools

__all__ = ["register_tools"]
