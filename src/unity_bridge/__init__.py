"""
Unity Script Bridge - MCP Server for inspecting Unity project scripts.

Provides:
- A call registry with declarative parameter schemas
- A correlating dispatcher over an editor-side transport
- Script listing and heuristic C# analysis tools
"""

__version__ = "0.2.0"
