"""
MCP Tools for Unity Script Bridge.

Modules:
- scripts: C# script listing and content retrieval (editor round-trip)
- analysis: Heuristic C# file analysis (editor round-trip)
- status: Bridge status and call discovery (local)
"""

from ..protocol import CallRegistry
from . import analysis, scripts, status

__all__ = ["analysis", "scripts", "status", "ENTRYPOINTS", "RESOURCE_READERS", "register_calls"]

# MCP-facing function per registered call name
ENTRYPOINTS = {
    scripts.NAME: scripts.get_scripts,
    analysis.NAME: analysis.analyze_cs_files,
    status.NAME: status.get_bridge_status,
}

# Resource reader per call that is also exposed as a resource
RESOURCE_READERS = {
    scripts.NAME: scripts.read_scripts,
    analysis.NAME: analysis.read_analysis,
}


def register_calls(registry: CallRegistry) -> CallRegistry:
    """Register every built-in call descriptor."""
    registry.register(scripts.DESCRIPTOR)
    registry.register(analysis.DESCRIPTOR)
    registry.register(status.DESCRIPTOR)
    return registry
