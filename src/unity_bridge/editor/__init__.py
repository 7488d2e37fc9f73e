"""
Editor-side execution environment.

Scans the project's script files and answers bridge calls, either over a
websocket (EditorBridgeServer) or in-process (LocalTransport).
"""

from .analysis import LineHeuristicAnalyzer, ScriptAnalyzer
from .files import ProjectFileProvider, ScriptFile
from .handler import EditorRequestHandler

__all__ = [
    "EditorRequestHandler",
    "LineHeuristicAnalyzer",
    "ProjectFileProvider",
    "ScriptAnalyzer",
    "ScriptFile",
]
