"""
Editor client: transports from the MCP server to the editor-side bridge.
"""

from ..config import Config, TransportKind, get_config
from ..editor.handler import EditorRequestHandler
from ..protocol.dispatcher import Transport
from .http_client import EditorHealthClient
from .local_transport import LocalTransport
from .websocket_transport import WebSocketTransport

__all__ = [
    "EditorHealthClient",
    "LocalTransport",
    "WebSocketTransport",
    "create_transport",
]


def create_transport(config: Config | None = None) -> Transport:
    """Build the transport selected by configuration.

    Raises:
        ValueError: If the local transport is selected without a project path
    """
    config = config or get_config()
    if config.transport == TransportKind.LOCAL:
        if not config.project_path:
            raise ValueError("Local transport needs UNITY_PROJECT_PATH (or --project-path)")
        return LocalTransport(EditorRequestHandler.for_project(config.project_path))
    return WebSocketTransport(config.bridge_url)
