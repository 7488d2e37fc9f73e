"""
Configuration management for Unity Script Bridge.

Configuration via environment variables:

Editor bridge communication:
- UNITY_BRIDGE_HOST: Host of the editor-side bridge (default: localhost)
- UNITY_BRIDGE_PORT: Port of the editor-side bridge (default: 8090)
- BRIDGE_TRANSPORT: "websocket" (default) or "local" (in-process editor handler)
- BRIDGE_REQUEST_TIMEOUT: Per-call timeout in seconds (default: 10)

Project files:
- UNITY_PROJECT_PATH: Unity project root (directory containing Assets/)
- BRIDGE_AUTO_DETECT_PROJECT: Walk up from cwd to find a project (default: true)

Logging:
- BRIDGE_LOG_LEVEL: Log level name (default: INFO)
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TransportKind(str, Enum):
    """How the server reaches the editor-side execution environment."""

    WEBSOCKET = "websocket"  # Editor bridge over a websocket connection (default)
    LOCAL = "local"  # In-process editor handler over the local project files


def _parse_bool(value: str | None, default: bool = True) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_transport(value: str | None) -> TransportKind:
    """Parse transport kind from environment variable."""
    if value is None:
        return TransportKind.WEBSOCKET
    try:
        return TransportKind(value.lower())
    except ValueError:
        return TransportKind.WEBSOCKET


def _parse_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def is_unity_project(path: Path) -> bool:
    """A Unity project root holds both Assets/ and ProjectSettings/."""
    return (path / "Assets").is_dir() and (path / "ProjectSettings").is_dir()


def _auto_detect_project_path() -> str | None:
    """
    Best-effort detection of the Unity project root when running from inside it.

    Covers the common case of launching the server from
      <Project>/Packages/com.example.bridge
    without passing --project-path.
    """
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents][:8]:
        if is_unity_project(parent):
            return str(parent.resolve())
    return None


def _default_project_path() -> str | None:
    explicit = os.getenv("UNITY_PROJECT_PATH")
    if explicit:
        return str(Path(explicit).resolve())
    if _parse_bool(os.getenv("BRIDGE_AUTO_DETECT_PROJECT"), True):
        return _auto_detect_project_path()
    return None


@dataclass
class Config:
    """Server configuration loaded from environment variables."""

    # Editor bridge
    bridge_host: str = field(default_factory=lambda: os.getenv("UNITY_BRIDGE_HOST", "localhost"))
    bridge_port: int = field(default_factory=lambda: int(os.getenv("UNITY_BRIDGE_PORT", "8090")))
    transport: TransportKind = field(
        default_factory=lambda: _parse_transport(os.getenv("BRIDGE_TRANSPORT"))
    )
    request_timeout: float = field(
        default_factory=lambda: _parse_float(os.getenv("BRIDGE_REQUEST_TIMEOUT"), 10.0)
    )

    # Project files
    project_path: str | None = field(default_factory=_default_project_path)

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("BRIDGE_LOG_LEVEL", "INFO"))

    @property
    def bridge_url(self) -> str:
        """Websocket URL of the editor bridge."""
        return f"ws://{self.bridge_host}:{self.bridge_port}"

    @property
    def health_url(self) -> str:
        """Plain HTTP base URL of the editor bridge (health endpoint)."""
        return f"http://{self.bridge_host}:{self.bridge_port}"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stderr.

    stdout is reserved for the MCP stdio transport.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
        force=True,
    )


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    global _config
    _config = None
