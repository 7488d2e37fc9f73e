"""
Process-wide bridge instance.

The registry is built once at startup and sealed; the bridge couples it with a
dispatcher over the configured transport.
"""

from __future__ import annotations

from .config import Config, get_config
from .editor_client import create_transport
from .protocol import CallBridge, CallRegistry, Dispatcher, Transport


def build_registry() -> CallRegistry:
    """Registry with every built-in call, sealed."""
    from .tools import register_calls

    registry = register_calls(CallRegistry())
    registry.seal()
    return registry


def build_bridge(config: Config | None = None, transport: Transport | None = None) -> CallBridge:
    """Assemble registry, transport and dispatcher into a bridge."""
    config = config or get_config()
    transport = transport or create_transport(config)
    dispatcher = Dispatcher(transport, default_timeout=config.request_timeout)
    return CallBridge(build_registry(), dispatcher)


# Global bridge instance
_bridge: CallBridge | None = None


def get_bridge() -> CallBridge:
    """Get the global bridge instance."""
    global _bridge
    if _bridge is None:
        _bridge = build_bridge()
    return _bridge


def set_bridge(bridge: CallBridge | None) -> None:
    """Set (or clear) the global bridge instance."""
    global _bridge
    _bridge = bridge
