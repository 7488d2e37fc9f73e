"""
MCP Server entry point - Unity Script Bridge.

Every tool and resource is registered from the call registry: the registry's
(name, description, schema) entries are the advertised API.

Environment variables:
- UNITY_BRIDGE_HOST / UNITY_BRIDGE_PORT: Editor bridge address (default: localhost:8090)
- BRIDGE_TRANSPORT: websocket (default) | local
- BRIDGE_REQUEST_TIMEOUT: Per-call timeout in seconds (default: 10)
- UNITY_PROJECT_PATH: Unity project root (needed for local transport)
- BRIDGE_LOG_LEVEL: Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from fastmcp import FastMCP
from fastmcp.tools import Tool

from . import __version__
from .config import TransportKind, get_config, setup_logging
from .editor_client import EditorHealthClient
from .protocol import CallBridge, CallDescriptor, TransportError
from .runtime import get_bridge
from .tools import ENTRYPOINTS, RESOURCE_READERS

logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = FastMCP(
    name="UnityScriptBridge",
    version=__version__,
)


def _build_tool(descriptor: CallDescriptor, entrypoint) -> Tool:
    """MCP tool for one call; the advertised schema is the call's own parameter schema.

    Entrypoints accept anything, so every argument reaches the call's validator.
    """
    tool = Tool.from_function(entrypoint, name=descriptor.name, description=descriptor.description)
    return tool.model_copy(update={"parameters": descriptor.input_schema})


def register_tools(server: FastMCP, bridge: CallBridge) -> list[str]:
    """Expose every registered call as an MCP tool, and as a resource when it has a URI.

    Resources take the call's parameters from the URI query, e.g.
    ``unity://scripts?searchPattern=Player&includeContent=true``.

    Returns:
        Names of the registered tools
    """
    registered: list[str] = []
    for descriptor in bridge.registry:
        entrypoint = ENTRYPOINTS.get(descriptor.name)
        if entrypoint is None:
            logger.warning("No MCP entrypoint for call %s; not exposed", descriptor.name)
            continue

        logger.info("Registering tool: %s", descriptor.name)
        server.add_tool(_build_tool(descriptor, entrypoint))
        registered.append(descriptor.name)

        reader = RESOURCE_READERS.get(descriptor.name)
        if descriptor.uri and reader is not None:
            logger.info("Registering resource: %s (%s)", descriptor.name, descriptor.uri_template)
            server.resource(
                descriptor.uri_template,
                name=descriptor.name,
                description=descriptor.description,
                mime_type="application/json",
            )(reader)

    logger.info("Registered %d tools", len(registered))
    return registered


async def check_editor() -> bool:
    """Probe the editor bridge health endpoint and log the outcome."""
    cfg = get_config()
    if cfg.transport == TransportKind.LOCAL:
        logger.info("Local transport: serving %s in-process", cfg.project_path)
        return True

    client = EditorHealthClient(cfg.health_url)
    try:
        health = await client.health_check()
    except TransportError as e:
        logger.warning("%s", e.detail)
        logger.warning("Tools will fail with TransportError until the editor bridge is up.")
        return False
    finally:
        await client.close()

    logger.info("Editor bridge is up (version %s)", health.get("version", "?"))
    return True


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unity-bridge",
        description="Unity Script Bridge MCP Server",
    )

    parser.add_argument("--bridge-host", default=None, help="Editor bridge host")
    parser.add_argument("--bridge-port", type=int, default=None, help="Editor bridge port (default: 8090)")
    parser.add_argument(
        "--bridge-transport",
        choices=[k.value for k in TransportKind],
        default=None,
        help="How to reach the editor: websocket (default) or local",
    )
    parser.add_argument("--project-path", default=None, help="Unity project root")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call timeout in seconds")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")
    parser.add_argument(
        "--no-health-check",
        action="store_true",
        help="Skip probing the editor bridge on startup",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print effective config and exit",
    )

    # MCP transport options
    parser.add_argument(
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    parser.add_argument("--mcp-host", default="127.0.0.1", help="Host for http/sse transport")
    parser.add_argument("--mcp-port", type=int, default=8000, help="Port for http/sse transport")
    parser.add_argument("--mcp-path", default="/mcp", help="Path prefix for http transport")

    return parser


def _apply_cli_overrides(args: argparse.Namespace) -> None:
    """Apply CLI overrides to env vars (single-run convenience)."""
    if args.bridge_host:
        os.environ["UNITY_BRIDGE_HOST"] = args.bridge_host
    if args.bridge_port is not None:
        os.environ["UNITY_BRIDGE_PORT"] = str(args.bridge_port)
    if args.bridge_transport:
        os.environ["BRIDGE_TRANSPORT"] = args.bridge_transport
    if args.project_path:
        os.environ["UNITY_PROJECT_PATH"] = args.project_path
    if args.timeout is not None:
        os.environ["BRIDGE_REQUEST_TIMEOUT"] = str(args.timeout)
    if args.log_level:
        os.environ["BRIDGE_LOG_LEVEL"] = args.log_level


def main():
    """Run the MCP server."""
    parser = _build_arg_parser()
    args = parser.parse_args(sys.argv[1:])
    _apply_cli_overrides(args)

    cfg = get_config()
    setup_logging(cfg.log_level)

    if args.print_config:
        print("[Unity Bridge] Effective config:")
        print(f"  BRIDGE_URL: {cfg.bridge_url}")
        print(f"  BRIDGE_TRANSPORT: {cfg.transport.value}")
        print(f"  BRIDGE_REQUEST_TIMEOUT: {cfg.request_timeout}")
        print(f"  UNITY_PROJECT_PATH: {cfg.project_path}")
        print(f"  LOG_LEVEL: {cfg.log_level}")
        return

    try:
        bridge = get_bridge()
    except ValueError as e:
        logger.error("Cannot start: %s", e)
        sys.exit(2)

    register_tools(mcp, bridge)

    if not args.no_health_check:
        asyncio.run(check_editor())

    if args.transport == "stdio":
        mcp.run()
    elif args.transport == "http":
        mcp.run(transport="http", host=args.mcp_host, port=args.mcp_port, path=args.mcp_path)
    else:
        mcp.run(transport="sse", host=args.mcp_host, port=args.mcp_port)


if __name__ == "__main__":
    main()
