"""
Editor Bridge Server for Unity Script Bridge.

Runs next to the Unity Editor and answers request frames from the MCP server
over a websocket. Every frame is handled on its own task, so responses can
come back in a different order than their requests.

A plain HTTP GET /health is answered on the same port.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from http import HTTPStatus

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from .. import __version__
from ..config import get_config, setup_logging
from .handler import EditorRequestHandler

logger = logging.getLogger(__name__)


class EditorBridgeServer:
    """Websocket server wrapping an EditorRequestHandler."""

    def __init__(self, handler: EditorRequestHandler, host: str = "localhost", port: int = 8090):
        self.handler = handler
        self.host = host
        self.port = port
        self._server: Server | None = None

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def bound_port(self) -> int:
        """Actual listening port (useful when started with port 0)."""
        if self._server is None:
            raise RuntimeError("Server is not running")
        return list(self._server.sockets)[0].getsockname()[1]

    async def start(self) -> None:
        if self.running:
            logger.warning("Editor bridge already running")
            return
        self._server = await serve(
            self._serve_connection,
            self.host,
            self.port,
            process_request=self._process_request,
        )
        logger.info("Editor bridge listening on ws://%s:%d", self.host, self.bound_port)

    async def stop(self) -> None:
        if not self.running:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Editor bridge stopped")

    async def serve_forever(self) -> None:
        await self.start()
        try:
            await self._server.serve_forever()
        finally:
            await self.stop()

    def _process_request(self, connection: ServerConnection, request: Request) -> Response | None:
        if request.path == "/health":
            body = json.dumps(
                {"ok": True, "status": "running", "version": __version__, "methods": self.handler.methods}
            )
            return connection.respond(HTTPStatus.OK, body)
        return None

    async def _serve_connection(self, websocket: ServerConnection) -> None:
        logger.info("Client connected: %s", websocket.remote_address)
        tasks: set[asyncio.Task] = set()
        try:
            async for message in websocket:
                task = asyncio.create_task(self._respond(websocket, message))
                tasks.add(task)
                task.add_done_callback(tasks.discard)
        except ConnectionClosed as e:
            logger.warning("Client connection closed: %s", e)
        finally:
            for task in tasks:
                task.cancel()
            logger.info("Client disconnected: %s", websocket.remote_address)

    async def _respond(self, websocket: ServerConnection, message: str | bytes) -> None:
        # File scans block, keep them off the event loop
        frame = await asyncio.to_thread(self.handler.handle_frame, message)
        try:
            await websocket.send(frame)
        except ConnectionClosed:
            logger.warning("Dropping response, client went away")


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unity-bridge-editor",
        description="Editor-side bridge answering Unity Script Bridge calls",
    )
    parser.add_argument("--project-path", default=None, help="Unity project root (contains Assets/)")
    parser.add_argument("--host", default=None, help="Listen host (default: UNITY_BRIDGE_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: UNITY_BRIDGE_PORT)")
    parser.add_argument("--log-level", default=None, help="Log level (default: BRIDGE_LOG_LEVEL)")
    return parser


def main() -> None:
    """Run the editor bridge server."""
    args = _build_arg_parser().parse_args(sys.argv[1:])
    cfg = get_config()
    setup_logging(args.log_level or cfg.log_level)

    project_path = args.project_path or cfg.project_path
    if not project_path:
        logger.error("No Unity project found. Pass --project-path or set UNITY_PROJECT_PATH.")
        sys.exit(2)

    handler = EditorRequestHandler.for_project(project_path)
    server = EditorBridgeServer(
        handler,
        host=args.host or cfg.bridge_host,
        port=args.port if args.port is not None else cfg.bridge_port,
    )
    logger.info("Serving project: %s", project_path)
    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
