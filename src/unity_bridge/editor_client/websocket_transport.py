"""
Websocket transport to the editor bridge.

One connection carries every in-flight call. The connection is opened lazily
on the first send and reopened on the next send after a drop.
"""

from __future__ import annotations

import asyncio
import logging

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..config import get_config
from ..protocol.dispatcher import DisconnectCallback, MessageCallback
from ..protocol.errors import TransportError

logger = logging.getLogger(__name__)


class WebSocketTransport:
    """Frames over a single websocket connection."""

    def __init__(self, url: str | None = None, connect_timeout: float = 5.0):
        self.url = url or get_config().bridge_url
        self.connect_timeout = connect_timeout
        self._ws: ClientConnection | None = None
        self._reader: asyncio.Task | None = None
        self._connect_lock: asyncio.Lock | None = None
        self._on_message: MessageCallback | None = None
        self._on_disconnect: DisconnectCallback | None = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    def bind(self, on_message: MessageCallback, on_disconnect: DisconnectCallback) -> None:
        self._on_message = on_message
        self._on_disconnect = on_disconnect

    async def connect(self) -> None:
        """Open the connection if it is not open yet.

        Raises:
            TransportError: If the editor bridge cannot be reached
        """
        if self._connect_lock is None:
            self._connect_lock = asyncio.Lock()
        async with self._connect_lock:
            if self._ws is not None:
                return
            try:
                self._ws = await connect(self.url, open_timeout=self.connect_timeout)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                raise TransportError(f"Cannot connect to editor bridge at {self.url}: {e}") from e
            logger.info("Connected to editor bridge at %s", self.url)
            self._reader = asyncio.create_task(self._read_loop(self._ws))

    async def send(self, frame: str) -> None:
        await self.connect()
        ws = self._ws
        if ws is None:
            raise TransportError("Editor bridge connection is closed")
        try:
            await ws.send(frame)
        except ConnectionClosed as e:
            self._connection_lost(ws, e)
            raise TransportError(f"Editor bridge connection closed: {e}") from e

    async def close(self) -> None:
        ws, self._ws = self._ws, None
        if self._reader is not None:
            self._reader.cancel()
            self._reader = None
        if ws is not None:
            await ws.close()
            logger.info("Closed editor bridge connection")

    async def _read_loop(self, ws: ClientConnection) -> None:
        error: Exception | None = None
        try:
            async for message in ws:
                if self._on_message is not None:
                    self._on_message(message)
        except ConnectionClosed as e:
            error = e
        self._connection_lost(ws, error)

    def _connection_lost(self, ws: ClientConnection, error: Exception | None) -> None:
        # Only report the connection that is current; a replaced one is already gone
        if self._ws is not ws:
            return
        self._ws = None
        self._reader = None
        logger.warning("Editor bridge connection lost: %s", error or "closed by peer")
        if self._on_disconnect is not None:
            self._on_disconnect(error or TransportError("closed by peer"))
