"""
In-process transport: request frames go straight to an EditorRequestHandler.

Used when the server runs without an editor (BRIDGE_TRANSPORT=local) and in
end-to-end tests. Each frame is answered on its own task, like the websocket
bridge does.
"""

from __future__ import annotations

import asyncio
import logging

from ..editor.handler import EditorRequestHandler
from ..protocol.dispatcher import DisconnectCallback, MessageCallback
from ..protocol.errors import TransportError

logger = logging.getLogger(__name__)


class LocalTransport:
    def __init__(self, handler: EditorRequestHandler):
        self.handler = handler
        self._open = True
        self._tasks: set[asyncio.Task] = set()
        self._on_message: MessageCallback | None = None
        self._on_disconnect: DisconnectCallback | None = None

    @property
    def connected(self) -> bool:
        return self._open

    def bind(self, on_message: MessageCallback, on_disconnect: DisconnectCallback) -> None:
        self._on_message = on_message
        self._on_disconnect = on_disconnect

    async def send(self, frame: str) -> None:
        if not self._open:
            raise TransportError("Local transport is closed")
        task = asyncio.create_task(self._answer(frame))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _answer(self, frame: str) -> None:
        response = await asyncio.to_thread(self.handler.handle_frame, frame)
        if self._open and self._on_message is not None:
            self._on_message(response)

    async def close(self) -> None:
        self._open = False
        for task in list(self._tasks):
            task.cancel()
        if self._on_disconnect is not None:
            self._on_disconnect(None)
