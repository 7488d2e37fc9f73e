"""
Dispatcher: correlates requests sent over a transport with their responses.

Many calls may be in flight over one connection. Each call gets a fresh
correlation token and a PendingCall entry; the entry is removed exactly once,
by the matching response, a timeout, an explicit cancel, or a disconnect.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from .envelope import RequestEnvelope, ResponseEnvelope, decode_response, encode_request, peek_token
from .errors import CallCancelledError, CallTimeoutError, TransportError

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str | bytes], None]
DisconnectCallback = Callable[[Exception | None], None]


class Transport(Protocol):
    """Ordered, reliable carrier of serialized frames."""

    @property
    def connected(self) -> bool: ...

    def bind(self, on_message: MessageCallback, on_disconnect: DisconnectCallback) -> None: ...

    async def send(self, frame: str) -> None: ...

    async def close(self) -> None: ...


@dataclass
class PendingCall:
    """A request that was sent and is waiting for its response."""

    token: str
    method: str
    issued_at: float
    future: asyncio.Future


def _new_uuid() -> str:
    return uuid.uuid4().hex


class Dispatcher:
    """Sends validated calls and delivers each response to the caller that issued it."""

    def __init__(
        self,
        transport: Transport,
        default_timeout: float = 10.0,
        token_factory: Callable[[], str] | None = None,
    ):
        """Initialize the dispatcher.

        Args:
            transport: Carrier for request/response frames
            default_timeout: Seconds to wait for a response when a call gives none
            token_factory: Correlation token generator (default: uuid4 hex)
        """
        self._transport = transport
        self.default_timeout = default_timeout
        self._token_factory = token_factory or _new_uuid
        self._pending: dict[str, PendingCall] = {}
        self.stats: dict[str, int] = {
            "issued": 0,
            "completed": 0,
            "timed_out": 0,
            "cancelled": 0,
            "disconnected": 0,
            "stale_responses": 0,
            "malformed_frames": 0,
        }
        transport.bind(self.on_message, self.on_disconnect)

    @property
    def connected(self) -> bool:
        return self._transport.connected

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def pending_tokens(self) -> list[str]:
        return list(self._pending)

    def _new_token(self) -> str:
        token = self._token_factory()
        while token in self._pending:
            token = self._token_factory()
        return token

    # ------------------------------------------------------------------
    # Issuing calls
    # ------------------------------------------------------------------
    async def send(self, method: str, params: dict) -> PendingCall:
        """Send one request and register it as pending.

        Raises:
            TransportError: If the frame could not be handed to the transport
        """
        loop = asyncio.get_running_loop()
        token = self._new_token()
        pending = PendingCall(
            token=token,
            method=method,
            issued_at=time.monotonic(),
            future=loop.create_future(),
        )
        self._pending[token] = pending
        frame = encode_request(token, RequestEnvelope(method=method, params=params))

        try:
            await self._transport.send(frame)
        except TransportError:
            self._pending.pop(token, None)
            raise
        except asyncio.CancelledError:
            self._pending.pop(token, None)
            raise
        except Exception as e:
            self._pending.pop(token, None)
            raise TransportError(f"Failed to send '{method}': {e}") from e

        self.stats["issued"] += 1
        logger.debug("Sent %s (id=%s)", method, token)
        return pending

    async def wait(self, pending: PendingCall, timeout: float | None = None) -> ResponseEnvelope:
        """Suspend until the response for ``pending`` arrives.

        Raises:
            CallTimeoutError: No response within ``timeout`` seconds
            CallCancelledError: ``cancel()`` was called for this token
            TransportError: The connection dropped or the response was malformed
        """
        if timeout is None:
            timeout = self.default_timeout

        try:
            return await asyncio.wait_for(pending.future, timeout)
        except asyncio.TimeoutError:
            if self._pending.pop(pending.token, None) is not None:
                self.stats["timed_out"] += 1
            logger.warning(
                "Call %s (id=%s) timed out after %.1fs", pending.method, pending.token, timeout
            )
            raise CallTimeoutError(
                f"No response for '{pending.method}' within {timeout:g}s"
            ) from None
        except asyncio.CancelledError:
            # The awaiting task itself was cancelled
            if self._pending.pop(pending.token, None) is not None:
                self.stats["cancelled"] += 1
            raise

    async def call(
        self, method: str, params: dict, timeout: float | None = None
    ) -> ResponseEnvelope:
        """Send a request and wait for its response envelope.

        A response with success=false is returned as-is.
        """
        pending = await self.send(method, params)
        return await self.wait(pending, timeout)

    def cancel(self, token: str, reason: str | None = None) -> bool:
        """Withdraw a pending call; its caller fails with CallCancelledError.

        Returns:
            True if a pending call was removed
        """
        pending = self._pending.pop(token, None)
        if pending is None:
            return False
        self.stats["cancelled"] += 1
        if not pending.future.done():
            pending.future.set_exception(
                CallCancelledError(reason or f"Call '{pending.method}' was cancelled")
            )
        logger.info("Cancelled %s (id=%s)", pending.method, token)
        return True

    # ------------------------------------------------------------------
    # Transport callbacks
    # ------------------------------------------------------------------
    def on_message(self, raw: str | bytes) -> None:
        """Deliver an incoming response frame to its pending caller."""
        try:
            token, response = decode_response(raw)
        except TransportError as e:
            token = peek_token(raw)
            pending = self._pending.pop(token, None) if token is not None else None
            if pending is None:
                self.stats["malformed_frames"] += 1
                logger.warning("Discarding malformed frame: %s", e.detail)
                return
            logger.error("Malformed response for %s (id=%s): %s", pending.method, token, e.detail)
            if not pending.future.done():
                pending.future.set_exception(e)
            return

        pending = self._pending.pop(token, None)
        if pending is None:
            self.stats["stale_responses"] += 1
            logger.warning("Discarding response for unknown or expired call id=%s", token)
            return

        if not pending.future.done():
            pending.future.set_result(response)
        self.stats["completed"] += 1
        logger.debug(
            "Completed %s (id=%s) in %.3fs",
            pending.method,
            token,
            time.monotonic() - pending.issued_at,
        )

    def on_disconnect(self, exc: Exception | None = None) -> None:
        """Fail every pending call; later calls may proceed once reconnected."""
        if not self._pending:
            return
        pending_calls = list(self._pending.values())
        self._pending.clear()
        detail = f"Connection to editor lost: {exc}" if exc else "Connection to editor lost"
        logger.error("%s (%d pending calls failed)", detail, len(pending_calls))
        for pending in pending_calls:
            self.stats["disconnected"] += 1
            if not pending.future.done():
                pending.future.set_exception(TransportError(detail))

    async def close(self) -> None:
        """Close the transport and fail anything still pending."""
        await self._transport.close()
        self.on_disconnect(None)
