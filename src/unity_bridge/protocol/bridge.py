"""
Call bridge: the caller-facing pipeline.

resolve -> validate -> handler adapter (-> dispatcher round-trip) -> envelope
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

from .dispatcher import Dispatcher
from .envelope import ResponseEnvelope
from .errors import BridgeError, CallExecutionError, CallTimeoutError
from .lifecycle import CallRecord, CallState
from .registry import CallRegistry
from .validation import parse_params

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """What a handler adapter may use while serving one call."""

    bridge: "CallBridge"
    record: CallRecord
    timeout: float | None = None

    @property
    def registry(self) -> CallRegistry:
        return self.bridge.registry

    @property
    def dispatcher(self) -> Dispatcher:
        return self.bridge.dispatcher

    async def dispatch(self, method: str, params: dict) -> ResponseEnvelope:
        """Forward a call to the editor and wait for its response envelope."""
        self.record.advance(CallState.DISPATCHING)
        pending = await self.dispatcher.send(method, params)
        self.record.advance(CallState.AWAITING_RESPONSE)
        return await self.dispatcher.wait(pending, self.timeout)

    def local(self) -> None:
        """Mark the call as served locally (no transport round-trip)."""
        self.record.advance(CallState.DISPATCHING)


class CallBridge:
    """Runs registered calls and reports every outcome as an envelope."""

    def __init__(self, registry: CallRegistry, dispatcher: Dispatcher, history_size: int = 50):
        self.registry = registry
        self.dispatcher = dispatcher
        self.recent: deque[CallRecord] = deque(maxlen=history_size)

    async def invoke(self, name: str, raw_params: Any = None, timeout: float | None = None) -> dict:
        """Run a call and return its caller-facing envelope.

        Raises:
            UnknownCallError: Name not registered (before any transport use)
            ValidationError: Parameters violate the schema (before any transport use)
            TransportError, CallTimeoutError, CallCancelledError, CallExecutionError
        """
        record = CallRecord(name=str(name))
        self.recent.append(record)
        try:
            descriptor = self.registry.resolve(name)
            record.advance(CallState.VALIDATING)
            params = parse_params(descriptor.params_model, raw_params)

            ctx = HandlerContext(bridge=self, record=record, timeout=timeout)
            try:
                result = await descriptor.handler(params, ctx)
            except (BridgeError, asyncio.CancelledError):
                raise
            except Exception as e:
                logger.exception("Handler for %s raised", name)
                raise CallExecutionError(f"{name} failed: {e}") from e

            if record.state == CallState.VALIDATING:
                # Handler answered without dispatching
                record.advance(CallState.DISPATCHING)
            record.advance(CallState.COMPLETED)
            return result
        except CallTimeoutError:
            self._finish(record, CallState.TIMED_OUT)
            raise
        except BaseException:
            self._finish(record, CallState.FAILED)
            raise

    async def execute(self, name: str, raw_params: Any = None, timeout: float | None = None) -> dict:
        """Like ``invoke`` but never raises a bridge error.

        Failures come back as ``{"success": False, "message", "error": {"type", "detail"}}``.
        """
        logger.info("Executing call: %s", name)
        try:
            result = await self.invoke(name, raw_params, timeout)
        except BridgeError as e:
            logger.error("Call failed: %s (%s: %s)", name, e.kind, e.detail)
            return ResponseEnvelope.failure(e.to_error(), message=e.detail).to_dict()
        logger.info("Call successful: %s", name)
        return result

    @staticmethod
    def _finish(record: CallRecord, state: CallState) -> None:
        if record.done:
            return
        if state == CallState.TIMED_OUT and record.state != CallState.AWAITING_RESPONSE:
            state = CallState.FAILED
        record.advance(state)
