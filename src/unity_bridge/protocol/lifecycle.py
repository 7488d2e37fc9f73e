"""
Per-call state machine.

Received -> Validating -> Dispatching -> AwaitingResponse -> {Completed | Failed | TimedOut}
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum


class CallState(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    AWAITING_RESPONSE = "awaiting_response"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({CallState.COMPLETED, CallState.FAILED, CallState.TIMED_OUT})

_TRANSITIONS: dict[CallState, frozenset[CallState]] = {
    CallState.RECEIVED: frozenset({CallState.VALIDATING, CallState.FAILED}),
    CallState.VALIDATING: frozenset({CallState.DISPATCHING, CallState.FAILED}),
    # Local calls complete straight from Dispatching
    CallState.DISPATCHING: frozenset(
        {CallState.AWAITING_RESPONSE, CallState.COMPLETED, CallState.FAILED}
    ),
    CallState.AWAITING_RESPONSE: frozenset(
        {CallState.COMPLETED, CallState.FAILED, CallState.TIMED_OUT}
    ),
}


class InvalidTransitionError(RuntimeError):
    """A call tried to leave a terminal state or skip a step."""


@dataclass
class CallRecord:
    """Lifecycle of one call instance."""

    name: str
    state: CallState = CallState.RECEIVED
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    history: list[CallState] = field(default_factory=lambda: [CallState.RECEIVED])

    def advance(self, target: CallState) -> None:
        allowed = _TRANSITIONS.get(self.state, frozenset())
        if target not in allowed:
            raise InvalidTransitionError(
                f"{self.name}: illegal transition {self.state.value} -> {target.value}"
            )
        self.state = target
        self.history.append(target)
        if target.is_terminal:
            self.finished_at = time.monotonic()

    @property
    def done(self) -> bool:
        return self.state.is_terminal

    @property
    def elapsed(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at

    def summary(self) -> dict:
        return {"name": self.name, "state": self.state.value, "elapsedMs": round(self.elapsed * 1000, 1)}
