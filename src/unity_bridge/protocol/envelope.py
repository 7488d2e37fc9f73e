"""
Envelope codec.

Request frame:  {"id": token, "method": name, "params": {...}}
Response frame: {"id": token, "success": bool, "message": str, ...fields, "error"?: {...}}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .errors import TransportError

_RESERVED_KEYS = ("id", "success", "message", "error")


@dataclass(frozen=True)
class RequestEnvelope:
    """One call as sent across the transport."""

    method: str
    params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"method": self.method, "params": dict(self.params)}


@dataclass
class ResponseEnvelope:
    """Uniform success/failure result of one call."""

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    error: dict[str, Any] | None = None

    def to_dict(self) -> dict:
        """Flatten into the caller-facing shape (data fields at top level)."""
        out: dict[str, Any] = {"success": self.success, "message": self.message}
        for key, value in self.data.items():
            if key not in _RESERVED_KEYS:
                out[key] = value
        if self.error is not None:
            out["error"] = dict(self.error)
        return out

    @classmethod
    def from_dict(cls, payload: dict) -> "ResponseEnvelope":
        """Build from a decoded frame.

        Raises:
            TransportError: If ``success`` is missing or not a boolean.
        """
        success = payload.get("success")
        if not isinstance(success, bool):
            raise TransportError("Malformed response: 'success' must be a boolean")

        message = payload.get("message")
        if not isinstance(message, str) or not message:
            message = "OK" if success else "Unknown error"

        error = payload.get("error")
        if error is not None and not isinstance(error, dict):
            error = {"type": "CallExecutionError", "detail": str(error)}

        data = {k: v for k, v in payload.items() if k not in _RESERVED_KEYS}
        return cls(success=success, message=message, data=data, error=error)

    @classmethod
    def failure(cls, error: dict, message: str | None = None) -> "ResponseEnvelope":
        return cls(
            success=False,
            message=message or str(error.get("detail", "Unknown error")),
            error=error,
        )


def encode_request(token: str, request: RequestEnvelope) -> str:
    """Serialize a request tagged with its correlation token."""
    frame = {"id": token, **request.to_dict()}
    return json.dumps(frame, ensure_ascii=False)


def decode_request(raw: str | bytes) -> tuple[str | None, RequestEnvelope]:
    """Parse a request frame on the editor side.

    Returns the token (None if absent) and the request.

    Raises:
        TransportError: If the frame is not a JSON object with a string method.
    """
    frame = _load_frame(raw)
    token = _token_of(frame)
    method = frame.get("method")
    if not isinstance(method, str) or not method:
        raise TransportError("Malformed request: 'method' must be a non-empty string")
    params = frame.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise TransportError("Malformed request: 'params' must be an object")
    return token, RequestEnvelope(method=method, params=params)


def encode_response(token: str | None, response: ResponseEnvelope) -> str:
    """Serialize a response tagged with the token of the request it answers."""
    frame = {"id": token, **response.to_dict()}
    return json.dumps(frame, ensure_ascii=False)


def peek_token(raw: str | bytes) -> str | None:
    """Best-effort token extraction from a frame that may be malformed."""
    try:
        frame = json.loads(raw)
    except (TypeError, ValueError):
        return None
    return _token_of(frame) if isinstance(frame, dict) else None


def decode_response(raw: str | bytes) -> tuple[str, ResponseEnvelope]:
    """Parse a response frame on the server side.

    Raises:
        TransportError: If the frame is not valid JSON, has no token, or
            violates the response shape.
    """
    frame = _load_frame(raw)
    token = _token_of(frame)
    if token is None:
        raise TransportError("Malformed response: missing correlation id")
    return token, ResponseEnvelope.from_dict(frame)


def _load_frame(raw: str | bytes) -> dict:
    try:
        frame = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise TransportError(f"Malformed frame: {e}") from e
    if not isinstance(frame, dict):
        raise TransportError("Malformed frame: expected a JSON object")
    return frame


def _token_of(frame: dict) -> str | None:
    token = frame.get("id")
    if token is None:
        return None
    return str(token)
