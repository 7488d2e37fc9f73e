"""
Error taxonomy of the call bridge.

Every failure that reaches a caller carries a stable ``kind`` tag and a
human-readable detail, rendered by ``to_error()`` as ``{"type", "detail"}``.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all bridge errors."""

    kind = "BridgeError"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_error(self) -> dict:
        return {"type": self.kind, "detail": self.detail}


class ValidationError(BridgeError):
    """Caller-supplied parameters violate the declared schema."""

    kind = "ValidationError"

    def __init__(self, field: str, constraint: str, detail: str):
        super().__init__(f"Invalid parameter '{field}': {detail}")
        self.field = field
        self.constraint = constraint

    def to_error(self) -> dict:
        error = super().to_error()
        error["field"] = self.field
        error["constraint"] = self.constraint
        return error


class UnknownCallError(BridgeError):
    """Method name is not registered."""

    kind = "UnknownCallError"

    def __init__(self, name: str):
        super().__init__(f"Unknown call: {name}")
        self.name = name


class TransportError(BridgeError):
    """Connection lost, unreachable editor, or malformed frame."""

    kind = "TransportError"


class CallTimeoutError(BridgeError):
    """No response arrived within the configured window."""

    kind = "TimeoutError"


class CallCancelledError(BridgeError):
    """The caller withdrew interest before completion."""

    kind = "CancelledError"


class CallExecutionError(BridgeError):
    """The editor executed the call but reported success=false."""

    kind = "CallExecutionError"


class RegistryError(BridgeError):
    """Startup-time registry misuse."""

    kind = "RegistryError"


class DuplicateNameError(RegistryError):
    kind = "DuplicateNameError"

    def __init__(self, name: str):
        super().__init__(f"Call already registered: {name}")
        self.name = name


class RegistrySealedError(RegistryError):
    kind = "RegistrySealedError"
