"""
Call protocol: envelopes, parameter schemas, registry, dispatcher and bridge.
"""

from .bridge import CallBridge, HandlerContext
from .dispatcher import Dispatcher, PendingCall, Transport
from .envelope import RequestEnvelope, ResponseEnvelope
from .errors import (
    BridgeError,
    CallCancelledError,
    CallExecutionError,
    CallTimeoutError,
    DuplicateNameError,
    RegistrySealedError,
    TransportError,
    UnknownCallError,
    ValidationError,
)
from .lifecycle import CallRecord, CallState, InvalidTransitionError
from .registry import CallDescriptor, CallRegistry
from .validation import CallParams, NoParams, coerce_query, parse_params, validate_params

__all__ = [
    "BridgeError",
    "CallBridge",
    "CallCancelledError",
    "CallDescriptor",
    "CallExecutionError",
    "CallParams",
    "CallRecord",
    "CallRegistry",
    "CallState",
    "CallTimeoutError",
    "Dispatcher",
    "DuplicateNameError",
    "HandlerContext",
    "InvalidTransitionError",
    "NoParams",
    "PendingCall",
    "RegistrySealedError",
    "RequestEnvelope",
    "ResponseEnvelope",
    "Transport",
    "TransportError",
    "UnknownCallError",
    "ValidationError",
    "coerce_query",
    "parse_params",
    "validate_params",
]
