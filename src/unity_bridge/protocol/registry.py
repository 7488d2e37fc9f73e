"""
Call registry.

Maps a call name to its descriptor. Built once during startup, then sealed.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import DuplicateNameError, RegistrySealedError, UnknownCallError
from .validation import CallParams

if TYPE_CHECKING:
    from .bridge import HandlerContext

logger = logging.getLogger(__name__)

Handler = Callable[[Any, "HandlerContext"], Awaitable[dict]]


@dataclass(frozen=True)
class CallDescriptor:
    """A named call: description, parameter schema and handler adapter."""

    name: str
    description: str
    params_model: type[CallParams]
    handler: Handler
    # Set when the call is also advertised as an MCP resource
    uri: str | None = None

    @property
    def input_schema(self) -> dict:
        return self.params_model.input_schema()

    @property
    def uri_template(self) -> str | None:
        """Resource URI with every parameter as an optional query parameter."""
        if not self.uri:
            return None
        names = list(self.input_schema.get("properties", {}))
        if not names:
            return self.uri
        return f"{self.uri}{{?{','.join(names)}}}"

    def describe(self) -> dict:
        info = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
        if self.uri:
            info["uri"] = self.uri
        return info


class CallRegistry:
    """Append-only mapping of call name to descriptor."""

    def __init__(self):
        self._calls: dict[str, CallDescriptor] = {}
        self._sealed = False

    def register(self, descriptor: CallDescriptor) -> CallDescriptor:
        """Register a descriptor.

        Raises:
            DuplicateNameError: If the name is already registered (first one is kept)
            RegistrySealedError: If called after ``seal()``
        """
        if self._sealed:
            raise RegistrySealedError(f"Registry is sealed; cannot register {descriptor.name}")
        if descriptor.name in self._calls:
            raise DuplicateNameError(descriptor.name)
        self._calls[descriptor.name] = descriptor
        logger.debug("Registered call: %s", descriptor.name)
        return descriptor

    def seal(self) -> None:
        """End of initialization; no further registration is accepted."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def resolve(self, name: str) -> CallDescriptor:
        """Look up a descriptor by name.

        Raises:
            UnknownCallError: If no call with this name is registered
        """
        descriptor = self._calls.get(name) if isinstance(name, str) else None
        if descriptor is None:
            raise UnknownCallError(str(name))
        return descriptor

    def names(self) -> list[str]:
        return list(self._calls)

    def describe(self) -> list[dict]:
        """The discoverable API surface: one entry per registered call."""
        return [d.describe() for d in self._calls.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._calls

    def __iter__(self) -> Iterator[CallDescriptor]:
        return iter(list(self._calls.values()))

    def __len__(self) -> int:
        return len(self._calls)
