"""
Editor-side request handling: request frame in, response frame out.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..protocol.envelope import ResponseEnvelope, decode_request, encode_response, peek_token
from ..protocol.errors import TransportError
from .analysis import ScriptAnalyzer
from .files import ProjectFileProvider
from .resources import EditorResource, default_resources

logger = logging.getLogger(__name__)


class EditorRequestHandler:
    """Routes requests to editor resources by method name."""

    def __init__(self, resources: Iterable[EditorResource]):
        self._resources: dict[str, EditorResource] = {}
        for resource in resources:
            if resource.name in self._resources:
                raise ValueError(f"Duplicate editor resource: {resource.name}")
            self._resources[resource.name] = resource

    @classmethod
    def for_project(
        cls, project_root: str | Path, analyzer: ScriptAnalyzer | None = None
    ) -> "EditorRequestHandler":
        provider = ProjectFileProvider(project_root)
        return cls(default_resources(provider, analyzer))

    @property
    def methods(self) -> list[str]:
        return list(self._resources)

    def handle(self, method: str, params: dict) -> ResponseEnvelope:
        resource = self._resources.get(method)
        if resource is None:
            return ResponseEnvelope.failure(
                {"type": "UnknownCallError", "detail": f"Unknown method: {method}"}
            )

        try:
            result = resource.fetch(params)
        except Exception as e:
            logger.exception("Resource %s failed", method)
            return ResponseEnvelope.failure(
                {"type": "CallExecutionError", "detail": f"{method} failed: {e}"}
            )
        return ResponseEnvelope.from_dict(result)

    def handle_frame(self, raw: str | bytes) -> str:
        """Answer one serialized request with one serialized response."""
        try:
            token, request = decode_request(raw)
        except TransportError as e:
            logger.warning("Rejecting malformed request: %s", e.detail)
            return encode_response(peek_token(raw), ResponseEnvelope.failure(e.to_error()))

        logger.debug("Handling %s (id=%s)", request.method, token)
        return encode_response(token, self.handle(request.method, request.params))
