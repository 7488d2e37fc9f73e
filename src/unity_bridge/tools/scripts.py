"""
Script retrieval tool.

Lists C# scripts of the Unity project through the editor bridge, optionally
with their source text.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import Field

from ..protocol import (
    CallDescriptor,
    CallExecutionError,
    CallParams,
    HandlerContext,
    TransportError,
    coerce_query,
)
from ..runtime import get_bridge

logger = logging.getLogger(__name__)

NAME = "get_scripts"
DESCRIPTION = "Retrieves and searches C# script files in the Unity project"
URI = "unity://scripts"

DEFAULT_MAX_FILE_SIZE_BYTES = 50000


class GetScriptsParams(CallParams):
    search_pattern: str | None = Field(
        default=None, description="Optional pattern to filter scripts (e.g., *Player*.cs)"
    )
    include_content: bool = Field(
        default=False, description="Whether to include the actual script content or just metadata"
    )
    max_file_size_bytes: int = Field(
        default=DEFAULT_MAX_FILE_SIZE_BYTES,
        ge=0,
        description="Size limit for script content returned (in bytes)",
    )


def _shape_script(entry: Any, params: GetScriptsParams) -> dict:
    """Reduce an editor entry to {name, path, size, content?}.

    content survives only when requested and within the size limit.
    """
    if not isinstance(entry, dict):
        raise TransportError(f"Malformed script entry from editor: {entry!r}")

    script = {"name": entry.get("name"), "path": entry.get("path"), "size": entry.get("size")}
    content = entry.get("content")
    size = script["size"]
    if (
        params.include_content
        and isinstance(content, str)
        and isinstance(size, int)
        and 0 <= size <= params.max_file_size_bytes
    ):
        script["content"] = content
    return script


async def handle_get_scripts(params: GetScriptsParams, ctx: HandlerContext) -> dict:
    response = await ctx.dispatch(NAME, params.to_wire())
    if not response.success:
        raise CallExecutionError(f"Failed to retrieve scripts: {response.message}")

    raw_scripts = response.data.get("scripts") or []
    if not isinstance(raw_scripts, list):
        raise TransportError("Malformed response: 'scripts' must be a list")

    scripts = [_shape_script(entry, params) for entry in raw_scripts]
    logger.debug("get_scripts returned %d scripts", len(scripts))
    return {
        "success": True,
        "message": "Scripts retrieved successfully",
        "scripts": scripts,
    }


DESCRIPTOR = CallDescriptor(
    name=NAME,
    description=DESCRIPTION,
    params_model=GetScriptsParams,
    handler=handle_get_scripts,
    uri=URI,
)


async def get_scripts(
    searchPattern: Any = None,
    includeContent: Any = None,
    maxFileSizeBytes: Any = None,
) -> dict:
    """Retrieve C# script files of the Unity project.

    Arguments are forwarded untouched; GetScriptsParams validates them.

    Returns:
        Dictionary containing:
        - success / message
        - scripts: List of {name, path, size, content?}
    """
    return await get_bridge().execute(
        NAME,
        {
            "searchPattern": searchPattern,
            "includeContent": includeContent,
            "maxFileSizeBytes": maxFileSizeBytes,
        },
    )


async def read_scripts(
    searchPattern: str | None = None,
    includeContent: str | None = None,
    maxFileSizeBytes: str | None = None,
) -> str:
    """Serve unity://scripts, taking parameters from the URI query."""
    params = coerce_query(
        GetScriptsParams,
        {
            "searchPattern": searchPattern,
            "includeContent": includeContent,
            "maxFileSizeBytes": maxFileSizeBytes,
        },
    )
    return json.dumps(await get_bridge().execute(NAME, params), ensure_ascii=False)
