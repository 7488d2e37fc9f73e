"""
C# file analysis tool.

Runs the editor's heuristic analyzer over project scripts: class, method and
property lines per file.
"""

from __future__ import annotations

import json
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

NAME = "analyze_cs_files"
DESCRIPTION = (
    "Analyzes .cs files in the Unity project and extracts class, method, and property information"
)
URI = "unity://analyze-cs-files"


class AnalyzeCsFilesParams(CallParams):
    search_pattern: str | None = Field(
        default=None, description="Optional pattern to restrict which scripts are analyzed"
    )


async def handle_analyze_cs_files(params: AnalyzeCsFilesParams, ctx: HandlerContext) -> dict:
    response = await ctx.dispatch(NAME, params.to_wire())
    if not response.success:
        raise CallExecutionError(f"Failed to analyze scripts: {response.message}")

    files = response.data.get("files") or []
    if not isinstance(files, list):
        raise TransportError("Malformed response: 'files' must be a list")

    return {"success": True, "message": response.message, "files": files}


DESCRIPTOR = CallDescriptor(
    name=NAME,
    description=DESCRIPTION,
    params_model=AnalyzeCsFilesParams,
    handler=handle_analyze_cs_files,
    uri=URI,
)


async def analyze_cs_files(searchPattern: Any = None) -> dict:
    """Analyze C# files of the Unity project.

    Returns:
        Dictionary containing:
        - files: List of {filePath, classes, methods, properties} (or {filePath, error})
    """
    return await get_bridge().execute(NAME, {"searchPattern": searchPattern})


async def read_analysis(searchPattern: str | None = None) -> str:
    """Serve unity://analyze-cs-files, taking parameters from the URI query."""
    params = coerce_query(AnalyzeCsFilesParams, {"searchPattern": searchPattern})
    return json.dumps(await get_bridge().execute(NAME, params), ensure_ascii=False)
