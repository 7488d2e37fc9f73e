"""
Editor-side resources.

Each resource answers one method name with a raw result dictionary. These run
inside the editor process, against the local project files.
"""

from __future__ import annotations

import logging
from typing import Any

from .analysis import LineHeuristicAnalyzer, ScriptAnalyzer
from .files import ProjectFileProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE_BYTES = 50000


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _as_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class EditorResource:
    """Base class for editor-side resources."""

    name: str = ""
    description: str = ""
    uri: str = ""

    def fetch(self, params: dict) -> dict:
        raise NotImplementedError


class GetScriptsResource(EditorResource):
    name = "get_scripts"
    description = "Retrieves all C# script files (.cs) in the project with optional filters"
    uri = "unity://scripts"

    def __init__(self, provider: ProjectFileProvider):
        self.provider = provider

    def fetch(self, params: dict) -> dict:
        search_pattern = params.get("searchPattern") or None
        include_content = _as_bool(params.get("includeContent"))
        max_size = _as_int(params.get("maxFileSizeBytes"), DEFAULT_MAX_FILE_SIZE_BYTES)

        scripts = []
        for script in self.provider.list_scripts(search_pattern):
            entry: dict[str, Any] = {"name": script.name, "path": script.path, "size": script.size}
            if include_content and script.size <= max_size:
                entry["content"] = self.provider.read_text(script.path)
            scripts.append(entry)

        return {
            "success": True,
            "message": f"Retrieved {len(scripts)} C# script files",
            "scripts": scripts,
        }


class AnalyzeCsFilesResource(EditorResource):
    name = "analyze_cs_files"
    description = (
        "Analyzes .cs files in the Unity project and extracts class, method, "
        "and property information."
    )
    uri = "unity://analyze-cs-files"

    def __init__(self, provider: ProjectFileProvider, analyzer: ScriptAnalyzer | None = None):
        self.provider = provider
        self.analyzer = analyzer or LineHeuristicAnalyzer()

    def fetch(self, params: dict) -> dict:
        files = []
        for script in self.provider.list_scripts(params.get("searchPattern") or None):
            try:
                text = self.provider.read_text(script.path)
            except (OSError, ValueError) as e:
                logger.warning("Could not read %s: %s", script.path, e)
                files.append({"filePath": script.path, "error": str(e)})
                continue
            files.append({"filePath": script.path, **self.analyzer.analyze(text)})

        return {
            "success": True,
            "message": f"Analyzed {len(files)} .cs files",
            "files": files,
        }


def default_resources(
    provider: ProjectFileProvider, analyzer: ScriptAnalyzer | None = None
) -> list[EditorResource]:
    return [GetScriptsResource(provider), AnalyzeCsFilesResource(provider, analyzer)]
