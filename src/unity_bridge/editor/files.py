"""
Project file provider: C# script files under the project's Assets folder.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_GLOB_CHARS = ("*", "?", "[")


@dataclass(frozen=True)
class ScriptFile:
    """A script file with its project-relative path."""

    name: str
    path: str
    size: int


def matches_pattern(path: str, pattern: str | None) -> bool:
    """Match a project-relative path against a search pattern.

    Plain text is a case-sensitive substring match on the path. Patterns with
    glob characters (``*Player*.cs``) are matched against the path and the
    file name.
    """
    if not pattern:
        return True
    if any(ch in pattern for ch in _GLOB_CHARS):
        file_name = path.rsplit("/", 1)[-1]
        return fnmatch.fnmatchcase(path, pattern) or fnmatch.fnmatchcase(file_name, pattern)
    return pattern in path


class ProjectFileProvider:
    """Lists and reads script files of one Unity project."""

    def __init__(self, project_root: str | Path, assets_dir: str = "Assets", extension: str = ".cs"):
        self.project_root = Path(project_root).resolve()
        self.assets_dir = assets_dir
        self.extension = extension.lower()

    def list_scripts(self, search_pattern: str | None = None) -> list[ScriptFile]:
        """List script files sorted by path, optionally filtered."""
        assets = self.project_root / self.assets_dir
        if not assets.is_dir():
            return []

        scripts: list[ScriptFile] = []
        for item in sorted(assets.rglob("*")):
            if not item.is_file() or item.suffix.lower() != self.extension:
                continue
            rel = item.relative_to(self.project_root).as_posix()
            if not matches_pattern(rel, search_pattern):
                continue
            scripts.append(ScriptFile(name=item.stem, path=rel, size=item.stat().st_size))
        return scripts

    def read_text(self, path: str) -> str:
        """Read a script by its project-relative path.

        A leading UTF-8 BOM is dropped. Bytes that are not valid UTF-8 are
        replaced with U+FFFD and a warning is logged.

        Raises:
            ValueError: If the path escapes the project root
            OSError: If the file cannot be read
        """
        target = self._resolve_safe_path(path)
        data = target.read_bytes()
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            logger.warning(
                "%s is not valid UTF-8 (%s at byte %d); undecodable bytes replaced", path, e.reason, e.start
            )
            return data.decode("utf-8-sig", errors="replace")

    def _resolve_safe_path(self, relative_path: str) -> Path:
        candidate = (self.project_root / relative_path).resolve()
        root = str(self.project_root)
        if os.path.commonpath([str(candidate), root]) != root:
            raise ValueError("Path escapes project root")
        return candidate
