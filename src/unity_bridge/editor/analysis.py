"""
Source analyzers for C# files.

Analysis is pluggable: anything with ``analyze(text) -> dict`` works. The
bundled analyzer is a line-prefix heuristic, not a parser.
"""

from __future__ import annotations

from typing import Protocol


class ScriptAnalyzer(Protocol):
    def analyze(self, text: str) -> dict: ...


class LineHeuristicAnalyzer:
    """Classifies trimmed source lines as class, method or property declarations."""

    def analyze(self, text: str) -> dict:
        classes: list[str] = []
        methods: list[str] = []
        properties: list[str] = []

        for line in text.splitlines():
            stripped = line.strip()
            if not stripped:
                continue

            if stripped.startswith("class "):
                classes.append(stripped)
            elif "void " in stripped or "public " in stripped or "private " in stripped:
                if "(" in stripped:
                    methods.append(stripped)
                elif "{ get; set; }" in stripped:
                    properties.append(stripped)

        return {"classes": classes, "methods": methods, "properties": properties}
