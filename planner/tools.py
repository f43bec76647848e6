"""Locate the generator executables through imported build targets."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import ToolResolutionError
from .graph import BuildGraph
from .versions import QtMajorVersion


class Tool(str, Enum):
    MOC = "moc"
    UIC = "uic"
    RCC = "rcc"

    @property
    def feature(self) -> str:
        return f"AUTO{self.value.upper()}"


@dataclass(frozen=True, slots=True)
class ToolBinding:
    tool: Tool
    version: str
    executable: str = ""
    error: ToolResolutionError | None = None

    @property
    def resolved(self) -> bool:
        return self.error is None


class ToolResolver:
    """Resolve generator executables for one target."""

    def __init__(self, graph: BuildGraph, target_name: str) -> None:
        self._graph = graph
        self._target_name = target_name

    def resolve(self, tool: Tool, version: str) -> ToolBinding:
        try:
            major = QtMajorVersion.parse(version)
        except ValueError:
            return self._failure(tool, version, f"The {tool.feature} feature supports only Qt 4 and Qt 5")

        import_name = major.import_target(tool.value)
        imported = self._graph.find_imported_target(import_name)
        if imported is None:
            return self._failure(tool, version, f"{tool.feature}: {import_name} target not found")
        return ToolBinding(tool=tool, version=version, executable=imported.location)

    def _failure(self, tool: Tool, version: str, reason: str) -> ToolBinding:
        error = ToolResolutionError(tool.value, version, self._target_name, reason)
        return ToolBinding(tool=tool, version=version, error=error)


__all__ = ["Tool", "ToolBinding", "ToolResolver"]
