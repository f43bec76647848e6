"""Exception types raised while planning automatic code generation."""
from __future__ import annotations

from pathlib import Path


class PlannerError(RuntimeError):
    """Base class for planning failures."""


class ToolResolutionError(PlannerError):
    """A generator executable could not be located for a target."""

    def __init__(self, tool: str, version: str, target: str, reason: str) -> None:
        super().__init__(f"{reason} ({target})")
        self.tool = tool
        self.version = version
        self.target = target
        self.reason = reason


class ResourceListingError(PlannerError):
    """The content inputs of a resource description file could not be listed."""

    def __init__(self, resource_file: str, reason: str) -> None:
        super().__init__(f"AUTORCC: Could not list inputs of \"{resource_file}\": {reason}")
        self.resource_file = resource_file
        self.reason = reason


class DescriptorWriteError(PlannerError):
    """The descriptor file for the execution stage could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not write autogen descriptor \"{path}\": {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "DescriptorWriteError",
    "PlannerError",
    "ResourceListingError",
    "ToolResolutionError",
]
