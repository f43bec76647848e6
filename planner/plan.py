"""Immutable description of everything planned for one target."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .classifier import Classification, UiOptionsFile
from .config_diff import ConfigDiff
from .tools import Tool, ToolBinding


@dataclass(frozen=True, slots=True)
class MocSettings:
    binding: ToolBinding
    includes: ConfigDiff
    definitions: ConfigDiff
    options: tuple[str, ...] = ()
    relaxed_mode: bool = False
    macro_names: tuple[str, ...] = ()
    depend_filters: tuple[str, ...] = ()
    predefs_command: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class UicSettings:
    binding: ToolBinding
    target_options: ConfigDiff
    search_paths: tuple[str, ...] = ()
    option_files: tuple[UiOptionsFile, ...] = ()


@dataclass(frozen=True, slots=True)
class RccEntry:
    path: str
    generated: bool
    output: str
    inputs: tuple[str, ...] = ()
    options: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RccSettings:
    binding: ToolBinding
    entries: tuple[RccEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class GeneratedFile:
    path: str
    tool: Tool


@dataclass(frozen=True, slots=True)
class AutogenPlan:
    target_name: str
    autogen_target_name: str
    build_dir: str
    files_dir: str
    info_file: str
    working_directory: str
    include_directory: str | None
    qt_version_major: str
    qt_version_minor: str
    multi_config: bool
    baseline_config: str
    configurations: tuple[str, ...]
    classification: Classification
    moc: MocSettings | None
    uic: UicSettings | None
    rcc: RccSettings | None
    dependencies: tuple[str, ...]
    generated_files: tuple[GeneratedFile, ...]
    config_suffixes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "config_suffixes", MappingProxyType(dict(self.config_suffixes)))

    @property
    def enabled_tools(self) -> tuple[Tool, ...]:
        tools = []
        if self.moc is not None:
            tools.append(Tool.MOC)
        if self.uic is not None:
            tools.append(Tool.UIC)
        if self.rcc is not None:
            tools.append(Tool.RCC)
        return tuple(tools)

    @property
    def bindings(self) -> tuple[ToolBinding, ...]:
        return tuple(
            settings.binding for settings in (self.moc, self.uic, self.rcc) if settings is not None
        )


__all__ = [
    "AutogenPlan",
    "GeneratedFile",
    "MocSettings",
    "RccEntry",
    "RccSettings",
    "UicSettings",
]
