"""Typed target and project settings consumed by the autogen planner."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from core.config_loader import (
    normalize_bool,
    normalize_optional_string,
    normalize_string_list,
    reject_unknown_keys,
)

from .policy import GeneratedFilePolicy


def _config_lists(value: Any, *, field_name: str) -> Dict[str, List[str]]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"{field_name} must be a mapping of configuration names to lists")
    return {
        str(config): normalize_string_list(items, field_name=f"{field_name}.{config}")
        for config, items in value.items()
    }


@dataclass(slots=True)
class TargetProperties:
    """Autogen related properties of a build target.

    Every field defaults to the value an unset property has, so an empty
    mapping yields a target with all generators disabled.
    """

    automoc: bool = False
    autouic: bool = False
    autorcc: bool = False
    automoc_moc_options: List[str] = field(default_factory=list)
    automoc_macro_names: List[str] = field(default_factory=list)
    automoc_depend_filters: List[str] = field(default_factory=list)
    autouic_options: List[str] = field(default_factory=list)
    autouic_config_options: Dict[str, List[str]] = field(default_factory=dict)
    autouic_search_paths: List[str] = field(default_factory=list)
    autorcc_options: List[str] = field(default_factory=list)
    autogen_target_depends: List[str] = field(default_factory=list)
    autogen_build_dir: str | None = None
    folder: str | None = None
    qt_major_version: str | None = None
    qt_minor_version: str | None = None
    interface_qt_major_version: str | None = None
    interface_qt_minor_version: str | None = None

    _KEYS = frozenset(
        {
            "automoc",
            "autouic",
            "autorcc",
            "automoc_moc_options",
            "automoc_macro_names",
            "automoc_depend_filters",
            "autouic_options",
            "autouic_config_options",
            "autouic_search_paths",
            "autorcc_options",
            "autogen_target_depends",
            "autogen_build_dir",
            "folder",
            "qt_major_version",
            "qt_minor_version",
            "interface_qt_major_version",
            "interface_qt_minor_version",
        }
    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, name: str = "<target>") -> "TargetProperties":
        if not isinstance(data, Mapping):
            raise TypeError(f"Target '{name}' properties must be a mapping")
        reject_unknown_keys(data, cls._KEYS, label=f"Target '{name}'")

        def strings(key: str) -> List[str]:
            return normalize_string_list(data.get(key), field_name=f"{name}.{key}")

        def optional(key: str) -> str | None:
            return normalize_optional_string(data.get(key), field_name=f"{name}.{key}")

        return cls(
            automoc=normalize_bool(data.get("automoc"), field_name=f"{name}.automoc"),
            autouic=normalize_bool(data.get("autouic"), field_name=f"{name}.autouic"),
            autorcc=normalize_bool(data.get("autorcc"), field_name=f"{name}.autorcc"),
            automoc_moc_options=strings("automoc_moc_options"),
            automoc_macro_names=strings("automoc_macro_names"),
            automoc_depend_filters=strings("automoc_depend_filters"),
            autouic_options=strings("autouic_options"),
            autouic_config_options=_config_lists(
                data.get("autouic_config_options"), field_name=f"{name}.autouic_config_options"
            ),
            autouic_search_paths=strings("autouic_search_paths"),
            autorcc_options=strings("autorcc_options"),
            autogen_target_depends=strings("autogen_target_depends"),
            autogen_build_dir=optional("autogen_build_dir"),
            folder=optional("folder"),
            qt_major_version=optional("qt_major_version"),
            qt_minor_version=optional("qt_minor_version"),
            interface_qt_major_version=optional("interface_qt_major_version"),
            interface_qt_minor_version=optional("interface_qt_minor_version"),
        )

    @property
    def any_generator_enabled(self) -> bool:
        return self.automoc or self.autouic or self.autorcc


@dataclass(slots=True)
class ProjectSettings:
    """Directory-wide and global settings shared by every target of a project."""

    source_dir: str
    binary_dir: str
    build_type: str = ""
    configurations: List[str] = field(default_factory=list)
    multi_config: bool = False
    generated_file_policy: GeneratedFilePolicy = GeneratedFilePolicy.WARN
    qt_version_major: str | None = None
    qt_version_minor: str | None = None
    qt5core_version_major: str | None = None
    qt5core_version_minor: str | None = None
    automoc_relaxed_mode: bool = False
    cxx_compiler_predefines_command: List[str] = field(default_factory=list)
    automoc_source_group: str | None = None
    autorcc_source_group: str | None = None
    autogen_source_group: str | None = None
    automoc_targets_folder: str | None = None
    autogen_targets_folder: str | None = None
    source_group_delimiter: str = "\\"
    cmake_command: str = "cmake"
    cmake_files_directory: str = "CMakeFiles"

    _KEYS = frozenset(
        {
            "source_dir",
            "binary_dir",
            "build_type",
            "configurations",
            "multi_config",
            "generated_file_policy",
            "qt_version_major",
            "qt_version_minor",
            "qt5core_version_major",
            "qt5core_version_minor",
            "automoc_relaxed_mode",
            "cxx_compiler_predefines_command",
            "automoc_source_group",
            "autorcc_source_group",
            "autogen_source_group",
            "automoc_targets_folder",
            "autogen_targets_folder",
            "source_group_delimiter",
            "cmake_command",
            "cmake_files_directory",
        }
    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProjectSettings":
        if not isinstance(data, Mapping):
            raise TypeError("[project] section must be a mapping")
        reject_unknown_keys(data, cls._KEYS, label="[project] section")

        source_dir = normalize_optional_string(data.get("source_dir"), field_name="project.source_dir")
        binary_dir = normalize_optional_string(data.get("binary_dir"), field_name="project.binary_dir")
        if not source_dir or not binary_dir:
            raise ValueError("project.source_dir and project.binary_dir are required")

        def optional(key: str) -> str | None:
            return normalize_optional_string(data.get(key), field_name=f"project.{key}")

        policy_value = data.get("generated_file_policy")
        policy = (
            GeneratedFilePolicy.parse(policy_value)
            if policy_value is not None
            else GeneratedFilePolicy.WARN
        )
        delimiter = data.get("source_group_delimiter")

        return cls(
            source_dir=source_dir,
            binary_dir=binary_dir,
            build_type=str(data.get("build_type") or ""),
            configurations=normalize_string_list(
                data.get("configurations"), field_name="project.configurations"
            ),
            multi_config=normalize_bool(data.get("multi_config"), field_name="project.multi_config"),
            generated_file_policy=policy,
            qt_version_major=optional("qt_version_major"),
            qt_version_minor=optional("qt_version_minor"),
            qt5core_version_major=optional("qt5core_version_major"),
            qt5core_version_minor=optional("qt5core_version_minor"),
            automoc_relaxed_mode=normalize_bool(
                data.get("automoc_relaxed_mode"), field_name="project.automoc_relaxed_mode"
            ),
            cxx_compiler_predefines_command=normalize_string_list(
                data.get("cxx_compiler_predefines_command"),
                field_name="project.cxx_compiler_predefines_command",
            ),
            automoc_source_group=optional("automoc_source_group"),
            autorcc_source_group=optional("autorcc_source_group"),
            autogen_source_group=optional("autogen_source_group"),
            automoc_targets_folder=optional("automoc_targets_folder"),
            autogen_targets_folder=optional("autogen_targets_folder"),
            source_group_delimiter=str(delimiter) if delimiter else "\\",
            cmake_command=optional("cmake_command") or "cmake",
            cmake_files_directory=optional("cmake_files_directory") or "CMakeFiles",
        )


__all__ = ["ProjectSettings", "TargetProperties"]
