"""Build a :class:`BuildGraph` from a project description file or mapping."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from core.config_loader import load_config_file, normalize_string_list

from .graph import BuildGraph, ImportedTarget, SourceFile, Target, collapse_path
from .settings import ProjectSettings, TargetProperties

_STRUCTURAL_KEYS = frozenset(
    {
        "source_dir",
        "binary_dir",
        "sources",
        "utilities",
        "link_libraries",
        "include_directories",
        "compile_definitions",
        "config",
        "object_libraries",
    }
)
_CONFIG_KEYS = frozenset({"include_directories", "compile_definitions"})


def _parse_config_section(name: str, value: Any) -> tuple[Dict[str, List[str]], Dict[str, List[str]]]:
    includes: Dict[str, List[str]] = {}
    definitions: Dict[str, List[str]] = {}
    if value is None:
        return includes, definitions
    if not isinstance(value, Mapping):
        raise TypeError(f"Target '{name}' config section must be a mapping")
    for config, section in value.items():
        if not isinstance(section, Mapping):
            raise TypeError(f"Target '{name}' config '{config}' must be a mapping")
        unknown = {str(key) for key in section if str(key) not in _CONFIG_KEYS}
        if unknown:
            joined = ", ".join(sorted(unknown))
            raise ValueError(f"Target '{name}' config '{config}' contains unknown keys: {joined}")
        includes[str(config)] = normalize_string_list(
            section.get("include_directories"), field_name=f"{name}.config.{config}.include_directories"
        )
        definitions[str(config)] = normalize_string_list(
            section.get("compile_definitions"), field_name=f"{name}.config.{config}.compile_definitions"
        )
    return includes, definitions


def target_from_mapping(name: str, data: Mapping[str, Any], *, settings: ProjectSettings) -> Target:
    if not isinstance(data, Mapping):
        raise TypeError(f"Target '{name}' definition must be a mapping")

    source_dir = collapse_path(str(data.get("source_dir") or "."), settings.source_dir)
    binary_dir = collapse_path(str(data.get("binary_dir") or "."), settings.binary_dir)

    sources_section = data.get("sources", [])
    if isinstance(sources_section, (str, bytes)) or not isinstance(sources_section, Sequence):
        raise TypeError(f"Target '{name}' sources must be an array of strings or tables")
    sources = [SourceFile.from_value(entry, base_dir=source_dir) for entry in sources_section]

    include_directories = [
        collapse_path(entry, source_dir)
        for entry in normalize_string_list(data.get("include_directories"), field_name=f"{name}.include_directories")
    ]
    config_includes, config_definitions = _parse_config_section(name, data.get("config"))
    config_includes = {
        config: [collapse_path(entry, source_dir) for entry in entries]
        for config, entries in config_includes.items()
    }

    property_data = {key: value for key, value in data.items() if key not in _STRUCTURAL_KEYS}
    properties = TargetProperties.from_mapping(property_data, name=name)

    return Target(
        name,
        source_dir=source_dir,
        binary_dir=binary_dir,
        sources=sources,
        properties=properties,
        utilities=normalize_string_list(data.get("utilities"), field_name=f"{name}.utilities"),
        link_libraries=normalize_string_list(data.get("link_libraries"), field_name=f"{name}.link_libraries"),
        include_directories=include_directories,
        compile_definitions=normalize_string_list(
            data.get("compile_definitions"), field_name=f"{name}.compile_definitions"
        ),
        config_include_directories=config_includes,
        config_compile_definitions=config_definitions,
    )


def _link_object_libraries(graph: BuildGraph, target: Target, data: Mapping[str, Any]) -> None:
    names = normalize_string_list(data.get("object_libraries"), field_name=f"{target.name}.object_libraries")
    for name in names:
        library = graph.targets.get(name)
        if library is None:
            raise ValueError(f"Target '{target.name}' uses unknown object library '{name}'")
        target.add_object_library(library)


def graph_from_mapping(data: Mapping[str, Any]) -> BuildGraph:
    """Create a build graph from a decoded project description."""

    project_section = data.get("project")
    if not isinstance(project_section, Mapping):
        raise ValueError("[project] section is required in project description")
    settings = ProjectSettings.from_mapping(project_section)

    graph = BuildGraph(settings)

    imported_section = data.get("imported_targets", {})
    if not isinstance(imported_section, Mapping):
        raise TypeError("[imported_targets] must map target names to executable locations")
    for imported_name, location in imported_section.items():
        graph.add_imported_target(ImportedTarget(name=str(imported_name), location=str(location or "")))

    targets_section = data.get("targets", {})
    if not isinstance(targets_section, Mapping):
        raise TypeError("[targets] must be a table of target definitions")
    for target_name, target_data in targets_section.items():
        graph.add_target(target_from_mapping(str(target_name), target_data, settings=settings))

    for target_name, target_data in targets_section.items():
        _link_object_libraries(graph, graph.get_target(str(target_name)), target_data)

    return graph


def load_project(path: Path) -> BuildGraph:
    """Load a project description from a TOML, JSON or YAML file.

    Relative ``source_dir``/``binary_dir`` entries are taken relative to the
    directory containing ``path``.
    """

    data = dict(load_config_file(path))
    project_section = data.get("project")
    if isinstance(project_section, Mapping):
        project = dict(project_section)
        base = path.resolve().parent
        for key in ("source_dir", "binary_dir"):
            value = project.get(key)
            if isinstance(value, str) and value.strip():
                project[key] = collapse_path(value.strip(), base)
        data["project"] = project
    return graph_from_mapping(data)


__all__ = ["graph_from_mapping", "load_project", "target_from_mapping"]
