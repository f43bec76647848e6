"""In-memory build graph model queried and updated by the planner."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Sequence

from core.config_loader import normalize_bool, normalize_string_list, reject_unknown_keys

from .ordered_set import OrderedSet
from .settings import ProjectSettings, TargetProperties


_CODE_EXTENSIONS = frozenset({"c", "C", "c++", "cc", "cpp", "cxx", "cu", "m", "M", "mm"})
_HEADER_EXTENSIONS = frozenset({"h", "hh", "h++", "hm", "hpp", "hxx", "in", "txx"})


class FileFormat(str, Enum):
    CODE = "code"
    HEADER = "header"
    UI = "ui"
    RESOURCE = "resource"
    OTHER = "other"

    @classmethod
    def from_extension(cls, extension: str) -> "FileFormat":
        if extension in _CODE_EXTENSIONS:
            return cls.CODE
        if extension in _HEADER_EXTENSIONS:
            return cls.HEADER
        if extension == "ui":
            return cls.UI
        if extension == "qrc":
            return cls.RESOURCE
        return cls.OTHER

    @property
    def scannable(self) -> bool:
        return self in (FileFormat.CODE, FileFormat.HEADER)


def canonical_path(path: str | Path, base: str | Path | None = None) -> str:
    """Return the absolute, symlink resolved form of ``path``."""

    candidate = Path(path).expanduser()
    if not candidate.is_absolute() and base is not None:
        candidate = Path(base) / candidate
    return candidate.resolve().as_posix()


def collapse_path(path: str | Path, base: str | Path) -> str:
    """Make ``path`` absolute against ``base`` without resolving symlinks."""

    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = Path(base) / candidate
    if not candidate.is_absolute():
        candidate = Path.cwd() / candidate
    parts: List[str] = []
    for part in candidate.parts[1:]:
        if part == "..":
            if parts:
                parts.pop()
        elif part not in (".", ""):
            parts.append(part)
    return Path(candidate.anchor, *parts).as_posix()


@dataclass(slots=True)
class SourceFile:
    path: str
    generated: bool = False
    skip_autogen: bool = False
    skip_automoc: bool = False
    skip_autouic: bool = False
    skip_autorcc: bool = False
    autogen_output: bool = False
    autouic_options: List[str] = field(default_factory=list)
    autorcc_options: List[str] = field(default_factory=list)
    resource_inputs: List[str] | None = None

    _KEYS = frozenset(
        {
            "path",
            "generated",
            "skip_autogen",
            "skip_automoc",
            "skip_autouic",
            "skip_autorcc",
            "autouic_options",
            "autorcc_options",
            "resource_inputs",
        }
    )

    @classmethod
    def from_value(cls, value: Any, *, base_dir: str) -> "SourceFile":
        if isinstance(value, str):
            if not value.strip():
                raise ValueError("Source entries cannot be empty strings")
            return cls(path=collapse_path(value.strip(), base_dir))
        if not isinstance(value, Mapping):
            raise TypeError("Sources must be specified as strings or mappings")
        reject_unknown_keys(value, cls._KEYS, label="Source entry")
        raw_path = value.get("path")
        if not raw_path or not str(raw_path).strip():
            raise ValueError("Source entries must include a non-empty 'path'")
        path = collapse_path(str(raw_path).strip(), base_dir)
        inputs_value = value.get("resource_inputs")
        return cls(
            path=path,
            generated=normalize_bool(value.get("generated"), field_name="generated"),
            skip_autogen=normalize_bool(value.get("skip_autogen"), field_name="skip_autogen"),
            skip_automoc=normalize_bool(value.get("skip_automoc"), field_name="skip_automoc"),
            skip_autouic=normalize_bool(value.get("skip_autouic"), field_name="skip_autouic"),
            skip_autorcc=normalize_bool(value.get("skip_autorcc"), field_name="skip_autorcc"),
            autouic_options=normalize_string_list(value.get("autouic_options"), field_name="autouic_options"),
            autorcc_options=normalize_string_list(value.get("autorcc_options"), field_name="autorcc_options"),
            resource_inputs=(
                normalize_string_list(inputs_value, field_name="resource_inputs")
                if inputs_value is not None
                else None
            ),
        )

    @property
    def extension(self) -> str:
        suffix = Path(self.path).suffix
        return suffix[1:] if suffix else ""

    @property
    def file_format(self) -> FileFormat:
        return FileFormat.from_extension(self.extension)


@dataclass(slots=True)
class ImportedTarget:
    name: str
    location: str = ""


@dataclass(slots=True)
class UtilityStep:
    name: str
    working_directory: str
    byproducts: List[str]
    depends: List[str]
    command_lines: List[List[str]]
    comment: str
    folder: str | None = None


@dataclass(slots=True)
class SourceGroup:
    folders: tuple[str, ...]
    files: OrderedSet[str] = field(default_factory=OrderedSet)


class Target:
    """A buildable target with its sources and per-configuration compile settings."""

    def __init__(
        self,
        name: str,
        *,
        source_dir: str,
        binary_dir: str,
        sources: Iterable[SourceFile] = (),
        properties: TargetProperties | None = None,
        utilities: Iterable[str] = (),
        link_libraries: Iterable[str] = (),
        include_directories: Iterable[str] = (),
        compile_definitions: Iterable[str] = (),
        config_include_directories: Mapping[str, Sequence[str]] | None = None,
        config_compile_definitions: Mapping[str, Sequence[str]] | None = None,
        object_libraries: Iterable["Target"] = (),
    ) -> None:
        self.name = name
        self.source_dir = source_dir
        self.binary_dir = binary_dir
        self.properties = properties or TargetProperties()
        self.sources: List[SourceFile] = []
        self.utilities: OrderedSet[str] = OrderedSet(utilities)
        self.link_libraries: List[str] = list(link_libraries)
        self.include_directories: List[str] = list(include_directories)
        self.compile_definitions: List[str] = list(compile_definitions)
        self.config_include_directories: Dict[str, List[str]] = {
            key: list(value) for key, value in (config_include_directories or {}).items()
        }
        self.config_compile_definitions: Dict[str, List[str]] = {
            key: list(value) for key, value in (config_compile_definitions or {}).items()
        }
        self.object_libraries: List[Target] = []
        self._consumers: List[Target] = []
        self._sources_cache: List[SourceFile] | None = None
        for source in sources:
            self.add_source(source)
        for library in object_libraries:
            self.add_object_library(library)

    def __repr__(self) -> str:
        return f"Target({self.name!r})"

    def add_source(self, source: SourceFile) -> SourceFile:
        """Add ``source`` unless a source with the same path is already present.

        The memoized source list is left untouched; callers that need the new
        source to be visible must call :meth:`clear_sources_cache`.
        """

        for existing in self.sources:
            if existing.path == source.path:
                return existing
        self.sources.append(source)
        return source

    def add_object_library(self, library: "Target") -> None:
        """Compile the sources of ``library`` into this target as well."""

        if library is self or self in library.iter_object_libraries():
            raise ValueError(f"Object library '{library.name}' of target '{self.name}' would create a cycle")
        if library in self.object_libraries:
            return
        self.object_libraries.append(library)
        library._consumers.append(self)
        self.clear_sources_cache()

    def iter_object_libraries(self) -> Iterator["Target"]:
        for library in self.object_libraries:
            yield library
            yield from library.iter_object_libraries()

    def config_common_sources(self) -> List[SourceFile]:
        """Own sources followed by those of the object libraries, memoized."""

        if self._sources_cache is None:
            merged = list(self.sources)
            seen = {source.path for source in merged}
            for library in self.object_libraries:
                for source in library.config_common_sources():
                    if source.path not in seen:
                        seen.add(source.path)
                        merged.append(source)
            self._sources_cache = merged
        return list(self._sources_cache)

    def clear_sources_cache(self) -> None:
        """Drop the memoized source list here and in every consuming target."""

        self._sources_cache = None
        for consumer in self._consumers:
            consumer.clear_sources_cache()

    @property
    def sources_cached(self) -> bool:
        return self._sources_cache is not None

    def add_include_directory(self, directory: str, *, before: bool = False) -> None:
        if directory in self.include_directories:
            return
        if before:
            self.include_directories.insert(0, directory)
        else:
            self.include_directories.append(directory)

    def add_utility(self, name: str) -> None:
        self.utilities.add(name)

    def include_directories_for(self, config: str) -> List[str]:
        directories = OrderedSet(self.include_directories)
        directories.update(self.config_include_directories.get(config, ()))
        return directories.to_list()

    def compile_definitions_for(self, config: str) -> List[str]:
        definitions = set(self.compile_definitions)
        definitions.update(self.config_compile_definitions.get(config, ()))
        return sorted(definitions)

    def autouic_options_for(self, config: str) -> List[str]:
        options = list(self.properties.autouic_options)
        options.extend(self.properties.autouic_config_options.get(config, ()))
        return options


class BuildGraph:
    """Registry of targets plus the side effects recorded during planning."""

    def __init__(
        self,
        settings: ProjectSettings,
        *,
        targets: Iterable[Target] = (),
        imported_targets: Iterable[ImportedTarget] = (),
    ) -> None:
        self.settings = settings
        self.targets: Dict[str, Target] = {}
        self.imported_targets: Dict[str, ImportedTarget] = {}
        self.utility_steps: Dict[str, UtilityStep] = {}
        self.clean_files: OrderedSet[str] = OrderedSet()
        self.reconfigure_dependencies: OrderedSet[str] = OrderedSet()
        self.source_groups: Dict[tuple[str, ...], SourceGroup] = {}
        self._source_files: Dict[str, SourceFile] = {}
        for target in targets:
            self.add_target(target)
        for imported in imported_targets:
            self.add_imported_target(imported)

    def add_target(self, target: Target) -> Target:
        if target.name in self.targets or target.name in self.imported_targets:
            raise ValueError(f"Target '{target.name}' is already defined")
        self.targets[target.name] = target
        return target

    def add_imported_target(self, imported: ImportedTarget) -> ImportedTarget:
        if imported.name in self.targets or imported.name in self.imported_targets:
            raise ValueError(f"Target '{imported.name}' is already defined")
        self.imported_targets[imported.name] = imported
        return imported

    def get_target(self, name: str) -> Target:
        if name not in self.targets:
            available = ", ".join(sorted(self.targets)) or "<none>"
            raise KeyError(f"Target '{name}' not found. Available targets: {available}")
        return self.targets[name]

    def find_imported_target(self, name: str) -> ImportedTarget | None:
        return self.imported_targets.get(name)

    def is_known_target(self, name: str) -> bool:
        return name in self.targets or name in self.imported_targets or name in self.utility_steps

    def configurations(self) -> tuple[List[str], str]:
        """Return the declared configurations and the baseline configuration."""

        configs = list(self.settings.configurations) or [""]
        return configs, self.settings.build_type

    def configuration_suffixes(self) -> List[str]:
        if self.settings.multi_config and self.settings.configurations:
            return [f"_{config}" for config in self.settings.configurations]
        return [""]

    def get_or_create_source(self, path: str) -> SourceFile:
        source = self._source_files.get(path)
        if source is None:
            for target in self.targets.values():
                for candidate in target.sources:
                    if candidate.path == path:
                        source = candidate
                        break
                if source is not None:
                    break
        if source is None:
            source = SourceFile(path=path)
        self._source_files[path] = source
        return source

    def source_group(self, folders: Sequence[str]) -> SourceGroup:
        key = tuple(folders)
        group = self.source_groups.get(key)
        if group is None:
            group = SourceGroup(folders=key)
            self.source_groups[key] = group
        return group

    def add_utility_step(self, step: UtilityStep) -> UtilityStep:
        if step.name in self.targets or step.name in self.imported_targets:
            raise ValueError(f"Target '{step.name}' is already defined")
        self.utility_steps[step.name] = step
        return step

    def add_clean_file(self, path: str) -> None:
        self.clean_files.add(path)

    def add_reconfigure_dependency(self, path: str) -> None:
        self.reconfigure_dependencies.add(path)


__all__ = [
    "BuildGraph",
    "FileFormat",
    "ImportedTarget",
    "SourceFile",
    "SourceGroup",
    "Target",
    "UtilityStep",
    "canonical_path",
    "collapse_path",
]
