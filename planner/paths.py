"""Names and locations of the files produced for an autogen target."""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import Sequence
import base64
import hashlib

from .graph import BuildGraph, Target, collapse_path

_CHECKSUM_LENGTH = 10


def autogen_target_name(target: Target) -> str:
    return f"{target.name}_autogen"


def autogen_build_dir(target: Target) -> str:
    override = target.properties.autogen_build_dir
    if override:
        return collapse_path(override, target.binary_dir)
    return f"{target.binary_dir}/{autogen_target_name(target)}"


def autogen_files_dir(target: Target, graph: BuildGraph) -> str:
    files_dir = graph.settings.cmake_files_directory
    return f"{target.binary_dir}/{files_dir}/{autogen_target_name(target)}.dir"


def info_file(target: Target, graph: BuildGraph) -> str:
    return f"{autogen_files_dir(target, graph)}/AutogenInfo.cmake"


def old_settings_files(target: Target, graph: BuildGraph) -> list[str]:
    base = f"{autogen_files_dir(target, graph)}/AutogenOldSettings"
    return [f"{base}{suffix}.cmake" for suffix in graph.configuration_suffixes()]


def checksum_roots(target: Target, graph: BuildGraph) -> list[tuple[str, str]]:
    return [
        ("CurrentSource", target.source_dir),
        ("CurrentBinary", target.binary_dir),
        ("ProjectSource", graph.settings.source_dir),
        ("ProjectBinary", graph.settings.binary_dir),
    ]


def path_checksum(path: str, roots: Sequence[tuple[str, str]]) -> str:
    """Short, filesystem safe checksum of the directory containing ``path``.

    The directory is taken relative to the first matching root so the result
    does not depend on where the tree is checked out.
    """

    parent = PurePosixPath(path).parent
    seed = parent.as_posix()
    for label, root in roots:
        root_path = PurePosixPath(root)
        if parent == root_path or root_path in parent.parents:
            seed = f"{label}/{parent.relative_to(root_path).as_posix()}"
            break
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return base64.b32encode(digest).decode("ascii")[:_CHECKSUM_LENGTH]


def rcc_output_file(build_dir: str, resource_path: str, roots: Sequence[tuple[str, str]]) -> str:
    stem = PurePosixPath(resource_path).stem
    return f"{build_dir}/{path_checksum(resource_path, roots)}/qrc_{stem}.cpp"


__all__ = [
    "autogen_build_dir",
    "autogen_files_dir",
    "autogen_target_name",
    "checksum_roots",
    "info_file",
    "old_settings_files",
    "path_checksum",
    "rcc_output_file",
]
