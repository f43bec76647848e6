"""Qt major/minor version detection for a target."""
from __future__ import annotations

from enum import Enum
from typing import Callable

from .diagnostics import Diagnostics
from .graph import BuildGraph, Target
from .settings import TargetProperties


class QtMajorVersion(Enum):
    QT4 = "4"
    QT5 = "5"

    @classmethod
    def parse(cls, value: str) -> "QtMajorVersion":
        try:
            return cls(str(value).strip())
        except ValueError:
            raise ValueError(f"Unsupported Qt major version '{value}'") from None

    def import_target(self, tool: str) -> str:
        return f"Qt{self.value}::{tool}"

    @property
    def strips_double_dash(self) -> bool:
        """Whether the tools of this generation accept ``--long`` options."""

        return self is QtMajorVersion.QT5


def _link_propagated(
    target: Target,
    graph: BuildGraph,
    read: Callable[[TargetProperties], str | None],
    *,
    label: str,
    diagnostics: Diagnostics | None,
) -> str | None:
    values: dict[str, str] = {}
    for library in target.link_libraries:
        dependency = graph.targets.get(library)
        if dependency is None:
            continue
        value = read(dependency.properties)
        if value:
            values.setdefault(value, library)
    if len(values) > 1 and diagnostics is not None:
        conflicts = ", ".join(f"{name}={value}" for value, name in values.items())
        diagnostics.error(
            f"Property {label} in the link interface of target \"{target.name}\" "
            f"has conflicting values: {conflicts}"
        )
    return next(iter(values), None)


def detect_major_version(target: Target, graph: BuildGraph, diagnostics: Diagnostics | None = None) -> str:
    explicit = target.properties.qt_major_version
    if explicit:
        return explicit
    propagated = _link_propagated(
        target,
        graph,
        lambda props: props.interface_qt_major_version,
        label="QT_MAJOR_VERSION",
        diagnostics=diagnostics,
    )
    if propagated:
        return propagated
    settings = graph.settings
    return settings.qt_version_major or settings.qt5core_version_major or ""


def detect_minor_version(
    target: Target,
    graph: BuildGraph,
    major: str,
    diagnostics: Diagnostics | None = None,
) -> str:
    explicit = target.properties.qt_minor_version
    if explicit:
        return explicit
    propagated = _link_propagated(
        target,
        graph,
        lambda props: props.interface_qt_minor_version,
        label="QT_MINOR_VERSION",
        diagnostics=diagnostics,
    )
    if propagated:
        return propagated
    settings = graph.settings
    minor = settings.qt5core_version_minor if major == "5" else None
    return minor or settings.qt_version_minor or ""


def version_at_least(major: str, minor: str, request_major: int, request_minor: int) -> bool:
    if not (major.isdigit() and minor.isdigit()):
        return False
    major_value = int(major)
    minor_value = int(minor)
    return major_value > request_major or (major_value == request_major and minor_value >= request_minor)


__all__ = ["QtMajorVersion", "detect_major_version", "detect_minor_version", "version_at_least"]
