"""Collect everything the autogen step has to run after."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Sequence

from .classifier import Classification, ResourceSource
from .diagnostics import Diagnostics
from .errors import ResourceListingError
from .graph import BuildGraph, Target, canonical_path
from .ordered_set import OrderedSet
from .tools import ToolBinding

ResourceLister = Callable[[ResourceSource, ToolBinding], Sequence[str]]
"""Return the content inputs of a resource file or raise ResourceListingError."""


def list_declared_inputs(resource: ResourceSource, binding: ToolBinding) -> Sequence[str]:
    """Default lister: the inputs declared on the resource source entry.

    Relative inputs are taken relative to the resource file's directory.
    """

    if resource.declared_inputs is None:
        raise ResourceListingError(resource.path, "no input list is declared for this file")
    base = Path(resource.path).parent
    return [canonical_path(entry, base) for entry in resource.declared_inputs]


@dataclass(frozen=True, slots=True)
class DependencyResult:
    depends: tuple[str, ...]
    resource_inputs: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    reconfigure_files: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "resource_inputs", MappingProxyType(dict(self.resource_inputs)))


class DependencySetBuilder:
    def __init__(
        self,
        graph: BuildGraph,
        target: Target,
        *,
        diagnostics: Diagnostics,
        lister: ResourceLister = list_declared_inputs,
        exclude: Sequence[str] = (),
    ) -> None:
        self._graph = graph
        self._exclude = frozenset(exclude)
        self._target = target
        self._diagnostics = diagnostics
        self._lister = lister

    def build(self, classification: Classification, rcc_binding: ToolBinding | None) -> DependencyResult:
        depends: OrderedSet[str] = OrderedSet()

        for token in self._target.properties.autogen_target_depends:
            if self._graph.is_known_target(token):
                depends.add(token)
            else:
                depends.add(canonical_path(token, self._target.source_dir))

        for name in (*self._target.utilities, *self._target.link_libraries):
            if name not in self._exclude and self._graph.is_known_target(name):
                depends.add(name)

        depends.update(classification.generated_scan_files)

        resource_inputs: Dict[str, tuple[str, ...]] = {}
        reconfigure: OrderedSet[str] = OrderedSet()
        for resource in classification.resources:
            if resource.generated:
                # It has to exist before it can be read.
                depends.add(resource.path)
                continue
            reconfigure.add(resource.path)
            self._graph.add_reconfigure_dependency(resource.path)
            inputs = self._list_inputs(resource, rcc_binding)
            if inputs is None:
                continue
            resource_inputs[resource.path] = inputs
            depends.update(inputs)

        return DependencyResult(
            depends=tuple(depends),
            resource_inputs=resource_inputs,
            reconfigure_files=tuple(reconfigure),
        )

    def _list_inputs(self, resource: ResourceSource, binding: ToolBinding | None) -> tuple[str, ...] | None:
        if binding is None:
            return None
        try:
            listed = self._lister(resource, binding)
        except ResourceListingError as exc:
            self._diagnostics.error(str(exc))
            return None
        base = Path(resource.path).parent
        return tuple(OrderedSet(canonical_path(entry, base) for entry in listed))


__all__ = ["DependencyResult", "DependencySetBuilder", "ResourceLister", "list_declared_inputs"]
