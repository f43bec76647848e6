"""Per-configuration settings recorded as differences from a baseline."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Sequence

from .graph import Target

LIST_SEPARATOR = ";"


def join_list(values: Iterable[str]) -> str:
    return LIST_SEPARATOR.join(values)


@dataclass(frozen=True, slots=True)
class ConfigDiff:
    """A baseline value plus the configurations whose value differs from it."""

    baseline: str
    overrides: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def value_for(self, config: str) -> str:
        return self.overrides.get(config, self.baseline)


def diff_configurations(
    baseline_config: str,
    configurations: Sequence[str],
    compute: Callable[[str], str],
) -> ConfigDiff:
    baseline = compute(baseline_config)
    overrides: Dict[str, str] = {}
    for config in configurations:
        value = compute(config)
        if value != baseline:
            overrides[config] = value
    return ConfigDiff(baseline=baseline, overrides=overrides)


class ConfigDiffer:
    """Compute the generator inputs of a target for every configuration."""

    def __init__(self, target: Target, baseline_config: str, configurations: Sequence[str]) -> None:
        self._target = target
        self._baseline = baseline_config
        self._configurations = list(configurations)

    def moc_includes(self) -> ConfigDiff:
        return diff_configurations(
            self._baseline,
            self._configurations,
            lambda config: join_list(self._target.include_directories_for(config)),
        )

    def moc_definitions(self) -> ConfigDiff:
        return diff_configurations(
            self._baseline,
            self._configurations,
            lambda config: join_list(self._target.compile_definitions_for(config)),
        )

    def uic_options(self) -> ConfigDiff:
        return diff_configurations(
            self._baseline,
            self._configurations,
            lambda config: join_list(self._target.autouic_options_for(config)),
        )


__all__ = ["ConfigDiff", "ConfigDiffer", "LIST_SEPARATOR", "diff_configurations", "join_list"]
