"""Partition a target's sources into the inputs of each generator."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .diagnostics import Diagnostics
from .graph import FileFormat, SourceFile, canonical_path
from .ordered_set import OrderedSet
from .policy import GeneratedFilePolicy, PolicyDecision


@dataclass(frozen=True, slots=True)
class ResourceSource:
    path: str
    generated: bool
    options: tuple[str, ...] = ()
    declared_inputs: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class UiOptionsFile:
    path: str
    options: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Classification:
    sources: tuple[str, ...] = ()
    headers: tuple[str, ...] = ()
    moc_skip: tuple[str, ...] = ()
    uic_skip: tuple[str, ...] = ()
    generated_scan_files: tuple[str, ...] = ()
    resources: tuple[ResourceSource, ...] = ()
    ui_option_files: tuple[UiOptionsFile, ...] = ()


class SourceClassifier:
    """Decide which sources are scanned by moc/uic and which are packed by rcc."""

    def __init__(
        self,
        *,
        moc_enabled: bool,
        uic_enabled: bool,
        rcc_enabled: bool,
        policy: GeneratedFilePolicy,
        diagnostics: Diagnostics,
    ) -> None:
        self.moc_enabled = moc_enabled
        self.uic_enabled = uic_enabled
        self.rcc_enabled = rcc_enabled
        self.policy = policy
        self._diagnostics = diagnostics

    def classify(self, source_files: Iterable[SourceFile]) -> Classification:
        sources: OrderedSet[str] = OrderedSet()
        headers: OrderedSet[str] = OrderedSet()
        moc_skip: OrderedSet[str] = OrderedSet()
        uic_skip: OrderedSet[str] = OrderedSet()
        generated_scan: OrderedSet[str] = OrderedSet()
        resources: dict[str, ResourceSource] = {}
        ui_candidates: dict[str, SourceFile] = {}

        for source in source_files:
            # Outputs of an earlier planning pass are never planned again.
            if source.autogen_output:
                continue
            file_format = source.file_format
            if file_format is FileFormat.RESOURCE:
                self._classify_resource(source, resources)
                continue
            if not (file_format.scannable or file_format is FileFormat.UI):
                continue

            path = canonical_path(source.path)
            skip_moc = source.skip_autogen or source.skip_automoc
            skip_uic = source.skip_autogen or source.skip_autouic

            # Skip lists are consulted when other files reference this one.
            if skip_moc:
                moc_skip.add(path)
            if skip_uic:
                uic_skip.add(path)

            if file_format is FileFormat.UI:
                if source.autouic_options:
                    ui_candidates.setdefault(path, source)
                continue

            accept = (self.moc_enabled and not skip_moc) or (self.uic_enabled and not skip_uic)
            if not accept:
                continue
            if source.generated:
                if not self._accept_generated(path):
                    continue
                generated_scan.add(path)

            if file_format is FileFormat.CODE:
                sources.add(path)
            else:
                headers.add(path)

        ui_option_files: list[UiOptionsFile] = []
        if self.uic_enabled:
            for path, source in ui_candidates.items():
                if path not in uic_skip:
                    ui_option_files.append(UiOptionsFile(path=path, options=tuple(source.autouic_options)))

        return Classification(
            sources=tuple(sources),
            headers=tuple(headers),
            moc_skip=tuple(moc_skip),
            uic_skip=tuple(uic_skip),
            generated_scan_files=tuple(generated_scan),
            resources=tuple(resources.values()),
            ui_option_files=tuple(ui_option_files),
        )

    def _classify_resource(self, source: SourceFile, resources: dict[str, ResourceSource]) -> None:
        if not self.rcc_enabled or source.skip_autogen or source.skip_autorcc:
            return
        path = canonical_path(source.path)
        if path in resources:
            return
        resources[path] = ResourceSource(
            path=path,
            generated=source.generated,
            options=tuple(source.autorcc_options),
            declared_inputs=tuple(source.resource_inputs) if source.resource_inputs is not None else None,
        )

    def _accept_generated(self, path: str) -> bool:
        decision = self.policy.decide()
        if decision is PolicyDecision.REJECT_WITH_WARNING:
            self._diagnostics.warning(
                "AUTOMOC/AUTOUIC: Ignoring GENERATED source file:\n"
                f"  \"{path}\"\n"
                "Set the generated file policy to NEW to process GENERATED sources."
            )
        return decision.accepted


__all__ = ["Classification", "ResourceSource", "SourceClassifier", "UiOptionsFile"]
