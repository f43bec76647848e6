"""Plan and register automatic moc/uic/rcc processing for build targets."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from .classifier import Classification, SourceClassifier
from .config_diff import ConfigDiffer
from .dependencies import DependencyResult, DependencySetBuilder, ResourceLister, list_declared_inputs
from .diagnostics import Diagnostic, Diagnostics, Severity
from .emitter import Emitter
from .errors import PlannerError
from .graph import BuildGraph, Target, collapse_path
from .logging import get_logger
from .options import merge_options
from .paths import (
    autogen_build_dir,
    autogen_files_dir,
    autogen_target_name,
    checksum_roots,
    info_file,
    rcc_output_file,
)
from .plan import AutogenPlan, GeneratedFile, MocSettings, RccEntry, RccSettings, UicSettings
from .tools import Tool, ToolBinding, ToolResolver
from .versions import QtMajorVersion, detect_major_version, detect_minor_version, version_at_least

log = get_logger()


@dataclass(frozen=True, slots=True)
class PlanResult:
    plan: AutogenPlan
    descriptor: Path
    diagnostics: tuple[Diagnostic, ...]

    @property
    def has_errors(self) -> bool:
        return any(item.severity is Severity.ERROR for item in self.diagnostics)


class AutogenPlanner:
    """Run the planning stages for targets of one build graph.

    Each call works on a single target and shares nothing with other calls
    except the build graph itself.
    """

    def __init__(self, graph: BuildGraph, *, resource_lister: ResourceLister = list_declared_inputs) -> None:
        self._graph = graph
        self._resource_lister = resource_lister

    def candidates(self) -> List[Target]:
        return [target for target in self._graph.targets.values() if target.properties.any_generator_enabled]

    def run_all(self) -> List[PlanResult]:
        return [self.run(target.name) for target in self.candidates()]

    def run(self, target_name: str) -> PlanResult:
        target = self._graph.get_target(target_name)
        diagnostics = Diagnostics(target=target.name)
        emitter = Emitter(self._graph, target, diagnostics=diagnostics)
        plan = self._build_plan(target, emitter, diagnostics)
        descriptor = emitter.emit(plan)
        log.info("planned %s for target %s", ", ".join(tool.value for tool in plan.enabled_tools), target.name)
        return PlanResult(plan=plan, descriptor=descriptor, diagnostics=tuple(diagnostics))

    def plan(self, target_name: str) -> tuple[AutogenPlan, tuple[Diagnostic, ...]]:
        """Build the plan without writing the descriptor or adding the build step.

        Planning still updates the graph: the autogen include directory is
        prepended to the target, resource files are registered as reconfigure
        dependencies and the source caches are invalidated. Those changes must
        be in place before the include lists are diffed so a later
        :meth:`run` produces the same plan.
        """

        target = self._graph.get_target(target_name)
        diagnostics = Diagnostics(target=target.name)
        emitter = Emitter(self._graph, target, diagnostics=diagnostics)
        plan = self._build_plan(target, emitter, diagnostics)
        return plan, tuple(diagnostics)

    def _build_plan(self, target: Target, emitter: Emitter, diagnostics: Diagnostics) -> AutogenPlan:
        properties = target.properties
        if not properties.any_generator_enabled:
            raise PlannerError(f"Target '{target.name}' has no automatic generators enabled")

        graph = self._graph
        settings = graph.settings
        moc_enabled = properties.automoc
        uic_enabled = properties.autouic
        rcc_enabled = properties.autorcc
        configurations, baseline = graph.configurations()
        build_dir = autogen_build_dir(target)

        include_directory = None
        if moc_enabled or uic_enabled:
            include_directory = f"{build_dir}/include"
            if settings.multi_config:
                include_directory += "_$<CONFIG>"
        # Registered before the include lists are computed so re-planning sees the same lists.
        emitter.register_include_directory(include_directory)

        major = detect_major_version(target, graph, diagnostics)
        minor = detect_minor_version(target, graph, major, diagnostics)
        log.debug("target %s uses Qt %s.%s", target.name, major, minor)

        classifier = SourceClassifier(
            moc_enabled=moc_enabled,
            uic_enabled=uic_enabled,
            rcc_enabled=rcc_enabled,
            policy=settings.generated_file_policy,
            diagnostics=diagnostics,
        )
        # Object library sources are planned with the library itself.
        own_paths = {source.path for source in target.sources}
        own_sources = [source for source in target.config_common_sources() if source.path in own_paths]
        classification = classifier.classify(own_sources)
        log.debug(
            "target %s: %d sources, %d headers, %d resources",
            target.name,
            len(classification.sources),
            len(classification.headers),
            len(classification.resources),
        )

        resolver = ToolResolver(graph, target.name)
        bindings = {}
        for tool, enabled in ((Tool.MOC, moc_enabled), (Tool.UIC, uic_enabled), (Tool.RCC, rcc_enabled)):
            if not enabled:
                continue
            binding = resolver.resolve(tool, major)
            if binding.error is not None:
                diagnostics.error(str(binding.error))
            bindings[tool] = binding

        differ = ConfigDiffer(target, baseline, configurations)
        moc = self._moc_settings(target, bindings[Tool.MOC], differ, major, minor) if moc_enabled else None
        uic = self._uic_settings(target, bindings[Tool.UIC], differ, classification) if uic_enabled else None

        dependency_builder = DependencySetBuilder(
            graph,
            target,
            diagnostics=diagnostics,
            lister=self._resource_lister,
            exclude=(autogen_target_name(target),),
        )
        dependencies = dependency_builder.build(classification, bindings.get(Tool.RCC))
        log.debug("target %s depends on %d inputs", target.name, len(dependencies.depends))
        # Targets planned later that share these sources must see the outputs added below.
        target.clear_sources_cache()

        rcc = None
        if rcc_enabled:
            rcc = self._rcc_settings(target, bindings[Tool.RCC], classification, dependencies, major, build_dir)

        generated_files: List[GeneratedFile] = []
        if moc_enabled:
            generated_files.append(GeneratedFile(path=f"{build_dir}/mocs_compilation.cpp", tool=Tool.MOC))
        if rcc is not None:
            generated_files.extend(GeneratedFile(path=entry.output, tool=Tool.RCC) for entry in rcc.entries)

        config_suffixes = {}
        if settings.multi_config:
            config_suffixes = {config: f"_{config}" for config in configurations if config}

        return AutogenPlan(
            target_name=target.name,
            autogen_target_name=autogen_target_name(target),
            build_dir=build_dir,
            files_dir=autogen_files_dir(target, graph),
            info_file=info_file(target, graph),
            working_directory=target.binary_dir,
            include_directory=include_directory,
            qt_version_major=major,
            qt_version_minor=minor,
            multi_config=settings.multi_config,
            baseline_config=baseline,
            configurations=tuple(configurations),
            classification=classification,
            moc=moc,
            uic=uic,
            rcc=rcc,
            dependencies=dependencies.depends,
            generated_files=tuple(generated_files),
            config_suffixes=config_suffixes,
        )

    def _moc_settings(
        self,
        target: Target,
        binding: ToolBinding,
        differ: ConfigDiffer,
        major: str,
        minor: str,
    ) -> MocSettings:
        settings = self._graph.settings
        predefs: tuple[str, ...] = ()
        if version_at_least(major, minor, 5, 8):
            predefs = tuple(settings.cxx_compiler_predefines_command)
        properties = target.properties
        return MocSettings(
            binding=binding,
            includes=differ.moc_includes(),
            definitions=differ.moc_definitions(),
            options=tuple(properties.automoc_moc_options),
            relaxed_mode=settings.automoc_relaxed_mode,
            macro_names=tuple(properties.automoc_macro_names),
            depend_filters=tuple(properties.automoc_depend_filters),
            predefs_command=predefs,
        )

    def _uic_settings(
        self,
        target: Target,
        binding: ToolBinding,
        differ: ConfigDiffer,
        classification: Classification,
    ) -> UicSettings:
        search_paths = tuple(
            collapse_path(path, target.source_dir) for path in target.properties.autouic_search_paths
        )
        return UicSettings(
            binding=binding,
            target_options=differ.uic_options(),
            search_paths=search_paths,
            option_files=classification.ui_option_files,
        )

    def _rcc_settings(
        self,
        target: Target,
        binding: ToolBinding,
        classification: Classification,
        dependencies: DependencyResult,
        major: str,
        build_dir: str,
    ) -> RccSettings:
        try:
            strip_double_dash = QtMajorVersion.parse(major).strips_double_dash
        except ValueError:
            strip_double_dash = False
        roots = checksum_roots(target, self._graph)
        entries = []
        for resource in classification.resources:
            options = list(target.properties.autorcc_options)
            if resource.options:
                options = merge_options(options, resource.options, strip_double_dash=strip_double_dash)
            entries.append(
                RccEntry(
                    path=resource.path,
                    generated=resource.generated,
                    output=rcc_output_file(build_dir, resource.path, roots),
                    inputs=dependencies.resource_inputs.get(resource.path, ()),
                    options=tuple(options),
                )
            )
        return RccSettings(binding=binding, entries=tuple(entries))


__all__ = ["AutogenPlanner", "PlanResult"]
