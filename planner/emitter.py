"""Register the autogen step with the build graph and write its descriptor."""
from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from .config_diff import join_list
from .descriptor import format_descriptor, join_nested, write_descriptor
from .diagnostics import Diagnostics
from .graph import BuildGraph, Target, UtilityStep
from .logging import get_logger
from .paths import old_settings_files
from .plan import AutogenPlan, GeneratedFile
from .tools import Tool

log = get_logger()

Entries = List[tuple[str, str]]


def compose_comment(tools: Sequence[Tool], target_name: str) -> str:
    """Return e.g. ``Automatic MOC, UIC and RCC for target app``."""

    names = [tool.value.upper() for tool in tools]
    if len(names) > 1:
        listed = ", ".join(names[:-1]) + " and " + names[-1]
    else:
        listed = names[0] if names else ""
    return f"Automatic {listed} for target {target_name}"


def descriptor_entries(plan: AutogenPlan) -> Entries:
    classification = plan.classification
    entries: Entries = [
        ("AM_BUILD_DIR", plan.build_dir),
        ("AM_QT_VERSION_MAJOR", plan.qt_version_major),
        ("AM_SOURCES", join_list(classification.sources)),
        ("AM_HEADERS", join_list(classification.headers)),
    ]

    moc = plan.moc
    entries.extend(
        [
            ("AM_MOC_SKIP", join_list(classification.moc_skip) if moc else ""),
            ("AM_QT_MOC_EXECUTABLE", moc.binding.executable if moc else ""),
            ("AM_MOC_INCLUDES", moc.includes.baseline if moc else ""),
            ("AM_MOC_DEFINITIONS", moc.definitions.baseline if moc else ""),
            ("AM_MOC_OPTIONS", join_list(moc.options) if moc else ""),
            ("AM_MOC_RELAXED_MODE", ("TRUE" if moc.relaxed_mode else "FALSE") if moc else ""),
            ("AM_MOC_MACRO_NAMES", join_list(moc.macro_names) if moc else ""),
            ("AM_MOC_DEPEND_FILTERS", join_list(moc.depend_filters) if moc else ""),
            ("AM_MOC_PREDEFS_CMD", join_list(moc.predefs_command) if moc else ""),
        ]
    )

    uic = plan.uic
    entries.extend(
        [
            ("AM_UIC_SKIP", join_list(classification.uic_skip) if uic else ""),
            ("AM_QT_UIC_EXECUTABLE", uic.binding.executable if uic else ""),
            ("AM_UIC_TARGET_OPTIONS", uic.target_options.baseline if uic else ""),
            ("AM_UIC_SEARCH_PATHS", join_list(uic.search_paths) if uic else ""),
            ("AM_UIC_OPTIONS_FILES", join_list(item.path for item in uic.option_files) if uic else ""),
            (
                "AM_UIC_OPTIONS_OPTIONS",
                join_list(join_nested(item.options) for item in uic.option_files) if uic else "",
            ),
        ]
    )

    rcc = plan.rcc
    rcc_entries = rcc.entries if rcc else ()
    optioned = [entry for entry in rcc_entries if entry.options]
    entries.extend(
        [
            ("AM_QT_RCC_EXECUTABLE", rcc.binding.executable if rcc else ""),
            ("AM_RCC_SOURCES", join_list(entry.path for entry in rcc_entries)),
            ("AM_RCC_INPUTS", join_list("{" + join_nested(entry.inputs) + "}" for entry in rcc_entries)),
            ("AM_RCC_OPTIONS_FILES", join_list(entry.path for entry in optioned)),
            ("AM_RCC_OPTIONS_OPTIONS", join_list(join_nested(entry.options) for entry in optioned)),
        ]
    )
    return entries


def configuration_entries(plan: AutogenPlan) -> Entries:
    """Entries keyed ``<base-key>_<configuration>``, only where needed."""

    entries: Entries = []
    for config, suffix in sorted(plan.config_suffixes.items()):
        entries.append((f"AM_CONFIG_SUFFIX_{config}", suffix))
    if plan.moc is not None:
        for config, value in sorted(plan.moc.definitions.overrides.items()):
            entries.append((f"AM_MOC_DEFINITIONS_{config}", value))
        for config, value in sorted(plan.moc.includes.overrides.items()):
            entries.append((f"AM_MOC_INCLUDES_{config}", value))
    if plan.uic is not None:
        for config, value in sorted(plan.uic.target_options.overrides.items()):
            entries.append((f"AM_UIC_TARGET_OPTIONS_{config}", value))
    return entries


def render_descriptor(plan: AutogenPlan) -> str:
    return format_descriptor(
        [
            ("Meta", descriptor_entries(plan)),
            ("Configuration specific options", configuration_entries(plan)),
        ]
    )


class Emitter:
    """Apply a plan to the build graph and persist it for the execution stage."""

    def __init__(self, graph: BuildGraph, target: Target, *, diagnostics: Diagnostics) -> None:
        self._graph = graph
        self._target = target
        self._diagnostics = diagnostics

    def register_include_directory(self, include_directory: str | None) -> None:
        if include_directory:
            self._target.add_include_directory(include_directory, before=True)

    def emit(self, plan: AutogenPlan) -> Path:
        self._register_clean_files(plan)
        for generated in plan.generated_files:
            self._register_generated_source(generated)
        self._register_utility_step(plan)

        info_path = Path(plan.info_file)
        write_descriptor(info_path, render_descriptor(plan))
        log.debug("wrote autogen descriptor %s", info_path)
        return info_path

    def _register_clean_files(self, plan: AutogenPlan) -> None:
        self._graph.add_clean_file(plan.build_dir)
        for path in old_settings_files(self._target, self._graph):
            self._graph.add_clean_file(path)

    def _register_generated_source(self, generated: GeneratedFile) -> None:
        source = self._graph.get_or_create_source(generated.path)
        source.generated = True
        source.skip_autogen = True
        source.autogen_output = True
        self._target.add_source(source)
        self._add_to_source_group(generated.path, generated.tool)

    def _add_to_source_group(self, path: str, tool: Tool) -> None:
        settings = self._graph.settings
        group_name = None
        if tool is Tool.MOC:
            group_name = settings.automoc_source_group
        elif tool is Tool.RCC:
            group_name = settings.autorcc_source_group
        if not group_name:
            group_name = settings.autogen_source_group
        if not group_name:
            return
        folders = [part for part in group_name.split(settings.source_group_delimiter) if part]
        if not folders:
            self._diagnostics.error(f"Autogen: Could not create or find source group: \"{group_name}\"")
            return
        self._graph.source_group(folders).files.add(path)

    def _resolve_folder(self) -> str | None:
        settings = self._graph.settings
        for candidate in (
            settings.automoc_targets_folder,
            settings.autogen_targets_folder,
            self._target.properties.folder,
        ):
            if candidate:
                return candidate
        return None

    def _register_utility_step(self, plan: AutogenPlan) -> None:
        command = [
            self._graph.settings.cmake_command,
            "-E",
            "cmake_autogen",
            plan.files_dir,
            "$<CONFIGURATION>",
        ]
        step = UtilityStep(
            name=plan.autogen_target_name,
            working_directory=plan.working_directory,
            byproducts=[generated.path for generated in plan.generated_files],
            depends=list(plan.dependencies),
            command_lines=[command],
            comment=compose_comment(plan.enabled_tools, plan.target_name),
            folder=self._resolve_folder(),
        )
        self._graph.add_utility_step(step)
        self._target.add_utility(plan.autogen_target_name)


__all__ = [
    "Emitter",
    "compose_comment",
    "configuration_entries",
    "descriptor_entries",
    "render_descriptor",
]
