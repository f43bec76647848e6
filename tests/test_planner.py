from __future__ import annotations

from pathlib import Path
import tempfile
import textwrap
import unittest

from planner.descriptor import read_descriptor
from planner.diagnostics import Severity
from planner.emitter import compose_comment
from planner.errors import PlannerError
from planner.graph import BuildGraph, ImportedTarget, SourceFile, Target
from planner.initializer import AutogenPlanner
from planner.policy import GeneratedFilePolicy
from planner.project import load_project
from planner.settings import ProjectSettings, TargetProperties
from planner.tools import Tool


class AutogenPlannerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name).resolve()
        self.source_dir = (self.root / "src").as_posix()
        self.binary_dir = (self.root / "build").as_posix()

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def src(self, name: str) -> str:
        return f"{self.source_dir}/{name}"

    def make_graph(self, *, tools=("moc", "uic", "rcc"), **settings) -> BuildGraph:
        settings.setdefault("qt_version_major", "5")
        graph = BuildGraph(ProjectSettings(source_dir=self.source_dir, binary_dir=self.binary_dir, **settings))
        for tool in tools:
            graph.add_imported_target(ImportedTarget(f"Qt5::{tool}", f"/opt/qt5/bin/{tool}"))
        return graph

    def add_target(self, graph: BuildGraph, name: str = "app", **kwargs) -> Target:
        target = Target(name, source_dir=self.source_dir, binary_dir=self.binary_dir, **kwargs)
        graph.add_target(target)
        return target


class MocPlanningTests(AutogenPlannerTestCase):
    def test_eligible_and_skipped_headers(self) -> None:
        graph = self.make_graph()
        self.add_target(
            graph,
            properties=TargetProperties(automoc=True),
            sources=[SourceFile(self.src("a.h")), SourceFile(self.src("b.h"), skip_automoc=True)],
        )

        result = AutogenPlanner(graph).run("app")

        values = read_descriptor(result.descriptor)
        self.assertEqual(values["AM_HEADERS"], self.src("a.h"))
        self.assertEqual(values["AM_MOC_SKIP"], self.src("b.h"))
        self.assertEqual(values["AM_QT_MOC_EXECUTABLE"], "/opt/qt5/bin/moc")
        self.assertEqual(values["AM_QT_VERSION_MAJOR"], "5")
        self.assertEqual(values["AM_BUILD_DIR"], f"{self.binary_dir}/app_autogen")
        self.assertEqual(values["AM_MOC_INCLUDES"], f"{self.binary_dir}/app_autogen/include")
        self.assertEqual(values["AM_QT_UIC_EXECUTABLE"], "")
        self.assertFalse(result.has_errors)
        self.assertEqual(
            result.descriptor,
            Path(f"{self.binary_dir}/CMakeFiles/app_autogen.dir/AutogenInfo.cmake"),
        )

    def test_plan_fields_match_descriptor(self) -> None:
        graph = self.make_graph()
        self.add_target(
            graph,
            properties=TargetProperties(automoc=True, automoc_moc_options=["-nw"], automoc_macro_names=["Q_OBJECT"]),
            sources=[SourceFile(self.src("main.cpp")), SourceFile(self.src("a.h"))],
            compile_definitions=["APP"],
        )

        result = AutogenPlanner(graph).run("app")

        plan = result.plan
        values = read_descriptor(result.descriptor)
        self.assertEqual(plan.enabled_tools, (Tool.MOC,))
        self.assertEqual(values["AM_SOURCES"], ";".join(plan.classification.sources))
        self.assertEqual(values["AM_MOC_DEFINITIONS"], plan.moc.definitions.baseline)
        self.assertEqual(values["AM_MOC_DEFINITIONS"], "APP")
        self.assertEqual(values["AM_MOC_OPTIONS"], "-nw")
        self.assertEqual(values["AM_MOC_MACRO_NAMES"], "Q_OBJECT")
        self.assertEqual(values["AM_MOC_RELAXED_MODE"], "FALSE")

    def test_replanning_is_idempotent(self) -> None:
        graph = self.make_graph(autogen_source_group="Generated")
        target = self.add_target(
            graph,
            properties=TargetProperties(automoc=True),
            sources=[SourceFile(self.src("a.h"))],
            link_libraries=["core"],
        )
        self.add_target(graph, "core")
        planner = AutogenPlanner(graph)

        first = planner.run("app")
        first_text = first.descriptor.read_bytes()
        first_step = graph.utility_steps["app_autogen"]
        first_sources = [source.path for source in target.sources]
        first_includes = list(target.include_directories)
        first_clean = list(graph.clean_files)

        second = planner.run("app")

        self.assertEqual(second.descriptor.read_bytes(), first_text)
        self.assertEqual(graph.utility_steps["app_autogen"], first_step)
        self.assertEqual([source.path for source in target.sources], first_sources)
        self.assertEqual(target.include_directories, first_includes)
        self.assertEqual(list(graph.clean_files), first_clean)
        self.assertEqual(list(target.utilities), ["app_autogen"])
        self.assertEqual(second.plan.dependencies, ("core",))

    def test_generated_output_is_visible_after_planning(self) -> None:
        graph = self.make_graph()
        target = self.add_target(graph, properties=TargetProperties(automoc=True), sources=[SourceFile(self.src("a.h"))])
        target.config_common_sources()

        AutogenPlanner(graph).run("app")

        self.assertFalse(target.sources_cached)
        output = f"{self.binary_dir}/app_autogen/mocs_compilation.cpp"
        registered = [source for source in target.config_common_sources() if source.path == output]
        self.assertEqual(len(registered), 1)
        self.assertTrue(registered[0].generated)
        self.assertTrue(registered[0].skip_autogen)

    def test_consumer_of_object_library_sees_its_generated_output(self) -> None:
        graph = self.make_graph()
        library = self.add_target(
            graph,
            "objs",
            properties=TargetProperties(automoc=True),
            sources=[SourceFile(self.src("lib.h"))],
        )
        consumer = self.add_target(
            graph,
            properties=TargetProperties(automoc=True),
            sources=[SourceFile(self.src("main.cpp"))],
            object_libraries=[library],
        )
        before = [source.path for source in consumer.config_common_sources()]
        self.assertEqual(before, [self.src("main.cpp"), self.src("lib.h")])

        planner = AutogenPlanner(graph)
        planner.run("objs")

        self.assertFalse(consumer.sources_cached)
        library_output = f"{self.binary_dir}/objs_autogen/mocs_compilation.cpp"
        self.assertIn(library_output, [source.path for source in consumer.config_common_sources()])

        plan = planner.run("app").plan
        self.assertEqual(plan.classification.sources, (self.src("main.cpp"),))
        self.assertEqual(plan.classification.headers, ())

    def test_plan_does_not_write_or_register_the_build_step(self) -> None:
        graph = self.make_graph(multi_config=True, configurations=["Debug"])
        target = self.add_target(graph, properties=TargetProperties(automoc=True), sources=[SourceFile(self.src("a.h"))])

        plan, _ = AutogenPlanner(graph).plan("app")

        self.assertEqual(graph.utility_steps, {})
        self.assertFalse(Path(plan.info_file).exists())
        self.assertEqual(target.include_directories[0], plan.include_directory)
        with self.assertRaises(TypeError):
            plan.config_suffixes["Release"] = "_Release"

    def test_build_step_registration(self) -> None:
        graph = self.make_graph(autogen_targets_folder="Autogen", automoc_source_group="Generated\\Moc")
        self.add_target(
            graph,
            properties=TargetProperties(automoc=True, autogen_target_depends=["extra.h"]),
            sources=[SourceFile(self.src("a.h"))],
        )

        AutogenPlanner(graph).run("app")

        step = graph.utility_steps["app_autogen"]
        output = f"{self.binary_dir}/app_autogen/mocs_compilation.cpp"
        self.assertEqual(step.working_directory, self.binary_dir)
        self.assertEqual(step.byproducts, [output])
        self.assertEqual(step.depends, [self.src("extra.h")])
        self.assertEqual(
            step.command_lines,
            [["cmake", "-E", "cmake_autogen", f"{self.binary_dir}/CMakeFiles/app_autogen.dir", "$<CONFIGURATION>"]],
        )
        self.assertEqual(step.comment, "Automatic MOC for target app")
        self.assertEqual(step.folder, "Autogen")
        self.assertIn("app_autogen", graph.get_target("app").utilities)
        self.assertEqual(list(graph.source_group(["Generated", "Moc"]).files), [output])
        self.assertEqual(
            list(graph.clean_files),
            [f"{self.binary_dir}/app_autogen", f"{self.binary_dir}/CMakeFiles/app_autogen.dir/AutogenOldSettings.cmake"],
        )

    def test_predefs_command_requires_recent_qt(self) -> None:
        for minor, expected in (("9", "c++;-dM;-E"), ("7", "")):
            with self.subTest(minor=minor):
                graph = self.make_graph(qt5core_version_minor=minor, cxx_compiler_predefines_command=["c++", "-dM", "-E"])
                self.add_target(graph, properties=TargetProperties(automoc=True))
                values = read_descriptor(AutogenPlanner(graph).run("app").descriptor)
                self.assertEqual(values["AM_MOC_PREDEFS_CMD"], expected)

    def test_missing_tool_is_reported_but_plan_is_emitted(self) -> None:
        graph = self.make_graph(tools=())
        self.add_target(graph, properties=TargetProperties(automoc=True), sources=[SourceFile(self.src("a.h"))])

        result = AutogenPlanner(graph).run("app")

        self.assertTrue(result.has_errors)
        self.assertEqual(result.diagnostics[0].severity, Severity.ERROR)
        self.assertEqual(result.diagnostics[0].message, "AUTOMOC: Qt5::moc target not found (app)")
        values = read_descriptor(result.descriptor)
        self.assertEqual(values["AM_QT_MOC_EXECUTABLE"], "")
        self.assertEqual(values["AM_HEADERS"], self.src("a.h"))

    def test_generated_header_under_warn_policy(self) -> None:
        graph = self.make_graph(generated_file_policy=GeneratedFilePolicy.WARN)
        self.add_target(
            graph,
            properties=TargetProperties(automoc=True),
            sources=[SourceFile(self.src("a.h")), SourceFile(self.src("gen.h"), generated=True)],
        )

        result = AutogenPlanner(graph).run("app")

        self.assertFalse(result.has_errors)
        self.assertEqual([item.severity for item in result.diagnostics], [Severity.WARNING])
        self.assertEqual(read_descriptor(result.descriptor)["AM_HEADERS"], self.src("a.h"))
        self.assertEqual(result.plan.dependencies, ())

    def test_generated_header_under_new_policy_is_a_dependency(self) -> None:
        graph = self.make_graph(generated_file_policy=GeneratedFilePolicy.NEW)
        self.add_target(
            graph,
            properties=TargetProperties(automoc=True),
            sources=[SourceFile(self.src("gen.h"), generated=True)],
        )

        plan, diagnostics = AutogenPlanner(graph).plan("app")

        self.assertEqual(plan.classification.headers, (self.src("gen.h"),))
        self.assertEqual(plan.dependencies, (self.src("gen.h"),))
        self.assertEqual(diagnostics, ())

    def test_target_without_generators_is_rejected(self) -> None:
        graph = self.make_graph()
        self.add_target(graph, sources=[SourceFile(self.src("a.h"))])
        planner = AutogenPlanner(graph)
        self.assertEqual(planner.candidates(), [])
        with self.assertRaisesRegex(PlannerError, "has no automatic generators enabled"):
            planner.run("app")


class MultiConfigurationTests(AutogenPlannerTestCase):
    def test_only_differing_configurations_are_written(self) -> None:
        graph = self.make_graph(multi_config=True, configurations=["Debug", "Release"])
        self.add_target(
            graph,
            properties=TargetProperties(automoc=True),
            sources=[SourceFile(self.src("a.h"))],
            compile_definitions=["A"],
            config_compile_definitions={"Debug": ["DEBUG"]},
        )

        result = AutogenPlanner(graph).run("app")

        values = read_descriptor(result.descriptor)
        self.assertEqual(values["AM_CONFIG_SUFFIX_Debug"], "_Debug")
        self.assertEqual(values["AM_CONFIG_SUFFIX_Release"], "_Release")
        self.assertEqual(values["AM_MOC_DEFINITIONS"], "A")
        self.assertEqual(values["AM_MOC_DEFINITIONS_Debug"], "A;DEBUG")
        self.assertNotIn("AM_MOC_DEFINITIONS_Release", values)
        self.assertNotIn("AM_MOC_INCLUDES_Debug", values)
        self.assertEqual(values["AM_MOC_INCLUDES"], f"{self.binary_dir}/app_autogen/include_$<CONFIG>")
        self.assertIn(
            f"{self.binary_dir}/CMakeFiles/app_autogen.dir/AutogenOldSettings_Release.cmake",
            graph.clean_files,
        )

    def test_single_configuration_has_no_configuration_section(self) -> None:
        graph = self.make_graph(build_type="Release", configurations=["Release"])
        self.add_target(graph, properties=TargetProperties(automoc=True), sources=[SourceFile(self.src("a.h"))])

        result = AutogenPlanner(graph).run("app")

        text = result.descriptor.read_text()
        self.assertNotIn("Configuration specific options", text)
        self.assertNotIn("AM_CONFIG_SUFFIX", text)


class UicAndRccPlanningTests(AutogenPlannerTestCase):
    def test_ui_option_files_and_search_paths(self) -> None:
        graph = self.make_graph()
        self.add_target(
            graph,
            properties=TargetProperties(autouic=True, autouic_options=["-tr", "i18n"], autouic_search_paths=["forms"]),
            sources=[SourceFile(self.src("main.cpp")), SourceFile(self.src("dialog.ui"), autouic_options=["-g", "cpp"])],
        )

        values = read_descriptor(AutogenPlanner(graph).run("app").descriptor)

        self.assertEqual(values["AM_QT_UIC_EXECUTABLE"], "/opt/qt5/bin/uic")
        self.assertEqual(values["AM_UIC_TARGET_OPTIONS"], "-tr;i18n")
        self.assertEqual(values["AM_UIC_SEARCH_PATHS"], self.src("forms"))
        self.assertEqual(values["AM_UIC_OPTIONS_FILES"], self.src("dialog.ui"))
        self.assertEqual(values["AM_UIC_OPTIONS_OPTIONS"], "-g@LSEP@cpp")
        self.assertEqual(values["AM_QT_MOC_EXECUTABLE"], "")

    def test_resource_files(self) -> None:
        graph = self.make_graph(autogen_source_group="Generated Files")
        self.add_target(
            graph,
            properties=TargetProperties(autorcc=True, autorcc_options=["--compress", "1"]),
            sources=[
                SourceFile(
                    self.src("res.qrc"),
                    autorcc_options=["--compress", "9", "--name", "res"],
                    resource_inputs=["icon.png"],
                ),
                SourceFile(self.src("plain.qrc"), resource_inputs=[]),
            ],
        )

        result = AutogenPlanner(graph).run("app")

        plan = result.plan
        values = read_descriptor(result.descriptor)
        entries = plan.rcc.entries
        self.assertEqual([entry.path for entry in entries], [self.src("res.qrc"), self.src("plain.qrc")])
        self.assertEqual(entries[0].options, ("--compress", "9", "--name", "res"))
        self.assertEqual(entries[1].options, ("--compress", "1"))
        self.assertTrue(entries[0].output.startswith(f"{self.binary_dir}/app_autogen/"))
        self.assertTrue(entries[0].output.endswith("/qrc_res.cpp"))
        self.assertEqual([item.path for item in plan.generated_files], [entry.output for entry in entries])

        self.assertEqual(values["AM_QT_RCC_EXECUTABLE"], "/opt/qt5/bin/rcc")
        self.assertEqual(values["AM_RCC_SOURCES"], f"{self.src('res.qrc')};{self.src('plain.qrc')}")
        self.assertEqual(values["AM_RCC_INPUTS"], "{" + self.src("icon.png") + "};{}")
        self.assertEqual(values["AM_RCC_OPTIONS_FILES"], f"{self.src('res.qrc')};{self.src('plain.qrc')}")
        self.assertEqual(
            values["AM_RCC_OPTIONS_OPTIONS"],
            "--compress@LSEP@9@LSEP@--name@LSEP@res;--compress@LSEP@1",
        )

        step = graph.utility_steps["app_autogen"]
        self.assertEqual(step.depends, [self.src("icon.png")])
        self.assertEqual(step.comment, "Automatic RCC for target app")
        self.assertEqual(list(graph.reconfigure_dependencies), [self.src("res.qrc"), self.src("plain.qrc")])
        self.assertEqual(list(graph.source_group(["Generated Files"]).files), [entry.output for entry in entries])


class ComposeCommentTests(unittest.TestCase):
    def test_tool_lists(self) -> None:
        self.assertEqual(compose_comment([Tool.MOC], "app"), "Automatic MOC for target app")
        self.assertEqual(compose_comment([Tool.MOC, Tool.UIC], "app"), "Automatic MOC and UIC for target app")
        self.assertEqual(
            compose_comment([Tool.MOC, Tool.UIC, Tool.RCC], "app"),
            "Automatic MOC, UIC and RCC for target app",
        )


class ProjectFileTests(unittest.TestCase):
    def test_plans_every_enabled_target_of_a_project_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir).resolve()
            path = root / "project.toml"
            path.write_text(
                textwrap.dedent(
                    """
                    [project]
                    source_dir = "src"
                    binary_dir = "build"
                    qt_version_major = "5"

                    [imported_targets]
                    "Qt5::moc" = "/opt/qt5/bin/moc"

                    [targets.app]
                    automoc = true
                    sources = ["widget.h", { path = "skip.h", skip_automoc = true }]

                    [targets.tool]
                    sources = ["tool.cpp"]
                    """
                )
            )

            graph = load_project(path)
            results = AutogenPlanner(graph).run_all()

            self.assertEqual([result.plan.target_name for result in results], ["app"])
            values = read_descriptor(results[0].descriptor)
            self.assertEqual(values["AM_HEADERS"], (root / "src" / "widget.h").as_posix())
            self.assertEqual(values["AM_MOC_SKIP"], (root / "src" / "skip.h").as_posix())
            self.assertTrue(results[0].descriptor.is_file())


if __name__ == "__main__":
    unittest.main()
