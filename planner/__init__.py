"""Planning stage for automatic moc, uic and rcc processing of build targets."""
from __future__ import annotations

from .classifier import Classification, SourceClassifier
from .config_diff import ConfigDiff, ConfigDiffer
from .dependencies import DependencySetBuilder, list_declared_inputs
from .descriptor import read_descriptor
from .diagnostics import Diagnostic, Diagnostics, Severity
from .emitter import Emitter
from .errors import DescriptorWriteError, PlannerError, ResourceListingError, ToolResolutionError
from .graph import BuildGraph, ImportedTarget, SourceFile, Target
from .initializer import AutogenPlanner, PlanResult
from .options import merge_options
from .plan import AutogenPlan
from .policy import GeneratedFilePolicy, PolicyDecision
from .project import graph_from_mapping, load_project
from .settings import ProjectSettings, TargetProperties
from .tools import Tool, ToolBinding, ToolResolver

__all__ = [
    "AutogenPlan",
    "AutogenPlanner",
    "BuildGraph",
    "Classification",
    "ConfigDiff",
    "ConfigDiffer",
    "DependencySetBuilder",
    "DescriptorWriteError",
    "Diagnostic",
    "Diagnostics",
    "Emitter",
    "GeneratedFilePolicy",
    "ImportedTarget",
    "PlanResult",
    "PlannerError",
    "PolicyDecision",
    "ProjectSettings",
    "ResourceListingError",
    "SourceClassifier",
    "SourceFile",
    "Severity",
    "Target",
    "TargetProperties",
    "Tool",
    "ToolBinding",
    "ToolResolutionError",
    "ToolResolver",
    "graph_from_mapping",
    "list_declared_inputs",
    "load_project",
    "merge_options",
    "read_descriptor",
]
