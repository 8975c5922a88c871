"""Breakdown pipeline: analysis, tasks, dependencies, timeline."""

from .analyzer import IdeaAnalyzer
from .decomposer import TaskDecomposer, repair_dependencies
from .dependencies import DependencyGraphBuilder
from .engine import BreakdownEngine, BreakdownOptions
from .models import BreakdownSession
from .timeline import TimelineGenerator

__all__ = [
    "BreakdownEngine",
    "BreakdownOptions",
    "BreakdownSession",
    "DependencyGraphBuilder",
    "IdeaAnalyzer",
    "TaskDecomposer",
    "TimelineGenerator",
    "repair_dependencies",
]
