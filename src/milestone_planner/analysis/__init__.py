"""Dependency analysis public API."""

from milestone_planner.analysis.advisor import (
    calculate_schedule_metrics,
    generate_optimization_suggestions,
)
from milestone_planner.analysis.conflicts import detect_resource_conflicts
from milestone_planner.analysis.critical_path import CriticalPathResult, analyze_critical_path
from milestone_planner.analysis.cycles import find_cycle, validate_acyclic, validate_new_dependency
from milestone_planner.analysis.dependency_set import add_dependency, remove_dependency
from milestone_planner.analysis.engine import DependencyAnalyzer, analyze_dependencies
from milestone_planner.analysis.graph import DependencyGraph, build_dependency_graph
from milestone_planner.analysis.parallel import detect_parallel_tracks
from milestone_planner.analysis.views import (
    CriticalPathView,
    OptimizationView,
    ParallelTracksView,
    ResourceConflictsView,
    critical_path_view,
    optimization_view,
    parallel_tracks_view,
    resource_conflicts_view,
)

__all__ = [
    "CriticalPathResult",
    "CriticalPathView",
    "DependencyAnalyzer",
    "DependencyGraph",
    "OptimizationView",
    "ParallelTracksView",
    "ResourceConflictsView",
    "add_dependency",
    "analyze_critical_path",
    "analyze_dependencies",
    "build_dependency_graph",
    "calculate_schedule_metrics",
    "critical_path_view",
    "detect_parallel_tracks",
    "detect_resource_conflicts",
    "find_cycle",
    "generate_optimization_suggestions",
    "optimization_view",
    "parallel_tracks_view",
    "remove_dependency",
    "resource_conflicts_view",
    "validate_acyclic",
    "validate_new_dependency",
]
