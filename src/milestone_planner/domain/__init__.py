"""Domain models and error taxonomy shared by the analysis and scheduling engines."""

from milestone_planner.domain.errors import (
    CircularDependencyError,
    EmptyGraphError,
    PlannerError,
    UnresolvedReferenceError,
)
from milestone_planner.domain.models import (
    AnalysisType,
    DependencyAnalysis,
    DependencyType,
    PlacementStatus,
    Priority,
    SchedulingConstraints,
    TaskDependency,
    TaskNode,
    TaskPlacement,
    TimeSlot,
    WorkingHours,
)

__all__ = [
    "AnalysisType",
    "CircularDependencyError",
    "DependencyAnalysis",
    "DependencyType",
    "EmptyGraphError",
    "PlacementStatus",
    "PlannerError",
    "Priority",
    "SchedulingConstraints",
    "TaskDependency",
    "TaskNode",
    "TaskPlacement",
    "TimeSlot",
    "UnresolvedReferenceError",
    "WorkingHours",
]
