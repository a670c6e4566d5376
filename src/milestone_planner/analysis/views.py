"""Focused projections of a ``DependencyAnalysis`` for single-purpose consumers."""

from __future__ import annotations

from dataclasses import dataclass

from milestone_planner.domain.models import (
    CanonicalModel,
    DependencyAnalysis,
    OptimizationSuggestion,
    ParallelTrack,
    ResourceConflict,
    SuggestionType,
)


@dataclass(frozen=True, slots=True)
class CriticalPathView(CanonicalModel):
    milestone_id: str
    critical_path: tuple[str, ...]
    duration: float
    total_tasks: int
    critical_tasks: int


@dataclass(frozen=True, slots=True)
class ParallelTracksView(CanonicalModel):
    milestone_id: str
    parallel_tracks: tuple[ParallelTrack, ...]
    optimization_suggestions: tuple[OptimizationSuggestion, ...]
    potential_savings: float


@dataclass(frozen=True, slots=True)
class ResourceConflictsView(CanonicalModel):
    milestone_id: str
    resource_conflicts: tuple[ResourceConflict, ...]
    resolution_suggestions: tuple[OptimizationSuggestion, ...]
    # Highest conflict level: 3 HIGH, 2 MEDIUM, 1 LOW, 0 when there are none.
    severity: int


@dataclass(frozen=True, slots=True)
class OptimizationView(CanonicalModel):
    milestone_id: str
    suggestions: tuple[OptimizationSuggestion, ...]
    total_potential_savings: float
    high_priority_suggestions: tuple[OptimizationSuggestion, ...]


def critical_path_view(analysis: DependencyAnalysis) -> CriticalPathView:
    return CriticalPathView(
        milestone_id=analysis.milestone_id,
        critical_path=analysis.critical_path,
        duration=analysis.critical_path_duration,
        total_tasks=analysis.schedule_metrics.total_tasks,
        critical_tasks=analysis.schedule_metrics.critical_tasks,
    )


def parallel_tracks_view(analysis: DependencyAnalysis) -> ParallelTracksView:
    return ParallelTracksView(
        milestone_id=analysis.milestone_id,
        parallel_tracks=analysis.parallel_tracks,
        optimization_suggestions=_of_type(analysis, SuggestionType.PARALLELIZE),
        potential_savings=analysis.schedule_metrics.parallelizable_hours,
    )


def resource_conflicts_view(analysis: DependencyAnalysis) -> ResourceConflictsView:
    return ResourceConflictsView(
        milestone_id=analysis.milestone_id,
        resource_conflicts=analysis.resource_conflicts,
        resolution_suggestions=_of_type(analysis, SuggestionType.ADD_RESOURCES),
        severity=max(
            (conflict.severity.level for conflict in analysis.resource_conflicts), default=0
        ),
    )


def optimization_view(analysis: DependencyAnalysis) -> OptimizationView:
    suggestions = analysis.optimization_suggestions
    return OptimizationView(
        milestone_id=analysis.milestone_id,
        suggestions=suggestions,
        total_potential_savings=float(sum(item.estimated_savings for item in suggestions)),
        high_priority_suggestions=tuple(item for item in suggestions if item.priority == 1),
    )


def _of_type(
    analysis: DependencyAnalysis, suggestion_type: SuggestionType
) -> tuple[OptimizationSuggestion, ...]:
    return tuple(
        item for item in analysis.optimization_suggestions if item.type is suggestion_type
    )


__all__ = [
    "CriticalPathView",
    "OptimizationView",
    "ParallelTracksView",
    "ResourceConflictsView",
    "critical_path_view",
    "optimization_view",
    "parallel_tracks_view",
    "resource_conflicts_view",
]
