"""Ranked optimization suggestions and schedule metrics for an analyzed graph."""

from __future__ import annotations

from collections.abc import Sequence

from milestone_planner.analysis.graph import DependencyGraph
from milestone_planner.constants import DEFAULT_BUFFER_PERCENTAGE, MAX_BUFFER_PERCENTAGE
from milestone_planner.domain.models import (
    ConflictSeverity,
    ImplementationEffort,
    OptimizationSuggestion,
    ParallelTrack,
    ResourceConflict,
    ScheduleMetrics,
    SuggestionType,
)


def generate_optimization_suggestions(
    graph: DependencyGraph,
    critical_path: Sequence[str],
    parallel_tracks: Sequence[ParallelTrack],
    resource_conflicts: Sequence[ResourceConflict],
    *,
    split_threshold_hours: float = 6.0,
    resolution_efficiency: float = 0.5,
) -> tuple[OptimizationSuggestion, ...]:
    """Merge parallelize, split and add-resource suggestions, most urgent first.

    The sort is stable, so suggestions of equal priority keep source order:
    tracks, then tasks in graph order, then conflicts.
    """

    on_critical_path = set(critical_path)
    suggestions: list[OptimizationSuggestion] = []

    for track in parallel_tracks:
        if not track.can_run_in_parallel or len(track.tasks) < 2:
            continue
        suggestions.append(
            OptimizationSuggestion(
                type=SuggestionType.PARALLELIZE,
                description=f"Execute {len(track.tasks)} tasks in parallel to save time",
                affected_tasks=track.tasks,
                estimated_savings=track.duration * (len(track.tasks) - 1),
                implementation_effort=ImplementationEffort.MEDIUM,
                priority=1 if on_critical_path.intersection(track.tasks) else 2,
            )
        )

    for node in graph:
        if node.estimated_hours > split_threshold_hours:
            suggestions.append(
                OptimizationSuggestion(
                    type=SuggestionType.SPLIT_TASK,
                    description=f'Split "{node.title}" into smaller, more manageable tasks',
                    affected_tasks=(node.id,),
                    estimated_savings=0.0,
                    implementation_effort=ImplementationEffort.LOW,
                    priority=3,
                )
            )

    for conflict in resource_conflicts:
        if conflict.severity is not ConflictSeverity.HIGH:
            continue
        suggestions.append(
            OptimizationSuggestion(
                type=SuggestionType.ADD_RESOURCES,
                description=f"Add additional {conflict.skill} resources to resolve conflicts",
                affected_tasks=conflict.conflicting_tasks,
                estimated_savings=conflict.time_overlap * resolution_efficiency,
                implementation_effort=ImplementationEffort.HIGH,
                priority=1,
            )
        )

    return tuple(sorted(suggestions, key=lambda suggestion: suggestion.priority))


def calculate_schedule_metrics(
    graph: DependencyGraph,
    critical_path_duration: float,
    parallel_tracks: Sequence[ParallelTrack],
    *,
    buffer_percentage: float = DEFAULT_BUFFER_PERCENTAGE,
) -> ScheduleMetrics:
    if not 0.0 <= buffer_percentage <= MAX_BUFFER_PERCENTAGE:
        raise ValueError(f"buffer_percentage must be between 0 and {MAX_BUFFER_PERCENTAGE:g}")

    parallelizable_hours = sum(
        track.duration * (len(track.tasks) - 1)
        for track in parallel_tracks
        if track.can_run_in_parallel
    )
    return ScheduleMetrics(
        total_tasks=len(graph),
        critical_tasks=sum(1 for node in graph if node.is_critical),
        parallelizable_hours=float(parallelizable_hours),
        sequential_hours=critical_path_duration,
        buffer_hours=critical_path_duration * buffer_percentage / 100,
    )


__all__ = ["calculate_schedule_metrics", "generate_optimization_suggestions"]
