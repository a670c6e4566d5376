"""Optimization suggestions and schedule metrics."""

from __future__ import annotations

import pytest

from milestone_planner.analysis.advisor import (
    calculate_schedule_metrics,
    generate_optimization_suggestions,
)
from milestone_planner.analysis.conflicts import detect_resource_conflicts
from milestone_planner.analysis.critical_path import analyze_critical_path
from milestone_planner.analysis.graph import build_dependency_graph
from milestone_planner.analysis.parallel import detect_parallel_tracks
from milestone_planner.domain.models import (
    ImplementationEffort,
    ParallelTrack,
    SuggestionType,
    TaskNode,
)


def test_high_conflict_yields_add_resources_before_split_suggestions() -> None:
    graph = build_dependency_graph(
        [
            TaskNode(id="a", title="Backend", estimated_hours=20, skills=("dev",)),
            TaskNode(id="b", title="Frontend", estimated_hours=20, skills=("dev",)),
        ]
    )
    critical = analyze_critical_path(graph)
    tracks = detect_parallel_tracks(graph)
    conflicts = detect_resource_conflicts(graph)

    suggestions = generate_optimization_suggestions(
        graph, critical.critical_path, tracks, conflicts
    )

    assert [item.type for item in suggestions] == [
        SuggestionType.ADD_RESOURCES,
        SuggestionType.SPLIT_TASK,
        SuggestionType.SPLIT_TASK,
    ]
    add = suggestions[0]
    assert add.description == "Add additional dev resources to resolve conflicts"
    assert add.estimated_savings == 10.0
    assert add.implementation_effort is ImplementationEffort.HIGH
    assert suggestions[1].description == 'Split "Backend" into smaller, more manageable tasks'
    assert suggestions[1].priority == 3


def test_parallel_track_suggestion_priority_follows_critical_path() -> None:
    graph = build_dependency_graph(
        [
            TaskNode(id="a", title="A", estimated_hours=2),
            TaskNode(id="b", title="B", estimated_hours=2),
        ]
    )
    track = ParallelTrack(
        id="track-1",
        name="Parallel Track 1",
        tasks=("a", "b"),
        duration=2.0,
        skills=(),
        can_run_in_parallel=True,
    )

    on_path = generate_optimization_suggestions(graph, ("a",), [track], [])
    off_path = generate_optimization_suggestions(graph, ("z",), [track], [])

    assert on_path[0].type is SuggestionType.PARALLELIZE
    assert on_path[0].description == "Execute 2 tasks in parallel to save time"
    assert on_path[0].estimated_savings == 2.0
    assert on_path[0].priority == 1
    assert off_path[0].priority == 2


def test_schedule_metrics_and_buffer_bounds() -> None:
    graph = build_dependency_graph(
        [
            TaskNode(id="a", title="A", estimated_hours=3),
            TaskNode(id="b", title="B", estimated_hours=1),
        ]
    )
    critical = analyze_critical_path(graph)
    tracks = detect_parallel_tracks(graph)

    metrics = calculate_schedule_metrics(graph, critical.duration, tracks, buffer_percentage=10)

    assert metrics.total_tasks == 2
    assert metrics.critical_tasks == 1
    assert metrics.parallelizable_hours == 3.0
    assert metrics.sequential_hours == 3.0
    assert metrics.buffer_hours == pytest.approx(0.3)

    with pytest.raises(ValueError, match="between 0 and 50"):
        calculate_schedule_metrics(graph, critical.duration, tracks, buffer_percentage=51)
