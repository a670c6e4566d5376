"""Skill contention between tasks whose earliest windows overlap."""

from __future__ import annotations

from milestone_planner.analysis.graph import DependencyGraph
from milestone_planner.domain.models import ConflictSeverity, ResourceConflict


def detect_resource_conflicts(
    graph: DependencyGraph,
    *,
    high_overlap_hours: float = 16.0,
    medium_overlap_hours: float = 8.0,
    split_hours: float = 4.0,
) -> tuple[ResourceConflict, ...]:
    """Report one conflict per skill whose holders overlap in time.

    Overlap is summed over every overlapping pair of ``[earliest_start,
    earliest_finish)`` windows across the whole graph, independent of any
    parallel tracks.
    """

    usage: dict[str, list[tuple[str, float, float]]] = {}
    for node in graph:
        for skill in node.skills:
            usage.setdefault(skill, []).append(
                (node.id, node.earliest_start, node.earliest_finish)
            )

    conflicts: list[ResourceConflict] = []
    for skill, windows in usage.items():
        conflicting: dict[str, None] = {}
        total_overlap = 0.0
        for index, (first_id, first_start, first_finish) in enumerate(windows):
            for second_id, second_start, second_finish in windows[index + 1 :]:
                overlap_start = max(first_start, second_start)
                overlap_end = min(first_finish, second_finish)
                if overlap_start < overlap_end:
                    conflicting[first_id] = None
                    conflicting[second_id] = None
                    total_overlap += overlap_end - overlap_start

        if not conflicting:
            continue

        if total_overlap > high_overlap_hours:
            severity = ConflictSeverity.HIGH
        elif total_overlap > medium_overlap_hours:
            severity = ConflictSeverity.MEDIUM
        else:
            severity = ConflictSeverity.LOW

        task_ids = tuple(conflicting)
        conflicts.append(
            ResourceConflict(
                skill=skill,
                conflicting_tasks=task_ids,
                time_overlap=total_overlap,
                severity=severity,
                suggestions=_conflict_suggestions(graph, skill, task_ids, split_hours),
            )
        )

    return tuple(conflicts)


def _conflict_suggestions(
    graph: DependencyGraph,
    skill: str,
    task_ids: tuple[str, ...],
    split_hours: float,
) -> tuple[str, ...]:
    suggestions = [
        f"Add additional {skill} resource to handle parallel work",
        f"Sequence tasks requiring {skill} to avoid overlap",
    ]
    for task_id in task_ids:
        node = graph.nodes[task_id]
        if node.estimated_hours > split_hours:
            suggestions.append(f'Consider splitting "{node.title}" into smaller tasks')
    return tuple(suggestions)


__all__ = ["detect_resource_conflicts"]
