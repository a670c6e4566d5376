"""Greedy grouping of tasks whose CPM windows overlap into parallel tracks."""

from __future__ import annotations

from milestone_planner.analysis.graph import DependencyGraph
from milestone_planner.domain.models import ParallelTrack, TaskNode


def detect_parallel_tracks(graph: DependencyGraph) -> tuple[ParallelTrack, ...]:
    """Group unprocessed tasks that overlap the anchor task's window.

    Each candidate is compared with the anchor only, not with the other
    members, and any direct edge between the two (hard or soft) excludes it.
    A task joins at most one track.
    """

    processed: set[str] = set()
    tracks: list[ParallelTrack] = []
    nodes = list(graph)

    for anchor in nodes:
        if anchor.id in processed:
            continue

        members = [anchor]
        for other in nodes:
            if other.id == anchor.id or other.id in processed:
                continue
            if graph.directly_linked(anchor.id, other.id):
                continue
            if _windows_overlap(anchor, other):
                members.append(other)

        if len(members) < 2:
            continue

        processed.update(member.id for member in members)
        number = len(tracks) + 1
        tracks.append(
            ParallelTrack(
                id=f"track-{number}",
                name=f"Parallel Track {number}",
                tasks=tuple(member.id for member in members),
                duration=max(member.estimated_hours for member in members),
                skills=tuple(
                    dict.fromkeys(skill for member in members for skill in member.skills)
                ),
                can_run_in_parallel=_skills_exclusive(members),
            )
        )

    return tuple(tracks)


def _windows_overlap(first: TaskNode, second: TaskNode) -> bool:
    return not (
        first.earliest_finish <= second.earliest_start
        or second.earliest_finish <= first.earliest_start
    )


def _skills_exclusive(members: list[TaskNode]) -> bool:
    seen: set[str] = set()
    for member in members:
        for skill in member.skills:
            if skill in seen:
                return False
            seen.add(skill)
    return True


__all__ = ["detect_parallel_tracks"]
