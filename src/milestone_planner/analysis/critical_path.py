"""Critical Path Method over a validated dependency graph.

The forward pass walks a Kahn ordering and the backward pass walks it in
reverse, so neither pass recurses. Both write timing fields onto the graph's
own nodes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from milestone_planner.analysis.graph import DependencyGraph
from milestone_planner.constants import HOURS_EPSILON
from milestone_planner.domain.models import DependencyType, TaskDependency, TaskNode


@dataclass(frozen=True, slots=True)
class CriticalPathResult:
    critical_path: tuple[str, ...]
    duration: float
    project_end: float

    @property
    def critical_tasks(self) -> frozenset[str]:
        return frozenset(self.critical_path)


def analyze_critical_path(
    graph: DependencyGraph,
    *,
    include_soft: bool = False,
) -> CriticalPathResult:
    """Run the forward and backward passes and extract the critical path.

    Soft edges take part only when ``include_soft`` is set. Cycle validation
    must already have run; a cycle among participating edges still surfaces as
    ``CircularDependencyError`` from the ordering step.
    """

    order = graph.topological_order(include_soft=include_soft)
    graph.reset_timing()

    for task_id in order:
        node = graph.nodes[task_id]
        start = 0.0
        for edge in _participating(node.dependencies, include_soft):
            predecessor = graph.nodes[edge.predecessor_id]
            start = max(start, _earliest_start_constraint(edge, predecessor, node))
        node.earliest_start = start
        node.earliest_finish = start + node.estimated_hours

    project_end = max(node.earliest_finish for node in graph)

    for task_id in reversed(order):
        node = graph.nodes[task_id]
        finish = project_end
        for edge in _participating(node.dependents, include_soft):
            successor = graph.nodes[edge.successor_id]
            finish = min(finish, _latest_finish_constraint(edge, node, successor))
        node.latest_finish = finish
        node.latest_start = finish - node.estimated_hours
        node.slack = max(0.0, node.latest_start - node.earliest_start)
        node.is_critical = node.slack <= HOURS_EPSILON

    path = _critical_sequence(graph, include_soft=include_soft)
    return CriticalPathResult(critical_path=path, duration=project_end, project_end=project_end)


def _participating(
    edges: Iterable[TaskDependency], include_soft: bool
) -> Iterable[TaskDependency]:
    return (edge for edge in edges if include_soft or edge.is_hard)


def _earliest_start_constraint(
    edge: TaskDependency, predecessor: TaskNode, successor: TaskNode
) -> float:
    if edge.dependency_type is DependencyType.FINISH_TO_START:
        return predecessor.earliest_finish + edge.lag
    if edge.dependency_type is DependencyType.START_TO_START:
        return predecessor.earliest_start + edge.lag
    if edge.dependency_type is DependencyType.FINISH_TO_FINISH:
        return predecessor.earliest_finish + edge.lag - successor.estimated_hours
    return predecessor.earliest_start + edge.lag - successor.estimated_hours


def _latest_finish_constraint(
    edge: TaskDependency, predecessor: TaskNode, successor: TaskNode
) -> float:
    """Mirror of ``_earliest_start_constraint`` expressed as the predecessor's latest finish."""

    if edge.dependency_type is DependencyType.FINISH_TO_START:
        return successor.latest_start - edge.lag
    if edge.dependency_type is DependencyType.START_TO_START:
        return successor.latest_start - edge.lag + predecessor.estimated_hours
    if edge.dependency_type is DependencyType.FINISH_TO_FINISH:
        return successor.latest_finish - edge.lag
    return successor.latest_finish - edge.lag + predecessor.estimated_hours


def _critical_sequence(graph: DependencyGraph, *, include_soft: bool) -> tuple[str, ...]:
    critical = {node.id for node in graph if node.is_critical}
    starts = [
        node.id
        for node in graph
        if node.is_critical
        and not any(
            edge.predecessor_id in critical
            for edge in _participating(node.dependencies, include_soft)
        )
    ]

    visited: set[str] = set()
    sequence: list[str] = []
    for start in starts:
        cursor: str | None = start
        while cursor is not None and cursor not in visited:
            visited.add(cursor)
            sequence.append(cursor)
            cursor = next(
                (
                    edge.successor_id
                    for edge in _participating(graph.nodes[cursor].dependents, include_soft)
                    if edge.successor_id in critical and edge.successor_id not in visited
                ),
                None,
            )
    return tuple(sequence)


__all__ = ["CriticalPathResult", "analyze_critical_path"]
