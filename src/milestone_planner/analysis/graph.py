"""Request-scoped dependency graph and its builder."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from heapq import heapify, heappop, heappush
from typing import Any, Literal

import structlog

from milestone_planner.analysis.cycles import find_cycle
from milestone_planner.domain.errors import (
    CircularDependencyError,
    EmptyGraphError,
    UnresolvedReferenceError,
)
from milestone_planner.domain.models import TaskDependency, TaskNode

ReferencePolicy = Literal["reject", "drop"]


@dataclass(slots=True)
class DependencyGraph:
    """Insertion-ordered task nodes plus the accepted edge list.

    Nodes are owned by the graph: the builder copies caller records, and the
    CPM passes write timing fields onto these copies only.
    """

    nodes: dict[str, TaskNode]
    edges: list[TaskDependency] = field(default_factory=list)
    milestone_id: str | None = None

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.nodes

    def __iter__(self) -> Iterator[TaskNode]:
        return iter(self.nodes.values())

    def node(self, task_id: str) -> TaskNode:
        try:
            return self.nodes[task_id]
        except KeyError:
            raise KeyError(f"unknown task id: {task_id}") from None

    def directly_linked(self, first: str, second: str) -> bool:
        """True when either task lists the other as a predecessor, hard or soft."""

        first_node = self.node(first)
        second_node = self.node(second)
        return second in first_node.predecessor_ids or first in second_node.predecessor_ids

    def topological_order(self, *, include_soft: bool = True) -> tuple[str, ...]:
        """Kahn ordering with insertion order as the tie-breaker.

        Raises ``CircularDependencyError`` when the participating edges do not
        form a DAG.
        """

        edges = [edge for edge in self.edges if include_soft or edge.is_hard]
        position = {task_id: index for index, task_id in enumerate(self.nodes)}
        indegree = dict.fromkeys(self.nodes, 0)
        children: dict[str, list[str]] = {task_id: [] for task_id in self.nodes}
        for edge in edges:
            indegree[edge.successor_id] += 1
            children[edge.predecessor_id].append(edge.successor_id)

        ready = [position[task_id] for task_id, degree in indegree.items() if degree == 0]
        heapify(ready)
        ordered_ids = list(self.nodes)

        order: list[str] = []
        while ready:
            task_id = ordered_ids[heappop(ready)]
            order.append(task_id)
            for child in children[task_id]:
                indegree[child] -= 1
                if indegree[child] == 0:
                    heappush(ready, position[child])

        if len(order) != len(self.nodes):
            cycle = find_cycle(self.nodes, edges)
            if cycle is None:
                raise RuntimeError("topological sort stalled without a detectable cycle")
            raise CircularDependencyError(cycle)
        return tuple(order)

    def reset_timing(self) -> None:
        for node in self.nodes.values():
            node.earliest_start = 0.0
            node.earliest_finish = 0.0
            node.latest_start = 0.0
            node.latest_finish = 0.0
            node.slack = 0.0
            node.is_critical = False


def build_dependency_graph(
    tasks: Iterable[TaskNode | Mapping[str, object]],
    dependencies: Iterable[TaskDependency | Mapping[str, object]] = (),
    *,
    milestone_id: str | None = None,
    reference_policy: ReferencePolicy = "reject",
    logger: Any | None = None,
) -> DependencyGraph:
    """Build a graph from task records and dependency edges.

    Dependencies embedded on the task records are merged with ``dependencies``;
    a repeated ``(predecessor, successor)`` pair keeps its first position and
    its last definition.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)

    nodes: dict[str, TaskNode] = {}
    for raw in tasks:
        node = raw.copy() if isinstance(raw, TaskNode) else TaskNode.from_dict(raw)
        if node.id in nodes:
            raise ValueError(f"duplicate task id: {node.id}")
        nodes[node.id] = node
    if not nodes:
        raise EmptyGraphError(milestone_id)

    merged: dict[tuple[str, str], TaskDependency] = {}
    for node in nodes.values():
        for edge in node.dependencies:
            merged[edge.key] = edge
    for raw_edge in dependencies:
        edge = (
            raw_edge
            if isinstance(raw_edge, TaskDependency)
            else TaskDependency.from_dict(raw_edge)
        )
        merged[edge.key] = edge

    accepted: list[TaskDependency] = []
    unresolved: list[tuple[str, str]] = []
    for edge in merged.values():
        if edge.predecessor_id not in nodes or edge.successor_id not in nodes:
            unresolved.append(edge.key)
            continue
        if edge.predecessor_id == edge.successor_id:
            raise CircularDependencyError(
                (edge.predecessor_id, edge.successor_id), edge=edge.key
            )
        accepted.append(edge)

    if unresolved:
        if reference_policy == "reject":
            raise UnresolvedReferenceError(unresolved)
        for predecessor_id, successor_id in unresolved:
            log.warning(
                "dependency_reference_unresolved",
                predecessor_id=predecessor_id,
                successor_id=successor_id,
                milestone_id=milestone_id,
            )

    for node in nodes.values():
        node.dependencies = []
        node.dependents = []
    for edge in accepted:
        nodes[edge.successor_id].dependencies.append(edge)
        nodes[edge.predecessor_id].dependents.append(edge)

    log.debug(
        "dependency_graph_built",
        milestone_id=milestone_id,
        task_count=len(nodes),
        edge_count=len(accepted),
        dropped_edges=len(unresolved),
    )
    return DependencyGraph(nodes=nodes, edges=accepted, milestone_id=milestone_id)


__all__ = ["DependencyGraph", "ReferencePolicy", "build_dependency_graph"]
