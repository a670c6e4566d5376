"""Cycle detection over dependency edges using explicit stacks."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from milestone_planner.domain.errors import CircularDependencyError, UnresolvedReferenceError
from milestone_planner.domain.models import TaskDependency

if TYPE_CHECKING:
    from milestone_planner.analysis.graph import DependencyGraph

EdgeLike = TaskDependency | tuple[str, str]


def find_cycle(
    task_ids: Iterable[str],
    edges: Iterable[EdgeLike],
) -> tuple[str, ...] | None:
    """
    Return the first directed cycle found, as a closed path, or ``None``.

    Nodes are visited in ``task_ids`` order and children in edge order, so the
    reported cycle is deterministic for a given input. A cycle looks like
    ``("A", "B", "C", "A")``; its last two entries are the edge that closed it.
    """

    children = _adjacency(task_ids, edges)
    state: dict[str, int] = {}
    stack: list[str] = []
    stack_index: dict[str, int] = {}

    for start in children:
        if state.get(start, 0) != 0:
            continue

        state[start] = 1
        stack.append(start)
        stack_index[start] = 0
        frames: list[tuple[str, Iterator[str]]] = [(start, iter(children[start]))]

        while frames:
            node, child_iter = frames[-1]

            try:
                child = next(child_iter)
            except StopIteration:
                frames.pop()
                state[node] = 2
                stack.pop()
                del stack_index[node]
                continue

            child_state = state.get(child, 0)
            if child_state == 0:
                state[child] = 1
                stack_index[child] = len(stack)
                stack.append(child)
                frames.append((child, iter(children[child])))
                continue

            if child_state == 1:
                return (*stack[stack_index[child] :], child)

    return None


def validate_acyclic(graph: DependencyGraph) -> None:
    """Raise ``CircularDependencyError`` if any edge, hard or soft, closes a cycle."""

    cycle = find_cycle(graph.nodes, graph.edges)
    if cycle is not None:
        raise CircularDependencyError(cycle)


def validate_new_dependency(
    existing: Iterable[TaskDependency],
    proposed: TaskDependency,
    *,
    task_ids: Iterable[str] | None = None,
) -> None:
    """
    Reject ``proposed`` if adding it to ``existing`` would close a cycle.

    Only the proposed edge is judged: the new edge closes a cycle exactly when
    its successor already reaches its predecessor. ``existing`` is read, never
    modified.
    """

    predecessor_id, successor_id = proposed.key
    if task_ids is not None:
        known = set(task_ids)
        if predecessor_id not in known or successor_id not in known:
            raise UnresolvedReferenceError((proposed.key,))
    if predecessor_id == successor_id:
        raise CircularDependencyError((predecessor_id, successor_id), edge=proposed.key)

    others = [edge for edge in existing if edge.key != proposed.key]
    path = _find_path(others, start=successor_id, target=predecessor_id)
    if path is not None:
        raise CircularDependencyError((predecessor_id, *path), edge=proposed.key)


def _find_path(
    edges: Iterable[TaskDependency],
    *,
    start: str,
    target: str,
) -> tuple[str, ...] | None:
    children: dict[str, list[str]] = {}
    for edge in edges:
        children.setdefault(edge.predecessor_id, []).append(edge.successor_id)

    parent: dict[str, str | None] = {start: None}
    pending = [start]
    while pending:
        node = pending.pop()
        if node == target:
            path: list[str] = []
            cursor: str | None = node
            while cursor is not None:
                path.append(cursor)
                cursor = parent[cursor]
            path.reverse()
            return tuple(path)
        for child in reversed(children.get(node, ())):
            if child not in parent:
                parent[child] = node
                pending.append(child)
    return None


def _adjacency(task_ids: Iterable[str], edges: Iterable[EdgeLike]) -> dict[str, list[str]]:
    children: dict[str, list[str]] = {task_id: [] for task_id in task_ids}
    for edge in edges:
        predecessor_id, successor_id = edge.key if isinstance(edge, TaskDependency) else edge
        children.setdefault(predecessor_id, []).append(successor_id)
        children.setdefault(successor_id, [])
    return children


__all__ = ["EdgeLike", "find_cycle", "validate_acyclic", "validate_new_dependency"]
