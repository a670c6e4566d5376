"""Edge-set edits that callers persist: add with cycle check, and remove."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from milestone_planner.analysis.cycles import validate_new_dependency
from milestone_planner.domain.models import TaskDependency


def add_dependency(
    existing: Iterable[TaskDependency],
    proposed: TaskDependency | Mapping[str, object],
    *,
    task_ids: Iterable[str] | None = None,
    logger: Any | None = None,
) -> tuple[TaskDependency, ...]:
    """Return the edge set with ``proposed`` added, or replaced if its pair exists.

    A replacement keeps the original position. When the edge would close a
    cycle ``CircularDependencyError`` propagates and nothing is returned; the
    input collection is never modified. ``task_ids`` additionally requires
    both endpoints to be known tasks.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)
    edge = proposed if isinstance(proposed, TaskDependency) else TaskDependency.from_dict(proposed)
    current = tuple(existing)

    validate_new_dependency(current, edge, task_ids=task_ids)

    replaced = any(item.key == edge.key for item in current)
    if replaced:
        updated = tuple(edge if item.key == edge.key else item for item in current)
    else:
        updated = (*current, edge)

    log.info(
        "dependency_added",
        predecessor_id=edge.predecessor_id,
        successor_id=edge.successor_id,
        dependency_type=edge.dependency_type.value,
        replaced=replaced,
    )
    return updated


def remove_dependency(
    existing: Iterable[TaskDependency],
    predecessor_id: str,
    successor_id: str,
    *,
    logger: Any | None = None,
) -> tuple[TaskDependency, ...]:
    """Return the edge set without the ``predecessor_id -> successor_id`` pair.

    Removing a pair that is not present is not an error.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)
    current = tuple(existing)
    remaining = tuple(
        item for item in current if item.key != (predecessor_id, successor_id)
    )
    log.info(
        "dependency_removed",
        predecessor_id=predecessor_id,
        successor_id=successor_id,
        removed=len(current) - len(remaining),
    )
    return remaining


__all__ = ["add_dependency", "remove_dependency"]
