"""Split oversized tasks into equal blocks no longer than the maximum block size."""

from __future__ import annotations

import math
from collections.abc import Iterable

from milestone_planner.domain.models import TaskNode


def split_tasks(
    tasks: Iterable[TaskNode], max_block_size_hours: float = 2.0
) -> tuple[TaskNode, ...]:
    """Return tasks with every estimate over ``max_block_size_hours`` split.

    A task of ``h`` hours becomes ``ceil(h / max)`` blocks of ``h / n`` hours,
    ids ``<id>_part_<i>`` and titles ``"<title> (Part i/N)"``, each pointing
    back at the original through ``parent_task_id``. Tasks that already fit
    are returned as-is.
    """

    if max_block_size_hours <= 0:
        raise ValueError("max_block_size_hours must be > 0")

    result: list[TaskNode] = []
    for task in tasks:
        if task.estimated_hours <= max_block_size_hours:
            result.append(task)
            continue

        count = math.ceil(task.estimated_hours / max_block_size_hours)
        hours = task.estimated_hours / count
        for index in range(1, count + 1):
            result.append(
                task.copy(
                    id=f"{task.id}_part_{index}",
                    title=f"{task.title} (Part {index}/{count})",
                    estimated_hours=hours,
                    parent_task_id=task.id,
                )
            )
    return tuple(result)


__all__ = ["split_tasks"]
