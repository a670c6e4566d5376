"""
Greedy first-fit placement of tasks into calendar slots.

Placement does not run CPM. Ordering uses a lightweight resolver: the
critical-path proxy is the few longest high-priority tasks, placed ahead of
everything else, with priority rank deciding order inside each group. Each
slot is consumed by at most one block per run and nothing is backtracked.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import structlog

from milestone_planner.config.settings import SchedulingSettings
from milestone_planner.constants import HOURS_EPSILON
from milestone_planner.domain.models import (
    BlockPlacement,
    DependencyType,
    PlacementStatus,
    SchedulingConstraints,
    TaskDependency,
    TaskNode,
    TaskPlacement,
    TaskSnapshot,
    TimeSlot,
)
from milestone_planner.scheduling.scoring import score_slots
from milestone_planner.scheduling.splitter import split_tasks

TaskInput = TaskNode | Mapping[str, object]
DependencyInput = TaskDependency | Mapping[str, object]


@dataclass(frozen=True, slots=True)
class ResolvedDependencies:
    """Placement-time view of the task set and its ordering hints."""

    nodes: tuple[TaskNode, ...]
    edges: tuple[TaskDependency, ...]
    critical_path: tuple[str, ...]
    total_duration_hours: float

    def predecessors_of(self, task_id: str) -> tuple[str, ...]:
        return tuple(edge.predecessor_id for edge in self.edges if edge.successor_id == task_id)


def coerce_tasks(tasks: Iterable[TaskInput]) -> tuple[TaskNode, ...]:
    """Parse task records and reject duplicate ids."""

    nodes: list[TaskNode] = []
    seen: set[str] = set()
    for raw in tasks:
        node = raw if isinstance(raw, TaskNode) else TaskNode.from_dict(raw)
        if node.id in seen:
            raise ValueError(f"duplicate task id: {node.id}")
        seen.add(node.id)
        nodes.append(node)
    return tuple(nodes)


def resolve_dependencies(
    tasks: Iterable[TaskInput],
    dependencies: Iterable[DependencyInput] | None = None,
    *,
    critical_path_candidates: int = 3,
    logger: Any | None = None,
) -> ResolvedDependencies:
    """Collect edges and pick the critical-path proxy used for ordering.

    Explicit edges are the ones embedded in task records plus ``dependencies``.
    When there are none, high-priority tasks are chained finish-to-start in
    input order. The proxy is the ``critical_path_candidates`` longest
    HIGH/CRITICAL tasks; ties keep input order.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)
    nodes = coerce_tasks(tasks)

    explicit: dict[tuple[str, str], TaskDependency] = {}
    for node in nodes:
        for edge in node.dependencies:
            explicit[edge.key] = edge
    for raw in dependencies or ():
        edge = raw if isinstance(raw, TaskDependency) else TaskDependency.from_dict(raw)
        explicit[edge.key] = edge

    high_priority = [node for node in nodes if node.priority.is_high]
    if explicit:
        edges = tuple(explicit.values())
    else:
        edges = tuple(
            TaskDependency(
                predecessor_id=current.id,
                successor_id=following.id,
                dependency_type=DependencyType.FINISH_TO_START,
            )
            for current, following in zip(high_priority, high_priority[1:])
        )

    longest = sorted(high_priority, key=lambda node: node.estimated_hours, reverse=True)
    critical_path = tuple(node.id for node in longest[: max(critical_path_candidates, 0)])
    total_duration_hours = float(sum(node.estimated_hours for node in nodes))

    log.debug(
        "dependencies_resolved",
        node_count=len(nodes),
        edge_count=len(edges),
        synthesized=not explicit,
        critical_path_length=len(critical_path),
        total_duration_hours=total_duration_hours,
    )
    return ResolvedDependencies(
        nodes=nodes,
        edges=edges,
        critical_path=critical_path,
        total_duration_hours=total_duration_hours,
    )


def order_tasks(
    nodes: Sequence[TaskNode], critical_path: Sequence[str]
) -> tuple[TaskNode, ...]:
    proxy = set(critical_path)
    first = [node for node in nodes if node.id in proxy]
    rest = [node for node in nodes if node.id not in proxy]
    first.sort(key=lambda node: node.priority.rank, reverse=True)
    rest.sort(key=lambda node: node.priority.rank, reverse=True)
    return (*first, *rest)


class PlacementEngine:
    """Places tasks into slots; holds only settings and a logger."""

    __slots__ = ("_settings", "_logger")

    def __init__(
        self,
        settings: SchedulingSettings | None = None,
        *,
        logger: Any | None = None,
    ) -> None:
        self._settings = settings if settings is not None else SchedulingSettings()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def settings(self) -> SchedulingSettings:
        return self._settings

    def place_tasks(
        self,
        tasks: Iterable[TaskInput],
        constraints: SchedulingConstraints,
        slots: Iterable[TimeSlot],
        dependencies: Iterable[DependencyInput] | None = None,
    ) -> tuple[TaskPlacement, ...]:
        available = [slot for slot in slots if slot.is_available]
        resolved = resolve_dependencies(
            tasks,
            dependencies,
            critical_path_candidates=self._settings.critical_path_candidates,
            logger=self._logger,
        )
        self._logger.info(
            "task_placement_started",
            task_count=len(resolved.nodes),
            slot_count=len(available),
            slot_order=self._settings.slot_order,
        )

        walk = self._slot_walk(resolved.nodes, available, constraints)
        used: set[str] = set()
        placements: list[TaskPlacement] = []
        for node in order_tasks(resolved.nodes, resolved.critical_path):
            placement = self._place_task(
                node, walk, constraints, used, resolved.predecessors_of(node.id)
            )
            placements.append(placement)

        self._logger.info(
            "task_placement_completed",
            total_placements=len(placements),
            placed=sum(1 for p in placements if p.status is PlacementStatus.PLACED),
            partially_placed=sum(
                1 for p in placements if p.status is PlacementStatus.PARTIALLY_PLACED
            ),
            unplaced=sum(1 for p in placements if p.status is PlacementStatus.UNPLACED),
        )
        return tuple(placements)

    def _slot_walk(
        self,
        nodes: Sequence[TaskNode],
        available: list[TimeSlot],
        constraints: SchedulingConstraints,
    ) -> list[TimeSlot]:
        if self._settings.slot_order == "score":
            scored = score_slots(
                nodes,
                available,
                constraints,
                dependency_weight=self._settings.dependency_score_weight,
            )
            return [item.slot for item in scored]
        return sorted(available, key=lambda slot: slot.start_time)

    def _place_task(
        self,
        node: TaskNode,
        walk: Sequence[TimeSlot],
        constraints: SchedulingConstraints,
        used: set[str],
        predecessors: tuple[str, ...],
    ) -> TaskPlacement:
        """Greedily fill unused slots with blocks of ``node``.

        A task counts as multi-part when the splitter cuts it or when short
        slots spread it over several blocks. ``total_parts`` is the larger of
        the planned part count and the blocks actually placed, so a task that
        needed more, shorter blocks than planned is numbered ``1..n`` of ``n``.
        """

        planned_parts = len(split_tasks([node], constraints.max_block_size_hours))

        remaining = node.estimated_hours
        pieces: list[tuple[TimeSlot, float]] = []
        for slot in walk:
            if remaining <= HOURS_EPSILON:
                break
            if slot.id in used:
                continue
            hours = min(remaining, slot.duration_hours, constraints.max_block_size_hours)
            if hours + HOURS_EPSILON < constraints.min_block_size_hours:
                continue
            pieces.append((slot, hours))
            used.add(slot.id)
            remaining -= hours

        total_parts = max(planned_parts, len(pieces))
        multi_part = total_parts > 1
        blocks = [
            BlockPlacement(
                slot_id=slot.id,
                start_time=slot.start_time,
                end_time=slot.start_time + timedelta(hours=hours),
                duration_hours=hours,
                is_partial_task=multi_part,
                part_index=index if multi_part else None,
                total_parts=total_parts if multi_part else None,
                parent_task_id=node.id if multi_part else None,
            )
            for index, (slot, hours) in enumerate(pieces, start=1)
        ]

        if remaining <= HOURS_EPSILON:
            status = PlacementStatus.PLACED
        elif blocks:
            status = PlacementStatus.PARTIALLY_PLACED
        else:
            status = PlacementStatus.UNPLACED

        spillover = None
        if status is not PlacementStatus.PLACED:
            spillover = f"{round(remaining, 6):g} hours could not be scheduled"
            self._logger.debug(
                "task_spillover",
                task_id=node.id,
                remaining_hours=remaining,
                status=status.value,
            )

        return TaskPlacement(
            task_id=node.id,
            original_task=TaskSnapshot(
                id=node.id,
                title=node.title,
                estimated_hours=node.estimated_hours,
                priority=node.priority,
                dependencies=predecessors,
            ),
            placements=tuple(blocks),
            status=status,
            spillover_reason=spillover,
        )


__all__ = [
    "PlacementEngine",
    "ResolvedDependencies",
    "coerce_tasks",
    "order_tasks",
    "resolve_dependencies",
]
