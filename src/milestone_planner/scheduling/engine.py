"""Schedule pipeline: slots -> ordered greedy placement -> summary and advice."""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

import structlog

from milestone_planner.config.settings import SchedulingSettings
from milestone_planner.domain.models import (
    ScheduleResult,
    ScheduleSummary,
    SchedulingConstraints,
    TimeSlot,
    WorkingHours,
)
from milestone_planner.observability.logging import correlation_scope
from milestone_planner.scheduling.placement import (
    DependencyInput,
    PlacementEngine,
    TaskInput,
    coerce_tasks,
)
from milestone_planner.scheduling.slots import generate_time_slots
from milestone_planner.scheduling.suggestions import suggest_schedule_optimizations


def generate_schedule(
    tasks: Iterable[TaskInput],
    working_hours: WorkingHours | Mapping[str, object],
    constraints: SchedulingConstraints | Mapping[str, object] | None = None,
    *,
    start_date: date | datetime | None = None,
    end_date: date | datetime | None = None,
    slots: Iterable[TimeSlot | Mapping[str, object]] | None = None,
    dependencies: Iterable[DependencyInput] | None = None,
    settings: SchedulingSettings | None = None,
    goal_id: str | None = None,
    logger: Any | None = None,
) -> ScheduleResult:
    """Place ``tasks`` on a calendar and summarize the outcome.

    ``slots`` replaces generated working-hours slots when given. Constraints
    default to the scheduling settings applied to ``working_hours``; a
    constraints mapping overrides only the keys it names.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)
    settings = settings if settings is not None else SchedulingSettings()
    hours = (
        working_hours
        if isinstance(working_hours, WorkingHours)
        else WorkingHours.from_dict(working_hours)
    )
    resolved_constraints = _resolve_constraints(constraints, hours, settings)
    nodes = coerce_tasks(tasks)

    correlation_id = f"schedule-{int(time.time() * 1000)}"
    with correlation_scope(correlation_id=correlation_id, goal_id=goal_id):
        if slots is None:
            calendar = generate_time_slots(
                resolved_constraints.working_hours,
                start_date,
                end_date,
                allow_weekends=resolved_constraints.allow_weekends,
                horizon_days=settings.horizon_days,
                carve=settings.carve_day_windows,
                max_block_size_hours=resolved_constraints.max_block_size_hours,
                min_block_size_hours=resolved_constraints.min_block_size_hours,
                buffer_minutes=resolved_constraints.buffer_between_tasks_minutes,
            )
        else:
            calendar = tuple(
                slot if isinstance(slot, TimeSlot) else TimeSlot.from_dict(slot) for slot in slots
            )

        log.info(
            "schedule_generation_started",
            goal_id=goal_id,
            task_count=len(nodes),
            slot_count=len(calendar),
            generated_slots=slots is None,
        )

        placements = PlacementEngine(settings, logger=log).place_tasks(
            nodes, resolved_constraints, calendar, dependencies
        )
        summary = ScheduleSummary.of(placements)
        suggestions = suggest_schedule_optimizations(placements, logger=log)

        log.info(
            "schedule_generation_completed",
            goal_id=goal_id,
            total_tasks=summary.total_tasks,
            placed_tasks=summary.placed_tasks,
            partially_placed_tasks=summary.partially_placed_tasks,
            unplaced_tasks=summary.unplaced_tasks,
        )
        return ScheduleResult(
            placements=placements,
            summary=summary,
            suggestions=suggestions,
            goal_id=goal_id,
        )


def _resolve_constraints(
    constraints: SchedulingConstraints | Mapping[str, object] | None,
    working_hours: WorkingHours,
    settings: SchedulingSettings,
) -> SchedulingConstraints:
    configured = settings.constraints(working_hours)
    if constraints is None:
        return configured
    if isinstance(constraints, SchedulingConstraints):
        return constraints
    return SchedulingConstraints.from_dict(constraints, base=configured)


__all__ = ["generate_schedule"]
