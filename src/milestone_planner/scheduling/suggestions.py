"""Deterministic advice derived from a finished placement run."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from milestone_planner.domain.models import (
    PlacementStatus,
    Priority,
    ScheduleAlternative,
    ScheduleSuggestion,
    TaskPlacement,
)

_UNPLACED_ALTERNATIVES = (
    ScheduleAlternative(
        option="Extend daily working hours by 1-2 hours",
        trade_offs="May impact work-life balance but ensures task completion",
    ),
    ScheduleAlternative(
        option="Move non-critical tasks to next week",
        trade_offs="Delays some deliverables but maintains realistic schedule",
    ),
)

_FRAGMENTED_ALTERNATIVES = (
    ScheduleAlternative(
        option="Reschedule to create longer continuous blocks",
        trade_offs="May require moving other commitments but improves focus",
    ),
    ScheduleAlternative(
        option="Accept fragmentation but add buffer time between blocks",
        trade_offs="Maintains current schedule but reduces total available time",
    ),
)


def suggest_schedule_optimizations(
    placements: Sequence[TaskPlacement],
    *,
    logger: Any | None = None,
) -> tuple[ScheduleSuggestion, ...]:
    log = logger if logger is not None else structlog.get_logger(__name__)
    suggestions: list[ScheduleSuggestion] = []

    unplaced = [item for item in placements if item.status is PlacementStatus.UNPLACED]
    if unplaced:
        critical_unplaced = any(
            item.original_task.priority is Priority.CRITICAL for item in unplaced
        )
        suggestions.append(
            ScheduleSuggestion(
                suggestion=(
                    f"{len(unplaced)} tasks could not be scheduled. Consider extending "
                    "working hours or moving lower-priority tasks."
                ),
                reasoning=(
                    "Insufficient available time slots for all tasks within current constraints."
                ),
                alternatives=_UNPLACED_ALTERNATIVES,
                urgency_warning=(
                    "Critical tasks are unscheduled - immediate action required"
                    if critical_unplaced
                    else None
                ),
            )
        )

    fragmented = [item for item in placements if len(item.placements) > 1]
    if fragmented:
        suggestions.append(
            ScheduleSuggestion(
                suggestion=(
                    f"{len(fragmented)} tasks are split across multiple time blocks. "
                    "Consider consolidating for better focus."
                ),
                reasoning="Task fragmentation can reduce efficiency due to context switching.",
                alternatives=_FRAGMENTED_ALTERNATIVES,
            )
        )

    log.debug(
        "schedule_suggestions_generated",
        suggestion_count=len(suggestions),
        unplaced=len(unplaced),
        fragmented=len(fragmented),
    )
    return tuple(suggestions)


__all__ = ["suggest_schedule_optimizations"]
