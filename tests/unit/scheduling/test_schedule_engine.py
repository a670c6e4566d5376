"""Schedule generation from working hours through placement and advice."""

from __future__ import annotations

from datetime import date
from typing import Any

from milestone_planner.config.settings import SchedulingSettings
from milestone_planner.domain.models import PlacementStatus, WorkingHours
from milestone_planner.observability.logging import get_correlation_context
from milestone_planner.scheduling import generate_schedule, suggest_schedule_optimizations

MONDAY = date(2025, 1, 6)


class _ContextLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any], dict[str, str]]] = []

    def _record(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields, get_correlation_context()))

    debug = info = warning = error = _record


def test_generated_slots_are_carved_and_spillover_reported() -> None:
    logger = _ContextLogger()

    result = generate_schedule(
        [{"id": "big", "title": "Big", "estimatedHours": 10}],
        WorkingHours.business_days(),
        start_date=MONDAY,
        end_date=MONDAY,
        goal_id="goal-7",
        logger=logger,
    )

    (placement,) = result.placements
    assert placement.status is PlacementStatus.PARTIALLY_PLACED
    assert [block.duration_hours for block in placement.placements] == [2.0, 2.0, 2.0, 1.25]
    assert placement.spillover_reason == "2.75 hours could not be scheduled"
    assert result.goal_id == "goal-7"
    assert result.summary.partially_placed_tasks == 1
    assert [item.suggestion for item in result.suggestions] == [
        "1 tasks are split across multiple time blocks. Consider consolidating for better focus."
    ]

    names = [event for event, _, _ in logger.events]
    assert names[0] == "schedule_generation_started"
    assert names[-1] == "schedule_generation_completed"
    context = logger.events[0][2]
    assert context["goal_id"] == "goal-7"
    assert context["correlation_id"].startswith("schedule-")


def test_explicit_slots_and_constraint_mapping_inherit_working_hours() -> None:
    result = generate_schedule(
        [{"id": "t", "title": "T", "estimated_hours": 4}],
        {"monday": {"enabled": True, "start": "08:00", "end": "12:00"}},
        {"maxBlockSizeHours": 4, "minBlockSizeHours": 0.5},
        slots=[
            {"id": "s1", "startTime": "2025-01-06T08:00:00Z", "endTime": "2025-01-06T12:00:00Z"}
        ],
        logger=_ContextLogger(),
    )

    (placement,) = result.placements
    assert placement.status is PlacementStatus.PLACED
    (block,) = placement.placements
    assert block.duration_hours == 4.0
    assert block.is_partial_task is False
    assert result.suggestions == ()


def test_unplaced_critical_task_raises_urgency() -> None:
    result = generate_schedule(
        [
            {"id": "c", "title": "Launch", "estimated_hours": 1, "priority": "CRITICAL"},
            {"id": "m", "title": "Notes", "estimated_hours": 1},
        ],
        WorkingHours.business_days(),
        slots=[],
        logger=_ContextLogger(),
    )

    assert result.summary.unplaced_tasks == 2
    (suggestion,) = result.suggestions
    assert suggestion.suggestion.startswith("2 tasks could not be scheduled.")
    assert suggestion.urgency_warning == (
        "Critical tasks are unscheduled - immediate action required"
    )
    assert [alt.option for alt in suggestion.alternatives] == [
        "Extend daily working hours by 1-2 hours",
        "Move non-critical tasks to next week",
    ]


def test_empty_task_list_yields_empty_schedule() -> None:
    result = generate_schedule(
        [], WorkingHours.business_days(), start_date=MONDAY, logger=_ContextLogger()
    )

    assert result.placements == ()
    assert result.summary.total_tasks == 0
    assert suggest_schedule_optimizations(result.placements, logger=_ContextLogger()) == ()


def test_partial_constraint_mapping_keeps_configured_values() -> None:
    saturday = date(2026, 10, 24)
    settings = SchedulingSettings(
        allow_weekends=True, carve_day_windows=False, buffer_between_tasks_minutes=0.0
    )

    result = generate_schedule(
        [{"id": "t", "title": "T", "estimated_hours": 1}],
        {"saturday": {"enabled": True, "start": "09:00", "end": "12:00"}},
        {"max_block_size_hours": 1.5},
        start_date=saturday,
        end_date=saturday,
        settings=settings,
        logger=_ContextLogger(),
    )

    (placement,) = result.placements
    assert placement.status is PlacementStatus.PLACED
    (block,) = placement.placements
    assert block.start_time.date() == saturday
    assert block.duration_hours == 1.0
