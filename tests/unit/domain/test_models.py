"""Unit tests for domain models: validation, camelCase parsing and serialization."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from milestone_planner.domain.models import (
    ConflictSeverity,
    DayWindow,
    DependencyType,
    ImplementationEffort,
    OptimizationSuggestion,
    PlacementStatus,
    Priority,
    SchedulingConstraints,
    ScheduleSummary,
    SuggestionType,
    TaskDependency,
    TaskNode,
    TaskPlacement,
    TaskSnapshot,
    TimeSlot,
    WorkingHours,
    snake_case,
)


def test_priority_rank_and_high_flag() -> None:
    ranks = [priority.rank for priority in (Priority.LOW, Priority.MEDIUM, Priority.HIGH)]
    assert ranks == [1, 2, 3]
    assert Priority.CRITICAL.rank == 4
    assert Priority.HIGH.is_high and Priority.CRITICAL.is_high
    assert not Priority.MEDIUM.is_high
    assert [severity.level for severity in ConflictSeverity] == [1, 2, 3]


def test_snake_case_converts_camel_case_keys() -> None:
    assert snake_case("estimatedHours") == "estimated_hours"
    assert snake_case("predecessorId") == "predecessor_id"
    assert snake_case("already_snake") == "already_snake"


def test_task_node_from_dict_accepts_camel_case_and_dependency_forms() -> None:
    node = TaskNode.from_dict(
        {
            "id": "build",
            "title": "Build",
            "estimatedHours": 3,
            "priority": "high",
            "skills": ["python", "sql"],
            "status": "PENDING",
            "dependencies": [
                "design",
                {"predecessorId": "review", "dependencyType": "START_TO_START", "lag": 1.5},
            ],
        }
    )

    assert node.estimated_hours == 3.0
    assert node.priority is Priority.HIGH
    assert node.skills == ("python", "sql")
    assert node.predecessor_ids == ("design", "review")
    assert node.dependencies[0].successor_id == "build"
    assert node.dependencies[1].dependency_type is DependencyType.START_TO_START
    assert node.dependencies[1].lag == 1.5


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"id": "a", "title": "A", "estimated_hours": 0}, "TaskNode.estimated_hours"),
        ({"id": "", "title": "A", "estimated_hours": 1}, "TaskNode.id"),
        ({"id": "a", "title": "A", "estimated_hours": 1, "priority": "URGENT"}, "priority"),
        (
            {"id": "a", "title": "A", "estimated_hours": 1, "skills": ["x", "x"]},
            "duplicate",
        ),
        ({"id": "a", "title": "A"}, "estimated_hours"),
    ],
)
def test_task_node_validation_errors_name_the_field(
    payload: dict[str, object], message: str
) -> None:
    with pytest.raises(ValueError, match=message):
        TaskNode.from_dict(payload)


def test_task_node_copy_detaches_links_and_timing() -> None:
    edge = TaskDependency(predecessor_id="a", successor_id="b")
    node = TaskNode(id="b", title="B", estimated_hours=2, dependencies=[edge])
    node.dependents.append(TaskDependency(predecessor_id="b", successor_id="c"))
    node.earliest_start = 5.0
    node.is_critical = True

    clone = node.copy(id="b_part_1", estimated_hours=1.0, parent_task_id="b")

    assert clone.id == "b_part_1"
    assert clone.estimated_hours == 1.0
    assert clone.parent_task_id == "b"
    assert clone.dependencies == [edge]
    assert clone.dependencies is not node.dependencies
    assert clone.dependents == []
    assert clone.earliest_start == 0.0
    assert clone.is_critical is False


def test_task_dependency_defaults_and_key() -> None:
    edge = TaskDependency.from_dict({"predecessor_id": "a", "successor_id": "b"})

    assert edge.dependency_type is DependencyType.FINISH_TO_START
    assert edge.lag == 0.0
    assert edge.is_hard is True
    assert edge.key == ("a", "b")


def test_time_slot_requires_aware_ordered_datetimes() -> None:
    slot = TimeSlot.from_dict(
        {
            "id": "slot-1",
            "startTime": "2025-01-06T09:00:00Z",
            "endTime": "2025-01-06T11:30:00Z",
        }
    )
    assert slot.duration_hours == 2.5
    assert slot.start_time.tzinfo is not None

    with pytest.raises(ValueError, match="timezone-aware"):
        TimeSlot(
            id="naive",
            start_time=datetime(2025, 1, 6, 9),
            end_time=datetime(2025, 1, 6, 10),
        )
    with pytest.raises(ValueError, match="must be after start_time"):
        TimeSlot(
            id="backwards",
            start_time=datetime(2025, 1, 6, 10, tzinfo=UTC),
            end_time=datetime(2025, 1, 6, 9, tzinfo=UTC),
        )


def test_day_window_and_working_hours_parsing() -> None:
    hours = WorkingHours.from_dict(
        {
            "monday": {"enabled": True, "start": "08:30", "end": "12:00"},
            "timezone": "Europe/Berlin",
        }
    )
    assert hours.for_weekday(0) == DayWindow(enabled=True, start="08:30", end="12:00")
    assert hours.for_weekday(1).enabled is False
    assert hours.timezone == "Europe/Berlin"

    with pytest.raises(ValueError, match="DayWindow.end"):
        DayWindow(enabled=True, start="17:00", end="09:00")
    with pytest.raises(ValueError, match="HH:MM"):
        DayWindow(enabled=True, start="9am", end="17:00")

    business = WorkingHours.business_days()
    assert [business.for_weekday(day).enabled for day in range(7)] == [
        True,
        True,
        True,
        True,
        True,
        False,
        False,
    ]


def test_scheduling_constraints_reject_min_above_max() -> None:
    with pytest.raises(ValueError, match="min_block_size_hours"):
        SchedulingConstraints(max_block_size_hours=1.0, min_block_size_hours=1.5)

    parsed = SchedulingConstraints.from_dict(
        {"maxBlockSizeHours": 3, "bufferBetweenTasksMinutes": 0, "allowWeekends": True}
    )
    assert parsed.max_block_size_hours == 3.0
    assert parsed.min_block_size_hours == 0.25
    assert parsed.buffer_between_tasks_minutes == 0.0
    assert parsed.allow_weekends is True


def test_optimization_suggestion_priority_must_be_positive() -> None:
    with pytest.raises(ValueError, match="priority"):
        OptimizationSuggestion(
            type=SuggestionType.SPLIT_TASK,
            description="x",
            affected_tasks=("a",),
            estimated_savings=0.0,
            implementation_effort=ImplementationEffort.LOW,
            priority=0,
        )


def test_to_dict_serializes_enums_datetimes_and_nested_models() -> None:
    snapshot = TaskSnapshot(id="a", title="A", estimated_hours=1.0, priority=Priority.HIGH)
    placement = TaskPlacement(
        task_id="a",
        original_task=snapshot,
        placements=(),
        status=PlacementStatus.UNPLACED,
        spillover_reason="1 hours could not be scheduled",
    )
    summary = ScheduleSummary.of([placement])

    payload = placement.to_dict()
    assert payload["status"] == "UNPLACED"
    assert payload["original_task"] == {
        "id": "a",
        "title": "A",
        "estimated_hours": 1.0,
        "priority": "HIGH",
        "dependencies": [],
    }
    assert summary.unplaced_tasks == 1 and summary.total_tasks == 1
    assert json.loads(placement.to_json()) == payload

    slot = TimeSlot(
        id="s",
        start_time=datetime(2025, 1, 6, 9, tzinfo=UTC),
        end_time=datetime(2025, 1, 6, 10, tzinfo=UTC),
    )
    assert slot.to_dict()["start_time"] == "2025-01-06T09:00:00+00:00"


def test_scheduling_constraints_from_dict_falls_back_to_base() -> None:
    base = SchedulingConstraints(
        working_hours=WorkingHours.business_days(),
        min_block_size_hours=0.5,
        buffer_between_tasks_minutes=5,
        allow_weekends=True,
    )

    parsed = SchedulingConstraints.from_dict({"maxBlockSizeHours": 1.5}, base=base)

    assert parsed.max_block_size_hours == 1.5
    assert parsed.min_block_size_hours == 0.5
    assert parsed.buffer_between_tasks_minutes == 5.0
    assert parsed.allow_weekends is True
    assert parsed.working_hours == base.working_hours
