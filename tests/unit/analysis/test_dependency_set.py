"""Adding and removing edges from a persisted edge set."""

from __future__ import annotations

from typing import Any

import pytest

from milestone_planner.analysis.dependency_set import add_dependency, remove_dependency
from milestone_planner.domain.errors import CircularDependencyError
from milestone_planner.domain.models import DependencyType, TaskDependency


class _RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def info(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))


def _edges() -> tuple[TaskDependency, ...]:
    return (
        TaskDependency(predecessor_id="A", successor_id="B"),
        TaskDependency(predecessor_id="B", successor_id="C"),
    )


def test_add_appends_new_edge_and_logs() -> None:
    logger = _RecordingLogger()

    updated = add_dependency(
        _edges(),
        {"predecessorId": "A", "successorId": "C", "dependencyType": "START_TO_START"},
        logger=logger,
    )

    assert [edge.key for edge in updated] == [("A", "B"), ("B", "C"), ("A", "C")]
    assert updated[-1].dependency_type is DependencyType.START_TO_START
    assert logger.events == [
        (
            "dependency_added",
            {
                "predecessor_id": "A",
                "successor_id": "C",
                "dependency_type": "START_TO_START",
                "replaced": False,
            },
        )
    ]


def test_add_replaces_existing_pair_in_place() -> None:
    updated = add_dependency(
        _edges(),
        TaskDependency(predecessor_id="A", successor_id="B", lag=3.0),
        logger=_RecordingLogger(),
    )

    assert [edge.key for edge in updated] == [("A", "B"), ("B", "C")]
    assert updated[0].lag == 3.0


def test_add_rejects_cycle_and_leaves_input_untouched() -> None:
    existing = list(_edges())

    with pytest.raises(CircularDependencyError):
        add_dependency(
            existing,
            TaskDependency(predecessor_id="C", successor_id="A"),
            logger=_RecordingLogger(),
        )

    assert existing == list(_edges())


def test_remove_drops_pair_and_tolerates_missing() -> None:
    logger = _RecordingLogger()

    remaining = remove_dependency(_edges(), "A", "B", logger=logger)
    unchanged = remove_dependency(remaining, "A", "B", logger=logger)

    assert [edge.key for edge in remaining] == [("B", "C")]
    assert unchanged == remaining
    assert [fields["removed"] for _, fields in logger.events] == [1, 0]
