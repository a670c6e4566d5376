"""Slot scoring: priority, dependency, preference and availability bands."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from milestone_planner.constants import (
    AVAILABILITY_SCORE_PER_HOUR,
    MAX_AVAILABILITY_SCORE,
    MAX_DEPENDENCY_SCORE,
    MAX_SLOT_SCORE,
    OUTSIDE_WINDOW_SCORE,
    PREFERRED_WINDOW_SCORE,
    PRIORITY_SCORE_WEIGHT,
)
from milestone_planner.domain.models import (
    SchedulingConstraints,
    ScoredSlot,
    SlotScoreFactors,
    TaskNode,
    TimeSlot,
    clock_minutes,
)
from milestone_planner.scheduling.slots import working_hours_zone


def score_slots(
    tasks: Sequence[TaskNode],
    slots: Iterable[TimeSlot],
    constraints: SchedulingConstraints,
    *,
    dependency_weight: float = 20.0,
) -> tuple[ScoredSlot, ...]:
    """Score every available slot against the task set, best first.

    Equal scores keep input order. Unavailable slots are left out.
    """

    priority_score = _priority_score(tasks)
    dependency_score = min(max(dependency_weight, 0.0), MAX_DEPENDENCY_SCORE)

    scored: list[ScoredSlot] = []
    for slot in slots:
        if not slot.is_available:
            continue
        factors = SlotScoreFactors(
            priority_score=priority_score,
            dependency_score=dependency_score,
            preference_score=_preference_score(slot, constraints),
            availability_score=min(
                MAX_AVAILABILITY_SCORE, slot.duration_hours * AVAILABILITY_SCORE_PER_HOUR
            ),
        )
        total = factors.total
        scored.append(
            ScoredSlot(
                slot=slot,
                score=min(MAX_SLOT_SCORE, total),
                factors=factors,
                reasoning=(
                    f"Slot scored {total:.1f}/100 based on "
                    f"priority ({factors.priority_score:g}), "
                    f"dependencies ({factors.dependency_score:g}), "
                    f"preferences ({factors.preference_score:g}), "
                    f"and availability ({factors.availability_score:g})"
                ),
            )
        )

    scored.sort(key=lambda item: item.score, reverse=True)
    return tuple(scored)


def _priority_score(tasks: Sequence[TaskNode]) -> float:
    if not tasks:
        return 0.0
    high = sum(1 for task in tasks if task.priority.is_high)
    return high / len(tasks) * PRIORITY_SCORE_WEIGHT


def _preference_score(slot: TimeSlot, constraints: SchedulingConstraints) -> float:
    working_hours = constraints.working_hours
    local_start = slot.start_time.astimezone(working_hours_zone(working_hours))
    window = working_hours.for_weekday(local_start.weekday())
    if not window.enabled:
        return OUTSIDE_WINDOW_SCORE
    minute = local_start.hour * 60 + local_start.minute
    if clock_minutes(window.start) <= minute < clock_minutes(window.end):
        return PREFERRED_WINDOW_SCORE
    return OUTSIDE_WINDOW_SCORE


__all__ = ["score_slots"]
