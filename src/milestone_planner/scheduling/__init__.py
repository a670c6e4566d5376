"""Scheduling public API."""

from milestone_planner.scheduling.engine import generate_schedule
from milestone_planner.scheduling.placement import (
    PlacementEngine,
    ResolvedDependencies,
    order_tasks,
    resolve_dependencies,
)
from milestone_planner.scheduling.scoring import score_slots
from milestone_planner.scheduling.slots import generate_time_slots
from milestone_planner.scheduling.splitter import split_tasks
from milestone_planner.scheduling.suggestions import suggest_schedule_optimizations

__all__ = [
    "PlacementEngine",
    "ResolvedDependencies",
    "generate_schedule",
    "generate_time_slots",
    "order_tasks",
    "resolve_dependencies",
    "score_slots",
    "split_tasks",
    "suggest_schedule_optimizations",
]
