"""Structural errors raised by the dependency and scheduling engine."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


class PlannerError(ValueError):
    """Base class for graph-integrity failures surfaced to callers."""


class CircularDependencyError(PlannerError):
    """Raised when the dependency edges contain (or would contain) a cycle."""

    cycle: tuple[str, ...]
    edge: tuple[str, str]

    def __init__(self, cycle: Sequence[str], edge: tuple[str, str] | None = None) -> None:
        self.cycle = tuple(cycle)
        if edge is None:
            if len(self.cycle) < 2:
                raise ValueError("cycle must contain at least two entries")
            edge = (self.cycle[-2], self.cycle[-1])
        self.edge = edge

        path = " -> ".join(self.cycle)
        super().__init__(
            f"Circular dependency detected at edge {edge[0]} -> {edge[1]}"
            + (f" (cycle: {path})" if path else "")
        )


class EmptyGraphError(PlannerError):
    """Raised when a milestone has no tasks to analyze."""

    def __init__(self, milestone_id: str | None = None) -> None:
        self.milestone_id = milestone_id
        if milestone_id:
            message = f"No tasks found for milestone: {milestone_id}"
        else:
            message = "No tasks supplied"
        super().__init__(message)


class UnresolvedReferenceError(PlannerError):
    """Raised when dependency edges reference task ids outside the milestone."""

    edges: tuple[tuple[str, str], ...]

    def __init__(self, edges: Iterable[tuple[str, str]]) -> None:
        self.edges = tuple(edges)
        preview = ", ".join(f"{pred} -> {succ}" for pred, succ in self.edges[:5])
        suffix = "..." if len(self.edges) > 5 else ""
        super().__init__(f"Dependencies reference unknown tasks: {preview}{suffix}")


__all__ = [
    "CircularDependencyError",
    "EmptyGraphError",
    "PlannerError",
    "UnresolvedReferenceError",
]
