"""Plain-text rendering of analysis and schedule results for the CLI.

JSON stays the default output; ``--format text`` routes results through
``CLIRenderer`` instead. Respects ``NO_COLOR`` and ``--no-color``.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

    from milestone_planner.domain.models import DependencyAnalysis, ScheduleResult

_BOLD = "\033[1m"
_RESET = "\033[0m"


def _color_allowed(no_color_flag: bool, stream: TextIO) -> bool:
    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Thin CLI output renderer producing deterministic plain text."""

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stream = stream if stream is not None else sys.stdout
        self._color = _color_allowed(no_color, self._stream)

    def heading(self, text: str) -> None:
        self._write(f"{_BOLD}{text}{_RESET}" if self._color else text)

    def kv(self, key: str, value: object) -> None:
        self._write(f"{key}: {value}")

    def text(self, line: str) -> None:
        self._write(line)

    def section(self, title: str) -> None:
        self._write(f"\n{title}")

    def warning(self, text: str) -> None:
        self._write(f"  Warning: {text}")

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            self._write(f"  {prefix}{entry}")

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a formatted ASCII table; nothing is printed for zero rows."""

        if not rows:
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        if title:
            self.section(title)
        self._write(f"  {_pad(list(headers))}")
        self._write(f"  {'  '.join('-' * w for w in widths)}")
        for row in rows:
            self._write(f"  {_pad(list(row))}")

    def analysis(self, analysis: DependencyAnalysis) -> None:
        metrics = analysis.schedule_metrics
        self.heading(f"Dependency analysis for milestone {analysis.milestone_id}")
        self.kv("Total duration (h)", f"{analysis.total_duration:g}")
        self.kv("Critical path", " -> ".join(analysis.critical_path) or "(none)")
        self.kv("Critical path duration (h)", f"{analysis.critical_path_duration:g}")
        self.kv("Tasks", f"{metrics.total_tasks} ({metrics.critical_tasks} critical)")
        self.kv("Buffer (h)", f"{metrics.buffer_hours:g}")

        if self.verbose:
            self.table(
                ("task", "ES", "EF", "LS", "LF", "slack", "critical"),
                [
                    (
                        timing.task_id,
                        f"{timing.earliest_start:g}",
                        f"{timing.earliest_finish:g}",
                        f"{timing.latest_start:g}",
                        f"{timing.latest_finish:g}",
                        f"{timing.slack:g}",
                        "yes" if timing.is_critical else "",
                    )
                    for timing in analysis.tasks
                ],
                title="Task timing:",
            )
        self.table(
            ("track", "tasks", "duration", "parallel"),
            [
                (
                    track.id,
                    ", ".join(track.tasks),
                    f"{track.duration:g}",
                    "yes" if track.can_run_in_parallel else "no",
                )
                for track in analysis.parallel_tracks
            ],
            title="Parallel tracks:",
        )
        self.table(
            ("skill", "severity", "overlap", "tasks"),
            [
                (
                    conflict.skill,
                    conflict.severity.value,
                    f"{conflict.time_overlap:g}",
                    ", ".join(conflict.conflicting_tasks),
                )
                for conflict in analysis.resource_conflicts
            ],
            title="Resource conflicts:",
        )
        if analysis.optimization_suggestions:
            self.section("Suggestions:")
            self.items(
                [
                    f"[P{item.priority}] {item.description}"
                    for item in analysis.optimization_suggestions
                ]
            )

    def schedule(self, result: ScheduleResult) -> None:
        summary = result.summary
        self.heading("Schedule" + (f" for goal {result.goal_id}" if result.goal_id else ""))
        self.kv(
            "Tasks",
            f"{summary.total_tasks} total, {summary.placed_tasks} placed, "
            f"{summary.partially_placed_tasks} partial, {summary.unplaced_tasks} unplaced",
        )
        rows: list[tuple[str, str, str, str]] = []
        for placement in result.placements:
            if not placement.placements:
                rows.append((placement.task_id, placement.status.value, "-", "-"))
            for block in placement.placements:
                rows.append(
                    (
                        placement.task_id,
                        placement.status.value,
                        block.start_time.isoformat(),
                        f"{block.duration_hours:g}",
                    )
                )
        self.table(("task", "status", "start", "hours"), rows, title="Placements:")
        for suggestion in result.suggestions:
            self.section(suggestion.suggestion)
            if suggestion.urgency_warning:
                self.warning(suggestion.urgency_warning)
            self.items([f"{alt.option} ({alt.trade_offs})" for alt in suggestion.alternatives])

    def _write(self, line: str) -> None:
        self._stream.write(line + "\n")


def create_renderer(
    *, no_color: bool = False, verbose: bool = False, stream: TextIO | None = None
) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, verbose=verbose, stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]
