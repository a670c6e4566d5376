"""
Dependency analysis pipeline.

Build graph -> reject cycles -> CPM -> parallel tracks and resource conflicts
-> ranked suggestions and schedule metrics. Each call works on its own graph
copy; ``DependencyAnalyzer`` holds only settings and a logger.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from milestone_planner.analysis.advisor import (
    calculate_schedule_metrics,
    generate_optimization_suggestions,
)
from milestone_planner.analysis.conflicts import detect_resource_conflicts
from milestone_planner.analysis.critical_path import analyze_critical_path
from milestone_planner.analysis.cycles import validate_acyclic
from milestone_planner.analysis.graph import build_dependency_graph
from milestone_planner.analysis.parallel import detect_parallel_tracks
from milestone_planner.config.settings import AnalysisSettings
from milestone_planner.domain.errors import PlannerError
from milestone_planner.domain.models import (
    AnalysisType,
    DependencyAnalysis,
    TaskDependency,
    TaskNode,
    TaskTiming,
)
from milestone_planner.observability.logging import correlation_scope

TaskInput = TaskNode | Mapping[str, object]
DependencyInput = TaskDependency | Mapping[str, object]


class DependencyAnalyzer:
    """Stateless analysis entrypoint configured once with ``AnalysisSettings``."""

    __slots__ = ("_settings", "_logger")

    def __init__(
        self,
        settings: AnalysisSettings | None = None,
        *,
        logger: Any | None = None,
    ) -> None:
        self._settings = settings if settings is not None else AnalysisSettings()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def settings(self) -> AnalysisSettings:
        return self._settings

    def analyze(
        self,
        milestone_id: str,
        tasks: Iterable[TaskInput],
        dependencies: Iterable[DependencyInput] = (),
        *,
        buffer_percentage: float | None = None,
        analysis_type: AnalysisType | str = AnalysisType.CRITICAL_PATH,
    ) -> DependencyAnalysis:
        if not isinstance(milestone_id, str) or not milestone_id.strip():
            raise ValueError("milestone_id must be a non-empty string")
        settings = self._settings
        buffer = settings.buffer_percentage if buffer_percentage is None else buffer_percentage
        kind = AnalysisType(analysis_type.strip().upper()) if isinstance(
            analysis_type, str
        ) else analysis_type

        correlation_id = f"dep-analysis-{int(time.time() * 1000)}"
        with correlation_scope(correlation_id=correlation_id, milestone_id=milestone_id):
            self._logger.info(
                "dependency_analysis_started",
                milestone_id=milestone_id,
                analysis_type=kind.value,
                buffer_percentage=buffer,
            )
            try:
                analysis = self._run(milestone_id, tasks, dependencies, buffer, kind)
            except PlannerError as exc:
                self._logger.error(
                    "dependency_analysis_failed",
                    milestone_id=milestone_id,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise

            self._logger.info(
                "dependency_analysis_completed",
                milestone_id=milestone_id,
                total_duration=analysis.total_duration,
                critical_path_length=len(analysis.critical_path),
                parallel_tracks=len(analysis.parallel_tracks),
                resource_conflicts=len(analysis.resource_conflicts),
            )
            return analysis

    def _run(
        self,
        milestone_id: str,
        tasks: Iterable[TaskInput],
        dependencies: Iterable[DependencyInput],
        buffer_percentage: float,
        analysis_type: AnalysisType,
    ) -> DependencyAnalysis:
        settings = self._settings
        graph = build_dependency_graph(
            tasks,
            dependencies,
            milestone_id=milestone_id,
            reference_policy=settings.reference_policy,
            logger=self._logger,
        )
        validate_acyclic(graph)

        critical = analyze_critical_path(graph, include_soft=settings.soft_dependencies_in_cpm)
        tracks = detect_parallel_tracks(graph)
        conflicts = detect_resource_conflicts(
            graph,
            high_overlap_hours=settings.high_severity_overlap_hours,
            medium_overlap_hours=settings.medium_severity_overlap_hours,
            split_hours=settings.conflict_split_hours,
        )
        suggestions = generate_optimization_suggestions(
            graph,
            critical.critical_path,
            tracks,
            conflicts,
            split_threshold_hours=settings.split_suggestion_hours,
            resolution_efficiency=settings.resource_resolution_efficiency,
        )
        metrics = calculate_schedule_metrics(
            graph, critical.duration, tracks, buffer_percentage=buffer_percentage
        )

        return DependencyAnalysis(
            milestone_id=milestone_id,
            total_duration=critical.project_end,
            critical_path=critical.critical_path,
            critical_path_duration=critical.duration,
            parallel_tracks=tracks,
            resource_conflicts=conflicts,
            optimization_suggestions=suggestions,
            schedule_metrics=metrics,
            analysis_type=analysis_type,
            tasks=tuple(TaskTiming.of(node) for node in graph),
        )


def analyze_dependencies(
    milestone_id: str,
    tasks: Iterable[TaskInput],
    dependencies: Iterable[DependencyInput] = (),
    *,
    buffer_percentage: float | None = None,
    analysis_type: AnalysisType | str = AnalysisType.CRITICAL_PATH,
    settings: AnalysisSettings | None = None,
    logger: Any | None = None,
) -> DependencyAnalysis:
    """Analyze one milestone's tasks and edges; see ``DependencyAnalyzer.analyze``."""

    return DependencyAnalyzer(settings, logger=logger).analyze(
        milestone_id,
        tasks,
        dependencies,
        buffer_percentage=buffer_percentage,
        analysis_type=analysis_type,
    )


__all__ = ["DependencyAnalyzer", "analyze_dependencies"]
