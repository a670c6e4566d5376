"""Typed engine settings derived from the validated config mapping."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from milestone_planner.config.schema import (
    DEFAULT_CONFIG,
    assert_valid_config,
    default_config,
    merge_config,
)
from milestone_planner.domain.models import SchedulingConstraints, WorkingHours

_ANALYSIS_DEFAULTS = DEFAULT_CONFIG["analysis"]
_SCHEDULING_DEFAULTS = DEFAULT_CONFIG["scheduling"]


@dataclass(frozen=True, slots=True)
class AnalysisSettings:
    """Knobs for the dependency analysis pipeline."""

    buffer_percentage: float = _ANALYSIS_DEFAULTS["buffer_percentage"]
    reference_policy: Literal["reject", "drop"] = _ANALYSIS_DEFAULTS["reference_policy"]
    soft_dependencies_in_cpm: bool = _ANALYSIS_DEFAULTS["soft_dependencies_in_cpm"]
    split_suggestion_hours: float = _ANALYSIS_DEFAULTS["split_suggestion_hours"]
    conflict_split_hours: float = _ANALYSIS_DEFAULTS["conflict_split_hours"]
    high_severity_overlap_hours: float = _ANALYSIS_DEFAULTS["high_severity_overlap_hours"]
    medium_severity_overlap_hours: float = _ANALYSIS_DEFAULTS["medium_severity_overlap_hours"]
    resource_resolution_efficiency: float = _ANALYSIS_DEFAULTS["resource_resolution_efficiency"]

    @classmethod
    def from_config(cls, config: Mapping[str, object] | None) -> AnalysisSettings:
        section = _validated(config)["analysis"]
        return cls(**section)


@dataclass(frozen=True, slots=True)
class SchedulingSettings:
    """Knobs for slot generation, scoring and placement."""

    max_block_size_hours: float = _SCHEDULING_DEFAULTS["max_block_size_hours"]
    min_block_size_hours: float = _SCHEDULING_DEFAULTS["min_block_size_hours"]
    buffer_between_tasks_minutes: float = _SCHEDULING_DEFAULTS["buffer_between_tasks_minutes"]
    allow_weekends: bool = _SCHEDULING_DEFAULTS["allow_weekends"]
    dependency_score_weight: float = _SCHEDULING_DEFAULTS["dependency_score_weight"]
    critical_path_candidates: int = _SCHEDULING_DEFAULTS["critical_path_candidates"]
    slot_order: Literal["chronological", "score"] = _SCHEDULING_DEFAULTS["slot_order"]
    horizon_days: int = _SCHEDULING_DEFAULTS["horizon_days"]
    carve_day_windows: bool = _SCHEDULING_DEFAULTS["carve_day_windows"]

    @classmethod
    def from_config(cls, config: Mapping[str, object] | None) -> SchedulingSettings:
        section = _validated(config)["scheduling"]
        return cls(**section)

    def constraints(self, working_hours: WorkingHours) -> SchedulingConstraints:
        """Default request constraints when a caller does not send its own."""

        return SchedulingConstraints(
            working_hours=working_hours,
            max_block_size_hours=self.max_block_size_hours,
            min_block_size_hours=self.min_block_size_hours,
            buffer_between_tasks_minutes=self.buffer_between_tasks_minutes,
            allow_weekends=self.allow_weekends,
        )


def _validated(config: Mapping[str, object] | None) -> dict[str, Any]:
    if config is None:
        return dict(default_config())
    if not isinstance(config, Mapping):
        raise ValueError("config must be a mapping")
    return assert_valid_config(merge_config(default_config(), config))


__all__ = ["AnalysisSettings", "SchedulingSettings"]
