"""
milestone-planner: configuration schema and validation.

Purpose
- Define authoritative configuration defaults and strict validation rules.

What is included
- Schema versioning and migration guidance.
- Validation rules for required fields, types, enums, and numeric ranges.
- Profile overlay validation and deterministic deep-merge helpers.

Validation never raises on the first problem; it collects every issue with a
dotted field path so a broken ``planner.toml`` can be fixed in one pass.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from milestone_planner.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_BUFFER_PERCENTAGE,
    LOG_DIR,
    MAX_BUFFER_PERCENTAGE,
    MAX_DEPENDENCY_SCORE,
)

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION
BUILTIN_PROFILE_NAMES: Final[tuple[str, ...]] = ("strict", "lenient")

REFERENCE_POLICIES: Final[tuple[str, ...]] = ("reject", "drop")
SLOT_ORDERS: Final[tuple[str, ...]] = ("chronological", "score")
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

_PROFILE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")

# Config paths that should be normalized relative to config file location.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (("observability", "log_dir"),)


class MetaConfig(TypedDict):
    schema_version: int


class AnalysisConfig(TypedDict):
    buffer_percentage: float
    reference_policy: Literal["reject", "drop"]
    soft_dependencies_in_cpm: bool
    split_suggestion_hours: float
    conflict_split_hours: float
    high_severity_overlap_hours: float
    medium_severity_overlap_hours: float
    resource_resolution_efficiency: float


class SchedulingConfig(TypedDict):
    max_block_size_hours: float
    min_block_size_hours: float
    buffer_between_tasks_minutes: float
    allow_weekends: bool
    dependency_score_weight: float
    critical_path_candidates: int
    slot_order: Literal["chronological", "score"]
    horizon_days: int
    carve_day_windows: bool


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_stderr: bool
    log_to_file: bool


class ProfileOverlay(TypedDict, total=False):
    analysis: dict[str, Any]
    scheduling: dict[str, Any]
    observability: dict[str, Any]


class PlannerConfig(TypedDict):
    meta: MetaConfig
    analysis: AnalysisConfig
    scheduling: SchedulingConfig
    observability: ObservabilityConfig
    profiles: dict[str, ProfileOverlay]


DEFAULT_CONFIG: Final[PlannerConfig] = {
    "meta": {"schema_version": ConfigSchemaVersion},
    "analysis": {
        "buffer_percentage": DEFAULT_BUFFER_PERCENTAGE,
        "reference_policy": "reject",
        "soft_dependencies_in_cpm": False,
        "split_suggestion_hours": 6.0,
        "conflict_split_hours": 4.0,
        "high_severity_overlap_hours": 16.0,
        "medium_severity_overlap_hours": 8.0,
        "resource_resolution_efficiency": 0.5,
    },
    "scheduling": {
        "max_block_size_hours": 2.0,
        "min_block_size_hours": 0.25,
        "buffer_between_tasks_minutes": 15.0,
        "allow_weekends": False,
        "dependency_score_weight": 20.0,
        "critical_path_candidates": 3,
        "slot_order": "chronological",
        "horizon_days": 7,
        "carve_day_windows": True,
    },
    "observability": {
        "log_level": "INFO",
        "log_dir": LOG_DIR.as_posix(),
        "log_to_stderr": False,
        "log_to_file": False,
    },
    "profiles": {
        "strict": {
            "analysis": {
                "reference_policy": "reject",
                "soft_dependencies_in_cpm": True,
                "buffer_percentage": 30.0,
            },
        },
        "lenient": {
            "analysis": {"reference_policy": "drop", "buffer_percentage": 10.0},
            "scheduling": {"allow_weekends": True},
        },
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> PlannerConfig:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    """Return deterministic migration guidance for schema version mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade planner.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the milestone-planner package"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def apply_profile_overlay(config: Mapping[str, object], profile: str | None) -> dict[str, Any]:
    """Apply a named profile overlay and re-validate the resulting config."""

    materialized = _deep_copy_mapping(config)
    if profile is None:
        return materialized

    selected = profile.strip()
    if not selected:
        return materialized

    profiles_raw = materialized.get("profiles")
    if not isinstance(profiles_raw, Mapping):
        raise ConfigValidationError(
            (ConfigValidationIssue("profiles", "profiles section is required"),)
        )

    overlay_raw = profiles_raw.get(selected)
    if overlay_raw is None:
        raise ConfigValidationError(
            (ConfigValidationIssue("profiles", f"profile {selected!r} is not defined"),)
        )
    if not isinstance(overlay_raw, Mapping):
        raise ConfigValidationError(
            (ConfigValidationIssue(f"profiles.{selected}", "profile overlay must be an object"),)
        )

    merged = merge_config(materialized, overlay_raw)
    return assert_valid_config(merged, active_profile=selected)


def validate_config(
    config: Mapping[str, object] | object,
    *,
    active_profile: str | None = None,
) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, "", issues, partial=False)

    selected_profile = active_profile.strip() if isinstance(active_profile, str) else None
    if selected_profile:
        profiles = normalized.get("profiles")
        if not isinstance(profiles, Mapping):
            issues.add("profiles", "profiles section is required")
        elif selected_profile not in profiles:
            issues.add("profiles", f"profile {selected_profile!r} is not defined")
        else:
            effective = merge_config(normalized, profiles[selected_profile])
            _validate_root(effective, "", issues, partial=False)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())

    return ConfigValidationResult(config=normalized, issues=issues.items())


def assert_valid_config(
    config: Mapping[str, object] | object,
    *,
    active_profile: str | None = None,
) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config, active_profile=active_profile)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_root(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
    *,
    partial: bool,
) -> dict[str, Any]:
    sections: dict[str, Callable[..., dict[str, Any]]] = {
        "meta": _validate_meta,
        "analysis": _validate_analysis,
        "scheduling": _validate_scheduling,
        "observability": _validate_observability,
    }
    _reject_unknown_keys(payload, {*sections, "profiles"}, path, issues)
    if not partial:
        _require_keys(payload, set(sections), path, issues)

    out: dict[str, Any] = {}
    for key, validate in sections.items():
        _section(
            payload,
            key=key,
            path=path,
            issues=issues,
            validator=lambda section, section_path, validate=validate: validate(
                section, section_path, issues, partial=partial
            ),
            out=out,
        )

    profiles_raw = payload.get("profiles")
    if profiles_raw is not None:
        profiles_path = _join(path, "profiles")
        profiles_obj = _as_object(profiles_raw, profiles_path, issues)
        if profiles_obj is not None:
            out["profiles"] = _validate_profiles(profiles_obj, profiles_path, issues)

    return out


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    path: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_path = _join(path, key)
    section_obj = _as_object(raw, section_path, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, section_path)


def _validate_meta(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
    *,
    partial: bool,
) -> dict[str, Any]:
    allowed = {"schema_version"}
    _reject_unknown_keys(payload, allowed, path, issues)
    if not partial:
        _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        parsed = _as_int(
            payload["schema_version"], _join(path, "schema_version"), issues, minimum=1
        )
        if parsed is not None:
            out["schema_version"] = parsed
            if parsed != ConfigSchemaVersion:
                issues.add(_join(path, "schema_version"), migration_guidance(parsed))
    return out


def _validate_analysis(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
    *,
    partial: bool,
) -> dict[str, Any]:
    numeric: dict[str, tuple[float, float | None]] = {
        "buffer_percentage": (0.0, MAX_BUFFER_PERCENTAGE),
        "split_suggestion_hours": (0.0, None),
        "conflict_split_hours": (0.0, None),
        "high_severity_overlap_hours": (0.0, None),
        "medium_severity_overlap_hours": (0.0, None),
        "resource_resolution_efficiency": (0.0, 1.0),
    }
    allowed = {*numeric, "reference_policy", "soft_dependencies_in_cpm"}
    _reject_unknown_keys(payload, allowed, path, issues)
    if not partial:
        _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    for key, (minimum, maximum) in numeric.items():
        if key not in payload:
            continue
        parsed = _as_float(
            payload[key], _join(path, key), issues, minimum=minimum, maximum=maximum
        )
        if parsed is not None:
            out[key] = parsed

    if "reference_policy" in payload:
        parsed_policy = _as_enum(
            payload["reference_policy"],
            _join(path, "reference_policy"),
            issues,
            allowed_values=REFERENCE_POLICIES,
        )
        if parsed_policy is not None:
            out["reference_policy"] = parsed_policy

    if "soft_dependencies_in_cpm" in payload:
        parsed_soft = _as_bool(
            payload["soft_dependencies_in_cpm"], _join(path, "soft_dependencies_in_cpm"), issues
        )
        if parsed_soft is not None:
            out["soft_dependencies_in_cpm"] = parsed_soft

    high = out.get("high_severity_overlap_hours")
    medium = out.get("medium_severity_overlap_hours")
    if high is not None and medium is not None and medium > high:
        issues.add(
            _join(path, "medium_severity_overlap_hours"),
            "must be <= high_severity_overlap_hours",
        )
    return out


def _validate_scheduling(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
    *,
    partial: bool,
) -> dict[str, Any]:
    allowed = {
        "max_block_size_hours",
        "min_block_size_hours",
        "buffer_between_tasks_minutes",
        "allow_weekends",
        "dependency_score_weight",
        "critical_path_candidates",
        "slot_order",
        "horizon_days",
        "carve_day_windows",
    }
    _reject_unknown_keys(payload, allowed, path, issues)
    if not partial:
        _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}

    for key in ("max_block_size_hours", "min_block_size_hours"):
        if key in payload:
            parsed_block = _as_float(payload[key], _join(path, key), issues, exclusive_minimum=0.0)
            if parsed_block is not None:
                out[key] = parsed_block

    if "buffer_between_tasks_minutes" in payload:
        parsed_buffer = _as_float(
            payload["buffer_between_tasks_minutes"],
            _join(path, "buffer_between_tasks_minutes"),
            issues,
            minimum=0.0,
        )
        if parsed_buffer is not None:
            out["buffer_between_tasks_minutes"] = parsed_buffer

    if "dependency_score_weight" in payload:
        parsed_weight = _as_float(
            payload["dependency_score_weight"],
            _join(path, "dependency_score_weight"),
            issues,
            minimum=0.0,
            maximum=MAX_DEPENDENCY_SCORE,
        )
        if parsed_weight is not None:
            out["dependency_score_weight"] = parsed_weight

    if "critical_path_candidates" in payload:
        parsed_candidates = _as_int(
            payload["critical_path_candidates"],
            _join(path, "critical_path_candidates"),
            issues,
            minimum=0,
        )
        if parsed_candidates is not None:
            out["critical_path_candidates"] = parsed_candidates

    if "horizon_days" in payload:
        parsed_horizon = _as_int(
            payload["horizon_days"], _join(path, "horizon_days"), issues, minimum=1
        )
        if parsed_horizon is not None:
            out["horizon_days"] = parsed_horizon

    if "slot_order" in payload:
        parsed_order = _as_enum(
            payload["slot_order"], _join(path, "slot_order"), issues, allowed_values=SLOT_ORDERS
        )
        if parsed_order is not None:
            out["slot_order"] = parsed_order

    for key in ("allow_weekends", "carve_day_windows"):
        if key in payload:
            parsed_flag = _as_bool(payload[key], _join(path, key), issues)
            if parsed_flag is not None:
                out[key] = parsed_flag

    maximum = out.get("max_block_size_hours")
    minimum = out.get("min_block_size_hours")
    if maximum is not None and minimum is not None and minimum > maximum:
        issues.add(_join(path, "min_block_size_hours"), "must be <= max_block_size_hours")
    return out


def _validate_observability(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
    *,
    partial: bool,
) -> dict[str, Any]:
    allowed = {"log_level", "log_dir", "log_to_stderr", "log_to_file"}
    _reject_unknown_keys(payload, allowed, path, issues)
    if not partial:
        _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}

    if "log_level" in payload:
        parsed_log_level = _as_enum(
            payload["log_level"], _join(path, "log_level"), issues, allowed_values=LOG_LEVELS
        )
        if parsed_log_level is not None:
            out["log_level"] = parsed_log_level

    if "log_dir" in payload:
        parsed_log_dir = _as_path_text(payload["log_dir"], _join(path, "log_dir"), issues)
        if parsed_log_dir is not None:
            out["log_dir"] = parsed_log_dir

    for key in ("log_to_stderr", "log_to_file"):
        if key in payload:
            parsed_flag = _as_bool(payload[key], _join(path, key), issues)
            if parsed_flag is not None:
                out[key] = parsed_flag

    return out


def _validate_profiles(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for profile_name in sorted(payload):
        profile_path = _join(path, profile_name)
        if not _PROFILE_NAME_PATTERN.fullmatch(profile_name):
            issues.add(profile_path, "profile name must match ^[a-z][a-z0-9_-]*$")
            continue
        profile_obj = _as_object(payload[profile_name], profile_path, issues)
        if profile_obj is None:
            continue
        out[profile_name] = _validate_profile_overlay(profile_obj, profile_path, issues)
    return out


def _validate_profile_overlay(
    payload: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
) -> dict[str, Any]:
    validators: dict[str, Callable[..., dict[str, Any]]] = {
        "analysis": _validate_analysis,
        "scheduling": _validate_scheduling,
        "observability": _validate_observability,
    }
    _reject_unknown_keys(payload, set(validators), path, issues)

    out: dict[str, Any] = {}
    for section in sorted(validators):
        raw = payload.get(section)
        if raw is None:
            continue
        section_path = _join(path, section)
        section_obj = _as_object(raw, section_path, issues)
        if section_obj is None:
            continue
        out[section] = validators[section](section_obj, section_path, issues, partial=True)
    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_float(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: float | None = None,
    exclusive_minimum: float | None = None,
    maximum: float | None = None,
) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {type(value).__name__}")
        return None
    parsed = float(value)
    if not math.isfinite(parsed):
        issues.add(path, "must be finite")
        return None
    if minimum is not None and parsed < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    if exclusive_minimum is not None and parsed <= exclusive_minimum:
        issues.add(path, f"must be > {exclusive_minimum}")
        return None
    if maximum is not None and parsed > maximum:
        issues.add(path, f"must be <= {maximum}")
        return None
    return parsed


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            elif isinstance(existing, Mapping):
                nested = _deep_copy_mapping(existing)
                _merge_into(nested, value)
                target[key] = nested
            else:
                nested_new: dict[str, Any] = {}
                _merge_into(nested_new, value)
                target[key] = nested_new
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {key: _deep_copy_value(value[key]) for key in sorted(value)}


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        return {key: _deep_copy_value(item) for key, item in value.items() if isinstance(key, str)}
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_deep_copy_value(item) for item in value)
    return copy.deepcopy(value)


__all__ = [
    "BUILTIN_PROFILE_NAMES",
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "REFERENCE_POLICIES",
    "SLOT_ORDERS",
    "AnalysisConfig",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ObservabilityConfig",
    "PlannerConfig",
    "ProfileOverlay",
    "SchedulingConfig",
    "apply_profile_overlay",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
