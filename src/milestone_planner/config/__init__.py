"""
milestone-planner config package public API.

Exports config loading/validation entrypoints, the typed engine settings, and
the public error types. Loading reads ``planner.toml`` plus ``PLANNER_`` env
overrides and fails fast with structured validation/load errors.
"""

from milestone_planner.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    load_config,
)
from milestone_planner.config.schema import (
    BUILTIN_PROFILE_NAMES,
    DEFAULT_CONFIG,
    PATH_FIELDS,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    PlannerConfig,
    ProfileOverlay,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)
from milestone_planner.config.settings import AnalysisSettings, SchedulingSettings

__all__ = [
    "BUILTIN_PROFILE_NAMES",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "PATH_FIELDS",
    "AnalysisSettings",
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "PlannerConfig",
    "ProfileOverlay",
    "SchedulingSettings",
    "apply_profile_overlay",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
