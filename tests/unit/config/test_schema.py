"""Config schema validation, merging and profile overlays."""

from __future__ import annotations

import pytest

from milestone_planner.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)


def test_default_config_is_valid_and_deep_copied() -> None:
    config = default_config()
    config["analysis"]["buffer_percentage"] = 1.0

    assert DEFAULT_CONFIG["analysis"]["buffer_percentage"] == 20.0
    assert validate_config(default_config()).is_valid


def test_issues_are_collected_with_dotted_paths() -> None:
    broken = merge_config(
        default_config(),
        {
            "analysis": {"buffer_percentage": 75, "reference_policy": "ignore"},
            "scheduling": {"min_block_size_hours": 3.0, "horizon_days": 0},
        },
    )

    result = validate_config(broken)

    assert not result.is_valid
    paths = {issue.path: issue.message for issue in result.issues}
    assert paths["analysis.buffer_percentage"] == "must be <= 50.0"
    assert "expected one of: drop, reject" in paths["analysis.reference_policy"]
    assert paths["scheduling.min_block_size_hours"] == "must be <= max_block_size_hours"
    assert paths["scheduling.horizon_days"] == "must be >= 1"


def test_unknown_keys_and_wrong_types_are_rejected() -> None:
    broken = merge_config(
        default_config(),
        {"analysis": {"bogus": 1}, "scheduling": {"allow_weekends": "yes"}},
    )

    with pytest.raises(ConfigValidationError) as excinfo:
        assert_valid_config(broken)

    message = str(excinfo.value)
    assert message.startswith("invalid config:\n")
    assert "analysis" in message and "bogus" in message
    assert "- scheduling.allow_weekends: expected boolean, got str" in message


def test_severity_thresholds_must_be_ordered() -> None:
    broken = merge_config(
        default_config(), {"analysis": {"medium_severity_overlap_hours": 20.0}}
    )

    issues = validate_config(broken).issues

    assert [issue.path for issue in issues] == ["analysis.medium_severity_overlap_hours"]


def test_schema_version_mismatch_carries_migration_guidance() -> None:
    broken = merge_config(default_config(), {"meta": {"schema_version": 2}})

    (issue,) = validate_config(broken).issues

    assert issue.path == "meta.schema_version"
    assert issue.message == migration_guidance(2)
    assert "newer than supported" in issue.message


def test_builtin_profiles_overlay_defaults() -> None:
    strict = apply_profile_overlay(default_config(), "strict")
    lenient = apply_profile_overlay(default_config(), "lenient")

    assert strict["analysis"]["soft_dependencies_in_cpm"] is True
    assert strict["analysis"]["buffer_percentage"] == 30.0
    assert lenient["analysis"]["reference_policy"] == "drop"
    assert lenient["scheduling"]["allow_weekends"] is True
    assert apply_profile_overlay(default_config(), None) == default_config()


def test_unknown_profile_is_rejected() -> None:
    with pytest.raises(ConfigValidationError, match="profile 'fast' is not defined"):
        apply_profile_overlay(default_config(), "fast")
