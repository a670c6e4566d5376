"""Config loading precedence: CLI overrides > env > file > defaults."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from milestone_planner.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_default_file_yields_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config["analysis"]["buffer_percentage"] == 20.0
    assert config["scheduling"]["slot_order"] == "chronological"
    assert config["observability"]["log_dir"] == (tmp_path / ".planner/logs").resolve().as_posix()


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    path = _write(tmp_path / "planner.toml", "[analysis\nbuffer_percentage = 1\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(path, environ={})


def test_precedence_cli_over_env_over_file(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "planner.toml",
        "[analysis]\nbuffer_percentage = 25.0\n\n[scheduling]\nhorizon_days = 10\n",
    )

    file_only = load_config(path, environ={})
    with_env = load_config(
        path,
        environ={
            "PLANNER_ANALYSIS_BUFFER_PERCENTAGE": "30",
            "PLANNER_SCHEDULING_ALLOW_WEEKENDS": "yes",
        },
    )
    with_cli = load_config(
        path,
        environ={"PLANNER_ANALYSIS_BUFFER_PERCENTAGE": "30"},
        cli_overrides={"analysis.buffer_percentage": 35.0},
    )

    assert file_only["analysis"]["buffer_percentage"] == 25.0
    assert file_only["scheduling"]["horizon_days"] == 10
    assert with_env["analysis"]["buffer_percentage"] == 30.0
    assert with_env["scheduling"]["allow_weekends"] is True
    assert with_cli["analysis"]["buffer_percentage"] == 35.0


def test_env_values_are_coerced_by_default_type(tmp_path: Path) -> None:
    path = _write(tmp_path / "planner.toml", "")

    with pytest.raises(ConfigLoadError, match="must be an integer"):
        load_config(path, environ={"PLANNER_SCHEDULING_HORIZON_DAYS": "soon"})
    with pytest.raises(ConfigLoadError, match="must be a boolean"):
        load_config(path, environ={"PLANNER_SCHEDULING_CARVE_DAY_WINDOWS": "maybe"})


def test_profile_from_env_and_overrides_still_validated(tmp_path: Path) -> None:
    path = _write(tmp_path / "planner.toml", "")

    lenient = load_config(path, environ={"PLANNER_PROFILE": "lenient"})
    assert lenient["analysis"]["reference_policy"] == "drop"

    with pytest.raises(ConfigValidationError, match="analysis.buffer_percentage"):
        load_config(path, environ={}, cli_overrides={"analysis.buffer_percentage": 90})


def test_log_dir_is_resolved_against_config_directory(tmp_path: Path) -> None:
    nested = tmp_path / "conf"
    nested.mkdir()
    path = _write(nested / "planner.toml", '[observability]\nlog_dir = "../logs"\n')

    config = load_config(path, environ={})

    assert config["observability"]["log_dir"] == (tmp_path / "logs").resolve().as_posix()


def test_dump_effective_config_is_sorted_json(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path / "planner.toml", ""), environ={})

    dumped = dump_effective_config(config)

    assert json.loads(dumped) == config
    assert dumped.index('"analysis"') < dumped.index('"scheduling"')


def test_dump_effective_config_indents_on_request(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path / "planner.toml", ""), environ={})

    dumped = dump_effective_config(config, indent=2)

    assert dumped.startswith('{\n  "analysis": {\n    "buffer_percentage": 20.0,')
    assert json.loads(dumped) == config


def test_malformed_override_keys_are_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "planner.toml", "")

    with pytest.raises(ConfigLoadError, match="invalid override key"):
        load_config(path, environ={}, cli_overrides={"analysis.": 1})
    with pytest.raises(ConfigLoadError, match="invalid override key"):
        load_config(path, environ={}, cli_overrides={".buffer_percentage": 1})
