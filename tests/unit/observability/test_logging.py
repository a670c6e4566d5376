"""
Unit tests for structured logging: JSON-lines sinks, correlation fields and
structlog routing.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
import structlog

from milestone_planner.observability.logging import (
    LoggingConfig,
    correlation_scope,
    get_correlation_context,
    setup_logging,
    setup_structured_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


def _logger_name() -> str:
    return f"milestone_planner.tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_file_sink_writes_json_lines_with_correlation(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            run_id="run-1",
            base_log_dir=tmp_path,
            logger_name=logger_name,
            log_to_file=True,
        )
    )
    logger = logging.getLogger(logger_name)

    with correlation_scope(correlation_id="dep-analysis-1", milestone_id="m-1"):
        logger.info("dependency_analysis_started", extra={"task_count": 3})
    logger.info("outside_scope")
    handle.shutdown()

    assert handle.log_path == tmp_path / "run-1" / "planner.jsonl"
    first, second = _read_json_lines(handle.log_path)
    assert first["message"] == "dependency_analysis_started"
    assert first["level"] == "INFO"
    assert first["logger"] == logger_name
    assert first["run_id"] == "run-1"
    assert first["correlation_id"] == "dep-analysis-1"
    assert first["milestone_id"] == "m-1"
    assert first["fields"] == {"task_count": 3}
    assert str(first["timestamp"]).endswith("Z")
    assert "correlation_id" not in second
    assert second["run_id"] == "run-1"


def test_level_filters_records(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            run_id="run-2",
            base_log_dir=tmp_path,
            logger_name=logger_name,
            level="WARNING",
            log_to_file=True,
        )
    )
    logger = logging.getLogger(logger_name)

    logger.info("dropped")
    logger.warning("kept")
    handle.shutdown()

    assert handle.log_path is not None
    assert [record["message"] for record in _read_json_lines(handle.log_path)] == ["kept"]


def test_structlog_events_are_routed_with_fields(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            run_id="run-3",
            base_log_dir=tmp_path,
            logger_name=logger_name,
            log_to_file=True,
        )
    )

    log = structlog.get_logger(f"{logger_name}.analysis")
    with correlation_scope(correlation_id="schedule-7", goal_id="g-1"):
        log.info("schedule_generation_started", task_count=2, slot_count=5)
    log.debug("below_threshold")
    handle.shutdown()

    assert handle.log_path is not None
    (record,) = _read_json_lines(handle.log_path)
    assert record["message"] == "schedule_generation_started"
    assert record["logger"] == f"{logger_name}.analysis"
    assert record["goal_id"] == "g-1"
    assert record["fields"] == {"task_count": 2, "slot_count": 5}


def test_no_sink_configured_uses_null_handler(tmp_path: Path) -> None:
    handle = setup_structured_logging(
        LoggingConfig(run_id="run-4", base_log_dir=tmp_path, logger_name=_logger_name())
    )

    assert handle.log_path is None
    assert not (tmp_path / "run-4").exists()
    handle.shutdown()
    handle.shutdown()
    assert handle.is_shutdown


def test_setup_logging_verbose_writes_debug_to_stderr(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    handle = setup_logging(
        {"log_level": "ERROR", "log_dir": tmp_path.as_posix()}, run_id="run-5", verbose=True
    )
    try:
        structlog.get_logger("milestone_planner.cli").debug("cli_started", command="analyze")
        handle.flush()
    finally:
        handle.shutdown()

    (line,) = capsys.readouterr().err.splitlines()
    record = json.loads(line)
    assert record["level"] == "DEBUG"
    assert record["message"] == "cli_started"
    assert record["fields"] == {"command": "analyze"}


def test_correlation_scope_restores_previous_context() -> None:
    with correlation_scope(correlation_id="outer"):
        with correlation_scope(correlation_id="inner", milestone_id="m-2"):
            assert get_correlation_context() == {"correlation_id": "inner", "milestone_id": "m-2"}
        assert get_correlation_context() == {"correlation_id": "outer"}
    assert get_correlation_context() == {}


def test_invalid_settings_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="unsupported logging level"):
        setup_structured_logging(
            LoggingConfig(run_id="r", base_log_dir=tmp_path, level="LOUD")
        )
    with pytest.raises(ValueError, match="path separators"):
        setup_structured_logging(
            LoggingConfig(run_id="r", base_log_dir=tmp_path, log_filename="a/b.jsonl")
        )
