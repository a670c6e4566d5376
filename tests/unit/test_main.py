"""Exit-code routing at the process boundary."""

from __future__ import annotations

import pytest

from milestone_planner.config import ConfigLoadError
from milestone_planner.domain.errors import EmptyGraphError
from milestone_planner.main import ExitCode, classify_failure, cli_entrypoint


def _chained(outer: Exception, inner: Exception) -> Exception:
    try:
        try:
            raise inner
        except Exception as exc:
            raise outer from exc
    except Exception as exc:
        return exc


def test_classify_failure_follows_the_cause_chain() -> None:
    assert classify_failure(EmptyGraphError("m1")) is ExitCode.GRAPH_ERROR
    assert classify_failure(ConfigLoadError("bad toml")) is ExitCode.INPUT_ERROR
    assert classify_failure(FileNotFoundError("req.json")) is ExitCode.INPUT_ERROR
    assert classify_failure(RuntimeError("boom")) is ExitCode.INTERNAL_ERROR
    wrapped = _chained(RuntimeError("wrapper"), EmptyGraphError("m1"))
    assert classify_failure(wrapped) is ExitCode.GRAPH_ERROR


def test_cli_entrypoint_reports_escaped_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def _explode(argv: object) -> int:
        raise RuntimeError("unexpected")

    monkeypatch.setattr("milestone_planner.ui.cli.run_cli", _explode)

    assert cli_entrypoint([]) == 4
    assert "RuntimeError: unexpected" in capsys.readouterr().err


def test_cli_entrypoint_normalizes_return_values(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    results: list[object] = [None, 1, 7, "stopped"]
    monkeypatch.setattr("milestone_planner.ui.cli.run_cli", lambda argv: results.pop(0))

    assert [cli_entrypoint([]) for _ in range(4)] == [0, 1, 4, 4]
    assert "stopped" in capsys.readouterr().err
