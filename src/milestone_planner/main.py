"""``planner`` process entrypoint.

Runs the CLI and turns anything that escapes it into one of the exit codes
below. Graph errors exit 1, bad requests or config exit 2, and unexpected
failures exit 4 with a traceback on stderr.
"""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    SUCCESS = 0
    GRAPH_ERROR = 1
    INPUT_ERROR = 2
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Used by ``python -m milestone_planner`` and the ``planner`` script."""

    from milestone_planner.ui.cli import run_cli

    try:
        return _exit_status(run_cli(argv))
    except SystemExit as exc:
        return _exit_status(exc.code)
    except Exception as exc:  # noqa: BLE001 - process boundary
        code = classify_failure(exc)
        if code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(str(exc).strip() or type(exc).__name__, file=sys.stderr)
        return int(code)


def classify_failure(exc: BaseException) -> ExitCode:
    """Pick the exit code for ``exc``, looking through its causes."""

    from milestone_planner.domain.errors import PlannerError

    for error in _causes(exc):
        if isinstance(error, PlannerError):
            return ExitCode.GRAPH_ERROR
        # config load and validation errors are ValueErrors too
        if isinstance(error, (ValueError, OSError)):
            return ExitCode.INPUT_ERROR
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


def _exit_status(raw: object) -> int:
    if raw is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw, int) and raw in {code.value for code in ExitCode}:
        return raw
    if isinstance(raw, str) and raw.strip():
        print(raw.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


__all__ = ["ExitCode", "classify_failure", "cli_entrypoint"]
