"""Command-line interface router for milestone-planner."""

from __future__ import annotations

import argparse
import json
import sys
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Final

import yaml

from milestone_planner.analysis import (
    add_dependency,
    analyze_dependencies,
    critical_path_view,
    optimization_view,
    parallel_tracks_view,
    remove_dependency,
    resource_conflicts_view,
)
from milestone_planner.config import (
    AnalysisSettings,
    ConfigLoadError,
    ConfigValidationError,
    SchedulingSettings,
    dump_effective_config,
    load_config,
)
from milestone_planner.domain.errors import PlannerError
from milestone_planner.domain.models import (
    AnalysisType,
    CanonicalModel,
    DependencyType,
    TaskDependency,
)
from milestone_planner.observability import setup_logging
from milestone_planner.scheduling import generate_schedule
from milestone_planner.ui.render import CLIRenderer, create_renderer

GRAPH_ERROR_EXIT: Final[int] = 1
INPUT_ERROR_EXIT: Final[int] = 2

_YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
_VIEWS: Final[dict[str, Callable[[Any], CanonicalModel]]] = {
    "critical-path": critical_path_view,
    "parallel-tracks": parallel_tracks_view,
    "resource-conflicts": resource_conflicts_view,
    "optimizations": optimization_view,
}


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = INPUT_ERROR_EXIT

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="planner",
        description=(
            "milestone-planner: dependency analysis and calendar placement.\n\n"
            "Common workflows:\n"
            "  planner analyze milestone.yaml      Critical path, tracks, conflicts\n"
            "  planner schedule week.yaml          Place tasks into time slots\n"
            "  planner dependency add deps.yaml --predecessor a --successor b\n"
            "  planner config                      Show effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to planner TOML config (default: ./planner.toml if present).",
    )
    common.add_argument("--profile", default=None, help="Optional config profile overlay name.")
    common.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a config value, e.g. --set analysis.buffer_percentage=30.",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log at DEBUG to stderr and show detailed text output.",
    )
    common.add_argument(
        "--format",
        dest="output_format",
        choices=("json", "text"),
        default="json",
        help="Output format (default: json).",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored text output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze -------------------------------------------------------------
    analyze_parser = subparsers.add_parser(
        "analyze",
        parents=[common],
        help="Analyze a milestone's task dependencies",
        description=(
            "Read a request with milestone_id, tasks and dependencies and print the\n"
            "dependency analysis.\n\n"
            "Examples:\n"
            "  planner analyze milestone.yaml\n"
            "  planner analyze milestone.json --view critical-path\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    analyze_parser.add_argument("request", help="JSON or YAML request file ('-' for stdin)")
    analyze_parser.add_argument("--milestone-id", default=None, help="Override milestone_id")
    analyze_parser.add_argument(
        "--buffer-percentage", type=float, default=None, help="Schedule buffer, 0-50 percent"
    )
    analyze_parser.add_argument(
        "--analysis-type",
        choices=[item.value for item in AnalysisType],
        default=None,
        help="Analysis type recorded on the result",
    )
    analyze_parser.add_argument(
        "--view",
        choices=("full", *_VIEWS),
        default="full",
        help="Print a focused projection instead of the full analysis",
    )
    analyze_parser.set_defaults(handler=_cmd_analyze)

    # schedule ------------------------------------------------------------
    schedule_parser = subparsers.add_parser(
        "schedule",
        parents=[common],
        help="Place tasks into calendar slots",
        description=(
            "Read a request with tasks, working_hours and optional constraints, slots\n"
            "and dependencies, then print placements, summary and suggestions.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    schedule_parser.add_argument("request", help="JSON or YAML request file ('-' for stdin)")
    schedule_parser.add_argument("--start-date", default=None, help="First day (YYYY-MM-DD)")
    schedule_parser.add_argument("--end-date", default=None, help="Last day (YYYY-MM-DD)")
    schedule_parser.add_argument("--goal-id", default=None, help="Override goal_id")
    schedule_parser.set_defaults(handler=_cmd_schedule)

    # dependency ----------------------------------------------------------
    dependency_parser = subparsers.add_parser(
        "dependency",
        help="Edit a dependency edge set",
        description="Add or remove one edge and print the resulting edge set.",
    )
    dependency_sub = dependency_parser.add_subparsers(dest="dependency_command", required=True)

    add_parser = dependency_sub.add_parser(
        "add",
        parents=[common],
        help="Add an edge after checking it does not close a cycle",
    )
    add_parser.add_argument("request", help="File with 'dependencies' and optional 'tasks'")
    add_parser.add_argument("--predecessor", required=True, help="Predecessor task id")
    add_parser.add_argument("--successor", required=True, help="Successor task id")
    add_parser.add_argument(
        "--type",
        dest="dependency_type",
        choices=[item.value for item in DependencyType],
        default=DependencyType.FINISH_TO_START.value,
        help="Dependency type (default: FINISH_TO_START)",
    )
    add_parser.add_argument("--lag", type=float, default=0.0, help="Lag in hours")
    add_parser.add_argument(
        "--soft", action="store_true", default=False, help="Mark the edge as soft"
    )
    add_parser.set_defaults(handler=_cmd_dependency_add)

    remove_parser = dependency_sub.add_parser(
        "remove",
        parents=[common],
        help="Remove an edge; a missing edge is not an error",
    )
    remove_parser.add_argument("request", help="File with 'dependencies'")
    remove_parser.add_argument("--predecessor", required=True, help="Predecessor task id")
    remove_parser.add_argument("--successor", required=True, help="Successor task id")
    remove_parser.set_defaults(handler=_cmd_dependency_remove)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show the effective configuration",
        description="Print the merged configuration after file, env and CLI overrides.",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return INPUT_ERROR_EXIT

    try:
        config = _load_effective_config(namespace)
        logging_handle = setup_logging(
            config.get("observability"),
            run_id=f"run-{int(time.time() * 1000)}",
            verbose=_flag(namespace, "verbose"),
        )
        try:
            result = handler(namespace, config)
        finally:
            logging_handle.shutdown()
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    except PlannerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return GRAPH_ERROR_EXIT
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return INPUT_ERROR_EXIT
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_analyze(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    request = _load_request(args.request)
    milestone_id = args.milestone_id or request.get("milestone_id") or request.get("milestoneId")
    if not isinstance(milestone_id, str) or not milestone_id:
        raise CLIError("request needs a milestone_id (or pass --milestone-id)")

    buffer_percentage = args.buffer_percentage
    if buffer_percentage is None:
        raw_buffer = request.get("buffer_percentage", request.get("bufferPercentage"))
        buffer_percentage = float(raw_buffer) if raw_buffer is not None else None
    analysis_type = (
        args.analysis_type or request.get("analysis_type") or AnalysisType.CRITICAL_PATH
    )

    analysis = analyze_dependencies(
        milestone_id,
        _records(request, "tasks"),
        _records(request, "dependencies"),
        buffer_percentage=buffer_percentage,
        analysis_type=analysis_type,
        settings=AnalysisSettings.from_config(config),
    )

    if args.view != "full":
        _emit_json(_VIEWS[args.view](analysis).to_dict())
        return 0
    if args.output_format == "text":
        _get_renderer(args).analysis(analysis)
        return 0
    _emit_json(analysis.to_dict())
    return 0


def _cmd_schedule(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    request = _load_request(args.request)
    working_hours = request.get("working_hours", request.get("workingHours"))
    if not isinstance(working_hours, Mapping):
        raise CLIError("request needs a working_hours object")
    constraints = request.get("constraints")
    if constraints is not None and not isinstance(constraints, Mapping):
        raise CLIError("constraints must be an object")

    slot_key = "slots" if "slots" in request else "availability"
    goal_id = args.goal_id or request.get("goal_id") or request.get("goalId")
    result = generate_schedule(
        _records(request, "tasks"),
        working_hours,
        constraints,
        start_date=_as_date(args.start_date or request.get("start_date"), "start_date"),
        end_date=_as_date(args.end_date or request.get("end_date"), "end_date"),
        slots=_records(request, slot_key) if slot_key in request else None,
        dependencies=_records(request, "dependencies") if "dependencies" in request else None,
        settings=SchedulingSettings.from_config(config),
        goal_id=goal_id if isinstance(goal_id, str) and goal_id else None,
    )

    if args.output_format == "text":
        _get_renderer(args).schedule(result)
        return 0
    _emit_json(result.to_dict())
    return 0


def _cmd_dependency_add(args: argparse.Namespace, _config: Mapping[str, Any]) -> int:
    request = _load_request(args.request)
    existing = _edges(request)
    task_ids = None
    if "tasks" in request:
        task_ids = [
            str(record.get("id")) if isinstance(record, Mapping) else str(record)
            for record in _records(request, "tasks")
        ]
    proposed = TaskDependency(
        predecessor_id=args.predecessor,
        successor_id=args.successor,
        dependency_type=DependencyType(args.dependency_type),
        lag=args.lag,
        is_hard=not args.soft,
    )
    updated = add_dependency(existing, proposed, task_ids=task_ids)
    _emit_json({"dependencies": [edge.to_dict() for edge in updated]})
    return 0


def _cmd_dependency_remove(args: argparse.Namespace, _config: Mapping[str, Any]) -> int:
    request = _load_request(args.request)
    updated = remove_dependency(_edges(request), args.predecessor, args.successor)
    _emit_json({"dependencies": [edge.to_dict() for edge in updated]})
    return 0


def _cmd_config(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    profile = getattr(args, "profile", None)
    payload: dict[str, object] = {
        "command": "config",
        "active_profile": profile,
        "config": dict(config),
    }
    if args.output_format == "text":
        renderer = _get_renderer(args)
        renderer.kv("Active profile", profile or "(default)")
        renderer.text(dump_effective_config(config, indent=2))
        return 0
    _emit_json(payload)
    return 0


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


# ---------------------------------------------------------------------------
# Helpers: config, requests
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides = _parse_overrides(getattr(args, "overrides", None) or [])
    try:
        return load_config(
            getattr(args, "config_path", None),
            profile=getattr(args, "profile", None),
            cli_overrides=overrides,
        )
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=INPUT_ERROR_EXIT) from exc


def _parse_overrides(raw_items: Sequence[str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for item in raw_items:
        key, separator, raw_value = item.partition("=")
        if not separator or not key.strip():
            raise CLIError(f"--set expects KEY=VALUE, got {item!r}")
        try:
            overrides[key.strip()] = yaml.safe_load(raw_value) if raw_value else ""
        except yaml.YAMLError as exc:
            raise CLIError(f"invalid --set value for {key.strip()}: {exc}") from exc
    return overrides


def _load_request(path_arg: str) -> dict[str, Any]:
    """Read a JSON or YAML request mapping from a file or stdin."""

    try:
        if path_arg == "-":
            text = sys.stdin.read()
            label = "<stdin>"
            use_yaml = True
        else:
            path = Path(path_arg).expanduser()
            text = path.read_text(encoding="utf-8")
            label = path.as_posix()
            use_yaml = path.suffix.lower() in _YAML_SUFFIXES
    except OSError as exc:
        raise CLIError(f"failed to read request {path_arg}: {exc}") from exc

    try:
        # YAML is a superset of JSON, so stdin accepts either.
        payload = yaml.safe_load(text) if use_yaml else json.loads(text)
    except yaml.YAMLError as exc:
        raise CLIError(f"invalid YAML in {label}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CLIError(f"invalid JSON in {label}: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise CLIError(f"request {label} must be an object")
    return dict(payload)


def _records(request: Mapping[str, Any], key: str) -> list[Any]:
    raw = request.get(key, [])
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise CLIError(f"request field {key!r} must be an array")
    return raw


def _edges(request: Mapping[str, Any]) -> list[TaskDependency]:
    edges: list[TaskDependency] = []
    for index, record in enumerate(_records(request, "dependencies")):
        if not isinstance(record, Mapping):
            raise CLIError(f"dependencies[{index}] must be an object")
        edges.append(TaskDependency.from_dict(record))
    return edges


def _as_date(value: object, name: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise CLIError(f"{name} must be YYYY-MM-DD, got {value!r}") from exc
    raise CLIError(f"{name} must be a date string")


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
