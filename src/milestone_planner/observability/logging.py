"""Structured logging setup: JSON-lines records, correlation scope, structlog routing."""

from __future__ import annotations

import contextvars
import json
import logging
import math
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Final

import structlog

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_DEFAULT_LOG_FILENAME: Final[str] = "planner.jsonl"
_DEFAULT_LOGGER_NAME: Final[str] = "milestone_planner"

_CORRELATION_KEYS: Final[tuple[str, ...]] = (
    "run_id",
    "correlation_id",
    "milestone_id",
    "goal_id",
)

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)

_CorrelationState = tuple[tuple[str, str], ...]
_CORRELATION_CONTEXT: contextvars.ContextVar[_CorrelationState] = contextvars.ContextVar(
    "planner_observability_correlation", default=()
)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for one CLI run's structured logging."""

    run_id: str
    base_log_dir: Path | str = Path(".planner/logs")
    logger_name: str = _DEFAULT_LOGGER_NAME
    level: int | str = "INFO"
    log_filename: str = _DEFAULT_LOG_FILENAME
    log_to_stderr: bool = False
    log_to_file: bool = False


class StructuredLoggingHandle:
    """Runtime handle for an active structured logging setup."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        run_id: str,
        log_path: Path | None,
        handlers: tuple[logging.Handler, ...],
    ) -> None:
        self.logger = logger
        self.run_id = run_id
        self.log_path = log_path
        self._handlers = handlers
        self._is_shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def flush(self) -> None:
        for handler in self._handlers:
            handler.flush()

    def shutdown(self) -> None:
        if self._is_shutdown:
            return
        for handler in self._handlers:
            handler.flush()
            self.logger.removeHandler(handler)
            handler.close()
        self._is_shutdown = True


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def __init__(self, *, base_context: Mapping[str, str]) -> None:
        super().__init__()
        self._base_context = dict(base_context)

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation = _merge_correlation_context(record, self._base_context)
        for key, value in sorted(correlation.items()):
            event[key] = value

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = extras

        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def configure_structlog() -> None:
    """Route ``structlog.get_logger`` calls through the stdlib logging tree.

    The event name becomes the record message and the bound key/value pairs
    become record extras, which the JSON-lines formatter reports under
    ``fields``.
    """

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Configure JSON-lines sinks for a single run and route structlog into them."""

    run_id = _require_text(config.run_id, "run_id")
    logger_name = _require_text(config.logger_name, "logger_name")
    log_filename = _require_text(config.log_filename, "log_filename")
    if Path(log_filename).name != log_filename:
        raise ValueError("log_filename must not include path separators")
    level = _parse_log_level(config.level)

    formatter = _JsonLineFormatter(base_context={"run_id": run_id})
    handlers: list[logging.Handler] = []
    log_path: Path | None = None

    if config.log_to_file:
        run_log_dir = Path(config.base_log_dir) / run_id
        run_log_dir.mkdir(parents=True, exist_ok=True)
        log_path = run_log_dir / log_filename
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    if config.log_to_stderr:
        handlers.append(logging.StreamHandler(sys.stderr))
    if not handlers:
        handlers.append(logging.NullHandler())

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    configure_structlog()
    return StructuredLoggingHandle(
        logger=logger, run_id=run_id, log_path=log_path, handlers=tuple(handlers)
    )


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    run_id: str,
    log_dir: Path | str | None = None,
    verbose: bool = False,
) -> StructuredLoggingHandle:
    """Configure logging from an ``[observability]`` mapping of ``planner.toml``.

    ``verbose`` forces DEBUG records onto stderr regardless of the mapping.
    """

    cfg = dict(observability_config or {})
    raw_level = cfg.get("log_level", "INFO")
    level: int | str = raw_level if isinstance(raw_level, (int, str)) else "INFO"
    raw_base_log_dir: object = (
        log_dir if log_dir is not None else cfg.get("log_dir", ".planner/logs")
    )
    base_log_dir: Path | str = (
        raw_base_log_dir if isinstance(raw_base_log_dir, (Path, str)) else ".planner/logs"
    )

    return setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=base_log_dir,
            level="DEBUG" if verbose else level,
            log_to_stderr=verbose or bool(cfg.get("log_to_stderr", False)),
            log_to_file=bool(cfg.get("log_to_file", False)),
        )
    )


def get_correlation_context() -> dict[str, str]:
    """Return the current correlation context as a plain dictionary."""
    return dict(_CORRELATION_CONTEXT.get())


def set_correlation_fields(**fields: str | None) -> contextvars.Token[_CorrelationState]:
    """Set correlation fields for the active context and return a reset token."""
    state = get_correlation_context()
    for key, value in fields.items():
        key_name = _require_text(key, "correlation key")
        if value is None:
            state.pop(key_name, None)
            continue
        state[key_name] = _require_text(value, "correlation value")
    return _CORRELATION_CONTEXT.set(tuple(state.items()))


def reset_correlation_fields(token: contextvars.Token[_CorrelationState]) -> None:
    """Reset correlation context to a previous token."""
    _CORRELATION_CONTEXT.reset(token)


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Temporarily bind correlation fields for log records in scope."""
    token = set_correlation_fields(**fields)
    try:
        yield
    finally:
        reset_correlation_fields(token)


def _require_text(value: object, label: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"{label} must not be empty")
    return normalized


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _merge_correlation_context(
    record: logging.LogRecord,
    base_context: Mapping[str, str],
) -> dict[str, str]:
    merged = dict(base_context)
    merged.update(get_correlation_context())

    for key in _CORRELATION_KEYS:
        value = getattr(record, key, None)
        if isinstance(value, str) and value.strip():
            merged[key] = value.strip()

    return merged


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS or key in _CORRELATION_KEYS:
            continue
        if key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, Enum):
        return _normalize_json_value(value.value)
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(str(item) for item in value)
    return repr(value)


__all__ = [
    "JSONScalar",
    "JSONValue",
    "LoggingConfig",
    "StructuredLoggingHandle",
    "configure_structlog",
    "correlation_scope",
    "get_correlation_context",
    "reset_correlation_fields",
    "set_correlation_fields",
    "setup_logging",
    "setup_structured_logging",
]
