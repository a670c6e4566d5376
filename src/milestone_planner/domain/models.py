"""Dataclass domain models with strict validation and canonical serialization."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum, StrEnum
from typing import NoReturn, TypeVar, cast

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

TModel = TypeVar("TModel", bound="CanonicalModel")
TEnum = TypeVar("TEnum", bound=Enum)

_MAX_TEXT = 8192
_MAX_COLLECTION = 10_000

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_CLOCK_RE = re.compile(r"^(\d{2}):(\d{2})$")

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class Priority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @property
    def is_high(self) -> bool:
        return self in (Priority.HIGH, Priority.CRITICAL)


_PRIORITY_RANK: dict[Priority, int] = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.CRITICAL: 4,
}


class Complexity(StrEnum):
    SIMPLE = "SIMPLE"
    MODERATE = "MODERATE"
    COMPLEX = "COMPLEX"


class DependencyType(StrEnum):
    FINISH_TO_START = "FINISH_TO_START"
    START_TO_START = "START_TO_START"
    FINISH_TO_FINISH = "FINISH_TO_FINISH"
    START_TO_FINISH = "START_TO_FINISH"


class PlacementStatus(StrEnum):
    PLACED = "PLACED"
    PARTIALLY_PLACED = "PARTIALLY_PLACED"
    UNPLACED = "UNPLACED"


class ConflictSeverity(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def level(self) -> int:
        return {"LOW": 1, "MEDIUM": 2, "HIGH": 3}[self.value]


class SuggestionType(StrEnum):
    PARALLELIZE = "PARALLELIZE"
    RESEQUENCE = "RESEQUENCE"
    SPLIT_TASK = "SPLIT_TASK"
    MERGE_TASKS = "MERGE_TASKS"
    ADD_RESOURCES = "ADD_RESOURCES"


class ImplementationEffort(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AnalysisType(StrEnum):
    CRITICAL_PATH = "CRITICAL_PATH"
    PARALLEL_OPTIMIZATION = "PARALLEL_OPTIMIZATION"
    RESOURCE_LEVELING = "RESOURCE_LEVELING"


class CanonicalModel:
    """Mixin for canonical dict/json serialization."""

    def to_dict(self) -> dict[str, JSONValue]:
        serialized = _serialize_value(self, self.__class__.__name__)
        if not isinstance(serialized, dict):
            _fail(self.__class__.__name__, "serialized model must be an object")
        return serialized

    def to_json(self) -> str:
        return _canonical_json(self.to_dict())

    @classmethod
    def from_json(cls: type[TModel], raw: str) -> TModel:
        if not isinstance(raw, str):
            _fail(cls.__name__, f"expected JSON string, got {type(raw).__name__}")
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            _fail(cls.__name__, f"invalid JSON: {exc}")
        if not isinstance(parsed, dict):
            _fail(cls.__name__, "JSON root must be an object")
        return cls.from_dict(parsed)

    @classmethod
    def from_dict(cls: type[TModel], data: Mapping[str, object]) -> TModel:
        _fail(cls.__name__, "from_dict is not implemented for this model type")


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _canonical_json(value: JSONValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def snake_case(key: str) -> str:
    """Map ``estimatedHours`` style keys onto the snake_case field names."""

    return _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key).lower()


def _expect_object(
    value: object,
    path: str,
    *,
    required: set[str],
    optional: set[str] | None = None,
    ignore_unknown: bool = False,
) -> dict[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        parsed[snake_case(key)] = item

    allowed = required | (optional or set())
    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        if not ignore_unknown:
            _fail(path, f"unexpected fields: {unknown}")
        for key in unknown:
            del parsed[key]

    missing = sorted(key for key in required if key not in parsed)
    if missing:
        _fail(path, f"missing required fields: {missing}")

    return parsed


def _as_str(value: object, path: str, *, min_len: int = 1, max_len: int = _MAX_TEXT) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    normalized = value.strip()
    if len(normalized) < min_len:
        _fail(path, f"must be at least {min_len} character(s)")
    if len(normalized) > max_len:
        _fail(path, f"must be <= {max_len} characters")
    return normalized


def _as_optional_str(value: object, path: str) -> str | None:
    if value is None:
        return None
    return _as_str(value, path)


def _as_bool(value: object, path: str) -> bool:
    if isinstance(value, bool):
        return value
    _fail(path, f"expected boolean, got {type(value).__name__}")


def _as_int(value: object, path: str, *, minimum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(path, f"expected integer, got {type(value).__name__}")
    if minimum is not None and value < minimum:
        _fail(path, f"must be >= {minimum}")
    return value


def _as_optional_int(value: object, path: str, *, minimum: int | None = None) -> int | None:
    if value is None:
        return None
    return _as_int(value, path, minimum=minimum)


def _as_float(
    value: object,
    path: str,
    *,
    minimum: float | None = None,
    exclusive_minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail(path, f"expected number, got {type(value).__name__}")
    parsed = float(value)
    if not math.isfinite(parsed):
        _fail(path, "must be finite")
    if minimum is not None and parsed < minimum:
        _fail(path, f"must be >= {minimum}")
    if exclusive_minimum is not None and parsed <= exclusive_minimum:
        _fail(path, f"must be > {exclusive_minimum}")
    if maximum is not None and parsed > maximum:
        _fail(path, f"must be <= {maximum}")
    return parsed


def _as_datetime(value: object, path: str) -> datetime:
    parsed: datetime
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            _fail(path, f"invalid ISO-8601 datetime: {value!r} ({exc})")
    else:
        _fail(path, f"expected datetime or ISO-8601 string, got {type(value).__name__}")

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        _fail(path, "datetime must be timezone-aware")
    return parsed


def _as_enum(enum_type: type[TEnum], value: object, path: str) -> TEnum:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected string enum value, got {type(value).__name__}")
    try:
        return enum_type(value.strip().upper())
    except ValueError:
        allowed = ", ".join(sorted(str(item.value) for item in enum_type))
        _fail(path, f"invalid value {value!r}; expected one of: {allowed}")


def _as_sequence(value: object, path: str) -> list[object]:
    if isinstance(value, (list, tuple)):
        if len(value) > _MAX_COLLECTION:
            _fail(path, f"too many items (>{_MAX_COLLECTION})")
        return list(value)
    _fail(path, f"expected array, got {type(value).__name__}")


def _as_str_tuple(value: object, path: str, *, unique: bool) -> tuple[str, ...]:
    parsed = tuple(
        _as_str(item, f"{path}[{index}]") for index, item in enumerate(_as_sequence(value, path))
    )
    if unique and len(set(parsed)) != len(parsed):
        _fail(path, "contains duplicate values")
    return parsed


def _as_clock(value: object, path: str) -> str:
    parsed = _as_str(value, path, max_len=5)
    match = _CLOCK_RE.fullmatch(parsed)
    if match is None:
        _fail(path, f"expected HH:MM, got {parsed!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 24 or minutes > 59 or (hours == 24 and minutes != 0):
        _fail(path, f"invalid clock time {parsed!r}")
    return parsed


def clock_minutes(value: str) -> int:
    """Return minutes after midnight for an ``HH:MM`` string."""

    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def _serialize_value(value: object, path: str) -> JSONValue:
    if value is None or isinstance(value, bool):
        return cast("JSONValue", value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            _fail(path, "float values must be finite")
        return value
    if isinstance(value, Enum):
        raw = value.value
        if not isinstance(raw, str):
            _fail(path, "enum value must be string")
        return raw
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (tuple, list)):
        return [_serialize_value(item, f"{path}[]") for item in value]
    if isinstance(value, Mapping):
        out: dict[str, JSONValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                _fail(path, "dict keys must be strings")
            out[key] = _serialize_value(item, f"{path}.{key}")
        return out
    if is_dataclass(value):
        out_obj: dict[str, JSONValue] = {}
        for dataclass_field in fields(value):
            out_obj[dataclass_field.name] = _serialize_value(
                getattr(value, dataclass_field.name),
                f"{path}.{dataclass_field.name}",
            )
        return out_obj

    _fail(path, f"cannot serialize value of type {type(value).__name__}")


# ---------------------------------------------------------------------------
# Task graph records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TaskDependency(CanonicalModel):
    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag: float = 0.0
    is_hard: bool = True
    id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "predecessor_id",
            _as_str(self.predecessor_id, "TaskDependency.predecessor_id"),
        )
        object.__setattr__(
            self, "successor_id", _as_str(self.successor_id, "TaskDependency.successor_id")
        )
        object.__setattr__(
            self,
            "dependency_type",
            _as_enum(DependencyType, self.dependency_type, "TaskDependency.dependency_type"),
        )
        object.__setattr__(self, "lag", _as_float(self.lag, "TaskDependency.lag"))
        object.__setattr__(self, "is_hard", _as_bool(self.is_hard, "TaskDependency.is_hard"))
        object.__setattr__(self, "id", _as_optional_str(self.id, "TaskDependency.id"))

    @property
    def key(self) -> tuple[str, str]:
        return (self.predecessor_id, self.successor_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> TaskDependency:
        parsed = _expect_object(
            data,
            "TaskDependency",
            required={"predecessor_id", "successor_id"},
            optional={"dependency_type", "lag", "is_hard", "id"},
            ignore_unknown=True,
        )
        return cls(
            predecessor_id=cast("str", parsed["predecessor_id"]),
            successor_id=cast("str", parsed["successor_id"]),
            dependency_type=cast(
                "DependencyType", parsed.get("dependency_type", DependencyType.FINISH_TO_START)
            ),
            lag=cast("float", parsed.get("lag", 0.0)),
            is_hard=cast("bool", parsed.get("is_hard", True)),
            id=cast("str | None", parsed.get("id")),
        )


@dataclass(slots=True)
class TaskNode(CanonicalModel):
    """One task in a dependency graph; CPM fields are filled by the analyzer."""

    id: str
    title: str
    estimated_hours: float
    priority: Priority = Priority.MEDIUM
    complexity: Complexity = Complexity.MODERATE
    skills: tuple[str, ...] = ()
    dependencies: list[TaskDependency] = field(default_factory=list)
    dependents: list[TaskDependency] = field(default_factory=list)
    parent_task_id: str | None = None
    earliest_start: float = 0.0
    earliest_finish: float = 0.0
    latest_start: float = 0.0
    latest_finish: float = 0.0
    slack: float = 0.0
    is_critical: bool = False

    def __post_init__(self) -> None:
        self.id = _as_str(self.id, "TaskNode.id")
        self.title = _as_str(self.title, "TaskNode.title")
        self.estimated_hours = _as_float(
            self.estimated_hours, "TaskNode.estimated_hours", exclusive_minimum=0.0
        )
        self.priority = _as_enum(Priority, self.priority, "TaskNode.priority")
        self.complexity = _as_enum(Complexity, self.complexity, "TaskNode.complexity")
        self.skills = _as_str_tuple(self.skills, "TaskNode.skills", unique=True)
        self.dependencies = list(self.dependencies)
        self.dependents = list(self.dependents)
        self.parent_task_id = _as_optional_str(self.parent_task_id, "TaskNode.parent_task_id")

    @property
    def predecessor_ids(self) -> tuple[str, ...]:
        return tuple(dependency.predecessor_id for dependency in self.dependencies)

    def copy(self, **changes: object) -> TaskNode:
        """Return a detached copy without graph links or computed timing."""

        return TaskNode(
            id=cast("str", changes.get("id", self.id)),
            title=cast("str", changes.get("title", self.title)),
            estimated_hours=cast("float", changes.get("estimated_hours", self.estimated_hours)),
            priority=self.priority,
            complexity=self.complexity,
            skills=self.skills,
            dependencies=list(self.dependencies),
            parent_task_id=cast("str | None", changes.get("parent_task_id", self.parent_task_id)),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> TaskNode:
        # Upstream task records carry presentation fields (status, description, ...).
        parsed = _expect_object(
            data,
            "TaskNode",
            required={"id", "title", "estimated_hours"},
            optional={
                "priority",
                "complexity",
                "skills",
                "dependencies",
                "parent_task_id",
            },
            ignore_unknown=True,
        )
        task_id = _as_str(parsed["id"], "TaskNode.id")
        raw_dependencies = _as_sequence(parsed.get("dependencies", []), "TaskNode.dependencies")
        dependencies: list[TaskDependency] = []
        for index, raw in enumerate(raw_dependencies):
            path = f"TaskNode.dependencies[{index}]"
            if isinstance(raw, str):
                dependencies.append(
                    TaskDependency(predecessor_id=_as_str(raw, path), successor_id=task_id)
                )
                continue
            if not isinstance(raw, Mapping):
                _fail(path, "expected predecessor id or dependency object")
            payload = {snake_case(str(key)): value for key, value in raw.items()}
            payload.setdefault("successor_id", task_id)
            dependencies.append(TaskDependency.from_dict(payload))

        return cls(
            id=task_id,
            title=cast("str", parsed["title"]),
            estimated_hours=cast("float", parsed["estimated_hours"]),
            priority=cast("Priority", parsed.get("priority", Priority.MEDIUM)),
            complexity=cast("Complexity", parsed.get("complexity", Complexity.MODERATE)),
            skills=cast(
                "tuple[str, ...]",
                tuple(_as_sequence(parsed.get("skills", []), "TaskNode.skills")),
            ),
            dependencies=dependencies,
            parent_task_id=cast("str | None", parsed.get("parent_task_id")),
        )


@dataclass(frozen=True, slots=True)
class TaskTiming(CanonicalModel):
    """Per-task CPM result reported with an analysis."""

    task_id: str
    earliest_start: float
    earliest_finish: float
    latest_start: float
    latest_finish: float
    slack: float
    is_critical: bool

    @classmethod
    def of(cls, node: TaskNode) -> TaskTiming:
        return cls(
            task_id=node.id,
            earliest_start=node.earliest_start,
            earliest_finish=node.earliest_finish,
            latest_start=node.latest_start,
            latest_finish=node.latest_finish,
            slack=node.slack,
            is_critical=node.is_critical,
        )


# ---------------------------------------------------------------------------
# Analysis results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParallelTrack(CanonicalModel):
    id: str
    name: str
    tasks: tuple[str, ...]
    duration: float
    skills: tuple[str, ...]
    can_run_in_parallel: bool


@dataclass(frozen=True, slots=True)
class ResourceConflict(CanonicalModel):
    skill: str
    conflicting_tasks: tuple[str, ...]
    time_overlap: float
    severity: ConflictSeverity
    suggestions: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class OptimizationSuggestion(CanonicalModel):
    type: SuggestionType
    description: str
    affected_tasks: tuple[str, ...]
    estimated_savings: float
    implementation_effort: ImplementationEffort
    priority: int

    def __post_init__(self) -> None:
        if self.priority < 1:
            _fail("OptimizationSuggestion.priority", "must be >= 1")


@dataclass(frozen=True, slots=True)
class ScheduleMetrics(CanonicalModel):
    total_tasks: int
    critical_tasks: int
    parallelizable_hours: float
    sequential_hours: float
    buffer_hours: float


@dataclass(frozen=True, slots=True)
class DependencyAnalysis(CanonicalModel):
    milestone_id: str
    total_duration: float
    critical_path: tuple[str, ...]
    critical_path_duration: float
    parallel_tracks: tuple[ParallelTrack, ...]
    resource_conflicts: tuple[ResourceConflict, ...]
    optimization_suggestions: tuple[OptimizationSuggestion, ...]
    schedule_metrics: ScheduleMetrics
    analysis_type: AnalysisType = AnalysisType.CRITICAL_PATH
    tasks: tuple[TaskTiming, ...] = ()


# ---------------------------------------------------------------------------
# Calendar and placement records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TimeSlot(CanonicalModel):
    id: str
    start_time: datetime
    end_time: datetime
    is_available: bool = True
    conflicting_events: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _as_str(self.id, "TimeSlot.id"))
        start = _as_datetime(self.start_time, "TimeSlot.start_time")
        end = _as_datetime(self.end_time, "TimeSlot.end_time")
        if end <= start:
            _fail("TimeSlot.end_time", "must be after start_time")
        object.__setattr__(self, "start_time", start)
        object.__setattr__(self, "end_time", end)
        object.__setattr__(
            self, "is_available", _as_bool(self.is_available, "TimeSlot.is_available")
        )
        object.__setattr__(
            self,
            "conflicting_events",
            _as_str_tuple(self.conflicting_events, "TimeSlot.conflicting_events", unique=False),
        )

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600.0

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> TimeSlot:
        parsed = _expect_object(
            data,
            "TimeSlot",
            required={"id", "start_time", "end_time"},
            optional={"is_available", "conflicting_events"},
        )
        return cls(
            id=cast("str", parsed["id"]),
            start_time=_as_datetime(parsed["start_time"], "TimeSlot.start_time"),
            end_time=_as_datetime(parsed["end_time"], "TimeSlot.end_time"),
            is_available=cast("bool", parsed.get("is_available", True)),
            conflicting_events=cast(
                "tuple[str, ...]",
                tuple(
                    _as_sequence(
                        parsed.get("conflicting_events", []), "TimeSlot.conflicting_events"
                    )
                ),
            ),
        )


@dataclass(frozen=True, slots=True)
class DayWindow(CanonicalModel):
    enabled: bool = False
    start: str = "09:00"
    end: str = "17:00"

    def __post_init__(self) -> None:
        object.__setattr__(self, "enabled", _as_bool(self.enabled, "DayWindow.enabled"))
        object.__setattr__(self, "start", _as_clock(self.start, "DayWindow.start"))
        object.__setattr__(self, "end", _as_clock(self.end, "DayWindow.end"))
        if self.enabled and clock_minutes(self.end) <= clock_minutes(self.start):
            _fail("DayWindow.end", "must be after start for an enabled day")

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> DayWindow:
        parsed = _expect_object(data, "DayWindow", required={"enabled"}, optional={"start", "end"})
        return cls(
            enabled=cast("bool", parsed["enabled"]),
            start=cast("str", parsed.get("start", "09:00")),
            end=cast("str", parsed.get("end", "17:00")),
        )


@dataclass(frozen=True, slots=True)
class WorkingHours(CanonicalModel):
    monday: DayWindow = field(default_factory=DayWindow)
    tuesday: DayWindow = field(default_factory=DayWindow)
    wednesday: DayWindow = field(default_factory=DayWindow)
    thursday: DayWindow = field(default_factory=DayWindow)
    friday: DayWindow = field(default_factory=DayWindow)
    saturday: DayWindow = field(default_factory=DayWindow)
    sunday: DayWindow = field(default_factory=DayWindow)
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        object.__setattr__(self, "timezone", _as_str(self.timezone, "WorkingHours.timezone"))

    def for_weekday(self, weekday: int) -> DayWindow:
        """Return the window for ``datetime.weekday()`` numbering (Monday == 0)."""

        return cast("DayWindow", getattr(self, WEEKDAYS[weekday]))

    @classmethod
    def business_days(
        cls,
        start: str = "09:00",
        end: str = "17:00",
        *,
        timezone: str = "UTC",
    ) -> WorkingHours:
        workday = DayWindow(enabled=True, start=start, end=end)
        return cls(
            monday=workday,
            tuesday=workday,
            wednesday=workday,
            thursday=workday,
            friday=workday,
            timezone=timezone,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> WorkingHours:
        parsed = _expect_object(
            data, "WorkingHours", required=set(), optional={*WEEKDAYS, "timezone"}
        )
        days: dict[str, DayWindow] = {}
        for day in WEEKDAYS:
            raw = parsed.get(day)
            if raw is None:
                days[day] = DayWindow()
            elif isinstance(raw, DayWindow):
                days[day] = raw
            elif isinstance(raw, Mapping):
                days[day] = DayWindow.from_dict(raw)
            else:
                _fail(f"WorkingHours.{day}", f"expected object, got {type(raw).__name__}")
        return cls(**days, timezone=cast("str", parsed.get("timezone", "UTC")))


@dataclass(frozen=True, slots=True)
class SchedulingConstraints(CanonicalModel):
    working_hours: WorkingHours = field(default_factory=WorkingHours)
    max_block_size_hours: float = 2.0
    min_block_size_hours: float = 0.25
    buffer_between_tasks_minutes: float = 15.0
    allow_weekends: bool = False

    def __post_init__(self) -> None:
        maximum = _as_float(
            self.max_block_size_hours,
            "SchedulingConstraints.max_block_size_hours",
            exclusive_minimum=0.0,
        )
        minimum = _as_float(
            self.min_block_size_hours,
            "SchedulingConstraints.min_block_size_hours",
            exclusive_minimum=0.0,
        )
        if minimum > maximum:
            _fail(
                "SchedulingConstraints.min_block_size_hours",
                "must be <= max_block_size_hours",
            )
        object.__setattr__(self, "max_block_size_hours", maximum)
        object.__setattr__(self, "min_block_size_hours", minimum)
        object.__setattr__(
            self,
            "buffer_between_tasks_minutes",
            _as_float(
                self.buffer_between_tasks_minutes,
                "SchedulingConstraints.buffer_between_tasks_minutes",
                minimum=0.0,
            ),
        )
        object.__setattr__(
            self,
            "allow_weekends",
            _as_bool(self.allow_weekends, "SchedulingConstraints.allow_weekends"),
        )

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, object],
        *,
        base: SchedulingConstraints | None = None,
    ) -> SchedulingConstraints:
        """Parse request constraints; keys absent from ``data`` come from ``base``."""

        parsed = _expect_object(
            data,
            "SchedulingConstraints",
            required=set(),
            optional={
                "working_hours",
                "max_block_size_hours",
                "min_block_size_hours",
                "buffer_between_tasks_minutes",
                "allow_weekends",
            },
        )
        fallback = base if base is not None else cls()
        raw_hours = parsed.get("working_hours")
        working_hours = (
            WorkingHours.from_dict(cast("Mapping[str, object]", raw_hours))
            if raw_hours is not None
            else fallback.working_hours
        )
        return cls(
            working_hours=working_hours,
            max_block_size_hours=cast(
                "float", parsed.get("max_block_size_hours", fallback.max_block_size_hours)
            ),
            min_block_size_hours=cast(
                "float", parsed.get("min_block_size_hours", fallback.min_block_size_hours)
            ),
            buffer_between_tasks_minutes=cast(
                "float",
                parsed.get("buffer_between_tasks_minutes", fallback.buffer_between_tasks_minutes),
            ),
            allow_weekends=cast("bool", parsed.get("allow_weekends", fallback.allow_weekends)),
        )


@dataclass(frozen=True, slots=True)
class SlotScoreFactors(CanonicalModel):
    priority_score: float
    dependency_score: float
    preference_score: float
    availability_score: float

    @property
    def total(self) -> float:
        return (
            self.priority_score
            + self.dependency_score
            + self.preference_score
            + self.availability_score
        )


@dataclass(frozen=True, slots=True)
class ScoredSlot(CanonicalModel):
    slot: TimeSlot
    score: float
    factors: SlotScoreFactors
    reasoning: str


@dataclass(frozen=True, slots=True)
class BlockPlacement(CanonicalModel):
    slot_id: str
    start_time: datetime
    end_time: datetime
    duration_hours: float
    is_partial_task: bool
    part_index: int | None = None
    total_parts: int | None = None
    parent_task_id: str | None = None


@dataclass(frozen=True, slots=True)
class TaskSnapshot(CanonicalModel):
    id: str
    title: str
    estimated_hours: float
    priority: Priority
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TaskPlacement(CanonicalModel):
    task_id: str
    original_task: TaskSnapshot
    placements: tuple[BlockPlacement, ...]
    status: PlacementStatus
    spillover_reason: str | None = None

    @property
    def placed_hours(self) -> float:
        return sum(block.duration_hours for block in self.placements)


@dataclass(frozen=True, slots=True)
class ScheduleSummary(CanonicalModel):
    total_tasks: int
    placed_tasks: int
    partially_placed_tasks: int
    unplaced_tasks: int

    @classmethod
    def of(cls, placements: Sequence[TaskPlacement]) -> ScheduleSummary:
        return cls(
            total_tasks=len(placements),
            placed_tasks=sum(1 for p in placements if p.status is PlacementStatus.PLACED),
            partially_placed_tasks=sum(
                1 for p in placements if p.status is PlacementStatus.PARTIALLY_PLACED
            ),
            unplaced_tasks=sum(1 for p in placements if p.status is PlacementStatus.UNPLACED),
        )


@dataclass(frozen=True, slots=True)
class ScheduleAlternative(CanonicalModel):
    option: str
    trade_offs: str


@dataclass(frozen=True, slots=True)
class ScheduleSuggestion(CanonicalModel):
    suggestion: str
    reasoning: str
    alternatives: tuple[ScheduleAlternative, ...]
    urgency_warning: str | None = None


@dataclass(frozen=True, slots=True)
class ScheduleResult(CanonicalModel):
    placements: tuple[TaskPlacement, ...]
    summary: ScheduleSummary
    suggestions: tuple[ScheduleSuggestion, ...] = ()
    goal_id: str | None = None


__all__ = [
    "WEEKDAYS",
    "AnalysisType",
    "BlockPlacement",
    "CanonicalModel",
    "Complexity",
    "ConflictSeverity",
    "DayWindow",
    "DependencyAnalysis",
    "DependencyType",
    "ImplementationEffort",
    "JSONScalar",
    "JSONValue",
    "OptimizationSuggestion",
    "ParallelTrack",
    "PlacementStatus",
    "Priority",
    "ResourceConflict",
    "ScheduleAlternative",
    "ScheduleMetrics",
    "ScheduleResult",
    "ScheduleSuggestion",
    "ScheduleSummary",
    "SchedulingConstraints",
    "ScoredSlot",
    "SlotScoreFactors",
    "SuggestionType",
    "TaskDependency",
    "TaskNode",
    "TaskPlacement",
    "TaskSnapshot",
    "TaskTiming",
    "TimeSlot",
    "WorkingHours",
    "clock_minutes",
    "snake_case",
]
