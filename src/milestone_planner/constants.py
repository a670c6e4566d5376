"""Stable constants shared by the analysis and scheduling engines."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default runtime paths (relative to the config file unless overridden).
LOG_DIR: Final[PurePosixPath] = PurePosixPath(".planner/logs")

# Hours are compared with this tolerance wherever floating point sums meet.
HOURS_EPSILON: Final[float] = 1e-9

# Slot scoring bands, out of a total capped at MAX_SLOT_SCORE.
MAX_SLOT_SCORE: Final[float] = 100.0
PRIORITY_SCORE_WEIGHT: Final[float] = 30.0
MAX_DEPENDENCY_SCORE: Final[float] = 25.0
PREFERRED_WINDOW_SCORE: Final[float] = 25.0
OUTSIDE_WINDOW_SCORE: Final[float] = 5.0
AVAILABILITY_SCORE_PER_HOUR: Final[float] = 10.0
MAX_AVAILABILITY_SCORE: Final[float] = 20.0

# Analysis defaults.
DEFAULT_BUFFER_PERCENTAGE: Final[float] = 20.0
MAX_BUFFER_PERCENTAGE: Final[float] = 50.0

__all__ = [
    "AVAILABILITY_SCORE_PER_HOUR",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_BUFFER_PERCENTAGE",
    "HOURS_EPSILON",
    "LOG_DIR",
    "MAX_AVAILABILITY_SCORE",
    "MAX_BUFFER_PERCENTAGE",
    "MAX_DEPENDENCY_SCORE",
    "MAX_SLOT_SCORE",
    "OUTSIDE_WINDOW_SCORE",
    "PREFERRED_WINDOW_SCORE",
    "PRIORITY_SCORE_WEIGHT",
]
