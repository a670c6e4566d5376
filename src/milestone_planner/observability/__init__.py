"""Public observability primitives: structured logging and correlation scope."""

from milestone_planner.observability.logging import (
    LoggingConfig,
    StructuredLoggingHandle,
    configure_structlog,
    correlation_scope,
    get_correlation_context,
    reset_correlation_fields,
    set_correlation_fields,
    setup_logging,
    setup_structured_logging,
)

__all__ = [
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
