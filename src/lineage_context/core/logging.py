"""Structured logging infrastructure.

This module provides logging that works for:
- Local CLI development (rich console output)
- Service deployments (JSON structured logs)

Usage:
    from lineage_context.core.logging import get_logger, configure_logging

    # Configure at startup
    configure_logging(log_level="INFO", log_format="console")

    # Get logger in any module
    logger = get_logger(__name__)

    # Log with structured context
    logger.info("context_built", guid="abc123", edges=4)

    # Use context managers for automatic context propagation
    with log_context(user_id="erin", guid="abc123"):
        logger.info("relationship_followed", relationship="NestedFile")
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, cast

import structlog
from structlog.typing import FilteringBoundLogger

# Context variables for correlation
_run_context: ContextVar[dict[str, Any] | None] = ContextVar("run_context", default=None)


@dataclass
class TraversalMetrics:
    """Counters collected while one entity's context is assembled."""

    root_guid: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None

    repository_calls: int = 0
    entities_visited: int = 0
    edges_recorded: int = 0
    dangling_relationships: int = 0
    truncated_branches: int = 0

    @property
    def duration_seconds(self) -> float:
        """Get duration in seconds."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return (datetime.now(UTC) - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "root_guid": self.root_guid,
            "duration_seconds": self.duration_seconds,
            "repository_calls": self.repository_calls,
            "entities_visited": self.entities_visited,
            "edges_recorded": self.edges_recorded,
            "dangling_relationships": self.dangling_relationships,
            "truncated_branches": self.truncated_branches,
        }


# Metrics storage (per-traversal)
_current_metrics: ContextVar[TraversalMetrics | None] = ContextVar(
    "current_metrics", default=None
)


def start_traversal_metrics(root_guid: str) -> TraversalMetrics:
    """Start collecting metrics for a traversal."""
    metrics = TraversalMetrics(root_guid=root_guid)
    _current_metrics.set(metrics)
    return metrics


def get_traversal_metrics() -> TraversalMetrics | None:
    """Get current traversal metrics."""
    return _current_metrics.get()


def end_traversal_metrics() -> TraversalMetrics | None:
    """End traversal metrics collection."""
    metrics = _current_metrics.get()
    if metrics:
        metrics.end_time = datetime.now(UTC)
        _current_metrics.set(None)
    return metrics


def _add_run_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor to add run context to log events."""
    context = _run_context.get()
    if context:
        event_dict.update(context)
    return event_dict


def _add_metrics_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor to add current traversal root."""
    metrics = get_traversal_metrics()
    if metrics:
        event_dict["_root_guid"] = metrics.root_guid
    return event_dict


class _CurrentStderr:
    """Stream resolving ``sys.stderr`` on every write, not once at configure time.

    Cached loggers outlive any stream swapped in temporarily (CLI runners).
    """

    def write(self, message: str) -> int:
        return sys.stderr.write(message)

    def flush(self) -> None:
        sys.stderr.flush()


_STDERR = _CurrentStderr()


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    show_timestamps: bool = True,
    color: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Output format ("console" for development, "json" for services)
        show_timestamps: Whether to show timestamps in console mode
        color: Whether to use colors in console mode
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_run_context,
        _add_metrics_context,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if show_timestamps:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if log_format == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=color,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_STDERR),
        cache_logger_on_first_use=True,
    )

    # Also configure stdlib logging for libraries (SQLAlchemy)
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[logging.StreamHandler(_STDERR)],  # type: ignore[arg-type]
        force=True,
    )


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return cast(FilteringBoundLogger, structlog.get_logger(name))


class LogContext:
    """Context manager for adding context to logs within a scope."""

    def __init__(self, **context: Any):
        self.context = context
        self.token: Any = None

    def __enter__(self) -> LogContext:
        current = _run_context.get() or {}
        new_context = {**current, **self.context}
        self.token = _run_context.set(new_context)
        return self

    def __exit__(self, *args: Any) -> None:
        if self.token:
            _run_context.reset(self.token)


def log_context(**context: Any) -> LogContext:
    """Create a context manager for scoped logging context.

    Usage:
        with log_context(user_id="erin", guid="abc"):
            logger.info("processing")  # Will include user_id and guid
    """
    return LogContext(**context)


# Convenience functions for metrics tracking
def increment_repository_call() -> None:
    """Increment repository call counter in current traversal metrics."""
    metrics = get_traversal_metrics()
    if metrics:
        metrics.repository_calls += 1


def record_entity_visited() -> None:
    """Record one more entity entered by the current traversal."""
    metrics = get_traversal_metrics()
    if metrics:
        metrics.entities_visited += 1


def record_edges(count: int) -> None:
    """Record edges added by the current traversal."""
    metrics = get_traversal_metrics()
    if metrics:
        metrics.edges_recorded += count


def record_dangling_relationship() -> None:
    """Record a relationship whose far end could not be resolved."""
    metrics = get_traversal_metrics()
    if metrics:
        metrics.dangling_relationships += 1


def record_truncated_branch() -> None:
    """Record a branch stopped by the cycle guard or depth bound."""
    metrics = get_traversal_metrics()
    if metrics:
        metrics.truncated_branches += 1


# Initialize with default configuration
configure_logging()
