"""
Mock Service Metrics and Structured Logging.

This module provides the in-memory diagnostics kept by every mock service
facade and a JSON-formatted logger for echoing them.

Key Components:
    - RequestLog: Bounded FIFO of per-call request records
    - PerformanceTracker: Rolling per-method duration windows
    - PerformanceSummary: Aggregate statistics over one window
    - StructuredLogger: JSON-formatted logging with context
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

# Bounds for in-memory diagnostics
MAX_REQUEST_LOGS = 100
MAX_PERFORMANCE_SAMPLES = 1000


@dataclass
class RequestLogEntry:
    """One recorded mock service call.

    Attributes:
        type: Operation name (e.g. "analyze_idea")
        scenario: Scenario the call followed
        success: Whether the call returned normally
        latency: Call duration in milliseconds, None for synthesized errors
        error: Error message if the call failed
        timestamp: When the entry was recorded
    """

    type: str
    scenario: str
    success: bool
    latency: float | None = None
    error: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "type": self.type,
            "scenario": self.scenario,
            "latency": self.latency,
            "success": self.success,
            "error": self.error,
        }


class RequestLog:
    """Bounded FIFO of request log entries (oldest dropped first)."""

    def __init__(self, max_entries: int = MAX_REQUEST_LOGS) -> None:
        self._entries: deque[RequestLogEntry] = deque(maxlen=max_entries)

    def append(self, entry: RequestLogEntry) -> None:
        self._entries.append(entry)

    def entries(self) -> list[RequestLogEntry]:
        """Snapshot of the entries, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class PerformanceSummary(BaseModel):
    """Aggregate statistics over a window of call durations (ms)."""

    total_requests: int = Field(default=0, ge=0)
    total_duration: float = Field(default=0.0, ge=0)
    average_duration: float = Field(default=0.0, ge=0)
    min_duration: float = Field(default=0.0, ge=0)
    max_duration: float = Field(default=0.0, ge=0)

    @classmethod
    def from_durations(cls, durations: Iterable[float]) -> PerformanceSummary:
        """Summarize a window of durations; an empty window is all zeros."""
        samples = list(durations)
        if not samples:
            return cls()
        total = sum(samples)
        return cls(
            total_requests=len(samples),
            total_duration=total,
            average_duration=round(total / len(samples), 2),
            min_duration=min(samples),
            max_duration=max(samples),
        )


class PerformanceTracker:
    """Rolling per-method windows of call durations.

    Usage:
        tracker = PerformanceTracker()
        tracker.record("analyze_idea", 12.5)
        summary = tracker.summary("analyze_idea")
    """

    def __init__(self, max_samples: int = MAX_PERFORMANCE_SAMPLES) -> None:
        self._max_samples = max_samples
        self._samples: dict[str, deque[float]] = {}

    def record(self, method: str, duration_ms: float) -> None:
        """Record one call duration, evicting the oldest sample when full."""
        window = self._samples.get(method)
        if window is None:
            window = deque(maxlen=self._max_samples)
            self._samples[method] = window
        window.append(duration_ms)

    def summary(self, method: str) -> PerformanceSummary:
        """Summary for one method (all zeros if never called)."""
        return PerformanceSummary.from_durations(self._samples.get(method, ()))

    def summaries(self) -> dict[str, PerformanceSummary]:
        """Summaries for every method seen so far."""
        return {
            method: PerformanceSummary.from_durations(samples)
            for method, samples in self._samples.items()
        }

    def sample_count(self, method: str) -> int:
        return len(self._samples.get(method, ()))

    def clear(self) -> None:
        self._samples.clear()


class StructuredLogger:
    """JSON-formatted structured logger.

    Writes through a stdlib logger; handlers and levels are left to
    logging configuration (see mockstage.cli.configure_logging).

    Usage:
        logger = StructuredLogger("mockstage.services.analysis")
        logger.info("Mock request", type="analyze_idea", scenario="success")
    """

    def __init__(self, name: str, json_format: bool = True) -> None:
        """Initialize the structured logger.

        Args:
            name: Logger name
            json_format: Whether to use JSON format
        """
        self._logger = logging.getLogger(name)
        self._json_format = json_format
        self._context: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def set_context(self, **kwargs: Any) -> None:
        """Set persistent context fields.

        Args:
            **kwargs: Context fields to set
        """
        self._context.update(kwargs)

    def _format_message(self, level: str, message: str, **kwargs: Any) -> str:
        """Format log message.

        Args:
            level: Log level
            message: Log message
            **kwargs: Additional fields

        Returns:
            Formatted message string
        """
        if self._json_format:
            record = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": level,
                "message": message,
                "logger": self._logger.name,
            }
            record.update(self._context)
            record.update(kwargs)
            return json.dumps(record, default=str)

        extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
        return f"{message} {extra}".strip()

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._format_message("DEBUG", message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._format_message("INFO", message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._format_message("WARNING", message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._format_message("ERROR", message, **kwargs))

    def log_request(self, entry: RequestLogEntry, **kwargs: Any) -> None:
        """Log a request record.

        Args:
            entry: Request log entry
            **kwargs: Additional fields (request parameters)
        """
        fields = entry.to_dict()
        fields["latency"] = f"{entry.latency:.0f}ms" if entry.latency is not None else "N/A"
        fields.update(kwargs)
        level = "info" if entry.success else "warning"
        getattr(self, level)("Mock request", **fields)

    def log_performance(self, method: str, duration_ms: float) -> None:
        """Log a call duration.

        Args:
            method: Operation name
            duration_ms: Duration in milliseconds
        """
        self.info(
            f"Mock performance: {method}",
            method=method,
            duration_ms=round(duration_ms, 2),
            event="performance",
        )


def get_structured_logger(name: str, json_format: bool = True) -> StructuredLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name
        json_format: Whether to use JSON format

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name, json_format=json_format)
