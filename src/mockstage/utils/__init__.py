"""
mockstage Utilities Module.

This module provides shared helpers used by the mock service facades:

- Bounded request logs
- Rolling performance windows and summaries
- JSON-formatted structured logging
"""

from mockstage.utils.metrics import (
    MAX_PERFORMANCE_SAMPLES,
    MAX_REQUEST_LOGS,
    PerformanceSummary,
    PerformanceTracker,
    RequestLog,
    RequestLogEntry,
    StructuredLogger,
    get_structured_logger,
)

__all__ = [
    "MAX_PERFORMANCE_SAMPLES",
    "MAX_REQUEST_LOGS",
    "PerformanceSummary",
    "PerformanceTracker",
    "RequestLog",
    "RequestLogEntry",
    "StructuredLogger",
    "get_structured_logger",
]
