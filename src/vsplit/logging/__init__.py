"""Structured logging module for vsplit.

Provides configurable logging with JSON format support and file rotation,
plus worker context for parallel batch processing.
"""

from vsplit.logging.config import configure_logging
from vsplit.logging.context import (
    WorkerContextFilter,
    get_worker_context,
    worker_context,
)
from vsplit.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "WorkerContextFilter",
    "configure_logging",
    "get_worker_context",
    "worker_context",
]
