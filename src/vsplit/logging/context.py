"""Worker context for structured logging.

Batch workers tag their log records with a worker slot and file id using
contextvars, so parallel output reads like ``[W02:F007] ...``.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_worker_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "worker_id", default=None
)
_file_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def get_worker_context() -> tuple[str | None, str | None, str | None]:
    """Return (worker_id, file_id, file_path); any may be None."""
    return _worker_id.get(), _file_id.get(), _file_path.get()


@contextmanager
def worker_context(
    worker_id: str,
    file_id: str | None = None,
    file_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with worker and file ids.

    The previous context is restored on exit.

    Example:
        with worker_context("01", "F001", "/videos/clip.mp4"):
            logger.info("Processing file")
    """
    tokens = (
        _worker_id.set(worker_id),
        _file_id.set(file_id),
        _file_path.set(str(file_path) if file_path is not None else None),
    )
    try:
        yield
    finally:
        _file_path.reset(tokens[2])
        _file_id.reset(tokens[1])
        _worker_id.reset(tokens[0])


class WorkerContextFilter(logging.Filter):
    """Logging filter that injects worker context into log records.

    Adds worker_id, file_id and file_path for JSON output and a compact
    worker_tag ("[W01:F001] ", "[W01] " or "") for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        worker_id, file_id, file_path = get_worker_context()

        record.worker_id = worker_id
        record.file_id = file_id
        record.file_path = file_path

        if worker_id and file_id:
            record.worker_tag = f"[W{worker_id}:{file_id}] "
        elif worker_id:
            record.worker_tag = f"[W{worker_id}] "
        else:
            record.worker_tag = ""

        return True
