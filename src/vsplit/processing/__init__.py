"""File and batch processing built on the core planning functions."""

from vsplit.processing.batch import (
    BatchResult,
    BatchRunner,
    discover_videos,
    get_max_workers,
    mirrored_output_dir,
    resolve_worker_count,
)
from vsplit.processing.file_processor import FileProcessor

__all__ = [
    "BatchResult",
    "BatchRunner",
    "FileProcessor",
    "discover_videos",
    "get_max_workers",
    "mirrored_output_dir",
    "resolve_worker_count",
]
