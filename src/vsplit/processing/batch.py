"""Batch processing of a directory tree.

Every video under the root is processed into its own output directory that
mirrors the file's relative path (``sub/dir/clip.MP4`` ->
``<output_root>/sub/dir/clip``). Failures are isolated per file: the sweep
always yields one outcome per discovered file, in discovery order.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from vsplit.core.types import VIDEO_EXTENSIONS, FileOutcome, OutcomeStatus
from vsplit.logging import worker_context
from vsplit.processing.file_processor import FileProcessor

logger = logging.getLogger(__name__)


def get_max_workers() -> int:
    """Calculate maximum worker count (half CPU cores, minimum 1)."""
    cpu_count = os.cpu_count() or 2
    return max(1, cpu_count // 2)


def resolve_worker_count(requested: int | None, config_default: int) -> int:
    """Resolve effective worker count with capping.

    Args:
        requested: Worker count from CLI (None if not specified).
        config_default: Default worker count from configuration.

    Returns:
        Effective worker count, at least 1 and at most get_max_workers().
    """
    max_workers = get_max_workers()
    effective = requested if requested is not None else config_default

    if effective > max_workers:
        logger.warning(
            "Requested %d workers exceeds cap of %d (half of %s cores). Using %d.",
            effective,
            max_workers,
            os.cpu_count(),
            max_workers,
        )
        return max_workers

    return max(1, effective)


def discover_videos(root: Path) -> list[Path]:
    """Find video files under root, recursively.

    Extensions are matched case-insensitively against VIDEO_EXTENSIONS.
    Results are ordered by relative path so discovery order is stable.
    """
    found = [
        path
        for path in root.rglob("*")
        if path.suffix.lower() in VIDEO_EXTENSIONS and path.is_file()
    ]
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def mirrored_output_dir(root: Path, file_path: Path, output_root: Path) -> Path:
    """Per-file output directory mirroring the file's path under root.

    The file's relative path with its extension stripped becomes a
    subdirectory of output_root.
    """
    relative = file_path.relative_to(root)
    return output_root / relative.with_suffix("")


@dataclass
class BatchResult:
    """Outcomes of one batch run, in discovery order."""

    root: Path
    files: list[Path] = field(default_factory=list)
    outcomes: list[FileOutcome] = field(default_factory=list)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)


class BatchRunner:
    """Applies a FileProcessor to every video under a directory.

    Runs sequentially with one worker, otherwise on a bounded thread pool.
    Setting the cancel event (or Ctrl+C) stops scheduling new files; files
    that never started are reported as skipped.
    """

    def __init__(
        self,
        processor: FileProcessor,
        output_root: Path,
        workers: int = 1,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.processor = processor
        self.output_root = output_root
        self.workers = max(1, workers)
        self.cancel_event = cancel_event or processor.cancel_event or threading.Event()
        if processor.cancel_event is None:
            processor.cancel_event = self.cancel_event

    def run(self, root: Path) -> BatchResult:
        """Process every video under root.

        Args:
            root: Directory to sweep.

        Returns:
            BatchResult with exactly one outcome per discovered file.
        """
        files = discover_videos(root)
        logger.info("Discovered %d video file(s) under %s", len(files), root)
        self._warn_shared_output_dirs(root, files)

        if self.workers == 1 or len(files) <= 1:
            outcomes = self._run_sequential(root, files)
        else:
            outcomes = self._run_parallel(root, files)

        return BatchResult(root=root, files=files, outcomes=outcomes)

    def _warn_shared_output_dirs(self, root: Path, files: list[Path]) -> None:
        """Log inputs that differ only by extension and so share a directory."""
        claimed: dict[Path, Path] = {}
        for file_path in files:
            output_dir = mirrored_output_dir(root, file_path, self.output_root)
            first = claimed.setdefault(output_dir, file_path)
            if first is not file_path:
                logger.warning(
                    "%s and %s both write segments to %s",
                    first,
                    file_path,
                    output_dir,
                )

    def _process_one(
        self, root: Path, index: int, file_path: Path, id_width: int
    ) -> FileOutcome:
        worker_id = f"{(index % self.workers) + 1:02d}"
        file_id = f"F{index + 1:0{id_width}d}"
        output_dir = mirrored_output_dir(root, file_path, self.output_root)

        with worker_context(worker_id, file_id, file_path):
            if self.cancel_event.is_set():
                return _cancelled(file_path, output_dir)
            try:
                return self.processor.process(file_path, output_dir)
            except Exception as e:
                logger.exception("Unexpected error processing %s", file_path)
                return FileOutcome(
                    input_path=file_path,
                    status=OutcomeStatus.FAILED,
                    output_dir=output_dir,
                    reason=f"unexpected error: {e}",
                )

    def _run_sequential(self, root: Path, files: list[Path]) -> list[FileOutcome]:
        id_width = len(str(len(files)))
        outcomes: list[FileOutcome] = []
        try:
            for index, file_path in enumerate(files):
                outcomes.append(self._process_one(root, index, file_path, id_width))
        except KeyboardInterrupt:
            self.cancel_event.set()
            logger.warning("Interrupted, skipping remaining files")
        for file_path in files[len(outcomes) :]:
            outcomes.append(
                _cancelled(
                    file_path, mirrored_output_dir(root, file_path, self.output_root)
                )
            )
        return outcomes

    def _run_parallel(self, root: Path, files: list[Path]) -> list[FileOutcome]:
        id_width = len(str(len(files)))
        results: dict[int, FileOutcome] = {}

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures: dict[Future[FileOutcome], int] = {
                pool.submit(self._process_one, root, index, file_path, id_width): index
                for index, file_path in enumerate(files)
            }
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            except KeyboardInterrupt:
                self.cancel_event.set()
                logger.warning("Interrupted, waiting for active workers to stop")
                pool.shutdown(wait=True, cancel_futures=True)
                for future, index in futures.items():
                    if index in results or future.cancelled():
                        continue
                    if future.done():
                        results[index] = future.result()

        # Reorder into discovery order; never-started files count as cancelled
        return [
            results.get(index)
            or _cancelled(
                file_path, mirrored_output_dir(root, file_path, self.output_root)
            )
            for index, file_path in enumerate(files)
        ]


def _cancelled(file_path: Path, output_dir: Path) -> FileOutcome:
    return FileOutcome(
        input_path=file_path,
        status=OutcomeStatus.SKIPPED,
        output_dir=output_dir,
        reason="cancelled",
    )
