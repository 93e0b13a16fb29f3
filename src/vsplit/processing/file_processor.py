"""Per-file orchestration: rotation -> re-encode policy -> plan -> execute.

FileProcessor.process() never raises for file-local problems; it returns a
FileOutcome so batch runs can continue. process_single() raises the typed
errors instead so the CLI can map them to exit codes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

import click

from vsplit.core.exceptions import (
    ExternalExecutionError,
    InvalidValueError,
    MissingInputError,
)
from vsplit.core.pipeline import build_output_spec, build_plan
from vsplit.core.reencode import decide_reencode, transform_dropped
from vsplit.core.rotation import resolve_rotation
from vsplit.core.types import FileOutcome, OutcomeStatus, Plan, SegmentConfig
from vsplit.executor.ffmpeg import FFmpegSegmentExecutor
from vsplit.executor.interface import Executor
from vsplit.introspector.interface import RotationProbe

logger = logging.getLogger(__name__)

Emitter = Callable[..., None]


class FileProcessor:
    """Builds and runs the segment plan for individual files.

    One processor is shared by all files of a run; it holds no per-file
    state, so it is safe to call from several worker threads.
    """

    def __init__(
        self,
        config: SegmentConfig,
        probe: RotationProbe | None = None,
        executor: Executor | None = None,
        ffmpeg_path: str | Path = "ffmpeg",
        emit: Emitter = click.echo,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            config: Immutable run configuration.
            probe: Metadata probe used for auto rotation.
            executor: Plan executor (default: FFmpegSegmentExecutor).
            ffmpeg_path: FFmpeg executable written into plans.
            emit: Sink for the human-readable trace (default click.echo).
            cancel_event: Shared event that aborts running ffmpeg processes.
        """
        self.config = config
        self.probe = probe
        self.executor = executor or FFmpegSegmentExecutor(timeout=config.timeout)
        self.ffmpeg_path = str(ffmpeg_path)
        self.emit = emit
        self.cancel_event = cancel_event
        self._emit_lock = threading.Lock()

    def plan_file(self, input_path: Path, output_dir: Path) -> Plan:
        """Resolve rotation and re-encode decision and build the Plan.

        Raises:
            InvalidRotationError, InvalidReencodeModeError,
            InvalidPatternError, InvalidTrimError, InvalidSegmentTimeError.
        """
        config = self.config
        transform = resolve_rotation(config.rotation, self.probe, input_path)
        decision = decide_reencode(config.reencode, transform)

        if transform_dropped(decision, transform):
            logger.warning(
                "Rotation %s requested for %s but re-encode is 'never'; "
                "stream copy cannot apply it, output will not be rotated",
                transform.degrees,
                input_path,
            )

        output = build_output_spec(
            input_path, output_dir, config.pattern, config.overwrite
        )
        return build_plan(
            input_path,
            transform,
            decision,
            output,
            config.segment_time,
            trim=config.trim,
            encoding=config.encoding,
            ffmpeg_path=self.ffmpeg_path,
        )

    def process(self, input_path: Path, output_dir: Path) -> FileOutcome:
        """Process one file, reporting problems as the outcome.

        Args:
            input_path: Source video file.
            output_dir: Directory receiving the segments (created if needed).

        Returns:
            FileOutcome with status SKIPPED, DRY_RUN, EXECUTED or FAILED.
        """
        if not input_path.is_file():
            logger.warning("Skipping missing file: %s", input_path)
            self.emit(f"Skipping missing file: {input_path}", err=True)
            return FileOutcome(
                input_path=input_path,
                status=OutcomeStatus.SKIPPED,
                reason="file not found",
            )

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create output directory %s: %s", output_dir, e)
            return FileOutcome(
                input_path=input_path,
                status=OutcomeStatus.FAILED,
                output_dir=output_dir,
                reason=f"cannot create output directory: {e}",
            )

        try:
            plan = self.plan_file(input_path, output_dir)
        except InvalidValueError as e:
            logger.error("Cannot plan %s: %s", input_path, e)
            self.emit(f"Error: {e}", err=True)
            return FileOutcome(
                input_path=input_path,
                status=OutcomeStatus.FAILED,
                output_dir=output_dir,
                reason=str(e),
            )

        return self._run(plan, output_dir)

    def process_single(self, input_path: Path, output_dir: Path) -> FileOutcome:
        """Process one file in single-file mode.

        Raises:
            MissingInputError: If input_path does not exist.
            InvalidValueError: If the plan cannot be built.
            ExternalExecutionError: If ffmpeg exits non-zero.
            OSError: If the output directory cannot be created.
        """
        if not input_path.is_file():
            raise MissingInputError(input_path)

        output_dir.mkdir(parents=True, exist_ok=True)
        plan = self.plan_file(input_path, output_dir)
        outcome = self._run(plan, output_dir)
        if outcome.status is OutcomeStatus.FAILED:
            raise ExternalExecutionError(
                input_path, outcome.return_code or 1, outcome.reason or ""
            )
        return outcome

    def _run(self, plan: Plan, output_dir: Path) -> FileOutcome:
        with self._emit_lock:
            self.emit(f"Processing: {plan.input_path}")
            self.emit(f"Output to: {plan.output_template}")
            self.emit(f"Command: {plan.command_line}")

        if self.config.dry_run:
            return FileOutcome(
                input_path=plan.input_path,
                status=OutcomeStatus.DRY_RUN,
                output_dir=output_dir,
                plan=plan,
            )

        result = self.executor.execute(plan, cancel_event=self.cancel_event)
        if result.success:
            logger.info("Segmented %s into %s", plan.input_path, output_dir)
            return FileOutcome(
                input_path=plan.input_path,
                status=OutcomeStatus.EXECUTED,
                output_dir=output_dir,
                plan=plan,
                return_code=result.return_code,
            )

        reason = result.message
        if result.stderr_tail:
            reason = f"{reason}: {result.stderr_tail[-1]}"
        logger.error("ffmpeg failed for %s: %s", plan.input_path, reason)
        return FileOutcome(
            input_path=plan.input_path,
            status=OutcomeStatus.FAILED,
            output_dir=output_dir,
            plan=plan,
            reason=reason,
            return_code=result.return_code,
        )
