"""FFmpeg executor for segment plans.

Runs a Plan's argument list, reading stderr on a separate thread so the
process can be killed on timeout or when a cancel event is set.
"""

from __future__ import annotations

import logging
import queue
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections import deque

from vsplit.core.types import Plan
from vsplit.executor.interface import ExecutorResult

logger = logging.getLogger(__name__)


class FFmpegSegmentExecutor:
    """Executes segment Plans with ffmpeg.

    Attributes:
        timeout: Seconds before the process is killed (None = no limit).
        tail_lines: Number of stderr lines kept for failure messages.
    """

    POLL_INTERVAL: float = 0.5
    STDERR_DRAIN_TIMEOUT: float = 5.0

    def __init__(self, timeout: float | None = None, tail_lines: int = 20) -> None:
        self.timeout = timeout
        self.tail_lines = tail_lines

    def execute(
        self, plan: Plan, cancel_event: threading.Event | None = None
    ) -> ExecutorResult:
        """Run the plan.

        Args:
            plan: Segment plan to execute.
            cancel_event: When set, the running ffmpeg is killed.

        Returns:
            ExecutorResult with the exit status and stderr tail.
        """
        cmd = plan.to_args()
        logger.debug(
            "Running ffmpeg: %s",
            plan.command_line,
            extra={"input": str(plan.input_path), "decision": plan.decision.value},
        )

        try:
            process = subprocess.Popen(  # nosec B603 - args built by build_plan
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            return ExecutorResult(
                success=False,
                return_code=127,
                message=f"Could not start ffmpeg: {e}",
            )

        tail: deque[str] = deque(maxlen=self.tail_lines)
        lines: queue.Queue[str | None] = queue.Queue()

        def read_stderr() -> None:
            try:
                assert process.stderr is not None
                for line in process.stderr:
                    lines.put(line)
            except (ValueError, OSError) as e:
                logger.debug("Stderr reader stopped: %s", e)
            finally:
                lines.put(None)

        reader = threading.Thread(target=read_stderr, daemon=True)
        reader.start()

        start = time.monotonic()
        stop_reason: str | None = None
        finished_reading = False

        try:
            while process.poll() is None:
                if cancel_event is not None and cancel_event.is_set():
                    stop_reason = "cancelled"
                    break
                elapsed = time.monotonic() - start
                if self.timeout is not None and elapsed >= self.timeout:
                    stop_reason = f"timed out after {self.timeout:g}s"
                    break
                if finished_reading:
                    time.sleep(self.POLL_INTERVAL)
                    continue
                try:
                    line = lines.get(timeout=self.POLL_INTERVAL)
                except queue.Empty:
                    continue
                if line is None:
                    finished_reading = True
                    continue
                self._record(line, tail)
        except BaseException:
            logger.warning("Interrupted, killing ffmpeg for %s", plan.input_path)
            process.kill()
            process.wait()
            raise

        if stop_reason is not None:
            logger.warning("ffmpeg %s for %s", stop_reason, plan.input_path)
            process.kill()
            process.wait()
            reader.join(timeout=self.STDERR_DRAIN_TIMEOUT)
            return ExecutorResult(
                success=False,
                return_code=-1,
                message=f"ffmpeg {stop_reason}",
                stderr_tail=tuple(tail),
            )

        process.wait()
        if not finished_reading:
            reader.join(timeout=self.STDERR_DRAIN_TIMEOUT)
        while True:
            try:
                line = lines.get_nowait()
            except queue.Empty:
                break
            if line is None:
                break
            self._record(line, tail)

        if process.returncode == 0:
            return ExecutorResult(
                success=True, return_code=0, message="ok", stderr_tail=tuple(tail)
            )
        return ExecutorResult(
            success=False,
            return_code=process.returncode,
            message=f"ffmpeg exited with status {process.returncode}",
            stderr_tail=tuple(tail),
        )

    @staticmethod
    def _record(line: str, tail: deque[str]) -> None:
        line = line.rstrip()
        if line:
            tail.append(line)
            logger.debug("ffmpeg: %s", line)
