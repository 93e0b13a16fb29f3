"""CLI command for rotating and splitting videos into segments."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from vsplit.cli.exit_codes import ExitCode
from vsplit.cli.output import echo_json, error_exit, stderr_echo
from vsplit.config.loader import ConfigError
from vsplit.config.models import DefaultsConfig, VsplitConfig
from vsplit.config.profiles import load_profile, merge_profile_with_defaults
from vsplit.core.exceptions import (
    ExternalExecutionError,
    ExternalToolMissingError,
    InvalidValueError,
    MissingInputError,
)
from vsplit.core.pipeline import validate_pattern, validate_segment_time, validate_trim
from vsplit.core.types import (
    EncodingParameters,
    OutcomeStatus,
    ReencodeMode,
    RotationPreference,
    SegmentConfig,
    TrimRange,
)
from vsplit.executor import FFmpegSegmentExecutor, require_tools
from vsplit.introspector import FFprobeRotationProbe
from vsplit.processing import BatchRunner, FileProcessor, resolve_worker_count

logger = logging.getLogger(__name__)


def _validate_workers(
    ctx: click.Context, param: click.Parameter, value: int | None
) -> int | None:
    """Reject --workers values below 1."""
    if value is not None and value < 1:
        raise click.BadParameter("must be at least 1")
    return value


def _pick(cli_value, default_value):
    return cli_value if cli_value is not None else default_value


def build_segment_config(
    defaults: DefaultsConfig,
    *,
    segment_time: float | None = None,
    rotate: str | None = None,
    reencode: str | None = None,
    vcodec: str | None = None,
    crf: int | None = None,
    preset: str | None = None,
    threads: int | None = None,
    pattern: str | None = None,
    start: str | None = None,
    end: str | None = None,
    dry_run: bool = False,
    overwrite: bool | None = None,
    timeout: float | None = None,
) -> SegmentConfig:
    """Merge CLI values over defaults into a validated SegmentConfig.

    Raises:
        InvalidValueError: If any value is rejected.
    """
    pattern = _pick(pattern, defaults.pattern)
    return SegmentConfig(
        segment_time=validate_segment_time(
            _pick(segment_time, defaults.segment_time)
        ),
        rotation=RotationPreference.parse(_pick(rotate, defaults.rotate)),
        reencode=ReencodeMode.parse(_pick(reencode, defaults.reencode)),
        encoding=EncodingParameters(
            video_codec=_pick(vcodec, defaults.vcodec),
            crf=_pick(crf, defaults.crf),
            preset=_pick(preset, defaults.preset),
            threads=_pick(threads, defaults.threads),
        ),
        pattern=validate_pattern(pattern) if pattern else None,
        trim=validate_trim(
            TrimRange(start=_pick(start, defaults.start), end=_pick(end, defaults.end))
        ),
        dry_run=dry_run,
        overwrite=_pick(overwrite, defaults.overwrite),
        timeout=_pick(timeout, defaults.timeout) or None,
    )


@click.command("split")
@click.option(
    "--input",
    "-i",
    "input_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to a single input video file.",
)
@click.option(
    "--input-dir",
    "-D",
    "input_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to batch process (recursive).",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (default: ./output).",
)
@click.option(
    "--segment-time",
    "-t",
    type=float,
    default=None,
    help="Segment length in seconds (default: 60).",
)
@click.option(
    "--rotate",
    default=None,
    metavar="0|90|180|270|auto",
    help="Rotation to apply; auto reads the rotate tag (default: 0).",
)
@click.option(
    "--reencode",
    default=None,
    metavar="auto|always|never",
    help="Re-encode mode; auto re-encodes only when rotating (default: auto).",
)
@click.option("--vcodec", default=None, help="Video codec when re-encoding (libx264).")
@click.option("--crf", type=int, default=None, help="CRF when re-encoding (23).")
@click.option("--preset", default=None, help="Encoder preset (medium).")
@click.option(
    "--pattern",
    default=None,
    help="Output filename pattern (default: <basename>_%03d.mp4).",
)
@click.option("--start", default=None, help="Start time (ffmpeg -ss), e.g. 00:00:10.")
@click.option("--end", default=None, help="End time (ffmpeg -to), e.g. 00:05:00.")
@click.option(
    "--threads", type=click.IntRange(min=0), default=None, help="Encoder threads."
)
@click.option(
    "--dry-run",
    "-n",
    is_flag=True,
    default=False,
    help="Print commands without executing.",
)
@click.option(
    "--overwrite/--no-overwrite",
    "-y",
    default=None,
    help="Overwrite existing output files.",
)
@click.option(
    "--workers",
    "-w",
    type=int,
    default=None,
    callback=_validate_workers,
    help="Files processed in parallel in batch mode (max: half CPU cores).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Kill ffmpeg after this many seconds per file (0 = no limit).",
)
@click.option(
    "--profile",
    default=None,
    help="Use named defaults from ~/.vsplit/profiles/<name>.yaml.",
)
@click.option(
    "--json",
    "-j",
    "json_output",
    is_flag=True,
    default=False,
    help="Print results as JSON (trace goes to stderr).",
)
@click.pass_context
def split_command(
    ctx: click.Context,
    input_file: Path | None,
    input_dir: Path | None,
    output_dir: Path | None,
    segment_time: float | None,
    rotate: str | None,
    reencode: str | None,
    vcodec: str | None,
    crf: int | None,
    preset: str | None,
    pattern: str | None,
    start: str | None,
    end: str | None,
    threads: int | None,
    dry_run: bool,
    overwrite: bool | None,
    workers: int | None,
    timeout: float | None,
    profile: str | None,
    json_output: bool,
) -> None:
    """Rotate and split videos into fixed-length segments.

    Provide exactly one of --input or --input-dir. Without rotation and with
    --reencode auto, streams are copied for speed.

    Examples:

        vsplit split -i input.mp4 -t 60 -o ./out

        vsplit split -i input.mp4 --rotate 180 -t 60 -o ./out

        vsplit split -D ./videos -t 60 -o ./out --rotate auto
    """
    if input_file is None and input_dir is None:
        error_exit(
            "Provide either --input <file> or --input-dir <dir>.",
            ExitCode.USAGE_ERROR,
            json_output,
        )
    if input_file is not None and input_dir is not None:
        error_exit(
            "Use only one of --input or --input-dir, not both.",
            ExitCode.USAGE_ERROR,
            json_output,
        )

    config: VsplitConfig = ctx.obj["config"]
    defaults = config.defaults
    if profile:
        try:
            defaults = merge_profile_with_defaults(load_profile(profile), defaults)
        except ConfigError as e:
            error_exit(str(e), ExitCode.INVALID_VALUE, json_output)

    try:
        segment_config = build_segment_config(
            defaults,
            segment_time=segment_time,
            rotate=rotate,
            reencode=reencode,
            vcodec=vcodec,
            crf=crf,
            preset=preset,
            threads=threads,
            pattern=pattern,
            start=start,
            end=end,
            dry_run=dry_run,
            overwrite=overwrite,
            timeout=timeout,
        )
    except InvalidValueError as e:
        error_exit(str(e), ExitCode.INVALID_VALUE, json_output)

    # Tools are only needed when work actually runs; auto rotation always probes
    needed: list[str] = [] if dry_run else ["ffmpeg", "ffprobe"]
    if segment_config.rotation is RotationPreference.AUTO and "ffprobe" not in needed:
        needed.append("ffprobe")
    try:
        tool_paths = require_tools(config.tools, tuple(needed))
    except ExternalToolMissingError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)

    probe = None
    if segment_config.rotation is RotationPreference.AUTO:
        probe = FFprobeRotationProbe(tool_paths["ffprobe"])

    processor = FileProcessor(
        segment_config,
        probe=probe,
        executor=FFmpegSegmentExecutor(timeout=segment_config.timeout),
        ffmpeg_path=tool_paths.get("ffmpeg", "ffmpeg"),
        emit=stderr_echo if json_output else click.echo,
    )
    output_root = _pick(output_dir, defaults.output_dir)

    if input_file is not None:
        _run_single(processor, input_file, output_root, json_output)
    else:
        assert input_dir is not None
        effective_workers = resolve_worker_count(workers, defaults.workers)
        _run_batch(processor, input_dir, output_root, effective_workers, json_output)


def _run_single(
    processor: FileProcessor, input_file: Path, output_dir: Path, json_output: bool
) -> None:
    try:
        outcome = processor.process_single(input_file, output_dir)
    except MissingInputError as e:
        error_exit(str(e), ExitCode.USAGE_ERROR, json_output)
    except InvalidValueError as e:
        error_exit(str(e), ExitCode.INVALID_VALUE, json_output)
    except ExternalExecutionError as e:
        error_exit(str(e), ExitCode.OPERATION_FAILED, json_output)
    except OSError as e:
        error_exit(
            f"Cannot create output directory {output_dir}: {e}",
            ExitCode.OPERATION_FAILED,
            json_output,
        )

    if json_output:
        echo_json({"status": "completed", "results": [outcome.to_dict()]})
    sys.exit(ExitCode.SUCCESS)


def _run_batch(
    processor: FileProcessor,
    input_dir: Path,
    output_root: Path,
    workers: int,
    json_output: bool,
) -> None:
    if not input_dir.is_dir():
        error_exit(
            f"Input directory not found: {input_dir}", ExitCode.USAGE_ERROR, json_output
        )

    runner = BatchRunner(processor, output_root, workers=workers)
    result = runner.run(input_dir)

    if json_output:
        echo_json(
            {
                "status": "completed" if result.failed == 0 else "failed",
                "root": str(input_dir),
                "workers": workers,
                "summary": {
                    "total": len(result.outcomes),
                    "succeeded": result.succeeded,
                    "failed": result.failed,
                    "skipped": result.skipped,
                },
                "results": [o.to_dict() for o in result.outcomes],
            }
        )
    elif not result.files:
        click.echo(f"No video files found under {input_dir}")
    else:
        for outcome in result.outcomes:
            if outcome.status is OutcomeStatus.FAILED:
                click.echo(f"[FAILED] {outcome.input_path}: {outcome.reason}", err=True)
        click.echo(
            f"Processed {len(result.outcomes)} file(s): {result.succeeded} ok, "
            f"{result.failed} failed, {result.skipped} skipped"
        )

    if result.failed:
        sys.exit(ExitCode.OPERATION_FAILED)
    sys.exit(ExitCode.SUCCESS)

