"""Tests for the `vsplit split` command."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from vsplit.cli import main
from vsplit.cli.exit_codes import ExitCode
from vsplit.config.models import DefaultsConfig, VsplitConfig
from vsplit.executor import ExecutorResult
from vsplit.introspector import StubRotationProbe

TOOLS = {"ffmpeg": Path("/usr/bin/ffmpeg"), "ffprobe": Path("/usr/bin/ffprobe")}


class FakeExecutor:
    """Stands in for FFmpegSegmentExecutor; fails for selected names."""

    instances: list["FakeExecutor"] = []

    def __init__(self, timeout=None, fail_names=()) -> None:
        self.timeout = timeout
        self.fail_names = set(fail_names)
        self.plans = []
        FakeExecutor.instances.append(self)

    def execute(self, plan, cancel_event=None):
        self.plans.append(plan)
        if plan.input_path.name in self.fail_names:
            return ExecutorResult(
                success=False,
                return_code=1,
                message="ffmpeg exited with status 1",
                stderr_tail=("moov atom not found",),
            )
        return ExecutorResult(success=True, return_code=0, message="ok")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(runner: CliRunner):
    """Invoke the CLI with an injected default config."""

    def _invoke(args, config: VsplitConfig | None = None):
        return runner.invoke(main, args, obj={"config": config or VsplitConfig()})

    return _invoke


@pytest.fixture
def fake_tools():
    """Pretend ffmpeg/ffprobe exist and capture executions."""
    FakeExecutor.instances.clear()
    with (
        patch("vsplit.cli.split.require_tools", return_value=TOOLS) as mock_require,
        patch("vsplit.cli.split.FFmpegSegmentExecutor", FakeExecutor),
    ):
        yield mock_require


def _command_lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if line.startswith("Command: ")]


class TestUsageErrors:
    """Input selection and value validation."""

    def test_requires_an_input(self, invoke) -> None:
        result = invoke(["split"])
        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "Provide either --input" in result.stderr

    def test_input_and_dir_are_exclusive(self, invoke, video_file, tmp_path) -> None:
        result = invoke(["split", "-i", str(video_file), "-D", str(tmp_path)])
        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "only one of --input or --input-dir" in result.stderr

    def test_invalid_rotation(self, invoke, video_file) -> None:
        result = invoke(["split", "-i", str(video_file), "--rotate", "45"])
        assert result.exit_code == ExitCode.INVALID_VALUE
        assert "Invalid rotation value '45'" in result.stderr

    def test_invalid_reencode(self, invoke, video_file) -> None:
        result = invoke(["split", "-i", str(video_file), "--reencode", "maybe"])
        assert result.exit_code == ExitCode.INVALID_VALUE
        assert "Invalid re-encode mode 'maybe'" in result.stderr

    def test_invalid_pattern(self, invoke, video_file) -> None:
        result = invoke(["split", "-i", str(video_file), "--pattern", "out.mp4"])
        assert result.exit_code == ExitCode.INVALID_VALUE

    def test_invalid_trim(self, invoke, video_file) -> None:
        result = invoke(["split", "-i", str(video_file), "--start", "soon"])
        assert result.exit_code == ExitCode.INVALID_VALUE

    def test_invalid_segment_time(self, invoke, video_file) -> None:
        result = invoke(["split", "-i", str(video_file), "-t", "0"])
        assert result.exit_code == ExitCode.INVALID_VALUE

    def test_missing_input_file(self, invoke, tmp_path) -> None:
        result = invoke(
            ["split", "-i", str(tmp_path / "gone.mp4"), "-o", str(tmp_path), "-n"]
        )
        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "Input file not found" in result.stderr

    def test_missing_input_dir(self, invoke, tmp_path) -> None:
        result = invoke(["split", "-D", str(tmp_path / "nope"), "-n"])
        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "Input directory not found" in result.stderr


class TestToolChecks:
    """External tools are checked before any file is touched."""

    def test_missing_tools(self, invoke, video_file, tmp_path) -> None:
        out = tmp_path / "out"
        with patch("vsplit.executor.interface.shutil.which", return_value=None):
            result = invoke(["split", "-i", str(video_file), "-o", str(out)])
        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE
        assert "ffmpeg, ffprobe" in result.stderr
        assert not out.exists()

    def test_dry_run_needs_no_tools(self, invoke, video_file, tmp_path) -> None:
        with patch("vsplit.executor.interface.shutil.which", return_value=None):
            result = invoke(
                ["split", "-i", str(video_file), "-o", str(tmp_path / "o"), "-n"]
            )
        assert result.exit_code == ExitCode.SUCCESS

    def test_dry_run_auto_rotation_needs_ffprobe(self, invoke, video_file) -> None:
        with patch("vsplit.executor.interface.shutil.which", return_value=None):
            result = invoke(["split", "-i", str(video_file), "-n", "--rotate", "auto"])
        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE
        assert "ffprobe" in result.stderr


class TestSingleFile:
    """Single-file mode."""

    def test_dry_run_prints_trace(self, invoke, video_file, tmp_path) -> None:
        out = tmp_path / "out"
        result = invoke(
            ["split", "-i", str(video_file), "-o", str(out), "-t", "30", "--dry-run"]
        )

        assert result.exit_code == ExitCode.SUCCESS
        lines = result.stdout.splitlines()
        assert lines[0] == f"Processing: {video_file}"
        assert lines[1] == f"Output to: {out / 'input_%03d.mp4'}"
        assert lines[2].startswith("Command: ffmpeg -hide_banner -loglevel info -n")
        assert "-segment_time 30 -reset_timestamps 1 -c copy" in lines[2]
        assert out.is_dir()

    def test_rotation_reencodes(self, invoke, video_file, tmp_path) -> None:
        result = invoke(
            [
                "split",
                "-i",
                str(video_file),
                "-o",
                str(tmp_path / "out"),
                "--rotate",
                "180",
                "--crf",
                "18",
                "--preset",
                "slow",
                "--threads",
                "4",
                "-y",
                "-n",
            ]
        )

        assert result.exit_code == ExitCode.SUCCESS
        (command,) = _command_lines(result.stdout)
        assert " -y " in command
        assert "-vf transpose=2,transpose=2" in command
        assert "-c:v libx264 -crf 18 -preset slow -c:a copy -threads 4" in command

    def test_trim(self, invoke, video_file, tmp_path) -> None:
        result = invoke(
            [
                "split",
                "-i",
                str(video_file),
                "-o",
                str(tmp_path / "out"),
                "--start",
                "00:00:10",
                "--end",
                "00:01:00",
                "-n",
            ]
        )
        (command,) = _command_lines(result.stdout)
        assert f"-ss 00:00:10 -i {video_file} -to 00:01:00" in command

    def test_executes_with_resolved_tools(
        self, invoke, fake_tools, video_file, tmp_path
    ) -> None:
        result = invoke(
            ["split", "-i", str(video_file), "-o", str(tmp_path), "--timeout", "90"]
        )

        assert result.exit_code == ExitCode.SUCCESS
        fake_tools.assert_called_once()
        assert fake_tools.call_args.args[1] == ("ffmpeg", "ffprobe")
        (executor,) = FakeExecutor.instances
        assert executor.timeout == 90.0
        assert executor.plans[0].to_args()[0] == "/usr/bin/ffmpeg"

    def test_zero_timeout_disables_config_limit(
        self, invoke, fake_tools, video_file, tmp_path
    ) -> None:
        config = VsplitConfig(defaults=DefaultsConfig(timeout=300))
        result = invoke(
            ["split", "-i", str(video_file), "-o", str(tmp_path), "--timeout", "0"],
            config,
        )

        assert result.exit_code == ExitCode.SUCCESS
        (executor,) = FakeExecutor.instances
        assert executor.timeout is None

    def test_ffmpeg_failure(self, invoke, fake_tools, video_file, tmp_path) -> None:
        def failing(timeout=None):
            return FakeExecutor(timeout, fail_names={"input.mp4"})

        with patch("vsplit.cli.split.FFmpegSegmentExecutor", failing):
            result = invoke(["split", "-i", str(video_file), "-o", str(tmp_path)])

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert "moov atom not found" in result.stderr

    def test_auto_rotation_uses_probe(self, invoke, video_file, tmp_path) -> None:
        probe = StubRotationProbe(tags={"input.mp4": "90"})
        with (
            patch("vsplit.cli.split.require_tools", return_value=TOOLS),
            patch("vsplit.cli.split.FFprobeRotationProbe", return_value=probe),
        ):
            result = invoke(
                [
                    "split",
                    "-i",
                    str(video_file),
                    "-o",
                    str(tmp_path),
                    "--rotate",
                    "auto",
                    "-n",
                ]
            )

        assert result.exit_code == ExitCode.SUCCESS
        assert "-vf transpose=1" in result.stdout
        assert probe.calls == [video_file]

    def test_never_with_rotation_copies(self, invoke, video_file, tmp_path) -> None:
        result = invoke(
            [
                "split",
                "-i",
                str(video_file),
                "-o",
                str(tmp_path),
                "--rotate",
                "90",
                "--reencode",
                "never",
                "-n",
            ]
        )
        assert result.exit_code == ExitCode.SUCCESS
        (command,) = _command_lines(result.stdout)
        assert "-vf" not in command
        assert "-c copy" in command

    def test_json_output(self, invoke, video_file, tmp_path) -> None:
        result = invoke(
            ["split", "-i", str(video_file), "-o", str(tmp_path), "-n", "--json"]
        )

        assert result.exit_code == ExitCode.SUCCESS
        data = json.loads(result.stdout)
        assert data["status"] == "completed"
        (entry,) = data["results"]
        assert entry["status"] == "dry_run"
        assert entry["plan"]["decision"] == "stream_copy"
        assert "Processing:" in result.stderr

    def test_json_error(self, invoke, video_file) -> None:
        result = invoke(["split", "-i", str(video_file), "--rotate", "7", "--json"])
        assert result.exit_code == ExitCode.INVALID_VALUE
        error = json.loads(result.stderr)
        assert error["error"]["code"] == "INVALID_VALUE"


class TestConfigLayering:
    """Config defaults, profiles and CLI flags."""

    def test_config_defaults_apply(self, invoke, video_file, tmp_path) -> None:
        config = VsplitConfig(
            defaults=DefaultsConfig(segment_time=15, output_dir=tmp_path / "cfg")
        )
        result = invoke(["split", "-i", str(video_file), "-n"], config)

        assert result.exit_code == ExitCode.SUCCESS
        assert "-segment_time 15 " in result.stdout
        assert str(tmp_path / "cfg") in result.stdout

    def test_cli_overrides_config(self, invoke, video_file, tmp_path) -> None:
        config = VsplitConfig(defaults=DefaultsConfig(segment_time=15, overwrite=True))
        result = invoke(
            [
                "split",
                "-i",
                str(video_file),
                "-o",
                str(tmp_path),
                "-t",
                "5",
                "--no-overwrite",
                "-n",
            ],
            config,
        )
        (command,) = _command_lines(result.stdout)
        assert "-segment_time 5 " in command
        assert " -n " in command

    def test_profile(self, invoke, video_file, tmp_path, isolated_data_dir) -> None:
        profiles = isolated_data_dir / "profiles"
        profiles.mkdir(parents=True)
        (profiles / "phone.yaml").write_text(
            "defaults:\n  rotate: 270\n  segment_time: 20\n  vcodec: libx265\n"
        )
        result = invoke(
            [
                "split",
                "-i",
                str(video_file),
                "-o",
                str(tmp_path),
                "--profile",
                "phone",
                "-t",
                "10",
                "-n",
            ]
        )

        assert result.exit_code == ExitCode.SUCCESS
        (command,) = _command_lines(result.stdout)
        assert "-vf transpose=2 " in command
        assert "-segment_time 10 " in command
        assert "-c:v libx265" in command

    def test_unknown_profile(self, invoke, video_file) -> None:
        result = invoke(["split", "-i", str(video_file), "--profile", "nope", "-n"])
        assert result.exit_code == ExitCode.INVALID_VALUE
        assert "Profile not found: nope" in result.stderr


class TestBatch:
    """Directory mode."""

    def test_dry_run_summary(self, invoke, video_tree, tmp_path) -> None:
        out = tmp_path / "out"
        result = invoke(["split", "-D", str(video_tree), "-o", str(out), "-n"])

        assert result.exit_code == ExitCode.SUCCESS
        assert len(_command_lines(result.stdout)) == 4
        assert "Processed 4 file(s): 4 ok, 0 failed, 0 skipped" in result.stdout
        assert str(out / "sub" / "dir" / "clip" / "clip_%03d.mp4") in result.stdout

    def test_failure_sets_exit_code(
        self, invoke, fake_tools, video_tree, tmp_path
    ) -> None:
        def failing(timeout=None):
            return FakeExecutor(timeout, fail_names={"b.mov"})

        with patch("vsplit.cli.split.FFmpegSegmentExecutor", failing):
            result = invoke(["split", "-D", str(video_tree), "-o", str(tmp_path)])

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert "Processed 4 file(s): 3 ok, 1 failed, 0 skipped" in result.stdout
        assert "[FAILED]" in result.stderr
        assert len(FakeExecutor.instances[0].plans) == 4

    def test_empty_directory(self, invoke, tmp_path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        result = invoke(["split", "-D", str(empty), "-n"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "No video files found" in result.stdout

    def test_json_summary(self, invoke, video_tree, tmp_path) -> None:
        result = invoke(
            ["split", "-D", str(video_tree), "-o", str(tmp_path), "-n", "-j"]
        )
        data = json.loads(result.stdout)
        assert data["summary"] == {
            "total": 4,
            "succeeded": 4,
            "failed": 0,
            "skipped": 0,
        }
        assert [r["status"] for r in data["results"]] == ["dry_run"] * 4

    def test_workers_capped(self, invoke, video_tree, tmp_path) -> None:
        with patch("vsplit.processing.batch.os.cpu_count", return_value=2):
            result = invoke(
                ["split", "-D", str(video_tree), "-o", str(tmp_path)]
                + ["-n", "-j", "-w", "8"]
            )
        assert json.loads(result.stdout)["workers"] == 1

    def test_workers_must_be_positive(self, invoke, video_tree) -> None:
        result = invoke(["split", "-D", str(video_tree), "-w", "0", "-n"])
        assert result.exit_code != ExitCode.SUCCESS
        assert "must be at least 1" in result.stderr
