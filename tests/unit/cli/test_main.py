"""Tests for the CLI group, exit codes and the console entry point."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from vsplit import __version__
from vsplit.cli import main, run
from vsplit.cli.exit_codes import ExitCode
from vsplit.logging import JSONFormatter


class TestExitCode:
    """Tests for ExitCode enum."""

    def test_values(self) -> None:
        assert ExitCode.SUCCESS == 0
        assert ExitCode.USAGE_ERROR == 1
        assert ExitCode.INVALID_VALUE == 2
        assert ExitCode.OPERATION_FAILED == 3
        assert ExitCode.TOOL_NOT_AVAILABLE == 127

    def test_exit_codes_are_unique(self) -> None:
        values = [int(code) for code in ExitCode]
        assert len(values) == len(set(values))


class TestMainGroup:
    """Tests for the top-level group."""

    def test_no_command_shows_help(self) -> None:
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 0
        assert "split" in result.output
        assert "doctor" in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_split_help(self) -> None:
        result = CliRunner().invoke(main, ["split", "--help"])
        assert result.exit_code == 0
        assert "--segment-time" in result.output
        assert "--rotate" in result.output

    def test_loads_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "c.toml"
        config.write_text("[defaults]\nsegment_time = 12\n")
        video = tmp_path / "v.mp4"
        video.touch()

        result = CliRunner().invoke(
            main,
            ["--config", str(config), "split", "-i", str(video), "-o", str(tmp_path)]
            + ["-n"],
        )
        assert result.exit_code == 0
        assert "-segment_time 12 " in result.stdout

    def test_log_options_override_config(self, tmp_path: Path) -> None:
        config = tmp_path / "c.toml"
        config.write_text('[logging]\nlevel = "error"\nformat = "text"\n')
        log_file = tmp_path / "vsplit.log"
        tools = {"ffmpeg": Path("/bin/ffmpeg"), "ffprobe": Path("/bin/ffprobe")}

        with patch("vsplit.cli.doctor.check_tool_availability", return_value=tools):
            result = CliRunner().invoke(
                main,
                ["--config", str(config), "--log-level", "debug", "--log-json"]
                + ["--log-file", str(log_file), "doctor"],
            )

        assert result.exit_code == 0
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0], RotatingFileHandler)
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_config_log_level_without_override(self, tmp_path: Path) -> None:
        config = tmp_path / "c.toml"
        config.write_text('[logging]\nlevel = "info"\n')
        tools = {"ffmpeg": Path("/bin/ffmpeg"), "ffprobe": Path("/bin/ffprobe")}

        with patch("vsplit.cli.doctor.check_tool_availability", return_value=tools):
            result = CliRunner().invoke(main, ["--config", str(config), "doctor"])

        assert result.exit_code == 0
        assert logging.getLogger().level == logging.INFO

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "c.toml"
        config.write_text("[defaults]\nrotate = 45\n")
        result = CliRunner().invoke(main, ["--config", str(config), "doctor"])
        assert result.exit_code == ExitCode.INVALID_VALUE
        assert "Invalid rotation value" in result.stderr


class TestRun:
    """Tests for the console script entry point."""

    def _run(self, monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
        monkeypatch.setattr(sys, "argv", ["vsplit", *args])
        with pytest.raises(SystemExit) as exc_info:
            run()
        return exc_info.value.code

    def test_unknown_option_is_usage_error(self, monkeypatch) -> None:
        assert self._run(monkeypatch, "split", "--bogus") == ExitCode.USAGE_ERROR

    def test_bad_workers_is_usage_error(self, monkeypatch, tmp_path) -> None:
        code = self._run(monkeypatch, "split", "-D", str(tmp_path), "-w", "0")
        assert code == ExitCode.USAGE_ERROR

    def test_help_is_success(self, monkeypatch) -> None:
        assert self._run(monkeypatch, "--help") == ExitCode.SUCCESS

    def test_command_exit_code_passes_through(
        self, monkeypatch, tmp_path: Path
    ) -> None:
        code = self._run(monkeypatch, "split", "-i", str(tmp_path / "x.mp4"), "-n")
        assert code == ExitCode.USAGE_ERROR

    def test_invalid_value(self, monkeypatch, video_file) -> None:
        code = self._run(monkeypatch, "split", "-i", str(video_file), "--rotate", "1")
        assert code == ExitCode.INVALID_VALUE
