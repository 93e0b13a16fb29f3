"""Shared test fixtures for vsplit."""

import logging
from pathlib import Path

import pytest

from vsplit.config import clear_config_cache
from vsplit.core.pipeline import build_output_spec, build_plan
from vsplit.core.types import EncodingParameters, ReencodeDecision, Transform


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Save and restore root logger state between tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point VSPLIT_DATA_DIR at a temp dir and clear VSPLIT_* overrides."""
    data_dir = tmp_path / "vsplit-data"
    for var in (
        "VSPLIT_CONFIG_PATH",
        "VSPLIT_FFMPEG_PATH",
        "VSPLIT_FFPROBE_PATH",
        "VSPLIT_LOG_LEVEL",
        "VSPLIT_WORKERS",
        "VSPLIT_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("VSPLIT_DATA_DIR", str(data_dir))
    clear_config_cache()
    yield data_dir
    clear_config_cache()


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    """An empty file with a video extension."""
    path = tmp_path / "input.mp4"
    path.touch()
    return path


@pytest.fixture
def video_tree(tmp_path: Path) -> Path:
    """A directory tree mixing videos (any case) and other files."""
    root = tmp_path / "videos"
    (root / "sub" / "dir").mkdir(parents=True)
    (root / "a.mp4").touch()
    (root / "b.mov").touch()
    (root / "notes.txt").touch()
    (root / "sub" / "dir" / "clip.MP4").touch()
    (root / "sub" / "other.mkv").touch()
    # Directory named like a video must not be picked up
    (root / "folder.mp4").mkdir()
    return root


@pytest.fixture
def make_plan(tmp_path: Path):
    """Factory for Plans with sensible defaults."""

    def _make(
        transform: Transform = Transform.NOOP,
        decision: ReencodeDecision = ReencodeDecision.STREAM_COPY,
        segment_time: float = 60,
        input_name: str = "input.mp4",
        **kwargs,
    ):
        input_path = tmp_path / input_name
        output = build_output_spec(input_path, tmp_path / "out")
        return build_plan(
            input_path,
            transform,
            decision,
            output,
            segment_time,
            encoding=kwargs.pop("encoding", EncodingParameters()),
            **kwargs,
        )

    return _make
