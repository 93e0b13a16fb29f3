"""vsplit - rotate and split videos into fixed-length segments with FFmpeg."""

__version__ = "0.1.0"
