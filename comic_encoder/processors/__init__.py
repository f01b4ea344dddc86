"""Volume planning, naming, writing, extraction and rebuilding."""

from .archive_writer import build_volume
from .batching import plan_volumes
from .comic_processor import ComicProcessor
from .decoder import decode
from .encoder import encode
from .rebuild import rebuild

__all__ = ["ComicProcessor", "build_volume", "decode", "encode", "plan_volumes", "rebuild"]
