"""Main comic processing orchestration."""

from __future__ import annotations

from pathlib import Path
from typing import final

from rich.console import Console

from comic_encoder.config import DecodeConfig, EncodeConfig, RebuildConfig
from comic_encoder.processors.decoder import decode
from comic_encoder.processors.encoder import encode
from comic_encoder.processors.rebuild import rebuild
from comic_encoder.progress.tracker import ProgressTracker


@final
class ComicProcessor:
    """Runs the encode, decode and rebuild actions and keeps their results."""

    def __init__(self, console: Console | None = None, level: str = "normal") -> None:
        """Initialize the comic processor.

        Args:
            console: Rich console instance
            level: Verbosity level of the console output
        """
        self.console = console or Console()
        self.progress_tracker = ProgressTracker(self.console, level)

        # Files produced during this session
        self.produced_files: list[Path] = []

    def encode(self, config: EncodeConfig) -> list[Path]:
        """Encode chapter directories into volumes.

        Args:
            config: Encoding configuration

        Returns:
            Paths of the written volumes
        """
        paths = encode(config, self.progress_tracker)
        self.produced_files.extend(paths)
        return paths

    def decode(self, config: DecodeConfig) -> list[Path]:
        """Extract the pages of a comic.

        Args:
            config: Decoding configuration

        Returns:
            Paths of the extracted pages
        """
        paths = decode(config, self.progress_tracker)
        self.produced_files.extend(paths)
        return paths

    def rebuild(self, config: RebuildConfig) -> Path:
        """Rebuild a comic into a normalized volume.

        Args:
            config: Rebuilding configuration

        Returns:
            Path of the rebuilt volume
        """
        path = rebuild(config, self.progress_tracker)
        self.produced_files.append(path)
        self.progress_tracker.display_success(f"Rebuilt '{config.input}' into '{path}'")
        return path
