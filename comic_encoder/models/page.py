"""Image page data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ImagePage:
    """An image file of a chapter, at its sorted position."""

    ordinal: int
    source_path: Path

    @property
    def extension(self) -> str | None:
        """Extension of the source file without its leading dot, case preserved."""
        suffix = self.source_path.suffix
        return suffix[1:] if len(suffix) > 1 else None


@dataclass
class ExtractedPage:
    """A file extracted from an archive under a temporary name."""

    path_in_archive: str
    extracted_path: Path
    extension: str | None
