"""Chapter information data model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Chapter:
    """A chapter directory selected for a volume."""

    ordinal: int
    source_path: Path
    display_name: str
