"""Build method variants.

A build method decides how chapters are grouped into volumes and how the
volumes and their entries are named. Each variant only carries the options
that make sense for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class CompileMethod:
    """Put a fixed number of chapters in each volume."""

    chapters_per_volume: int
    append_chapters_range: bool = False


@dataclass(frozen=True)
class EachMethod:
    """Put each chapter in its own volume, named after the chapter."""


@dataclass(frozen=True)
class SingleMethod:
    """Put every selected chapter in one volume written to `output_file`.

    When `output_file` is None the encoder picks a default next to the input.
    """

    output_file: Path | None = None


BuildMethod = Union[CompileMethod, EachMethod, SingleMethod]
