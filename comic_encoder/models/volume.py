"""Volume planning data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from comic_encoder.models.chapter import Chapter


@dataclass(frozen=True)
class VolumeBatch:
    """The chapters that go into one output volume."""

    volume_index: int
    starting_chapter_ordinal: int
    chapters: tuple[Chapter, ...]

    @property
    def ending_chapter_ordinal(self) -> int:
        """Ordinal of the last chapter in this volume."""
        return self.starting_chapter_ordinal + len(self.chapters) - 1


@dataclass(frozen=True)
class CompilationPlan:
    """How the selected chapters are split into volumes.

    Attributes:
        total_chapters_available: Number of chapters discovered before trimming
        selected_range: 0-based half-open range of the selected chapters
        chapters_per_volume: Batch size, None when unbounded (single volume)
        volumes: Ordered volume batches
        volume_number_width: Digits used to pad volume numbers
        chapter_number_width: Digits used to pad chapter numbers
    """

    total_chapters_available: int
    selected_range: tuple[int, int]
    chapters_per_volume: int | None
    volumes: tuple[VolumeBatch, ...] = field(default_factory=tuple)
    volume_number_width: int = 1
    chapter_number_width: int = 1

    @property
    def selected_count(self) -> int:
        """Number of chapters that will be written."""
        start, end = self.selected_range
        return end - start

    @property
    def volume_count(self) -> int:
        """Number of volumes that will be written."""
        return len(self.volumes)
