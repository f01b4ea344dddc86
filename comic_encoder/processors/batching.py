"""Split an ordered list of chapters into volumes."""

from __future__ import annotations

from pathlib import Path

from comic_encoder.errors import ConfigurationError, InternalPlanningError
from comic_encoder.models.chapter import Chapter
from comic_encoder.models.method import BuildMethod, CompileMethod, EachMethod, SingleMethod
from comic_encoder.models.volume import CompilationPlan, VolumeBatch
from comic_encoder.processors.naming import ceil_div, decimal_digits


def chapters_per_volume(method: BuildMethod) -> int | None:
    """Get the number of chapters each volume holds, None meaning unbounded.

    Raises:
        ConfigurationError: If a compile method asks for less than 1 chapter per volume
    """
    if isinstance(method, CompileMethod):
        if isinstance(method.chapters_per_volume, bool) or method.chapters_per_volume < 1:
            raise ConfigurationError("There must be at least 1 chapter per volume")
        return method.chapters_per_volume
    if isinstance(method, EachMethod):
        return 1
    if isinstance(method, SingleMethod):
        return None
    raise InternalPlanningError(f"Unknown build method: {method!r}")


def validate_range(start_chapter: int | None, end_chapter: int | None) -> None:
    """Check the user-provided chapter range.

    Raises:
        ConfigurationError: If a bound is not strictly positive or if end < start
    """
    if start_chapter is not None and start_chapter < 1:
        raise ConfigurationError(
            "Please provide a valid start chapter (integer, strictly higher than 0)"
        )
    if end_chapter is not None and end_chapter < 1:
        raise ConfigurationError(
            "Please provide a valid end chapter (integer, strictly higher than 0)"
        )
    if start_chapter is not None and end_chapter is not None and end_chapter < start_chapter:
        raise ConfigurationError("Start chapter cannot be higher than the end chapter")


def plan_volumes(
    chapter_dirs: list[tuple[Path, str]],
    method: BuildMethod,
    start_chapter: int | None = None,
    end_chapter: int | None = None,
) -> CompilationPlan:
    """
    Decide which chapters go into which volume.

    Padding widths are computed from the whole list of chapters, before the
    start and end chapters are applied, so that names stay stable across
    partial runs.

    Args:
        chapter_dirs: Sorted (path, name) tuples of every discovered chapter
        method: Build method deciding the number of chapters per volume
        start_chapter: 1-based first chapter to include (default: 1)
        end_chapter: 1-based last chapter to include (default: the last one)

    Returns:
        CompilationPlan: The volumes to build, possibly none

    Raises:
        ConfigurationError: If the method or the range is invalid
        InternalPlanningError: If a single volume method results in several volumes
    """
    per_volume = chapters_per_volume(method)
    validate_range(start_chapter, end_chapter)

    total = len(chapter_dirs)
    untrimmed_volumes = ceil_div(total, per_volume) if per_volume else min(total, 1)
    volume_number_width = decimal_digits(untrimmed_volumes)
    chapter_number_width = decimal_digits(total)

    skip = (start_chapter or 1) - 1
    end = min(end_chapter if end_chapter is not None else total, total)
    selected = chapter_dirs[skip:end]

    batches: list[VolumeBatch] = []
    current: list[Chapter] = []
    volume_index = 1
    volume_start = 1

    for ordinal, (path, name) in enumerate(selected, 1):
        current.append(Chapter(ordinal=ordinal, source_path=path, display_name=name))

        if per_volume is not None and len(current) == per_volume:
            batches.append(VolumeBatch(volume_index, volume_start, tuple(current)))
            volume_start += len(current)
            current = []
            volume_index += 1

    if current:
        batches.append(VolumeBatch(volume_index, volume_start, tuple(current)))

    if isinstance(method, SingleMethod) and len(batches) > 1:
        raise InternalPlanningError(
            f"More than 1 volume ({len(batches)}) was planned for a single output file"
        )

    return CompilationPlan(
        total_chapters_available=total,
        selected_range=(skip, skip + len(selected)),
        chapters_per_volume=per_volume,
        volumes=tuple(batches),
        volume_number_width=volume_number_width,
        chapter_number_width=chapter_number_width,
    )
