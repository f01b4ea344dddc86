"""Encode chapter directories into volumes."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from comic_encoder.config import EncodeConfig
from comic_encoder.errors import ArchiveIOError, InternalPlanningError, ResourceNotFoundError
from comic_encoder.models.method import BuildMethod, SingleMethod
from comic_encoder.parsers.folder_parser import discover_chapters
from comic_encoder.processors.archive_writer import build_volume
from comic_encoder.processors.batching import chapters_per_volume, plan_volumes, validate_range
from comic_encoder.progress.tracker import ProgressTracker


def _ensure_dir(path: Path, create: bool) -> None:
    if path.is_dir():
        return
    if path.exists():
        raise ResourceNotFoundError("Output directory is a file", path=path)
    if not create:
        raise ResourceNotFoundError("Output directory was not found", path=path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveIOError("Failed to create the output directory", path=path) from e


def resolve_output(config: EncodeConfig, input_dir: Path) -> tuple[BuildMethod, Path]:
    """
    Get the directory volumes are written to, creating it if allowed.

    For a single volume, the method is returned with its output file resolved.

    Args:
        config: Encoding configuration
        input_dir: The (existing) input directory

    Returns:
        tuple: (build method, output directory)

    Raises:
        ResourceNotFoundError: If the output location is missing or has the wrong type
        ArchiveIOError: If the output directory cannot be created
    """
    method = config.method
    base_dir = input_dir.resolve().parent if config.root_chapter else input_dir

    if isinstance(method, SingleMethod):
        output_file = method.output_file or config.output
        if output_file is None:
            output_file = base_dir / f"{input_dir.resolve().name}.cbz"
        if output_file.is_dir():
            raise ResourceNotFoundError("Output file is a directory", path=output_file)

        _ensure_dir(output_file.parent, config.create_output_dir)
        return dataclasses.replace(method, output_file=output_file), output_file.parent

    output_dir = config.output or base_dir
    _ensure_dir(output_dir, config.create_output_dir)
    return method, output_dir


def encode(
    config: EncodeConfig, tracker: ProgressTracker | None = None, is_rebuilding: bool = False
) -> list[Path]:
    """
    Encode the chapters of a directory into one or more volumes.

    Volumes are built one after the other, in volume order.

    Args:
        config: Encoding configuration
        tracker: Console reporting
        is_rebuilding: Run quietly as a step of a rebuild

    Returns:
        list[Path]: Paths of the volume files, in volume order

    Raises:
        ConfigurationError: If the configuration is invalid (nothing is written)
        ResourceNotFoundError: If the input or output location is missing
        OutputConflictError: If a volume file exists and may not be replaced
        ArchiveIOError: If listing, reading or writing fails
        InternalPlanningError: If a single volume method produced several volumes
    """
    tracker = tracker or ProgressTracker()

    # Fail before touching the filesystem
    config.validate()
    chapters_per_volume(config.method)
    validate_range(config.start_chapter, config.end_chapter)

    if not config.input_dir.is_dir():
        raise ResourceNotFoundError("Chapters directory was not found", path=config.input_dir)

    method, output_dir = resolve_output(config, config.input_dir)

    tracker.display_debug("Reading chapter directories...")
    chapter_dirs = discover_chapters(
        config.input_dir,
        dirs_prefix=config.dirs_prefix,
        root_chapter=config.root_chapter,
        natural=not config.options.simple_sorting,
    )

    plan = plan_volumes(chapter_dirs, method, config.start_chapter, config.end_chapter)

    if not plan.volumes:
        tracker.display_warning("No chapter found. Nothing to do.")
        return []

    if not is_rebuilding:
        start, end = plan.selected_range
        tracker.display_info(
            f"Going to treat chapter{'s' if plan.selected_count > 1 else ''} {start + 1} to {end} "
            + f"({plan.selected_count} out of {plan.total_chapters_available}, "
            + f"{plan.total_chapters_available - plan.selected_count} to ignore) "
            + f"into {plan.volume_count} volume{'s' if plan.volume_count > 1 else ''}."
        )

    output_files: list[Path] = []
    for batch in plan.volumes:
        output_files.append(
            build_volume(method, config.options, output_dir, plan, batch, tracker, is_rebuilding)
        )

    if isinstance(method, SingleMethod) and len(output_files) > 1:
        raise InternalPlanningError("More than 1 volume was produced for a single output file")

    if not is_rebuilding:
        tracker.display_success(
            f"Built {len(output_files)} volume{'s' if len(output_files) > 1 else ''}."
        )

    return output_files
