"""Rebuild an existing comic into a normalized volume."""

from __future__ import annotations

import shutil
from pathlib import Path

from comic_encoder.config import DecodeConfig, EncodeConfig, EncodingOptions, RebuildConfig
from comic_encoder.errors import ArchiveIOError, InternalPlanningError, ResourceNotFoundError
from comic_encoder.models.method import SingleMethod
from comic_encoder.processors.decoder import decode
from comic_encoder.processors.encoder import encode
from comic_encoder.progress.tracker import ProgressTracker

TEMPORARY_DIR_NAME = "__tmp_comic_encoder_extract"


def temporary_dirs(config: RebuildConfig) -> tuple[Path, Path]:
    """Get the temporary wrapper directory and the extraction directory inside it.

    The extraction directory is named after the input file, so the chapter of
    the rebuilt volume gets a readable name.

    Raises:
        ResourceNotFoundError: If the input has no usable file name
    """
    stem = config.input.stem
    if not stem:
        raise ResourceNotFoundError("Input file has no name", path=config.input)

    wrapper = config.temporary_dir or config.input.resolve().parent / TEMPORARY_DIR_NAME
    return wrapper, wrapper / stem


def rebuild(config: RebuildConfig, tracker: ProgressTracker | None = None) -> Path:
    """
    Extract a comic's pages then encode them again as a single volume.

    Args:
        config: Rebuilding configuration
        tracker: Console reporting

    Returns:
        Path: Path of the rebuilt volume

    Raises:
        ResourceNotFoundError: If the input is missing
        UnsupportedFormatError: If the input's format cannot be decoded
        OutputConflictError: If the output exists and may not be replaced
        ArchiveIOError: If extracting or writing fails
    """
    tracker = tracker or ProgressTracker()

    wrapper, extract_dir = temporary_dirs(config)
    output = config.output or config.input.with_suffix(".cbz")

    # Leftover pages from an interrupted run would end up in the new volume
    if wrapper.exists():
        tracker.display_warning(f"Removing leftover temporary directory '{wrapper}'")
        try:
            shutil.rmtree(wrapper)
        except OSError as e:
            raise ArchiveIOError("Failed to remove the leftover temporary directory", path=wrapper) from e

    tracker.display_info("==> (1/2) Extracting images...")
    decode(
        DecodeConfig(
            input=config.input,
            output=extract_dir,
            create_output_dir=True,
            only_extract_images=config.only_extract_images,
            extended_image_formats=config.extended_image_formats,
            simple_sorting=config.simple_sorting,
            skip_bad_pdf_pages=config.skip_bad_pdf_pages,
        ),
        tracker,
        is_rebuilding=True,
    )

    tracker.display_info("==> (2/2) Encoding images in a book...")
    paths = encode(
        EncodeConfig(
            method=SingleMethod(output_file=output),
            input_dir=wrapper,
            options=EncodingOptions(
                overwrite=config.overwrite,
                extended_image_formats=config.extended_image_formats,
                simple_sorting=config.simple_sorting,
                compress_losslessly=config.compress_losslessly,
            ),
        ),
        tracker,
        is_rebuilding=True,
    )

    if len(paths) != 1:
        raise InternalPlanningError(f"Rebuilding produced {len(paths)} files instead of 1", path=output)

    tracker.display_debug("Removing temporary directory...")
    try:
        shutil.rmtree(wrapper)
    except OSError as e:
        tracker.display_warning(f"Failed to remove temporary directory '{wrapper}': {e}")

    return paths[0]
