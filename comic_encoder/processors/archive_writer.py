"""Write one volume as a ZIP archive and publish it atomically."""

from __future__ import annotations

import os
import time
import zipfile
from pathlib import Path
from typing import BinaryIO

from comic_encoder.config import EncodingOptions
from comic_encoder.errors import ArchiveIOError, OutputConflictError
from comic_encoder.models.chapter import Chapter
from comic_encoder.models.method import BuildMethod, EachMethod, SingleMethod
from comic_encoder.models.page import ImagePage
from comic_encoder.models.volume import CompilationPlan, VolumeBatch
from comic_encoder.parsers.image_collector import collect_image_files
from comic_encoder.processors.naming import (
    chapter_dir_name,
    page_file_name,
    staging_path_for,
    truncate_display_name,
    volume_file_name,
    volume_file_stem,
    with_page_count,
)
from comic_encoder.progress.tracker import ProgressTracker

# Entries get a fixed timestamp so identical inputs give identical archives
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

COPY_BUFFER_SIZE = 1024 * 1024


def _zip_info(name: str, compression: int, is_dir: bool = False) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=ZIP_TIMESTAMP)
    if is_dir:
        info.compress_type = zipfile.ZIP_STORED
        info.external_attr = (0o40755 << 16) | 0x10
    else:
        info.compress_type = compression
        info.external_attr = 0o644 << 16
    return info


def _copy_into(source: BinaryIO, target: BinaryIO, buffer: bytearray) -> None:
    view = memoryview(buffer)
    while True:
        read = source.readinto(view)
        if not read:
            break
        target.write(view[:read])


def _check_conflict(path: Path, overwrite: bool, volume: int) -> None:
    """Fail if publishing to `path` would replace something it must not.

    Raises:
        OutputConflictError: If `path` is a directory, or exists without `overwrite`
    """
    if not path.exists():
        return
    if path.is_dir():
        raise OutputConflictError("Output volume file is a directory", volume=volume, path=path)
    if not overwrite:
        raise OutputConflictError(
            "Output volume file already exists (use overwrite to replace it)",
            volume=volume,
            path=path,
        )


def _publish(staging: Path, final: Path, overwrite: bool, volume: int) -> None:
    """Rename the finished staging file onto its final path.

    On failure the staging file is kept, as it already is a valid archive.
    """
    _check_conflict(final, overwrite, volume)

    if final.exists():
        try:
            final.unlink()
        except OSError as e:
            raise ArchiveIOError(
                "Failed to overwrite the output volume file", volume=volume, path=final
            ) from e

    try:
        os.replace(staging, final)
    except OSError as e:
        raise ArchiveIOError(
            f"Failed to rename the complete archive (kept at '{staging}')",
            volume=volume,
            path=final,
        ) from e


class VolumeWriter:
    """Writes the chapters of one volume into a ZIP archive."""

    def __init__(
        self,
        method: BuildMethod,
        options: EncodingOptions,
        plan: CompilationPlan,
        batch: VolumeBatch,
        tracker: ProgressTracker,
    ) -> None:
        self.method = method
        self.options = options
        self.plan = plan
        self.batch = batch
        self.tracker = tracker
        self.compression = (
            zipfile.ZIP_DEFLATED if options.compress_losslessly else zipfile.ZIP_STORED
        )
        # Reused for every page of the volume
        self.buffer = bytearray(COPY_BUFFER_SIZE)

    @property
    def volume_label(self) -> str:
        """How the volume is named in console messages."""
        if isinstance(self.method, EachMethod):
            name = self.batch.chapters[0].display_name if self.batch.chapters else ""
            return f"'{truncate_display_name(name, self.options.display_full_names)}'"
        if isinstance(self.method, SingleMethod):
            return f"'{volume_file_stem(self.method, self.batch, self.plan)}'"
        return f"{self.batch.volume_index:0{self.plan.volume_number_width}d}"

    def chapter_label(self, chapter: Chapter) -> str:
        """How a chapter is named in console messages."""
        if isinstance(self.method, EachMethod):
            return self.volume_label
        return f"{chapter.ordinal:0{self.plan.chapter_number_width}d}"

    def write(self, archive: zipfile.ZipFile) -> int:
        """Write every chapter of the volume to `archive`.

        Returns:
            int: Number of pages written
        """
        return sum(self.write_chapter(archive, chapter) for chapter in self.batch.chapters)

    def write_chapter(self, archive: zipfile.ZipFile, chapter: Chapter) -> int:
        """Write one chapter's directory entry and its pages.

        Returns:
            int: Number of pages written

        Raises:
            ArchiveIOError: If the chapter's files cannot be listed, read or written
            NameEncodingError: If an image has no extension
        """
        volume = self.batch.volume_index
        self.tracker.display_debug(
            f"Reading files recursively from chapter {chapter.ordinal}'s directory '{chapter.display_name}'..."
        )

        try:
            images = collect_image_files(
                chapter.source_path,
                extended=self.options.extended_image_formats,
                natural=not self.options.simple_sorting,
            )
        except OSError as e:
            raise ArchiveIOError(
                "Failed to list the chapter's files",
                volume=volume,
                chapter=chapter.ordinal,
                path=chapter.source_path,
            ) from e

        if self.options.show_chapters_path:
            self.tracker.display_info(
                f"Adding chapter {self.chapter_label(chapter)} to volume {self.volume_label} "
                + f"from directory '{chapter.source_path}'"
            )
        elif not isinstance(self.method, EachMethod):
            self.tracker.display_verbose(
                f"Adding chapter {self.chapter_label(chapter)} to volume {self.volume_label}..."
            )

        dir_name = chapter_dir_name(self.method, volume, chapter, self.plan)
        self.tracker.display_debug(f"Adding directory '{dir_name}' to ZIP archive...")

        try:
            archive.writestr(_zip_info(f"{dir_name}/", self.compression, is_dir=True), b"")
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveIOError(
                f"Failed to create directory '{dir_name}' in the archive",
                volume=volume,
                chapter=chapter.ordinal,
            ) from e

        description = f"Volume {self.volume_label}, chapter {self.chapter_label(chapter)}"
        with self.tracker.track_pages(description, len(images)) as progress:
            for ordinal, image in enumerate(images):
                page = ImagePage(ordinal=ordinal, source_path=image)
                name = page_file_name(self.method, volume, chapter, self.plan, page, len(images))
                self.write_page(archive, chapter, page, f"{dir_name}/{name}")
                progress.update()

        return len(images)

    def write_page(
        self, archive: zipfile.ZipFile, chapter: Chapter, page: ImagePage, path_in_zip: str
    ) -> None:
        """Copy a page's bytes verbatim into the archive."""
        volume = self.batch.volume_index
        self.tracker.display_debug(
            f"Adding picture {page.ordinal} at '{page.source_path}' from chapter "
            + f"{self.chapter_label(chapter)} to volume {self.volume_label} as '{path_in_zip}'..."
        )

        try:
            source = page.source_path.open("rb")
        except OSError as e:
            raise ArchiveIOError(
                "Failed to open image file", volume=volume, chapter=chapter.ordinal, path=page.source_path
            ) from e

        with source:
            info = _zip_info(path_in_zip, self.compression)
            try:
                info.file_size = os.fstat(source.fileno()).st_size
                with archive.open(info, "w") as target:
                    _copy_into(source, target, self.buffer)
            except (OSError, zipfile.LargeZipFile) as e:
                raise ArchiveIOError(
                    "Failed to copy image file into the archive",
                    volume=volume,
                    chapter=chapter.ordinal,
                    path=page.source_path,
                ) from e


def build_volume(
    method: BuildMethod,
    options: EncodingOptions,
    output_dir: Path,
    plan: CompilationPlan,
    batch: VolumeBatch,
    tracker: ProgressTracker | None = None,
    is_rebuilding: bool = False,
) -> Path:
    """
    Build one volume file from its chapters.

    The archive is written to a staging file next to its final path, then
    renamed onto it once complete.

    Args:
        method: Build method, deciding how the volume and its entries are named
        options: Writing options
        output_dir: Directory the volume file is written to
        plan: Volume plan, providing the padding widths and the volume count
        batch: The chapters of this volume
        tracker: Console reporting
        is_rebuilding: Prefix messages as a step of a rebuild

    Returns:
        Path: Path of the volume file (the existing one if it was skipped)

    Raises:
        OutputConflictError: If the output file exists and may not be replaced
        ArchiveIOError: If reading a page or writing the archive fails
        NameEncodingError: If an image has no extension
    """
    tracker = tracker or ProgressTracker()
    started = time.perf_counter()
    volume = batch.volume_index

    base_path = output_dir / volume_file_name(method, batch, plan)

    # Without the pages count the final name is known before writing anything
    if not options.append_pages_count:
        if options.skip_existing and base_path.exists():
            tracker.display_warning(
                f"Skipping volume {volume} containing chapters {batch.starting_chapter_ordinal} "
                + f"to {batch.ending_chapter_ordinal} as its output file '{base_path}' already exists"
            )
            return base_path
        _check_conflict(base_path, options.overwrite, volume)

    writer = VolumeWriter(method, options, plan, batch, tracker)
    staging = staging_path_for(base_path)
    if staging.exists():
        tracker.display_warning(f"Replacing leftover staging file '{staging}'")

    tracker.display_verbose(f"Starting volume {writer.volume_label}...")

    try:
        with zipfile.ZipFile(staging, "w", compression=writer.compression) as archive:
            pages = writer.write(archive)
    except OSError as e:
        raise ArchiveIOError("Failed to write the volume file", volume=volume, path=staging) from e

    final_path = with_page_count(base_path, pages) if options.append_pages_count else base_path
    _publish(staging, final_path, options.overwrite, volume)

    elapsed = time.perf_counter() - started
    prefix = "===> " if is_rebuilding else ""
    display_name = truncate_display_name(final_path.name, options.display_full_names)

    if isinstance(method, EachMethod) or is_rebuilding:
        tracker.display_success(
            f"{prefix}Written volume {volume:0{plan.volume_number_width}d} / {plan.volume_count} "
            + f"to file '{display_name}', containing {pages} pages in {elapsed:.3f} s."
        )
    else:
        cw = plan.chapter_number_width
        tracker.display_success(
            f"Written volume {writer.volume_label} / {plan.volume_count} "
            + f"(chapters {batch.starting_chapter_ordinal:0{cw}d} to {batch.ending_chapter_ordinal:0{cw}d}) "
            + f"in '{display_name}', containing {pages} pages in {elapsed:.3f} s."
        )

    return final_path
