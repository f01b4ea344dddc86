"""Names of volume files and of the entries inside them.

Every function here is pure: names are derived from the build method, the
volume plan and the page being written, never stored.
"""

from __future__ import annotations

from pathlib import Path

from comic_encoder.errors import InternalPlanningError, NameEncodingError
from comic_encoder.models.chapter import Chapter
from comic_encoder.models.method import BuildMethod, CompileMethod, EachMethod, SingleMethod
from comic_encoder.models.page import ImagePage
from comic_encoder.models.volume import CompilationPlan, VolumeBatch

ARCHIVE_EXTENSION = ".cbz"
STAGING_EXTENSION = ".comic-enc-partial"
DISPLAY_NAME_MAX_LENGTH = 50


def decimal_digits(number: int) -> int:
    """Number of digits needed to display `number` (e.g. 1234 gives 4)."""
    return len(str(number))


def ceil_div(number: int, divider: int) -> int:
    """Integer division rounding up."""
    return -(-number // divider)


def truncate_display_name(name: str, full: bool = False) -> str:
    """Shorten a name for console output only.

    Args:
        name: Name to display
        full: Return the name unchanged

    Returns:
        str: The first 50 characters followed by "..." if the name is longer
    """
    if full or len(name) <= DISPLAY_NAME_MAX_LENGTH:
        return name
    return f"{name[:DISPLAY_NAME_MAX_LENGTH]}..."


def _single_chapter(batch: VolumeBatch) -> Chapter:
    if len(batch.chapters) != 1:
        raise InternalPlanningError(
            f"Individual chapter's volume contains {len(batch.chapters)} chapters instead of 1",
            volume=batch.volume_index,
        )
    return batch.chapters[0]


def _single_output(method: SingleMethod) -> Path:
    if method.output_file is None:
        raise InternalPlanningError("Single volume output file was not resolved")
    return method.output_file


def volume_file_stem(method: BuildMethod, batch: VolumeBatch, plan: CompilationPlan) -> str:
    """Name of a volume's file, without its extension."""
    if isinstance(method, CompileMethod):
        vw, cw = plan.volume_number_width, plan.chapter_number_width
        stem = f"Volume-{batch.volume_index:0{vw}d}"
        if method.append_chapters_range and batch.chapters:
            stem += (
                f" (c{batch.starting_chapter_ordinal:0{cw}d}"
                f"-c{batch.ending_chapter_ordinal:0{cw}d})"
            )
        return stem
    if isinstance(method, EachMethod):
        return _single_chapter(batch).display_name
    if isinstance(method, SingleMethod):
        return _single_output(method).stem
    raise InternalPlanningError(f"Unknown build method: {method!r}")


def volume_file_extension(method: BuildMethod) -> str:
    """Extension of a volume's file, with its leading dot.

    A single volume keeps the extension of its output file, even none.
    """
    if isinstance(method, SingleMethod):
        return _single_output(method).suffix
    return ARCHIVE_EXTENSION


def volume_file_name(method: BuildMethod, batch: VolumeBatch, plan: CompilationPlan) -> str:
    """Name of a volume's file, with its extension."""
    if isinstance(method, SingleMethod):
        return _single_output(method).name
    return volume_file_stem(method, batch, plan) + volume_file_extension(method)


def with_page_count(path: Path, pages: int) -> Path:
    """Append the number of pages to a file's name, before its extension."""
    return path.with_name(f"{path.name[:len(path.name) - len(path.suffix)]} ({pages} pages){path.suffix}")


def staging_path_for(path: Path) -> Path:
    """Path of the partial file written before `path` is published."""
    stem = path.name[:len(path.name) - len(path.suffix)]
    return path.with_name(stem + STAGING_EXTENSION)


def chapter_dir_name(
    method: BuildMethod, volume_index: int, chapter: Chapter, plan: CompilationPlan
) -> str:
    """Name of a chapter's directory inside a volume."""
    if isinstance(method, EachMethod):
        return chapter.display_name
    if isinstance(method, (CompileMethod, SingleMethod)):
        vw, cw = plan.volume_number_width, plan.chapter_number_width
        return f"Vol_{volume_index:0{vw}d}_Chapter_{chapter.ordinal:0{cw}d}"
    raise InternalPlanningError(f"Unknown build method: {method!r}")


def page_file_name(
    method: BuildMethod,
    volume_index: int,
    chapter: Chapter,
    plan: CompilationPlan,
    page: ImagePage,
    page_count: int,
) -> str:
    """
    Name of a page's file inside its chapter's directory.

    Args:
        method: Build method of the volume
        volume_index: 1-based index of the volume
        chapter: Chapter the page belongs to
        plan: Volume plan, providing the padding widths
        page: The page, with its 0-based position in the chapter
        page_count: Number of pages in the chapter

    Returns:
        str: The page's file name, keeping the source file's extension

    Raises:
        NameEncodingError: If the source file has no extension
    """
    ext = page.extension
    if ext is None:
        raise NameEncodingError(
            "Image file has no extension",
            volume=volume_index,
            chapter=chapter.ordinal,
            path=page.source_path,
        )

    pw = decimal_digits(page_count)
    if isinstance(method, EachMethod):
        return f"{chapter.display_name}_Pic_{page.ordinal:0{pw}d}.{ext}"
    if isinstance(method, (CompileMethod, SingleMethod)):
        vw, cw = plan.volume_number_width, plan.chapter_number_width
        return (
            f"Vol_{volume_index:0{vw}d}_Chapter_{chapter.ordinal:0{cw}d}"
            f"_Pic_{page.ordinal:0{pw}d}.{ext}"
        )
    raise InternalPlanningError(f"Unknown build method: {method!r}")
