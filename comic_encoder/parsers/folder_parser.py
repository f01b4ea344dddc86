"""Chapter directory discovery."""

from __future__ import annotations

from pathlib import Path

from comic_encoder.errors import ArchiveIOError, ResourceNotFoundError
from comic_encoder.parsers.natsort import sort_paths


def discover_chapters(
    chapters_dir: Path,
    dirs_prefix: str | None = None,
    root_chapter: bool = False,
    natural: bool = True,
) -> list[tuple[Path, str]]:
    """
    List the chapter directories of an input directory, in chapter order.

    Args:
        chapters_dir: Directory containing one subdirectory per chapter
        dirs_prefix: Only keep directories whose name starts with this prefix
        root_chapter: Treat `chapters_dir` itself as the only chapter
        natural: Sort using natural order instead of plain path order

    Returns:
        list: (chapter directory path, chapter directory name) tuples

    Raises:
        ResourceNotFoundError: If `chapters_dir` is not an existing directory
        ArchiveIOError: If `chapters_dir` cannot be listed
    """
    if not chapters_dir.is_dir():
        raise ResourceNotFoundError("Chapters directory was not found", path=chapters_dir)

    if root_chapter:
        return [(chapters_dir, chapters_dir.resolve().name)]

    try:
        folders = [entry for entry in chapters_dir.iterdir() if entry.is_dir()]
    except OSError as e:
        raise ArchiveIOError("Failed to read the chapters directory", path=chapters_dir) from e

    if dirs_prefix:
        folders = [folder for folder in folders if folder.name.startswith(dirs_prefix)]

    return [(folder, folder.name) for folder in sort_paths(folders, natural)]
