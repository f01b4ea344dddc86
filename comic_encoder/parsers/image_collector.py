"""Image file collection utilities."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path, PurePath

from comic_encoder.parsers.natsort import sort_paths

# Image formats every comic reader supports
COMMON_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "bmp"}

# Formats that may not be supported by all readers
EXTENDED_IMAGE_EXTENSIONS = {
    "tif", "tiff", "gif", "eps", "raw", "cr2", "nef", "orf", "sr2",
    "ppm", "webp", "pgm", "pbm", "pnm", "ico", "flif", "pam", "pcx",
    "pgf", "sgi", "sid", "bgp",
}

# Formats the decoder knows how to read
DECODABLE_EXTENSIONS = {"zip", "cbz", "pdf"}


def has_image_ext(path: PurePath | str, extended: bool = False) -> bool:
    """
    Check if a path has a common image format extension.

    Args:
        path: Path to check
        extended: Also accept formats that may not be supported by all readers

    Returns:
        bool: True if the extension (case-insensitive) is an accepted image format
    """
    ext = PurePath(path).suffix[1:].lower()
    if not ext:
        return False
    if ext in COMMON_IMAGE_EXTENSIONS:
        return True
    return extended and ext in EXTENDED_IMAGE_EXTENSIONS


def is_supported_for_decoding(ext: str) -> bool:
    """Check if a comic format, given by its extension, can be decoded."""
    return ext.lower().lstrip(".") in DECODABLE_EXTENSIONS


def list_files_recursive(
    folder_path: Path, predicate: Callable[[Path], bool] | None = None
) -> list[Path]:
    """
    List every regular file under a folder, recursively.

    The order of the returned files is the filesystem's listing order, which
    is not guaranteed to be sorted in any way. Symbolic links to directories
    are not followed.

    Args:
        folder_path: Path to the folder to scan
        predicate: Optional filter, files for which it returns False are ignored

    Returns:
        list[Path]: Paths of the files found

    Raises:
        OSError: If a directory cannot be listed
    """
    files: list[Path] = []
    for entry in folder_path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            files.extend(list_files_recursive(entry, predicate))
        elif entry.is_file() and (predicate is None or predicate(entry)):
            files.append(entry)
    return files


def collect_image_files(
    folder_path: Path, extended: bool = False, natural: bool = True
) -> list[Path]:
    """
    Collect all image files from a chapter folder, recursively, in page order.

    Args:
        folder_path: Path to the folder to scan
        extended: Accept extended image formats
        natural: Sort using natural order instead of plain path order

    Returns:
        list[Path]: Sorted image file paths

    Raises:
        OSError: If a directory cannot be listed
    """
    image_files = list_files_recursive(
        folder_path, lambda path: has_image_ext(path, extended)
    )
    return sort_paths(image_files, natural)
