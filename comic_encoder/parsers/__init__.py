"""Folder parsing, file collection and natural sorting utilities."""

from .folder_parser import discover_chapters
from .image_collector import (
    collect_image_files,
    has_image_ext,
    is_supported_for_decoding,
    list_files_recursive,
)
from .natsort import natural_cmp, natural_paths_cmp, sort_names, sort_paths

__all__ = [
    "collect_image_files",
    "discover_chapters",
    "has_image_ext",
    "is_supported_for_decoding",
    "list_files_recursive",
    "natural_cmp",
    "natural_paths_cmp",
    "sort_names",
    "sort_paths",
]
