"""Natural order comparison of names and paths.

Natural order compares embedded numbers by value instead of digit by digit,
so "Chapter 2" comes before "Chapter 10":

    >>> sorted(["Folder 20", "Folder 1", "Folder 100"])
    ['Folder 1', 'Folder 100', 'Folder 20']
    >>> sort_names(["Folder 20", "Folder 1", "Folder 100"])
    ['Folder 1', 'Folder 20', 'Folder 100']
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cmp_to_key
from pathlib import Path, PurePath

_DIGITS = "0123456789"


def _take_number(text: str, index: int) -> tuple[str, int]:
    """Read the digit run starting at `index`.

    Returns:
        tuple: (digits without leading zeros, index of the first non-digit)
    """
    end = index
    while end < len(text) and text[end] in _DIGITS:
        end += 1
    return text[index:end].lstrip("0"), end


def _cmp(left: object, right: object) -> int:
    return (left > right) - (left < right)  # type: ignore[operator]


def _folded_cmp(left: str, right: str) -> int:
    i = j = 0
    while i < len(left) and j < len(right):
        lc, rc = left[i], right[j]

        if lc in _DIGITS and rc in _DIGITS:
            lnum, i = _take_number(left, i)
            rnum, j = _take_number(right, j)

            # Without leading zeros, a longer number is always a greater one
            if len(lnum) != len(rnum):
                return _cmp(len(lnum), len(rnum))
            if lnum != rnum:
                return _cmp(lnum, rnum)
            continue

        if lc != rc:
            return _cmp(lc, rc)
        i += 1
        j += 1

    return _cmp(len(left) - i, len(right) - j)


def natural_cmp(left: str, right: str) -> int:
    """Compare two strings using natural order.

    Characters are compared case-insensitively by code point, except runs of
    ASCII digits which are compared by numeric value, so "ch02" and "CH2" are
    equal.

    Args:
        left: First string
        right: Second string

    Returns:
        int: -1, 0 or 1 when `left` is lower, equal or greater than `right`
    """
    return _folded_cmp(left.casefold(), right.casefold())


def natural_paths_cmp(left: PurePath | str, right: PurePath | str) -> int:
    """Compare two paths component by component using natural order.

    When one path is a prefix of the other, the shorter one comes first.
    """
    left_parts = PurePath(left).parts
    right_parts = PurePath(right).parts

    for left_part, right_part in zip(left_parts, right_parts):
        result = natural_cmp(left_part, right_part)
        if result != 0:
            return result

    return _cmp(len(left_parts), len(right_parts))


natural_key = cmp_to_key(natural_cmp)
natural_path_key = cmp_to_key(natural_paths_cmp)


def sort_names(names: Iterable[str], natural: bool = True) -> list[str]:
    """Sort names using natural order, or plain string order if disabled.

    Names equal in natural order are ordered by their plain text.
    """
    if natural:
        return sorted(names, key=lambda name: (natural_key(name), name))
    return sorted(names)


def sort_paths(paths: Iterable[Path], natural: bool = True) -> list[Path]:
    """Sort paths using natural order, or plain path order if disabled.

    Paths equal in natural order are ordered by their plain path.
    """
    if natural:
        return sorted(paths, key=lambda path: (natural_path_key(path), path))
    return sorted(paths)
