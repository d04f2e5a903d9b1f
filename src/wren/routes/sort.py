"""Route ordering.

Source paths are ordered segment by segment so that the special
artifacts of a directory come before everything routed beneath it, and
static routes come before dynamic ones::

    /_error.py
    /foo/_middleware.py
    /foo/_layout.py
    /foo/index.py
    /foo/bar/baz.py
    /foo/bar.py
    /foo/[id].py
    /foo/[...slug].py
"""

from pathlib import PurePosixPath

from wren.routes.paths import split_name

# Preferred extensions, first wins when two sources differ only by extension
EXTENSION_PRIORITY = (".py",)

_SPECIAL_RANKS = {
    "_app": 0,
    "_error": 1,
    "_middleware": 2,
    "_layout": 3,
    "index": 4,
}
_STATIC_RANK = 5
_DYNAMIC_RANK = 6
_CATCH_ALL_RANK = 7

SortKey = tuple[tuple[tuple[int, str, bool], ...], tuple[int, str]]


def _segment_rank(segment: str, is_leaf: bool) -> int:
    if is_leaf and segment in _SPECIAL_RANKS:
        return _SPECIAL_RANKS[segment]
    if segment.startswith("[..."):
        return _CATCH_ALL_RANK
    if segment.startswith("["):
        return _DYNAMIC_RANK
    return _STATIC_RANK


def _extension_key(extension: str) -> tuple[int, str]:
    if extension in EXTENSION_PRIORITY:
        return (0, f"{EXTENSION_PRIORITY.index(extension):04d}")
    if extension:
        return (1, extension)
    return (2, "")


def route_sort_key(path: str) -> SortKey:
    """Sort key for a source path relative to the routes root.

    Usage::

        ordered = sorted(paths, key=route_sort_key)
    """
    parts = PurePosixPath(path.strip("/")).parts
    if not parts:
        return ((), (2, ""))
    stem, extension = split_name(parts[-1])
    segments = [*parts[:-1], stem]
    last = len(segments) - 1
    key = tuple(
        (_segment_rank(segment, index == last), segment, index == last)
        for index, segment in enumerate(segments)
    )
    return key, _extension_key(extension)


def sort_route_paths(a: str, b: str) -> int:
    """Comparator form of ``route_sort_key``: -1, 0 or 1."""
    key_a = route_sort_key(a)
    key_b = route_sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0
