"""Path translation — source paths to URL patterns.

::

    index.py                  -> /
    about.py                  -> /about
    blog/index.py             -> /blog
    blog/[slug].py            -> /blog/{slug}
    docs/[...rest].py         -> /docs/{rest:path}
    (marketing)/pricing.py    -> /pricing
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from wren.errors import ConfigurationError

_NAME_EXT = re.compile(r"^(?P<stem>.+?)(?P<ext>\.[A-Za-z0-9]+)?$")
_DYNAMIC = re.compile(r"^\[(?P<rest>\.\.\.)?(?P<name>\w+)\]$")
_GROUP = re.compile(r"^\((?P<name>[^()]+)\)$")


@dataclass(frozen=True, slots=True)
class TranslatedPath:
    """URL pattern and structural facts for one source path.

    Attributes:
        url_pattern: e.g. ``/blog/{slug}``.
        directory: Directory segments, route groups included.
        stem: File name without extension.
        extension: e.g. ``.py``; empty when the name has none.
        segment_depth: ``len(directory)``.
    """

    url_pattern: str
    directory: tuple[str, ...]
    stem: str
    extension: str
    segment_depth: int


def split_name(name: str) -> tuple[str, str]:
    """Split a file name into stem and extension.

    Bracketed names keep their dots: ``[...slug].py`` -> (``[...slug]``, ``.py``).
    """
    match = _NAME_EXT.match(name)
    if match is None:
        return name, ""
    return match["stem"], match["ext"] or ""


def split_source(path: str) -> tuple[tuple[str, ...], str, str]:
    """Split a relative source path into (directory, stem, extension)."""
    parts = PurePosixPath(path.strip("/")).parts
    if not parts:
        msg = f"Empty route path {path!r}"
        raise ConfigurationError(msg)
    stem, extension = split_name(parts[-1])
    return tuple(parts[:-1]), stem, extension


def is_group(segment: str) -> bool:
    """Whether *segment* is a ``(name)`` route group."""
    return _GROUP.match(segment) is not None


def url_segment(segment: str, source: str) -> str | None:
    """Translate one path segment. Route groups translate to ``None``."""
    if is_group(segment):
        return None
    if segment.startswith("["):
        match = _DYNAMIC.match(segment)
        if match is None:
            msg = f"Invalid dynamic segment {segment!r} in route {source!r}"
            raise ConfigurationError(msg)
        if match["rest"]:
            return "{" + match["name"] + ":path}"
        return "{" + match["name"] + "}"
    return segment


def translate_path(path: str) -> TranslatedPath:
    """Translate a source path relative to the routes root."""
    directory, stem, extension = split_source(path)
    segments = [*directory]
    # index and the reserved stems resolve to their directory URL
    if stem != "index" and not stem.startswith("_"):
        segments.append(stem)

    url_parts: list[str] = []
    for segment in segments:
        translated = url_segment(segment, path)
        if translated is not None:
            url_parts.append(translated)

    for position, part in enumerate(url_parts[:-1]):
        if part.endswith(":path}"):
            msg = (
                f"Catch-all segment {segments[position]!r} in route {path!r} "
                "must be the last URL segment"
            )
            raise ConfigurationError(msg)

    names = [part[1:-1].partition(":")[0] for part in url_parts if part.startswith("{")]
    duplicates = {name for name in names if names.count(name) > 1}
    if duplicates:
        msg = f"Route {path!r} repeats path parameter(s): {', '.join(sorted(duplicates))}"
        raise ConfigurationError(msg)

    return TranslatedPath(
        url_pattern="/" + "/".join(url_parts),
        directory=directory,
        stem=stem,
        extension=extension,
        segment_depth=len(directory),
    )
