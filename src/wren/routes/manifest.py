"""Explicit route registration.

A ``RouteManifest`` is the in-memory form of a route tree: relative
source paths mapped to their exports. Filesystem discovery produces one,
and tests or embedding applications can build one by hand::

    manifest = RouteManifest()
    manifest.layout("_layout", default=base_layout)
    manifest.page("index", default=home)
    manifest.page("blog/[slug]", handler=show_post, default=post_page)

    app.mount_routes(manifest)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from wren.errors import ConfigurationError
from wren.routes.classify import classify_artifact, is_excluded
from wren.routes.paths import split_source, translate_path
from wren.routes.sort import route_sort_key
from wren.routes.types import ArtifactKind, ArtifactRecord

logger = logging.getLogger("wren.routes")


def _canonical(path: str) -> str:
    """Strip the extension from a source path: ``blog/[slug].py`` -> ``blog/[slug]``."""
    directory, stem, _ = split_source(path)
    return "/".join((*directory, stem))


class RouteManifest:
    """Ordered collection of classified route artifacts.

    Each artifact is classified as it is added, so a malformed export
    fails at the line that registers it.
    """

    __slots__ = ("_records",)

    def __init__(self) -> None:
        self._records: dict[str, ArtifactRecord] = {}

    def add(
        self,
        path: str,
        exports: Any,
        *,
        kind: ArtifactKind | None = None,
    ) -> ArtifactRecord | None:
        """Classify and register one artifact.

        Args:
            path: Source path relative to the routes root. Any extension
                is kept for ordering but dropped from the key.
            exports: Mapping of exported names, or a module.
            kind: Optional explicit kind tag, checked against the name.

        Returns:
            The registered record, or ``None`` for an excluded path.
        """
        path = path.strip("/")
        if is_excluded(path):
            logger.debug("Skipping excluded route file %s", path)
            return None

        key = _canonical(path)
        if key in self._records:
            msg = (
                f"Route file {path!r} collides with {self._records[key].source!r}: "
                "both resolve to the same artifact"
            )
            raise ConfigurationError(msg)

        classification = classify_artifact(path, exports, kind=kind)
        translated = translate_path(path)
        record = ArtifactRecord(
            source=path,
            url_pattern=translated.url_pattern,
            kind=classification.kind,
            directory=translated.directory,
            segment_depth=translated.segment_depth,
            handlers=classification.handlers,
            component=classification.component,
            config=classification.config,
        )
        self._records[key] = record
        return record

    # -- Kind-tagged shortcuts --

    def page(
        self,
        path: str,
        *,
        handler: Any = None,
        default: Any = None,
        config: Any = None,
    ) -> ArtifactRecord | None:
        return self.add(path, _exports(handler, default, config), kind=ArtifactKind.PAGE)

    def middleware(self, path: str, handler: Any) -> ArtifactRecord | None:
        return self.add(path, {"handler": handler}, kind=ArtifactKind.MIDDLEWARE)

    def layout(
        self, path: str, *, default: Any, config: Any = None
    ) -> ArtifactRecord | None:
        return self.add(path, _exports(None, default, config), kind=ArtifactKind.LAYOUT)

    def app_shell(self, path: str, *, default: Any) -> ArtifactRecord | None:
        return self.add(path, {"default": default}, kind=ArtifactKind.APP_SHELL)

    def error_boundary(
        self, path: str, *, handler: Any = None, default: Any = None
    ) -> ArtifactRecord | None:
        return self.add(path, _exports(handler, default, None), kind=ArtifactKind.ERROR_BOUNDARY)

    @classmethod
    def from_mapping(cls, files: Mapping[str, Any]) -> RouteManifest:
        """Build a manifest from ``{path: exports}``."""
        manifest = cls()
        for path, exports in files.items():
            manifest.add(path, exports)
        return manifest

    @property
    def records(self) -> tuple[ArtifactRecord, ...]:
        """All records in route order."""
        return tuple(sorted(self._records.values(), key=lambda r: route_sort_key(r.source)))

    def __iter__(self) -> Iterator[ArtifactRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"<RouteManifest {len(self._records)} artifacts>"


def _exports(handler: Any, default: Any, config: Any) -> dict[str, Any]:
    exports: dict[str, Any] = {}
    if handler is not None:
        exports["handler"] = handler
    if default is not None:
        exports["default"] = default
    if config is not None:
        exports["config"] = config
    return exports
