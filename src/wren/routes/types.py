"""Frozen records shared by the route pipeline.

Everything here is created at setup time and never mutated afterwards,
so composed chains can be shared by concurrent requests.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wren.routes.methods import MethodBinding


class ArtifactKind(enum.Enum):
    """Role of a route artifact, derived from its file stem."""

    PAGE = "page"
    MIDDLEWARE = "middleware"
    LAYOUT = "layout"
    APP_SHELL = "app"
    ERROR_BOUNDARY = "error"


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Inheritance flags exported by pages and layouts as ``config``.

    Attributes:
        skip_app_wrapper: Render without the ``_app`` shell.
        skip_inherited_layouts: Drop layouts from ancestor directories.
    """

    skip_app_wrapper: bool = False
    skip_inherited_layouts: bool = False


@dataclass(frozen=True, slots=True)
class Render:
    """Handler result asking for the page component to be rendered.

    Usage::

        def handler(ctx):
            post = load_post(ctx.params["slug"])
            return Render(data=post, head=[f"<title>{post.title}</title>"])

    Attributes:
        data: Passed to the page component as ``ctx.data``.
        head: Markup fragments for the document ``<head>``.
        headers: Extra response headers.
        status: Response status. Defaults to 200, or to the error status
            when rendered by an error boundary.
    """

    data: Any = None
    head: tuple[str, ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    status: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.head, tuple):
            object.__setattr__(self, "head", tuple(self.head))
        if isinstance(self.headers, Mapping):
            object.__setattr__(self, "headers", tuple(self.headers.items()))
        elif not isinstance(self.headers, tuple):
            object.__setattr__(self, "headers", tuple(self.headers))


@dataclass(frozen=True, slots=True)
class ArtifactRecord:
    """One classified artifact of the route tree.

    Attributes:
        source: Relative source path, e.g. ``blog/[slug].py``.
        url_pattern: Translated URL pattern, e.g. ``/blog/{slug}``.
        kind: Role derived from the file stem.
        directory: Directory segments, route groups included.
        segment_depth: ``len(directory)``.
        handlers: The ``handlers``/``handler`` export, ``None`` if absent.
        component: The ``default`` export, ``None`` if absent.
        config: Inheritance flags (pages and layouts only).
    """

    source: str
    url_pattern: str
    kind: ArtifactKind
    directory: tuple[str, ...]
    segment_depth: int
    handlers: Any = None
    component: Any = None
    config: RouteConfig = RouteConfig()

    @property
    def middlewares(self) -> tuple[Any, ...]:
        """Middleware callables in the order they run."""
        if self.handlers is None:
            return ()
        if callable(self.handlers):
            return (self.handlers,)
        return tuple(self.handlers)


@dataclass(frozen=True, slots=True)
class ComposedChain:
    """The fully resolved execution chain of one page.

    Attributes:
        pattern: URL pattern served by the page.
        source: Source path of the page artifact.
        middlewares: Middleware callables, outermost first.
        layouts: Layout records, outermost first.
        app_shell: The ``_app`` record wrapping the page, if any.
        error_boundary: The nearest ``_error`` record, if any.
        page_component: The page's ``default`` export, if any.
        bindings: Method bindings of the page handler.
    """

    pattern: str
    source: str
    middlewares: tuple[Any, ...] = ()
    layouts: tuple[ArtifactRecord, ...] = ()
    app_shell: ArtifactRecord | None = None
    error_boundary: ArtifactRecord | None = None
    page_component: Any = None
    bindings: tuple[MethodBinding, ...] = ()

    @property
    def methods(self) -> frozenset[str]:
        """Methods the page answers (``*`` for any)."""
        return frozenset(binding.method for binding in self.bindings)
