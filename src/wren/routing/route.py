"""Route and RouteMatch frozen dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wren.routes.types import ComposedChain

# Method key for handlers that accept every HTTP method
ANY_METHOD = "*"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:    ``/users``          (is_param=False)
    Param:     ``/{id}``           (is_param=True, param_name="id")
    Catch-all: ``/{slug:path}``    (is_param=True, param_type="path")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition bound to one method.

    Created from a ``RouteTable`` entry during app freeze.

    Attributes:
        path: URL pattern, e.g. ``/blog/{slug}``.
        method: Upper-case HTTP method, or ``ANY_METHOD``.
        chain: The composed chain that serves this route.
        handler: The handler for this method, or ``None`` when the page
            only has a default component.
        strip_body: True for a HEAD route synthesized from GET.
    """

    path: str
    method: str
    chain: ComposedChain
    handler: Any = None
    strip_body: bool = False


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
