"""Compiled router with trie-based path matching.

The router is the matcher composed routes are registered into. It
knows nothing about layouts or middleware: each ``Route`` carries its
composed chain, and the dispatcher takes it from there.
"""

import re
from dataclasses import dataclass, field

from wren.errors import ConfigurationError, MethodNotAllowed, NotFound
from wren.routing.params import CONVERTERS
from wren.routing.route import ANY_METHOD, PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id}"        -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            param_name, _, param_type = inner.partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown path converter {param_type!r} in route {path!r}"
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "param_children", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children by name, tried in registration order
        self.param_children: dict[str, _ParamEdge] = {}
        # Catch-all edge (path converter), consumes the rest of the path
        self.catch_all: _CatchAllEdge | None = None
        # Routes at this node, keyed by HTTP method (or ANY_METHOD)
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all edge that consumes the remaining path."""

    param_name: str
    routes_by_method: dict[str, Route] = field(default_factory=dict)


class Router:
    """Compiled router with trie-based path matching.

    Static children are tried before the parameter child, and the
    parameter child before a catch-all, so the most specific structure
    wins regardless of registration order.

    Usage::

        router = Router()
        router.add(Route("/users/{id}", "GET", chain))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        table: dict[str, Route] | None = None

        for seg in parse_path(route.path):
            if seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(param_name=seg.param_name or "path")
                elif node.catch_all.param_name != seg.param_name:
                    msg = (
                        f"Route {route.path!r} names its catch-all {seg.param_name!r} but "
                        f"{node.catch_all.param_name!r} is already registered at that position"
                    )
                    raise ConfigurationError(msg)
                table = node.catch_all.routes_by_method
                break

            if seg.is_param:
                name = seg.param_name or ""
                edge = node.param_children.get(name)
                if edge is None:
                    edge = _ParamEdge(
                        param_name=name,
                        regex=re.compile(f"^{CONVERTERS[seg.param_type]}$"),
                        node=_TrieNode(),
                    )
                    node.param_children[name] = edge
                node = edge.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        if table is None:
            table = node.routes_by_method

        if route.method in table:
            existing = table[route.method]
            msg = (
                f"Duplicate route: {route.method} {route.path!r} is already bound "
                f"to {existing.chain.source!r}"
            )
            raise ConfigurationError(msg)
        table[route.method] = route
        self._routes.append(route)

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, in registration order."""
        return tuple(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't
        and no any-method handler is bound.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})

        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes_by_method, params = result

        route = routes_by_method.get(method) or routes_by_method.get(ANY_METHOD)
        if route is not None:
            return RouteMatch(route=route, path_params=params)

        raise MethodNotAllowed(frozenset(routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        # All parts consumed, return this node's routes
        if index == len(parts):
            if node.routes_by_method:
                return node.routes_by_method, params
            return None

        part = parts[index]

        # 1. Try static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Try parameter children
        for edge in node.param_children.values():
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        # 3. Try catch-all
        if node.catch_all is not None and node.catch_all.routes_by_method:
            remaining = "/".join(parts[index:])
            return node.catch_all.routes_by_method, {
                **params,
                node.catch_all.param_name: remaining,
            }

        return None
