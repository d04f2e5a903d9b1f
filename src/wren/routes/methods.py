"""Per-method handler normalization.

A page's ``handler`` export is either one callable answering every
method, or a mapping of HTTP methods to callables::

    handler = lambda ctx: Response("any method")

    handlers = {
        "GET": show,
        "POST": create,
    }

A mapping with ``GET`` but no ``HEAD`` answers ``HEAD`` by running the
``GET`` chain and dropping the body.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from wren.errors import ConfigurationError
from wren.routing.route import ANY_METHOD

HTTP_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})


@dataclass(frozen=True, slots=True)
class MethodBinding:
    """One method a page answers.

    Attributes:
        method: Upper-case HTTP method, or ``ANY_METHOD``.
        handler: The callable to run, or ``None`` to render the page
            component directly.
        strip_body: Drop the response body (synthesized ``HEAD``).
    """

    method: str
    handler: Any = None
    strip_body: bool = False


def normalize_method_map(source: str, handlers: Mapping[str, Any]) -> dict[str, Any]:
    """Upper-case and validate a method -> handler mapping."""
    normalized: dict[str, Any] = {}
    for key, fn in handlers.items():
        method = str(key).upper()
        if method not in HTTP_METHODS:
            msg = (
                f"Route {source!r} has a handler for unknown method {key!r}. "
                f"Known methods: {', '.join(sorted(HTTP_METHODS))}."
            )
            raise ConfigurationError(msg)
        if method in normalized:
            msg = f"Route {source!r} defines the {method} handler more than once"
            raise ConfigurationError(msg)
        normalized[method] = fn
    if not normalized:
        msg = f"Route {source!r} exports an empty handlers mapping"
        raise ConfigurationError(msg)
    return normalized


def bind_methods(source: str, handlers: Any, component: Any) -> tuple[MethodBinding, ...]:
    """Resolve a page's exports into method bindings.

    - a callable binds to every method (``ANY_METHOD``)
    - a mapping binds each listed method, plus ``HEAD`` from ``GET``
    - no handler at all binds ``GET`` and ``HEAD`` to the page component
    """
    if handlers is None:
        if component is None:
            msg = f"Route {source!r} has neither a handler nor a default component"
            raise ConfigurationError(msg)
        return (
            MethodBinding("GET"),
            MethodBinding("HEAD", strip_body=True),
        )

    if callable(handlers):
        return (MethodBinding(ANY_METHOD, handlers),)

    methods = normalize_method_map(source, handlers)
    bindings = [MethodBinding(method, fn) for method, fn in methods.items()]
    if "GET" in methods and "HEAD" not in methods:
        bindings.append(MethodBinding("HEAD", methods["GET"], strip_body=True))
    return tuple(bindings)


def handler_for(bindings: tuple[MethodBinding, ...], method: str) -> MethodBinding | None:
    """The binding that serves *method*, if any.

    Exact method first, then the any-method binding.
    """
    fallback = None
    for binding in bindings:
        if binding.method == method:
            return binding
        if binding.method == ANY_METHOD:
            fallback = binding
    return fallback
