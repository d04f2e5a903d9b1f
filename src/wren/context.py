"""Per-request context threaded through a route's composed chain.

Provides:
- ``RequestContext``: what every middleware, handler, component, layout,
  app-shell and error boundary receives as its only argument.
- ``State``: the mutable namespace on ``ctx.state``, shared by the stages
  of one request and never across requests.
- ``context_var`` / ``get_context()``: the active context for code that
  cannot take it as an argument.

Thread safety:
    A context is created fresh for each request and owned by the task
    handling it. ``ContextVar`` is task-local under asyncio. No locks needed.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wren.http.query import QueryParams
    from wren.http.request import Request
    from wren.http.response import Response


class State:
    """A mutable attribute namespace scoped to one request.

    Middleware write to it, later stages read what earlier ones wrote::

        def handler(ctx):
            ctx.state.user = load_user(ctx.request)
            return ctx.next()

        def default(ctx):
            return f"<p>{ctx.state.user.name}</p>"
    """

    __slots__ = ("_store",)

    def __init__(self) -> None:
        object.__setattr__(self, "_store", {})

    def __getattr__(self, name: str) -> Any:
        store: dict[str, Any] = object.__getattribute__(self, "_store")
        try:
            return store[name]
        except KeyError:
            msg = f"'state' has no attribute {name!r} in the current request"
            raise AttributeError(msg) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._store[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._store[name]
        except KeyError:
            msg = f"'state' has no attribute {name!r} in the current request"
            raise AttributeError(msg) from None

    def __contains__(self, name: str) -> bool:
        return name in self._store

    def get(self, name: str, default: Any = None) -> Any:
        """Get an attribute with a default value."""
        return self._store.get(name, default)

    def __repr__(self) -> str:
        return f"<state {self._store!r}>"


class RequestContext:
    """Everything a route stage can see about the current request.

    Attributes:
        request: The immutable request.
        params: Path parameters captured from the URL pattern.
        state: Request-local mutable namespace (see ``State``).
        route: URL pattern of the matched route, e.g. ``/blog/{slug}``.
        data: The ``Render.data`` handed to the page component.
        content: Markup of the stage being wrapped, set for each layout
            and for the app-shell.
        head: ``Render.head`` entries collected for the document ``<head>``.
        error: The captured failure. Only set while the error boundary runs.
    """

    __slots__ = (
        "_next",
        "content",
        "data",
        "error",
        "head",
        "params",
        "request",
        "route",
        "state",
    )

    def __init__(
        self,
        request: Request,
        *,
        route: str,
        params: dict[str, str] | None = None,
    ) -> None:
        self.request = request
        self.route = route
        self.params: dict[str, str] = dict(params or {})
        self.state = State()
        self.data: Any = None
        self.content: str = ""
        self.head: tuple[str, ...] = ()
        self.error: BaseException | None = None
        self._next: Callable[[], Awaitable[Response]] | None = None

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def url(self) -> str:
        """Request path plus query string."""
        return self.request.url

    @property
    def query(self) -> QueryParams:
        return self.request.query

    async def next(self) -> Response:
        """Run the rest of the chain and return its response.

        Only meaningful inside middleware. Each call advances past the
        middleware that made it.
        """
        if self._next is None:
            msg = "ctx.next() can only be called from middleware"
            raise RuntimeError(msg)
        return await self._next()

    def __repr__(self) -> str:
        return f"<RequestContext {self.method} {self.path} route={self.route!r}>"


context_var: ContextVar[RequestContext] = ContextVar("wren_context")
"""The active request context. Set by the dispatcher for the chain's duration."""


def get_context() -> RequestContext:
    """Return the active request context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()
