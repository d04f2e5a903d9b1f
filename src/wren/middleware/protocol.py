"""Middleware protocol and Next type alias.

An app-level middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.

App-level middleware wraps every request, including those that end in
404 or 405. Route-tree ``_middleware`` files are different: they take
the ``RequestContext`` and run only for the pages beneath them.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from wren.http.request import Request
from wren.http.response import Response

# The next handler in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for wren app-level middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RateLimiter:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
