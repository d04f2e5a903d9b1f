"""ASGI handler — translates ASGI scope/messages to wren types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through middleware and routing,
and sends Response back through ASGI send().
"""

from collections.abc import Callable
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig
from wren.errors import HTTPError, RouteFailure
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next
from wren.routes.dispatch import dispatch as dispatch_route
from wren.routing.router import Router
from wren.server.errors import (
    ErrorHandlers,
    handle_http_error,
    handle_internal_error,
    handle_route_failure,
)
from wren.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    config: AppConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    debug = config.debug

    try:
        # Build the innermost handler (router match + route chain)
        async def dispatch(req: Request) -> Response:
            match = router.match(req.method, req.path)
            return await dispatch_route(match, req, config=config)

        # Wrap middleware around the dispatch
        handler = dispatch
        for mw in reversed(middleware):
            outer = handler
            mw_ref = mw

            async def make_next(req: Request, _mw: Any = mw_ref, _next: Next = outer) -> Response:
                return await _mw(req, _next)

            handler = make_next

        # Execute the full pipeline
        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except RouteFailure as failure:
        response = await handle_route_failure(failure, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)

    await send_response(response, send)
