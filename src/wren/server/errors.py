"""Error handling pipeline for wren requests.

Maps HTTPError exceptions, route failures and unexpected errors to
Response objects, using registered error handlers or sensible defaults.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from wren.errors import FailureKind, HTTPError, RouteFailure
from wren.http.request import Request
from wren.http.response import Response
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")

ErrorHandlers = dict[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: BaseException,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    if isinstance(result, Response):
        return result
    return negotiate(result)


def _debug_body(exc: BaseException) -> str:
    """Plain HTML traceback for debug mode."""
    formatted = "".join(traceback.format_exception(exc))
    return (
        "<h1>Internal Server Error</h1>"
        f"<pre>{html.escape(formatted)}</pre>"
    )


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Preserve the HTTP status from the exception unless the handler
        # explicitly returned a Response with its own status
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail, content_type="text/plain; charset=utf-8").with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_route_failure(
    failure: RouteFailure,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map a failure that escaped a route chain to a Response.

    A failed error boundary always ends in a generic 500. A failure with
    no boundary keeps its HTTP status when it is an ``HTTPError``.
    """
    if failure.kind is FailureKind.BOUNDARY:
        logger.error(
            "Error boundary of %s failed with %r while handling %r",
            failure.route,
            failure.error,
            failure.original,
            exc_info=failure.error,
        )
        return await _internal_error_response(failure.error, request, error_handlers, debug)

    if isinstance(failure.error, HTTPError):
        return await handle_http_error(failure.error, request, error_handlers, debug)
    return await handle_internal_error(failure.error, request, error_handlers, debug)


async def handle_internal_error(
    exc: BaseException,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.error("500 %s %s", request.method, request.path, exc_info=exc)
    return await _internal_error_response(exc, request, error_handlers, debug)


async def _internal_error_response(
    exc: BaseException,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        return Response(body=_debug_body(exc), status=500)

    return Response(
        body="Internal Server Error",
        status=500,
        content_type="text/plain; charset=utf-8",
    )
