"""Request dispatch — runs one composed chain for one request.

Stages, in order::

    middleware (outermost first, each calling ctx.next())
      -> handler
        -> page component
          -> layouts (innermost to outermost)
            -> app-shell, or the default document

Any stage may return a ``Response`` to end the request there. An
exception from any stage is rendered by the chain's nearest error
boundary; an exception from the boundary itself is terminal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wren._internal.invoke import invoke
from wren.config import AppConfig
from wren.context import RequestContext, context_var
from wren.errors import FailureKind, HTTPError, RouteFailure
from wren.http.response import Response
from wren.routes.document import render_document, wrap_app
from wren.routes.types import ArtifactRecord, ComposedChain, Render
from wren.server.negotiation import negotiate

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.routing.route import Route, RouteMatch

logger = logging.getLogger("wren.routes")


class _Progress:
    """Name of the stage currently running, for failure reports."""

    __slots__ = ("stage",)

    def __init__(self) -> None:
        self.stage = "middleware"


def error_status(error: BaseException) -> int:
    """HTTP status an error renders with by default."""
    if isinstance(error, HTTPError):
        return error.status
    return 500


def _markup(value: Any) -> str:
    """Coerce a component's return value to markup."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if hasattr(value, "__html__"):
        return value.__html__()
    return str(value)


def _document_response(
    body: str,
    render: Render,
    status: int,
    config: AppConfig,
) -> Response:
    return Response(
        body=body,
        status=render.status or status,
        content_type=f"text/html; charset={config.charset}",
        headers=render.headers,
    )


async def dispatch(match: RouteMatch, request: Request, *, config: AppConfig) -> Response:
    """Run the composed chain of *match* and return its response.

    Raises:
        RouteFailure: A failure escaped the chain, either because no
            error boundary is bound or because the boundary failed.
    """
    route = match.route
    chain = route.chain
    ctx = RequestContext(
        request.with_path_params(match.path_params),
        route=chain.pattern,
        params=match.path_params,
    )
    progress = _Progress()
    token = context_var.set(ctx)
    try:
        try:
            response = await _run_chain(ctx, route, progress, config)
        except Exception as exc:
            response = await _recover(ctx, chain, exc, progress.stage, config)
        if route.strip_body:
            response = response.without_body()
        return response
    finally:
        context_var.reset(token)


async def _run_chain(
    ctx: RequestContext,
    route: Route,
    progress: _Progress,
    config: AppConfig,
) -> Response:
    middlewares = route.chain.middlewares

    async def run_from(index: int) -> Response:
        if index == len(middlewares):
            # Only middleware may continue the chain
            ctx._next = None
            return await _run_route(ctx, route, progress, config)

        middleware = middlewares[index]

        async def proceed() -> Response:
            try:
                response = await run_from(index + 1)
            finally:
                ctx._next = proceed
            progress.stage = "middleware"
            return response

        ctx._next = proceed
        progress.stage = "middleware"
        result = await invoke(middleware, ctx)
        if not isinstance(result, Response):
            name = getattr(middleware, "__qualname__", repr(middleware))
            msg = (
                f"Middleware {name} in {route.chain.source} returned "
                f"{type(result).__name__}. Return a Response or await ctx.next()."
            )
            raise TypeError(msg)
        return result

    return await run_from(0)


async def _run_route(
    ctx: RequestContext,
    route: Route,
    progress: _Progress,
    config: AppConfig,
) -> Response:
    chain = route.chain
    render = Render()

    if route.handler is not None:
        progress.stage = "handler"
        result = await invoke(route.handler, ctx)
        if isinstance(result, Response):
            return result
        if result is None:
            msg = f"Handler of {chain.source} returned None. Return a Response or Render."
            raise TypeError(msg)
        if not isinstance(result, Render):
            return negotiate(result)
        render = result

    if chain.page_component is None:
        msg = f"Handler of {chain.source} returned Render but the route has no default component"
        raise TypeError(msg)

    return await _render_page(ctx, chain, render, progress, config)


async def _render_page(
    ctx: RequestContext,
    chain: ComposedChain,
    render: Render,
    progress: _Progress,
    config: AppConfig,
) -> Response:
    ctx.data = render.data
    ctx.head = render.head

    progress.stage = "page"
    output = await invoke(chain.page_component, ctx)
    if isinstance(output, Response):
        return output
    markup = _markup(output)

    for layout in reversed(chain.layouts):
        progress.stage = "layout"
        ctx.content = markup
        output = await invoke(layout.component, ctx)
        if isinstance(output, Response):
            return output
        markup = _markup(output)

    if chain.app_shell is None:
        body = render_document(
            markup, ctx.head, lang=config.document_lang, charset=config.charset
        )
        return _document_response(body, render, 200, config)

    # The shell owns <html> and <head>; it reads ctx.head itself
    progress.stage = "app"
    ctx.content = markup
    output = await invoke(chain.app_shell.component, ctx)
    if isinstance(output, Response):
        return output
    return _document_response(wrap_app(_markup(output)), render, 200, config)


async def _recover(
    ctx: RequestContext,
    chain: ComposedChain,
    error: Exception,
    stage: str,
    config: AppConfig,
) -> Response:
    """Hand *error* to the chain's error boundary, once."""
    boundary = chain.error_boundary
    if boundary is None:
        raise RouteFailure(
            FailureKind.HANDLER, stage=stage, route=chain.pattern, error=error
        ) from error

    logger.debug(
        "Error boundary %s handling %s failure in %s: %r",
        boundary.source,
        stage,
        chain.pattern,
        error,
    )
    ctx.error = error
    ctx._next = None
    try:
        return await _run_boundary(ctx, boundary, error_status(error), config)
    except Exception as boundary_error:
        raise RouteFailure(
            FailureKind.BOUNDARY,
            stage="error",
            route=chain.pattern,
            error=boundary_error,
            original=error,
        ) from boundary_error


def _boundary_handler(boundary: ArtifactRecord, method: str) -> Any:
    handlers = boundary.handlers
    if handlers is None or callable(handlers):
        return handlers
    handler = handlers.get(method)
    if handler is None and method == "HEAD":
        handler = handlers.get("GET")
    return handler


async def _run_boundary(
    ctx: RequestContext,
    boundary: ArtifactRecord,
    status: int,
    config: AppConfig,
) -> Response:
    render = Render()

    handler = _boundary_handler(boundary, ctx.method)
    if handler is not None:
        result = await invoke(handler, ctx)
        if isinstance(result, Response):
            return result
        if result is None:
            msg = f"Error boundary {boundary.source} returned None. Return a Response or Render."
            raise TypeError(msg)
        if not isinstance(result, Render):
            response = negotiate(result)
            if isinstance(result, str | bytes | dict | list):
                response = response.with_status(status)
            return response
        render = result

    if boundary.component is None:
        msg = f"Error boundary {boundary.source} cannot handle {ctx.method} requests"
        raise TypeError(msg)

    ctx.data = render.data
    ctx.head = render.head
    output = await invoke(boundary.component, ctx)
    if isinstance(output, Response):
        return output
    body = render_document(
        _markup(output), ctx.head, lang=config.document_lang, charset=config.charset
    )
    return _document_response(body, render, status, config)
