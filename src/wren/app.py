"""Wren application class.

Mutable during setup (route trees, middleware, error handlers).
Frozen at runtime when ``__call__()`` is first invoked.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.types import ErrorHandler
from wren.config import AppConfig
from wren.middleware.protocol import Middleware
from wren.routes.compose import RouteTable, build_route_table
from wren.routes.discovery import discover_routes
from wren.routes.manifest import RouteManifest
from wren.routing.route import Route
from wren.routing.router import Router
from wren.server.handler import handle_request

logger = logging.getLogger("wren.server")


class App:
    """The wren application.

    Mutable during setup (route trees, middleware, error handlers).
    Frozen at runtime when ``__call__()`` is first invoked.

    Usage::

        app = App(AppConfig(routes_dir="site/routes"))
        app.mount_routes()

    Thread safety:
        The setup phase is single-threaded (module import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the app, even when several ASGI workers call
        ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        # Compiled state (populated by _freeze)
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_tables",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._tables: list[RouteTable] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()

    # -- Route trees --

    def mount_routes(
        self,
        source: str | Path | RouteManifest | Mapping[str, Any] | None = None,
    ) -> RouteTable:
        """Compose a route tree and register its routes.

        Args:
            source: A routes directory, a ``RouteManifest``, or a mapping
                of ``{relative path: exports}``. Defaults to
                ``config.routes_dir``.

        Returns:
            The composed ``RouteTable``.

        Raises:
            ConfigurationError: The tree is malformed. Nothing from it is
                registered.
        """
        self._check_not_frozen()
        if source is None:
            source = self.config.routes_dir

        if isinstance(source, RouteManifest):
            manifest = source
        elif isinstance(source, Mapping):
            manifest = RouteManifest.from_mapping(source)
        else:
            manifest = discover_routes(source)

        table = build_route_table(manifest.records)
        self._tables.append(table)
        logger.debug("Mounted %d routes from %d artifacts", len(table), len(manifest))
        return table

    @property
    def routes(self) -> tuple[Route, ...]:
        """Every registered route, in route order. Freezes the app."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an app-wide error handler via decorator.

        Used for outcomes no route error boundary handles: 404, 405, and
        failures that escape a route chain::

            @app.error(404)
            def not_found(request):
                return ("<h1>Nothing here</h1>", 404)
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add an app-level middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            config=self.config,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Register every mounted table with the router
        router = Router()
        for table in self._tables:
            for route in table.routes():
                router.add(route)
        router.compile()
        self._router = router

        # 2. Capture middleware as an immutable tuple
        self._middleware = tuple(self._middleware_list)

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Mount routes and register middleware before the first request."
            )
            raise RuntimeError(msg)
