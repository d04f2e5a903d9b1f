"""Wren — filesystem-routed ASGI framework.

A directory of route files is the routing table. Pages render inside the
``_layout`` and ``_app`` files above them, ``_middleware`` files run before
them, and the nearest ``_error`` file renders their failures.

Basic usage::

    from wren import App, AppConfig

    app = App(AppConfig(routes_dir="routes"))
    app.mount_routes()

A route file::

    # routes/blog/[slug].py
    from wren import Render

    def handler(ctx):
        return Render(data=load_post(ctx.params["slug"]))

    def default(ctx):
        return f"<article>{ctx.data.body}</article>"
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "MalformedArtifact",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Render",
    "Request",
    "RequestContext",
    "Response",
    "RouteConfig",
    "RouteFailure",
    "RouteManifest",
    "WrenError",
    "get_context",
    "sort_route_paths",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name in ("Render", "RouteConfig"):
        from wren.routes import types as _types

        return getattr(_types, name)

    if name == "RouteManifest":
        from wren.routes.manifest import RouteManifest

        return RouteManifest

    if name == "sort_route_paths":
        from wren.routes.sort import sort_route_paths

        return sort_route_paths

    if name in ("Middleware", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RequestContext", "get_context"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MalformedArtifact",
        "MethodNotAllowed",
        "NotFound",
        "RouteFailure",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
