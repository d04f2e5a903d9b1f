"""Shared type aliases used across wren modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: receives the RequestContext, returns Response | Render | value
HandlerFn: TypeAlias = Callable[..., Any]

# Page component, layout, or app-shell: receives the RequestContext, returns markup
RenderFn: TypeAlias = Callable[..., Any]

# Filesystem middleware: receives the RequestContext, returns a Response
MiddlewareFn: TypeAlias = Callable[..., Any]

# App-level error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
