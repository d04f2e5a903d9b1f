"""App-level middleware protocol."""

from wren.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
