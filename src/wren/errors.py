"""Wren exception hierarchy.

Shared across discovery, composition, the router, and the dispatcher so
every module raises and catches the same types.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when route definitions or app configuration are invalid.

    Always a setup-time failure: the routing table is never served
    partially built.
    """


class MalformedArtifact(ConfigurationError):
    """A route artifact exports none of the recognized names.

    Recognized exports are ``handler``, ``handlers``, ``default`` and
    ``config``.  Discovery aborts instead of skipping the file.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Route file {path!r} has no relevant exports. "
            "Expected at least one of: handler, handlers, default, config."
        )


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or by user handlers. Error boundaries render
    with this status unless they choose their own.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class FailureKind(enum.Enum):
    """Where a request failure escaped from."""

    HANDLER = "handler"
    BOUNDARY = "boundary"


class RouteFailure(WrenError):
    """A failure that escaped a route's composed chain.

    ``HANDLER`` failures had no error boundary to go to.  ``BOUNDARY``
    failures were raised by the boundary itself and are terminal.

    Attributes:
        kind: Which part of the chain the failure escaped from.
        stage: The stage that raised (``"middleware"``, ``"handler"``,
            ``"page"``, ``"layout"``, ``"app"`` or ``"error"``).
        route: URL pattern of the matched route.
        error: The exception that escaped.
        original: For boundary failures, the error the boundary was
            handling when it failed.
    """

    def __init__(
        self,
        kind: FailureKind,
        *,
        stage: str,
        route: str,
        error: BaseException,
        original: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.stage = stage
        self.route = route
        self.error = error
        self.original = original
        super().__init__(f"{kind.value} failure in {stage} stage of {route}: {error!r}")
