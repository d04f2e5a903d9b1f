"""Tests for wren.errors and wren.server.errors — exceptions and error responses."""

import logging
from typing import Any

import pytest

from wren.errors import (
    ConfigurationError,
    FailureKind,
    HTTPError,
    MalformedArtifact,
    MethodNotAllowed,
    NotFound,
    RouteFailure,
    WrenError,
)
from wren.http.request import Request
from wren.http.response import Response
from wren.server.errors import (
    call_error_handler,
    handle_http_error,
    handle_internal_error,
    handle_route_failure,
)


def _request() -> Request:
    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request.from_asgi({"type": "http", "method": "GET", "path": "/x"}, receive)


class TestHierarchy:
    def test_http_error_is_wren_error(self) -> None:
        assert issubclass(HTTPError, WrenError)

    def test_malformed_is_configuration_error(self) -> None:
        assert issubclass(MalformedArtifact, ConfigurationError)

    def test_route_failure_is_wren_error(self) -> None:
        assert issubclass(RouteFailure, WrenError)


class TestHTTPError:
    def test_str_with_detail(self) -> None:
        assert str(HTTPError(status=400, detail="bad")) == "400: bad"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_frozen(self) -> None:
        err = HTTPError(status=400)
        with pytest.raises(AttributeError):
            err.status = 500  # type: ignore[misc]

    def test_not_found_defaults(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"

    def test_method_not_allowed_allow_header(self) -> None:
        err = MethodNotAllowed(frozenset({"POST", "GET"}))
        assert err.status == 405
        assert err.headers == (("Allow", "GET, POST"),)
        assert "GET, POST" in err.detail


class TestRouteFailure:
    def test_attributes_and_message(self) -> None:
        original = KeyError("k")
        failure = RouteFailure(
            FailureKind.BOUNDARY,
            stage="error",
            route="/a",
            error=ValueError("v"),
            original=original,
        )
        assert failure.original is original
        assert str(failure).startswith("boundary failure in error stage of /a")


class TestErrorHandlers:
    async def test_handler_arity(self) -> None:
        request = _request()
        exc = NotFound()
        assert (await call_error_handler(lambda: "zero", request, exc)).text == "zero"
        assert (await call_error_handler(lambda r: r.path, request, exc)).text == "/x"

        async def two(req, err):
            return Response(str(err.status))

        assert (await call_error_handler(two, request, exc)).text == "404"

    async def test_http_error_default(self) -> None:
        response = await handle_http_error(NotFound(), _request(), {}, debug=False)
        assert response.status == 404
        assert response.text == "Not Found"

    async def test_http_error_keeps_status_from_handler(self) -> None:
        handlers = {404: lambda: "<h1>missing</h1>"}
        response = await handle_http_error(NotFound(), _request(), handlers, debug=False)
        assert response.status == 404
        assert response.text == "<h1>missing</h1>"

    async def test_internal_error_debug_traceback(self) -> None:
        try:
            raise RuntimeError("<boom>")
        except RuntimeError as exc:
            response = await handle_internal_error(exc, _request(), {}, debug=True)
        assert response.status == 500
        assert "&lt;boom&gt;" in response.text
        assert "<pre>" in response.text

    async def test_internal_error_production(self) -> None:
        response = await handle_internal_error(RuntimeError("x"), _request(), {}, debug=False)
        assert response.text == "Internal Server Error"

    async def test_boundary_failure_logged_with_both_errors(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        failure = RouteFailure(
            FailureKind.BOUNDARY,
            stage="error",
            route="/a",
            error=ValueError("from boundary"),
            original=HTTPError(status=404),
        )
        with caplog.at_level(logging.ERROR, logger="wren.server"):
            response = await handle_route_failure(failure, _request(), {}, debug=False)
        assert response.status == 500
        assert "from boundary" in caplog.text
        assert "HTTPError" in caplog.text

    async def test_handler_failure_keeps_http_status(self) -> None:
        failure = RouteFailure(
            FailureKind.HANDLER, stage="handler", route="/a", error=HTTPError(status=403)
        )
        response = await handle_route_failure(failure, _request(), {}, debug=False)
        assert response.status == 403
