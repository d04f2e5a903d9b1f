"""Tests for wren.routes.dispatch — one composed chain per request."""

import asyncio
from typing import Any

import pytest

from wren.config import AppConfig
from wren.context import context_var, get_context
from wren.errors import FailureKind, HTTPError, RouteFailure
from wren.http.request import Request
from wren.http.response import Response
from wren.routes.compose import build_route_table
from wren.routes.dispatch import dispatch, error_status
from wren.routes.manifest import RouteManifest
from wren.routing.router import Router

CONFIG = AppConfig()


def _router(files: dict[str, Any]) -> Router:
    table = build_route_table(RouteManifest.from_mapping(files).records)
    router = Router()
    for route in table.routes():
        router.add(route)
    router.compile()
    return router


def _request(method: str, path: str) -> Request:
    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
    }
    return Request.from_asgi(scope, receive)


def _text(ctx):
    return "<p>page</p>"


async def _dispatch(router: Router, method: str, path: str) -> Response:
    return await dispatch(router.match(method, path), _request(method, path), config=CONFIG)


class TestFailures:
    async def test_handler_failure_without_boundary(self) -> None:
        error = RuntimeError("boom")

        def fail(ctx):
            raise error

        router = _router({"index.py": {"handler": fail}})
        with pytest.raises(RouteFailure) as exc_info:
            await _dispatch(router, "GET", "/")
        failure = exc_info.value
        assert failure.kind is FailureKind.HANDLER
        assert failure.stage == "handler"
        assert failure.route == "/"
        assert failure.error is error

    @pytest.mark.parametrize(
        ("files", "stage"),
        [
            ({"_middleware.py": {"handler": lambda ctx: 1}}, "middleware"),
            ({"_layout.py": {"default": lambda ctx: 1 / 0}}, "layout"),
            ({"_app.py": {"default": lambda ctx: 1 / 0}}, "app"),
        ],
    )
    async def test_failure_stage(self, files: dict[str, Any], stage: str) -> None:
        router = _router({**files, "index.py": {"default": lambda ctx: "page"}})
        with pytest.raises(RouteFailure) as exc_info:
            await _dispatch(router, "GET", "/")
        assert exc_info.value.stage == stage

    async def test_page_failure_stage(self) -> None:
        router = _router({"index.py": {"default": lambda ctx: 1 / 0}})
        with pytest.raises(RouteFailure) as exc_info:
            await _dispatch(router, "GET", "/")
        assert exc_info.value.stage == "page"
        assert isinstance(exc_info.value.error, ZeroDivisionError)

    async def test_boundary_failure_is_terminal(self) -> None:
        page_error = RuntimeError("page")
        boundary_calls: list[str] = []

        def fail(ctx):
            raise page_error

        def outer_boundary(ctx):
            boundary_calls.append("outer")
            return Response("outer")

        def inner_boundary(ctx):
            boundary_calls.append("inner")
            raise ValueError("boundary")

        router = _router(
            {
                "_error.py": {"handler": outer_boundary},
                "a/_error.py": {"handler": inner_boundary},
                "a/index.py": {"handler": fail},
            }
        )
        with pytest.raises(RouteFailure) as exc_info:
            await _dispatch(router, "GET", "/a")
        failure = exc_info.value
        assert failure.kind is FailureKind.BOUNDARY
        assert failure.stage == "error"
        assert isinstance(failure.error, ValueError)
        assert failure.original is page_error
        assert boundary_calls == ["inner"]

    async def test_boundary_sees_error_and_cannot_call_next(self) -> None:
        seen: list[Any] = []

        async def boundary(ctx):
            seen.append(ctx.error)
            with pytest.raises(RuntimeError, match="only be called from middleware"):
                await ctx.next()
            return Response("handled")

        def fail(ctx):
            raise HTTPError(status=409, detail="conflict")

        router = _router({"_error.py": {"handler": boundary}, "index.py": {"handler": fail}})
        response = await _dispatch(router, "GET", "/")
        assert response.text == "handled"
        assert isinstance(seen[0], HTTPError)

    async def test_boundary_value_gets_error_status(self) -> None:
        def fail(ctx):
            raise HTTPError(status=418)

        router = _router(
            {
                "_error.py": {"handler": lambda ctx: {"error": ctx.error.status}},
                "index.py": {"handler": fail},
            }
        )
        response = await _dispatch(router, "GET", "/")
        assert response.status == 418
        assert response.text == '{"error": 418}'

    def test_error_status(self) -> None:
        assert error_status(HTTPError(status=404)) == 404
        assert error_status(KeyError("x")) == 500


class TestNext:
    async def test_handler_cannot_continue_the_chain(self) -> None:
        calls: list[str] = []

        async def middleware(ctx):
            return await ctx.next()

        async def handler(ctx):
            calls.append("handler")
            return await ctx.next()

        router = _router(
            {"_middleware.py": {"handler": middleware}, "index.py": {"handler": handler}}
        )
        with pytest.raises(RouteFailure) as exc_info:
            await _dispatch(router, "GET", "/")
        assert calls == ["handler"]
        assert exc_info.value.stage == "handler"
        assert isinstance(exc_info.value.error, RuntimeError)
        assert "only be called from middleware" in str(exc_info.value.error)

    async def test_layout_cannot_continue_the_chain(self) -> None:
        async def layout(ctx):
            return await ctx.next()

        router = _router({"_layout.py": {"default": layout}, "index.py": {"default": _text}})
        with pytest.raises(RouteFailure) as exc_info:
            await _dispatch(router, "GET", "/")
        assert exc_info.value.stage == "layout"
        assert isinstance(exc_info.value.error, RuntimeError)

    async def test_next_twice_reruns_the_rest_of_the_chain(self) -> None:
        calls: list[str] = []

        async def outer(ctx):
            calls.append("outer")
            await ctx.next()
            return await ctx.next()

        async def inner(ctx):
            calls.append("inner")
            return await ctx.next()

        def page(ctx):
            calls.append("page")
            return f"<p>{len(calls)}</p>"

        router = _router(
            {"_middleware.py": {"handler": [outer, inner]}, "index.py": {"default": page}}
        )
        response = await _dispatch(router, "GET", "/")
        assert calls == ["outer", "inner", "page", "inner", "page"]
        assert "<p>5</p>" in response.text

    async def test_middleware_failure_after_next(self) -> None:
        async def middleware(ctx):
            await ctx.next()
            raise ValueError("after")

        router = _router(
            {"_middleware.py": {"handler": middleware}, "index.py": {"default": _text}}
        )
        with pytest.raises(RouteFailure) as exc_info:
            await _dispatch(router, "GET", "/")
        assert exc_info.value.stage == "middleware"


class TestHead:
    async def test_synthesized_head_reports_get_length(self) -> None:
        router = _router({"index.py": {"default": _text}})
        get = await _dispatch(router, "GET", "/")
        head = await _dispatch(router, "HEAD", "/")
        assert head.body_bytes == b""
        assert head.header("content-length") == str(len(get.body_bytes))


class TestContext:
    async def test_context_var_set_during_chain_and_reset(self) -> None:
        seen: list[str] = []

        def page(ctx):
            seen.append(get_context().route)
            return "ok"

        router = _router({"users/[id].py": {"default": page}})
        await _dispatch(router, "GET", "/users/3")
        assert seen == ["/users/{id}"]
        with pytest.raises(LookupError):
            context_var.get()

    async def test_params_on_context_and_request(self) -> None:
        def handler(ctx):
            return Response(f"{ctx.params['id']}:{ctx.request.path_params['id']}")

        router = _router({"users/[id].py": {"handler": handler}})
        response = await _dispatch(router, "GET", "/users/3")
        assert response.text == "3:3"

    async def test_concurrent_requests_have_separate_state(self) -> None:
        async def middleware(ctx):
            ctx.state.user = ctx.params["name"]
            await asyncio.sleep(0.01)
            return await ctx.next()

        async def page(ctx):
            await asyncio.sleep(0)
            return f"<p>{ctx.state.user}</p>"

        router = _router(
            {"[name]/_middleware.py": {"handler": middleware}, "[name]/index.py": {"default": page}}
        )
        responses = await asyncio.gather(
            *(_dispatch(router, "GET", f"/{name}") for name in ("ada", "bob", "cy"))
        )
        for name, response in zip(("ada", "bob", "cy"), responses, strict=True):
            assert f"<p>{name}</p>" in response.text


class TestCancellation:
    async def test_cancellation_propagates_and_resets_context(self) -> None:
        started = asyncio.Event()
        boundary_calls: list[Any] = []

        async def slow(ctx):
            started.set()
            await asyncio.sleep(10)
            return Response("late")

        def boundary(ctx):
            boundary_calls.append(ctx.error)
            return Response("boundary")

        router = _router({"_error.py": {"handler": boundary}, "slow.py": {"handler": slow}})
        task = asyncio.create_task(_dispatch(router, "GET", "/slow"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert boundary_calls == []
        with pytest.raises(LookupError):
            context_var.get()
