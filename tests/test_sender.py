"""Tests for wren.server.sender response emission rules."""

import pytest

from wren.http.response import Response
from wren.server.sender import send_response


class TestSendResponseNoBodyStatuses:
    @pytest.mark.asyncio
    async def test_204_drops_body_and_sets_zero_content_length(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        # Even if a handler accidentally attaches body content, sender must
        # enforce RFC no-body semantics for 204.
        response = Response("unexpected-body").with_status(204)
        await send_response(response, send)

        assert messages[0]["type"] == "http.response.start"
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"

        assert messages[1]["type"] == "http.response.body"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_304_drops_body_and_sets_zero_content_length(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        response = Response("unexpected-body").with_status(304)
        await send_response(response, send)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    @pytest.mark.asyncio
    async def test_200_preserves_body(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        response = Response("ok")
        await send_response(response, send)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"2"
        assert messages[1]["body"] == b"ok"


class TestSendResponseHeaders:
    async def test_headers_lowercased_and_content_type_first(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        response = Response("{}", content_type="application/json").with_header("X-Trace", "abc")
        await send_response(response, send)

        headers = messages[0]["headers"]
        assert headers[0] == (b"content-type", b"application/json")
        assert (b"x-trace", b"abc") in headers
        assert messages[0]["status"] == 200


class TestSendResponseContentLength:
    async def test_body_less_copy_reports_original_length(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response("hello").without_body(), send)

        headers = messages[0]["headers"]
        assert headers.count((b"content-length", b"5")) == 1
        assert [name for name, _ in headers].count(b"content-length") == 1
        assert messages[1]["body"] == b""

    async def test_no_body_status_ignores_explicit_length(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response("gone").without_body().with_status(304), send)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
