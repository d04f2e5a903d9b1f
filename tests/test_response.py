"""Tests for wren.http.response — Response chaining and Redirect."""

import pytest

from wren.http.response import Redirect, Response


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.body == ""
        assert r.status == 200
        assert r.content_type == "text/html; charset=utf-8"
        assert r.headers == ()

    def test_with_status(self) -> None:
        assert Response().with_status(201).status == 201

    def test_chained_headers(self) -> None:
        r = Response().with_header("A", "1").with_header("B", "2")
        assert r.headers == (("A", "1"), ("B", "2"))

    def test_with_headers_dict(self) -> None:
        r = Response().with_headers({"A": "1", "B": "2"})
        assert ("A", "1") in r.headers
        assert ("B", "2") in r.headers

    def test_with_content_type(self) -> None:
        r = Response().with_content_type("application/json")
        assert r.content_type == "application/json"

    def test_chaining_returns_new_objects(self) -> None:
        r1 = Response("hello")
        r2 = r1.with_status(201)
        r3 = r2.with_header("X-Foo", "bar")

        assert r1.status == 200
        assert r2.status == 201
        assert r2.headers == ()
        assert r3.headers == (("X-Foo", "bar"),)

    def test_without_body_keeps_status_and_headers(self) -> None:
        r = Response("body", status=201).with_header("X-A", "1").without_body()
        assert r.body_bytes == b""
        assert r.status == 201
        assert r.headers == (("X-A", "1"), ("content-length", "4"))

    def test_without_body_keeps_existing_length(self) -> None:
        r = Response("body").with_header("Content-Length", "10").without_body()
        assert r.headers == (("Content-Length", "10"),)
        assert r.without_body().headers == r.headers

    def test_body_conversions(self) -> None:
        assert Response("héllo").body_bytes == "héllo".encode()
        assert Response(b"bytes").text == "bytes"

    def test_header_lookup_case_insensitive(self) -> None:
        r = Response().with_header("X-Request-Id", "42")
        assert r.header("x-request-id") == "42"
        assert r.header("Content-Type") == "text/html; charset=utf-8"
        assert r.header("missing", "default") == "default"

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Response().status = 500  # type: ignore[misc]


class TestRedirect:
    def test_defaults(self) -> None:
        r = Redirect("/login")
        assert r.url == "/login"
        assert r.status == 302
        assert r.headers == ()
