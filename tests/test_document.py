"""Tests for wren.routes.document — document framing."""

from wren.routes.document import render_document, wrap_app


class TestRenderDocument:
    def test_default_shell(self) -> None:
        assert render_document("<h1>foo</h1>") == (
            '<!DOCTYPE html><html><head><meta charset="utf-8"></head>'
            "<body><h1>foo</h1></body></html>"
        )

    def test_head_and_lang(self) -> None:
        document = render_document("x", ("<title>T</title>",), lang="en")
        assert document.startswith('<!DOCTYPE html><html lang="en"><head>')
        assert '<meta charset="utf-8"><title>T</title></head>' in document


class TestWrapApp:
    def test_adds_doctype(self) -> None:
        assert wrap_app("<html></html>") == "<!DOCTYPE html><html></html>"

    def test_existing_doctype_kept(self) -> None:
        markup = "<!doctype html><html></html>"
        assert wrap_app(markup) == markup
