"""Tests for wren.routes.paths — source path to URL pattern translation."""

import pytest

from wren.errors import ConfigurationError
from wren.routes.paths import split_name, translate_path


class TestSplitName:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("index.py", ("index", ".py")),
            ("[...slug].py", ("[...slug]", ".py")),
            ("[...slug]", ("[...slug]", "")),
            ("about", ("about", "")),
            ("feed.xml.py", ("feed.xml", ".py")),
        ],
    )
    def test_split(self, name: str, expected: tuple[str, str]) -> None:
        assert split_name(name) == expected


class TestTranslate:
    @pytest.mark.parametrize(
        ("path", "pattern"),
        [
            ("index.py", "/"),
            ("about.py", "/about"),
            ("blog/index.py", "/blog"),
            ("blog/[slug].py", "/blog/{slug}"),
            ("docs/[...rest].py", "/docs/{rest:path}"),
            ("(marketing)/pricing.py", "/pricing"),
            ("(marketing)/index.py", "/"),
            ("shop/(cart)/[item_id]/edit.py", "/shop/{item_id}/edit"),
            ("blog/_layout.py", "/blog"),
            ("_middleware.py", "/"),
        ],
    )
    def test_url_pattern(self, path: str, pattern: str) -> None:
        assert translate_path(path).url_pattern == pattern

    def test_structure(self) -> None:
        translated = translate_path("(shop)/cart/[id].py")
        assert translated.directory == ("(shop)", "cart")
        assert translated.segment_depth == 2
        assert translated.stem == "[id]"
        assert translated.extension == ".py"

    def test_catch_all_must_be_last(self) -> None:
        with pytest.raises(ConfigurationError, match="must be the last"):
            translate_path("[...rest]/edit.py")

    def test_catch_all_before_index_is_last(self) -> None:
        assert translate_path("[...rest]/index.py").url_pattern == "/{rest:path}"

    @pytest.mark.parametrize("path", ["[].py", "[my-id].py", "[..rest].py"])
    def test_invalid_dynamic_segment(self, path: str) -> None:
        with pytest.raises(ConfigurationError, match="Invalid dynamic segment"):
            translate_path(path)

    def test_repeated_param(self) -> None:
        with pytest.raises(ConfigurationError, match="repeats path parameter"):
            translate_path("[id]/[id].py")

    def test_empty(self) -> None:
        with pytest.raises(ConfigurationError):
            translate_path("")
