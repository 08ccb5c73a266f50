"""Unit tests for mapping source paths onto site URLs."""

from __future__ import annotations

import re

import pytest

from pagechain.render.registry import register
from pagechain.urls import DEFAULT_INDEX_PATTERN, is_index, make_url


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("index.html", "/"),
        ("about/index.html", "/about/"),
        ("about\\index.html", "/about/"),
        ("blog/post.html", "/blog/post.html"),
        ("/already/a-url.html", "/already/a-url.html"),
        ("docs/index.htm", "/docs/"),
    ],
)
def test_make_url_with_default_index_pattern(path: str, expected: str) -> None:
    assert make_url(path, DEFAULT_INDEX_PATTERN) == expected


def test_make_url_without_index_patterns_keeps_file_names() -> None:
    assert make_url("about/index.html") == "/about/index.html"


def test_string_index_pattern_matches_whole_basename() -> None:
    assert make_url("docs/README.md", "README.md") == "/docs/"
    assert make_url("docs/NOT-README.md", "README.md") == "/docs/NOT-README.md"


def test_name_resolver_runs_before_index_detection() -> None:
    resolver = register("j2", lambda ctx, file: b"").resolve_name

    assert make_url("guide/index.html.j2", "index.html") == "/guide/index.html.j2"
    assert make_url("guide/index.html.j2", "index.html", resolver) == "/guide/"


def test_is_index_accepts_pattern_lists() -> None:
    patterns = [re.compile(r"^default\.\w+"), "home.html"]

    assert is_index("/a/default.htm", patterns)
    assert is_index("/a/home.html", patterns)
    assert not is_index("/a/index.html", patterns)
    assert not is_index("/a/index.html", None), "no patterns means no index files"


@pytest.mark.parametrize(
    "path",
    [
        "index.html",
        "about\\index.html",
        "blog/post.html",
        "/docs/guide/",
        "guide/index.html.j2",
        "",
    ],
)
def test_make_url_is_idempotent(path: str) -> None:
    resolver = register("j2", lambda ctx, file: b"").resolve_name

    once = make_url(path, DEFAULT_INDEX_PATTERN, resolver)

    assert make_url(once, DEFAULT_INDEX_PATTERN, resolver) == once
    assert make_url(make_url(path), None) == make_url(path)
