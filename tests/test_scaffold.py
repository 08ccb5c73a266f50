"""Tests for page detection and navigation scaffolding."""

from __future__ import annotations

import re
import typing as typ

import pytest

from pagechain.content import ContentFile
from pagechain.errors import FrontMatterError
from pagechain.render.registry import register
from pagechain.scaffold import is_page, scaffold


@pytest.fixture
def resolver() -> typ.Callable[[str], str]:
    return register("md", lambda ctx, file: b"", output_suffix=".html").resolve_name


def test_is_page_checks_rendered_names(resolver: typ.Callable[[str], str]) -> None:
    assert is_page("about.html")
    assert is_page("page.html.j2")
    assert not is_page("about.md")
    assert is_page("about.md", name_resolver=resolver)
    assert not is_page("style.css", name_resolver=resolver)


def test_is_page_accepts_callables_and_patterns() -> None:
    assert is_page("feed.xml", re.compile(r"\.xml$"))
    assert is_page("notes.txt", lambda path: path.endswith(".txt"))
    assert not is_page("notes.txt", lambda path: False)


def test_scaffold_attaches_navigation_views(resolver: typ.Callable[[str], str]) -> None:
    pages = [
        ContentFile("index.md", meta={"title": "Home"}),
        ContentFile("guide/index.md", meta={"title": "Guide"}),
        ContentFile("guide/setup.md", meta={"title": "Setup"}),
    ]

    nav = scaffold(pages, name_resolver=resolver)

    assert [page.meta["url"] for page in pages] == [
        "/",
        "/guide/",
        "/guide/setup.html",
    ]
    assert nav.title == "Home"
    setup_view = pages[2].navigation
    assert setup_view is not None
    assert setup_view is not nav
    assert setup_view.current().title == "Setup"  # type: ignore[union-attr]
    assert setup_view.get("/guide/").selected == "parent"  # type: ignore[union-attr]
    assert pages[0].navigation.selected == "current"  # type: ignore[union-attr]


def test_scaffold_rejects_reserved_keys() -> None:
    with pytest.raises(FrontMatterError):
        scaffold([ContentFile("a.html", meta={"url": "/b/"})])


def test_scaffold_keeps_precomputed_urls() -> None:
    page = ContentFile("a.html", meta={"url": "/custom/"})

    nav = scaffold([page], assign_urls=False)

    assert nav.get(0).url == "/custom/"  # type: ignore[union-attr]
