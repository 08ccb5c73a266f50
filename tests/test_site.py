"""End-to-end tests for :class:`pagechain.site.SiteBuilder`.

Every test renders the ``sample_site`` fixture from ``conftest.py``: Jinja and
Markdown pages wrapped in a ``base`` layout that itself extends ``root``, a
``footer`` partial pulled in through the ``partial()`` helper, and a
stylesheet copied verbatim.
"""

from __future__ import annotations

import logging
import typing as typ

import pytest
from bs4 import BeautifulSoup

from pagechain.config import load_site_config
from pagechain.errors import FrontMatterError, LayoutNotFoundError
from pagechain.site import BuildReport, SiteBuilder

if typ.TYPE_CHECKING:
    from conftest import SampleSite

    from pagechain.content import ContentFile
    from pagechain.render.context import RenderingContext


def _build(
    sample_site: SampleSite, **kwargs: typ.Any
) -> tuple[SiteBuilder, BuildReport]:
    builder = SiteBuilder(load_site_config(sample_site.config_path), **kwargs)
    return builder, builder.run()


def _nav_link(html: str, title: str) -> typ.Any:
    soup = BeautifulSoup(html, "html.parser")
    return soup.find("nav").find("a", string=title)


def test_build_writes_pages_and_assets(sample_site: SampleSite) -> None:
    _builder, report = _build(sample_site)

    assert report.ok, report.failures
    written = {
        path.relative_to(sample_site.output_dir).as_posix() for path in report.written
    }
    assert written == {
        "index.html",
        "about/index.html",
        "about/team.html",
        "blog/first.html",
        "css/site.css",
    }
    assert sample_site.page("css/site.css") == "body { margin: 0; }\n"


def test_pages_are_wrapped_in_layout_chain(sample_site: SampleSite) -> None:
    _build(sample_site)

    html = sample_site.page("index.html")
    soup = BeautifulSoup(html, "html.parser")
    assert soup.title.string == "Home | Example"
    main = soup.find("main")
    assert main["data-section"] == "main", "layout metadata reaches templates"
    assert main.p.get_text() == "Welcome to Example"
    assert "pagechain:post-process" not in html


def test_partials_render_with_page_metadata(sample_site: SampleSite) -> None:
    _build(sample_site)

    assert "<footer>2025 Home</footer>" in sample_site.page("index.html")
    assert "<footer>2025 Team</footer>" in sample_site.page("about/team.html")


def test_markdown_pages_render_and_rewrite_links(sample_site: SampleSite) -> None:
    _build(sample_site)

    soup = BeautifulSoup(sample_site.page("about/index.html"), "html.parser")
    assert soup.find("main").find("a")["href"] == "team.html#people"
    team = BeautifulSoup(sample_site.page("about/team.html"), "html.parser")
    assert team.h1.get_text() == "People"


def test_navigation_highlights_current_page(sample_site: SampleSite) -> None:
    _builder, report = _build(sample_site)

    assert [item.url for item in report.navigation] == ["/about/", "/blog/first.html"]
    about = _nav_link(sample_site.page("about/index.html"), "About")
    assert about["class"] == ["current"]
    from_team = _nav_link(sample_site.page("about/team.html"), "About")
    assert from_team["class"] == ["parent"]
    from_home = _nav_link(sample_site.page("index.html"), "About")
    assert not from_home.has_attr("class")


def test_failing_page_does_not_stop_build(sample_site: SampleSite) -> None:
    (sample_site.source_dir / "broken.html").write_text(
        "---\nlayout: nope\n---\n<p>x</p>\n", encoding="utf-8"
    )
    (sample_site.source_dir / "reserved.html").write_text(
        "---\nurl: /elsewhere/\n---\n<p>x</p>\n", encoding="utf-8"
    )

    _builder, report = _build(sample_site)

    assert not report.ok
    failures = dict(report.failures)
    assert isinstance(failures["broken.html"], LayoutNotFoundError)
    assert isinstance(failures["reserved.html"], FrontMatterError)
    assert (sample_site.output_dir / "index.html").exists()
    assert not (sample_site.output_dir / "broken.html").exists()


def test_fail_fast_raises_before_writing_pages(sample_site: SampleSite) -> None:
    (sample_site.source_dir / "a_broken.html").write_text(
        "---\nlayout: nope\n---\n", encoding="utf-8"
    )

    with pytest.raises(LayoutNotFoundError, match="a_broken.html"):
        _build(sample_site, fail_fast=True)

    written = (
        [path for path in sample_site.output_dir.rglob("*") if path.is_file()]
        if sample_site.output_dir.exists()
        else []
    )
    assert written == [], "an aborted build must not write any page"


def test_custom_renderers_are_layered(sample_site: SampleSite) -> None:
    def shout(ctx: RenderingContext, file: ContentFile) -> bytes:
        return ctx.content.upper()

    (sample_site.source_dir / "shout.html.up").write_text("quiet", encoding="utf-8")

    _builder, report = _build(sample_site, renderers={"up": shout})

    assert report.ok, report.failures
    assert sample_site.page("shout.html") == "QUIET"
    assert not (sample_site.output_dir / "shout.html.up").exists()


def test_output_dir_override(sample_site: SampleSite) -> None:
    target = sample_site.root / "elsewhere"

    _build(sample_site, output_dir=target)

    assert (target / "index.html").exists()
    assert not sample_site.output_dir.exists()


def test_templates_inside_source_are_not_published(sample_site: SampleSite) -> None:
    nested = sample_site.source_dir / "_layouts"
    nested.mkdir()
    (nested / "plain.html").write_text("<div>{{content}}</div>", encoding="utf-8")
    config = load_site_config(sample_site.config_path)
    config.layouts_dir = nested

    report = SiteBuilder(config).run()

    written = {path.name for path in report.written}
    assert "plain.html" not in written
    assert not (sample_site.output_dir / "_layouts").exists()


def test_navigation_without_rendering(sample_site: SampleSite) -> None:
    nav = SiteBuilder(load_site_config(sample_site.config_path)).navigation()

    assert nav.title == "Home"
    assert [item.title for item in nav.flatten()] == ["About", "Team", "First post"]
    assert not sample_site.output_dir.exists()


def test_missing_source_dir(sample_site: SampleSite) -> None:
    config = load_site_config(sample_site.config_path)
    config.source_dir = sample_site.root / "nowhere"

    with pytest.raises(FileNotFoundError, match="nowhere"):
        SiteBuilder(config).run()


def test_navigation_skips_pages_that_fail_to_load(
    sample_site: SampleSite, caplog: pytest.LogCaptureFixture
) -> None:
    (sample_site.source_dir / "bad.html").write_text(
        "---\ntitle: [unclosed\n---\n<p>x</p>\n", encoding="utf-8"
    )

    with caplog.at_level(logging.WARNING, logger="pagechain.site"):
        nav = SiteBuilder(load_site_config(sample_site.config_path)).navigation()

    assert [item.title for item in nav.flatten()] == ["About", "Team", "First post"]
    assert "skipping bad.html" in caplog.text
