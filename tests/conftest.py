"""Shared fixtures for pagechain tests.

``sample_site`` lays out a small but complete site on disk: Jinja and
Markdown pages, a two-level layout chain, a footer partial, and a stylesheet
asset. Tests that exercise the builder, the CLI, or the behaviour scenarios
all render this same tree so their expectations stay comparable.
"""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

import pytest

BASE_LAYOUT = """---
layout: root
section: main
---
<nav>
{% for item in navigation %}
<a href="{{ item.url }}"{% if item.selected %} class="{{ item.selected }}"{% endif %}>{{ item.title }}</a>
{% endfor %}
</nav>
<main data-section="{{ meta.section }}">{{ content }}</main>
{{ partial("footer", year=2025) }}
"""

ROOT_LAYOUT = """<!doctype html>
<html><head><title>{{ meta.title }} | {{ site_name }}</title></head>
<body>{{ content }}</body></html>
"""

FOOTER_PARTIAL = "<footer>{{ year }} {{ meta.title }}</footer>\n"


@dc.dataclass(slots=True)
class SampleSite:
    """Paths making up the on-disk sample site."""

    root: Path
    config_path: Path
    source_dir: Path
    output_dir: Path
    layouts_dir: Path
    partials_dir: Path

    def page(self, relative: str) -> str:
        """Return the rendered output at ``relative`` inside the output folder."""
        return (self.output_dir / relative).read_text(encoding="utf-8")


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def sample_site(tmp_path: Path) -> SampleSite:
    """Write a sample site with layouts, partials, pages, and an asset."""
    source_dir = tmp_path / "content"
    layouts_dir = tmp_path / "layouts"
    partials_dir = tmp_path / "partials"
    output_dir = tmp_path / "public"

    _write(
        source_dir / "index.html.j2",
        "---\ntitle: Home\nlayout: base\n---\n<p>Welcome to {{ site_name }}</p>\n",
    )
    _write(
        source_dir / "about" / "index.md",
        "---\ntitle: About\nlayout: base\nnavOrder: 1\n---\n"
        "Read the [team page](team.md#people).\n",
    )
    _write(
        source_dir / "about" / "team.md",
        "---\ntitle: Team\nlayout: base\n---\n# People\n",
    )
    _write(
        source_dir / "blog" / "first.md",
        "---\ntitle: First post\nlayout: base\nnavOrder: 2\n---\nHello.\n",
    )
    _write(source_dir / "css" / "site.css", "body { margin: 0; }\n")
    _write(layouts_dir / "base.html.j2", BASE_LAYOUT)
    _write(layouts_dir / "root.html.j2", ROOT_LAYOUT)
    _write(partials_dir / "footer.html.j2", FOOTER_PARTIAL)

    config_path = tmp_path / "site.yaml"
    config_path.write_text(
        """
source_dir: content
output_dir: public
layouts_dir: layouts
partials_dir: partials
context:
  site_name: Example
        """.strip()
        + "\n",
        encoding="utf-8",
    )
    return SampleSite(
        root=tmp_path,
        config_path=config_path,
        source_dir=source_dir,
        output_dir=output_dir,
        layouts_dir=layouts_dir,
        partials_dir=partials_dir,
    )
