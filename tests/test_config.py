"""Tests for loading ``site.yaml`` into :class:`SiteConfig`."""

from __future__ import annotations

import re
import typing as typ

import pytest

from pagechain.config import SiteConfigError, build_site_config, load_site_config
from pagechain.urls import DEFAULT_INDEX_PATTERN

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


def test_load_site_config_resolves_paths(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
source_dir: content
output_dir: dist
layouts_dir: theme/layouts
pages: '\\.(html|xml)\\b'
index_files:
  - '^index\\.\\w+'
  - '^README\\.md$'
pygments_style: default
strict_templates: true
context:
  site_name: Example
""",
    )

    config = load_site_config(path)

    assert config.source_dir == tmp_path / "content"
    assert config.output_dir == tmp_path / "dist"
    assert config.layouts_dir == tmp_path / "theme" / "layouts"
    assert config.partials_dir is None
    assert config.page_pattern.search("feed.xml")
    assert [pattern.pattern for pattern in config.index_patterns] == [
        r"^index\.\w+",
        r"^README\.md$",
    ]
    assert config.pygments_style == "default"
    assert config.strict_templates is True
    assert config.context == {"site_name": "Example"}


def test_defaults(tmp_path: Path) -> None:
    config = load_site_config(_write_config(tmp_path, "source_dir: /srv/site"))

    assert config.output_dir == tmp_path / "public"
    assert config.index_patterns == [DEFAULT_INDEX_PATTERN]
    assert config.page_pattern.search("a.html")
    assert config.pygments_style == "monokai"
    assert config.context == {}


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_site_config(tmp_path / "missing.yaml")


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="mapping"):
        load_site_config(_write_config(tmp_path, "- a\n- b"))


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({}, "source_dir"),
        ({"source_dir": 3}, "must be a path"),
        ({"source_dir": "c", "pages": "("}, "not a valid regular expression"),
        ({"source_dir": "c", "index_files": {"a": 1}}, "list of patterns"),
        ({"source_dir": "c", "context": ["x"]}, "must be a mapping"),
        ({"source_dir": "c", "pygments_style": 1}, "must be a string"),
    ],
)
def test_invalid_values(tmp_path: Path, raw: dict[str, object], message: str) -> None:
    with pytest.raises(SiteConfigError, match=re.escape(message)):
        build_site_config(raw, base_dir=tmp_path)
