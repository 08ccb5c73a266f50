"""Typed dataclasses describing pagechain site configuration."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from pathlib import Path

from .._constants import DEFAULT_INDEX_PATTERN, DEFAULT_PAGE_PATTERN


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class SiteConfig:
    """A fully resolved site definition sourced from YAML config.

    Attributes
    ----------
    source_dir : Path
        Folder holding pages and assets.
    output_dir : Path
        Folder the rendered site is written to.
    layouts_dir : Path or None
        Folder searched for ``layout`` references.
    partials_dir : Path or None
        Folder searched by the ``partial()`` template helper.
    page_pattern : re.Pattern[str]
        Paths (before or after name resolution) matching this are pages.
    index_patterns : list[re.Pattern[str]]
        Basenames treated as directory index files.
    pygments_style : str
        Pygments style used for highlighted code blocks.
    strict_templates : bool
        Raise on undefined Jinja variables.
    context : dict[str, Any]
        Extra values exposed to every template.
    """

    source_dir: Path
    output_dir: Path = Path("public")
    layouts_dir: Path | None = None
    partials_dir: Path | None = None
    page_pattern: re.Pattern[str] = DEFAULT_PAGE_PATTERN
    index_patterns: list[re.Pattern[str]] = dc.field(
        default_factory=lambda: [DEFAULT_INDEX_PATTERN]
    )
    pygments_style: str = "monokai"
    strict_templates: bool = False
    context: dict[str, typ.Any] = dc.field(default_factory=dict)


__all__ = ["SiteConfig", "SiteConfigError"]
