"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .._constants import DEFAULT_INDEX_PATTERN, DEFAULT_PAGE_PATTERN
from .helpers import _compile_pattern, _compile_patterns, _mapping, _resolve_dir
from .models import SiteConfig, SiteConfigError


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing a site build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``site.yaml``). Relative directories inside it resolve against the
        file's folder.

    Returns
    -------
    SiteConfig
        Parsed configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If required fields are missing or values are invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_site_config(Path("site.yaml"))  # doctest: +SKIP
    >>> config.output_dir.name  # doctest: +SKIP
    'public'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    return build_site_config(dict(loaded), base_dir=path.resolve().parent)


def build_site_config(raw: typ.Mapping[str, typ.Any], *, base_dir: Path) -> SiteConfig:
    """Build a SiteConfig from an already parsed mapping."""
    source_dir = _resolve_dir(base_dir, raw.get("source_dir"), key="source_dir")
    if source_dir is None:
        msg = "Site configuration is missing 'source_dir'."
        raise SiteConfigError(msg)
    output_dir = _resolve_dir(
        base_dir, raw.get("output_dir", "public"), key="output_dir"
    )

    pages = raw.get("pages")
    page_pattern = (
        _compile_pattern(pages, key="pages") if pages else DEFAULT_PAGE_PATTERN
    )
    index_raw = raw.get("index_files")
    index_patterns = (
        _compile_patterns(index_raw, key="index_files")
        if index_raw
        else [DEFAULT_INDEX_PATTERN]
    )

    pygments_style = raw.get("pygments_style", "monokai")
    if not isinstance(pygments_style, str):
        msg = "'pygments_style' must be a string"
        raise SiteConfigError(msg)

    return SiteConfig(
        source_dir=source_dir,
        output_dir=output_dir or base_dir / "public",
        layouts_dir=_resolve_dir(base_dir, raw.get("layouts_dir"), key="layouts_dir"),
        partials_dir=_resolve_dir(
            base_dir, raw.get("partials_dir"), key="partials_dir"
        ),
        page_pattern=page_pattern,
        index_patterns=index_patterns,
        pygments_style=pygments_style,
        strict_templates=bool(raw.get("strict_templates", False)),
        context=_mapping(raw.get("context"), key="context"),
    )


__all__ = ["build_site_config", "load_site_config"]
