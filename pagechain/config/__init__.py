"""Load and validate site configuration YAML for pagechain builds.

This subpackage parses the project's ``site.yaml`` file, resolves folders
relative to it, compiles page and index patterns, and produces a typed
:class:`SiteConfig` that the site builder consumes. The primary entry point is
:func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from pagechain.config import load_site_config
>>> site = load_site_config(Path("site.yaml"))  # doctest: +SKIP
>>> site.layouts_dir  # doctest: +SKIP
PosixPath('/srv/site/layouts')
"""

from .loader import build_site_config, load_site_config
from .models import SiteConfig, SiteConfigError

__all__ = [
    "SiteConfig",
    "SiteConfigError",
    "build_site_config",
    "load_site_config",
]
