"""Cyclopts CLI entrypoint for building pagechain sites.

The ``pagechain`` console script defined here renders a source folder into a
static site (``pagechain build``) and prints the navigation tree derived from
the pages (``pagechain nav``). Options can also be supplied through ``INPUT_``
environment variables so the commands run unchanged in CI.

Examples
--------
Build the site described by ``site.yaml``:

>>> from pagechain.cli import main
>>> main()  # doctest: +SKIP

Build into a different folder:

>>> from pagechain.cli import app
>>> app(["build", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_site_config
from .site import SiteBuilder

DEFAULT_CONFIG = Path("site.yaml")

app = App(name="pagechain", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command(help="Render the source folder into a static site.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    fail_fast: typ.Annotated[
        bool, Parameter(help="Stop at the first page that fails to render")
    ] = False,
    verbose: typ.Annotated[bool, Parameter(help="Log every render step")] = False,
) -> int:
    """Build the site described by ``config``.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    output_dir : Path or None, optional
        Override the output folder from the configuration.
    fail_fast : bool, optional
        Abort on the first page failure instead of rendering the rest.
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    int
        ``0`` when every page rendered, ``1`` when any failed.
    """
    _configure_logging(verbose=verbose)
    site_config = load_site_config(config)
    builder = SiteBuilder(site_config, output_dir=output_dir, fail_fast=fail_fast)
    report = builder.run()
    for path in report.written:
        print(f"wrote {_format_path(path)}")
    for source, error in report.failures:
        print(f"failed {source}: {error}", file=sys.stderr)
    return 0 if report.ok else 1


@app.command(help="Print the navigation tree derived from the source pages.")
def nav(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    url: typ.Annotated[
        str | None, Parameter(help="Mark this URL as the current page")
    ] = None,
) -> None:
    """Print the navigation outline, optionally highlighting ``url``."""
    site_config = load_site_config(config)
    tree = SiteBuilder(site_config).navigation()
    if url:
        tree = tree.for_url(url)
    print(tree)


def main() -> None:
    """Invoke the Cyclopts application that powers the `pagechain` command.

    The exit status is the return value of the selected command.
    """
    sys.exit(app())


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
