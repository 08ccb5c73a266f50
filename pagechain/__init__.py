"""Static site generation with layout chains and navigation trees.

This package exposes the CLI entry points used by ``uv run pagechain`` to
render a folder of pages into a static site. Rendering itself lives in
:mod:`pagechain.render`; navigation in :mod:`pagechain.navigation`.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from pagechain import main
>>> main()  # doctest: +SKIP
>>> from pagechain import app
>>> app.name[0]
'pagechain'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
