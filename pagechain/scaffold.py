"""Prepare pages for rendering: URLs, navigation tree, and per-page views.

The scaffold is the step between reading source files and rendering them. It
computes each page's ``meta["url"]``, builds the navigation tree once for the
whole page list, and gives every page its own navigation view with the page
marked as current.
"""

from __future__ import annotations

import logging
import re
import typing as typ

from ._constants import DEFAULT_INDEX_PATTERN, DEFAULT_PAGE_PATTERN
from .content import assign_url
from .navigation import Navigation, build_navigation

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .content import ContentFile
    from .urls import IndexPatterns, NameResolver

logger = logging.getLogger("pagechain.site")


def is_page(
    path: str,
    pattern: re.Pattern[str] | cabc.Callable[[str], bool] = DEFAULT_PAGE_PATTERN,
    name_resolver: NameResolver | None = None,
) -> bool:
    """Return ``True`` when ``path`` (or its rendered name) is a page.

    ``about.md`` counts as a page when Markdown renders to ``.html``.
    """
    candidates = [path]
    if name_resolver is not None:
        candidates.append(name_resolver(path))
    if isinstance(pattern, re.Pattern):
        return any(pattern.search(candidate) for candidate in candidates)
    return any(pattern(candidate) for candidate in candidates)


def scaffold(
    pages: cabc.Sequence[ContentFile],
    *,
    index_patterns: IndexPatterns = DEFAULT_INDEX_PATTERN,
    name_resolver: NameResolver | None = None,
    assign_urls: bool = True,
) -> Navigation:
    """Assign URLs and navigation views to ``pages``; return the canonical tree.

    Pass ``assign_urls=False`` when ``meta["url"]`` was already computed with
    :func:`~pagechain.content.assign_url`.
    """
    if assign_urls:
        for page in pages:
            assign_url(page, index_patterns, name_resolver)
    logger.debug("pages found: %d", len(pages))

    nav = build_navigation(
        pages, index_patterns=index_patterns, name_resolver=name_resolver
    )
    for page in pages:
        logger.debug("generate navigation for %s", page.relative_path)
        page.navigation = nav.for_url(page.meta["url"])
    return nav


__all__ = ["is_page", "scaffold"]
