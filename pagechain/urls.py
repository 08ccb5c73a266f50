r"""Map source file paths onto canonical site URLs.

URLs always start with ``/``. Index files (``index.html`` by default) collapse
onto their directory so ``about/index.html`` is served as ``/about/``. An
optional name resolver runs before index detection, letting renderer
extensions disappear first (``index.html.j2`` is still an index file).

Example
-------
>>> from pagechain.urls import DEFAULT_INDEX_PATTERN, make_url
>>> make_url("about\\index.html", DEFAULT_INDEX_PATTERN)
'/about/'
>>> make_url("blog/post.html")
'/blog/post.html'
"""

from __future__ import annotations

import posixpath
import re
import typing as typ

from ._constants import DEFAULT_INDEX_PATTERN

if typ.TYPE_CHECKING:
    import collections.abc as cabc

IndexPattern: typ.TypeAlias = "str | re.Pattern[str]"
IndexPatterns: typ.TypeAlias = "IndexPattern | cabc.Iterable[IndexPattern] | None"
NameResolver: typ.TypeAlias = "cabc.Callable[[str], str]"


def is_index(path: str, index_patterns: IndexPatterns) -> bool:
    """Return ``True`` when the basename of ``path`` matches an index pattern.

    Plain strings must equal the basename; compiled patterns are searched
    against it.
    """
    if not index_patterns:
        return False
    if isinstance(index_patterns, (str, re.Pattern)):
        index_patterns = [index_patterns]
    basename = posixpath.basename(path)
    for pattern in index_patterns:
        if isinstance(pattern, re.Pattern):
            if pattern.search(basename):
                return True
        elif basename == pattern:
            return True
    return False


def make_url(
    path: str,
    index_patterns: IndexPatterns = None,
    name_resolver: NameResolver | None = None,
) -> str:
    """Return the canonical site URL for ``path``.

    Parameters
    ----------
    path : str
        Source path, either relative to the content root or already a URL.
        Back-slashes are accepted.
    index_patterns : str, re.Pattern, or iterable of them, optional
        Basenames treated as directory index files.
    name_resolver : callable, optional
        Applied to the slash-normalised path before index detection; usually
        strips renderer extensions.

    Returns
    -------
    str
        URL starting with ``/``; index files map to their directory with a
        trailing ``/``.
    """
    url = path.replace("\\", "/")
    if not url.startswith("/"):
        url = f"/{url}"
    if name_resolver is not None:
        url = name_resolver(url)
    if is_index(url, index_patterns):
        url = posixpath.dirname(url)
        if not url.endswith("/"):
            url += "/"
    return url


__all__ = ["DEFAULT_INDEX_PATTERN", "is_index", "make_url"]
