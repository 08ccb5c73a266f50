"""Build a site navigation tree from a flat list of pages.

Each page URL is split into path segments and inserted into a working tree.
Segments without a page of their own (a directory lacking an index file) are
squashed away: their children attach to the nearest ancestor that does have
a page, or to the synthetic root. The canonical tree is built once per file
list; :meth:`Navigation.for_url` hands out per-page copies with ``selected``
flags filled in so templates can highlight the current page and its
ancestors.

Example
-------
>>> from pagechain.content import ContentFile
>>> from pagechain.navigation import build_navigation
>>> nav = build_navigation(
...     [
...         ContentFile("index.html"),
...         ContentFile("about/index.html", meta={"title": "About"}),
...         ContentFile("about/team.html", meta={"title": "Team"}),
...     ]
... )
>>> [item.url for item in nav.flatten()]
['/about/', '/about/team.html']
>>> nav.for_url("/about/team.html").current().title
'Team'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import math
import typing as typ

from ._constants import DEFAULT_INDEX_PATTERN
from .urls import make_url

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .content import ContentFile
    from .urls import IndexPatterns, NameResolver

logger = logging.getLogger("pagechain.navigation")

Selected: typ.TypeAlias = typ.Literal[False, "current", "parent"]


def _sort_order(meta: cabc.Mapping[str, typ.Any], url: str) -> float:
    """Return the ``navOrder`` value as a float, defaulting to ``0``."""
    value = meta.get("navOrder")
    if value is None or value == "":
        return 0.0
    try:
        order = float(value)
    except (TypeError, ValueError):
        order = math.nan
    if not math.isfinite(order):
        logger.warning("Ignoring non-numeric navOrder %r for %s", value, url)
        return 0.0
    return order


@dc.dataclass(slots=True, eq=False)
class NavItem:
    """A navigable page in the tree.

    ``parent`` is an upward reference only: it is excluded from ``repr``,
    comparisons, and :meth:`to_dict`, and is rewired whenever the item is
    added to another node.
    """

    url: str
    title: str | None = None
    sort_order: float = 0.0
    file: ContentFile | None = dc.field(default=None, repr=False)
    children: list[NavItem] = dc.field(default_factory=list, repr=False)
    selected: Selected = False
    parent: NavItem | Navigation | None = dc.field(default=None, repr=False)

    @classmethod
    def from_file(
        cls,
        file: ContentFile,
        index_patterns: IndexPatterns = DEFAULT_INDEX_PATTERN,
        name_resolver: NameResolver | None = None,
    ) -> NavItem:
        """Create an item from a page, preferring its computed ``meta.url``."""
        meta = file.meta
        source = meta.get("url")
        if source:
            url = make_url(str(source), index_patterns)
        else:
            url = make_url(file.relative_path, index_patterns, name_resolver)
        title = meta.get("navTitle") or meta.get("title") or None
        return cls(
            url=url,
            title=str(title) if title is not None else None,
            sort_order=_sort_order(meta, url),
            file=file,
        )

    def add(self, item: NavItem) -> NavItem:
        """Append ``item`` as a child, keeping children sorted by order."""
        item.parent = self
        self.children.append(item)
        # list.sort is stable: equal orders keep insertion order
        self.children.sort(key=_by_sort_order)
        return self

    def get(self, search: int | str) -> NavItem | None:
        """Return a direct child by position or by URL."""
        return _find_item(self.children, search)

    def flatten(self) -> list[NavItem]:
        """Return every descendant, depth first."""
        return _flatten_items(self.children)

    def clone(self) -> NavItem:
        """Return a deep, independent copy with ``selected`` reset."""
        copy = NavItem(
            url=self.url,
            title=self.title,
            sort_order=self.sort_order,
            file=self.file,
        )
        for child in self.children:
            cloned = child.clone()
            cloned.parent = copy
            copy.children.append(cloned)
        return copy

    def to_dict(self) -> dict[str, typ.Any]:
        data: dict[str, typ.Any] = {"url": self.url, "title": self.title}
        if self.selected:
            data["selected"] = self.selected
        data["children"] = [child.to_dict() for child in self.children]
        return data


class Navigation:
    """Synthetic navigation root wrapping the top-level items.

    The canonical instance returned by :func:`build_navigation` is never
    mutated by :meth:`for_url`; every view owns cloned items.
    """

    url = "/"
    root = True
    parent = None

    def __init__(
        self,
        items: cabc.Iterable[NavItem] | None = None,
        *,
        index_patterns: IndexPatterns = DEFAULT_INDEX_PATTERN,
        name_resolver: NameResolver | None = None,
        title: str | None = None,
        file: ContentFile | None = None,
    ) -> None:
        self.index_patterns = index_patterns
        self.name_resolver = name_resolver
        self.title = title
        self.file = file
        self.selected: Selected = "parent"
        self.children: list[NavItem] = []
        for item in items or ():
            item.parent = self
            self.children.append(item)

    def get(self, search: int | str) -> NavItem | None:
        """Return a top-level item by position or by URL."""
        return _find_item(self.children, search)

    def find(self, url: str) -> NavItem | None:
        """Return the item with ``url`` anywhere in the tree."""
        return _find_item(self.flatten(), url)

    def flatten(self) -> list[NavItem]:
        """Return every item in the tree, depth first."""
        return _flatten_items(self.children)

    def for_url(self, url: str) -> Navigation:
        """Return a copy of the tree with ``url`` marked as the current page.

        The matching item is flagged ``"current"`` and each of its ancestors
        ``"parent"``. A URL of ``/`` marks the root itself as current. When no
        item matches, the copy carries no ``"current"`` flag at all.
        """
        view = Navigation(
            [item.clone() for item in self.children],
            index_patterns=self.index_patterns,
            name_resolver=self.name_resolver,
            title=self.title,
            file=self.file,
        )
        target = make_url(url, self.index_patterns, self.name_resolver)
        if target == "/":
            view.selected = "current"
            return view

        for item in view.flatten():
            if item.url != target:
                continue
            item.selected = "current"
            ancestor = item.parent
            while ancestor is not None:
                ancestor.selected = "parent"
                ancestor = ancestor.parent
        return view

    def current(self) -> Navigation | NavItem | None:
        """Return the item flagged ``"current"``, or the root when it is."""
        if self.selected == "current":
            return self
        for item in self.flatten():
            if item.selected == "current":
                return item
        return None

    def to_list(self) -> list[dict[str, typ.Any]]:
        return [item.to_dict() for item in self.children]

    def __iter__(self) -> cabc.Iterator[NavItem]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __str__(self) -> str:
        return "\n".join(_outline(self.children))


@dc.dataclass(slots=True)
class _Node:
    """Working-tree node keyed by URL segment before squashing."""

    item: NavItem | None = None
    nodes: dict[str, _Node] = dc.field(default_factory=dict)


def build_navigation(
    files: cabc.Iterable[ContentFile],
    *,
    index_patterns: IndexPatterns = DEFAULT_INDEX_PATTERN,
    name_resolver: NameResolver | None = None,
) -> Navigation:
    """Build the canonical navigation tree for ``files``.

    Parameters
    ----------
    files : iterable of ContentFile
        Pages to include. Files whose metadata sets ``navHidden`` are left
        out.
    index_patterns : optional
        Index file patterns used to derive directory URLs.
    name_resolver : callable, optional
        Strips renderer extensions for files that carry no ``meta.url``.

    Returns
    -------
    Navigation
        Root of the tree. When two files share a URL the last one wins.
    """
    root_item = NavItem(url="/")
    root = _Node(item=root_item)

    for file in files:
        if file.meta.get("navHidden"):
            continue
        item = NavItem.from_file(file, index_patterns, name_resolver)
        if item.url == "/":
            root.item = item
            continue

        *segments, last = [segment for segment in item.url.split("/") if segment]
        node = root
        for segment in segments:
            node = node.nodes.setdefault(segment, _Node())
        leaf = node.nodes.setdefault(last, _Node())
        leaf.item = item

    top = root.item or root_item
    _squash(root, top)
    logger.debug("navigation built with %d items", len(top.flatten()))
    return Navigation(
        top.children,
        index_patterns=index_patterns,
        name_resolver=name_resolver,
        title=top.title,
        file=top.file,
    )


def _squash(node: _Node, target: NavItem) -> None:
    """Attach items to the nearest ancestor that has one, dropping empty segments."""
    for child in node.nodes.values():
        if child.item is not None:
            target.add(child.item)
        _squash(child, child.item or target)


def _by_sort_order(item: NavItem) -> float:
    return item.sort_order


def _find_item(items: list[NavItem], search: int | str) -> NavItem | None:
    if isinstance(search, int):
        try:
            return items[search]
        except IndexError:
            return None
    for item in items:
        if item.url == search:
            return item
    return None


def _flatten_items(items: list[NavItem]) -> list[NavItem]:
    flat: list[NavItem] = []
    for item in items:
        flat.append(item)
        flat.extend(_flatten_items(item.children))
    return flat


def _outline(items: list[NavItem], indent: str = "") -> list[str]:
    lines: list[str] = []
    for item in items:
        line = f"{indent}{item.title or '(null)'} {item.url}"
        if item.selected:
            line += f" ({item.selected})"
        lines.append(line)
        lines.extend(_outline(item.children, f"  {indent}"))
    return lines


__all__ = ["NavItem", "Navigation", "build_navigation"]
