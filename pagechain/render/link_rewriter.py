"""Markdown extension rewriting links to sibling sources onto rendered names."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import urlsplit, urlunsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any


class RelativeLinkExtension(Extension):
    """Point relative links at the files the linked sources render to.

    A link to ``../guide/setup.md`` in a site where ``.md`` renders to
    ``.html`` becomes ``../guide/setup.html``, keeping the query string and
    fragment. Absolute URLs, root-relative paths, and bare fragments are left
    alone.
    """

    def __init__(self, resolver: cabc.Callable[[str], str]) -> None:
        super().__init__()
        self.resolver = resolver

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the relative-link treeprocessor on the Markdown instance."""
        processor = RelativeLinkTreeprocessor(md, self.resolver)
        md.treeprocessors.register(processor, "pagechain_relative_links", 15)


class RelativeLinkTreeprocessor(Treeprocessor):
    """Rewrite ``href`` attributes of relative anchors."""

    def __init__(self, md: Markdown, resolver: cabc.Callable[[str], str]) -> None:
        super().__init__(md)
        self.resolver = resolver

    def run(self, root: Element) -> Element:
        for element in root.iter():
            if element.tag == "a":
                rewritten = self._rewrite(element.get("href"))
                if rewritten:
                    element.set("href", rewritten)
        return root

    def _rewrite(self, target: str | None) -> str | None:
        """Return the rewritten link, or ``None`` when it should stay as is."""
        if not target:
            return None

        lower = target.lower()
        if lower.startswith(("mailto:", "tel:", "data:", "javascript:")):
            return None
        if target.startswith(("#", "/")) or "://" in target:
            return None

        parsed = urlsplit(target)
        if parsed.scheme or parsed.netloc or not parsed.path:
            return None

        head, basename = posixpath.split(parsed.path)
        resolved = self.resolver(basename)
        if resolved == basename:
            return None
        path = posixpath.join(head, resolved) if head else resolved
        return urlunsplit(("", "", path, parsed.query, parsed.fragment))


__all__ = ["RelativeLinkExtension", "RelativeLinkTreeprocessor"]
