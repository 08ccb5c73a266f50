"""Resolve layout chains and render pages through them.

A page whose metadata names a ``layout`` is rendered inside that layout, which
may itself name a layout, and so on. :func:`build_chain` expands a page into
``[page, layout, layout-of-layout, ...]``; :func:`render_chain` then renders
each file in that order, feeding every result to the next file as
``context.content``, and finally substitutes post-process tokens.

Within one file, extensions are rendered innermost first:
``page.html.j2`` runs the ``j2`` renderer and is written as ``page.html``.

Example
-------
>>> import asyncio
>>> from pagechain.content import ContentFile
>>> from pagechain.render.registry import register
>>> registry = register("up", lambda ctx, file: ctx.content.upper())
>>> page = ContentFile("hello.txt.up", contents=b"hi")
>>> asyncio.run(render_chain([page], registry))
b'HI'
>>> page.output_path
'hello.txt'
"""

from __future__ import annotations

import inspect
import logging
import posixpath
import typing as typ

from .._constants import QUIET_EXTENSIONS
from ..errors import (
    InvalidRendererOutputError,
    LayoutLookupError,
    LayoutNotFoundError,
    NotFoundError,
    PageChainError,
    RecursiveLayoutError,
    RendererError,
)
from .context import PostProcessQueue, RenderingContext, active_queue

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ..content import ContentFile
    from .layouts import TemplateFinder
    from .registry import RendererEntry, RendererRegistry

LayoutLookup: typ.TypeAlias = "cabc.Callable[[str], cabc.Awaitable[ContentFile]]"

logger = logging.getLogger("pagechain.render")


class ExtensionRenderer:
    """Apply registered renderers to a single file, extension by extension."""

    def __init__(self, registry: RendererRegistry) -> None:
        self.registry = registry

    async def render(
        self,
        file: ContentFile,
        context: RenderingContext,
        *,
        trim_path: bool = False,
    ) -> bytes:
        """Render ``file`` and return the resulting content.

        Parameters
        ----------
        file : ContentFile
            File whose basename decides which renderers run.
        context : RenderingContext
            Context for the first renderer; ``context.content`` is returned
            unchanged when nothing renders.
        trim_path : bool, optional
            Trim each rendered extension (except the last) from
            ``file.output_path``. Only the page at the head of a chain is
            trimmed; layouts and partials keep their paths.

        Returns
        -------
        bytes
            Content after the last renderer that matched.

        Raises
        ------
        RendererError
            If a renderer raises; :class:`InvalidRendererOutputError` when it
            returns something other than ``bytes``.
        """
        logger.debug("rendering %s", file.relative_path)
        basename = file.basename
        content = context.content
        while True:
            basename, ext = posixpath.splitext(basename)
            if not ext:
                return content
            more = bool(posixpath.splitext(basename)[1])
            entry = self.registry.get(ext)
            if entry is None:
                logger.debug('no renderer for "%s" extension', ext)
                if more and ext not in QUIET_EXTENSIONS:
                    logger.warning(
                        'No renderer for "%s" extension when rendering %s',
                        ext,
                        file.relative_path,
                    )
                return content

            content = await self._apply(entry, ext, file, context)
            if trim_path:
                _trim_output_path(file, ext, entry, more=more)
            context = context.clone(content=content)

    async def _apply(
        self,
        entry: RendererEntry,
        ext: str,
        file: ContentFile,
        context: RenderingContext,
    ) -> bytes:
        logger.debug("applying %s renderer to %s", ext, file.relative_path)
        try:
            result = entry.render(context, file)
            if inspect.isawaitable(result):
                result = await result
        except PageChainError:
            raise
        except Exception as exc:
            raise RendererError(file.relative_path, ext, str(exc)) from exc
        if not isinstance(result, bytes):
            raise InvalidRendererOutputError(file.relative_path, ext, result)
        return result


def _trim_output_path(
    file: ContentFile, ext: str, entry: RendererEntry, *, more: bool
) -> None:
    if not file.output_path.endswith(ext):
        return
    if more:
        file.output_path = file.output_path[: -len(ext)]
    elif entry.output_suffix:
        file.output_path = file.output_path[: -len(ext)] + entry.output_suffix


async def build_chain(
    file: ContentFile, lookup_layout: LayoutLookup
) -> list[ContentFile]:
    """Return ``file`` followed by every layout it inherits from.

    Parameters
    ----------
    file : ContentFile
        Page to expand; its ``meta["layout"]`` starts the walk.
    lookup_layout : callable
        Coroutine function returning the layout file for a name.

    Returns
    -------
    list[ContentFile]
        ``[file, layout, layout-of-layout, ...]``.

    Raises
    ------
    LayoutNotFoundError
        If a layout name cannot be found.
    RecursiveLayoutError
        If a layout is reached twice.
    LayoutLookupError
        If the lookup fails for any other reason.
    """
    chain = [file]
    seen = {file.identity}
    current = file
    while current.meta.get("layout"):
        name = str(current.meta["layout"])
        try:
            layout = await lookup_layout(name)
        except LayoutNotFoundError:
            raise
        except NotFoundError as exc:
            raise LayoutNotFoundError(
                name, exc.directory, origin=file.relative_path
            ) from exc
        except Exception as exc:
            raise LayoutLookupError(name, origin=file.relative_path) from exc

        if layout.identity in seen:
            raise RecursiveLayoutError(
                origin=file.relative_path,
                referrer=current.relative_path,
                layout=layout.relative_path,
            )
        seen.add(layout.identity)
        chain.append(layout)
        current = layout
    return chain


def merge_metadata(chain: cabc.Sequence[ContentFile]) -> dict[str, typ.Any]:
    """Merge metadata from the outermost layout inwards so the page wins."""
    merged: dict[str, typ.Any] = {}
    for file in reversed(chain):
        merged.update(file.meta)
    return merged


async def render_chain(
    chain: cabc.Sequence[ContentFile],
    registry: RendererRegistry,
    extra_context: cabc.Mapping[str, typ.Any] | None = None,
) -> bytes:
    """Render ``chain`` and return the final content of its first file.

    One context is seeded from ``chain[0]`` and ``extra_context``, with
    metadata merged across the chain. Every file is rendered in turn with the
    previous result as ``context.content``. Post-process tokens are resolved
    only after the outermost layout has rendered. ``chain[0].output_path``
    loses its rendered extensions; the caller stores the returned bytes.

    Raises
    ------
    ValueError
        If ``chain`` is empty.
    PageChainError
        From any renderer; failures inside layouts carry a note naming the
        page and the chain position.
    Exception
        Whatever a post-process thunk raises, with a note naming the page.
    """
    if not chain:
        msg = "Cannot render an empty layout chain"
        raise ValueError(msg)

    origin = chain[0]
    renderer = ExtensionRenderer(registry)
    queue = PostProcessQueue()
    context = RenderingContext.for_file(
        origin, extensions=extra_context, queue=queue, renderer=renderer
    ).clone(document=merge_metadata(chain))

    with active_queue(queue):
        for position, file in enumerate(chain):
            try:
                content = await renderer.render(
                    file, context, trim_path=position == 0
                )
            except PageChainError as exc:
                if position:
                    exc.add_note(
                        f"while rendering layout {file.relative_path} "
                        f"(chain position {position}) for {origin.relative_path}"
                    )
                raise
            context = context.clone(content=content)

        try:
            return await queue.resolve(
                context.content, context, path=origin.relative_path
            )
        except Exception as exc:
            exc.add_note(f"while post-processing {origin.relative_path}")
            raise


class PageRenderer:
    """Render pages through their layout chains for one pipeline run.

    Parameters
    ----------
    registry : RendererRegistry
        Renderers used for every file.
    layouts : TemplateFinder, optional
        Layout lookup; pages naming a layout fail without one.
    context : Mapping, optional
        Extra values and helpers added to every rendering context.
    """

    def __init__(
        self,
        registry: RendererRegistry,
        *,
        layouts: TemplateFinder | None = None,
        context: cabc.Mapping[str, typ.Any] | None = None,
    ) -> None:
        self.registry = registry
        self.layouts = layouts
        self.context = dict(context or {})

    async def _lookup(self, name: str) -> ContentFile:
        if self.layouts is None:
            raise NotFoundError(name, "<no layouts directory>", kind="layout")
        return await self.layouts.find(name)

    async def render(self, file: ContentFile) -> bytes:
        """Render ``file`` in place and return its new contents."""
        chain = await build_chain(file, self._lookup)
        content = await render_chain(chain, self.registry, self.context)
        file.contents = content
        return content


__all__ = [
    "ExtensionRenderer",
    "PageRenderer",
    "build_chain",
    "merge_metadata",
    "render_chain",
]
