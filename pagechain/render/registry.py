"""Per-run registry mapping file extensions to renderer callables.

A renderer takes ``(context, file)`` and returns ``bytes`` or an awaitable
resolving to ``bytes``. Renderers written in completion-callback style are
wrapped with :func:`from_callback` when they are registered.

Registries are plain values: build one per pipeline run (usually from
:func:`pagechain.render.renderers.default_registry`) and overlay caller
renderers with :meth:`RendererRegistry.overlay` instead of mutating a shared
global.

Example
-------
>>> registry = register("txt|text", lambda ctx, file: ctx.content)
>>> sorted(registry)
['text', 'txt']
>>> name_resolver(register("j2", lambda ctx, file: b""))("/index.html.j2")
'/index.html'
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import functools
import posixpath
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ..content import ContentFile
    from .context import RenderingContext

Renderer: typ.TypeAlias = (
    "cabc.Callable[[RenderingContext, ContentFile], bytes | cabc.Awaitable[bytes]]"
)
CallbackRenderer: typ.TypeAlias = (
    "cabc.Callable[[RenderingContext, ContentFile, cabc.Callable[..., None]], None]"
)
ExtensionList: typ.TypeAlias = "str | cabc.Iterable[str]"

_EXTENSION_SEPARATOR = re.compile(r"[,|]")


@dc.dataclass(frozen=True, slots=True)
class RendererEntry:
    """A registered renderer and the suffix its output should carry.

    ``output_suffix`` only matters when the rendered extension is the last one
    on a file name, for example ``.md`` becoming ``.html``.
    """

    render: Renderer
    output_suffix: str | None = None


def parse_extensions(extensions: ExtensionList) -> list[str]:
    """Split ``"md, markdown|mdown"`` style lists into bare extension names."""
    if isinstance(extensions, str):
        candidates = _EXTENSION_SEPARATOR.split(extensions)
    else:
        candidates = list(extensions)
    names = [name.strip().lstrip(".") for name in candidates]
    return [name for name in names if name]


def _normalize_suffix(suffix: str | None) -> str | None:
    if not suffix:
        return None
    return suffix if suffix.startswith(".") else f".{suffix}"


class RendererRegistry:
    """Mapping of extension names (without dot) to :class:`RendererEntry`."""

    def __init__(
        self, entries: cabc.Mapping[str, RendererEntry] | None = None
    ) -> None:
        self._entries: dict[str, RendererEntry] = dict(entries or {})

    def register(
        self,
        extensions: ExtensionList,
        fn: Renderer,
        *,
        output_suffix: str | None = None,
    ) -> RendererRegistry:
        """Register ``fn`` under every name in ``extensions`` and return ``self``.

        Raises
        ------
        TypeError
            If ``fn`` is not callable.
        ValueError
            If ``extensions`` names no extension.
        """
        if not callable(fn):
            msg = f"Renderer for {extensions!r} must be callable"
            raise TypeError(msg)
        names = parse_extensions(extensions)
        if not names:
            msg = f"No extension names found in {extensions!r}"
            raise ValueError(msg)
        entry = RendererEntry(fn, _normalize_suffix(output_suffix))
        for name in names:
            self._entries[name] = entry
        return self

    def get(self, extension: str) -> RendererEntry | None:
        """Return the entry for ``extension`` (with or without leading dot)."""
        return self._entries.get(extension.lstrip("."))

    def overlay(
        self,
        overrides: RendererRegistry | cabc.Mapping[str, Renderer] | None,
    ) -> RendererRegistry:
        """Return a new registry with ``overrides`` layered over this one.

        Plain mappings use the same key syntax as :meth:`register`.
        """
        merged = RendererRegistry(self._entries)
        if isinstance(overrides, RendererRegistry):
            merged._entries.update(overrides._entries)  # noqa: SLF001
        elif overrides:
            for extensions, fn in overrides.items():
                merged.register(extensions, fn)
        return merged

    def resolve_name(self, filename: str) -> str:
        """Return the name ``filename`` will carry once rendered.

        Mirrors the renderer's path accounting: each rendered extension is
        trimmed while others remain, the last one is swapped for the entry's
        ``output_suffix`` when it declares one, and the walk stops at the
        first extension without a renderer.
        """
        head, basename = posixpath.split(filename)
        stem = basename
        result = basename
        while True:
            stem, ext = posixpath.splitext(stem)
            if not ext:
                break
            entry = self.get(ext)
            if entry is None:
                break
            if posixpath.splitext(stem)[1]:
                result = result[: -len(ext)]
                continue
            if entry.output_suffix:
                result = result[: -len(ext)] + entry.output_suffix
            break
        return posixpath.join(head, result) if head else result

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and extension.lstrip(".") in self._entries

    def __iter__(self) -> cabc.Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def register(
    extensions: ExtensionList,
    fn: Renderer,
    registry: RendererRegistry | None = None,
    *,
    output_suffix: str | None = None,
) -> RendererRegistry:
    """Register ``fn`` in ``registry`` (a new one when omitted) and return it."""
    if registry is None:
        registry = RendererRegistry()
    return registry.register(extensions, fn, output_suffix=output_suffix)


def name_resolver(registry: RendererRegistry) -> cabc.Callable[[str], str]:
    """Return a callable mapping source names onto their rendered names."""
    return registry.resolve_name


def from_callback(fn: CallbackRenderer) -> Renderer:
    """Adapt a ``(context, file, done)`` renderer into an awaitable one.

    ``done`` follows the ``(error, content)`` convention and may be called
    from another thread. Calls after the first are ignored.
    """

    @functools.wraps(fn)
    async def adapter(context: RenderingContext, file: ContentFile) -> bytes:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[bytes] = loop.create_future()

        def settle(error: BaseException | None, content: typ.Any) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(content)

        def done(error: BaseException | None = None, content: typ.Any = None) -> None:
            loop.call_soon_threadsafe(settle, error, content)

        fn(context, file, done)
        return await future

    return adapter


__all__ = [
    "RendererEntry",
    "RendererRegistry",
    "from_callback",
    "name_resolver",
    "parse_extensions",
    "register",
]
