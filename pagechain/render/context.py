"""Rendering context threaded through a layout chain.

A :class:`RenderingContext` carries the merged document metadata, the page's
navigation view, and the content accumulated so far. Renderers never mutate a
context they receive: every hop produces a new one via :meth:`clone`. The only
state shared between clones is owned by the render pass itself: the
:class:`PostProcessQueue` collecting deferred values and the extension
renderer used to render nested files (partials).

Deferred values let synchronous template engines embed results that need
awaiting. A helper registers a thunk and embeds the returned token; once the
whole chain has rendered the queue swaps each token for the thunk's result.

Example
-------
>>> import asyncio
>>> queue = PostProcessQueue()
>>> token = queue.register(lambda ctx: "world")
>>> asyncio.run(queue.resolve(f"hello {token}".encode(), None))
b'hello world'
"""

from __future__ import annotations

import collections
import contextlib
import contextvars
import inspect
import secrets
import typing as typ

from .._constants import POST_PROCESS_TOKEN_PATTERN, POST_PROCESS_TOKEN_TEMPLATE
from ..errors import UnknownTokenError
from ..urls import make_url

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from ..content import ContentFile
    from ..navigation import Navigation
    from .chain import ExtensionRenderer

PostProcessThunk: typ.TypeAlias = (
    "cabc.Callable[[RenderingContext], str | bytes | cabc.Awaitable[str | bytes]]"
)

_FIELDS = frozenset(
    {"document", "navigation", "content", "url", "path", "absolute_path"}
)
_active_queue: contextvars.ContextVar[PostProcessQueue] = contextvars.ContextVar(
    "pagechain_post_process_queue"
)


def context_helper(fn: typ.Callable[..., typ.Any]) -> typ.Callable[..., typ.Any]:
    """Mark ``fn`` as a helper that receives the rendering context first.

    Helpers stored in :attr:`RenderingContext.extensions` with this mark are
    bound to the context by :meth:`RenderingContext.namespace`, so templates
    call them without passing the context themselves.
    """
    fn.__pagechain_context_helper__ = True  # type: ignore[attr-defined]
    return fn


class PostProcessQueue:
    """FIFO registry of deferred values for one render pass."""

    def __init__(self) -> None:
        self.session = secrets.token_hex(4)
        self._pending: collections.deque[tuple[str, PostProcessThunk]] = (
            collections.deque()
        )
        self._issued: set[str] = set()
        self._counter = 0

    def __len__(self) -> int:
        return len(self._pending)

    def register(self, thunk: PostProcessThunk) -> str:
        """Queue ``thunk`` and return the token to embed in content."""
        if not callable(thunk):
            msg = "Post-process replacer must be callable"
            raise TypeError(msg)
        token = POST_PROCESS_TOKEN_TEMPLATE.format(
            session=self.session, index=self._counter
        )
        self._counter += 1
        self._pending.append((token, thunk))
        self._issued.add(token)
        return token

    async def resolve(
        self,
        content: bytes,
        context: RenderingContext | None,
        *,
        path: str | None = None,
    ) -> bytes:
        """Replace queued tokens in ``content`` in registration order.

        Only the first occurrence of each token is replaced and every token is
        consumed whether or not it occurs. Thunks run one at a time, so output
        order never depends on which value settles first. Tokens registered by
        a thunk are resolved in the same call.

        Raises
        ------
        UnknownTokenError
            If the final content still carries a token this queue never
            issued.
        """
        while self._pending:
            token, thunk = self._pending.popleft()
            marker = token.encode("ascii")
            index = content.find(marker)
            if index == -1:
                continue
            chunk = thunk(context)
            if inspect.isawaitable(chunk):
                chunk = await chunk
            content = content[:index] + _as_bytes(chunk) + content[index + len(marker) :]

        for match in POST_PROCESS_TOKEN_PATTERN.finditer(content):
            token = match.group(0).decode("ascii")
            if token not in self._issued:
                raise UnknownTokenError(token, path=path)
        return content


def _as_bytes(chunk: object) -> bytes:
    if isinstance(chunk, bytes):
        return chunk
    if isinstance(chunk, bytearray):
        return bytes(chunk)
    return str(chunk).encode("utf-8")


@contextlib.contextmanager
def active_queue(queue: PostProcessQueue) -> cabc.Iterator[PostProcessQueue]:
    """Make ``queue`` the target of :func:`postprocess` within the block."""
    token = _active_queue.set(queue)
    try:
        yield queue
    finally:
        _active_queue.reset(token)


def postprocess(thunk: PostProcessThunk) -> str:
    """Register ``thunk`` with the render pass running in the current task.

    Raises
    ------
    RuntimeError
        If no chain is being rendered in the calling context.
    """
    try:
        queue = _active_queue.get()
    except LookupError as exc:
        msg = "postprocess() called outside of a render pass"
        raise RuntimeError(msg) from exc
    return queue.register(thunk)


class RenderingContext:
    """Values visible to renderers while one file is being rendered.

    Attributes
    ----------
    document : dict[str, Any]
        Metadata merged across the layout chain; also exposed as ``meta``.
    navigation : Navigation or None
        Navigation view for the page being rendered.
    content : bytes
        Content accumulated so far.
    url, path : str
        Page URL and source path relative to the content root.
    absolute_path : Path or None
        Storage location of the page.
    extensions : dict[str, Any]
        Caller-supplied values and helpers, such as ``partial``.
    """

    __slots__ = (
        "_queue",
        "_renderer",
        "absolute_path",
        "content",
        "document",
        "extensions",
        "navigation",
        "path",
        "url",
    )

    def __init__(
        self,
        *,
        document: cabc.Mapping[str, typ.Any] | None = None,
        navigation: Navigation | None = None,
        content: bytes = b"",
        url: str = "/",
        path: str = "",
        absolute_path: Path | None = None,
        extensions: cabc.Mapping[str, typ.Any] | None = None,
        queue: PostProcessQueue | None = None,
        renderer: ExtensionRenderer | None = None,
    ) -> None:
        self.document: dict[str, typ.Any] = dict(document or {})
        self.navigation = navigation
        self.content = content
        self.url = url
        self.path = path
        self.absolute_path = absolute_path
        self.extensions: dict[str, typ.Any] = {
            key: value
            for key, value in (extensions or {}).items()
            if not key.startswith("_")
        }
        self._queue = queue if queue is not None else PostProcessQueue()
        self._renderer = renderer

    @classmethod
    def for_file(
        cls,
        file: ContentFile,
        *,
        extensions: cabc.Mapping[str, typ.Any] | None = None,
        queue: PostProcessQueue | None = None,
        renderer: ExtensionRenderer | None = None,
    ) -> RenderingContext:
        """Seed a context from a page and optional caller extensions."""
        url = file.meta.get("url") or make_url(file.relative_path)
        context = cls(
            document=file.meta,
            navigation=file.navigation,
            content=file.contents,
            url=str(url),
            path=file.relative_path,
            absolute_path=file.absolute_path,
            queue=queue,
            renderer=renderer,
        )
        if extensions:
            return context.clone(**extensions)
        return context

    @property
    def meta(self) -> dict[str, typ.Any]:
        return self.document

    @property
    def queue(self) -> PostProcessQueue:
        return self._queue

    @property
    def renderer(self) -> ExtensionRenderer:
        """Return the extension renderer of the current render pass."""
        if self._renderer is None:
            msg = "This rendering context is not attached to a render pass"
            raise RuntimeError(msg)
        return self._renderer

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def clone(self, **addon: typ.Any) -> RenderingContext:
        """Return an independent copy with ``addon`` applied.

        Known fields in ``addon`` replace the copied values; any other key
        lands in ``extensions``. Keys starting with ``_`` are ignored.
        """
        fields = {
            "document": self.document,
            "navigation": self.navigation,
            "content": self.content,
            "url": self.url,
            "path": self.path,
            "absolute_path": self.absolute_path,
        }
        extensions = dict(self.extensions)
        for key, value in addon.items():
            if key.startswith("_"):
                continue
            if key in _FIELDS:
                fields[key] = value
            elif key == "extensions":
                extensions.update(value or {})
            else:
                extensions[key] = value
        return RenderingContext(
            **fields,
            extensions=extensions,
            queue=self._queue,
            renderer=self._renderer,
        )

    def postprocess(self, thunk: PostProcessThunk) -> str:
        """Register a deferred value with this context's render pass."""
        return self._queue.register(thunk)

    def namespace(self) -> dict[str, typ.Any]:
        """Return the variables handed to template engines.

        Extensions come first so the well-known fields cannot be shadowed.
        """
        names: dict[str, typ.Any] = {}
        for key, value in self.extensions.items():
            if getattr(value, "__pagechain_context_helper__", False):
                names[key] = _bind(value, self)
            else:
                names[key] = value
        names.update(
            document=self.document,
            meta=self.document,
            navigation=self.navigation,
            content=self.content,
            url=self.url,
            path=self.path,
            absolute_path=self.absolute_path,
            postprocess=self.postprocess,
        )
        return names

    def to_dict(self) -> dict[str, typ.Any]:
        data = {key: getattr(self, key) for key in sorted(_FIELDS)}
        data.update(self.extensions)
        return data

    def __repr__(self) -> str:
        return f"RenderingContext(path={self.path!r}, url={self.url!r})"


def _bind(
    helper: typ.Callable[..., typ.Any], context: RenderingContext
) -> typ.Callable[..., typ.Any]:
    def bound(*args: typ.Any, **kwargs: typ.Any) -> typ.Any:
        return helper(context, *args, **kwargs)

    return bound


__all__ = [
    "PostProcessQueue",
    "RenderingContext",
    "active_queue",
    "context_helper",
    "postprocess",
]
