"""Content files and front matter extraction.

A :class:`ContentFile` is the unit every stage of the pipeline passes around:
the scaffold attaches navigation to it, the layout finder produces it for
templates, and the chain renderer replaces its contents and trims its output
path. Front matter is a YAML mapping fenced by ``---`` lines at the very start
of the file.

Example
-------
>>> from pagechain.content import split_front_matter
>>> meta, body = split_front_matter(b"---\\ntitle: Hello\\n---\\n<h1>Hi</h1>\\n")
>>> meta["title"], body
('Hello', b'<h1>Hi</h1>\\n')
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import re
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import FRONT_MATTER_SENTINEL, RESERVED_META_KEYS
from .errors import FrontMatterError
from .urls import make_url

if typ.TYPE_CHECKING:
    from .navigation import Navigation
    from .urls import IndexPatterns, NameResolver

FRONT_MATTER_PATTERN = re.compile(
    rb"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


@dc.dataclass(slots=True, eq=False)
class ContentFile:
    """A source file with parsed metadata travelling through the pipeline.

    Attributes
    ----------
    relative_path : str
        Slash-normalised path relative to the folder the file was read from.
    contents : bytes
        Body with front matter removed; replaced by rendered output.
    meta : dict[str, Any]
        Parsed front matter plus the computed ``url`` for pages.
    absolute_path : Path or None
        Storage location, used as the file's identity when present.
    output_path : str
        Relative path the rendered artefact is written to. Starts equal to
        ``relative_path`` and loses rendered extensions during rendering.
    navigation : Navigation or None
        Per-page navigation view attached by the scaffold.
    """

    relative_path: str
    contents: bytes = b""
    meta: dict[str, typ.Any] = dc.field(default_factory=dict)
    absolute_path: Path | None = None
    output_path: str = ""
    navigation: Navigation | None = None

    def __post_init__(self) -> None:
        self.relative_path = self.relative_path.replace("\\", "/").lstrip("/")
        if not self.output_path:
            self.output_path = self.relative_path

    @property
    def identity(self) -> str:
        """Return the key used to detect the same file twice in a layout chain."""
        if self.absolute_path is not None:
            return str(self.absolute_path)
        return self.relative_path

    @property
    def basename(self) -> str:
        return posixpath.basename(self.relative_path)

    @property
    def text(self) -> str:
        """Return ``contents`` decoded as UTF-8."""
        return self.contents.decode("utf-8")


def _yaml_loader() -> YAML:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    return loader


def split_front_matter(
    raw: bytes, *, path: str = "<memory>"
) -> tuple[dict[str, typ.Any], bytes]:
    """Separate a YAML front matter block from the body of ``raw``.

    Parameters
    ----------
    raw : bytes
        File contents as read from disk.
    path : str, optional
        Used in error messages only.

    Returns
    -------
    tuple[dict[str, Any], bytes]
        Parsed metadata (empty when the file has none) and the remaining
        body. Files that do not start with ``---`` are returned untouched so
        binary assets are never decoded.

    Raises
    ------
    FrontMatterError
        If the block is not valid YAML or does not describe a mapping.
    """
    if len(raw) <= len(FRONT_MATTER_SENTINEL) or not raw.startswith(
        FRONT_MATTER_SENTINEL
    ):
        return {}, raw
    match = FRONT_MATTER_PATTERN.match(raw)
    if match is None:
        return {}, raw

    try:
        loaded = _yaml_loader().load(match.group(1).decode("utf-8"))
    except (YAMLError, UnicodeDecodeError) as exc:
        raise FrontMatterError(path, str(exc)) from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        msg = f"expected a mapping, got {type(loaded).__name__}"
        raise FrontMatterError(path, msg)
    return dict(loaded), raw[match.end() :]


def read_content_file(path: Path, root: Path) -> ContentFile:
    """Read ``path`` and return a :class:`ContentFile` relative to ``root``."""
    relative = path.relative_to(root).as_posix()
    meta, body = split_front_matter(path.read_bytes(), path=relative)
    return ContentFile(
        relative_path=relative,
        contents=body,
        meta=meta,
        absolute_path=path.resolve(),
    )


def first_extension(path: str) -> str:
    """Keep only the first extension of the basename (``a.html.j2`` -> ``a.html``)."""
    head, basename = posixpath.split(path)
    stem, dot, rest = basename.partition(".")
    if not dot or not stem:
        return path
    return posixpath.join(head, f"{stem}.{rest.split('.')[0]}")


def assign_url(
    file: ContentFile,
    index_patterns: IndexPatterns = None,
    name_resolver: NameResolver | None = None,
) -> ContentFile:
    """Compute ``file.meta["url"]`` from its relative path.

    Raises
    ------
    FrontMatterError
        If the front matter already defines a reserved key.
    """
    reserved = RESERVED_META_KEYS.intersection(file.meta)
    if reserved:
        keys = ", ".join(sorted(reserved))
        raise FrontMatterError(file.relative_path, f"reserved key(s) {keys} set")
    file.meta["url"] = make_url(
        file.relative_path, index_patterns, name_resolver or first_extension
    )
    return file


__all__ = [
    "ContentFile",
    "assign_url",
    "first_extension",
    "read_content_file",
    "split_front_matter",
]
