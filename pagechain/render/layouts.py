"""Locate layout and partial templates by name.

Templates are referenced without their extension (``layout: base``) and
matched against ``base.*`` in the lookup folder. Matching is case-sensitive
and the first file in sorted order wins, so ``base.html.j2`` is preferred to
``base.txt``. Found files are parsed for front matter and cached for the
lifetime of the finder; create one finder per build run so edits between
runs are picked up.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath

from ..content import ContentFile, read_content_file
from ..errors import NotFoundError

logger = logging.getLogger("pagechain.render")


class TemplateFinder:
    """Find and cache named template files inside ``base_dir``.

    Parameters
    ----------
    base_dir : Path
        Folder searched for templates. Names may contain ``/`` to reach
        sub-folders.
    kind : str, optional
        Label used in error messages (``"layout"`` or ``"partial"``).
    """

    def __init__(self, base_dir: Path, *, kind: str = "layout") -> None:
        self.base_dir = Path(base_dir)
        self.kind = kind
        self._cache: dict[str, ContentFile] = {}

    def clear(self) -> None:
        """Forget every cached template."""
        self._cache.clear()

    async def find(self, name: str) -> ContentFile:
        """Return the template called ``name``.

        Raises
        ------
        NotFoundError
            If no file ``name.*`` exists in the lookup folder.
        """
        cached = self._cache.get(name)
        if cached is not None:
            logger.debug('use cached %s for "%s"', self.kind, name)
            return cached

        logger.debug('looking for "%s" %s in %s', name, self.kind, self.base_dir)
        template = await asyncio.to_thread(self._load, name)
        self._cache[name] = template
        return template

    def _load(self, name: str) -> ContentFile:
        path = self._match(name)
        if path is None:
            raise NotFoundError(name, str(self.base_dir), kind=self.kind)
        logger.debug('use %s for "%s" %s', path.name, name, self.kind)
        return read_content_file(path, self.base_dir)

    def _match(self, name: str) -> Path | None:
        relative = PurePosixPath(name.replace("\\", "/"))
        folder = self.base_dir.joinpath(*relative.parent.parts)
        stem = relative.name
        if not stem or not folder.is_dir():
            return None
        candidates = sorted(
            entry
            for entry in folder.iterdir()
            if entry.is_file() and entry.name.startswith(f"{stem}.")
        )
        return candidates[0] if candidates else None


__all__ = ["TemplateFinder"]
