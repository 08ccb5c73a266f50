"""Exception hierarchy shared by the rendering pipeline.

Every failure surfaced while resolving layouts, running renderers, or
substituting post-process tokens derives from :class:`PageChainError` so the
site builder can record one file's failure without aborting the run. Each
error keeps the path of the file it concerns; the original cause travels on
``__cause__``.
"""

from __future__ import annotations


class PageChainError(Exception):
    """Base class for pagechain failures."""


class FrontMatterError(PageChainError, ValueError):
    """Raised when a file's front matter cannot be used as page metadata."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid front matter in {path}: {reason}")


class NotFoundError(PageChainError, LookupError):
    """Raised when a named template file does not exist in its lookup folder."""

    def __init__(self, name: str, directory: str, kind: str = "file") -> None:
        self.name = name
        self.directory = directory
        self.kind = kind
        super().__init__(f'Unable to find "{name}" {kind} in {directory}')


class LayoutNotFoundError(NotFoundError):
    """Raised when a page declares a layout that cannot be located."""

    def __init__(self, name: str, directory: str, *, origin: str) -> None:
        self.origin = origin
        super().__init__(name, directory, kind="layout")
        self.args = (f'Unable to find "{name}" layout in {directory} for {origin}',)


class LayoutLookupError(PageChainError):
    """Raised when the layout lookup collaborator fails for any other reason."""

    def __init__(self, name: str, *, origin: str) -> None:
        self.name = name
        self.origin = origin
        super().__init__(f'Unable to load "{name}" layout for {origin}')


class RecursiveLayoutError(PageChainError):
    """Raised when a layout chain refers back to a file already in the chain."""

    def __init__(self, *, origin: str, referrer: str, layout: str) -> None:
        self.origin = origin
        self.referrer = referrer
        self.layout = layout
        super().__init__(
            f"Recursive layout reference in {origin}: "
            f"{referrer} uses {layout}, which is already part of the chain"
        )


class RendererError(PageChainError):
    """Raised when an extension renderer fails for a file."""

    def __init__(self, path: str, extension: str, reason: str) -> None:
        self.path = path
        self.extension = extension
        self.reason = reason
        super().__init__(
            f'Error while rendering {path} file with "{extension}" renderer:\n{reason}'
        )


class InvalidRendererOutputError(RendererError):
    """Raised when a renderer produces something other than ``bytes``."""

    def __init__(self, path: str, extension: str, produced: object) -> None:
        self.produced_type = type(produced).__name__
        super().__init__(
            path,
            extension,
            f'The content returned from "{extension}" renderer must be bytes, '
            f"got {self.produced_type}",
        )


class UnknownTokenError(PageChainError):
    """Raised when content carries a post-process token nobody registered."""

    def __init__(self, token: str, *, path: str | None = None) -> None:
        self.token = token
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"Unknown post-process token {token}{where}")


__all__ = [
    "FrontMatterError",
    "InvalidRendererOutputError",
    "LayoutLookupError",
    "LayoutNotFoundError",
    "NotFoundError",
    "PageChainError",
    "RecursiveLayoutError",
    "RendererError",
    "UnknownTokenError",
]
