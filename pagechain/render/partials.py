"""Template helper rendering named partial files into a page.

Templates call ``partial("footer", year=2025)``. Because template engines
render synchronously, the helper returns a post-process token at once; the
partial is looked up and rendered after the whole layout chain has finished,
using the final context extended with the keyword arguments.

Example
-------
>>> from pathlib import Path
>>> helper = PartialHelper(TemplateFinder(Path("partials")))
>>> context_data = {"partial": helper}  # passed as extra rendering context
"""

from __future__ import annotations

import typing as typ

from markupsafe import Markup

from .layouts import TemplateFinder

if typ.TYPE_CHECKING:
    from .context import RenderingContext


class PartialHelper:
    """Context helper exposing ``partial(name, **data)`` to templates."""

    __pagechain_context_helper__ = True

    def __init__(self, finder: TemplateFinder) -> None:
        self.finder = finder

    def __call__(
        self, context: RenderingContext, name: str, **data: typ.Any
    ) -> Markup:
        """Return a token that becomes the rendered partial ``name``."""
        scope = context.clone(**data)

        async def render_partial(final: RenderingContext) -> bytes:
            file = await self.finder.find(name)
            partial_context = scope.clone(content=file.contents)
            return await final.renderer.render(file, partial_context)

        return Markup(context.postprocess(render_partial))


__all__ = ["PartialHelper"]
