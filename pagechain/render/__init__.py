"""Layout chain resolution, extension renderers, and deferred post-processing."""

from .chain import (
    ExtensionRenderer,
    PageRenderer,
    build_chain,
    merge_metadata,
    render_chain,
)
from .context import PostProcessQueue, RenderingContext, context_helper, postprocess
from .layouts import TemplateFinder
from .partials import PartialHelper
from .registry import (
    RendererEntry,
    RendererRegistry,
    from_callback,
    name_resolver,
    register,
)
from .renderers import HtmlContentRenderer, JinjaRenderer, default_registry

__all__ = [
    "ExtensionRenderer",
    "HtmlContentRenderer",
    "JinjaRenderer",
    "PageRenderer",
    "PartialHelper",
    "PostProcessQueue",
    "RendererEntry",
    "RendererRegistry",
    "RenderingContext",
    "TemplateFinder",
    "build_chain",
    "context_helper",
    "default_registry",
    "from_callback",
    "merge_metadata",
    "name_resolver",
    "postprocess",
    "register",
    "render_chain",
]
