"""Built-in Markdown and Jinja renderers.

``HtmlContentRenderer`` turns Markdown into HTML with Pygments-highlighted
code blocks; ``JinjaRenderer`` renders a file body as a Jinja template against
the rendering context. :func:`default_registry` wires both into a fresh
:class:`~pagechain.render.registry.RendererRegistry`:

* ``md`` / ``markdown`` render ``context.content`` and turn the terminal
  extension into ``.html``.
* ``j2`` / ``jinja`` / ``jinja2`` render the file's own body as a template,
  with ``content`` holding what was rendered before (the page body when a
  layout is being applied).
"""

from __future__ import annotations

import re
import typing as typ
from html import escape

from jinja2 import Environment, StrictUndefined, Undefined
from markdown import Markdown
from markupsafe import Markup
from pygments.formatters.html import HtmlFormatter

from .link_rewriter import RelativeLinkExtension
from .registry import RendererRegistry, name_resolver

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

    from ..content import ContentFile
    from .context import RenderingContext
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

FENCE_LINE_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})([^\r\n]*)$")
FENCE_LANGUAGE_PATTERN = re.compile(r"[A-Za-z0-9_+#.-]+")
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


def normalize_fences(text: str) -> tuple[str, list[str]]:
    """Prepare fenced code blocks for Python-Markdown.

    Fence lines lose up to three spaces of indentation and any label after
    the language (``rust,no_run`` becomes ``rust``). Returns the rewritten
    text and the language of every block in order, ``"text"`` when a block
    names none.
    """
    lines: list[str] = []
    languages: list[str] = []
    open_fence: str | None = None
    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        match = FENCE_LINE_PATTERN.match(body)
        if match is None:
            lines.append(line)
            continue
        fence, info = match.groups()
        ending = line[len(body) :]
        if open_fence is None:
            label = FENCE_LANGUAGE_PATTERN.match(info.strip())
            language = label.group(0) if label else ""
            languages.append(language or "text")
            lines.append(f"{fence}{language}{ending}")
            open_fence = fence
        elif (
            fence[0] == open_fence[0]
            and len(fence) >= len(open_fence)
            and not info.strip()
        ):
            lines.append(f"{fence}{ending}")
            open_fence = None
        else:
            lines.append(line)
    return "".join(lines), languages


class HtmlContentRenderer:
    """Render Markdown content into HTML with highlighted code blocks."""

    def __init__(
        self, pygments_style: str = "monokai", link_extension: Extension | None = None
    ) -> None:
        """Initialize a renderer with optional pygments style and link extension.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        link_extension : Extension, optional
            Markdown extension used when rewriting links; pass ``None`` to skip
            link rewriting.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
        ]
        if link_extension is not None:
            extensions.append(link_extension)
        self._md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": pygments_style,
                }
            },
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def __call__(self, context: RenderingContext, file: ContentFile) -> bytes:
        """Render ``context.content`` as Markdown."""
        return self.markdown(context.text).encode("utf-8")

    def markdown(self, text: str) -> str:
        """Convert ``text`` to HTML, tagging code blocks with ``data-language``."""
        normalized, languages = normalize_fences(text)
        if not normalized.strip():
            return ""
        html = self._md.reset().convert(normalized)
        if not languages:
            return html
        remaining = iter(languages)

        def tag(_match: re.Match[str]) -> str:
            language = escape(next(remaining, "text"), quote=True)
            return f'<div class="codehilite" data-language="{language}">'

        return CODEHILITE_OPEN_TAG.sub(tag, html, len(languages))


class JinjaRenderer:
    """Render a file body as a Jinja template against the rendering context."""

    def __init__(self, *, strict: bool = False) -> None:
        """Configure the shared Jinja environment.

        Parameters
        ----------
        strict : bool, optional
            Raise on undefined template variables instead of rendering them
            as empty strings.
        """
        self.env = Environment(
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined if strict else Undefined,
        )

    def __call__(self, context: RenderingContext, file: ContentFile) -> bytes:
        template = self.env.from_string(file.text)
        namespace = context.namespace()
        namespace["content"] = Markup(context.text)
        return template.render(**namespace).encode("utf-8")


def default_registry(
    *, pygments_style: str = "monokai", strict_templates: bool = False
) -> RendererRegistry:
    """Return a new registry holding the Markdown and Jinja renderers.

    Markdown links to sibling sources (``guide.md``) are rewritten to the
    names those files are written under.
    """
    registry = RendererRegistry()
    registry.register("j2|jinja|jinja2", JinjaRenderer(strict=strict_templates))
    markdown = HtmlContentRenderer(
        pygments_style, link_extension=RelativeLinkExtension(name_resolver(registry))
    )
    registry.register("md|markdown", markdown, output_suffix=".html")
    return registry


__all__ = [
    "HtmlContentRenderer",
    "JinjaRenderer",
    "default_registry",
    "normalize_fences",
]
