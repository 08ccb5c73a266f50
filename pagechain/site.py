"""High-level orchestration for building a site from a source folder.

:class:`SiteBuilder` consumes a :class:`~pagechain.config.SiteConfig`, reads
every file under ``source_dir``, renders the pages through their layout
chains, copies everything else verbatim, and writes the result under
``output_dir``. Pages render concurrently; one page failing is recorded in
the returned :class:`BuildReport` and does not stop the others unless
``fail_fast`` is set.

Example
-------
>>> from pathlib import Path
>>> from pagechain.config import load_site_config
>>> from pagechain.site import SiteBuilder
>>> config = load_site_config(Path("site.yaml"))  # doctest: +SKIP
>>> report = SiteBuilder(config).run()  # doctest: +SKIP
>>> report.written[0]  # doctest: +SKIP
PosixPath('public/index.html')
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import shutil
import typing as typ
from pathlib import Path

from .content import ContentFile, assign_url, read_content_file
from .errors import PageChainError
from .render import (
    PageRenderer,
    PartialHelper,
    RendererRegistry,
    TemplateFinder,
    default_registry,
    name_resolver,
)
from .scaffold import is_page, scaffold

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import SiteConfig
    from .navigation import Navigation
    from .render.registry import Renderer

logger = logging.getLogger("pagechain.site")


@dc.dataclass(slots=True)
class BuildReport:
    """Outcome of a site build.

    Attributes
    ----------
    written : list[Path]
        Output files written, pages first, in source order.
    failures : list[tuple[str, Exception]]
        Source paths (relative to ``source_dir``) that failed with their error.
    navigation : Navigation or None
        Canonical navigation tree of the build.
    """

    written: list[Path] = dc.field(default_factory=list)
    failures: list[tuple[str, Exception]] = dc.field(default_factory=list)
    navigation: Navigation | None = None

    @property
    def ok(self) -> bool:
        return not self.failures


class SiteBuilder:
    """Render a source tree into an output folder."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        renderers: RendererRegistry | cabc.Mapping[str, Renderer] | None = None,
        context: cabc.Mapping[str, typ.Any] | None = None,
        output_dir: Path | None = None,
        fail_fast: bool = False,
    ) -> None:
        """Initialize the builder with configuration and renderer overrides.

        Parameters
        ----------
        config : SiteConfig
            Site configuration describing folders and patterns.
        renderers : RendererRegistry or Mapping, optional
            Renderers layered over the built-in Markdown and Jinja ones.
        context : Mapping, optional
            Extra template values merged over ``config.context``.
        output_dir : Path, optional
            Override for the output folder.
        fail_fast : bool, optional
            Abort the build on the first page failure.
        """
        self.config = config
        self.output_dir = output_dir or config.output_dir
        self.fail_fast = fail_fast
        base = default_registry(
            pygments_style=config.pygments_style,
            strict_templates=config.strict_templates,
        )
        self.registry = base.overlay(renderers)
        self.resolve_name = name_resolver(self.registry)
        self.extra_context = self._build_context(context)

    def _build_context(
        self, overrides: cabc.Mapping[str, typ.Any] | None
    ) -> dict[str, typ.Any]:
        context: dict[str, typ.Any] = {}
        markdown = self.registry.get("md")
        stylesheet = getattr(markdown.render, "stylesheet", None) if markdown else None
        if stylesheet:
            context["pygments_css"] = stylesheet
        context.update(self.config.context)
        context.update(overrides or {})
        return context

    def run(self) -> BuildReport:
        """Build the site synchronously and return the report."""
        return asyncio.run(self.build())

    def navigation(self) -> Navigation:
        """Return the canonical navigation tree without rendering anything.

        Pages that cannot be loaded are logged and left out of the tree.
        """
        pages, _assets = self._partition(self.config.source_dir)
        files: list[ContentFile] = []
        for path in pages:
            try:
                files.append(self._load_page(path))
            except PageChainError as exc:
                relative = path.relative_to(self.config.source_dir).as_posix()
                logger.warning("skipping %s: %s", relative, exc)
        return scaffold(
            files,
            index_patterns=self.config.index_patterns,
            name_resolver=self.resolve_name,
            assign_urls=False,
        )

    async def build(self) -> BuildReport:
        """Build the site and return the report.

        Raises
        ------
        FileNotFoundError
            If ``source_dir`` does not exist.
        PageChainError
            Only when ``fail_fast`` is set and a page fails.
        """
        source_dir = self.config.source_dir
        if not source_dir.is_dir():
            msg = f"Source folder '{source_dir}' not found."
            raise FileNotFoundError(msg)

        pages, assets = self._partition(source_dir)
        report = BuildReport()
        loaded = await asyncio.gather(
            *(asyncio.to_thread(self._load_page, path) for path in pages),
            return_exceptions=True,
        )
        files: list[ContentFile] = []
        for path, result in zip(pages, loaded, strict=True):
            if isinstance(result, BaseException):
                self._record(report, path.relative_to(source_dir).as_posix(), result)
            else:
                files.append(result)

        report.navigation = scaffold(
            files,
            index_patterns=self.config.index_patterns,
            name_resolver=self.resolve_name,
            assign_urls=False,
        )
        renderer = self._page_renderer()
        results = await self._render_pages(renderer, files)
        rendered: list[ContentFile] = []
        for file, result in zip(files, results, strict=True):
            if isinstance(result, BaseException):
                self._record(report, file.relative_path, result)
            else:
                rendered.append(file)

        # outputs are written only once every page has rendered
        outputs = await asyncio.gather(
            *(self._write_page(file) for file in rendered),
            return_exceptions=True,
        )
        for file, result in zip(rendered, outputs, strict=True):
            if isinstance(result, BaseException):
                self._record(report, file.relative_path, result)
            else:
                report.written.append(result)

        for path in assets:
            report.written.append(await asyncio.to_thread(self._copy_asset, path))
        return report

    def _partition(self, source_dir: Path) -> tuple[list[Path], list[Path]]:
        """Split the source tree into page paths and asset paths."""
        pages: list[Path] = []
        assets: list[Path] = []
        for path in sorted(source_dir.rglob("*")):
            if not path.is_file():
                continue
            if self._is_template(path):
                continue
            relative = path.relative_to(source_dir).as_posix()
            if is_page(relative, self.config.page_pattern, self.resolve_name):
                pages.append(path)
            else:
                assets.append(path)
        return pages, assets

    def _is_template(self, path: Path) -> bool:
        """Return True for files inside layout or partial folders nested in the source."""
        for folder in (self.config.layouts_dir, self.config.partials_dir):
            if folder is not None and path.is_relative_to(folder):
                return True
        return False

    def _load_page(self, path: Path) -> ContentFile:
        file = read_content_file(path, self.config.source_dir)
        return assign_url(file, self.config.index_patterns, self.resolve_name)

    def _page_renderer(self) -> PageRenderer:
        """Return a renderer with fresh per-run template caches."""
        context = dict(self.extra_context)
        if self.config.partials_dir is not None:
            finder = TemplateFinder(self.config.partials_dir, kind="partial")
            context.setdefault("partial", PartialHelper(finder))
        layouts = None
        if self.config.layouts_dir is not None:
            layouts = TemplateFinder(self.config.layouts_dir, kind="layout")
        return PageRenderer(self.registry, layouts=layouts, context=context)

    async def _render_pages(
        self, renderer: PageRenderer, files: list[ContentFile]
    ) -> list[bytes | BaseException]:
        """Render every page concurrently.

        Failures are returned in place of the content. With ``fail_fast`` the
        first failure cancels the pages still rendering and is raised.
        """
        if not self.fail_fast:
            return await asyncio.gather(
                *(renderer.render(file) for file in files), return_exceptions=True
            )
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(renderer.render(file)) for file in files]
        except ExceptionGroup as failures:
            first = failures.exceptions[0]
            logger.error("build aborted: %s", first)
            raise first from None
        return [task.result() for task in tasks]

    async def _write_page(self, file: ContentFile) -> Path:
        output_path = self.output_dir / file.output_path
        await asyncio.to_thread(_write_bytes, output_path, file.contents)
        logger.info("wrote %s", output_path)
        return output_path

    def _copy_asset(self, path: Path) -> Path:
        target = self.output_dir / path.relative_to(self.config.source_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, target)
        return target

    def _record(self, report: BuildReport, path: str, error: BaseException) -> None:
        if not isinstance(error, Exception):
            raise error
        if self.fail_fast:
            raise error
        if isinstance(error, PageChainError):
            logger.error("failed to render %s: %s", path, error)
        else:
            logger.exception("failed to render %s", path, exc_info=error)
        report.failures.append((path, error))


def _write_bytes(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


__all__ = ["BuildReport", "SiteBuilder"]
