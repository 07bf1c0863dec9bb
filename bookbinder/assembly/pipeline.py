"""Drive a document build through its stages.

:class:`DocumentAssembler` owns everything one build needs: the placeholder
map, the part list, the layout engine caches and the PDF output device. A
build moves through :class:`~bookbinder.assembly.models.BuildState` strictly in
order; any failure moves it to ``FAILED`` and leaves the caller's stream
untouched.

Example
-------
>>> import io
>>> from bookbinder.assembly import DocumentAssembler
>>> assembler = DocumentAssembler(fetcher, engine, package="acme")  # doctest: +SKIP
>>> assembler.build(summary, io.BytesIO())  # doctest: +SKIP
7
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from bookbinder._constants import DEFAULT_LANGUAGE
from bookbinder.content import DocumentSummary
from bookbinder.errors import BuildStateError, EmptyDocumentError

from .bookmarks import BookmarkBuilder
from .models import BUILD_STATE_ORDER, BuildState, PartList
from .offsets import assign_page_offsets
from .placeholders import (
    DefaultPlaceholderAccessor,
    PlaceholderAccessor,
    build_placeholder_map,
)
from .renderer import PartRenderer
from .toc import DEFAULT_MAX_PASSES, TocSizer
from .walker import SummaryWalker
from .writer import PdfDocumentWriter

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from bookbinder.content import ContentFetcher, SummaryEntry
    from bookbinder.layout import LayoutEngine

    from .models import OutlineNode, Part
    from .toc import TocSizing
    from .writer import CancellationToken

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class BuildOptions:
    """Toggles for the optional parts of a document.

    Attributes
    ----------
    cover : bool
        Render the cover page.
    toc : bool
        Render the table of contents.
    bookmarks : bool
        Commit a bookmark outline.
    toc_max_passes : int
        Upper bound on TOC renders; ``2`` is the single correction pass.
    """

    cover: bool = True
    toc: bool = True
    bookmarks: bool = True
    toc_max_passes: int = DEFAULT_MAX_PASSES


class DocumentAssembler:
    """Assemble one PDF from a summary tree; create one instance per build."""

    def __init__(
        self,
        fetcher: ContentFetcher,
        engine: LayoutEngine,
        *,
        package: str,
        language: str = DEFAULT_LANGUAGE,
        title: str = "",
        accessor: PlaceholderAccessor | None = None,
        options: BuildOptions | None = None,
        base_url: str | None = None,
        templates_dir: Path | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Initialize the assembler.

        Parameters
        ----------
        fetcher : ContentFetcher
            Source of page fragments.
        engine : LayoutEngine
            Engine used to paginate every part.
        package : str
            Package the summary entries belong to.
        language : str, optional
            Document language, used to resolve placeholders.
        title : str, optional
            Document title; defaults to the summary title.
        accessor : PlaceholderAccessor, optional
            Source of placeholder values; unset placeholders use defaults.
        options : BuildOptions, optional
            Cover, TOC and bookmark toggles.
        base_url : str, optional
            Base URL for resources referenced by the fragments.
        templates_dir : Path, optional
            Alternative directory of template fragments.
        cancel : CancellationToken, optional
            Polled before every page is written.
        """
        self.fetcher = fetcher
        self.engine = engine
        self.package = package
        self.language = language
        self.title = title
        self.accessor = accessor or DefaultPlaceholderAccessor()
        self.options = options or BuildOptions()
        self.base_url = base_url
        self.templates_dir = templates_dir
        self.cancel = cancel

        self.state = BuildState.INIT
        self.parts = PartList()
        self.cover: Part | None = None
        self.toc: TocSizing | None = None
        self.outline: OutlineNode | None = None
        self.total_pages = 0

    @property
    def ordered_parts(self) -> list[Part]:
        """Return cover, TOC and body parts in output order."""
        ordered: list[Part] = []
        if self.cover is not None:
            ordered.append(self.cover)
        if self.toc is not None:
            ordered.append(self.toc.part)
        ordered.extend(self.parts)
        return ordered

    def build(
        self,
        summary: DocumentSummary | cabc.Sequence[SummaryEntry],
        stream: typ.BinaryIO,
    ) -> int:
        """Build the PDF for ``summary`` into ``stream``.

        Parameters
        ----------
        summary : DocumentSummary or Sequence[SummaryEntry]
            Summary tree to assemble. A :class:`DocumentSummary` also supplies
            the title when none was given.
        stream : BinaryIO
            Destination of the PDF; receives no bytes unless the build
            succeeds.

        Returns
        -------
        int
            Total number of pages written.

        Raises
        ------
        BuildError
            Any :class:`~bookbinder.errors.BuildError` subclass raised by a
            stage; the assembler is left in ``FAILED``.
        """
        if self.state is not BuildState.INIT:
            msg = f"Assembler is in state '{self.state}'; create a new one per build"
            raise BuildStateError(msg)
        if isinstance(summary, DocumentSummary):
            entries: cabc.Sequence[SummaryEntry] = summary.entries
            title = self.title or summary.title
        else:
            entries = summary
            title = self.title
        try:
            return self._run(entries, title, stream)
        except BaseException:
            logger.debug("Build of '%s' failed in state %s", title, self.state)
            self.state = BuildState.FAILED
            raise

    def _run(
        self,
        entries: cabc.Sequence[SummaryEntry],
        title: str,
        stream: typ.BinaryIO,
    ) -> int:
        if not entries:
            msg = "No available pages"
            raise EmptyDocumentError(msg)

        self._advance(BuildState.FETCHING_CONTENT)
        placeholders = build_placeholder_map(
            self.accessor, language=self.language, title=title
        )
        renderer = PartRenderer(
            self.engine,
            placeholders,
            base_url=self.base_url,
            templates_dir=self.templates_dir,
        )
        walker = SummaryWalker(self.fetcher, renderer, package=self.package)
        fetched = walker.fetch(entries)

        self._advance(BuildState.RENDERING_PARTS)
        if self.options.cover:
            self.cover = renderer.render_cover()
        self.parts = walker.render(fetched)

        self._advance(BuildState.SIZING_TOC)
        if self.options.toc:
            sizer = TocSizer(
                renderer,
                max_passes=self.options.toc_max_passes,
                templates_dir=self.templates_dir,
            )
            pages_before = self.cover.page_count if self.cover is not None else 0
            self.toc = sizer.size(self.parts, pages_before=pages_before)

        self._advance(BuildState.ASSIGNING_OFFSETS)
        ordered = self.ordered_parts
        self.total_pages = assign_page_offsets(ordered)
        if self.options.bookmarks:
            self.outline = BookmarkBuilder(title).build(self.parts)

        self._advance(BuildState.WRITING)
        writer = PdfDocumentWriter(self.engine, cancel=self.cancel)
        written = writer.write(ordered, title=title, outline=self.outline, stream=stream)

        self._advance(BuildState.DONE)
        logger.info("Assembled '%s': %d pages", title, written)
        return written

    def _advance(self, target: BuildState) -> None:
        """Move to ``target``, which must directly follow the current state."""
        try:
            position = BUILD_STATE_ORDER.index(self.state)
        except ValueError:
            position = len(BUILD_STATE_ORDER)
        expected = (
            BUILD_STATE_ORDER[position + 1]
            if position + 1 < len(BUILD_STATE_ORDER)
            else None
        )
        if target is not expected:
            msg = f"Cannot move from '{self.state}' to '{target}'"
            raise BuildStateError(msg)
        logger.debug("Build state %s -> %s", self.state, target)
        self.state = target


__all__ = ["BuildOptions", "DocumentAssembler"]
