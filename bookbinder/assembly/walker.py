"""Depth-first traversal of the summary tree into a flat part list."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from bookbinder.content import ContentFetcherError, DocFormat
from bookbinder.errors import ContentFetchError

from .models import PartList

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bookbinder.content import ContentFetcher, SummaryEntry

    from .renderer import PartRenderer

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class FetchedPage:
    """HTML of a summary entry together with its pre-order parent link."""

    entry: SummaryEntry
    html: str
    parent_index: int | None


class SummaryWalker:
    """Fetch and render summary entries in pre-order.

    Fetching and rendering are separate passes so that a missing page aborts
    the build before any layout work is done.
    """

    def __init__(
        self, fetcher: ContentFetcher, renderer: PartRenderer, *, package: str
    ) -> None:
        self.fetcher = fetcher
        self.renderer = renderer
        self.package = package

    def fetch(self, entries: cabc.Sequence[SummaryEntry]) -> list[FetchedPage]:
        """Fetch every entry, returning pages in pre-order with parent indices.

        Raises
        ------
        ContentFetchError
            If any referenced page cannot be retrieved.
        """
        fetched: list[FetchedPage] = []

        def _visit(entry: SummaryEntry, parent_index: int | None) -> None:
            try:
                html = self.fetcher.fetch(
                    self.package, entry.page_id, entry.language, DocFormat.PDF
                )
            except ContentFetcherError as exc:
                msg = f"Cannot retrieve page {entry.page_id}"
                raise ContentFetchError(msg) from exc
            index = len(fetched)
            fetched.append(FetchedPage(entry=entry, html=html, parent_index=parent_index))
            for child in entry.children:
                _visit(child, index)

        for entry in entries:
            _visit(entry, None)
        logger.debug("Fetched %d pages from package '%s'", len(fetched), self.package)
        return fetched

    def render(self, pages: cabc.Sequence[FetchedPage]) -> PartList:
        """Lay out fetched pages into a :class:`PartList` preserving order."""
        parts = PartList()
        for page in pages:
            part = self.renderer.render_part(
                page.html,
                part_id=page.entry.page_id,
                name=page.entry.name,
                parent_index=page.parent_index,
            )
            parts.append(part)
            logger.debug(
                "Rendered %s (level %d): %d pages",
                part.part_id,
                part.level,
                part.page_count,
            )
        return parts

    def walk(self, entries: cabc.Sequence[SummaryEntry]) -> PartList:
        """Fetch and render ``entries`` in one call."""
        return self.render(self.fetch(entries))


__all__ = ["FetchedPage", "SummaryWalker"]
