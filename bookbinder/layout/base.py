"""Protocols describing the layout engine the assembler drives.

The assembler never lays out CSS boxes itself. It hands a normalised HTML
document to a :class:`LayoutEngine` and receives a :class:`LaidOutDocument`
exposing fixed-size :class:`PageBox` descriptors. Painting is deferred until
the writer knows the absolute page number each page will occupy.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pypdf import PageObject


@dc.dataclass(frozen=True, slots=True)
class PageBox:
    """A single laid-out page.

    Attributes
    ----------
    width : float
        Printable page width in PDF points.
    height : float
        Printable page height in PDF points.
    index : int
        Zero-based position of the page within its laid-out document.
    document : LaidOutDocument
        Layout result that can paint this page.
    anchors : tuple[str, ...]
        Named anchors whose target box starts on this page.
    """

    width: float
    height: float
    index: int
    document: LaidOutDocument = dc.field(repr=False, compare=False)
    anchors: tuple[str, ...] = ()


@typ.runtime_checkable
class LaidOutDocument(typ.Protocol):
    """Result of laying out one HTML document."""

    @property
    def pages(self) -> list[PageBox]:
        """Return the ordered pages produced by the layout pass."""
        ...

    def paint(self, page: PageBox, start_page_number: int) -> PageObject:
        """Return ``page`` painted as a PDF page.

        ``start_page_number`` is the absolute number of the document's first
        page so running headers and footers can show final page numbers.
        """
        ...


@typ.runtime_checkable
class LayoutEngine(typ.Protocol):
    """Capability that turns HTML into paginated documents."""

    def layout(self, html: str, *, base_url: str | None = None) -> LaidOutDocument:
        """Lay out ``html`` and return the paginated result."""
        ...

    def reset(self) -> None:
        """Flush cached stylesheets, fonts and images before the next part."""
        ...


__all__ = ["LaidOutDocument", "LayoutEngine", "PageBox"]
