"""WeasyPrint-backed implementation of the layout engine protocols.

WeasyPrint performs the CSS paged-media layout. Each rendered document keeps
its source so the writer can repaint it with the final page counter once the
page offsets of the whole book are known.

Example
-------
>>> from bookbinder.layout.weasy import WeasyPrintEngine
>>> engine = WeasyPrintEngine()  # doctest: +SKIP
>>> laid_out = engine.layout("<html><body><p>Hi</p></body></html>")  # doctest: +SKIP
>>> len(laid_out.pages)  # doctest: +SKIP
1
"""

from __future__ import annotations

import io
import logging
import typing as typ

from pypdf import PdfReader
from weasyprint import CSS, HTML
from weasyprint.text.fonts import FontConfiguration

from .base import PageBox

if typ.TYPE_CHECKING:
    from pypdf import PageObject

logger = logging.getLogger(__name__)

# WeasyPrint measures pages in CSS pixels (96 per inch); PDF uses 72 points.
POINTS_PER_PIXEL = 0.75


class WeasyPrintEngine:
    """Lay out HTML documents with WeasyPrint, sharing caches across parts."""

    def __init__(
        self, *, base_url: str | None = None, presentational_hints: bool = True
    ) -> None:
        """Initialize the engine with an optional default base URL.

        Parameters
        ----------
        base_url : str, optional
            Base URL used to resolve relative stylesheet and image references
            when a document does not provide its own.
        presentational_hints : bool, optional
            Honour HTML presentational attributes such as ``width``.
        """
        self.base_url = base_url
        self.presentational_hints = presentational_hints
        self._font_config = FontConfiguration()
        self._image_cache: dict[str, typ.Any] = {}

    @property
    def font_config(self) -> FontConfiguration:
        return self._font_config

    @property
    def image_cache(self) -> dict[str, typ.Any]:
        return self._image_cache

    def layout(self, html: str, *, base_url: str | None = None) -> WeasyPrintDocument:
        """Render ``html`` into pages without producing PDF bytes yet."""
        source = HTML(string=html, base_url=base_url or self.base_url)
        document = source.render(
            font_config=self._font_config,
            cache=self._image_cache,
            presentational_hints=self.presentational_hints,
        )
        return WeasyPrintDocument(self, source, document)

    def reset(self) -> None:
        """Drop font faces and cached images loaded for the previous part."""
        self._font_config = FontConfiguration()
        self._image_cache.clear()

    def render_pdf(self, source: HTML, start_page_number: int) -> bytes:
        """Write ``source`` to PDF bytes with page numbers from ``start_page_number``."""
        counter = CSS(
            string=f"@page :first {{ counter-reset: page {start_page_number}; }}",
            font_config=self._font_config,
        )
        return source.write_pdf(
            stylesheets=[counter],
            font_config=self._font_config,
            cache=self._image_cache,
            presentational_hints=self.presentational_hints,
        )


class WeasyPrintDocument:
    """Laid-out WeasyPrint document exposing :class:`PageBox` descriptors."""

    def __init__(
        self, engine: WeasyPrintEngine, source: HTML, document: typ.Any
    ) -> None:
        self._engine = engine
        self._source = source
        self._pages = [
            PageBox(
                width=page.width * POINTS_PER_PIXEL,
                height=page.height * POINTS_PER_PIXEL,
                index=index,
                document=self,
                anchors=tuple(page.anchors),
            )
            for index, page in enumerate(document.pages)
        ]
        self._painted: dict[int, PdfReader] = {}

    @property
    def pages(self) -> list[PageBox]:
        return self._pages

    def paint(self, page: PageBox, start_page_number: int) -> PageObject:
        """Return ``page`` as a pypdf page numbered from ``start_page_number``."""
        reader = self._painted.get(start_page_number)
        if reader is None:
            pdf_bytes = self._engine.render_pdf(self._source, start_page_number)
            reader = PdfReader(io.BytesIO(pdf_bytes))
            if len(reader.pages) != len(self._pages):
                msg = (
                    f"Repainting produced {len(reader.pages)} pages, "
                    f"expected {len(self._pages)}"
                )
                raise RuntimeError(msg)
            logger.debug(
                "Painted %d pages starting at page %d",
                len(reader.pages),
                start_page_number,
            )
            self._painted = {start_page_number: reader}
        return reader.pages[page.index]


__all__ = ["POINTS_PER_PIXEL", "WeasyPrintDocument", "WeasyPrintEngine"]
