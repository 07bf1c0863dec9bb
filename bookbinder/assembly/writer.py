"""Stream laid-out parts into a single PDF.

:class:`PdfOutputDevice` wraps :class:`pypdf.PdfWriter` and buffers the named
anchors met while a part is written; :meth:`PdfOutputDevice.flush_part`
commits them and clears the buffer so nothing leaks into the next part.
:class:`PdfDocumentWriter` drives the device page by page, polling a
cancellation token before each page and resetting the layout engine caches
between parts. Bytes reach the caller's stream only after every page and the
outline have been committed.

Example
-------
>>> import io
>>> from bookbinder.assembly.writer import PdfDocumentWriter
>>> writer = PdfDocumentWriter(engine)  # doctest: +SKIP
>>> buffer = io.BytesIO()
>>> writer.write(parts, title="Guide", outline=outline, stream=buffer)  # doctest: +SKIP
7
"""

from __future__ import annotations

import logging
import typing as typ

from pypdf import PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import RectangleObject

from bookbinder.errors import CancellationFault, WriteError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pypdf import PageObject
    from pypdf.generic import IndirectObject

    from bookbinder.layout import LayoutEngine, PageBox

    from .models import OutlineNode, Part

logger = logging.getLogger(__name__)


@typ.runtime_checkable
class CancellationToken(typ.Protocol):
    """Signal polled once per page; ``threading.Event`` satisfies it."""

    def is_set(self) -> bool:
        """Return ``True`` once the build should stop."""
        ...


class PdfOutputDevice:
    """Accumulate pages, named destinations and the outline of one PDF."""

    def __init__(self, writer: PdfWriter | None = None) -> None:
        self._writer = writer or PdfWriter()
        self._pending_anchors: list[tuple[str, int]] = []
        self._destinations: set[str] = set()

    @property
    def page_count(self) -> int:
        return len(self._writer.pages)

    @property
    def destinations(self) -> frozenset[str]:
        """Return the named destinations committed so far."""
        return frozenset(self._destinations)

    @property
    def pending_anchors(self) -> tuple[tuple[str, int], ...]:
        return tuple(self._pending_anchors)

    def open(self, *, title: str) -> None:
        """Record document metadata."""
        self._writer.add_metadata({"/Title": title})

    def add_page(self, page: PageObject, box: PageBox) -> int:
        """Append a painted page and buffer its anchors; return its number."""
        added = self._writer.add_page(page)
        width, height = float(added.mediabox.width), float(added.mediabox.height)
        if (round(width, 1), round(height, 1)) != (
            round(box.width, 1),
            round(box.height, 1),
        ):
            left, bottom = float(added.mediabox.left), float(added.mediabox.bottom)
            added.mediabox = RectangleObject(
                (left, bottom, left + box.width, bottom + box.height)
            )
        index = self.page_count - 1
        self._pending_anchors.extend((anchor, index) for anchor in box.anchors)
        return index + 1

    def flush_part(self) -> None:
        """Commit buffered anchors as named destinations and clear the buffer."""
        for name, index in self._pending_anchors:
            if name in self._destinations:
                logger.debug("Skipping duplicate destination %s", name)
                continue
            self._writer.add_named_destination(name, index)
            self._destinations.add(name)
        self._pending_anchors.clear()

    def reset(self) -> None:
        """Discard buffered anchors without committing them."""
        self._pending_anchors.clear()

    def commit_outline(self, root: OutlineNode) -> None:
        """Add the outline below ``root`` in one pass."""

        def _add(node: OutlineNode, parent: IndirectObject | None) -> None:
            item = self._writer.add_outline_item(
                node.title, node.page_number - 1, parent=parent
            )
            for child in node.children:
                _add(child, item)

        for child in root.children:
            _add(child, None)
        if root.children:
            self._writer.page_mode = "/UseOutlines"

    def write(self, stream: typ.BinaryIO) -> None:
        """Serialise the document into ``stream``."""
        self._writer.write(stream)


class PdfDocumentWriter:
    """Write parts, in order, through a :class:`PdfOutputDevice`."""

    def __init__(
        self,
        engine: LayoutEngine,
        device: PdfOutputDevice | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> None:
        self.engine = engine
        self.device = device or PdfOutputDevice()
        self.cancel = cancel

    def write(
        self,
        parts: cabc.Sequence[Part],
        *,
        title: str,
        outline: OutlineNode | None,
        stream: typ.BinaryIO,
    ) -> int:
        """Write ``parts`` and the optional outline into ``stream``.

        Parameters
        ----------
        parts : Sequence[Part]
            Parts in output order with start page numbers assigned.
        title : str
            Document title metadata.
        outline : OutlineNode or None
            Outline root to commit after the pages, or ``None`` for no
            bookmarks.
        stream : BinaryIO
            Destination of the PDF bytes; untouched unless the write succeeds.

        Returns
        -------
        int
            Number of pages written.

        Raises
        ------
        CancellationFault
            If the cancellation token trips before a page.
        WriteError
            If painting or serialising the PDF fails.
        """
        if not parts or not parts[0].pages:
            msg = f"Cannot write document {title}: no pages"
            raise WriteError(msg)
        self.device.open(title=title)
        try:
            for part in parts:
                self._write_part(part)
            if outline is not None:
                self.device.commit_outline(outline)
            self.device.write(stream)
        except (OSError, PyPdfError) as exc:
            msg = f"Cannot write document {title} to pdf: {exc}"
            raise WriteError(msg) from exc
        finally:
            self.device.reset()
        logger.info("Wrote %s: %d pages", title, self.device.page_count)
        return self.device.page_count

    def _write_part(self, part: Part) -> None:
        start = part.start_page_number
        if start is None:
            msg = f"Part '{part.part_id}' has no start page; assign offsets first"
            raise WriteError(msg)
        logger.debug(
            "Writing %s: %d pages from %d", part.name, part.page_count, start
        )
        for page in part.pages:
            if self.cancel is not None and self.cancel.is_set():
                msg = (
                    f"Build interrupted before page {self.device.page_count + 1} "
                    f"({part.part_id})"
                )
                raise CancellationFault(msg)
            try:
                painted = page.document.paint(page, start)
            except Exception as exc:  # noqa: BLE001 - engine failures are opaque
                msg = f"Cannot paint page {page.index + 1} of '{part.part_id}': {exc}"
                raise WriteError(msg) from exc
            self.device.add_page(painted, page)
        self.device.flush_part()
        self.engine.reset()


__all__ = ["CancellationToken", "PdfDocumentWriter", "PdfOutputDevice"]
