"""Tests for streaming parts into a PDF through pypdf."""

from __future__ import annotations

import io
import threading

import pytest
from conftest import FakeLayoutEngine, TripAfter
from pypdf import PdfReader, PdfWriter

from bookbinder.assembly import (
    OutlineNode,
    Part,
    PartKind,
    PdfDocumentWriter,
    PdfOutputDevice,
    assign_page_offsets,
)
from bookbinder.errors import CancellationFault, WriteError


def _part(engine: FakeLayoutEngine, part_id: str, pages: int) -> Part:
    html = f'<a name="{part_id}"></a><div data-pages="{pages}"></div>'
    return Part(
        part_id=part_id,
        name=part_id.upper(),
        kind=PartKind.BODY,
        pages=engine.layout(html).pages,
    )


def _outline_titles(reader: PdfReader) -> list[tuple[str, int]]:
    return [
        (item.title, reader.get_destination_page_number(item))
        for item in reader.outline
        if not isinstance(item, list)
    ]


def test_writes_pages_destinations_and_outline(engine: FakeLayoutEngine) -> None:
    parts = [_part(engine, "a", 2), _part(engine, "b", 1)]
    assign_page_offsets(parts)
    outline = OutlineNode("Guide", 0, "")
    outline.children.append(OutlineNode("A", 1, "a"))
    outline.children.append(OutlineNode("B", 3, "b"))
    buffer = io.BytesIO()

    written = PdfDocumentWriter(engine).write(
        parts, title="Guide", outline=outline, stream=buffer
    )

    reader = PdfReader(io.BytesIO(buffer.getvalue()))
    assert written == 3
    assert len(reader.pages) == 3
    assert reader.metadata.title == "Guide"
    assert _outline_titles(reader) == [("A", 0), ("B", 2)]
    destinations = reader.named_destinations
    assert set(destinations) == {"a", "b"}
    assert reader.get_destination_page_number(destinations["b"]) == 2
    assert reader.page_mode == "/UseOutlines"


def test_paint_receives_start_page_numbers(engine: FakeLayoutEngine) -> None:
    parts = [_part(engine, "a", 2), _part(engine, "b", 1)]
    assign_page_offsets(parts, first_page=3)

    PdfDocumentWriter(engine).write(
        parts, title="T", outline=None, stream=io.BytesIO()
    )

    assert [(call.part_anchor, call.start_page_number) for call in engine.painted] == [
        ("a", 3),
        ("a", 3),
        ("b", 5),
    ]


def test_engine_is_reset_between_parts(engine: FakeLayoutEngine) -> None:
    parts = [_part(engine, "a", 1), _part(engine, "b", 1), _part(engine, "c", 1)]
    assign_page_offsets(parts)

    PdfDocumentWriter(engine).write(parts, title="T", outline=None, stream=io.BytesIO())

    assert engine.resets == 3


def test_cancellation_stops_before_next_page(engine: FakeLayoutEngine) -> None:
    parts = [_part(engine, "long", 5)]
    assign_page_offsets(parts)
    buffer = io.BytesIO()
    writer = PdfDocumentWriter(engine, cancel=TripAfter(engine, 2))

    with pytest.raises(CancellationFault, match="before page 3"):
        writer.write(parts, title="T", outline=None, stream=buffer)

    assert len(engine.painted) == 2, "page 3 must never be painted"
    assert buffer.getvalue() == b"", "no bytes reach the caller on cancellation"
    assert writer.device.pending_anchors == ()


def test_threading_event_is_a_cancellation_token(engine: FakeLayoutEngine) -> None:
    parts = [_part(engine, "a", 1)]
    assign_page_offsets(parts)
    event = threading.Event()
    event.set()

    with pytest.raises(CancellationFault):
        PdfDocumentWriter(engine, cancel=event).write(
            parts, title="T", outline=None, stream=io.BytesIO()
        )
    assert engine.painted == []


def test_duplicate_anchor_commits_once(engine: FakeLayoutEngine) -> None:
    parts = [_part(engine, "same", 1), _part(engine, "same", 1)]
    assign_page_offsets(parts)
    device = PdfOutputDevice()

    PdfDocumentWriter(engine, device).write(
        parts, title="T", outline=None, stream=io.BytesIO()
    )

    assert device.destinations == frozenset({"same"})


def test_flush_part_clears_pending_anchors(engine: FakeLayoutEngine) -> None:
    device = PdfOutputDevice()
    (page,) = engine.layout('<a name="x"></a>').pages

    device.add_page(page.document.paint(page, 1), page)
    assert device.pending_anchors == (("x", 0),)
    device.flush_part()

    assert device.pending_anchors == ()
    assert device.destinations == frozenset({"x"})


def test_unassigned_part_is_rejected(engine: FakeLayoutEngine) -> None:
    parts = [_part(engine, "a", 1)]

    with pytest.raises(WriteError, match="no start page"):
        PdfDocumentWriter(engine).write(
            parts, title="T", outline=None, stream=io.BytesIO()
        )


def test_stream_failure_becomes_write_error(engine: FakeLayoutEngine) -> None:
    class BrokenStream(io.BytesIO):
        def write(self, data: bytes) -> int:  # noqa: ARG002
            msg = "disk full"
            raise OSError(msg)

    parts = [_part(engine, "a", 1)]
    assign_page_offsets(parts)

    with pytest.raises(WriteError, match="disk full"):
        PdfDocumentWriter(engine).write(
            parts, title="T", outline=None, stream=BrokenStream()
        )


def test_device_sizes_pages_from_descriptor(engine: FakeLayoutEngine) -> None:
    device = PdfOutputDevice(PdfWriter())
    (page,) = engine.layout("<p>x</p>").pages
    small = PdfWriter().add_blank_page(width=100, height=100)

    device.add_page(small, page)

    buffer = io.BytesIO()
    device.write(buffer)
    written = PdfReader(io.BytesIO(buffer.getvalue())).pages[0]
    assert float(written.mediabox.width) == pytest.approx(page.width)
    assert float(written.mediabox.height) == pytest.approx(page.height)
