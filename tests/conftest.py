"""Shared fixtures driving the assembler without WeasyPrint.

The :class:`FakeLayoutEngine` decides page counts from the markup it is given
so tests control pagination precisely:

* an element carrying ``data-pages="N"`` makes the document ``N`` pages long;
* a generated table of contents spans one page per ``toc_rows_per_page`` rows;
* anything else is a single page.

Painted pages are blank pypdf pages, so the real :class:`PdfOutputDevice`
produces a readable PDF that tests can inspect with :class:`pypdf.PdfReader`.
"""

from __future__ import annotations

import dataclasses as dc
import math
import typing as typ

import pytest
from bs4 import BeautifulSoup
from pypdf import PageObject

from bookbinder.content import DocFormat, PageNotFoundError, SummaryEntry
from bookbinder.layout import PageBox

A4_WIDTH = 595.0
A4_HEIGHT = 842.0


@dc.dataclass(slots=True)
class PaintCall:
    """Record of one page painted by the fake engine."""

    part_anchor: str
    index: int
    start_page_number: int


class FakeLaidOutDocument:
    """Laid-out document whose pages paint as blank A4 pages."""

    def __init__(self, engine: FakeLayoutEngine, anchor: str, count: int) -> None:
        self._engine = engine
        self.anchor = anchor
        anchors = (anchor,) if anchor else ()
        self._pages = [
            PageBox(
                width=A4_WIDTH,
                height=A4_HEIGHT,
                index=index,
                document=self,
                anchors=anchors if index == 0 else (),
            )
            for index in range(count)
        ]

    @property
    def pages(self) -> list[PageBox]:
        return self._pages

    def paint(self, page: PageBox, start_page_number: int) -> PageObject:
        self._engine.painted.append(
            PaintCall(self.anchor, page.index, start_page_number)
        )
        return PageObject.create_blank_page(width=page.width, height=page.height)


class FakeLayoutEngine:
    """Layout engine paginating by markup hints instead of CSS layout."""

    def __init__(self, *, toc_rows_per_page: int = 30) -> None:
        self.toc_rows_per_page = toc_rows_per_page
        self.documents: list[str] = []
        self.painted: list[PaintCall] = []
        self.resets = 0
        self.fail_on: str | None = None

    def layout(self, html: str, *, base_url: str | None = None) -> FakeLaidOutDocument:  # noqa: ARG002
        self.documents.append(html)
        soup = BeautifulSoup(html, "html.parser")
        anchor_tag = soup.find("a", attrs={"name": True})
        anchor = str(anchor_tag["name"]) if anchor_tag is not None else ""
        if self.fail_on is not None and anchor == self.fail_on:
            msg = f"cannot lay out {anchor}"
            raise RuntimeError(msg)
        return FakeLaidOutDocument(self, anchor, self._page_count(soup))

    def reset(self) -> None:
        self.resets += 1

    def _page_count(self, soup: BeautifulSoup) -> int:
        toc = soup.find(id="toc")
        if toc is not None:
            rows = len(toc.select("table"))
            return max(1, math.ceil(rows / self.toc_rows_per_page))
        hinted = soup.find(attrs={"data-pages": True})
        if hinted is not None:
            return int(str(hinted["data-pages"]))
        return 1

    def toc_documents(self) -> list[BeautifulSoup]:
        """Return every TOC document laid out so far, oldest first."""
        soups = [BeautifulSoup(html, "html.parser") for html in self.documents]
        return [soup for soup in soups if soup.find(id="toc") is not None]


class StaticContentFetcher:
    """In-memory fetcher serving page fragments by id."""

    def __init__(self, pages: typ.Mapping[str, str]) -> None:
        self.pages = dict(pages)
        self.calls: list[tuple[str, str, str]] = []

    def fetch(
        self,
        package: str,
        page_id: str,
        language: str,
        doc_format: DocFormat = DocFormat.PDF,  # noqa: ARG002
    ) -> str:
        self.calls.append((package, page_id, language))
        try:
            return self.pages[page_id]
        except KeyError as exc:
            msg = f"Page '{page_id}' for language '{language}' not found"
            raise PageNotFoundError(msg) from exc


class TripAfter:
    """Cancellation token that trips once ``limit`` pages were painted.

    With ``part_id`` only pages of the part anchored at ``part_id`` count.
    """

    def __init__(
        self, engine: FakeLayoutEngine, limit: int, part_id: str | None = None
    ) -> None:
        self._engine = engine
        self.limit = limit
        self.part_id = part_id

    def is_set(self) -> bool:
        painted = [
            call
            for call in self._engine.painted
            if self.part_id is None or call.part_anchor == self.part_id
        ]
        return len(painted) >= self.limit


def page_html(title: str, pages: int = 1) -> str:
    """Return a body fragment the fake engine lays out on ``pages`` pages."""
    return f'<div id="main" data-pages="{pages}"><h1>{title}</h1><p>{title} body</p></div>'


def entry(page_id: str, *children: SummaryEntry, name: str | None = None) -> SummaryEntry:
    return SummaryEntry(
        page_id=page_id,
        name=name or page_id.upper(),
        language="en",
        children=tuple(children),
    )


@pytest.fixture
def engine() -> FakeLayoutEngine:
    """Return a fresh fake layout engine."""
    return FakeLayoutEngine()


@pytest.fixture
def sample_entries() -> tuple[SummaryEntry, ...]:
    """Return the summary tree ``A{B, C}, D``."""
    return (entry("a", entry("b"), entry("c")), entry("d"))


@pytest.fixture
def sample_fetcher() -> StaticContentFetcher:
    """Serve A, B, C, D laid out on 1, 2, 1 and 1 pages."""
    return StaticContentFetcher(
        {
            "a": page_html("A"),
            "b": page_html("B", pages=2),
            "c": page_html("C"),
            "d": page_html("D"),
        }
    )
