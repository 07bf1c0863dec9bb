r"""Parse a package ``toc.html`` into a summary tree.

The summary lists the pages that make up a document as nested
``nav > ul > li`` items. Each item carries an anchor whose ``href`` names the
target page and an optional ``reference-language`` attribute overriding the
document language for that page.

Example
-------
>>> from bookbinder.content.summary import parse_summary
>>> html = (
...     "<html><head><title>Guide</title></head><body><nav><ul>"
...     "<li><a href='intro.html'>Intro</a></li></ul></nav></body></html>"
... )
>>> summary = parse_summary(html, package="demo", language="en")
>>> summary.title, summary.entries[0].page_id
('Guide', 'intro')
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import typing as typ
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class SummaryFormatError(ValueError):
    """Raised when a summary document does not describe a valid tree."""


@dc.dataclass(frozen=True, slots=True)
class SummaryEntry:
    """One node of the summary tree.

    Attributes
    ----------
    page_id : str
        Identifier of the target page, without the ``.html`` suffix.
    name : str
        Display name shown in the TOC and the bookmark outline.
    language : str
        Language the page is fetched in.
    children : tuple[SummaryEntry, ...]
        Ordered child entries.
    """

    page_id: str
    name: str
    language: str
    children: tuple[SummaryEntry, ...] = ()

    def walk(self) -> cabc.Iterator[SummaryEntry]:
        """Yield this entry and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


@dc.dataclass(frozen=True, slots=True)
class DocumentSummary:
    """Summary tree together with the document metadata it was read from."""

    title: str
    package: str
    language: str
    entries: tuple[SummaryEntry, ...]

    def walk(self) -> cabc.Iterator[SummaryEntry]:
        """Yield every entry of the document in pre-order."""
        for entry in self.entries:
            yield from entry.walk()


def parse_summary(html: str, *, package: str, language: str) -> DocumentSummary:
    """Parse ``toc.html`` markup into a :class:`DocumentSummary`.

    Parameters
    ----------
    html : str
        Markup of the summary page.
    package : str
        Package the summary belongs to.
    language : str
        Default language for entries without ``reference-language``.

    Returns
    -------
    DocumentSummary
        Title and ordered top-level entries.

    Raises
    ------
    SummaryFormatError
        If an item has no anchor or the anchor has no target page.
    """
    soup = BeautifulSoup(html, "html.parser")
    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""
    entries = tuple(
        _parse_entry(item, language) for item in soup.select("nav > ul > li")
    )
    return DocumentSummary(
        title=title, package=package, language=language, entries=entries
    )


def _parse_entry(item: Tag, default_language: str) -> SummaryEntry:
    anchor = item.find("a")
    if not isinstance(anchor, Tag):
        msg = f"Summary item without link: {item.get_text(strip=True)!r}"
        raise SummaryFormatError(msg)
    page_id = _page_id_from_href(str(anchor.get("href") or ""))
    if not page_id:
        msg = f"Summary link without target page: {anchor}"
        raise SummaryFormatError(msg)
    language = str(anchor.get("reference-language") or "") or default_language

    children: list[SummaryEntry] = []
    sublist = item.find("ul", recursive=False)
    if isinstance(sublist, Tag):
        children = [
            _parse_entry(child, default_language)
            for child in sublist.find_all("li", recursive=False)
        ]
    return SummaryEntry(
        page_id=page_id,
        name=anchor.get_text(" ", strip=True),
        language=language,
        children=tuple(children),
    )


def _page_id_from_href(href: str) -> str:
    """Return the page id encoded in a summary link target."""
    path = posixpath.basename(urlsplit(href.strip()).path)
    if path.endswith(".html"):
        path = path[: -len(".html")]
    return path


__all__ = [
    "DocumentSummary",
    "SummaryEntry",
    "SummaryFormatError",
    "parse_summary",
]
