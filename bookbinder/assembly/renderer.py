"""Normalise HTML fragments and lay them out as document parts.

Fragments served for PDF output are plain body content. Before they can be
paginated they are wrapped into a full document, patched so that common
constructs do not break awkwardly across pages, decorated with the shared
header/footer chrome and finally handed to the layout engine.

Example
-------
>>> from bookbinder.assembly.renderer import normalise_document
>>> from bs4 import BeautifulSoup
>>> soup = normalise_document(BeautifulSoup("<p>Hi</p>", "html.parser"))
>>> str(soup)
'<html><head></head><body><p>Hi</p></body></html>'
"""

from __future__ import annotations

import logging
import typing as typ

from bs4 import BeautifulSoup, NavigableString, Tag

from bookbinder._constants import (
    COVER_PART_ID,
    COVER_STRUCT_CSS,
    COVER_TEMPLATE,
    HEADER_FOOTER_TEMPLATE,
    MAIN_CONTENT_ID,
    PAGE_STRUCT_CSS,
    TEMPLATES_DIR,
)
from bookbinder.errors import LayoutError

from .models import Part, PartKind
from .placeholders import Placeholder, PlaceholderMap, load_template, substitute

if typ.TYPE_CHECKING:
    from pathlib import Path

    from bookbinder.layout import LayoutEngine

logger = logging.getLogger(__name__)

HEADINGS_SELECTOR = "h1, h2, h3, h4, h5, h6"
BOOKMARK_EXCLUDE_ATTR = "data-pdf-bookmark"


class PartRenderer:
    """Turn HTML fragments into laid-out :class:`Part` objects."""

    def __init__(
        self,
        engine: LayoutEngine,
        placeholders: PlaceholderMap,
        *,
        base_url: str | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the renderer with shared chrome resolved once per build.

        Parameters
        ----------
        engine : LayoutEngine
            Engine used to paginate normalised documents.
        placeholders : PlaceholderMap
            Values substituted into the template fragments.
        base_url : str, optional
            Base URL handed to the engine for relative resources.
        templates_dir : Path, optional
            Directory holding the template fragments; defaults to the packaged
            templates.
        """
        self.engine = engine
        self.placeholders = placeholders
        self.base_url = base_url
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self._page_links = self._stylesheet_links(PAGE_STRUCT_CSS)
        self._cover_links = self._stylesheet_links(COVER_STRUCT_CSS)
        self._chrome_html = substitute(
            load_template(HEADER_FOOTER_TEMPLATE, self.templates_dir), placeholders
        )

    def render_part(
        self,
        html: str,
        *,
        part_id: str,
        name: str,
        kind: PartKind = PartKind.BODY,
        parent_index: int | None = None,
    ) -> Part:
        """Normalise ``html`` and lay it out as a part.

        Raises
        ------
        LayoutError
            If the layout engine fails or produces no pages.
        """
        document = self.prepare(html, part_id=part_id)
        return self._layout(
            document, part_id=part_id, name=name, kind=kind, parent_index=parent_index
        )

    def render_cover(self) -> Part:
        """Lay out the cover page from the cover template."""
        html = substitute(
            load_template(COVER_TEMPLATE, self.templates_dir), self.placeholders
        )
        document = normalise_document(BeautifulSoup(html, "html.parser"))
        sanitize_document(document)
        for img in document.select("img"):
            if not str(img.get("src") or "").strip():
                img.decompose()
        inject_chrome(document, self._cover_links, None)
        return self._layout(
            document,
            part_id=COVER_PART_ID,
            name=self.placeholders[Placeholder.TITLE],
            kind=PartKind.COVER,
            parent_index=None,
        )

    def prepare(self, html: str, *, part_id: str) -> BeautifulSoup:
        """Return the fully decorated document for ``html`` without layout."""
        document = normalise_document(BeautifulSoup(html, "html.parser"))
        sanitize_document(document)
        insert_part_anchor(document, part_id)
        chrome = BeautifulSoup(self._chrome_html, "html.parser")
        inject_chrome(document, self._page_links, chrome)
        return document

    def _layout(
        self,
        document: BeautifulSoup,
        *,
        part_id: str,
        name: str,
        kind: PartKind,
        parent_index: int | None,
    ) -> Part:
        logger.debug("Rendering %s - %s", part_id, name)
        try:
            laid_out = self.engine.layout(str(document), base_url=self.base_url)
        except Exception as exc:  # noqa: BLE001 - engine failures are opaque
            msg = f"Cannot lay out part '{part_id}' ({name}): {exc}"
            raise LayoutError(msg) from exc
        pages = list(laid_out.pages)
        if not pages:
            msg = f"Layout of part '{part_id}' ({name}) produced no pages"
            raise LayoutError(msg)
        return Part(
            part_id=part_id,
            name=name,
            kind=kind,
            pages=pages,
            parent_index=parent_index,
        )

    def _stylesheet_links(self, struct_css: str) -> list[str]:
        struct_href = (self.templates_dir / struct_css).as_uri()
        return [struct_href, self.placeholders[Placeholder.CSS]]


def normalise_document(soup: BeautifulSoup) -> BeautifulSoup:
    """Wrap bare body content into ``html``/``head``/``body`` elements."""
    html = soup.find("html")
    if not isinstance(html, Tag):
        children = list(soup.contents)
        html = soup.new_tag("html")
        html.append(soup.new_tag("head"))
        body = soup.new_tag("body")
        html.append(body)
        for child in children:
            body.append(child.extract())
        soup.append(html)
        return soup

    if not isinstance(html.find("head", recursive=False), Tag):
        html.insert(0, soup.new_tag("head"))
    if not isinstance(html.find("body", recursive=False), Tag):
        body = soup.new_tag("body")
        for child in list(html.contents):
            if isinstance(child, Tag) and child.name == "head":
                continue
            body.append(child.extract())
        html.append(body)
    return soup


def sanitize_document(soup: BeautifulSoup) -> BeautifulSoup:
    """Patch markup patterns that paginate badly.

    * message boxes inside list items are hoisted out of the list;
    * message boxes and ``pre`` blocks are wrapped in unbreakable containers;
    * ``code`` elements are wrapped in ``span.code``;
    * headings are excluded from automatic bookmark extraction;
    * block images get line breaks and a wrapper so they behave as blocks.
    """
    for msg in soup.select("ul > li > div.msg"):
        _hoist_list_message(soup, msg)

    for msg in soup.select(".msg"):
        unbreaking_wrap(soup, msg)

    for pre in soup.select("pre"):
        _trim_pre(pre)
        unbreaking_wrap(soup, wrap_element(soup, pre, "pre", copy_classes=True))

    for code in soup.select("code"):
        wrap_element(soup, code, "code", wrapper="span")

    for heading in soup.select(HEADINGS_SELECTOR):
        heading[BOOKMARK_EXCLUDE_ATTR] = "exclude"

    for img in soup.select("img:not(.inline)"):
        _add_class(img, "pdf-image")
        img.insert_before(soup.new_tag("br"))
        img.insert_after(soup.new_tag("br"))
        wrap_element(soup, img, copy_classes=True)
    return soup


def insert_part_anchor(soup: BeautifulSoup, part_id: str) -> Tag:
    """Insert ``<a name="part_id">`` right before the main content node."""
    anchor = soup.new_tag("a", attrs={"name": part_id})
    main = soup.find(id=MAIN_CONTENT_ID)
    if isinstance(main, Tag):
        main.insert_before(anchor)
    else:
        body = soup.body
        if body is None:  # pragma: no cover - normalise_document guarantees a body
            msg = "Document has no body"
            raise ValueError(msg)
        body.insert(0, anchor)
    return anchor


def inject_chrome(
    soup: BeautifulSoup, stylesheets: list[str], body_fragment: BeautifulSoup | None
) -> None:
    """Append stylesheet links to ``head`` and prepend chrome to ``body``."""
    head = soup.head
    if head is not None:
        for href in stylesheets:
            head.append(soup.new_tag("link", attrs={"rel": "stylesheet", "href": href}))
    body = soup.body
    if body is not None and body_fragment is not None:
        for position, node in enumerate(list(body_fragment.contents)):
            body.insert(position, node.extract())


def unbreaking_wrap(soup: BeautifulSoup, element: Tag) -> Tag:
    """Wrap ``element`` in an ``avoid-break`` block inside a plain block."""
    inner = wrap_element(soup, element, "avoid-break", "wide")
    return wrap_element(soup, inner, "wide")


def wrap_element(
    soup: BeautifulSoup,
    element: Tag,
    *css_classes: str,
    wrapper: str = "div",
    copy_classes: bool = False,
) -> Tag:
    """Wrap ``element`` in a new ``wrapper`` tag carrying ``css_classes``."""
    classes: list[str] = []
    if copy_classes:
        classes.extend(_classes(element))
    classes.extend(css_classes)
    container = soup.new_tag(wrapper)
    if classes:
        container["class"] = list(dict.fromkeys(classes))
    return element.wrap(container)


def _hoist_list_message(soup: BeautifulSoup, msg: Tag) -> None:
    """Move a message box out of its list, splitting the list around it."""
    item = msg.parent
    listing = item.parent if item is not None else None
    if item is None or listing is None:
        return
    msg.extract()

    leading = soup.new_tag("ul")
    for attr, value in listing.attrs.items():
        if attr != "id":
            leading[attr] = value
    listing.insert_before(leading)
    for sibling in list(listing.contents):
        leading.append(sibling.extract())
        if sibling is item:
            break
    if not item.get_text(strip=True) and not item.find(True):
        item.decompose()
    leading.insert_after(msg)

    if not leading.find("li", recursive=False):
        leading.decompose()
    if not listing.find("li", recursive=False):
        listing.decompose()


def _trim_pre(pre: Tag) -> None:
    """Strip leading and trailing whitespace inside a ``pre`` block."""
    if pre.contents and isinstance(pre.contents[0], NavigableString):
        pre.contents[0].replace_with(pre.contents[0].lstrip())
    if pre.contents and isinstance(pre.contents[-1], NavigableString):
        pre.contents[-1].replace_with(pre.contents[-1].rstrip())


def _classes(element: Tag) -> list[str]:
    value = element.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def _add_class(element: Tag, css_class: str) -> None:
    classes = _classes(element)
    if css_class not in classes:
        classes.append(css_class)
    element["class"] = classes


__all__ = [
    "BOOKMARK_EXCLUDE_ATTR",
    "PartRenderer",
    "inject_chrome",
    "insert_part_anchor",
    "normalise_document",
    "sanitize_document",
    "unbreaking_wrap",
    "wrap_element",
]
