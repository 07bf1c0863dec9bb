"""Tests for HTML normalisation, sanitisation and part rendering."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup
from conftest import FakeLayoutEngine, page_html

from bookbinder.assembly import (
    DefaultPlaceholderAccessor,
    PartKind,
    PartRenderer,
    build_placeholder_map,
)
from bookbinder.assembly.renderer import (
    insert_part_anchor,
    normalise_document,
    sanitize_document,
)
from bookbinder.errors import LayoutError


def _soup(html: str) -> BeautifulSoup:
    return normalise_document(BeautifulSoup(html, "html.parser"))


@pytest.fixture
def renderer(engine: FakeLayoutEngine) -> PartRenderer:
    placeholders = build_placeholder_map(
        DefaultPlaceholderAccessor(), language="en", title="Guide"
    )
    return PartRenderer(engine, placeholders)


def test_normalise_wraps_bare_fragment() -> None:
    soup = _soup("<p>Hi</p>")

    assert soup.head is not None
    assert str(soup.body) == "<body><p>Hi</p></body>"


def test_normalise_adds_missing_head() -> None:
    soup = _soup("<html><body><p>Hi</p></body></html>")

    assert soup.html.contents[0].name == "head"


def test_message_in_list_item_is_hoisted_after_the_list() -> None:
    soup = _soup(
        "<ul><li>one</li><li><div class='msg'>note</div></li><li>three</li></ul>"
    )

    sanitize_document(soup)

    body_tags = [child for child in soup.body.children if child.name]
    assert [tag.name for tag in body_tags] == ["ul", "div", "ul"]
    assert body_tags[0].get_text(strip=True) == "one"
    assert "note" in body_tags[1].get_text()
    assert body_tags[2].get_text(strip=True) == "three"


def test_message_boxes_are_wrapped_unbreakable() -> None:
    soup = _soup("<div class='msg'>careful</div>")

    sanitize_document(soup)

    msg = soup.select_one(".msg")
    assert msg.parent["class"] == ["avoid-break", "wide"]
    assert msg.parent.parent["class"] == ["wide"]


def test_pre_blocks_are_trimmed_and_wrapped() -> None:
    soup = _soup("<pre class='shell'>\n  ls -l  \n</pre>")

    sanitize_document(soup)

    pre = soup.find("pre")
    assert pre.get_text() == "ls -l"
    assert pre.parent["class"] == ["shell", "pre"]
    assert pre.parent.parent["class"] == ["avoid-break", "wide"]


def test_code_is_wrapped_in_span() -> None:
    soup = _soup("<p>run <code>make</code></p>")

    sanitize_document(soup)

    code = soup.find("code")
    assert code.parent.name == "span"
    assert code.parent["class"] == ["code"]


def test_headings_are_excluded_from_bookmarks() -> None:
    soup = _soup("<h1>One</h1><h3>Three</h3>")

    sanitize_document(soup)

    assert all(
        tag["data-pdf-bookmark"] == "exclude" for tag in soup.select("h1, h3")
    )


def test_block_images_are_isolated() -> None:
    soup = _soup("<p><img src='a.png'><img class='inline' src='b.png'></p>")

    sanitize_document(soup)

    block = soup.find("img", src="a.png")
    inline = soup.find("img", src="b.png")
    assert "pdf-image" in block["class"]
    assert block.parent.name == "div"
    assert block.parent.previous_sibling.name == "br"
    assert block.parent.next_sibling.name == "br"
    assert inline["class"] == ["inline"], "inline images stay in the text flow"


def test_anchor_goes_before_main() -> None:
    soup = _soup("<p>intro</p><div id='main'>body</div>")

    insert_part_anchor(soup, "setup")

    main = soup.find(id="main")
    assert main.previous_sibling.name == "a"
    assert main.previous_sibling["name"] == "setup"


def test_anchor_goes_first_without_main() -> None:
    soup = _soup("<p>intro</p>")

    insert_part_anchor(soup, "setup")

    assert soup.body.contents[0]["name"] == "setup"


def test_render_part_injects_chrome(
    renderer: PartRenderer, engine: FakeLayoutEngine
) -> None:
    part = renderer.render_part(page_html("A", pages=3), part_id="a", name="A")

    assert part.page_count == 3
    assert part.kind is PartKind.BODY
    soup = BeautifulSoup(engine.documents[-1], "html.parser")
    hrefs = [link["href"] for link in soup.head.find_all("link")]
    assert hrefs[0].endswith("page-struct.css")
    assert hrefs[1].endswith("bookbinder.css")
    assert soup.body.contents[0]["id"] == "page-header"
    assert soup.find(id="page-footer").get_text() == "Guide"


def test_render_cover_drops_empty_image(
    renderer: PartRenderer, engine: FakeLayoutEngine
) -> None:
    cover = renderer.render_cover()

    assert cover.kind is PartKind.COVER
    assert cover.name == "Guide"
    soup = BeautifulSoup(engine.documents[-1], "html.parser")
    assert soup.find("img") is None
    assert soup.find(id="page-header") is None, "the cover carries no page chrome"
    assert soup.head.find("link")["href"].endswith("cover-struct.css")


def test_engine_failure_becomes_layout_error(
    renderer: PartRenderer, engine: FakeLayoutEngine
) -> None:
    engine.fail_on = "a"

    with pytest.raises(LayoutError, match="'a'") as excinfo:
        renderer.render_part(page_html("A"), part_id="a", name="A")
    assert isinstance(excinfo.value.__cause__, RuntimeError)
