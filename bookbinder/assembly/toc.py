"""Build and size the table of contents part.

The TOC lists the absolute page number of every body part, but its own length
shifts those numbers. :class:`TocSizer` renders it with an assumed length,
then re-renders at the corrected offset until the page count it was numbered
for matches the page count it rendered to, or the pass limit is reached.

Example
-------
>>> from bookbinder.assembly.models import Part, PartKind, PartList
>>> from bookbinder.assembly.toc import assign_bullets
>>> parts = PartList()
>>> _ = parts.append(Part("a", "A", PartKind.BODY, []))
>>> _ = parts.append(Part("b", "B", PartKind.BODY, [], parent_index=0))
>>> assign_bullets(parts)
['1', '1.1']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from jinja2 import Environment, FileSystemLoader, select_autoescape

from bookbinder._constants import (
    ASSUMED_TOC_PAGES,
    TEMPLATES_DIR,
    TOC_PART_ID,
    TOC_TEMPLATE,
    TOC_TITLE,
)

from .models import Part, PartKind, PartList, TOCNode

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .renderer import PartRenderer

logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 2


@dc.dataclass(slots=True)
class TocSizing:
    """Outcome of sizing the table of contents.

    Attributes
    ----------
    part : Part
        Final TOC part; its page count is authoritative.
    passes : int
        Number of render passes performed.
    numbered_pages : int
        TOC page count the displayed page numbers were computed for.
    """

    part: Part
    passes: int
    numbered_pages: int

    @property
    def stable(self) -> bool:
        """Return whether the numbering matches the rendered TOC length."""
        return self.part.page_count == self.numbered_pages


def assign_bullets(parts: PartList) -> list[str]:
    """Return hierarchical bullet labels aligned with ``parts``.

    Root parts are numbered ``1``, ``2``, ...; the *j*-th child of a part with
    bullet ``B`` is labelled ``B.j``.
    """
    bullets: list[str] = []
    child_counts: dict[int | None, int] = {}
    for part in parts:
        position = child_counts.get(part.parent_index, 0) + 1
        child_counts[part.parent_index] = position
        if part.parent_index is None:
            bullets.append(str(position))
        else:
            bullets.append(f"{bullets[part.parent_index]}.{position}")
    return bullets


def build_toc_nodes(parts: PartList, first_body_page: int) -> list[TOCNode]:
    """Return root TOC nodes with page numbers accumulated from ``first_body_page``."""
    bullets = assign_bullets(parts)
    nodes: list[TOCNode] = []
    roots: list[TOCNode] = []
    page_number = first_body_page
    for index, part in enumerate(parts):
        node = TOCNode(part=part, bullet=bullets[index], page_number=page_number)
        nodes.append(node)
        if part.parent_index is None:
            roots.append(node)
        else:
            nodes[part.parent_index].children.append(node)
        page_number += part.page_count
    return roots


class TocSizer:
    """Render the TOC part and correct it against its own length."""

    def __init__(
        self,
        renderer: PartRenderer,
        *,
        heading: str = TOC_TITLE,
        max_passes: int = DEFAULT_MAX_PASSES,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the sizer.

        Parameters
        ----------
        renderer : PartRenderer
            Renderer used to lay out the generated TOC document.
        heading : str, optional
            Heading shown above the TOC and used as the part name.
        max_passes : int, optional
            Maximum number of TOC renders. ``2`` performs the single
            correction pass; higher values keep correcting while the page
            count changes.
        templates_dir : Path, optional
            Directory containing ``toc.jinja``.
        """
        if max_passes < 1:
            msg = "max_passes must be at least 1"
            raise ValueError(msg)
        self.renderer = renderer
        self.heading = heading
        self.max_passes = max_passes
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(TOC_TEMPLATE)

    def render_html(self, parts: PartList, first_body_page: int) -> str:
        """Return the TOC markup numbered from ``first_body_page``."""
        nodes = build_toc_nodes(parts, first_body_page)
        return self.template.render(heading=self.heading, nodes=nodes)

    def render(self, parts: PartList, first_body_page: int) -> Part:
        """Render one TOC candidate numbered from ``first_body_page``."""
        html = self.render_html(parts, first_body_page)
        return self.renderer.render_part(
            html, part_id=TOC_PART_ID, name=self.heading, kind=PartKind.TOC
        )

    def size(
        self, parts: PartList, *, pages_before: int, first_page: int = 1
    ) -> TocSizing:
        """Render the TOC until its length matches the numbering it shows.

        Parameters
        ----------
        parts : PartList
            Body parts listed by the TOC.
        pages_before : int
            Number of pages preceding the TOC (the cover).
        first_page : int, optional
            Absolute number of the first page of the document.

        Returns
        -------
        TocSizing
            Final TOC part with pass diagnostics.
        """
        numbered_pages = ASSUMED_TOC_PAGES
        toc = self.render(parts, first_page + pages_before + numbered_pages)
        passes = 1
        logger.info("TOC pass %d: %d pages", passes, toc.page_count)
        while toc.page_count != numbered_pages and passes < self.max_passes:
            numbered_pages = toc.page_count
            toc = self.render(parts, first_page + pages_before + numbered_pages)
            passes += 1
            logger.info("TOC pass %d: %d pages", passes, toc.page_count)

        sizing = TocSizing(part=toc, passes=passes, numbered_pages=numbered_pages)
        if not sizing.stable:
            logger.warning(
                "TOC numbered for %d pages but rendered to %d after %d passes; "
                "page references may be off by %d",
                numbered_pages,
                toc.page_count,
                passes,
                toc.page_count - numbered_pages,
            )
        return sizing


__all__ = [
    "DEFAULT_MAX_PASSES",
    "TocSizer",
    "TocSizing",
    "assign_bullets",
    "build_toc_nodes",
]
