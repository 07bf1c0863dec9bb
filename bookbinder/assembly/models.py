"""Shared dataclasses used by the PDF assembly pipeline."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bookbinder.layout import PageBox


class PartKind(enum.StrEnum):
    """Role of a part inside the assembled document."""

    COVER = "cover"
    TOC = "toc"
    BODY = "body"


class BuildState(enum.StrEnum):
    """Lifecycle of one document build."""

    INIT = "init"
    FETCHING_CONTENT = "fetching_content"
    RENDERING_PARTS = "rendering_parts"
    SIZING_TOC = "sizing_toc"
    ASSIGNING_OFFSETS = "assigning_offsets"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


BUILD_STATE_ORDER: tuple[BuildState, ...] = (
    BuildState.INIT,
    BuildState.FETCHING_CONTENT,
    BuildState.RENDERING_PARTS,
    BuildState.SIZING_TOC,
    BuildState.ASSIGNING_OFFSETS,
    BuildState.WRITING,
    BuildState.DONE,
)


@dc.dataclass(slots=True)
class Part:
    """One rendered, paginated unit of the final document.

    Attributes
    ----------
    part_id : str
        Stable identifier, also used as the named anchor of the part.
    name : str
        Display name used in the TOC and the outline.
    kind : PartKind
        Whether the part is the cover, the TOC, or a body page.
    pages : list[PageBox]
        Pages produced by the layout engine.
    parent_index : int | None
        Index of the parent part inside the owning :class:`PartList`; never
        used for ownership.
    level : int
        Nesting depth: 0 for cover and TOC, 1 for root body parts.
    start_page_number : int | None
        Absolute number of the first page, set by the offset assigner.
    """

    part_id: str
    name: str
    kind: PartKind
    pages: list[PageBox]
    parent_index: int | None = None
    level: int = 0
    start_page_number: int | None = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def end_page_number(self) -> int | None:
        """Return the absolute number of the last page, once assigned."""
        if self.start_page_number is None:
            return None
        return self.start_page_number + self.page_count - 1


class PartList:
    """Flat, pre-ordered arena of body parts linked by parent indices."""

    def __init__(self) -> None:
        self._parts: list[Part] = []

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> cabc.Iterator[Part]:
        return iter(self._parts)

    def __getitem__(self, index: int) -> Part:
        return self._parts[index]

    def append(self, part: Part) -> int:
        """Append ``part`` after validating its parent link; return its index."""
        parent_index = part.parent_index
        if parent_index is None:
            part.level = 1
        else:
            if not 0 <= parent_index < len(self._parts):
                msg = f"Unknown parent index {parent_index} for part '{part.part_id}'"
                raise IndexError(msg)
            part.level = self._parts[parent_index].level + 1
        self._parts.append(part)
        return len(self._parts) - 1


@dc.dataclass(slots=True)
class TOCNode:
    """Row of the rendered table of contents."""

    part: Part
    bullet: str
    page_number: int
    children: list[TOCNode] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class OutlineNode:
    """Bookmark outline entry targeting an absolute page number."""

    title: str
    page_number: int
    anchor: str
    children: list[OutlineNode] = dc.field(default_factory=list)

    def walk(self) -> cabc.Iterator[OutlineNode]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


__all__ = [
    "BUILD_STATE_ORDER",
    "BuildState",
    "OutlineNode",
    "Part",
    "PartKind",
    "PartList",
    "TOCNode",
]
