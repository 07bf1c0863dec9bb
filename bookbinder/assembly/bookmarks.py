"""Build the bookmark outline mirroring the part tree."""

from __future__ import annotations

import logging
import typing as typ

from .models import OutlineNode

if typ.TYPE_CHECKING:
    from .models import PartList

logger = logging.getLogger(__name__)


class BookmarkBuilder:
    """Create outline nodes for body parts once page offsets are final."""

    def __init__(self, title: str = "") -> None:
        self.root = OutlineNode(title=title, page_number=0, anchor="")

    def build(self, parts: PartList) -> OutlineNode:
        """Return an outline root whose children mirror the summary tree.

        Raises
        ------
        ValueError
            If a part has not been assigned a start page yet.
        """
        created: dict[int, OutlineNode] = {}
        for index, part in enumerate(parts):
            if part.start_page_number is None:
                msg = f"Part '{part.part_id}' has no start page; assign offsets first"
                raise ValueError(msg)
            parent = (
                self.root
                if part.parent_index is None
                else created.get(part.parent_index, self.root)
            )
            destination = part.start_page_number + part.pages[0].index
            node = OutlineNode(
                title=part.name, page_number=destination, anchor=part.part_id
            )
            parent.children.append(node)
            created[index] = node
            logger.debug(
                "Bookmark %s - %s to page %d", self.root.title, part.name, destination
            )
        return self.root


__all__ = ["BookmarkBuilder"]
