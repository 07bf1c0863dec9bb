"""Assembly pipeline turning a summary tree into a single PDF."""

from .bookmarks import BookmarkBuilder
from .models import (
    BUILD_STATE_ORDER,
    BuildState,
    OutlineNode,
    Part,
    PartKind,
    PartList,
    TOCNode,
)
from .offsets import assign_page_offsets
from .pipeline import BuildOptions, DocumentAssembler
from .placeholders import (
    DefaultPlaceholderAccessor,
    Placeholder,
    PlaceholderAccessor,
    build_placeholder_map,
    substitute,
)
from .renderer import PartRenderer
from .toc import DEFAULT_MAX_PASSES, TocSizer, TocSizing, assign_bullets
from .walker import SummaryWalker
from .writer import CancellationToken, PdfDocumentWriter, PdfOutputDevice

__all__ = [
    "BUILD_STATE_ORDER",
    "DEFAULT_MAX_PASSES",
    "BookmarkBuilder",
    "BuildOptions",
    "BuildState",
    "CancellationToken",
    "DefaultPlaceholderAccessor",
    "DocumentAssembler",
    "OutlineNode",
    "Part",
    "PartKind",
    "PartList",
    "PartRenderer",
    "PdfDocumentWriter",
    "PdfOutputDevice",
    "Placeholder",
    "PlaceholderAccessor",
    "SummaryWalker",
    "TOCNode",
    "TocSizer",
    "TocSizing",
    "assign_bullets",
    "assign_page_offsets",
    "build_placeholder_map",
    "substitute",
]
