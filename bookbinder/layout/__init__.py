"""Layout engine protocols and page descriptors.

The WeasyPrint implementation lives in :mod:`bookbinder.layout.weasy` and is
imported on demand because it loads native Pango libraries.
"""

from .base import LaidOutDocument, LayoutEngine, PageBox

__all__ = ["LaidOutDocument", "LayoutEngine", "PageBox"]
