"""Exception hierarchy for PDF assembly builds.

Every stage of a build wraps its underlying cause into a :class:`BuildError`
subclass so callers only need a single ``except`` clause to detect a failed
build. The original collaborator exception is always chained as
``__cause__``.

Example
-------
>>> from bookbinder.errors import BuildError, LayoutError
>>> issubclass(LayoutError, BuildError)
True
"""

from __future__ import annotations


class BuildError(RuntimeError):
    """Raised when a document build fails; the output must be discarded."""


class ContentFetchError(BuildError):
    """Raised when a page referenced by the summary cannot be fetched."""


class LayoutError(BuildError):
    """Raised when the layout engine cannot paginate a normalised document."""


class WriteError(BuildError):
    """Raised when the PDF output cannot be produced or written."""


class CancellationFault(BuildError):
    """Raised when a build is interrupted while pages are being written."""


class EmptyDocumentError(BuildError):
    """Raised when the summary tree references no pages at all."""


class BuildStateError(BuildError):
    """Raised when a build stage is started out of order."""


__all__ = [
    "BuildError",
    "BuildStateError",
    "CancellationFault",
    "ContentFetchError",
    "EmptyDocumentError",
    "LayoutError",
    "WriteError",
]
