"""Assign absolute start page numbers to ordered parts."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import Part


def assign_page_offsets(parts: cabc.Iterable[Part], *, first_page: int = 1) -> int:
    """Set ``start_page_number`` on each part in order and return the page total.

    Parameters
    ----------
    parts : Iterable[Part]
        Parts in output order: cover, TOC, then body parts in pre-order.
    first_page : int, optional
        Number of the first page; values below 1 are clamped to 1.

    Returns
    -------
    int
        Total number of pages across ``parts``.

    Examples
    --------
    >>> from bookbinder.assembly.models import Part, PartKind
    >>> cover = Part("cover", "Cover", PartKind.COVER, [object()])
    >>> body = Part("a", "A", PartKind.BODY, [object(), object()])
    >>> assign_page_offsets([cover, body])
    3
    >>> body.start_page_number
    2
    """
    counter = max(first_page, 1)
    total = 0
    for part in parts:
        part.start_page_number = counter
        counter += part.page_count
        total += part.page_count
    return total


__all__ = ["assign_page_offsets"]
