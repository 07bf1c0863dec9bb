"""Assemble documentation packages into single PDF documents.

This package exposes the CLI entry points used by the ``bookbinder`` console
script together with the assembler the CLI drives.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``DocumentAssembler``: Build one PDF from a summary tree.

Examples
--------
>>> from bookbinder import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .assembly import DocumentAssembler
from .cli import app, main

__all__ = ["DocumentAssembler", "app", "main"]
