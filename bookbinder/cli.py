"""Cyclopts CLI entrypoint for assembling documentation packages into PDFs.

The ``bookbinder`` console script reads unpacked documentation packages from a
source directory, assembles every page listed in a package's ``toc.html`` into
one PDF with a cover, a table of contents and bookmarks, and prints the path
of each file it wrote. ``bookbinder summary`` prints the summary tree without
laying anything out.

Examples
--------
Build every document listed in a configuration file:

>>> from bookbinder.cli import main
>>> main()  # doctest: +SKIP

Build a single package without a configuration file:

>>> from bookbinder.cli import app
>>> app(
...     ["build", "--source", "docs", "--package", "acme", "--output", "acme.pdf"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .assembly import DocumentAssembler
from .config import (
    BuildDefaults,
    ConfigPlaceholderAccessor,
    DocumentConfig,
    load_build_config,
)
from .content import (
    ContentFetcherError,
    FileSystemContentFetcher,
    SummaryFormatError,
)
from .errors import BuildError, ContentFetchError

if typ.TYPE_CHECKING:
    from .content import SummaryEntry
    from .layout import LayoutEngine

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="bookbinder", config=cyclopts.config.Env("BOOKBINDER_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _default_engine() -> LayoutEngine:
    """Create the WeasyPrint engine; imported lazily for its native libraries."""
    from .layout.weasy import WeasyPrintEngine

    return WeasyPrintEngine()


def _select_documents(
    config: Path | None,
    document: str | None,
    *,
    package: str | None,
    language: str | None,
) -> list[DocumentConfig]:
    """Return the documents to build from ``config`` or from CLI options."""
    if config is None:
        defaults = BuildDefaults()
        lang = (language or defaults.language).lower()
        key = package or "document"
        return [
            DocumentConfig(
                key=key,
                package=package or "",
                language=lang,
                title=None,
                output=defaults.output_dir / f"{key}-{lang}.pdf",
                placeholders={},
            )
        ]

    build_config = load_build_config(config)
    if document:
        return [build_config.get_document(document)]
    return list(build_config.documents.values())


def _apply_overrides(  # noqa: PLR0913 - mirrors the CLI flags
    document: DocumentConfig,
    *,
    package: str | None,
    language: str | None,
    output: Path | None,
    title: str | None,
    cover: bool | None,
    toc: bool | None,
    bookmarks: bool | None,
) -> None:
    if package is not None:
        document.package = package
    if language is not None:
        document.language = language.lower()
    if output is not None:
        document.output = output
    if title is not None:
        document.title = title
    if cover is not None:
        document.cover = cover
    if toc is not None:
        document.toc = toc
    if bookmarks is not None:
        document.bookmarks = bookmarks


def build_document(
    document: DocumentConfig,
    *,
    source: Path,
    engine: LayoutEngine | None = None,
) -> Path:
    """Assemble ``document`` from the packages under ``source``.

    Parameters
    ----------
    document : DocumentConfig
        Resolved document definition.
    source : Path
        Directory holding the unpacked documentation packages.
    engine : LayoutEngine, optional
        Layout engine to use; defaults to WeasyPrint.

    Returns
    -------
    Path
        Path of the written PDF.

    Raises
    ------
    BuildError
        If the build fails; the partially created output file is removed.
    """
    fetcher = FileSystemContentFetcher(source)
    try:
        summary = fetcher.load_summary(document.package, document.language)
    except (ContentFetcherError, SummaryFormatError) as exc:
        logger.exception("Summary of document '%s' failed to load", document.key)
        msg = f"Cannot load summary for document '{document.key}': {exc}"
        raise ContentFetchError(msg) from exc
    assembler = DocumentAssembler(
        fetcher,
        engine or _default_engine(),
        package=document.package,
        language=document.language,
        title=document.title or "",
        accessor=ConfigPlaceholderAccessor(document.placeholders),
        options=document.options,
    )

    output = document.output
    output.parent.mkdir(parents=True, exist_ok=True)
    try:
        with output.open("wb") as handle:
            assembler.build(summary, handle)
    except BuildError:
        logger.exception("Build of document '%s' failed", document.key)
        output.unlink(missing_ok=True)
        raise
    return output


@app.command(help="Assemble documentation packages into PDF documents.")
def build(  # noqa: PLR0913 - CLI surface
    *,
    source: typ.Annotated[
        Path,
        Parameter(
            help="Directory holding unpacked packages", env_var="BOOKBINDER_SOURCE"
        ),
    ],
    config: typ.Annotated[
        Path | None,
        Parameter(help="Path to build config", env_var="BOOKBINDER_CONFIG"),
    ] = None,
    document: typ.Annotated[
        str | None,
        Parameter(help="Document key from the config", env_var="BOOKBINDER_DOCUMENT"),
    ] = None,
    package: typ.Annotated[
        str | None, Parameter(help="Override the package name")
    ] = None,
    language: typ.Annotated[
        str | None, Parameter(help="Override the document language")
    ] = None,
    output: typ.Annotated[
        Path | None, Parameter(help="Override the output PDF path")
    ] = None,
    title: typ.Annotated[str | None, Parameter(help="Override the title")] = None,
    cover: typ.Annotated[bool | None, Parameter(help="Render the cover")] = None,
    toc: typ.Annotated[
        bool | None, Parameter(help="Render the table of contents")
    ] = None,
    bookmarks: typ.Annotated[
        bool | None, Parameter(help="Add a bookmark outline")
    ] = None,
    log_level: typ.Annotated[
        str, Parameter(help="Logging level", env_var="BOOKBINDER_LOG_LEVEL")
    ] = "WARNING",
) -> None:
    """Build one or all configured documents.

    Parameters
    ----------
    source : Path
        Directory holding the unpacked documentation packages.
    config : Path or None, optional
        Build configuration file; when ``None`` a single document is built
        from ``package`` and ``language``.
    document : str or None, optional
        Key of the configured document to build; all documents when ``None``.
    package, language, output, title : optional
        Overrides applied to the selected document.
    cover, toc, bookmarks : bool or None, optional
        Toggle the optional parts; ``None`` keeps the configured value.
    log_level : str, optional
        Level passed to :func:`logging.basicConfig`.

    Raises
    ------
    ValueError
        If per-document overrides are supplied while several documents are
        selected.
    """
    _configure_logging(log_level)
    documents = _select_documents(
        config, document, package=package, language=language
    )
    if len(documents) > 1 and any(
        value is not None for value in (package, language, output, title)
    ):
        msg = "Cannot override package/language/output/title for multiple documents."
        raise ValueError(msg)

    for target in documents:
        _apply_overrides(
            target,
            package=package,
            language=language,
            output=output,
            title=title,
            cover=cover,
            toc=toc,
            bookmarks=bookmarks,
        )
        written = build_document(target, source=source)
        print(f"wrote {_format_path(written)}")


@app.command(help="Print the summary tree of a package without building it.")
def summary(
    *,
    source: typ.Annotated[
        Path,
        Parameter(
            help="Directory holding unpacked packages", env_var="BOOKBINDER_SOURCE"
        ),
    ],
    package: typ.Annotated[str, Parameter(help="Package name")] = "",
    language: typ.Annotated[str, Parameter(help="Summary language")] = "en",
) -> None:
    """Print the numbered summary tree of ``package``."""
    fetcher = FileSystemContentFetcher(source)
    document = fetcher.load_summary(package, language.lower())
    if document.title:
        print(document.title)
    for line in format_summary(document.entries):
        print(line)


def format_summary(
    entries: typ.Sequence[SummaryEntry], prefix: str = "", depth: int = 0
) -> list[str]:
    """Return one indented, numbered line per entry in pre-order.

    Examples
    --------
    >>> from bookbinder.content import SummaryEntry
    >>> child = SummaryEntry("b", "B", "en")
    >>> format_summary([SummaryEntry("a", "A", "en", (child,))])
    ['1 A (a)', '  1.1 B (b)']
    """
    lines: list[str] = []
    for position, entry in enumerate(entries, start=1):
        bullet = f"{prefix}{position}"
        lines.append(f"{'  ' * depth}{bullet} {entry.name} ({entry.page_id})")
        lines.extend(format_summary(entry.children, f"{bullet}.", depth + 1))
    return lines


def main() -> None:
    """Invoke the Cyclopts application that powers the ``bookbinder`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
