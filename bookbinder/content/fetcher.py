"""Content fetchers resolving ``(package, page, language)`` to HTML fragments.

Two implementations are provided: :class:`FileSystemContentFetcher` reads an
unpacked documentation package from disk and :class:`HttpContentFetcher`
retrieves pages from a documentation server. Neither retries; failures are
reported as :class:`ContentFetcherError` subclasses and the assembler aborts
the build.

Layout on disk (and on the server)::

    <root>/<package>/<language>/toc.html
    <root>/<package>/<language>/pages/**/<page_id>.html

Example
-------
>>> from pathlib import Path
>>> from bookbinder.content import FileSystemContentFetcher
>>> fetcher = FileSystemContentFetcher(Path("docs"))  # doctest: +SKIP
>>> fetcher.fetch("acme", "intro", "en")  # doctest: +SKIP
'<div id="main">...</div>'
"""

from __future__ import annotations

import enum
import typing as typ
from http import HTTPStatus
from urllib.parse import urljoin, urlsplit

import requests
from bs4 import BeautifulSoup, Tag

from bookbinder._constants import (
    MAIN_CONTENT_ID,
    PAGE_FILE_TEMPLATE,
    PAGES_DIR,
    SUMMARY_FILE,
)

from .summary import DocumentSummary, parse_summary

if typ.TYPE_CHECKING:
    from pathlib import Path


class DocFormat(enum.StrEnum):
    """Target format a page is fetched for."""

    HTML = "html"
    PDF = "pdf"


class ContentFetcherError(RuntimeError):
    """Raised when a page cannot be retrieved."""


class PageNotFoundError(ContentFetcherError):
    """Raised when a page does not exist for the requested language."""


class PackageAccessError(ContentFetcherError):
    """Raised when the caller may not read the requested package."""


@typ.runtime_checkable
class ContentFetcher(typ.Protocol):
    """Collaborator resolving summary entries to sanitized HTML."""

    def fetch(
        self,
        package: str,
        page_id: str,
        language: str,
        doc_format: DocFormat = DocFormat.PDF,
    ) -> str:
        """Return the HTML fragment for ``page_id``."""
        ...


class FileSystemContentFetcher:
    """Read documentation packages unpacked under a root directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def package_dir(self, package: str) -> Path:
        """Return the directory holding ``package``; empty means the root."""
        return self.root / package if package else self.root

    def language_dir(self, package: str, language: str) -> Path:
        return self.package_dir(package) / language

    def fetch(
        self,
        package: str,
        page_id: str,
        language: str,
        doc_format: DocFormat = DocFormat.PDF,
    ) -> str:
        """Return the main content fragment of ``page_id``.

        Raises
        ------
        PageNotFoundError
            If no ``<page_id>.html`` exists for the language.
        PackageAccessError
            If the package directory or page cannot be read.
        """
        pages_dir = self.language_dir(package, language) / PAGES_DIR
        filename = PAGE_FILE_TEMPLATE.format(page_id=page_id)
        try:
            matches = sorted(pages_dir.rglob(filename)) if pages_dir.is_dir() else []
        except PermissionError as exc:
            msg = f"Cannot read package '{package}': {exc}"
            raise PackageAccessError(msg) from exc
        if not matches:
            msg = f"Page '{page_id}' for language '{language}' not found"
            raise PageNotFoundError(msg)

        page_path = matches[0]
        try:
            text = page_path.read_text(encoding="utf-8")
        except PermissionError as exc:
            msg = f"Cannot read page '{page_id}' of package '{package}'"
            raise PackageAccessError(msg) from exc
        except OSError as exc:
            msg = f"Error on retrieving page '{page_id}' for package '{package}'"
            raise ContentFetcherError(msg) from exc

        base = page_path.parent.resolve().as_uri() + "/"
        return extract_fragment(text, base if doc_format is DocFormat.PDF else None)

    def load_summary(self, package: str, language: str) -> DocumentSummary:
        """Parse the summary (``toc.html``) of ``package`` for ``language``."""
        path = self.language_dir(package, language) / SUMMARY_FILE
        if not path.is_file():
            msg = f"Summary for package '{package}' in '{language}' not found"
            raise PageNotFoundError(msg)
        html = path.read_text(encoding="utf-8")
        return parse_summary(html, package=package, language=language)


class HttpContentFetcher:
    """Fetch pages from a documentation server over HTTP.

    The fetcher mounts no retry adapter; a failed request fails the build and
    callers retry whole builds.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self.timeout = timeout

    def page_url(self, package: str, page_id: str, language: str) -> str:
        filename = PAGE_FILE_TEMPLATE.format(page_id=page_id)
        return f"{self.base_url}/{package}/{language}/{PAGES_DIR}/{filename}"

    def fetch(
        self,
        package: str,
        page_id: str,
        language: str,
        doc_format: DocFormat = DocFormat.PDF,
    ) -> str:
        """Download ``page_id`` and return its main content fragment."""
        url = self.page_url(package, page_id, language)
        response = self._get(url)
        if response.status_code == HTTPStatus.NOT_FOUND:
            msg = f"Page '{page_id}' for language '{language}' not found"
            raise PageNotFoundError(msg)
        if response.status_code in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
            msg = f"Access to package '{package}' denied"
            raise PackageAccessError(msg)
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = (
                f"Fetching page '{page_id}' failed with "
                f"status {response.status_code}: {snippet}"
            )
            raise ContentFetcherError(msg)
        return extract_fragment(
            response.text, url if doc_format is DocFormat.PDF else None
        )

    def load_summary(self, package: str, language: str) -> DocumentSummary:
        url = f"{self.base_url}/{package}/{language}/{SUMMARY_FILE}"
        response = self._get(url)
        if response.status_code == HTTPStatus.NOT_FOUND:
            msg = f"Summary for package '{package}' in '{language}' not found"
            raise PageNotFoundError(msg)
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            msg = f"Fetching summary failed with status {response.status_code}"
            raise ContentFetcherError(msg)
        return parse_summary(response.text, package=package, language=language)

    def _get(self, url: str) -> requests.Response:
        try:
            return self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            msg = f"Failed to reach documentation server at '{url}': {exc}"
            raise ContentFetcherError(msg) from exc


def extract_fragment(html: str, image_base: str | None = None) -> str:
    """Return the main content of a documentation page.

    Parameters
    ----------
    html : str
        Full page markup as stored in the package.
    image_base : str, optional
        When given, relative ``img[src]`` values are resolved against it so the
        layout engine can load images independently of the page location.

    Returns
    -------
    str
        The ``#main`` element (markup included) when present, otherwise the
        body content.
    """
    soup = BeautifulSoup(html, "html.parser")
    if image_base is not None:
        for img in soup.select("img[src]"):
            src = str(img["src"])
            if not _is_absolute(src):
                img["src"] = urljoin(image_base, src)

    main = soup.find(id=MAIN_CONTENT_ID)
    if isinstance(main, Tag):
        return str(main)
    body = soup.body
    if body is not None:
        return body.decode_contents()
    return str(soup)


def _is_absolute(src: str) -> bool:
    return bool(urlsplit(src).scheme) or src.startswith(("/", "#"))


__all__ = [
    "ContentFetcher",
    "ContentFetcherError",
    "DocFormat",
    "FileSystemContentFetcher",
    "HttpContentFetcher",
    "PackageAccessError",
    "PageNotFoundError",
    "extract_fragment",
]
