"""Content collaborators: page fetchers and the summary tree."""

from .fetcher import (
    ContentFetcher,
    ContentFetcherError,
    DocFormat,
    FileSystemContentFetcher,
    HttpContentFetcher,
    PackageAccessError,
    PageNotFoundError,
    extract_fragment,
)
from .summary import DocumentSummary, SummaryEntry, SummaryFormatError, parse_summary

__all__ = [
    "ContentFetcher",
    "ContentFetcherError",
    "DocFormat",
    "DocumentSummary",
    "FileSystemContentFetcher",
    "HttpContentFetcher",
    "PackageAccessError",
    "PageNotFoundError",
    "SummaryEntry",
    "SummaryFormatError",
    "extract_fragment",
    "parse_summary",
]
