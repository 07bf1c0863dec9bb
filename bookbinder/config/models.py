"""Typed dataclasses describing bookbinder build configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from bookbinder._constants import DEFAULT_LANGUAGE
from bookbinder.assembly import DEFAULT_MAX_PASSES, BuildOptions


class BuildConfigError(ValueError):
    """Raised when the build configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class BuildDefaults:
    """Values applied to every document unless it overrides them."""

    language: str = DEFAULT_LANGUAGE
    output_dir: Path = Path("build/pdf")
    cover: bool = True
    toc: bool = True
    bookmarks: bool = True
    toc_max_passes: int = DEFAULT_MAX_PASSES
    placeholders: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class DocumentConfig:
    """A fully resolved document definition sourced from YAML config."""

    key: str
    package: str
    language: str
    title: str | None
    output: Path
    placeholders: dict[str, typ.Any]
    cover: bool = True
    toc: bool = True
    bookmarks: bool = True
    toc_max_passes: int = DEFAULT_MAX_PASSES

    @property
    def options(self) -> BuildOptions:
        return BuildOptions(
            cover=self.cover,
            toc=self.toc,
            bookmarks=self.bookmarks,
            toc_max_passes=self.toc_max_passes,
        )


@dc.dataclass(slots=True)
class BuildConfig:
    """Collection of document configs alongside shared defaults."""

    documents: dict[str, DocumentConfig]
    defaults: BuildDefaults = dc.field(default_factory=BuildDefaults)
    default_document: str | None = None

    def get_document(self, key: str | None) -> DocumentConfig:
        """Return the requested document or fall back to the configured default."""
        if key is None:
            return self._get_default_document()
        try:
            return self.documents[key]
        except KeyError as exc:
            available = ", ".join(sorted(self.documents))
            msg = f"Unknown document '{key}'. Known documents: {available}"
            raise KeyError(msg) from exc

    def _get_default_document(self) -> DocumentConfig:
        if self.default_document and self.default_document in self.documents:
            return self.documents[self.default_document]
        if not self.documents:
            msg = "No documents configured."
            raise BuildConfigError(msg)
        return next(iter(self.documents.values()))


__all__ = ["BuildConfig", "BuildConfigError", "BuildDefaults", "DocumentConfig"]
