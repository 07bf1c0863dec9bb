"""Load build configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from bookbinder._constants import DEFAULT_LANGUAGE

from .helpers import (
    _as_bool,
    _as_positive_int,
    _merge_placeholders,
    _normalize_placeholders,
    _optional_str,
)
from .models import BuildConfig, BuildConfigError, BuildDefaults, DocumentConfig


def load_build_config(path: Path) -> BuildConfig:
    """Load the YAML configuration describing the documents to assemble.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``bookbinder.yaml``).

    Returns
    -------
    BuildConfig
        Parsed configuration with shared defaults and one
        :class:`DocumentConfig` per configured document.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    BuildConfigError
        If required sections or fields are missing or invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from bookbinder.config import load_build_config
    >>> config = load_build_config(Path("bookbinder.yaml"))  # doctest: +SKIP
    >>> config.get_document("manual").package  # doctest: +SKIP
    'acme'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    defaults = _build_defaults(raw.get("defaults") or {}, raw.get("placeholders"))
    documents_raw = raw.get("documents") or {}
    if not isinstance(documents_raw, dict) or not documents_raw:
        msg = "No documents defined in build configuration."
        raise BuildConfigError(msg)

    documents: dict[str, DocumentConfig] = {}
    for key, payload in documents_raw.items():
        match payload:
            case dict():
                documents[str(key)] = _build_document_config(
                    key=str(key), payload=payload, defaults=defaults
                )
            case _:
                msg = f"Document '{key}' must be a mapping."
                raise BuildConfigError(msg)

    return BuildConfig(
        documents=documents,
        defaults=defaults,
        default_document=_optional_str(raw.get("default_document")),
    )


def _build_defaults(
    payload: typ.Mapping[str, typ.Any], placeholders: typ.Any
) -> BuildDefaults:
    """Build the shared defaults from the ``defaults`` and ``placeholders`` keys."""
    base = BuildDefaults()
    return BuildDefaults(
        language=_optional_str(payload.get("language")) or DEFAULT_LANGUAGE,
        output_dir=Path(payload.get("output_dir", base.output_dir)),
        cover=_as_bool(payload.get("cover"), field="defaults.cover", default=True),
        toc=_as_bool(payload.get("toc"), field="defaults.toc", default=True),
        bookmarks=_as_bool(
            payload.get("bookmarks"), field="defaults.bookmarks", default=True
        ),
        toc_max_passes=_as_positive_int(
            payload.get("toc_max_passes"),
            field="defaults.toc_max_passes",
            default=base.toc_max_passes,
        ),
        placeholders=_normalize_placeholders(placeholders, context="the top level"),
    )


def _build_document_config(
    *,
    key: str,
    payload: typ.Mapping[str, typ.Any],
    defaults: BuildDefaults,
) -> DocumentConfig:
    """Build a DocumentConfig for a single entry using defaults and overrides."""
    package = _optional_str(payload.get("package"))
    if package is None:
        msg = f"Document '{key}' is missing 'package'."
        raise BuildConfigError(msg)

    language = (_optional_str(payload.get("language")) or defaults.language).lower()
    output = Path(payload.get("output") or f"{key}-{language}.pdf")
    if not output.is_absolute():
        output_dir = Path(payload.get("output_dir", defaults.output_dir))
        output = output_dir / output

    placeholders = _merge_placeholders(
        defaults.placeholders,
        _normalize_placeholders(
            payload.get("placeholders"), context=f"document '{key}'"
        ),
    )
    return DocumentConfig(
        key=key,
        package=package,
        language=language,
        title=_optional_str(payload.get("title")),
        output=output,
        placeholders=placeholders,
        cover=_as_bool(payload.get("cover"), field=f"{key}.cover", default=defaults.cover),
        toc=_as_bool(payload.get("toc"), field=f"{key}.toc", default=defaults.toc),
        bookmarks=_as_bool(
            payload.get("bookmarks"),
            field=f"{key}.bookmarks",
            default=defaults.bookmarks,
        ),
        toc_max_passes=_as_positive_int(
            payload.get("toc_max_passes"),
            field=f"{key}.toc_max_passes",
            default=defaults.toc_max_passes,
        ),
    )


__all__ = ["load_build_config"]
