"""Load and validate build configuration YAML for bookbinder.

This subpackage parses a ``bookbinder.yaml`` file, merges the shared defaults
and placeholders with per-document overrides and produces typed dataclasses
(:class:`BuildConfig`, :class:`DocumentConfig`) that the CLI hands to the
assembler. :class:`ConfigPlaceholderAccessor` exposes the merged placeholder
values through the accessor contract the assembler expects.

Examples
--------
>>> from pathlib import Path
>>> from bookbinder.config import load_build_config
>>> config = load_build_config(Path("bookbinder.yaml"))  # doctest: +SKIP
>>> document = config.get_document(None)  # doctest: +SKIP
>>> document.output  # doctest: +SKIP
PosixPath('build/pdf/acme-manual.pdf')
"""

from .accessor import ConfigPlaceholderAccessor
from .loader import load_build_config
from .models import BuildConfig, BuildConfigError, BuildDefaults, DocumentConfig

__all__ = [
    "BuildConfig",
    "BuildConfigError",
    "BuildDefaults",
    "ConfigPlaceholderAccessor",
    "DocumentConfig",
    "load_build_config",
]
