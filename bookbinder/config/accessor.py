"""Placeholder accessor backed by configuration values."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from bookbinder.assembly import Placeholder

DEFAULT_LANGUAGE_KEY = "default"


class ConfigPlaceholderAccessor:
    """Resolve placeholders from a merged configuration mapping.

    Keys are placeholder names in any case. A value is either a plain string
    or a mapping from language code to string, optionally with a ``default``
    entry used when the language has no translation.

    Examples
    --------
    >>> from bookbinder.assembly import Placeholder
    >>> accessor = ConfigPlaceholderAccessor(
    ...     {"subtitle": {"en": "Guide", "it": "Guida"}, "product_name": "Acme"}
    ... )
    >>> accessor.resolve(Placeholder.SUBTITLE, "it")
    'Guida'
    >>> accessor.resolve(Placeholder.PRODUCT_NAME, "de")
    'Acme'
    >>> accessor.resolve(Placeholder.COVER_IMAGE, "en") is None
    True
    """

    def __init__(self, values: typ.Mapping[str, typ.Any]) -> None:
        self._values = {str(key).lower(): value for key, value in values.items()}

    def resolve(self, key: Placeholder, language: str) -> str | None:
        value = self._values.get(key.value.lower())
        if isinstance(value, dict):
            value = value.get(language.lower(), value.get(DEFAULT_LANGUAGE_KEY))
        return None if value is None else str(value)


__all__ = ["ConfigPlaceholderAccessor"]
