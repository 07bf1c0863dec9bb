"""Placeholder resolution and template substitution.

Shared chrome (stylesheet links, header/footer, cover) is stored as small
template fragments containing ``${NAME}`` tokens. The tokens are replaced
literally, without escaping, from a placeholder map built once per build.

Example
-------
>>> from bookbinder.assembly.placeholders import Placeholder, substitute
>>> substitute("<h1>${TITLE}</h1>", {Placeholder.TITLE: "Guide"})
'<h1>Guide</h1>'
"""

from __future__ import annotations

import enum
import types
import typing as typ

from bookbinder._constants import DEFAULT_COVER_FOOTER, DEFAULT_CSS, TEMPLATES_DIR

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path


class Placeholder(enum.StrEnum):
    """Names of the tokens available to templates."""

    PRODUCT_NAME = "PRODUCT_NAME"
    PRODUCT_VERSION = "PRODUCT_VERSION"
    TITLE = "TITLE"
    SUBTITLE = "SUBTITLE"
    FOOTER_TEXT = "FOOTER_TEXT"
    COVER_FOOTER_TEXT = "COVER_FOOTER_TEXT"
    COVER_IMAGE = "COVER_IMAGE"
    CSS = "CSS"

    @property
    def token(self) -> str:
        return "${" + self.value + "}"


PlaceholderMap = typ.Mapping[Placeholder, str]


@typ.runtime_checkable
class PlaceholderAccessor(typ.Protocol):
    """Caller-supplied source of placeholder values."""

    def resolve(self, key: Placeholder, language: str) -> str | None:
        """Return the value for ``key`` in ``language`` or ``None`` when unset."""
        ...


class DefaultPlaceholderAccessor:
    """Accessor that leaves every placeholder unset."""

    def resolve(self, key: Placeholder, language: str) -> str | None:  # noqa: ARG002
        return None


def build_placeholder_map(
    accessor: PlaceholderAccessor, *, language: str, title: str = ""
) -> PlaceholderMap:
    """Resolve every placeholder once for a build.

    Parameters
    ----------
    accessor : PlaceholderAccessor
        Source of caller-provided values.
    language : str
        Language the document is built in.
    title : str, optional
        Document title; overrides any accessor value for ``TITLE``.

    Returns
    -------
    Mapping[Placeholder, str]
        Read-only mapping covering every :class:`Placeholder` member.
    """

    def _value(key: Placeholder, fallback: str) -> str:
        value = accessor.resolve(key, language)
        return fallback if value is None else value

    values: dict[Placeholder, str] = {}
    values[Placeholder.PRODUCT_NAME] = _value(Placeholder.PRODUCT_NAME, "")
    values[Placeholder.PRODUCT_VERSION] = _value(Placeholder.PRODUCT_VERSION, "")
    values[Placeholder.TITLE] = title or _value(Placeholder.TITLE, "")
    values[Placeholder.SUBTITLE] = _value(Placeholder.SUBTITLE, "")
    values[Placeholder.FOOTER_TEXT] = _value(
        Placeholder.FOOTER_TEXT, _default_footer(values)
    )
    values[Placeholder.COVER_FOOTER_TEXT] = _value(
        Placeholder.COVER_FOOTER_TEXT, DEFAULT_COVER_FOOTER
    )
    values[Placeholder.COVER_IMAGE] = _value(Placeholder.COVER_IMAGE, "")
    values[Placeholder.CSS] = _value(
        Placeholder.CSS, (TEMPLATES_DIR / DEFAULT_CSS).as_uri()
    )
    return types.MappingProxyType(values)


def _default_footer(values: cabc.Mapping[Placeholder, str]) -> str:
    """Return ``"product version - title"`` leaving out empty segments."""
    product = " ".join(
        value
        for value in (
            values[Placeholder.PRODUCT_NAME],
            values[Placeholder.PRODUCT_VERSION],
        )
        if value
    )
    return " - ".join(value for value in (product, values[Placeholder.TITLE]) if value)


def substitute(template: str, placeholders: PlaceholderMap) -> str:
    """Replace ``${NAME}`` tokens in ``template`` literally."""
    for key, value in placeholders.items():
        template = template.replace(key.token, value)
    return template


def load_template(name: str, templates_dir: Path | None = None) -> str:
    """Return the text of the template resource ``name``.

    Raises
    ------
    FileNotFoundError
        If the template does not exist.
    """
    path = (templates_dir or TEMPLATES_DIR) / name
    if not path.is_file():
        msg = f"Failed to load fragment '{name}' from {path.parent}"
        raise FileNotFoundError(msg)
    return path.read_text(encoding="utf-8")


__all__ = [
    "DefaultPlaceholderAccessor",
    "Placeholder",
    "PlaceholderAccessor",
    "PlaceholderMap",
    "build_placeholder_map",
    "load_template",
    "substitute",
]
