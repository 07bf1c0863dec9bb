"""Utility helpers shared by the bookbinder configuration loader."""

from __future__ import annotations

import typing as typ

from bookbinder.assembly import Placeholder

from .models import BuildConfigError

PLACEHOLDER_KEYS: frozenset[str] = frozenset(item.value.lower() for item in Placeholder)


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: object, *, field: str, default: bool) -> bool:
    """Return ``value`` as a boolean, rejecting anything but YAML booleans."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    msg = f"'{field}' must be true or false, got {value!r}."
    raise BuildConfigError(msg)


def _as_positive_int(value: object, *, field: str, default: int) -> int:
    """Return ``value`` as an integer of at least one."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"'{field}' must be a positive integer, got {value!r}."
        raise BuildConfigError(msg)
    return value


def _normalize_placeholders(
    payload: typ.Mapping[str, typ.Any] | None, *, context: str
) -> dict[str, typ.Any]:
    """Lower-case placeholder names and check they are known.

    Values are either scalars or mappings from language code to scalar.
    """
    if not payload:
        return {}
    if not isinstance(payload, dict):
        msg = f"'placeholders' in {context} must be a mapping."
        raise BuildConfigError(msg)
    normalized: dict[str, typ.Any] = {}
    for raw_key, value in payload.items():
        key = str(raw_key).strip().lower()
        if key not in PLACEHOLDER_KEYS:
            known = ", ".join(sorted(PLACEHOLDER_KEYS))
            msg = f"Unknown placeholder '{raw_key}' in {context}. Known: {known}"
            raise BuildConfigError(msg)
        match value:
            case dict():
                normalized[key] = {
                    str(language).lower(): str(text) for language, text in value.items()
                }
            case None:
                continue
            case _:
                normalized[key] = str(value)
    return normalized


def _merge_placeholders(
    base: typ.Mapping[str, typ.Any], override: typ.Mapping[str, typ.Any]
) -> dict[str, typ.Any]:
    """Overlay document placeholders onto the shared ones.

    Per-language mappings are merged key by key so a document can override a
    single translation.
    """
    merged: dict[str, typ.Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged
