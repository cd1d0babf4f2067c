"""Utility helpers shared by the document codec, loader, and editor."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import typing as typ

from .models import DocumentFormatError

_T = typ.TypeVar("_T")

# Saved payloads spell these acronyms in upper case.
CAMEL_OVERRIDES: dict[str, str] = {
    "show_gpa": "showGPA",
    "show_cgpa": "showCGPA",
}
_CAMEL_BOUNDARY = re.compile(r"_([a-z0-9])")
_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z]+)")


def _to_camel(name: str) -> str:
    """Return the camelCase payload key for a dataclass attribute name."""
    if name in CAMEL_OVERRIDES:
        return CAMEL_OVERRIDES[name]
    return _CAMEL_BOUNDARY.sub(lambda match: match.group(1).upper(), name)


def _to_snake(key: str) -> str:
    """Return the attribute name for a camelCase payload key."""
    for attr, camel in CAMEL_OVERRIDES.items():
        if key == camel:
            return attr
    return _SNAKE_BOUNDARY.sub(lambda match: f"_{match.group(1).lower()}", key)


def _resolve_field(cls: type, key: str) -> str:
    """Map ``key`` (snake_case or camelCase) onto a field of dataclass ``cls``.

    Raises
    ------
    KeyError
        If neither spelling names a field of ``cls``.
    """
    names = {field.name for field in dc.fields(cls)}
    if key in names:
        return key
    candidate = _to_snake(key)
    if candidate in names:
        return candidate
    msg = f"Unknown {cls.__name__} field '{key}'. Known fields: {', '.join(sorted(names))}"
    raise KeyError(msg)


def _coerce(value: object, annotation: str) -> object:
    """Coerce a decoded scalar into the type named by ``annotation``."""
    match annotation:
        case "bool":
            return bool(value)
        case "str":
            return "" if value is None else str(value)
        case "str | None":
            return _optional_str(value)
        case "int":
            try:
                return int(typ.cast("typ.Any", value))
            except (TypeError, ValueError) as exc:
                msg = f"Expected an integer, got {value!r}"
                raise DocumentFormatError(msg) from exc
        case _:
            return value


def _decode_flat(
    cls: type[_T],
    payload: object,
    *,
    required: typ.Mapping[str, object] | None = None,
) -> _T:
    """Build a flat dataclass from a camelCase mapping.

    Absent keys keep the dataclass defaults. ``required`` supplies values for
    fields without defaults (such as generated identifiers) when the payload
    omits them.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, typ.Mapping):
        msg = f"{cls.__name__} payload must be a mapping, got {type(payload).__name__}"
        raise DocumentFormatError(msg)
    kwargs: dict[str, object] = {}
    for field in dc.fields(typ.cast("typ.Any", cls)):
        key = _to_camel(field.name)
        if key in payload:
            kwargs[field.name] = _coerce(payload[key], str(field.type))
        elif field.name in payload:
            kwargs[field.name] = _coerce(payload[field.name], str(field.type))
        elif required and field.name in required:
            kwargs[field.name] = required[field.name]
    return cls(**kwargs)


def _encode_flat(instance: object) -> dict[str, object]:
    """Return the camelCase mapping for a flat dataclass instance."""
    return {
        _to_camel(field.name): getattr(instance, field.name)
        for field in dc.fields(typ.cast("typ.Any", instance))
    }


def _optional_str(value: object | None) -> str | None:
    """Return a string value or None when empty."""
    if value is None:
        return None
    text = str(value)
    return text or None


def _string_tuple(value: object) -> tuple[str, ...]:
    """Normalize a list-like payload value into a tuple of unique strings."""
    if not isinstance(value, list | tuple):
        return ()
    seen: list[str] = []
    for item in value:
        text = str(item).strip()
        if text and text not in seen:
            seen.append(text)
    return tuple(seen)


def _parse_timestamp(value: dt.datetime | str | None) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def _format_timestamp(value: dt.datetime) -> str:
    """Render ``value`` as an ISO-8601 UTC string with a ``Z`` suffix."""
    text = value.astimezone(dt.UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


__all__ = [
    "CAMEL_OVERRIDES",
    "_coerce",
    "_decode_flat",
    "_encode_flat",
    "_format_timestamp",
    "_optional_str",
    "_parse_timestamp",
    "_resolve_field",
    "_string_tuple",
    "_to_camel",
    "_to_snake",
]
