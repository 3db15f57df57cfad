"""Coercion helpers shared by the configuration loader."""

from __future__ import annotations

import typing as typ

from .models import ConfigError


def _section(raw: typ.Mapping[str, typ.Any], key: str) -> typ.Mapping[str, typ.Any]:
    """Return the mapping stored under ``key`` or an empty mapping."""
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping."
        raise ConfigError(msg)
    return value


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _positive_int(value: object, *, name: str, default: int) -> int:
    """Return ``value`` as a positive integer or raise ConfigError."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        msg = f"'{name}' must be a positive integer, got {value!r}."
        raise ConfigError(msg)
    return value


def _positive_float(value: object, *, name: str, default: float) -> float:
    """Return ``value`` as a positive number or raise ConfigError."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        msg = f"'{name}' must be a positive number, got {value!r}."
        raise ConfigError(msg)
    return float(value)


def _topic_list(value: object, *, default: list[str]) -> list[str]:
    """Return the non-empty string entries of a YAML list."""
    if value is None:
        return list(default)
    if not isinstance(value, list):
        msg = "'suggested_topics' must be a list."
        raise ConfigError(msg)
    topics = [text for text in (_optional_str(item) for item in value) if text]
    if not topics:
        msg = "'suggested_topics' must contain at least one topic."
        raise ConfigError(msg)
    return topics


__all__ = [
    "_optional_str",
    "_positive_float",
    "_positive_int",
    "_section",
    "_topic_list",
]
