"""Load explorer configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _optional_str,
    _positive_float,
    _positive_int,
    _section,
    _topic_list,
)
from .models import (
    ApiConfig,
    ConfigError,
    CoverConfig,
    ExplorerConfig,
    HistoryConfig,
    ThemeConfig,
)


def load_explorer_config(path: Path | None = None) -> ExplorerConfig:
    """Load the YAML configuration for the explorer.

    Parameters
    ----------
    path : Path | None
        Filesystem path to the YAML file (for example ``config/newt.yaml``).
        ``None`` returns the built-in defaults.

    Returns
    -------
    ExplorerConfig
        Parsed configuration with defaults applied to every missing value.

    Raises
    ------
    FileNotFoundError
        If ``path`` is given but does not exist.
    ConfigError
        If a section is not a mapping or a value is out of range.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from newt_wiki.config import load_explorer_config
    >>> load_explorer_config().history.limit
    8
    """
    if path is None:
        return ExplorerConfig()
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = ExplorerConfig()

    return ExplorerConfig(
        api=_build_api_config(_section(raw, "api"), defaults.api),
        history=_build_history_config(_section(raw, "history"), defaults.history),
        cover=_build_cover_config(_section(raw, "cover"), defaults.cover),
        theme=_build_theme_config(_section(raw, "theme"), defaults.theme),
        output_dir=Path(raw.get("output_dir") or defaults.output_dir),
        pygments_style=_optional_str(raw.get("pygments_style"))
        or defaults.pygments_style,
        suggested_topics=_topic_list(
            raw.get("suggested_topics"), default=defaults.suggested_topics
        ),
    )


def _build_api_config(payload: typ.Mapping[str, typ.Any], base: ApiConfig) -> ApiConfig:
    base_url = _optional_str(payload.get("base_url")) or base.base_url
    if not base_url.startswith(("http://", "https://")):
        msg = f"'api.base_url' must be an http(s) URL, got {base_url!r}."
        raise ConfigError(msg)
    return ApiConfig(
        base_url=base_url.rstrip("/"),
        timeout=_positive_float(
            payload.get("timeout"), name="api.timeout", default=base.timeout
        ),
        retries=_positive_int(
            payload.get("retries"), name="api.retries", default=base.retries
        ),
    )


def _build_history_config(
    payload: typ.Mapping[str, typ.Any], base: HistoryConfig
) -> HistoryConfig:
    path = _optional_str(payload.get("path"))
    return HistoryConfig(
        path=Path(path) if path else base.path,
        key=_optional_str(payload.get("key")) or base.key,
        limit=_positive_int(
            payload.get("limit"), name="history.limit", default=base.limit
        ),
    )


def _build_cover_config(
    payload: typ.Mapping[str, typ.Any], base: CoverConfig
) -> CoverConfig:
    enabled = payload.get("enabled", base.enabled)
    if not isinstance(enabled, bool):
        msg = f"'cover.enabled' must be a boolean, got {enabled!r}."
        raise ConfigError(msg)
    return CoverConfig(
        enabled=enabled,
        excerpt_limit=_positive_int(
            payload.get("excerpt_limit"),
            name="cover.excerpt_limit",
            default=base.excerpt_limit,
        ),
        wait_timeout=_positive_float(
            payload.get("wait_timeout"),
            name="cover.wait_timeout",
            default=base.wait_timeout,
        ),
    )


def _build_theme_config(
    payload: typ.Mapping[str, typ.Any], base: ThemeConfig
) -> ThemeConfig:
    return ThemeConfig(
        site_name=_optional_str(payload.get("site_name")) or base.site_name,
        tagline=_optional_str(payload.get("tagline")) or base.tagline,
    )


__all__ = ["load_explorer_config"]
