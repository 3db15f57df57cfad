"""Typed dataclasses describing newt_wiki configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from newt_wiki._constants import (
    HISTORY_LIMIT,
    HISTORY_STORAGE_KEY,
    LEAD_EXCERPT_LIMIT,
    SUGGESTED_TOPICS,
)

DEFAULT_API_BASE = "http://localhost:3000"
DEFAULT_HISTORY_PATH = Path("~/.local/state/newt/history.json")


class ConfigError(ValueError):
    """Raised when the configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ApiConfig:
    """Where the generation backend lives and how patiently to call it."""

    base_url: str = DEFAULT_API_BASE
    timeout: float = 60.0
    retries: int = 3


@dc.dataclass(slots=True)
class HistoryConfig:
    """Storage of the recently visited topics."""

    path: Path = DEFAULT_HISTORY_PATH
    key: str = HISTORY_STORAGE_KEY
    limit: int = HISTORY_LIMIT


@dc.dataclass(slots=True)
class CoverConfig:
    """Cover image generation settings."""

    enabled: bool = True
    excerpt_limit: int = LEAD_EXCERPT_LIMIT
    wait_timeout: float = 120.0


@dc.dataclass(slots=True)
class ThemeConfig:
    """Copy shown in the generated page chrome."""

    site_name: str = "Newt"
    tagline: str = "A living, fully AI-generated web of knowledge."


@dc.dataclass(slots=True)
class ExplorerConfig:
    """Fully resolved configuration for the explorer and the CLI."""

    api: ApiConfig = dc.field(default_factory=ApiConfig)
    history: HistoryConfig = dc.field(default_factory=HistoryConfig)
    cover: CoverConfig = dc.field(default_factory=CoverConfig)
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    output_dir: Path = Path("public")
    pygments_style: str = "monokai"
    suggested_topics: list[str] = dc.field(
        default_factory=lambda: list(SUGGESTED_TOPICS)
    )


__all__ = [
    "DEFAULT_API_BASE",
    "DEFAULT_HISTORY_PATH",
    "ApiConfig",
    "ConfigError",
    "CoverConfig",
    "ExplorerConfig",
    "HistoryConfig",
    "ThemeConfig",
]
