"""Load and validate explorer configuration YAML.

This subpackage parses ``newt.yaml``, applies defaults to every missing value,
and produces the slotted dataclasses the explorer and CLI consume. The primary
entry point is :func:`load_explorer_config`.

Examples
--------
>>> from pathlib import Path
>>> from newt_wiki.config import load_explorer_config
>>> config = load_explorer_config(Path("config/newt.yaml"))  # doctest: +SKIP
>>> config.api.base_url  # doctest: +SKIP
'http://localhost:3000'
"""

from .loader import load_explorer_config
from .models import (
    ApiConfig,
    ConfigError,
    CoverConfig,
    ExplorerConfig,
    HistoryConfig,
    ThemeConfig,
)

__all__ = [
    "ApiConfig",
    "ConfigError",
    "CoverConfig",
    "ExplorerConfig",
    "HistoryConfig",
    "ThemeConfig",
    "load_explorer_config",
]
