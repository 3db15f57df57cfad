"""Incremental rendering of generated wiki articles and structured pages.

This package consumes streamed generation output, turns each partial prefix
into a stable page, requests one cover image per article, and keeps a small
history of visited topics.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from newt_wiki import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
