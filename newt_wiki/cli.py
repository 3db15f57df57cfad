"""Cyclopts CLI entrypoint for exploring generated topics from a terminal.

The ``newt`` console script defined here streams an article or a structured
page for a topic from the generation backend, waits for its cover image, and
writes the rendered page as standalone HTML. It also lists and clears the
recently visited topics shared by every command.

Examples
--------
Render an article for a topic into ``public/``:

>>> from newt_wiki.cli import app
>>> app(["explore", "Hogwarts"])  # doctest: +SKIP
wrote public/hogwarts.html

Render a structured page into a custom directory:

>>> app(["visit", "Spotify", "--output-dir", "dist"])  # doctest: +SKIP
wrote dist/spotify.html
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import ExplorerConfig, load_explorer_config
from .explorer import Explorer
from .navigation import RecentTopics, random_topic
from .render import HtmlPageRenderer
from .storage import JsonFileStore

if typ.TYPE_CHECKING:
    from .session import SessionMode

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

app = App(name="newt", config=cyclopts.config.Env("NEWT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path | None, Parameter(help="Path to newt.yaml", env_var="NEWT_CONFIG")
]
OutputOption = typ.Annotated[
    Path | None,
    Parameter(help="Override the output folder", env_var="NEWT_OUTPUT_DIR"),
]
VerboseOption = typ.Annotated[bool, Parameter(help="Log progress to stderr")]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)


def _render_topic(
    topic: str,
    *,
    mode: SessionMode,
    config: Path | None,
    output_dir: Path | None,
    verbose: bool,
) -> Path:
    _configure_logging(verbose=verbose)
    explorer_config = load_explorer_config(config)
    explorer = Explorer.from_config(explorer_config, mode=mode)
    try:
        page = explorer.explore(topic, wait_timeout=explorer_config.cover.wait_timeout)
        renderer = HtmlPageRenderer(
            theme=explorer_config.theme, markdown=explorer.dispatcher.renderer
        )
        written = renderer.write(page, output_dir or explorer_config.output_dir)
    finally:
        explorer.close()
    if page.error:
        print(f"error: {page.error}")
    print(f"wrote {_format_path(written)}")
    return written


def _recent_topics(config: ExplorerConfig) -> RecentTopics:
    store = JsonFileStore(config.history.path.expanduser())
    return RecentTopics(store, key=config.history.key, limit=config.history.limit)


@app.command(help="Stream a generated article for TOPIC and write it as HTML.")
def explore(
    topic: str,
    *,
    config: ConfigOption = None,
    output_dir: OutputOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Render a Markdown article for ``topic``.

    Parameters
    ----------
    topic : str
        Subject to generate; blank input raises ``EmptyTopicError``.
    config : Path or None, optional
        Path to the ``newt.yaml`` configuration file; built-in defaults apply
        when omitted.
    output_dir : Path or None, optional
        Override the configured output directory.
    verbose : bool, optional
        Log progress to stderr.
    """
    _render_topic(
        topic, mode="article", config=config, output_dir=output_dir, verbose=verbose
    )


@app.command(help="Stream a generated structured page for QUERY and write it.")
def visit(
    query: str,
    *,
    config: ConfigOption = None,
    output_dir: OutputOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Render a structured site page for ``query``."""
    _render_topic(
        query, mode="site", config=config, output_dir=output_dir, verbose=verbose
    )


@app.command(help="Explore a randomly chosen suggested topic.")
def random(
    *,
    config: ConfigOption = None,
    output_dir: OutputOption = None,
    verbose: VerboseOption = False,
) -> None:
    explorer_config = load_explorer_config(config)
    topic = random_topic(explorer_config.suggested_topics)
    print(f"topic: {topic}")
    _render_topic(
        topic, mode="article", config=config, output_dir=output_dir, verbose=verbose
    )


@app.command(help="Print the recently visited topics, newest first.")
def history(*, config: ConfigOption = None) -> None:
    topics = _recent_topics(load_explorer_config(config)).items
    if not topics:
        print("no recent topics")
    for topic in topics:
        print(topic)


@app.command(help="Forget the recently visited topics.")
def forget(*, config: ConfigOption = None) -> None:
    _recent_topics(load_explorer_config(config)).clear()
    print("cleared recent topics")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``newt`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
