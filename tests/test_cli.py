"""Tests for the ``newt`` command line entry points."""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from conftest import HOGWARTS_ARTICLE, FakeBackend, chunked

from newt_wiki import cli
from newt_wiki.errors import EmptyTopicError
from newt_wiki.explorer import Explorer
from newt_wiki.navigation import RecentTopics
from newt_wiki.session import StreamChunk, StreamFailed
from newt_wiki.storage import JsonFileStore

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from newt_wiki.config import ExplorerConfig
    from newt_wiki.session import SessionMode

SPOTIFY = {
    "title": "Spotify",
    "sections": [
        {"type": "hero", "hero": {"headline": "Listen to everything"}},
        {
            "type": "wiki",
            "name": "NewtWiki",
            "subject": "Spotify",
            "article": "# Spotify\n\nA music streaming service.\n",
        },
    ],
}


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "newt.yaml"
    path.write_text(
        f"""
output_dir: {tmp_path / "public"}
history:
  path: {tmp_path / "history.json"}
cover:
  wait_timeout: 5
theme:
  site_name: Newt Test
""".strip()
        + "\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(
        articles={"Hogwarts": chunked(HOGWARTS_ARTICLE, 12)},
        sites={"Spotify": chunked(json.dumps(SPOTIFY), 16)},
    )


@pytest.fixture
def scripted_backend(mocker: MockerFixture, backend: FakeBackend) -> FakeBackend:
    """Route every CLI explorer to the scripted backend."""
    build = Explorer.from_config

    def from_config(config: ExplorerConfig, *, mode: SessionMode) -> Explorer:
        return build(config, mode=mode, backend=backend)

    mocker.patch.object(Explorer, "from_config", side_effect=from_config)
    return backend


def test_explore_writes_article_page(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    scripted_backend: FakeBackend,
) -> None:
    config_path = _write_config(tmp_path)
    monkeypatch.chdir(tmp_path)

    cli.explore("Hogwarts", config=config_path)

    output = capsys.readouterr().out
    assert output.strip() == "wrote public/hogwarts.html", (
        f"unexpected CLI output {output!r}"
    )
    soup = BeautifulSoup(
        (tmp_path / "public" / "hogwarts.html").read_text(encoding="utf-8"),
        "html.parser",
    )
    assert soup.title is not None
    assert soup.title.string == "Hogwarts | Newt Test", "expected themed title"
    assert soup.select_one("img.cover-image") is not None, "expected the cover"
    assert scripted_backend.requested == [("article", "Hogwarts")], (
        "expected one article request"
    )
    history = RecentTopics(JsonFileStore(tmp_path / "history.json"))
    assert history.items == ["Hogwarts"], "expected the visit persisted"


def test_visit_writes_structured_page(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    scripted_backend: FakeBackend,
) -> None:
    config_path = _write_config(tmp_path)
    output_dir = tmp_path / "dist"

    cli.visit("Spotify", config=config_path, output_dir=output_dir)

    assert "spotify.html" in capsys.readouterr().out, "expected the written path"
    soup = BeautifulSoup(
        (output_dir / "spotify.html").read_text(encoding="utf-8"), "html.parser"
    )
    assert soup.select_one("section.hero h1") is not None, "expected hero section"
    assert soup.select_one("section.wiki") is not None, "expected wiki section"
    assert scripted_backend.requested == [("site", "Spotify")], (
        "expected the structured route"
    )


def test_explore_reports_generation_failure(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    scripted_backend: FakeBackend,
) -> None:
    scripted_backend.articles["Hogwarts"] = [
        StreamChunk("# Hogwarts\n\nPartial"),
        StreamFailed("Request failed (502)"),
    ]

    cli.explore("Hogwarts", config=_write_config(tmp_path))

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "error: Request failed (502)", f"unexpected output {lines!r}"
    page = (tmp_path / "public" / "hogwarts.html").read_text(encoding="utf-8")
    soup = BeautifulSoup(page, "html.parser")
    assert soup.select_one("div.status-error a.retry") is not None, (
        "expected a retry affordance"
    )


def test_explore_rejects_blank_topic(
    tmp_path: Path, scripted_backend: FakeBackend
) -> None:
    with pytest.raises(EmptyTopicError):
        cli.explore("   ", config=_write_config(tmp_path))
    assert scripted_backend.requested == [], "expected no request"


def test_random_picks_a_suggested_topic(
    tmp_path: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
    scripted_backend: FakeBackend,
) -> None:
    pick = mocker.patch.object(cli, "random_topic", return_value="Hogwarts")

    cli.random(config=_write_config(tmp_path))

    assert pick.call_count == 1, "expected one random pick"
    assert capsys.readouterr().out.startswith("topic: Hogwarts\n"), (
        "expected the chosen topic announced"
    )
    assert scripted_backend.requested == [("article", "Hogwarts")], (
        "expected the chosen topic generated"
    )


def test_history_lists_and_forget_clears(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_config(tmp_path)
    cli.history(config=config_path)
    assert capsys.readouterr().out == "no recent topics\n", "expected empty history"

    recent = RecentTopics(JsonFileStore(tmp_path / "history.json"))
    for topic in ("Hogwarts", "Photosynthesis", "hogwarts"):
        recent.push(topic)
    cli.history(config=config_path)
    assert capsys.readouterr().out.splitlines() == ["Hogwarts", "Photosynthesis"], (
        "expected de-duplicated topics, newest first"
    )

    cli.forget(config=config_path)
    assert capsys.readouterr().out == "cleared recent topics\n", "expected message"
    assert RecentTopics(JsonFileStore(tmp_path / "history.json")).items == [], (
        "expected the stored history removed"
    )


def test_verbose_configures_logging(
    tmp_path: Path, mocker: MockerFixture, scripted_backend: FakeBackend
) -> None:
    basic_config = mocker.patch.object(logging, "basicConfig")

    cli.explore("Hogwarts", config=_write_config(tmp_path), verbose=True)

    basic_config.assert_called_once_with(level=logging.INFO, format=cli.LOG_FORMAT)


def test_format_path_prefers_relative(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    assert cli._format_path(tmp_path / "public" / "a.html") == "public/a.html", (
        "expected a cwd-relative path"
    )
    assert cli._format_path(Path("dist/a.html")) == "dist/a.html", (
        "expected relative paths unchanged"
    )
