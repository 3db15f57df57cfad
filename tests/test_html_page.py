"""Tests for rendering full HTML pages with Jinja templates."""

from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup

from newt_wiki.config import ThemeConfig
from newt_wiki.cover import CoverImageState
from newt_wiki.render import HtmlPageRenderer, MarkdownRenderer, RenderDispatcher

if typ.TYPE_CHECKING:
    from pathlib import Path

ARTICLE = "# Hogwarts\n\nHogwarts is a school.\n\n## History\n\n### Founders\n\n```python\nprint('hi')\n```\n"


@pytest.fixture
def renderer() -> HtmlPageRenderer:
    return HtmlPageRenderer(
        theme=ThemeConfig(site_name="Newt", tagline="Generated knowledge"),
        markdown=MarkdownRenderer(),
    )


def test_article_page_layout(renderer: HtmlPageRenderer) -> None:
    page = RenderDispatcher().render_article(
        ARTICLE,
        CoverImageState("Hogwarts", "ready", url="data:image/png;base64,AAAA"),
        topic="Hogwarts",
    )
    page.recent = RenderDispatcher().render_session(None, recent=["CRISPR"]).recent

    soup = BeautifulSoup(renderer.render(page), "html.parser")

    assert soup.title is not None and soup.title.string == "Hogwarts | Newt", (
        "expected page title with site name"
    )
    toc = [(li["class"][1], li.a["href"]) for li in soup.select("nav.toc li")]
    assert toc == [
        ("toc-indent-0", "#hogwarts"),
        ("toc-indent-1", "#history"),
        ("toc-indent-2", "#founders"),
    ], f"unexpected toc {toc!r}"
    assert soup.select_one("article.article img.cover-image") is not None, "cover"
    assert soup.select_one("div.codehilite")["data-language"] == "python", (
        "expected language annotation on highlighted code"
    )
    assert ".codehilite" in soup.style.get_text(), "expected pygments css"
    recent = soup.select_one("section.recent a")
    assert recent is not None and recent["href"] == "/visit/CRISPR", "recent link"


def test_error_banner_keeps_partial_content(renderer: HtmlPageRenderer) -> None:
    page = RenderDispatcher().render_article("# Hogwarts\n\nPartial", topic="Hogwarts")
    page.status = "error"
    page.error = "Request failed (500)"

    soup = BeautifulSoup(renderer.render(page), "html.parser")

    alert = soup.select_one("div.status-error")
    assert alert is not None and "Request failed (500)" in alert.get_text(), (
        "expected the upstream error message"
    )
    assert alert.select_one("a.retry")["href"] == "/visit/Hogwarts", "retry link"
    assert soup.select_one("article.article h1") is not None, "expected content kept"


def test_site_page_renders_sections(renderer: HtmlPageRenderer) -> None:
    snapshot = {
        "title": "Spotify",
        "nav": [{"label": "Home", "href": "Spotify"}],
        "sections": [
            {"type": "hero", "hero": {"headline": "Spotify <3"}},
            {},
            {
                "type": "form",
                "form": {
                    "fields": [
                        {"label": "Email", "name": "email", "type": "email"},
                        {"label": "Bio", "name": "bio", "type": "textarea"},
                    ],
                    "actionTarget": "Spotify Premium",
                },
            },
            {"type": "wiki", "subject": "Spotify", "article": "# Spotify\n\nMusic."},
        ],
    }
    page = RenderDispatcher().render_site(snapshot, topic="Spotify")
    page.status = "streaming"

    html = renderer.render(page)
    soup = BeautifulSoup(html, "html.parser")

    assert soup.select_one("section.hero h1").get_text() == "Spotify <3", (
        "expected escaped headline text"
    )
    assert "<3</h1>" not in html, "expected headline to be escaped"
    assert soup.select("section.placeholder"), "expected placeholder section"
    form = soup.select_one("section.form form")
    assert form["action"] == "/visit/Spotify%20Premium", "expected intercepted action"
    assert form.select_one("input[type=email]") is not None, "email input"
    assert form.select_one("textarea[name=bio]") is not None, "textarea field"
    assert soup.select_one("section.wiki")["data-subject"] == "Spotify", "wiki"
    assert soup.select_one("div.status-streaming") is not None, "loading banner"
    assert soup.select_one("nav.site-nav a")["data-topic"] == "Spotify", "nav link"


def test_empty_site_page_shows_placeholder(renderer: HtmlPageRenderer) -> None:
    page = RenderDispatcher().render_site({}, topic="Spotify")

    soup = BeautifulSoup(renderer.render(page), "html.parser")

    assert soup.select("section.placeholder"), "expected a neutral placeholder"
    assert soup.title.string == "Spotify | Newt", "expected topic in title"


def test_write_uses_slug_file_name(renderer: HtmlPageRenderer, tmp_path: Path) -> None:
    page = RenderDispatcher().render_article("# Black Holes!!\n", topic="black holes")

    written = renderer.write(page, tmp_path / "public")

    assert written == tmp_path / "public" / "black-holes.html", "expected slug name"
    assert "Black Holes!!" in written.read_text(encoding="utf-8"), "expected content"
