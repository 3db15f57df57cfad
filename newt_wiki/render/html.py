"""Render :class:`PageView` objects into standalone HTML pages.

Templates live in ``newt_wiki/templates``. Article pages show the streamed
Markdown with a table of contents; site pages show the structured sections.

Example
-------
>>> from pathlib import Path
>>> from newt_wiki.render import HtmlPageRenderer, RenderDispatcher
>>> page = RenderDispatcher().render_article("# Hogwarts\\n", topic="Hogwarts")
>>> HtmlPageRenderer().write(page, Path("public"))  # doctest: +SKIP
PosixPath('public/hogwarts.html')
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from newt_wiki.config import ThemeConfig
from newt_wiki.links import visit_url
from newt_wiki.markdown_parser import slug_id

if typ.TYPE_CHECKING:
    from .markdown_renderer import MarkdownRenderer
    from .views import PageView

TEMPLATES = {"article": "article_page.jinja", "site": "site_page.jinja"}


class HtmlPageRenderer:
    """Render page views through the shared Jinja templates."""

    def __init__(
        self,
        *,
        theme: ThemeConfig | None = None,
        markdown: MarkdownRenderer | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the Jinja environment.

        Parameters
        ----------
        theme : ThemeConfig, optional
            Site name and tagline shown in the page chrome.
        markdown : MarkdownRenderer, optional
            Renderer whose Pygments stylesheet is embedded in the page.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        """
        self.theme = theme or ThemeConfig()
        self.markdown = markdown
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["visit_url"] = visit_url

    def render(self, page: PageView) -> str:
        """Return the HTML document for ``page``."""
        template = self.env.get_template(TEMPLATES[page.mode])
        return template.render(
            page=page,
            theme=self.theme,
            html_title=self._format_title(page),
            pygments_css=self.markdown.stylesheet if self.markdown else "",
            generated_at=dt.datetime.now(dt.UTC),
        )

    def write(self, page: PageView, output_dir: Path) -> Path:
        """Render ``page`` into ``output_dir`` and return the written path."""
        output_dir.mkdir(parents=True, exist_ok=True)
        name = slug_id(page.title or page.topic or "") or "page"
        output_path = output_dir / f"{name}.html"
        output_path.write_text(self.render(page), encoding="utf-8")
        return output_path

    def _format_title(self, page: PageView) -> str:
        subject = page.title or page.topic
        if not subject:
            return self.theme.site_name
        return f"{subject} | {self.theme.site_name}"


__all__ = ["HtmlPageRenderer"]
