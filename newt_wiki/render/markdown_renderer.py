"""Render generated Markdown into HTML with consistent styling."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from .markdown_ext import HeadingAnchorExtension, InternalLinkExtension

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

    from .views import CoverSlot
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any
    CoverSlot = typ.Any

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
# Generated articles link topics as [Label](Topic Name); wrap such targets in
# angle brackets so Markdown accepts the spaces.
SPACED_LINK_TARGET = re.compile(r"(?<=\])\(([^()<>\"'\n]*?\s[^()<>\"'\n]*?)\)")


class MarkdownRenderer:
    """Render streamed Markdown with topic-link interception and anchors."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer for the given Pygments style.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for fenced code blocks. Defaults to
            ``"monokai"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def markdown(self, text: str | None, *, cover: CoverSlot | None = None) -> str:
        """Render ``text`` into HTML; empty or missing text renders nothing.

        Parameters
        ----------
        text : str | None
            Markdown received so far; it may end mid-block.
        cover : CoverSlot, optional
            Cover image slot inserted after the first level-one heading.
        """
        if not text or not text.strip():
            return ""
        normalized = self._normalize(text)
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            InternalLinkExtension(),
            HeadingAnchorExtension(cover),
        ]
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = md.convert(normalized)
        return self._annotate_codehilite(html, normalized)

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)
        return SPACED_LINK_TARGET.sub(r"(<\1>)", without_indent)


__all__ = ["CODE_BLOCK_PATTERN", "MarkdownRenderer"]
