"""Render partial documents into view models and HTML pages."""

from .dispatcher import RenderDispatcher, build_toc, cover_slot
from .html import HtmlPageRenderer
from .markdown_renderer import MarkdownRenderer
from .views import CoverSlot, PageView, PlaceholderView, TocEntry

__all__ = [
    "CoverSlot",
    "HtmlPageRenderer",
    "MarkdownRenderer",
    "PageView",
    "PlaceholderView",
    "RenderDispatcher",
    "TocEntry",
    "build_toc",
    "cover_slot",
]
