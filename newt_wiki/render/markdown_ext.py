"""Python-Markdown extensions for generated articles.

``InternalLinkExtension`` intercepts bare topic links so that following them
requests a new page instead of loading a URL. ``HeadingAnchorExtension``
gives level one to three headings their slug ids and places the single cover
image slot right after the first level-one heading.
"""

from __future__ import annotations

import typing as typ
from xml.etree.ElementTree import Element, SubElement

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from newt_wiki.links import is_external_href, is_internal_href, visit_url
from newt_wiki.markdown_parser import slug_id

if typ.TYPE_CHECKING:
    from markdown import Markdown

    from .views import CoverSlot
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    CoverSlot = typ.Any

ANCHORED_HEADINGS = ("h1", "h2", "h3")


class InternalLinkExtension(Extension):
    """Rewrite topic links to in-app visit URLs.

    Internal targets (no scheme, no ``//``) become ``/visit/<topic>`` with a
    ``data-topic`` attribute holding the original topic. External links open
    in a new tab; in-page ``#anchors`` are left untouched.
    """

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link treeprocessor on the Markdown instance."""
        md.treeprocessors.register(
            InternalLinkTreeprocessor(md), "newt_internal_links", 15
        )


class InternalLinkTreeprocessor(Treeprocessor):
    """Rewrite anchors found in the parsed tree."""

    def run(self, root: Element) -> Element:
        for element in root.iter("a"):
            href = element.get("href")
            if is_internal_href(href):
                topic = typ.cast("str", href).strip()
                element.set("href", visit_url(topic))
                element.set("data-topic", topic)
                element.set("title", f"Go to article: {topic}")
            elif is_external_href(href):
                element.set("target", "_blank")
                element.set("rel", "noopener noreferrer")
        return root


class HeadingAnchorExtension(Extension):
    """Add slug ids to headings and inject the cover slot."""

    def __init__(self, cover: CoverSlot | None = None) -> None:
        super().__init__()
        self.cover = cover

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the heading treeprocessor on the Markdown instance."""
        md.treeprocessors.register(
            HeadingAnchorTreeprocessor(md, self.cover), "newt_heading_anchors", 14
        )


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Set heading ids from :func:`slug_id` and place the cover slot."""

    def __init__(self, md: Markdown, cover: CoverSlot | None) -> None:
        super().__init__(md)
        self.cover = cover

    def run(self, root: Element) -> Element:
        for element in root.iter():
            if element.tag in ANCHORED_HEADINGS:
                element.set("id", slug_id("".join(element.itertext())))
        if self.cover is None:
            return root
        for index, child in enumerate(list(root)):
            if child.tag == "h1":
                slot = _build_cover_element(self.cover)
                if slot is not None:
                    root.insert(index + 1, slot)
                break
        return root


def _build_cover_element(cover: CoverSlot) -> Element | None:
    """Return the markup for ``cover`` or None while idle."""
    slot = Element("div", {"class": f"cover cover-{cover.status}"})
    match cover.status:
        case "ready" if cover.url:
            SubElement(
                slot,
                "img",
                {"src": cover.url, "alt": cover.alt, "class": "cover-image"},
            )
        case "loading":
            note = SubElement(slot, "p", {"class": "cover-note"})
            note.text = "Generating cover image…"
        case "error":
            note = SubElement(slot, "p", {"class": "cover-error"})
            note.text = cover.error or "Image generation failed"
        case _:
            return None
    return slot


__all__ = [
    "HeadingAnchorExtension",
    "HeadingAnchorTreeprocessor",
    "InternalLinkExtension",
    "InternalLinkTreeprocessor",
]
