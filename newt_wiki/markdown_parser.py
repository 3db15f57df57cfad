r"""Extract semantic structure from streamed, possibly incomplete Markdown.

Generated articles arrive token by token, so every helper here is a pure
function of the text received so far: it can be called again after each
appended chunk and will simply see a longer prefix. Nothing is cached between
calls.

Example
-------
>>> from newt_wiki.markdown_parser import extract_title_and_lead, slug_id
>>> extract_title_and_lead("# Hogwarts\n\nHogwarts is a school.\n").title
'Hogwarts'
>>> slug_id("Black Holes!!")
'black-holes'
"""

from __future__ import annotations

import dataclasses as dc
import re

from ._constants import LEAD_EXCERPT_LIMIT
from .links import is_internal_href

LINE_SPLIT_PATTERN = re.compile(r"\r?\n")
TITLE_PATTERN = re.compile(r"^#\s+")
ANY_HEADING_PATTERN = re.compile(r"^#{1,6}\s+")
HEADING_PATTERN = re.compile(r"^(#{1,3})\s+(.+)$")
LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)]+)\)")


@dc.dataclass(frozen=True, slots=True)
class TitleAndLead:
    """Title and lead paragraph found at the top of an article.

    Attributes
    ----------
    title : str | None
        Text of the opening level-one heading with the marker stripped.
    lead : str | None
        First paragraph after the title, lines joined with spaces.
    """

    title: str | None = None
    lead: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Heading:
    """A level one to three heading and its in-page anchor."""

    level: int
    text: str
    slug_id: str


@dc.dataclass(frozen=True, slots=True)
class MarkdownLink:
    """Inline link found in article text."""

    label: str
    href: str
    internal: bool


def slug_id(text: str) -> str:
    """Return the anchor id used for a heading.

    Lower-cases, drops everything outside ``[a-z0-9\\s-]``, trims, then
    collapses whitespace runs into single hyphens. Equal headings produce
    equal ids; no suffixes are added.
    """
    lowered = re.sub(r"[^a-z0-9\s-]", "", text.lower()).strip()
    return re.sub(r"\s+", "-", lowered)


def extract_title_and_lead(text: str) -> TitleAndLead:
    """Return the title and lead paragraph of a Markdown article.

    Parameters
    ----------
    text : str
        Markdown received so far. It may stop in the middle of a line.

    Returns
    -------
    TitleAndLead
        Both fields are ``None`` unless the first non-blank line is a
        level-one heading. The lead is ``None`` until at least one paragraph
        line follows the title.
    """
    opening = _scan_opening(LINE_SPLIT_PATTERN.split(text))
    if opening is None:
        return TitleAndLead()
    title, paragraph, _ = opening
    lead = " ".join(paragraph).strip() or None
    return TitleAndLead(title=title, lead=lead)


def opening_is_settled(text: str) -> bool:
    """Return True once the title and lead of a growing article are final.

    Only complete lines count. The opening is settled when a terminated
    title line is followed by a lead paragraph that a blank line or heading
    has closed, or directly by a heading when the article has no lead.

    Examples
    --------
    >>> opening_is_settled("# Hogwarts\\n\\nA school.")
    False
    >>> opening_is_settled("# Hogwarts\\n\\nA school.\\n\\n")
    True
    """
    complete_lines = LINE_SPLIT_PATTERN.split(text)[:-1]
    opening = _scan_opening(complete_lines)
    if opening is None:
        return False
    _, _, end = opening
    return end < len(complete_lines)


def _scan_opening(lines: list[str]) -> tuple[str | None, list[str], int] | None:
    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1
    if index >= len(lines) or not TITLE_PATTERN.match(lines[index]):
        return None

    title = TITLE_PATTERN.sub("", lines[index]).strip() or None
    index += 1
    while index < len(lines) and not lines[index].strip():
        index += 1

    paragraph: list[str] = []
    while (
        index < len(lines)
        and lines[index].strip()
        and not ANY_HEADING_PATTERN.match(lines[index])
    ):
        paragraph.append(lines[index])
        index += 1
    return title, paragraph, index


def lead_excerpt(lead: str | None, limit: int = LEAD_EXCERPT_LIMIT) -> str | None:
    """Return ``lead`` cut to ``limit`` characters, or None when empty."""
    if not lead:
        return None
    return lead[:limit]


def extract_headings(text: str) -> list[Heading]:
    """Return every level one to three heading in document order.

    Duplicate headings are kept as separate entries and share a slug id.
    """
    headings: list[Heading] = []
    for line in LINE_SPLIT_PATTERN.split(text):
        match = HEADING_PATTERN.match(line)
        if not match:
            continue
        heading_text = match.group(2).strip()
        if not heading_text:
            continue
        headings.append(
            Heading(
                level=len(match.group(1)),
                text=heading_text,
                slug_id=slug_id(heading_text),
            )
        )
    return headings


def extract_links(text: str) -> list[MarkdownLink]:
    """Return inline ``[label](href)`` links, skipping images."""
    links: list[MarkdownLink] = []
    for match in LINK_PATTERN.finditer(text):
        href = match.group(2).strip().strip("<>").strip()
        if not href:
            continue
        links.append(
            MarkdownLink(
                label=match.group(1).strip(),
                href=href,
                internal=is_internal_href(href),
            )
        )
    return links


__all__ = [
    "Heading",
    "MarkdownLink",
    "TitleAndLead",
    "extract_headings",
    "extract_links",
    "extract_title_and_lead",
    "lead_excerpt",
    "opening_is_settled",
    "slug_id",
]
