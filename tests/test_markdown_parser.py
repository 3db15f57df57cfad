"""Unit tests for the streamed Markdown extractor."""

from __future__ import annotations

import pytest

from newt_wiki.markdown_parser import (
    Heading,
    TitleAndLead,
    extract_headings,
    extract_links,
    extract_title_and_lead,
    lead_excerpt,
    opening_is_settled,
    slug_id,
)

ARTICLE = "# Hogwarts\n\nHogwarts is a school.\n\n## History\n..."


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Black Holes!!", "black-holes"),
        ("  Game   Theory ", "game-theory"),
        ("Émile & Co.", "mile-co"),
        ("already-slugged", "already-slugged"),
        ("", ""),
    ],
)
def test_slug_id(text: str, expected: str) -> None:
    assert slug_id(text) == expected, f"expected {expected!r} for {text!r}"


def test_title_and_lead_from_opening_heading() -> None:
    result = extract_title_and_lead(ARTICLE)

    assert result == TitleAndLead(title="Hogwarts", lead="Hogwarts is a school."), (
        f"unexpected extraction {result!r}"
    )


def test_title_skips_leading_blank_lines_and_trims() -> None:
    result = extract_title_and_lead("\n\n  \n#   Black Holes   \nGravity wins.\n")

    assert result.title == "Black Holes", "expected trimmed title after blank lines"
    assert result.lead == "Gravity wins.", "expected the line after the title as lead"


@pytest.mark.parametrize(
    "text",
    [
        "Intro paragraph\n# Hogwarts\n\nLead.",
        "## Hogwarts\n\nLead.",
        "#Hogwarts\n\nLead.",
        "",
        "   \n\n",
    ],
)
def test_no_title_unless_document_opens_with_level_one_heading(text: str) -> None:
    assert extract_title_and_lead(text) == TitleAndLead(), (
        f"expected no title or lead for {text!r}"
    )


def test_lead_joins_lines_and_stops_at_heading() -> None:
    text = "# Title\n\nfirst line\nsecond line\n### Sub\nnot lead"

    assert extract_title_and_lead(text).lead == "first line second line", (
        "expected lead lines joined by spaces up to the next heading"
    )


def test_lead_absent_while_only_title_streamed() -> None:
    partial = extract_title_and_lead("# Hogwa")

    assert partial.title == "Hogwa", "expected partial title to be usable mid-stream"
    assert partial.lead is None, "expected no lead before any paragraph arrives"


@pytest.mark.parametrize(
    ("text", "settled"),
    [
        ("# Hogwarts", False),
        ("# Hogwarts\n\n", False),
        ("# Hogwarts\n\nHogwarts is a school.", False),
        ("# Hogwarts\n\nHogwarts is a school.\n", False),
        ("# Hogwarts\n\nHogwarts is a school.\n\n", True),
        ("# Hogwarts\n\nHogwarts is a school.\n## History", False),
        ("# Hogwarts\n\nHogwarts is a school.\n## History\n", True),
        ("# Hogwarts\n## History\n", True),
        ("Plain prose\n\n", False),
    ],
)
def test_opening_is_settled(text: str, *, settled: bool) -> None:
    assert opening_is_settled(text) is settled, f"unexpected result for {text!r}"


def test_lead_excerpt_caps_length() -> None:
    lead = "x" * 400

    assert lead_excerpt(lead) == "x" * 260, "expected default cap of 260 characters"
    assert lead_excerpt(lead, 10) == "x" * 10, "expected explicit cap to apply"
    assert lead_excerpt(None) is None, "expected None for a missing lead"


def test_extract_headings_levels_one_to_three() -> None:
    text = "# Hogwarts\n\n## History\n\n### Founders\n\n#### Too deep\n\n## History\n"

    headings = extract_headings(text)

    assert headings == [
        Heading(1, "Hogwarts", "hogwarts"),
        Heading(2, "History", "history"),
        Heading(3, "Founders", "founders"),
        Heading(2, "History", "history"),
    ], f"unexpected headings {headings!r}"


def test_extract_headings_spec_example() -> None:
    headings = [(h.level, h.text, h.slug_id) for h in extract_headings(ARTICLE)]

    assert headings == [(1, "Hogwarts", "hogwarts"), (2, "History", "history")], (
        "expected the title and the History section"
    )


@pytest.mark.parametrize("split", range(len(ARTICLE) + 1))
def test_extract_headings_is_stable_under_concatenation(split: int) -> None:
    """Re-extracting after each chunk must equal extracting the whole text."""
    head, tail = ARTICLE[:split], ARTICLE[split:]
    extract_headings(head)

    assert extract_headings(head + tail) == extract_headings(ARTICLE), (
        f"headings differ when split at {split}"
    )


def test_extract_links_flags_internal_targets() -> None:
    text = (
        "See [Wands](Wand), [Rowling](https://example.com), "
        "[Top](#history), and ![img](pic.png) plus [Black Holes](<Black Holes>)."
    )

    links = [(link.label, link.href, link.internal) for link in extract_links(text)]

    assert links == [
        ("Wands", "Wand", True),
        ("Rowling", "https://example.com", False),
        ("Top", "#history", False),
        ("Black Holes", "Black Holes", True),
    ], f"unexpected links {links!r}"
