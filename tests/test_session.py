"""Tests for applying stream events to generation sessions."""

from __future__ import annotations

import json

from newt_wiki.document import SiteDocument
from newt_wiki.markdown_parser import TitleAndLead
from newt_wiki.session import (
    GenerationSession,
    StreamChunk,
    StreamComplete,
    StreamFailed,
    StreamSnapshot,
)

SITE = {
    "title": "Spotify",
    "sections": [
        {"type": "hero", "hero": {"headline": "Spotify"}},
        {
            "type": "wiki",
            "name": "NewtWiki",
            "subject": "Spotify",
            "article": "# Spotify (service)\n\nA music streaming service.\n",
        },
    ],
}


def test_article_chunks_accumulate_in_order() -> None:
    session = GenerationSession("Hogwarts")

    for chunk in ("# Hog", "warts\n\n", "Hogwarts is a school."):
        assert session.apply(StreamChunk(chunk)), "expected each chunk to change state"
    assert session.apply(StreamComplete()), "expected completion to change state"

    assert session.status == "complete", f"unexpected status {session.status!r}"
    assert session.text == "# Hogwarts\n\nHogwarts is a school.", "unexpected text"
    lead = session.title_and_lead()
    assert (lead.title, lead.lead) == ("Hogwarts", "Hogwarts is a school."), (
        "expected title and lead from the article"
    )


def test_article_bytes_split_inside_a_character() -> None:
    raw = "# Café\n".encode()
    split = raw.index("é".encode()) + 1
    session = GenerationSession("Café")

    session.apply(StreamChunk(raw[:split]))
    session.apply(StreamChunk(raw[split:]))

    assert session.text == "# Café\n", f"unexpected decoded text {session.text!r}"


def test_empty_article_is_an_error() -> None:
    session = GenerationSession("Nothing")

    session.apply(StreamComplete())

    assert session.status == "error", "expected an empty article to fail"
    assert session.error, "expected a message for the failure"


def test_failure_keeps_partial_content() -> None:
    session = GenerationSession("Hogwarts")
    session.apply(StreamChunk("# Hogwarts\n"))

    session.apply(StreamFailed("Request failed (500)"))

    assert session.status == "error", "expected error status"
    assert session.error == "Request failed (500)", "expected backend message"
    assert session.text == "# Hogwarts\n", "expected partial text to stay visible"
    assert not session.apply(StreamChunk("more")), "expected no events after failure"


def test_cancel_stops_applying_events() -> None:
    session = GenerationSession("Hogwarts")
    session.apply(StreamChunk("# Hog"))

    session.cancel()

    assert not session.apply(StreamChunk("warts")), "expected chunks to be ignored"
    assert session.status == "cancelled", "expected cancelled status"
    assert session.text == "# Hog", "expected content received so far to remain"


def test_clear_drops_content() -> None:
    session = GenerationSession("Spotify", mode="site")
    session.apply(StreamChunk('{"title": "Spotify"'))

    session.clear()

    assert session.snapshot == {}, "expected snapshot to be discarded"
    assert session.cancelled, "expected the session to stop"


def test_site_stream_validates_on_completion() -> None:
    raw = json.dumps(SITE)
    session = GenerationSession("Spotify", mode="site")
    for start in range(0, len(raw), 11):
        session.apply(StreamChunk(raw[start : start + 11].encode()))

    session.apply(StreamComplete())

    assert session.status == "complete", f"unexpected status {session.error!r}"
    assert isinstance(session.document, SiteDocument), "expected validated document"
    assert session.title_and_lead().title == "Spotify (service)", (
        "expected the wiki article title to be canonical"
    )


def test_site_title_falls_back_to_wiki_subject() -> None:
    session = GenerationSession("Spotify", mode="site")
    wiki = {"type": "wiki", "subject": "Spotify", "name": "NewtWiki"}
    session.apply(StreamSnapshot({"title": "Spotify", "sections": [wiki]}))

    assert session.title_and_lead().title == "Spotify", "expected subject fallback"


def test_site_subject_still_streaming_is_withheld() -> None:
    session = GenerationSession("Spotify", mode="site")
    session.apply(StreamChunk('{"sections": [{"type": "wiki", "subject": "Spo'))

    assert session.title_and_lead().title is None, "expected partial subject withheld"


def test_site_without_wiki_has_no_title() -> None:
    session = GenerationSession("Spotify", mode="site")
    session.apply(StreamSnapshot({"title": "Spotify"}))

    assert session.title_and_lead().title is None, (
        "expected no canonical title before a wiki section arrives"
    )


def test_incomplete_site_document_is_a_schema_error() -> None:
    session = GenerationSession("Spotify", mode="site")
    session.apply(StreamChunk('{"title": "Spotify", "sections": [{"type": "hero"'))

    session.apply(StreamComplete())

    assert session.status == "error", "expected validation failure at completion"
    assert session.document is None, "expected no document shown as complete"
    assert session.snapshot["title"] == "Spotify", "expected partial data retained"


def test_malformed_site_stream_is_an_error() -> None:
    session = GenerationSession("Spotify", mode="site")

    session.apply(StreamChunk("<!doctype html>"))

    assert session.status == "error", "expected malformed JSON to fail the session"


def test_opening_is_withheld_until_the_lead_ends() -> None:
    session = GenerationSession("Hogwarts")
    session.apply(StreamChunk("# Hog"))
    assert session.title_and_lead().title is None, "expected half a title withheld"

    session.apply(StreamChunk("warts\n\nHogwarts is a sch"))
    assert session.title_and_lead().title is None, "expected half a lead withheld"

    session.apply(StreamChunk("ool.\n\n## History"))
    expected = TitleAndLead(title="Hogwarts", lead="Hogwarts is a school.")
    assert session.title_and_lead() == expected, (
        "expected the settled opening"
    )


def test_unterminated_title_counts_once_complete() -> None:
    session = GenerationSession("Hogwarts")
    session.apply(StreamChunk("# Hogwarts"))
    session.apply(StreamComplete())

    assert session.title_and_lead().title == "Hogwarts", "expected final title"


def test_structured_section_type_is_a_schema_error() -> None:
    session = GenerationSession("Spotify", mode="site")
    session.apply(StreamChunk('{"title": "Spotify", "sections": [{"type": ["hero"]}]}'))

    assert session.apply(StreamComplete()), "expected completion to change state"

    assert session.status == "error", "expected a malformed type to fail the session"
    assert session.document is None, "expected no document to be published"
