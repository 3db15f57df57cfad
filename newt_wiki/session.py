"""Generation sessions and the events that feed them.

A session is one request for one topic plus everything derived from its
response. Backends deliver responses as an iterator of stream events; the
session applies each event in arrival order and exposes the resulting
document state. Applying events is the only way state changes, so a cancelled
or finished session simply ignores whatever still arrives.

Example
-------
>>> from newt_wiki.session import GenerationSession, StreamChunk, StreamComplete
>>> session = GenerationSession("Hogwarts", mode="article")
>>> session.apply(StreamChunk("# Hogwarts\\n\\nA school."))
True
>>> session.apply(StreamComplete())
True
>>> session.title_and_lead().title
'Hogwarts'
"""

from __future__ import annotations

import codecs
import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import itertools
import logging
import typing as typ

from .document import (
    PartialSiteDocument,
    SiteDocument,
    SiteDocumentAssembler,
)
from .errors import GenerationError
from .markdown_parser import TitleAndLead, extract_title_and_lead, opening_is_settled

logger = logging.getLogger(__name__)

SessionMode = typ.Literal["article", "site"]
SessionStatus = typ.Literal["streaming", "complete", "error", "cancelled"]

_session_ids = itertools.count(1)


@dc.dataclass(frozen=True, slots=True)
class StreamChunk:
    """Next fragment of a text or raw structured response."""

    text: str | bytes


@dc.dataclass(frozen=True, slots=True)
class StreamSnapshot:
    """A partial document delivered already decoded."""

    document: cabc.Mapping[str, typ.Any]


@dc.dataclass(frozen=True, slots=True)
class StreamComplete:
    """Terminal signal: the response finished normally."""


@dc.dataclass(frozen=True, slots=True)
class StreamFailed:
    """Terminal signal: the backend failed; no partial fallback."""

    message: str


StreamEvent: typ.TypeAlias = StreamChunk | StreamSnapshot | StreamComplete | StreamFailed


@dc.dataclass(slots=True, eq=False)
class GenerationSession:
    """One generation request and the document built from its stream.

    Attributes
    ----------
    topic : str
        Requested topic, trimmed with its casing preserved.
    mode : SessionMode
        ``"article"`` for Markdown streams, ``"site"`` for structured ones.
    started_at : datetime
        UTC time the session was created.
    cancelled : bool
        Set when the user stops or clears the session; later events are ignored.
    status : SessionStatus
        ``streaming`` until a terminal event or cancellation arrives.
    error : str | None
        Human readable failure message when ``status`` is ``"error"``.
    text : str
        Markdown received so far (article mode).
    document : SiteDocument | None
        Validated document once a structured stream completes.
    """

    topic: str
    mode: SessionMode = "article"
    started_at: dt.datetime = dc.field(default_factory=lambda: dt.datetime.now(dt.UTC))
    cancelled: bool = False
    id: int = dc.field(default_factory=lambda: next(_session_ids))
    status: SessionStatus = "streaming"
    error: str | None = None
    text: str = ""
    document: SiteDocument | None = None
    _assembler: SiteDocumentAssembler = dc.field(
        default_factory=SiteDocumentAssembler, repr=False
    )
    _decoder: codecs.IncrementalDecoder = dc.field(
        default_factory=lambda: codecs.getincrementaldecoder("utf-8")(errors="replace"),
        repr=False,
    )

    @property
    def is_active(self) -> bool:
        """Return True while events are still being applied."""
        return self.status == "streaming" and not self.cancelled

    @property
    def snapshot(self) -> PartialSiteDocument:
        """Return the latest structured snapshot (``{}`` in article mode)."""
        return self._assembler.snapshot

    def apply(self, event: StreamEvent) -> bool:
        """Apply ``event`` and return True when visible state changed.

        Upstream and schema failures become ``status == "error"``; they are
        never raised to the caller.
        """
        if not self.is_active:
            return False
        match event:
            case StreamChunk(text=chunk):
                return self._apply_chunk(chunk)
            case StreamSnapshot(document=document):
                if self.mode != "site":
                    return False
                return self._assembler.apply_snapshot(document) is not None
            case StreamComplete():
                return self._complete()
            case StreamFailed(message=message):
                self._fail(message)
                return True
        return False

    def cancel(self) -> None:
        """Stop applying events; content received so far stays visible."""
        if self.is_active:
            self.status = "cancelled"
        self.cancelled = True

    def clear(self) -> None:
        """Cancel the session and drop its content."""
        self.cancel()
        self.text = ""
        self.document = None
        self._assembler = SiteDocumentAssembler()

    def title_and_lead(self) -> TitleAndLead:
        """Return the canonical title and lead of the content received so far.

        Article sessions read the Markdown directly. Site sessions read the
        first ``wiki`` section: its article's title, else its ``subject``
        once a later field shows the subject string has ended.
        While streaming, nothing is reported until the lead paragraph has
        ended, so a half-received title or lead never names the article.
        """
        if self.mode == "article":
            return self._settled_title(self.text)
        wiki = _first_wiki_section(self.snapshot)
        if wiki is None:
            return TitleAndLead()
        article = wiki.get("article")
        extracted = (
            self._settled_title(article) if isinstance(article, str) else TitleAndLead()
        )
        subject = wiki.get("subject")
        if self.status == "streaming" and list(wiki)[-1] == "subject":
            subject = None
        if extracted.title is None and isinstance(subject, str):
            title = subject.strip()
        else:
            title = extracted.title
        return TitleAndLead(title=title or None, lead=extracted.lead)

    def _settled_title(self, text: str) -> TitleAndLead:
        if self.status == "streaming" and not opening_is_settled(text):
            return TitleAndLead()
        return extract_title_and_lead(text)

    def _apply_chunk(self, chunk: str | bytes) -> bool:
        if self.mode == "site":
            try:
                return self._assembler.feed(chunk) is not None
            except GenerationError as exc:
                self._fail(str(exc))
                return True
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        if not chunk:
            return False
        self.text += chunk
        return True

    def _complete(self) -> bool:
        if self.mode == "site":
            try:
                self.document = self._assembler.finish()
            except GenerationError as exc:
                self._fail(str(exc))
                return True
        else:
            self.text += self._decoder.decode(b"", final=True)
            if not self.text.strip():
                self._fail("Generation returned an empty article.")
                return True
        self.status = "complete"
        logger.debug("Session %d for %r completed", self.id, self.topic)
        return True

    def _fail(self, message: str) -> None:
        self.status = "error"
        self.error = message or "Generation failed"
        logger.warning("Session %d for %r failed: %s", self.id, self.topic, self.error)


def _first_wiki_section(
    snapshot: cabc.Mapping[str, typ.Any],
) -> cabc.Mapping[str, typ.Any] | None:
    sections = snapshot.get("sections")
    if not isinstance(sections, list):
        return None
    for section in sections:
        if isinstance(section, cabc.Mapping) and section.get("type") == "wiki":
            return section
    return None


__all__ = [
    "GenerationSession",
    "SessionMode",
    "SessionStatus",
    "StreamChunk",
    "StreamComplete",
    "StreamEvent",
    "StreamFailed",
    "StreamSnapshot",
]
