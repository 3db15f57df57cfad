"""Assemble streamed structured output into ever more complete snapshots.

The structured backend streams one JSON object. :class:`SiteDocumentAssembler`
accumulates the raw text, decodes the prefix received so far, and hands back a
new :data:`~newt_wiki.document.models.PartialSiteDocument` whenever that
decoded value changed. When the stream ends, :meth:`SiteDocumentAssembler.finish`
validates the last snapshot against :class:`~newt_wiki.document.models.SiteDocument`.

Example
-------
>>> from newt_wiki.document import SiteDocumentAssembler
>>> assembler = SiteDocumentAssembler()
>>> assembler.feed('{"title": "Spot')
{'title': 'Spot'}
>>> assembler.feed('ify"')
{'title': 'Spotify'}
"""

from __future__ import annotations

import codecs
import collections.abc as cabc
import logging
import typing as typ

import msgspec

from newt_wiki.errors import GenerationError, SchemaValidationError

from .models import SECTION_TYPES, PartialSiteDocument, SiteDocument
from .partial_json import PartialJSONError, parse_partial_json

logger = logging.getLogger(__name__)


def merge_snapshots(previous: typ.Any, current: typ.Any) -> typ.Any:
    """Deep-merge ``current`` over ``previous`` without losing populated fields.

    Mappings merge key by key and lists merge element by element. A ``None``
    in ``current`` keeps the previous value. A section whose ``type`` changed
    is replaced wholesale so fields of the old variant do not leak into the
    new one.
    """
    match previous, current:
        case cabc.Mapping(), cabc.Mapping():
            if (
                "type" in previous
                and "type" in current
                and previous["type"] != current["type"]
            ):
                return dict(current)
            merged = dict(previous)
            for key, value in current.items():
                if key in previous:
                    merged[key] = merge_snapshots(previous[key], value)
                else:
                    merged[key] = value
            return merged
        case list(), list():
            merged_items = [
                merge_snapshots(old, new)
                for old, new in zip(previous, current, strict=False)
            ]
            if len(current) >= len(previous):
                merged_items.extend(current[len(previous) :])
            else:
                merged_items.extend(previous[len(current) :])
            return merged_items
        case _, None:
            return previous
        case _:
            return current


def validate_site_document(snapshot: cabc.Mapping[str, typ.Any]) -> SiteDocument:
    """Return the completed document or raise when it breaks the schema.

    Sections whose ``type`` is missing or unknown are dropped first; the rest
    must satisfy every required field.

    Raises
    ------
    SchemaValidationError
        If the title is missing, no valid section remains, or any section
        lacks a required field.
    """
    if not isinstance(snapshot, cabc.Mapping):
        msg = "Generated site document is not an object."
        raise SchemaValidationError(msg)
    payload = dict(snapshot)
    sections = payload.get("sections")
    if isinstance(sections, list):
        kept = [
            section
            for section in sections
            if isinstance(section, cabc.Mapping)
            and isinstance(section.get("type"), str)
            and section["type"] in SECTION_TYPES
        ]
        if len(kept) != len(sections):
            logger.info(
                "Dropped %d section(s) with unknown type", len(sections) - len(kept)
            )
        payload["sections"] = kept
    try:
        return msgspec.convert(payload, type=SiteDocument)
    except msgspec.ValidationError as exc:
        msg = f"Generated site document is invalid: {exc}"
        raise SchemaValidationError(msg) from exc


class SiteDocumentAssembler:
    """Turn a raw structured stream into a sequence of partial snapshots."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._text = ""
        self._snapshot: PartialSiteDocument = {}

    @property
    def text(self) -> str:
        """Return the raw text received so far."""
        return self._text

    @property
    def snapshot(self) -> PartialSiteDocument:
        """Return the latest partial document; ``{}`` before any field arrives."""
        return self._snapshot

    def feed(self, chunk: str | bytes) -> PartialSiteDocument | None:
        """Append ``chunk`` and return the new snapshot when it changed.

        Parameters
        ----------
        chunk : str | bytes
            Next fragment of the response body. Bytes are decoded as UTF-8
            even when a multi-byte character spans two chunks.

        Returns
        -------
        PartialSiteDocument | None
            The updated snapshot, or ``None`` when the chunk added nothing
            decodable.

        Raises
        ------
        GenerationError
            If the accumulated text cannot be the prefix of a JSON object.
        """
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._text += chunk
        try:
            value = parse_partial_json(self._text)
        except PartialJSONError as exc:
            msg = f"Malformed structured response: {exc}"
            raise GenerationError(msg) from exc
        if value is None:
            return None
        if not isinstance(value, dict):
            msg = "Structured response must be a JSON object."
            raise GenerationError(msg)
        return self.apply_snapshot(value)

    def apply_snapshot(
        self, snapshot: cabc.Mapping[str, typ.Any]
    ) -> PartialSiteDocument | None:
        """Merge a snapshot delivered directly by the backend."""
        merged = merge_snapshots(self._snapshot, snapshot)
        if merged == self._snapshot:
            return None
        self._snapshot = merged
        return merged

    def finish(self) -> SiteDocument:
        """Flush pending bytes and validate the final snapshot."""
        tail = self._decoder.decode(b"", final=True)
        if tail:
            self.feed(tail)
        return validate_site_document(self._snapshot)


__all__ = ["SiteDocumentAssembler", "merge_snapshots", "validate_site_document"]
