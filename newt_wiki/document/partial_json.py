r"""Decode the longest meaningful value from a truncated JSON document.

Structured generation streams a single JSON object a few characters at a
time. :func:`parse_partial_json` turns any prefix of that text into the Python
value it implies so far:

* unterminated strings keep the characters received so far,
* objects and arrays are closed implicitly,
* dangling keys, half-written literals (``tru``) and a lone ``-`` are dropped,
* a discriminant such as ``type`` is only reported once its string is closed,
  so ``"he`` never reads as an unknown section type.

Example
-------
>>> from newt_wiki.document.partial_json import parse_partial_json
>>> parse_partial_json('{"title": "Spo')
{'title': 'Spo'}
>>> parse_partial_json('{"title": "Spotify", "sections": [{"ty')
{'title': 'Spotify', 'sections': [{}]}
"""

from __future__ import annotations

import collections.abc as cabc
import json
import re
import typing as typ

import msgspec

NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
NUMBER_TOKEN_PATTERN = re.compile(r"[-+0-9.eE]+")
TRAILING_UNICODE_ESCAPE = re.compile(r"\\u[0-9a-fA-F]{0,3}$")
WHITESPACE = " \t\r\n"
LITERALS: dict[str, object] = {"true": True, "false": False, "null": None}
DISCRIMINANT_KEYS: frozenset[str] = frozenset({"type"})

_MISSING = object()


class PartialJSONError(ValueError):
    """Raised when text cannot be the prefix of any JSON document."""


def parse_partial_json(
    text: str, *, whole_string_keys: cabc.Set[str] = DISCRIMINANT_KEYS
) -> typ.Any | None:
    """Return the value implied by ``text`` or ``None`` when nothing is known yet.

    Parameters
    ----------
    text : str
        A prefix of a JSON document, optionally wrapped in a Markdown code
        fence.
    whole_string_keys : Set[str], optional
        Object keys whose string values are withheld until the closing quote
        arrives.

    Returns
    -------
    Any | None
        The decoded value. Containers are returned even when still open.

    Raises
    ------
    PartialJSONError
        If ``text`` contains characters that no JSON document could start
        with.
    """
    body = _strip_code_fence(text)
    if not body.strip():
        return None
    try:
        return msgspec.json.decode(body)
    except msgspec.DecodeError:
        pass
    value, _complete = _PartialParser(body, whole_string_keys).parse()
    return None if value is _MISSING else value


def _strip_code_fence(text: str) -> str:
    """Drop a leading fence line and a closing fence when present."""
    stripped = text.lstrip()
    if not stripped.startswith("```"):
        return text
    newline = stripped.find("\n")
    if newline == -1:
        return ""
    body = stripped[newline + 1 :]
    closing = body.rfind("```")
    if closing != -1:
        body = body[:closing]
    return body


class _PartialParser:
    """Recursive-descent reader that tolerates an abrupt end of input."""

    def __init__(self, text: str, whole_string_keys: cabc.Set[str]) -> None:
        self.text = text
        self.whole_string_keys = whole_string_keys
        self.pos = 0
        self.length = len(text)

    def parse(self) -> tuple[object, bool]:
        return self._value()

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def _at_end(self) -> bool:
        return self.pos >= self.length

    def _value(self) -> tuple[object, bool]:
        self._skip_whitespace()
        if self._at_end():
            return _MISSING, False
        char = self.text[self.pos]
        if char == "{":
            return self._object()
        if char == "[":
            return self._array()
        if char == '"':
            return self._string()
        if char == "-" or char.isdigit():
            return self._number()
        return self._literal()

    def _object(self) -> tuple[object, bool]:
        self.pos += 1
        result: dict[str, object] = {}
        while True:
            self._skip_whitespace()
            if self._at_end():
                return result, False
            char = self.text[self.pos]
            if char == "}":
                self.pos += 1
                return result, True
            if char == ",":
                self.pos += 1
                continue
            if char != '"':
                msg = f"Expected an object key at offset {self.pos}"
                raise PartialJSONError(msg)
            key, complete = self._string()
            if not complete:
                return result, False
            self._skip_whitespace()
            if self._at_end():
                return result, False
            if self.text[self.pos] != ":":
                msg = f"Expected ':' after key {key!r} at offset {self.pos}"
                raise PartialJSONError(msg)
            self.pos += 1
            value, complete = self._value()
            if (
                not complete
                and isinstance(value, str)
                and key in self.whole_string_keys
            ):
                value = _MISSING
            if value is not _MISSING:
                result[typ.cast("str", key)] = value
            if not complete:
                return result, False

    def _array(self) -> tuple[object, bool]:
        self.pos += 1
        result: list[object] = []
        while True:
            self._skip_whitespace()
            if self._at_end():
                return result, False
            char = self.text[self.pos]
            if char == "]":
                self.pos += 1
                return result, True
            if char == ",":
                self.pos += 1
                continue
            value, complete = self._value()
            if value is not _MISSING:
                result.append(value)
            if not complete:
                return result, False

    def _string(self) -> tuple[object, bool]:
        start = self.pos
        index = start + 1
        escaped = False
        while index < self.length:
            char = self.text[index]
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                self.pos = index + 1
                return self._decode_string(self.text[start + 1 : index]), True
            index += 1

        self.pos = self.length
        raw = self.text[start + 1 :]
        if escaped:
            raw = raw[:-1]
        raw = TRAILING_UNICODE_ESCAPE.sub("", raw)
        return self._decode_string(raw), False

    @staticmethod
    def _decode_string(raw: str) -> str:
        try:
            return json.loads(f'"{raw}"', strict=False)
        except json.JSONDecodeError as exc:
            msg = f"Invalid string literal: {raw[:40]!r}"
            raise PartialJSONError(msg) from exc

    def _number(self) -> tuple[object, bool]:
        match = NUMBER_TOKEN_PATTERN.match(self.text, self.pos)
        token = match.group(0) if match else ""
        self.pos += len(token)
        complete = not self._at_end()
        valid = NUMBER_PATTERN.match(token)
        if valid is None or (complete and valid.end() != len(token)):
            if complete:
                msg = f"Invalid number {token!r}"
                raise PartialJSONError(msg)
            return _MISSING, False
        number = valid.group(0)
        if any(marker in number for marker in ".eE"):
            return float(number), complete
        return int(number), complete

    def _literal(self) -> tuple[object, bool]:
        rest = self.text[self.pos :]
        for word, value in LITERALS.items():
            if rest.startswith(word):
                self.pos += len(word)
                return value, True
            if word.startswith(rest):
                self.pos = self.length
                return _MISSING, False
        msg = f"Unexpected character {rest[0]!r} at offset {self.pos}"
        raise PartialJSONError(msg)


__all__ = ["DISCRIMINANT_KEYS", "PartialJSONError", "parse_partial_json"]
