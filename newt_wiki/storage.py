"""Key-value storage used for the recently visited topics list.

The browser original kept its history in ``localStorage``. Here the same
capability is an injected object with ``get``/``set``/``remove`` so tests can
use :class:`MemoryStore` and the CLI can persist to a JSON file. Values are
strings, exactly like ``localStorage``; callers serialise their own payloads.
"""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

logger = logging.getLogger(__name__)


class KeyValueStore(typ.Protocol):
    """Minimal string store keyed by namespace strings."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, discarded with the object."""

    def __init__(self, initial: typ.Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStore:
    """Store every key in one JSON object on disk.

    A missing, unreadable, or corrupt file reads as empty; it is rewritten on
    the next :meth:`set`.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        payload = self._load()
        payload[key] = value
        self._write(payload)

    def remove(self, key: str) -> None:
        payload = self._load()
        if payload.pop(key, None) is not None:
            self._write(payload)

    def _load(self) -> dict[str, typ.Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Could not read %s: %s", self.path, exc)
            return {}
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt store file %s", self.path)
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write(self, payload: dict[str, typ.Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore"]
