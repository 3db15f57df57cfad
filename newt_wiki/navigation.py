"""Navigation state: the current topic, recent topics, and link interception.

Visiting a page never loads anything: it records the topic, pushes it onto the
recently visited list, and starts a brand-new :class:`GenerationSession`.
Older sessions are not stopped; they become stale, and whoever applies their
results must ask :meth:`NavigationController.is_stale` first.

Example
-------
>>> from newt_wiki.navigation import NavigationController, RecentTopics
>>> from newt_wiki.storage import MemoryStore
>>> nav = NavigationController(recent=RecentTopics(MemoryStore()))
>>> session = nav.visit("hogwarts")
>>> _ = nav.visit("Hogwarts")
>>> nav.recent.items
['hogwarts']
"""

from __future__ import annotations

import collections.abc as cabc
import json
import logging
import random
import typing as typ

from ._constants import (
    HISTORY_LIMIT,
    HISTORY_STORAGE_KEY,
    HOST_HISTORY_LIMIT,
    SUGGESTED_TOPICS,
    SUGGESTION_LIMIT,
)
from .links import is_internal_href
from .session import GenerationSession, SessionMode
from .topics import normalize_topic, same_topic, topic_key

if typ.TYPE_CHECKING:
    from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class RecentTopics:
    """Bounded, most-recent-first list of visited topics.

    Duplicates are detected ignoring case; the casing seen first is kept and
    the entry moves to the front. The list is persisted as a JSON array in
    ``store`` under ``key``. Missing or corrupt data reads as an empty list.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = HISTORY_STORAGE_KEY,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        self._store = store
        self.key = key
        self.limit = limit
        self._items = self._load()

    @property
    def items(self) -> list[str]:
        """Return a copy of the recent topics, newest first."""
        return list(self._items)

    def push(self, topic: str) -> list[str]:
        """Move ``topic`` to the front, keeping the first-seen casing."""
        existing = next(
            (item for item in self._items if same_topic(item, topic)), topic
        )
        key = topic_key(topic)
        rest = [item for item in self._items if topic_key(item) != key]
        self._items = [existing, *rest][: self.limit]
        self._save()
        return self.items

    def clear(self) -> None:
        """Forget every recent topic."""
        self._items = []
        try:
            self._store.remove(self.key)
        except OSError as exc:
            logger.warning("Could not clear topic history: %s", exc)

    def _load(self) -> list[str]:
        try:
            raw = self._store.get(self.key)
        except OSError as exc:
            logger.warning("Could not read topic history: %s", exc)
            return []
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt topic history under %r", self.key)
            return []
        if not isinstance(payload, list):
            return []
        items: list[str] = []
        for entry in payload:
            topic = normalize_topic(entry) if isinstance(entry, str) else None
            if topic and not any(same_topic(topic, item) for item in items):
                items.append(topic)
        return items[: self.limit]

    def _save(self) -> None:
        try:
            self._store.set(self.key, json.dumps(self._items))
        except OSError as exc:
            logger.warning("Could not persist topic history: %s", exc)


class HostHistory:
    """Back/forward stack of the hosting environment.

    Moving through it never records a new visit; the controller regenerates
    the topic found at the new position instead. Only the newest ``limit``
    entries are kept.
    """

    def __init__(self, limit: int = HOST_HISTORY_LIMIT) -> None:
        self.limit = limit
        self.entries: list[str] = []
        self.index = -1

    def push(self, topic: str) -> None:
        del self.entries[self.index + 1 :]
        self.entries.append(topic)
        del self.entries[: -self.limit]
        self.index = len(self.entries) - 1

    def back(self) -> str | None:
        if self.index <= 0:
            return None
        self.index -= 1
        return self.entries[self.index]

    def forward(self) -> str | None:
        if self.index >= len(self.entries) - 1:
            return None
        self.index += 1
        return self.entries[self.index]


class NavigationController:
    """Own the current topic and turn navigation into generation sessions.

    Parameters
    ----------
    recent : RecentTopics
        Persisted list of recently visited topics.
    host : HostHistory, optional
        Native back/forward stack; a fresh one is created when omitted.
    mode : SessionMode, optional
        Kind of session to start, ``"article"`` or ``"site"``.
    on_session : callable, optional
        Called with every new session so the caller can begin streaming.
    """

    def __init__(
        self,
        *,
        recent: RecentTopics,
        host: HostHistory | None = None,
        mode: SessionMode = "article",
        on_session: cabc.Callable[[GenerationSession], None] | None = None,
    ) -> None:
        self.recent = recent
        self.host = host or HostHistory()
        self.mode: SessionMode = mode
        self.on_session = on_session
        self.current_topic: str | None = None
        self.active_session: GenerationSession | None = None

    def visit(self, topic: str | None) -> GenerationSession | None:
        """Navigate to ``topic``; blank input is ignored and returns None."""
        normalized = normalize_topic(topic)
        if normalized is None:
            return None
        self.recent.push(normalized)
        self.host.push(normalized)
        return self._start(normalized)

    def follow_link(self, href: str | None) -> GenerationSession | None:
        """Intercept internal links; external and in-page links return None."""
        if not is_internal_href(href):
            return None
        return self.visit(href)

    def submit_form(self, action_target: str | None) -> GenerationSession | None:
        """Navigate to a form's action target, else regenerate the current topic."""
        return self.visit(action_target or self.current_topic)

    def regenerate(self) -> GenerationSession | None:
        """Start a new session for the current topic without touching history."""
        if self.current_topic is None:
            return None
        return self._start(self.current_topic)

    def back(self) -> GenerationSession | None:
        topic = self.host.back()
        return None if topic is None else self._start(topic)

    def forward(self) -> GenerationSession | None:
        topic = self.host.forward()
        return None if topic is None else self._start(topic)

    def cancel(self) -> None:
        """Stop applying further events to the active session."""
        if self.active_session is not None:
            self.active_session.cancel()

    def clear(self) -> None:
        """Discard the current content; history is untouched."""
        if self.active_session is not None:
            self.active_session.clear()

    def is_stale(self, session: GenerationSession) -> bool:
        """Return True when ``session`` results must no longer be applied."""
        return (
            session is not self.active_session
            or session.cancelled
            or not same_topic(session.topic, self.current_topic)
        )

    def _start(self, topic: str) -> GenerationSession:
        self.current_topic = topic
        session = GenerationSession(topic, mode=self.mode)
        self.active_session = session
        logger.info("Starting %s session %d for %r", self.mode, session.id, topic)
        if self.on_session is not None:
            self.on_session(session)
        return session


def suggest_topics(
    prefix: str,
    topics: cabc.Sequence[str] = SUGGESTED_TOPICS,
    *,
    limit: int = SUGGESTION_LIMIT,
) -> list[str]:
    """Return up to ``limit`` topics containing ``prefix`` ignoring case."""
    needle = prefix.strip().casefold()
    if not needle:
        return []
    return [topic for topic in topics if needle in topic.casefold()][:limit]


def random_topic(
    topics: cabc.Sequence[str] = SUGGESTED_TOPICS,
    *,
    rng: random.Random | None = None,
) -> str:
    """Pick one suggested topic at random."""
    return (rng or random).choice(list(topics))


__all__ = [
    "HostHistory",
    "NavigationController",
    "RecentTopics",
    "random_topic",
    "suggest_topics",
]
