"""Topic normalisation and case-insensitive identity.

Topics keep the casing the user typed, but two topics that differ only in case
name the same subject. Every identity comparison (history, stale results,
cover de-duplication) goes through :func:`same_topic`.

Example
-------
>>> from newt_wiki.topics import normalize_topic, same_topic
>>> normalize_topic("  Game Theory ")
'Game Theory'
>>> same_topic("hogwarts", "Hogwarts")
True
"""

from __future__ import annotations

from .errors import EmptyTopicError


def normalize_topic(raw: str | None) -> str | None:
    """Return ``raw`` trimmed, or None when nothing is left."""
    if raw is None:
        return None
    topic = raw.strip()
    return topic or None


def require_topic(raw: str | None) -> str:
    """Return the trimmed topic or raise :class:`EmptyTopicError`."""
    topic = normalize_topic(raw)
    if topic is None:
        msg = "Topic must not be empty."
        raise EmptyTopicError(msg)
    return topic


def topic_key(topic: str) -> str:
    """Return the comparison key for ``topic``."""
    return topic.strip().casefold()


def same_topic(left: str | None, right: str | None) -> bool:
    """Return True when both topics are present and equal ignoring case."""
    if left is None or right is None:
        return False
    return topic_key(left) == topic_key(right)


__all__ = ["normalize_topic", "require_topic", "same_topic", "topic_key"]
