"""Shared fixtures: scripted backends, a manual executor, and stores."""

from __future__ import annotations

import collections.abc as cabc
import concurrent.futures as cf
import typing as typ

import pytest

from newt_wiki.errors import ImageGenerationError
from newt_wiki.navigation import RecentTopics
from newt_wiki.session import StreamChunk, StreamComplete, StreamEvent
from newt_wiki.storage import MemoryStore

HOGWARTS_ARTICLE = (
    "# Hogwarts\n\nHogwarts is a school.\n\n## History\n\n"
    "Founded by four wizards. See [Wands](Wand) and "
    "[the author](https://example.com/rowling).\n\n### Houses\n\nFour of them.\n"
)


class ManualExecutor(cf.Executor):
    """Executor that queues work until a test settles it explicitly."""

    def __init__(self) -> None:
        self.calls: list[
            tuple[cf.Future[typ.Any], cabc.Callable[..., typ.Any], tuple, dict]
        ] = []

    def submit(  # type: ignore[override]
        self, fn: cabc.Callable[..., typ.Any], /, *args: typ.Any, **kwargs: typ.Any
    ) -> cf.Future[typ.Any]:
        future: cf.Future[typ.Any] = cf.Future()
        self.calls.append((future, fn, args, kwargs))
        return future

    @property
    def pending(self) -> list[cf.Future[typ.Any]]:
        return [future for future, *_ in self.calls if not future.done()]

    def run(self, index: int) -> None:
        """Execute the queued call at ``index`` and settle its future."""
        future, fn, args, kwargs = self.calls[index]
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001 - forwarded to the future
            future.set_exception(exc)
        else:
            future.set_result(result)

    def resolve(self, index: int, result: typ.Any) -> None:
        self.calls[index][0].set_result(result)

    def run_all(self) -> None:
        index = 0
        while index < len(self.calls):
            if not self.calls[index][0].done():
                self.run(index)
            index += 1


class FakeImages:
    """Image backend returning canned data URIs or raising."""

    def __init__(
        self,
        images: list[str] | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.images = ["data:image/png;base64,AAAA"] if images is None else images
        self.error = error
        self.prompts: list[str] = []
        self.counts: list[int] = []

    def generate_images(self, prompt: str, *, count: int = 1) -> list[str]:
        self.prompts.append(prompt)
        self.counts.append(count)
        if self.error is not None:
            raise self.error
        return list(self.images)


class FakeBackend(FakeImages):
    """Scripted generation backend keyed by topic."""

    def __init__(
        self,
        articles: cabc.Mapping[str, list[StreamEvent]] | None = None,
        sites: cabc.Mapping[str, list[StreamEvent]] | None = None,
        **kwargs: typ.Any,
    ) -> None:
        super().__init__(**kwargs)
        self.articles = dict(articles or {})
        self.sites = dict(sites or {})
        self.requested: list[tuple[str, str]] = []

    def stream_article(self, topic: str) -> cabc.Iterator[StreamEvent]:
        self.requested.append(("article", topic))
        yield from self.articles.get(topic, [StreamComplete()])

    def stream_site(self, query: str) -> cabc.Iterator[StreamEvent]:
        self.requested.append(("site", query))
        yield from self.sites.get(query, [StreamComplete()])


def chunked(text: str, size: int) -> list[StreamEvent]:
    """Split ``text`` into chunk events followed by completion."""
    events: list[StreamEvent] = [
        StreamChunk(text[start : start + size]) for start in range(0, len(text), size)
    ]
    events.append(StreamComplete())
    return events


@pytest.fixture
def executor() -> ManualExecutor:
    return ManualExecutor()


@pytest.fixture
def images() -> FakeImages:
    return FakeImages()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def recent(store: MemoryStore) -> RecentTopics:
    return RecentTopics(store)


@pytest.fixture
def failing_images() -> FakeImages:
    return FakeImages(error=ImageGenerationError("Request failed (500)"))
