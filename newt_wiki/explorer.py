"""Wire navigation, generation streams, cover images, and rendering together.

:class:`Explorer` is the single object a front end talks to. It owns a
:class:`~newt_wiki.navigation.NavigationController`, resets the cover image
coordinator whenever a new session starts, applies stream events only while
their session is still the live one, and renders the current state on demand.

Example
-------
>>> from newt_wiki.explorer import Explorer
>>> from newt_wiki.navigation import RecentTopics
>>> from newt_wiki.storage import MemoryStore
>>> explorer = Explorer(backend, recent=RecentTopics(MemoryStore()))  # doctest: +SKIP
>>> page = explorer.explore("Hogwarts")  # doctest: +SKIP
>>> page.title  # doctest: +SKIP
'Hogwarts'
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ

import requests

from .clients import HttpGenerationClient
from .cover import CoverImageCoordinator
from .errors import GenerationError
from .navigation import HostHistory, NavigationController, RecentTopics
from .render import RenderDispatcher
from .render.markdown_renderer import MarkdownRenderer
from .session import GenerationSession, SessionMode, StreamEvent, StreamFailed
from .storage import JsonFileStore, KeyValueStore
from .topics import require_topic

if typ.TYPE_CHECKING:
    import concurrent.futures as cf

    from .clients import GenerationBackend
    from .config import ExplorerConfig
    from .render.views import PageView

logger = logging.getLogger(__name__)

UpdateCallback = cabc.Callable[[GenerationSession], None]


class Explorer:
    """Drive generation sessions for one view.

    Parameters
    ----------
    backend : GenerationBackend
        Source of article streams, site streams, and cover images.
    recent : RecentTopics
        Persisted recently visited topics.
    mode : SessionMode, optional
        ``"article"`` streams Markdown; ``"site"`` streams structured pages.
    dispatcher : RenderDispatcher, optional
        Renderer for page views.
    coordinator : CoverImageCoordinator | None, optional
        Cover image coordinator. Pass ``covers=False`` to disable covers.
    covers : bool, optional
        Whether to build a default coordinator when ``coordinator`` is omitted.
    executor : Executor, optional
        Executor for the default coordinator's image requests.
    host : HostHistory, optional
        Back/forward stack of the host.
    """

    def __init__(
        self,
        backend: GenerationBackend,
        *,
        recent: RecentTopics,
        mode: SessionMode = "article",
        dispatcher: RenderDispatcher | None = None,
        coordinator: CoverImageCoordinator | None = None,
        covers: bool = True,
        executor: cf.Executor | None = None,
        host: HostHistory | None = None,
    ) -> None:
        self.backend = backend
        self.dispatcher = dispatcher or RenderDispatcher()
        if coordinator is None and covers:
            coordinator = CoverImageCoordinator(backend, executor=executor)
        self.coordinator = coordinator
        self.navigation = NavigationController(
            recent=recent, host=host, mode=mode, on_session=self._on_session
        )

    @classmethod
    def from_config(
        cls,
        config: ExplorerConfig,
        *,
        mode: SessionMode = "article",
        backend: GenerationBackend | None = None,
        store: KeyValueStore | None = None,
    ) -> Explorer:
        """Build an explorer with the HTTP backend and file-backed history."""
        if backend is None:
            backend = HttpGenerationClient(
                base_url=config.api.base_url,
                timeout=config.api.timeout,
                retries=config.api.retries,
            )
        store = store or JsonFileStore(config.history.path.expanduser())
        recent = RecentTopics(
            store, key=config.history.key, limit=config.history.limit
        )
        coordinator = None
        if config.cover.enabled:
            coordinator = CoverImageCoordinator(
                backend, excerpt_limit=config.cover.excerpt_limit
            )
        dispatcher = RenderDispatcher(MarkdownRenderer(config.pygments_style))
        return cls(
            backend,
            recent=recent,
            mode=mode,
            dispatcher=dispatcher,
            coordinator=coordinator,
            covers=config.cover.enabled,
        )

    @property
    def session(self) -> GenerationSession | None:
        """Return the live session, if any."""
        return self.navigation.active_session

    @property
    def mode(self) -> SessionMode:
        return self.navigation.mode

    def visit(self, topic: str | None) -> GenerationSession | None:
        return self.navigation.visit(topic)

    def follow_link(self, href: str | None) -> GenerationSession | None:
        return self.navigation.follow_link(href)

    def submit_form(self, action_target: str | None) -> GenerationSession | None:
        return self.navigation.submit_form(action_target)

    def regenerate(self) -> GenerationSession | None:
        return self.navigation.regenerate()

    def back(self) -> GenerationSession | None:
        return self.navigation.back()

    def forward(self) -> GenerationSession | None:
        return self.navigation.forward()

    def cancel(self) -> None:
        self.navigation.cancel()

    def clear(self) -> None:
        """Drop the visible content and any cover state."""
        self.navigation.clear()
        if self.coordinator is not None:
            self.coordinator.reset(self.session)

    def events(self, session: GenerationSession) -> cabc.Iterator[StreamEvent]:
        """Open the backend stream that feeds ``session``."""
        if session.mode == "site":
            return self.backend.stream_site(session.topic)
        return self.backend.stream_article(session.topic)

    def apply(self, session: GenerationSession, event: StreamEvent) -> bool:
        """Apply ``event`` to ``session`` unless the session went stale.

        Returns
        -------
        bool
            True when visible state changed. Stale events are dropped
            silently.
        """
        if self.navigation.is_stale(session):
            logger.debug("Dropping event for stale session %d", session.id)
            return False
        changed = session.apply(event)
        if changed and self.coordinator is not None:
            extracted = session.title_and_lead()
            self.coordinator.on_document_update(extracted.title, extracted.lead)
        return changed

    def run(
        self,
        session: GenerationSession,
        *,
        on_update: UpdateCallback | None = None,
    ) -> GenerationSession:
        """Consume the backend stream for ``session`` until it settles.

        Iteration stops early once the session is superseded or cancelled;
        backend failures end up on ``session.error``.
        """
        stream = self.events(session)
        try:
            for event in stream:
                if self.apply(session, event) and on_update is not None:
                    on_update(session)
                if self.navigation.is_stale(session) or not session.is_active:
                    break
        except (GenerationError, requests.RequestException) as exc:
            logger.warning("Stream for %r failed: %s", session.topic, exc)
            if self.apply(session, StreamFailed(str(exc))) and on_update is not None:
                on_update(session)
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()
        if session.is_active and not self.navigation.is_stale(session):
            # The backend stopped without a terminal event.
            self.apply(session, StreamFailed("Generation stream ended unexpectedly."))
        return session

    def explore(
        self,
        topic: str,
        *,
        wait_timeout: float | None = None,
        on_update: UpdateCallback | None = None,
    ) -> PageView:
        """Visit ``topic``, stream it to completion, and return the page.

        Raises
        ------
        EmptyTopicError
            If ``topic`` is blank; no request is made.
        """
        session = self.visit(require_topic(topic))
        if session is None:  # pragma: no cover - require_topic guarantees a topic
            return self.render()
        self.run(session, on_update=on_update)
        if self.coordinator is not None and not self.navigation.is_stale(session):
            self.coordinator.wait(wait_timeout)
        return self.render()

    def render(self) -> PageView:
        """Render the live session with its cover and recent topics."""
        cover = self.coordinator.state if self.coordinator is not None else None
        return self.dispatcher.render_session(
            self.session, cover, recent=self.navigation.recent.items
        )

    def close(self) -> None:
        if self.coordinator is not None:
            self.coordinator.close()

    def _on_session(self, session: GenerationSession) -> None:
        if self.coordinator is not None:
            self.coordinator.reset(session)


__all__ = ["Explorer", "UpdateCallback"]
