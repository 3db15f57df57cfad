"""Request at most one cover image per canonical title per session.

Every streamed chunk re-renders the page and calls
:meth:`CoverImageCoordinator.on_document_update` with whatever title and lead
can be extracted so far. The coordinator turns that stream of calls into a
single image request once a title appears, and ignores results that come back
after the user moved on.

Example
-------
>>> from newt_wiki.cover import build_cover_prompt
>>> "Hogwarts" in build_cover_prompt("Hogwarts", "A school.")
True
"""

from __future__ import annotations

import concurrent.futures as cf
import dataclasses as dc
import logging
import threading
import typing as typ

from ._constants import LEAD_EXCERPT_LIMIT
from .errors import ImageGenerationError
from .markdown_parser import lead_excerpt
from .topics import same_topic

logger = logging.getLogger(__name__)

CoverStatus = typ.Literal["idle", "loading", "ready", "error"]

PROMPT_TEMPLATE = (
    'Editorial, Pinterest-aesthetic hero image of "{title}".',
    "Artful composition, soft natural light, shallow depth of field,",
    "rich color grading, organic textures, tasteful negative space,",
    "cinematic look, highly detailed, no text, no watermark, no borders.",
    "Clean background, evocative mood, professional photography style.",
    "Aspect ratio 16:9.",
)


class ImageGenerator(typ.Protocol):
    """Backend capable of turning a prompt into image data URIs."""

    def generate_images(self, prompt: str, *, count: int = 1) -> list[str]: ...


@dc.dataclass(slots=True)
class CoverImageState:
    """Visible state of the cover image for the live session.

    Attributes
    ----------
    requested_for_title : str | None
        Canonical title the outstanding or settled request was issued for.
    status : CoverStatus
        ``idle`` → ``loading`` → ``ready`` or ``error``.
    url : str | None
        Image data URI once ``status`` is ``ready``.
    error : str | None
        Human readable message once ``status`` is ``error``.
    """

    requested_for_title: str | None = None
    status: CoverStatus = "idle"
    url: str | None = None
    error: str | None = None


def build_cover_prompt(
    title: str, lead: str | None = None, *, excerpt_limit: int = LEAD_EXCERPT_LIMIT
) -> str:
    """Return the image prompt for ``title`` with an optional lead excerpt."""
    parts = [line.format(title=title) for line in PROMPT_TEMPLATE]
    excerpt = lead_excerpt(lead, excerpt_limit)
    if excerpt:
        parts.append(f"Context: {excerpt}")
    return " ".join(parts)


class CoverImageCoordinator:
    """Fire one image request per canonical title and discard stale results.

    Requests run on ``executor``; their results are applied from the future's
    done-callback under a lock, so they may arrive on another thread.
    """

    def __init__(
        self,
        images: ImageGenerator,
        *,
        executor: cf.Executor | None = None,
        excerpt_limit: int = LEAD_EXCERPT_LIMIT,
    ) -> None:
        self._images = images
        self._owns_executor = executor is None
        self._executor = executor or cf.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="newt-cover"
        )
        self._excerpt_limit = excerpt_limit
        self._lock = threading.RLock()
        self._settled = threading.Condition(self._lock)
        self._session_key: object | None = None
        self._current_title: str | None = None
        self._current_lead: str | None = None
        self.state = CoverImageState()

    def reset(self, session_key: object | None = None) -> None:
        """Start tracking a new session; results for the old one become stale."""
        with self._settled:
            self._session_key = session_key
            self._current_title = None
            self._current_lead = None
            self.state = CoverImageState()
            self._settled.notify_all()

    def on_document_update(
        self, title: str | None, lead: str | None = None
    ) -> cf.Future[list[str]] | None:
        """React to a re-render with the latest extracted title and lead.

        Returns
        -------
        Future | None
            The request future when one was issued, otherwise ``None``. No
            request is made without a title, while one is loading, after one
            succeeded, or when ``title`` was already requested.
        """
        with self._lock:
            if title:
                self._current_title = title
                self._current_lead = lead
            if (
                not title
                or self.state.status in ("loading", "ready")
                or same_topic(title, self.state.requested_for_title)
            ):
                return None
            prompt = build_cover_prompt(
                title, lead, excerpt_limit=self._excerpt_limit
            )
            self.state = CoverImageState(requested_for_title=title, status="loading")
            session_key = self._session_key
            logger.info("Requesting cover image for %r", title)
            future = self._executor.submit(
                self._images.generate_images, prompt, count=1
            )
        future.add_done_callback(
            lambda done: self._settle(done, session_key=session_key, title=title)
        )
        return future

    def wait(self, timeout: float | None = None) -> CoverImageState:
        """Block until no request is loading, then return the state."""
        with self._settled:
            self._settled.wait_for(
                lambda: self.state.status != "loading", timeout=timeout
            )
            return self.state

    def close(self) -> None:
        """Release the worker thread when the coordinator created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _settle(
        self, future: cf.Future[list[str]], *, session_key: object | None, title: str
    ) -> None:
        with self._settled:
            try:
                self._apply_result(future, session_key=session_key, title=title)
            finally:
                self._settled.notify_all()

    def _apply_result(
        self, future: cf.Future[list[str]], *, session_key: object | None, title: str
    ) -> None:
        if session_key is not self._session_key or not same_topic(
            title, self.state.requested_for_title
        ):
            logger.debug("Discarding cover image for stale session (%r)", title)
            return
        if self._current_title and not same_topic(self._current_title, title):
            logger.debug(
                "Discarding cover image for %r; title is now %r",
                title,
                self._current_title,
            )
            self.state = CoverImageState()
            self.on_document_update(self._current_title, self._current_lead)
            return
        try:
            images = future.result()
        except cf.CancelledError:
            self._fail("Image generation was cancelled.")
            return
        except ImageGenerationError as exc:
            self._fail(str(exc) or "Image generation failed")
            return
        except Exception:
            logger.exception("Cover image request for %r crashed", title)
            self._fail("Image generation failed")
            return
        if not images:
            self._fail("Image generation returned no images.")
            return
        self.state = dc.replace(self.state, status="ready", url=images[0])

    def _fail(self, message: str) -> None:
        logger.warning(
            "Cover image for %r failed: %s", self.state.requested_for_title, message
        )
        self.state = dc.replace(self.state, status="error", error=message)


__all__ = [
    "CoverImageCoordinator",
    "CoverImageState",
    "CoverStatus",
    "ImageGenerator",
    "build_cover_prompt",
]
