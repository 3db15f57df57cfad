r"""HTTP client for the text, structured, and image generation routes.

The backend exposes three JSON endpoints: ``POST /api/generate`` streams a
Markdown article, ``POST /api/site`` streams the JSON of a site document, and
``POST /api/images`` returns image data URIs. Streams are surfaced as
iterators of :mod:`newt_wiki.session` events so transport failures arrive as
:class:`~newt_wiki.session.StreamFailed` rather than exceptions.

Example
-------
>>> from newt_wiki.clients import HttpGenerationClient
>>> client = HttpGenerationClient(base_url="http://localhost:3000")
>>> for event in client.stream_article("Hogwarts"):  # doctest: +SKIP
...     print(event)
StreamChunk(text=b'# Hogwarts\n')
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config.models import DEFAULT_API_BASE
from .errors import ImageGenerationError
from .session import StreamChunk, StreamComplete, StreamEvent, StreamFailed

logger = logging.getLogger(__name__)

MAX_IMAGES_PER_REQUEST = 2
_USER_AGENT = "newt-wiki/0.1"


class GenerationBackend(typ.Protocol):
    """Collaborator that produces articles, site documents, and images."""

    def stream_article(self, topic: str) -> cabc.Iterator[StreamEvent]: ...

    def stream_site(self, query: str) -> cabc.Iterator[StreamEvent]: ...

    def generate_images(self, prompt: str, *, count: int = 1) -> list[str]: ...


def _build_session(retries: int) -> requests.Session:
    """Return a session that retries connection failures and gateway errors."""
    session = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=0,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("POST",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class HttpGenerationClient:
    """Thin wrapper around the generation routes."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_API_BASE,
        session: requests.Session | None = None,
        timeout: float = 60.0,
        retries: int = 3,
    ) -> None:
        """Initialise the client with an optional preconfigured transport.

        Parameters
        ----------
        base_url : str, optional
            Origin serving the ``/api`` routes. Defaults to
            ``DEFAULT_API_BASE``.
        session : requests.Session, optional
            Session to reuse; a retrying session is created when omitted.
        timeout : float, optional
            Per-request connect/read timeout in seconds.
        retries : int, optional
            Connection retries for the default session.
        """
        self._base_url = base_url.rstrip("/") or DEFAULT_API_BASE
        self._session = session or _build_session(retries)
        self.timeout = timeout
        self._headers = {"Accept": "*/*", "User-Agent": _USER_AGENT}

    def stream_article(self, topic: str) -> cabc.Iterator[StreamEvent]:
        """Stream the Markdown article for ``topic``."""
        return self._stream("/api/generate", {"topic": topic})

    def stream_site(self, query: str) -> cabc.Iterator[StreamEvent]:
        """Stream the raw JSON text of the site document for ``query``."""
        return self._stream("/api/site", {"query": query})

    def generate_images(self, prompt: str, *, count: int = 1) -> list[str]:
        """Return image data URIs for ``prompt``.

        Parameters
        ----------
        prompt : str
            Image description.
        count : int, optional
            Number of images, clamped to 1–2.

        Raises
        ------
        ImageGenerationError
            If the request fails, the response is malformed, or no image came
            back.
        """
        text = prompt.strip()
        if not text:
            msg = "Missing prompt"
            raise ImageGenerationError(msg)
        wanted = min(max(count, 1), MAX_IMAGES_PER_REQUEST)
        url = f"{self._base_url}/api/images"
        try:
            response = self._session.post(
                url,
                json={"prompt": text, "count": wanted},
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Image request failed: {exc}"
            raise ImageGenerationError(msg) from exc

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            raise ImageGenerationError(_error_message(response))
        try:
            payload = response.json()
        except ValueError as exc:
            msg = "Image response was not valid JSON"
            raise ImageGenerationError(msg) from exc

        raw_images = payload.get("images") if isinstance(payload, dict) else None
        images = [
            image
            for image in (raw_images if isinstance(raw_images, list) else [])
            if isinstance(image, str) and image
        ]
        if not images:
            msg = "Image generation returned no images."
            raise ImageGenerationError(msg)
        logger.info("Received %d of %d requested image(s)", len(images), wanted)
        return images

    def _stream(
        self, path: str, payload: dict[str, str]
    ) -> cabc.Iterator[StreamEvent]:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.post(
                url,
                json=payload,
                headers=self._headers,
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            yield StreamFailed(f"Failed to reach the generator: {exc}")
            return

        try:
            if response.status_code >= HTTPStatus.BAD_REQUEST:
                yield StreamFailed(_error_message(response))
                return
            for chunk in response.iter_content(chunk_size=None):
                if chunk:
                    yield StreamChunk(chunk)
            yield StreamComplete()
        except requests.RequestException as exc:
            logger.warning("Stream from %s interrupted: %s", url, exc)
            yield StreamFailed(f"Generation stream interrupted: {exc}")
        finally:
            response.close()


def _error_message(response: requests.Response) -> str:
    """Return the backend's ``error`` message or a status-based fallback."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return f"Request failed ({response.status_code})"


__all__ = ["GenerationBackend", "HttpGenerationClient", "MAX_IMAGES_PER_REQUEST"]
