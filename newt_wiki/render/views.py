"""View dataclasses produced by the render dispatcher and consumed by templates.

Each section view carries a ``kind`` class attribute so templates can pick a
macro without isinstance checks.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from newt_wiki.cover import CoverStatus
    from newt_wiki.session import SessionMode, SessionStatus


@dc.dataclass(slots=True)
class CoverSlot:
    """Cover image block placed under the first level-one heading.

    Attributes
    ----------
    status : CoverStatus
        Drives the markup: progress text, image, or error message.
    url : str | None
        Image data URI when ready.
    error : str | None
        Message shown when the request failed.
    alt : str
        Alternative text for the image.
    """

    status: CoverStatus
    url: str | None = None
    error: str | None = None
    alt: str = ""


@dc.dataclass(slots=True)
class LinkView:
    """Rendered link; internal links carry the topic they open."""

    label: str
    href: str
    topic: str | None = None
    external: bool = False


@dc.dataclass(slots=True)
class TocEntry:
    """Table-of-contents row that scrolls to an in-page anchor."""

    level: int
    label: str
    anchor: str

    @property
    def href(self) -> str:
        return f"#{self.anchor}"

    @property
    def indent(self) -> int:
        return self.level - 1


@dc.dataclass(slots=True)
class PlaceholderView:
    """Neutral block for a section whose type or payload has not arrived."""

    kind: typ.ClassVar[str] = "placeholder"


@dc.dataclass(slots=True)
class HeroView:
    headline: str
    subheadline: str | None = None
    cta: LinkView | None = None
    kind: typ.ClassVar[str] = "hero"


@dc.dataclass(slots=True)
class MarkdownView:
    html: str
    kind: typ.ClassVar[str] = "text"


@dc.dataclass(slots=True)
class CardView:
    title: str
    body_html: str = ""
    link: LinkView | None = None


@dc.dataclass(slots=True)
class GridView:
    cards: list[CardView]
    kind: typ.ClassVar[str] = "grid"


@dc.dataclass(slots=True)
class FeatureView:
    title: str
    body_html: str = ""
    kind: typ.ClassVar[str] = "feature"


@dc.dataclass(slots=True)
class FieldView:
    label: str
    name: str
    type: str = "text"
    placeholder: str | None = None


@dc.dataclass(slots=True)
class FormView:
    fields: list[FieldView]
    submit_label: str
    action: LinkView
    title: str | None = None
    kind: typ.ClassVar[str] = "form"


@dc.dataclass(slots=True)
class PostView:
    author: str
    content_html: str = ""
    handle: str | None = None
    timestamp: str | None = None
    likes: str | None = None
    link: LinkView | None = None


@dc.dataclass(slots=True)
class FeedView:
    posts: list[PostView]
    title: str | None = None
    kind: typ.ClassVar[str] = "feed"


@dc.dataclass(slots=True)
class WikiView:
    name: str
    subject: str
    html: str
    toc: list[TocEntry] = dc.field(default_factory=list)
    kind: typ.ClassVar[str] = "wiki"


@dc.dataclass(slots=True)
class FooterView:
    links: list[LinkView]
    kind: typ.ClassVar[str] = "footer"


SectionView: typ.TypeAlias = (
    PlaceholderView
    | HeroView
    | MarkdownView
    | GridView
    | FeatureView
    | FormView
    | FeedView
    | WikiView
    | FooterView
)


@dc.dataclass(slots=True)
class PageView:
    """Everything a page template needs for one render.

    Attributes
    ----------
    mode : SessionMode
        ``"article"`` pages show ``article_html`` with a table of contents;
        ``"site"`` pages show ``sections``.
    topic : str | None
        Requested topic of the live session.
    title : str | None
        Canonical title extracted from the content, when known.
    status : SessionStatus | None
        Session status, ``None`` before any visit.
    error : str | None
        Retryable upstream error shown above whatever content exists.
    """

    mode: SessionMode
    topic: str | None = None
    title: str | None = None
    status: SessionStatus | None = None
    error: str | None = None
    article_html: str = ""
    toc: list[TocEntry] = dc.field(default_factory=list)
    nav: list[LinkView] = dc.field(default_factory=list)
    sections: list[SectionView] = dc.field(default_factory=list)
    recent: list[LinkView] = dc.field(default_factory=list)

    @property
    def is_loading(self) -> bool:
        return self.status == "streaming"


__all__ = [
    "CardView",
    "CoverSlot",
    "FeatureView",
    "FeedView",
    "FieldView",
    "FooterView",
    "FormView",
    "GridView",
    "HeroView",
    "LinkView",
    "MarkdownView",
    "PageView",
    "PlaceholderView",
    "PostView",
    "SectionView",
    "TocEntry",
    "WikiView",
]
