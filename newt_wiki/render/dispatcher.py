"""Map a possibly partial document and cover state to view models.

The dispatcher is a pure function of its inputs. It is called after every
streamed chunk with whatever has arrived, so every field lookup tolerates a
missing key, a ``None``, or a value of the wrong shape. Optional fields that
are missing render nothing; required fields that are missing mid-stream fall
back to short neutral labels ("Item", "Field", "User").

Example
-------
>>> from newt_wiki.render import RenderDispatcher
>>> page = RenderDispatcher().render_site({}, topic="Spotify")
>>> page.sections
[]
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from newt_wiki._constants import WIKI_SECTION_NAME
from newt_wiki.cover import CoverImageState
from newt_wiki.links import is_external_href, is_internal_href, visit_url
from newt_wiki.markdown_parser import extract_headings, extract_title_and_lead, slug_id

from .markdown_renderer import MarkdownRenderer
from .views import (
    CardView,
    CoverSlot,
    FeatureView,
    FeedView,
    FieldView,
    FooterView,
    FormView,
    GridView,
    HeroView,
    LinkView,
    MarkdownView,
    PageView,
    PlaceholderView,
    PostView,
    SectionView,
    TocEntry,
    WikiView,
)

if typ.TYPE_CHECKING:
    from newt_wiki.session import GenerationSession

FIELD_TYPES = frozenset({"text", "email", "password", "textarea"})


def build_toc(markdown_text: str) -> list[TocEntry]:
    """Return a flat table of contents for ``markdown_text``."""
    return [
        TocEntry(level=heading.level, label=heading.text, anchor=heading.slug_id)
        for heading in extract_headings(markdown_text)
    ]


def cover_slot(
    state: CoverImageState | None, title: str | None = None
) -> CoverSlot | None:
    """Return the slot for ``state``; idle or missing state renders nothing."""
    if state is None or state.status == "idle":
        return None
    alt_title = title or state.requested_for_title or ""
    return CoverSlot(
        status=state.status,
        url=state.url,
        error=state.error,
        alt=f"Illustration: {alt_title}".strip(),
    )


def _text(value: object) -> str | None:
    """Return ``value`` when it is a non-blank string."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _mapping(value: object) -> cabc.Mapping[str, typ.Any] | None:
    return value if isinstance(value, cabc.Mapping) else None


def _items(value: object) -> list[cabc.Mapping[str, typ.Any]]:
    """Return the mapping elements of a list, skipping absent ones."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, cabc.Mapping)]


class RenderDispatcher:
    """Build :class:`PageView` objects for article and site sessions."""

    def __init__(self, renderer: MarkdownRenderer | None = None) -> None:
        self.renderer = renderer or MarkdownRenderer()

    def render_session(
        self,
        session: GenerationSession | None,
        cover: CoverImageState | None = None,
        *,
        recent: cabc.Sequence[str] = (),
    ) -> PageView:
        """Render whatever ``session`` holds right now."""
        if session is None:
            return PageView(mode="article", recent=self._recent(recent))
        if session.mode == "site":
            page = self.render_site(session.snapshot, cover, topic=session.topic)
        else:
            page = self.render_article(session.text, cover, topic=session.topic)
        page.status = session.status
        page.error = session.error
        page.recent = self._recent(recent)
        return page

    def render_article(
        self,
        text: str,
        cover: CoverImageState | None = None,
        *,
        topic: str | None = None,
    ) -> PageView:
        """Render a Markdown article with its table of contents."""
        title = extract_title_and_lead(text).title
        return PageView(
            mode="article",
            topic=topic,
            title=title,
            article_html=self.renderer.markdown(text, cover=cover_slot(cover, title)),
            toc=build_toc(text),
        )

    def render_site(
        self,
        snapshot: cabc.Mapping[str, typ.Any] | None,
        cover: CoverImageState | None = None,
        *,
        topic: str | None = None,
    ) -> PageView:
        """Render a partial or complete site snapshot."""
        document = _mapping(snapshot) or {}
        title = _text(document.get("title"))
        fallback_subject = title or topic or ""
        sections: list[SectionView] = []
        cover_pending = True
        raw_sections = document.get("sections")
        for raw in raw_sections if isinstance(raw_sections, list) else []:
            if raw is None:
                continue
            section = _mapping(raw)
            if section is None:
                sections.append(PlaceholderView())
                continue
            slot = None
            if cover_pending and section.get("type") == "wiki":
                cover_pending = False
                slot = cover
            view = self._dispatch(section, fallback_subject=fallback_subject, cover=slot)
            if view is not None:
                sections.append(view)
        return PageView(
            mode="site",
            topic=topic,
            title=title,
            nav=self._links(document.get("nav")),
            sections=sections,
        )

    def _dispatch(
        self,
        section: cabc.Mapping[str, typ.Any],
        *,
        fallback_subject: str,
        cover: CoverImageState | None,
    ) -> SectionView | None:
        match section.get("type"):
            case None:
                return PlaceholderView()
            case "hero":
                return self._hero(section, fallback_subject)
            case "text":
                body = _text(section.get("markdown"))
                if body is None:
                    return PlaceholderView()
                return MarkdownView(self.renderer.markdown(body))
            case "grid":
                return self._grid(section)
            case "feature":
                return self._feature(section)
            case "form":
                return self._form(section, fallback_subject)
            case "feed":
                return self._feed(section)
            case "wiki":
                return self._wiki(section, fallback_subject, cover)
            case "footer":
                return FooterView(self._links(section.get("links")))
            case _:
                return None

    def _hero(
        self, section: cabc.Mapping[str, typ.Any], fallback_subject: str
    ) -> SectionView:
        hero = _mapping(section.get("hero"))
        if hero is None:
            return PlaceholderView()
        cta = _mapping(hero.get("cta"))
        return HeroView(
            headline=_text(hero.get("headline")) or fallback_subject,
            subheadline=_text(hero.get("subheadline")),
            cta=self._target_link(cta.get("label"), cta.get("target"), "Open")
            if cta
            else None,
        )

    def _grid(self, section: cabc.Mapping[str, typ.Any]) -> SectionView:
        if not isinstance(section.get("items"), list):
            return PlaceholderView()
        cards = [
            CardView(
                title=_text(item.get("title")) or "Item",
                body_html=self.renderer.markdown(_text(item.get("body"))),
                link=self._target_link("Open", item.get("target"), "Open"),
            )
            for item in _items(section.get("items"))
        ]
        return GridView(cards)

    def _feature(self, section: cabc.Mapping[str, typ.Any]) -> SectionView:
        title = _text(section.get("title"))
        body = _text(section.get("body"))
        if title is None and body is None:
            return PlaceholderView()
        return FeatureView(
            title=title or "Feature", body_html=self.renderer.markdown(body)
        )

    def _form(
        self, section: cabc.Mapping[str, typ.Any], fallback_subject: str
    ) -> SectionView:
        form = _mapping(section.get("form"))
        if form is None:
            return PlaceholderView()
        fields: list[FieldView] = []
        for index, field in enumerate(_items(form.get("fields")), start=1):
            label = _text(field.get("label")) or "Field"
            field_type = field.get("type")
            fields.append(
                FieldView(
                    label=label,
                    name=_text(field.get("name")) or slug_id(label) or f"field-{index}",
                    type=field_type
                    if isinstance(field_type, str) and field_type in FIELD_TYPES
                    else "text",
                    placeholder=_text(field.get("placeholder")),
                )
            )
        target = _text(form.get("actionTarget")) or fallback_subject
        return FormView(
            title=_text(form.get("title")),
            fields=fields,
            submit_label=_text(form.get("submitLabel")) or "Submit",
            action=LinkView(label=target, href=visit_url(target), topic=target)
            if target
            else LinkView(label="", href="#"),
        )

    def _feed(self, section: cabc.Mapping[str, typ.Any]) -> SectionView:
        feed = _mapping(section.get("feed"))
        if feed is None:
            return PlaceholderView()
        posts = [
            PostView(
                author=_text(post.get("author")) or "User",
                handle=_text(post.get("handle")),
                timestamp=_text(post.get("timestamp")),
                likes=_format_likes(post.get("likes")),
                content_html=self.renderer.markdown(_text(post.get("content"))),
                link=self._target_link("Open thread", post.get("target"), "Open"),
            )
            for post in _items(feed.get("posts"))
        ]
        return FeedView(title=_text(feed.get("title")), posts=posts)

    def _wiki(
        self,
        section: cabc.Mapping[str, typ.Any],
        fallback_subject: str,
        cover: CoverImageState | None,
    ) -> SectionView:
        subject = _text(section.get("subject"))
        article = _text(section.get("article")) or ""
        if subject is None and not article:
            return PlaceholderView()
        title = extract_title_and_lead(article).title or subject
        return WikiView(
            name=_text(section.get("name")) or WIKI_SECTION_NAME,
            subject=subject or fallback_subject,
            html=self.renderer.markdown(article, cover=cover_slot(cover, title)),
            toc=build_toc(article),
        )

    def _links(self, value: object) -> list[LinkView]:
        links: list[LinkView] = []
        for item in _items(value):
            href = _text(item.get("href"))
            label = _text(item.get("label")) or href or "Link"
            link = self._target_link(label, href, "Link")
            if link is not None:
                links.append(link)
        return links

    @staticmethod
    def _target_link(
        label: object, target: object, default_label: str
    ) -> LinkView | None:
        """Return a link for ``target``; absent targets render nothing."""
        href = _text(target)
        if href is None:
            return None
        text = _text(label) or default_label
        if is_internal_href(href):
            topic = href.strip()
            return LinkView(label=text, href=visit_url(topic), topic=topic)
        return LinkView(label=text, href=href, external=is_external_href(href))

    @staticmethod
    def _recent(recent: cabc.Sequence[str]) -> list[LinkView]:
        return [
            LinkView(label=topic, href=visit_url(topic), topic=topic) for topic in recent
        ]


def _format_likes(value: object) -> str | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return str(int(value)) if float(value).is_integer() else str(value)


__all__ = ["RenderDispatcher", "build_toc", "cover_slot"]
