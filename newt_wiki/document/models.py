"""Typed structures describing a complete generated site document.

The section union is discriminated by the ``type`` field on the wire. Partial
snapshots never use these classes; they stay plain mappings until the stream
completes and :func:`newt_wiki.document.validate_site_document` converts them.
"""

from __future__ import annotations

import typing as typ

import msgspec

from newt_wiki._constants import WIKI_SECTION_NAME

PartialSiteDocument: typ.TypeAlias = dict[str, typ.Any]

FieldType = typ.Literal["text", "email", "password", "textarea"]


class Link(msgspec.Struct, rename="camel"):
    """Navigation or footer link."""

    label: str
    href: str


class CallToAction(msgspec.Struct, rename="camel"):
    """Button inside a hero block that opens another topic."""

    label: str
    target: str


class Hero(msgspec.Struct, rename="camel"):
    """Hero copy shown at the top of a generated site."""

    headline: str
    subheadline: str | None = None
    cta: CallToAction | None = None


class Card(msgspec.Struct, rename="camel"):
    """Grid tile."""

    title: str
    body: str | None = None
    target: str | None = None


class FormField(msgspec.Struct, rename="camel"):
    """Single input of a generated form."""

    label: str
    name: str
    type: FieldType = "text"
    placeholder: str | None = None


class Form(msgspec.Struct, rename="camel"):
    """Sign-up, login, or contact form.

    Attributes
    ----------
    fields : list[FormField]
        At least one input.
    submit_label : str
        Button label, ``submitLabel`` on the wire.
    action_target : str | None
        Topic opened after submission, ``actionTarget`` on the wire.
    """

    fields: typ.Annotated[list[FormField], msgspec.Meta(min_length=1)]
    title: str | None = None
    submit_label: str = "Submit"
    action_target: str | None = None
    success_message: str | None = None


class Post(msgspec.Struct, rename="camel"):
    """Social feed entry with a markdown body."""

    author: str
    content: str
    handle: str | None = None
    target: str | None = None
    likes: float | None = None
    timestamp: str | None = None


class Feed(msgspec.Struct, rename="camel"):
    """Social feed of one to twenty posts."""

    posts: typ.Annotated[list[Post], msgspec.Meta(min_length=1, max_length=20)]
    title: str | None = None


class _Section(msgspec.Struct, tag_field="type", rename="camel"):
    """Base for every section variant."""


class HeroSection(_Section, tag="hero"):
    hero: Hero


class TextSection(_Section, tag="text"):
    markdown: str


class GridSection(_Section, tag="grid"):
    items: typ.Annotated[list[Card], msgspec.Meta(min_length=1, max_length=12)]


class FeatureSection(_Section, tag="feature"):
    title: str
    body: str


class FormSection(_Section, tag="form"):
    form: Form


class FeedSection(_Section, tag="feed"):
    feed: Feed


class WikiSection(_Section, tag="wiki"):
    """Encyclopedia article embedded in every generated site."""

    subject: str
    article: str
    name: typ.Literal["NewtWiki"] = WIKI_SECTION_NAME


class FooterSection(_Section, tag="footer"):
    links: list[Link] | None = None


Section: typ.TypeAlias = (
    HeroSection
    | TextSection
    | GridSection
    | FeatureSection
    | FormSection
    | FeedSection
    | WikiSection
    | FooterSection
)

SECTION_TYPES: frozenset[str] = frozenset(
    {"hero", "text", "grid", "feature", "form", "feed", "wiki", "footer"}
)


class SiteDocument(msgspec.Struct, rename="camel"):
    """A complete generated page."""

    title: str
    sections: typ.Annotated[list[Section], msgspec.Meta(min_length=1)]
    nav: list[Link] | None = None


__all__ = [
    "SECTION_TYPES",
    "CallToAction",
    "Card",
    "FeatureSection",
    "FeedSection",
    "Feed",
    "FooterSection",
    "Form",
    "FormField",
    "FormSection",
    "GridSection",
    "Hero",
    "HeroSection",
    "Link",
    "PartialSiteDocument",
    "Post",
    "Section",
    "SiteDocument",
    "TextSection",
    "WikiSection",
]
