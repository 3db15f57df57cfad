"""Classify link targets as internal topics, in-page anchors, or external URLs.

Every generated page links to other topics with bare hrefs such as
``[Wands](Wand)``. Those are intercepted and turned into new generation
requests, while anything carrying a scheme (``https:``, ``mailto:``) or a
protocol-relative prefix (``//cdn.example``) is left as ordinary navigation.

Example
-------
>>> from newt_wiki.links import is_internal_href, visit_url
>>> is_internal_href("Black Holes")
True
>>> is_internal_href("https://example.com")
False
>>> visit_url("Black Holes")
'/visit/Black%20Holes'
"""

from __future__ import annotations

import re
from urllib.parse import quote

from ._constants import VISIT_PATH_PREFIX

# A scheme must be followed by a non-space so that topics like
# "Note: on style" stay internal.
SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:(?!\s)")


def is_fragment(href: str | None) -> bool:
    """Return True when ``href`` only points at an anchor in the current page."""
    return bool(href) and href.strip().startswith("#")


def is_external_href(href: str | None) -> bool:
    """Return True for links with an explicit scheme or a ``//`` prefix."""
    if not href:
        return False
    target = href.strip()
    return target.startswith("//") or bool(SCHEME_PATTERN.match(target))


def is_internal_href(href: str | None) -> bool:
    """Return True when ``href`` names another topic to generate.

    Parameters
    ----------
    href : str | None
        Raw link target as written in the generated markdown or document.

    Returns
    -------
    bool
        ``False`` for empty targets, fragment-only anchors, and external URLs.
    """
    if not href or not href.strip():
        return False
    return not is_fragment(href) and not is_external_href(href)


def visit_url(topic: str) -> str:
    """Return the in-app URL that requests a page for ``topic``."""
    return f"{VISIT_PATH_PREFIX}{quote(topic.strip(), safe='')}"


__all__ = ["is_external_href", "is_fragment", "is_internal_href", "visit_url"]
