"""Default link-safety handling.

Links receive a normalised ``href`` plus ``target`` and ``rel`` attributes
when the caller did not set them. The same pass runs on every ``<a>`` element
of the tree-walking path and, through :func:`rewrite_links`, on the whole
document when no transform is registered at all, so both paths produce
equivalent markup.
"""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from previewsmith.core.engine import FALLBACK_PARSER, DefaultPass
from previewsmith.core.urls import normalize_url


DEFAULT_LINK_TARGET = "_blank"
DEFAULT_LINK_REL = "noopener noreferrer"


def apply_link_safety(
    element: Tag,
    *,
    target: str = DEFAULT_LINK_TARGET,
    rel: str = DEFAULT_LINK_REL,
    normalize: bool = True,
) -> bool:
    """Rewrite an ``<a>`` element in place; existing target/rel are kept."""
    href = element.get("href")
    if normalize and isinstance(href, str) and href:
        element["href"] = normalize_url(href)
    if "target" not in element.attrs:
        element["target"] = target
    if "rel" not in element.attrs:
        element["rel"] = rel
    return True


def make_link_pass(
    *,
    target: str = DEFAULT_LINK_TARGET,
    rel: str = DEFAULT_LINK_REL,
    normalize: bool = True,
) -> DefaultPass:
    """Return a default pass bound to the given link settings."""

    def _link_pass(element: Tag) -> bool:
        return apply_link_safety(element, target=target, rel=rel, normalize=normalize)

    return _link_pass


def rewrite_links(
    markup: str,
    *,
    target: str = DEFAULT_LINK_TARGET,
    rel: str = DEFAULT_LINK_REL,
    normalize: bool = True,
) -> str:
    """Apply the default link pass to every ``<a>`` element of ``markup``.

    Only real elements are touched; text inside comments, ``<script>`` or
    ``<textarea>`` is left as parsed.
    """
    soup = BeautifulSoup(markup, FALLBACK_PARSER, multi_valued_attributes=None)
    for element in soup.find_all("a"):
        apply_link_safety(element, target=target, rel=rel, normalize=normalize)
    return str(soup)


__all__ = [
    "DEFAULT_LINK_REL",
    "DEFAULT_LINK_TARGET",
    "apply_link_safety",
    "make_link_pass",
    "rewrite_links",
]
