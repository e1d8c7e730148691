"""Dual-URL image model.

Every image carries two URLs:

`canonical_src`
: the URL as first observed, either when the image is inserted or when it is
  ingested from external HTML. It is fixed when the :class:`ImageNode` is
  built and it is the only URL ever serialised.

`display src`
: derived on demand from the canonical URL by an optional enrichment
  callable (for instance one appending an access token). It is used for
  on-screen rendering only and never leaks into exported markup.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import re
from typing import Literal as TypingLiteral


ORIGINAL_SRC_ATTRIBUTE = "data-original-src"

ImageFilter = Callable[[str], "str | None | bool"]
ImageEnricher = Callable[[str], str]

_CONTAMINATION_MARKERS = (" alt=", " title=", 'alt="', 'title="')
_URL_PREFIX = re.compile(r"""^[^\s"']+""")


@dataclass(frozen=True, slots=True)
class ImageNode:
    """Image whose canonical URL is captured exactly once, at construction."""

    canonical_src: str
    alt: str | None = None
    title: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.canonical_src, str) or not self.canonical_src.strip():
            raise ValueError("An image requires a non-empty canonical URL")

    @classmethod
    def create(cls, src: str, alt: str | None = None, title: str | None = None) -> ImageNode:
        """Build a freshly inserted image, e.g. from an upload result."""
        return cls(canonical_src=src, alt=alt, title=title)

    def display_src(self, enrich: ImageEnricher | None = None) -> str:
        """Return the URL used on screen."""
        return present(self, enrich)


def ingest(
    attributes: Mapping[str, str | None],
    filter_fn: ImageFilter | None = None,
    *,
    original_attribute: str = ORIGINAL_SRC_ATTRIBUTE,
) -> ImageNode | None:
    """Capture an image from element attributes.

    The canonical URL comes from ``original_attribute`` when present, else from
    ``src``. ``filter_fn`` may rewrite it or reject the image by returning
    ``None`` or ``False``; a rejected or source-less image yields ``None`` and
    must be dropped from the tree.
    """
    lowered = {str(key).lower(): value for key, value in attributes.items()}
    candidate = lowered.get(original_attribute.lower()) or lowered.get("src")
    if not candidate or not str(candidate).strip():
        return None
    candidate = str(candidate).strip()

    if filter_fn is not None:
        result = filter_fn(candidate)
        if result is None or result is False:
            return None
        if not isinstance(result, str) or not result.strip():
            return None
        candidate = result.strip()

    return ImageNode(
        canonical_src=candidate,
        alt=lowered.get("alt"),
        title=lowered.get("title"),
    )


def present(node: ImageNode, enrich_fn: ImageEnricher | None = None) -> str:
    """Return the display URL for ``node``; the node itself is never touched."""
    if enrich_fn is None:
        return node.canonical_src
    return enrich_fn(node.canonical_src)


def clean_src(value: str) -> str:
    """Strip attribute text accidentally concatenated onto a URL."""
    trimmed = value.strip()
    if any(marker in trimmed for marker in _CONTAMINATION_MARKERS):
        match = _URL_PREFIX.match(trimmed)
        if match:
            return match.group(0)
    return trimmed


def serialize(node: ImageNode) -> dict[str, str]:
    """Return export attributes; ``src`` is always the canonical URL."""
    attributes = {"src": clean_src(node.canonical_src)}
    if node.alt is not None and str(node.alt).strip():
        attributes["alt"] = str(node.alt).strip()
    if node.title is not None and str(node.title).strip():
        attributes["title"] = str(node.title).strip()
    return attributes


def display_attributes(
    node: ImageNode,
    enrich_fn: ImageEnricher | None = None,
    *,
    original_attribute: str = ORIGINAL_SRC_ATTRIBUTE,
) -> dict[str, str]:
    """Return the attributes used to show ``node`` on screen."""
    attributes = {
        "src": present(node, enrich_fn),
        original_attribute: node.canonical_src,
    }
    if node.alt is not None:
        attributes["alt"] = node.alt
    if node.title is not None:
        attributes["title"] = node.title
    return attributes


@dataclass(frozen=True, slots=True)
class ImageReference:
    """Image spotted in raw HTML or Markdown text."""

    url: str
    alt: str
    kind: TypingLiteral["html", "markdown"]
    original_match: str


_HTML_IMAGE = re.compile(r"""<img\b[^>]*?\bsrc=["']([^"']+)["'][^>]*>""", re.IGNORECASE)
_HTML_ALT = re.compile(r"""\balt=["']([^"']*)["']""", re.IGNORECASE)
_MARKDOWN_IMAGE = re.compile(r"""!\[([^\]]*)\]\(([^)\s]+)(?:\s+"[^"]*")?\)""")


def extract_image_urls(text: str) -> list[ImageReference]:
    """List images referenced by ``<img>`` tags and Markdown image syntax."""
    images: list[ImageReference] = []
    for match in _HTML_IMAGE.finditer(text):
        alt_match = _HTML_ALT.search(match.group(0))
        images.append(
            ImageReference(
                url=match.group(1),
                alt=alt_match.group(1) if alt_match else "",
                kind="html",
                original_match=match.group(0),
            )
        )
    for match in _MARKDOWN_IMAGE.finditer(text):
        images.append(
            ImageReference(
                url=match.group(2).strip(),
                alt=match.group(1) or "",
                kind="markdown",
                original_match=match.group(0),
            )
        )
    return images


__all__ = [
    "ORIGINAL_SRC_ATTRIBUTE",
    "ImageEnricher",
    "ImageFilter",
    "ImageNode",
    "ImageReference",
    "clean_src",
    "display_attributes",
    "extract_image_urls",
    "ingest",
    "present",
    "serialize",
]
