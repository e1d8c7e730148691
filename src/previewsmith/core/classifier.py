"""Content-type detection for untyped preview input.

Raw content reaches the renderer without any out-of-band hint telling whether
it is HTML or Markdown. :func:`classify` scores the text against both families
of signatures and applies a fixed tie-break order:

1. Empty or whitespace-only input is HTML (vacuously valid, renders empty).
2. At least two tag-like tokens and at least one closing tag: HTML. This
   high-confidence signal is evaluated before any Markdown heuristic.
3. Each Markdown signature that matches adds one point (no weighting).
4. Tag-like tokens present and a Markdown score of zero: HTML.
5. A Markdown score above zero: Markdown, even when tag-like tokens exist.
6. Text starting with ``<`` and containing ``>``: HTML.
7. Anything else: HTML, because a permissive HTML renderer degrades better on
   plain text than a Markdown converter does.
"""

from __future__ import annotations

from enum import Enum
import re

from .config import ContentTypeHint


class ContentVerdict(str, Enum):
    """Markup family detected for a piece of content."""

    HTML = "html"
    MARKDOWN = "markdown"


_TAG_PATTERN = re.compile(r"</?[a-z][^>]*>", re.IGNORECASE)
_CLOSING_TAG_PATTERN = re.compile(r"</[a-z][^>]*>", re.IGNORECASE)

MIN_TAG_TOKENS = 2
MIN_CLOSING_TAGS = 1

MARKDOWN_SIGNATURES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("heading", re.compile(r"#{1,6}\s+.+", re.MULTILINE)),
    ("bold", re.compile(r"\*\*.*?\*\*", re.MULTILINE)),
    ("italic", re.compile(r"\*[^*\n].*?\*", re.MULTILINE)),
    ("unordered_list", re.compile(r"^- .+", re.MULTILINE)),
    ("ordered_list", re.compile(r"^\d+\. .+", re.MULTILINE)),
    ("fenced_code", re.compile(r"```[\s\S]*?```", re.MULTILINE)),
    ("inline_code", re.compile(r"`[^`\n]+`", re.MULTILINE)),
    ("link", re.compile(r"\[([^\]]*)\]\([^)]+\)", re.MULTILINE)),
    ("image_empty_alt", re.compile(r"!\[\]\([^)]+\)", re.MULTILINE)),
    ("image", re.compile(r"!\[[^\]]*\]\([^)]+\)", re.MULTILINE)),
    ("blockquote", re.compile(r"^> .+", re.MULTILINE)),
    ("horizontal_rule", re.compile(r"^---$", re.MULTILINE)),
    ("table_row", re.compile(r"\|.+\|", re.MULTILINE)),
)


def markdown_score(text: str) -> int:
    """Return how many Markdown signatures match ``text``."""
    return sum(1 for _, pattern in MARKDOWN_SIGNATURES if pattern.search(text))


def matched_signatures(text: str) -> list[str]:
    """Return the names of the Markdown signatures found in ``text``."""
    return [name for name, pattern in MARKDOWN_SIGNATURES if pattern.search(text)]


def classify(text: str) -> ContentVerdict:
    """Classify raw content as HTML or Markdown."""
    if not text or not text.strip():
        return ContentVerdict.HTML

    trimmed = text.strip()

    tag_count = len(_TAG_PATTERN.findall(trimmed))
    closing_count = len(_CLOSING_TAG_PATTERN.findall(trimmed))
    if tag_count >= MIN_TAG_TOKENS and closing_count >= MIN_CLOSING_TAGS:
        return ContentVerdict.HTML

    score = markdown_score(trimmed)

    if tag_count and score == 0:
        return ContentVerdict.HTML

    if score > 0:
        return ContentVerdict.MARKDOWN

    if trimmed.startswith("<") and ">" in trimmed:
        return ContentVerdict.HTML

    return ContentVerdict.HTML


def resolve_content_type(text: str, hint: ContentTypeHint | str = "auto") -> ContentVerdict:
    """Return the verdict pinned by ``hint`` or classify ``text`` when it is ``auto``."""
    if hint == "auto":
        return classify(text)
    try:
        return ContentVerdict(hint)
    except ValueError:
        raise ValueError(
            f"Unknown content type '{hint}', expected 'auto', 'html' or 'markdown'."
        ) from None


__all__ = [
    "MARKDOWN_SIGNATURES",
    "ContentVerdict",
    "classify",
    "markdown_score",
    "matched_signatures",
    "resolve_content_type",
]
