"""Image handling for the preview pipeline and for document export."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from previewsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from previewsmith.core.engine import FALLBACK_PARSER, DefaultPass, attribute_map
from previewsmith.core.exceptions import exception_hint, exception_messages
from previewsmith.core.images import (
    ORIGINAL_SRC_ATTRIBUTE,
    ImageEnricher,
    ImageFilter,
    ImageNode,
    display_attributes,
    ingest,
    serialize,
)
from previewsmith.core.units import format_start_tag


def _report_image_failure(emitter: DiagnosticEmitter, stage: str, exc: Exception) -> None:
    summary = f"Image {stage} failed, the image was left out of the preview"
    hint = exception_hint(exc)
    if emitter.debug_enabled:
        chain = exception_messages(exc)
        details = "".join(f"\n- {line}" for line in chain)
        emitter.warning(f"{summary}{details}", exc)
    else:
        detail = f" ({hint})" if hint else ""
        emitter.warning(f"{summary}{detail}.", exc)
    emitter.event("image_failed", {"stage": stage, "reason": hint or type(exc).__name__})


def apply_image_substitution(
    element: Tag,
    *,
    filter_fn: ImageFilter | None = None,
    enrich_fn: ImageEnricher | None = None,
    original_attribute: str = ORIGINAL_SRC_ATTRIBUTE,
    emitter: DiagnosticEmitter | None = None,
) -> bool:
    """Swap an ``<img>`` source for its display URL; False drops the image.

    A raising filter or enricher only affects the image being processed: it is
    reported through ``emitter`` and the image is dropped.
    """
    emitter = emitter or LoggingEmitter()
    try:
        node = ingest(attribute_map(element), filter_fn, original_attribute=original_attribute)
    except Exception as exc:
        _report_image_failure(emitter, "filter", exc)
        return False
    if node is None:
        return False
    try:
        attributes = display_attributes(node, enrich_fn, original_attribute=original_attribute)
    except Exception as exc:
        _report_image_failure(emitter, "enrichment", exc)
        return False
    for name, value in attributes.items():
        element[name] = value
    return True


def make_image_pass(
    *,
    filter_fn: ImageFilter | None = None,
    enrich_fn: ImageEnricher | None = None,
    original_attribute: str = ORIGINAL_SRC_ATTRIBUTE,
    emitter: DiagnosticEmitter | None = None,
) -> DefaultPass:
    """Return a default pass applying the dual-URL model to images."""
    emitter = emitter or LoggingEmitter()

    def _image_pass(element: Tag) -> bool:
        return apply_image_substitution(
            element,
            filter_fn=filter_fn,
            enrich_fn=enrich_fn,
            original_attribute=original_attribute,
            emitter=emitter,
        )

    return _image_pass


def image_markup(node: ImageNode) -> str:
    """Return the exported ``<img>`` tag for ``node``."""
    return format_start_tag("img", serialize(node))


def export_markup(
    markup: str,
    *,
    original_attribute: str = ORIGINAL_SRC_ATTRIBUTE,
) -> str:
    """Serialise a document so every image points at its canonical URL.

    Display-only URLs (and whatever tokens they carry) are dropped together
    with the internal attribute holding the canonical URL.
    """
    soup = BeautifulSoup(markup, FALLBACK_PARSER, multi_valued_attributes=None)
    for element in soup.find_all("img"):
        node = ingest(attribute_map(element), original_attribute=original_attribute)
        if element.has_attr(original_attribute):
            del element[original_attribute]
        if node is None:
            continue
        for name, value in serialize(node).items():
            element[name] = value
    return str(soup)


__all__ = [
    "apply_image_substitution",
    "export_markup",
    "image_markup",
    "make_image_pass",
]
