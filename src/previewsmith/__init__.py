"""Primary public API for previewsmith."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from previewsmith.adapters.handlers.links import apply_link_safety, rewrite_links
from previewsmith.adapters.handlers.media import export_markup, image_markup
from previewsmith.adapters.html import PreviewRenderer, render
from previewsmith.adapters.markdown import DEFAULT_MARKDOWN_EXTENSIONS, render_markdown
from previewsmith.core.classifier import ContentVerdict, classify, resolve_content_type
from previewsmith.core.config import ContentTypeHint, PreviewConfig
from previewsmith.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
)
from previewsmith.core.engine import RenderEngine
from previewsmith.core.exceptions import (
    DuplicateTransformError,
    InvalidTransformResultError,
    MarkupConversionError,
    PreviewError,
    TransformExecutionError,
)
from previewsmith.core.images import (
    ImageNode,
    ImageReference,
    clean_src,
    display_attributes,
    extract_image_urls,
    ingest,
    present,
    serialize,
)
from previewsmith.core.rules import TransformRegistry, transforms
from previewsmith.core.units import (
    Element,
    Fragment,
    Literal,
    RenderTree,
    TagRenderContext,
    Unit,
)
from previewsmith.core.urls import (
    is_allowed_uri,
    is_external_url,
    normalize_url,
    sanitize_url,
)


try:
    __version__ = _pkg_version("previewsmith")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "DEFAULT_MARKDOWN_EXTENSIONS",
    "ContentTypeHint",
    "ContentVerdict",
    "DiagnosticEmitter",
    "DuplicateTransformError",
    "Element",
    "Fragment",
    "ImageNode",
    "ImageReference",
    "InvalidTransformResultError",
    "Literal",
    "LoggingEmitter",
    "MarkupConversionError",
    "NullEmitter",
    "PreviewConfig",
    "PreviewError",
    "PreviewRenderer",
    "RecordingEmitter",
    "RenderEngine",
    "RenderTree",
    "TagRenderContext",
    "TransformExecutionError",
    "TransformRegistry",
    "Unit",
    "__version__",
    "apply_link_safety",
    "classify",
    "clean_src",
    "display_attributes",
    "export_markup",
    "extract_image_urls",
    "image_markup",
    "ingest",
    "is_allowed_uri",
    "is_external_url",
    "normalize_url",
    "present",
    "render",
    "render_markdown",
    "resolve_content_type",
    "rewrite_links",
    "sanitize_url",
    "serialize",
    "transforms",
]
