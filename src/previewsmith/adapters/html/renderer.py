"""High-level preview renderer turning raw content into a render tree."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import html
from typing import Any

from previewsmith.core.classifier import ContentVerdict, resolve_content_type
from previewsmith.core.config import ContentTypeHint, PreviewConfig
from previewsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from previewsmith.core.engine import DefaultPass, RenderEngine
from previewsmith.core.exceptions import MarkupConversionError
from previewsmith.core.images import ImageEnricher, ImageFilter
from previewsmith.core.rules import TransformRegistry, coerce_registry
from previewsmith.core.units import Fragment, RenderTree, TagTransform

from ..handlers.links import make_link_pass, rewrite_links
from ..handlers.media import make_image_pass
from ..markdown import render_markdown


TransformsArgument = TransformRegistry | Mapping[str, TagTransform] | Iterable[Any] | None


class PreviewRenderer:
    """Render HTML or Markdown content through the tag transform pipeline."""

    def __init__(
        self,
        config: PreviewConfig | None = None,
        *,
        parser: str | None = None,
        emitter: DiagnosticEmitter | None = None,
        transforms: TransformsArgument = None,
    ) -> None:
        self.config = config or PreviewConfig()
        if parser is not None:
            self.config = self.config.model_copy(update={"parser": parser})
        self.emitter = emitter or LoggingEmitter()
        self.registry = coerce_registry(transforms)

    @property
    def parser_backend(self) -> str:
        return self.config.parser

    def register(self, handler: Any, tag: str | None = None, *, replace: bool = False) -> None:
        """Register additional transforms on demand.

        Arguments can be a callable bound to ``tag``, a callable decorated with
        :func:`transforms`, or a module/class exposing decorated attributes.
        """
        if tag is not None:
            self.registry.register(tag, handler, replace=replace)
            return
        if getattr(handler, "__transform__", None) is not None:
            for declared in handler.__transform__.tags:
                self.registry.register(declared, handler, replace=replace)
            return
        self.registry.collect_from(handler)

    def render(
        self,
        content: str | None,
        content_type: ContentTypeHint | None = None,
        transforms: TransformsArgument = None,
        *,
        image_filter: ImageFilter | None = None,
        image_enricher: ImageEnricher | None = None,
    ) -> RenderTree:
        """Render ``content`` into a tree of fragments and transformed units."""
        source = "" if content is None else str(content)
        verdict = resolve_content_type(source, content_type or self.config.content_type)
        registry = self._active_registry(transforms)

        try:
            markup = self._to_html(source, verdict)
            if not registry and image_filter is None and image_enricher is None:
                return self._passthrough(markup)

            engine = RenderEngine(
                parser=self.config.parser,
                emitter=self.emitter,
                defaults=self._default_passes(registry, image_filter, image_enricher),
            )
            tree = engine.render_tree(markup, registry)
            if engine.parser_backend != self.config.parser:
                self.config = self.config.model_copy(update={"parser": engine.parser_backend})
            return tree
        except Exception as exc:
            self.emitter.error("Preview rendering failed, showing content as text", exc)
            return RenderTree((Fragment(html.escape(source, quote=False)),))

    def _to_html(self, source: str, verdict: ContentVerdict) -> str:
        if verdict is not ContentVerdict.MARKDOWN:
            return source
        try:
            return render_markdown(source, self.config.markdown_extensions)
        except MarkupConversionError as exc:
            self.emitter.warning(str(exc), exc)
            self.emitter.event("markdown_fallback", {"reason": str(exc)})
            return source

    def _passthrough(self, markup: str) -> RenderTree:
        if not markup.strip():
            return RenderTree((Fragment(markup),) if markup else ())
        rewritten = rewrite_links(
            markup,
            target=self.config.link_target,
            rel=self.config.link_rel,
            normalize=self.config.normalize_links,
        )
        return RenderTree((Fragment(rewritten),) if rewritten else ())

    def _active_registry(self, transforms: TransformsArgument) -> TransformRegistry:
        if transforms is None:
            return self.registry
        extra = coerce_registry(transforms)
        if not self.registry:
            return extra
        merged = TransformRegistry()
        for source in (self.registry, extra):
            for tag in source:
                handler = source.get(tag)
                if handler is not None:
                    merged.register(tag, handler, replace=True)
        return merged

    def _default_passes(
        self,
        registry: TransformRegistry,
        image_filter: ImageFilter | None,
        image_enricher: ImageEnricher | None,
    ) -> dict[str, DefaultPass]:
        passes: dict[str, DefaultPass] = {
            "a": make_link_pass(
                target=self.config.link_target,
                rel=self.config.link_rel,
                normalize=self.config.normalize_links,
            )
        }
        if image_filter is not None or image_enricher is not None:
            passes["img"] = make_image_pass(
                filter_fn=image_filter,
                enrich_fn=image_enricher,
                original_attribute=self.config.original_src_attribute,
                emitter=self.emitter,
            )
        return passes


def render(
    content: str | None,
    content_type: ContentTypeHint | None = None,
    transforms: TransformsArgument = None,
    *,
    config: PreviewConfig | None = None,
    image_filter: ImageFilter | None = None,
    image_enricher: ImageEnricher | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> RenderTree:
    """Render ``content`` with a one-off :class:`PreviewRenderer`."""
    renderer = PreviewRenderer(config=config, emitter=emitter)
    return renderer.render(
        content,
        content_type,
        transforms,
        image_filter=image_filter,
        image_enricher=image_enricher,
    )


__all__ = ["PreviewRenderer", "render"]
