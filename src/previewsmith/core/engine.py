"""Tag render dispatcher.

:class:`RenderEngine` parses HTML with BeautifulSoup and walks the tree in
document order. Each element is handled as follows:

1. When no transform is registered for the tag, an optional default pass
   registered for that tag (link safety for ``a``, image substitution for
   ``img``) mutates the element in place. A default pass and a transform are
   mutually exclusive for a given tag.
2. Without a transform, or when the tag is suppressed, the element passes
   through and its children are visited.
3. Otherwise the transform receives a :class:`TagRenderContext`:

   - a raised exception or a malformed result is reported and the element
     passes through as if no transform existed;
   - a :class:`Unit` replaces the element and receives the rendered children,
     appended after any children the unit already declares;
   - a :class:`Literal` that does not start with ``<`` is emitted as text;
     otherwise it is parsed and visited again with the producing tag added to
     the suppressed set, which prevents a transform from feeding itself.

The suppressed set is threaded explicitly through every recursive call, so
cycle protection does not depend on call-stack depth.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
import html

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.element import NavigableString, PageElement, Tag

from .diagnostics import DiagnosticEmitter, LoggingEmitter
from .exceptions import InvalidTransformResultError, TransformExecutionError
from .rules import TransformRegistry
from .units import (
    Element,
    Fragment,
    Literal,
    RenderNode,
    RenderTree,
    TagRenderContext,
    Unit,
    format_element,
    merge_fragments,
)


DefaultPass = Callable[[Tag], bool]
"""In-place element rewrite; returning ``False`` drops the element."""

FALLBACK_PARSER = "html.parser"


def attribute_map(element: Tag) -> dict[str, str]:
    """Return element attributes with lowercase keys and string values."""
    attributes: dict[str, str] = {}
    for key, value in (element.attrs or {}).items():
        if value is None:
            text = ""
        elif isinstance(value, str):
            text = value
        elif isinstance(value, Iterable):
            text = " ".join(str(item) for item in value)
        else:
            text = str(value)
        attributes[str(key).lower()] = text
    return attributes


def build_context(element: Tag) -> TagRenderContext:
    """Capture the read-only view handed to a transform."""
    return TagRenderContext(
        tag_name=(element.name or "").lower(),
        attributes=attribute_map(element),
        inner_html=element.decode_contents(),
        original_html=str(element),
    )


class RenderEngine:
    """Parse HTML and dispatch elements to registered transforms."""

    def __init__(
        self,
        *,
        parser: str = FALLBACK_PARSER,
        emitter: DiagnosticEmitter | None = None,
        defaults: Mapping[str, DefaultPass] | None = None,
    ) -> None:
        self.parser_backend = parser
        self.emitter = emitter or LoggingEmitter()
        self.defaults: dict[str, DefaultPass] = {
            tag.lower(): handler for tag, handler in (defaults or {}).items()
        }

    def parse(self, markup: str) -> list[PageElement]:
        """Parse ``markup`` and return its top-level nodes."""
        try:
            soup = BeautifulSoup(markup, self.parser_backend, multi_valued_attributes=None)
        except FeatureNotFound:
            if self.parser_backend == FALLBACK_PARSER:
                raise
            self.emitter.event(
                "parser_fallback",
                {"preferred": self.parser_backend, "fallback": FALLBACK_PARSER},
            )
            self.parser_backend = FALLBACK_PARSER
            soup = BeautifulSoup(markup, FALLBACK_PARSER, multi_valued_attributes=None)
        return _fragment_roots(soup, markup, self.parser_backend)

    def render_tree(
        self,
        markup: str,
        registry: TransformRegistry | None = None,
    ) -> RenderTree:
        """Render ``markup`` through the general tree-walking path."""
        visitor = _TreeVisitor(self, registry or TransformRegistry())
        try:
            roots = self.parse(markup)
        except Exception as exc:
            self.emitter.error("Unable to parse HTML content, rendering it as text", exc)
            return RenderTree((Fragment(html.escape(markup, quote=False)),))
        return RenderTree(tuple(visitor.render_nodes(roots, frozenset())))


class _TreeVisitor:
    """Pre-order visitor producing render nodes for one render call."""

    def __init__(self, engine: RenderEngine, registry: TransformRegistry) -> None:
        self.engine = engine
        self.registry = registry

    def render_nodes(
        self, nodes: Iterable[PageElement], suppressed: frozenset[str]
    ) -> list[RenderNode]:
        rendered: list[RenderNode] = []
        for node in list(nodes):
            rendered.extend(self.render_node(node, suppressed))
        return merge_fragments(rendered)

    def render_node(self, node: PageElement, suppressed: frozenset[str]) -> list[RenderNode]:
        try:
            return self._render_node(node, suppressed)
        except RecursionError:
            if not isinstance(node, Tag):
                raise
            # Too deep to visit: the subtree is kept verbatim. When even that
            # fails the error unwinds to an ancestor with more headroom.
            markup = node.decode()
            self.engine.emitter.warning(
                f"<{node.name}> is nested too deeply, rendering its subtree unchanged"
            )
            return [Fragment(markup)]

    def _render_node(self, node: PageElement, suppressed: frozenset[str]) -> list[RenderNode]:
        if not isinstance(node, Tag):
            if isinstance(node, NavigableString):
                return [Fragment(node.output_ready(formatter="minimal"))]
            return []

        tag_name = (node.name or "").lower()

        if tag_name not in self.registry:
            default = self.engine.defaults.get(tag_name)
            if default is not None and default(node) is False:
                return []

        transform = None if tag_name in suppressed else self.registry.get(tag_name)
        if transform is None:
            return self.passthrough(node, suppressed)

        try:
            result = transform(build_context(node))
        except Exception as exc:
            error = TransformExecutionError(tag_name, f"Transform for <{tag_name}> raised: {exc}")
            error.__cause__ = exc
            self._report(tag_name, error)
            return self.passthrough(node, suppressed)

        if isinstance(result, Unit):
            children = self.render_nodes(node.children, suppressed)
            if children:
                return [replace(result, children=tuple(result.children) + tuple(children))]
            return [result]

        if isinstance(result, str):
            result = Literal(result)

        if isinstance(result, Literal) and isinstance(result.markup, str):
            return self.render_literal(result.markup, tag_name, suppressed)

        self._report(
            tag_name,
            InvalidTransformResultError(
                tag_name,
                f"Transform for <{tag_name}> returned {type(result).__name__}, "
                "expected Literal, Unit or str",
            ),
        )
        return self.passthrough(node, suppressed)

    def render_literal(
        self, markup: str, tag_name: str, suppressed: frozenset[str]
    ) -> list[RenderNode]:
        if not markup.strip().startswith("<"):
            return [Fragment(html.escape(markup, quote=False))]
        try:
            roots = self.engine.parse(markup)
        except Exception as exc:
            self.engine.emitter.warning(
                f"Unable to parse markup returned for <{tag_name}>, rendering it as text", exc
            )
            return [Fragment(html.escape(markup, quote=False))]
        return self.render_nodes(roots, suppressed | {tag_name})

    def passthrough(self, element: Tag, suppressed: frozenset[str]) -> list[RenderNode]:
        tag_name = (element.name or "").lower()
        attributes = attribute_map(element)
        children = self.render_nodes(element.children, suppressed)
        if all(isinstance(child, Fragment) for child in children):
            inner = "".join(child.html for child in children)  # type: ignore[union-attr]
            return [Fragment(format_element(tag_name, attributes, inner))]
        return [Element(tag_name, attributes, tuple(children))]

    def _report(self, tag_name: str, error: TransformExecutionError) -> None:
        emitter = self.engine.emitter
        emitter.warning(str(error), error)
        emitter.event("transform_failed", {"tag": tag_name, "reason": str(error)})


def _fragment_roots(soup: BeautifulSoup, markup: str, parser: str) -> list[PageElement]:
    """Return the nodes of ``markup`` without parser-synthesised wrappers."""
    lowered = markup.lower()
    if parser == FALLBACK_PARSER or "<html" in lowered or soup.body is None:
        return list(soup.contents)
    if "<body" in lowered:
        return [soup.body]
    roots: list[PageElement] = []
    if soup.head is not None and "<head" in lowered:
        roots.append(soup.head)
    roots.extend(soup.body.contents)
    return roots


__all__ = [
    "FALLBACK_PARSER",
    "DefaultPass",
    "RenderEngine",
    "attribute_map",
    "build_context",
]
