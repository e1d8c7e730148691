"""Values exchanged between tag transforms and the render engine.

A transform returns a :data:`TransformResult`, which has exactly two cases:

`Literal`
: markup that the engine parses and visits again.

`Unit`
: a terminal, caller-owned render handle spliced in place of the element.

The engine produces a :class:`RenderTree` whose nodes are :class:`Fragment`
(verbatim HTML), :class:`Element` (a pass-through element that contains units
somewhere below it) or :class:`Unit`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
import html
from types import MappingProxyType
from typing import Any, Union


VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


@dataclass(frozen=True, slots=True)
class TagRenderContext:
    """Read-only view of an element handed to a tag transform."""

    tag_name: str
    attributes: Mapping[str, str]
    inner_html: str = ""
    original_html: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return an attribute value looked up case-insensitively."""
        return self.attributes.get(name.lower(), default)


@dataclass(frozen=True, slots=True)
class Literal:
    """Markup returned by a transform, interpreted again by the engine."""

    markup: str


@dataclass(frozen=True, slots=True)
class Fragment:
    """Verbatim HTML inserted as-is by the host."""

    html: str


@dataclass(frozen=True, slots=True)
class Unit:
    """Opaque render handle produced by a transform."""

    handle: Any
    children: tuple[RenderNode, ...] = ()


@dataclass(frozen=True, slots=True)
class Element:
    """Pass-through element kept structured because a descendant is a unit."""

    tag_name: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    children: tuple[RenderNode, ...] = ()


RenderNode = Union[Fragment, Element, Unit]
TransformResult = Union[Literal, Unit, str]
TagTransform = Callable[[TagRenderContext], TransformResult]
UnitRenderer = Callable[[Unit, str], str]


def format_start_tag(tag_name: str, attributes: Mapping[str, str]) -> str:
    """Serialise the opening tag of an element."""
    parts = [tag_name]
    for name, value in attributes.items():
        if value is None:
            parts.append(name)
            continue
        parts.append(f'{name}="{html.escape(str(value), quote=True)}"')
    return "<" + " ".join(parts) + ">"


def format_element(tag_name: str, attributes: Mapping[str, str], inner_html: str) -> str:
    """Serialise a full element around already rendered children."""
    start = format_start_tag(tag_name, attributes)
    if tag_name in VOID_ELEMENTS and not inner_html:
        return start
    return f"{start}{inner_html}</{tag_name}>"


def merge_fragments(nodes: list[RenderNode]) -> list[RenderNode]:
    """Join consecutive fragments so the tree stays as flat as possible."""
    merged: list[RenderNode] = []
    for node in nodes:
        if isinstance(node, Fragment) and merged and isinstance(merged[-1], Fragment):
            merged[-1] = Fragment(merged[-1].html + node.html)
        elif isinstance(node, Fragment) and not node.html:
            continue
        else:
            merged.append(node)
    return merged


def _default_unit_renderer(unit: Unit, children_html: str) -> str:
    handle = unit.handle
    render = getattr(handle, "__html__", None)
    body = render() if callable(render) else str(handle)
    return body + children_html


@dataclass(frozen=True, slots=True)
class RenderTree:
    """Result of a render pass, ready to be mounted by the host."""

    nodes: tuple[RenderNode, ...] = ()

    @property
    def is_literal(self) -> bool:
        """Return True when the whole tree is plain HTML without units."""
        return all(isinstance(node, Fragment) for node in self.nodes)

    def units(self) -> Iterator[Unit]:
        """Iterate over every unit in document order."""

        def _walk(nodes: tuple[RenderNode, ...]) -> Iterator[Unit]:
            for node in nodes:
                if isinstance(node, Unit):
                    yield node
                    yield from _walk(node.children)
                elif isinstance(node, Element):
                    yield from _walk(node.children)

        yield from _walk(self.nodes)

    def to_html(self, render_unit: UnitRenderer | None = None) -> str:
        """Serialise the tree, delegating units to ``render_unit``.

        Without a callback a unit renders through its handle's ``__html__``
        method, or ``str`` of the handle, followed by its children.
        """
        renderer = render_unit or _default_unit_renderer

        def _serialise(node: RenderNode) -> str:
            if isinstance(node, Fragment):
                return node.html
            inner = "".join(_serialise(child) for child in node.children)
            if isinstance(node, Unit):
                return renderer(node, inner)
            return format_element(node.tag_name, node.attributes, inner)

        return "".join(_serialise(node) for node in self.nodes)

    def __str__(self) -> str:
        return self.to_html()


__all__ = [
    "VOID_ELEMENTS",
    "Element",
    "Fragment",
    "Literal",
    "RenderNode",
    "RenderTree",
    "TagRenderContext",
    "TagTransform",
    "TransformResult",
    "Unit",
    "UnitRenderer",
    "format_element",
    "format_start_tag",
    "merge_fragments",
]
