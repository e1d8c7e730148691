"""Registry of per-tag transforms consulted by the render engine.

Transforms are plain callables receiving a :class:`TagRenderContext`. They can
be registered three ways:

`Mapping`
: :meth:`TransformRegistry.from_mapping` accepts ``{"img": fn, ...}``; keys are
  lowercased.

`Explicit`
: :meth:`TransformRegistry.register` binds a single callable to a tag.

`Declarative`
: the ``@transforms`` decorator stores a :class:`TransformDefinition` on the
  callable and :meth:`TransformRegistry.collect_from` gathers every decorated
  attribute of a module or class.

A tag holds at most one transform. Re-registering a tag is an error unless the
caller explicitly asks to replace the previous entry.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, cast

from .exceptions import DuplicateTransformError
from .units import TagTransform


@dataclass(frozen=True)
class TransformDefinition:
    """Descriptor installed on transform callables by the decorator."""

    tags: tuple[str, ...]
    name: str | None = None
    replace: bool = False


@dataclass(frozen=True)
class TransformRule:
    """Concrete transform bound to a tag."""

    tag: str
    name: str
    handler: TagTransform


def _normalise_tag(tag: str) -> str:
    if not isinstance(tag, str) or not tag.strip():
        msg = f"Transform tags must be non-empty strings, got {tag!r}"
        raise TypeError(msg)
    return tag.strip().lower()


class TransformRegistry:
    """Container mapping lowercase tag names to a single transform."""

    def __init__(self) -> None:
        self._rules: dict[str, TransformRule] = {}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, TagTransform] | None) -> TransformRegistry:
        """Build a registry from a ``{tag: transform}`` mapping."""
        registry = cls()
        for tag, handler in (mapping or {}).items():
            registry.register(tag, handler)
        return registry

    def register(
        self,
        tag: str,
        handler: TagTransform,
        *,
        name: str | None = None,
        replace: bool = False,
    ) -> None:
        """Bind ``handler`` to ``tag``."""
        if not callable(handler):
            msg = f"Transform for <{tag}> must be callable"
            raise TypeError(msg)
        key = _normalise_tag(tag)
        if key in self._rules and not replace:
            existing = self._rules[key].name
            raise DuplicateTransformError(
                f"A transform is already registered for <{key}> ({existing})"
            )
        rule_name = name or getattr(handler, "__name__", handler.__class__.__name__)
        self._rules[key] = TransformRule(tag=key, name=rule_name, handler=handler)

    def unregister(self, tag: str) -> None:
        """Remove the transform bound to ``tag`` if any."""
        self._rules.pop(_normalise_tag(tag), None)

    def collect_from(self, owner: Any) -> None:
        """Collect ``@transforms`` decorated callables from an object or module."""
        for attribute in dir(owner):
            handler = getattr(owner, attribute)
            definition = getattr(handler, "__transform__", None)
            if definition is None and hasattr(handler, "__func__"):
                definition = getattr(handler.__func__, "__transform__", None)
            if isinstance(definition, TransformDefinition):
                for tag in definition.tags:
                    self.register(tag, handler, name=definition.name, replace=definition.replace)

    def get(self, tag: str) -> TagTransform | None:
        """Return the transform bound to ``tag``."""
        rule = self._rules.get(tag.lower())
        return rule.handler if rule is not None else None

    def describe(self) -> list[dict[str, str]]:
        """Return a serialisable snapshot of the registered transforms."""
        return [{"tag": tag, "name": rule.name} for tag, rule in sorted(self._rules.items())]

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.lower() in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __bool__(self) -> bool:
        return bool(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)


def transforms(
    *tags: str,
    name: str | None = None,
    replace: bool = False,
) -> Callable[[TagTransform], TagTransform]:
    """Decorator used to declare a transform for one or more tags."""
    if not tags:
        msg = "@transforms requires at least one tag name"
        raise TypeError(msg)
    definition = TransformDefinition(
        tags=tuple(_normalise_tag(tag) for tag in tags),
        name=name,
        replace=replace,
    )

    def decorator(handler: TagTransform) -> TagTransform:
        cast(Any, handler).__transform__ = definition
        return handler

    return decorator


def coerce_registry(
    value: TransformRegistry | Mapping[str, TagTransform] | Iterable[Any] | None,
) -> TransformRegistry:
    """Return a registry for a mapping, a registry, or decorated owners."""
    if value is None:
        return TransformRegistry()
    if isinstance(value, TransformRegistry):
        return value
    if isinstance(value, Mapping):
        return TransformRegistry.from_mapping(value)
    if isinstance(value, (str, bytes)):
        msg = "Transforms must be a mapping, a registry or an iterable of owners"
        raise TypeError(msg)
    registry = TransformRegistry()
    for owner in value:
        if isinstance(getattr(owner, "__transform__", None), TransformDefinition):
            definition = owner.__transform__
            for tag in definition.tags:
                registry.register(tag, owner, name=definition.name, replace=definition.replace)
        else:
            registry.collect_from(owner)
    return registry


__all__ = [
    "TransformDefinition",
    "TransformRegistry",
    "TransformRule",
    "coerce_registry",
    "transforms",
]
