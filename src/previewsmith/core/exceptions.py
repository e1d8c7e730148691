"""Custom exception hierarchy for the preview rendering pipeline."""

from __future__ import annotations


class PreviewError(RuntimeError):
    """Base exception for preview rendering failures."""


class MarkupConversionError(PreviewError):
    """Raised when Markdown cannot be converted into HTML."""


class TransformExecutionError(PreviewError):
    """Raised when a caller-supplied tag transform fails to execute."""

    def __init__(self, tag_name: str, message: str) -> None:
        super().__init__(message)
        self.tag_name = tag_name


class InvalidTransformResultError(TransformExecutionError):
    """Raised when a tag transform returns a value of an unsupported shape."""


class DuplicateTransformError(PreviewError, ValueError):
    """Raised when a second transform is registered for the same tag."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "DuplicateTransformError",
    "InvalidTransformResultError",
    "MarkupConversionError",
    "PreviewError",
    "TransformExecutionError",
    "exception_hint",
    "exception_messages",
]
