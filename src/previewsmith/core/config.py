"""Configuration model used by the preview renderer.

PreviewConfig

`parser` (`str`)
: BeautifulSoup tree builder used to parse HTML. Unknown builders fall back to
  the built-in ``html.parser`` at render time.

`content_type` (`"auto" | "html" | "markdown"`)
: Default content type applied when a render call does not pin one. ``auto``
  runs the classifier on every input.

`link_target` (`str`)
: Value injected as ``target`` on links lacking one.

`link_rel` (`str`)
: Value injected as ``rel`` on links lacking one.

`normalize_links` (`bool`)
: Rewrite bare domains in ``href`` to absolute ``https://`` URLs.

`markdown_extensions` (`list[str] | None`)
: Python-Markdown extensions used to convert lightweight markup. ``None``
  selects the adapter defaults. Strings separated by commas or whitespace are
  split.

`original_src_attribute` (`str`)
: Attribute carrying the canonical URL of an image on screen.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from previewsmith.adapters.markdown import (
    deduplicate_markdown_extensions,
    normalize_markdown_extensions,
)


ContentTypeHint = Literal["auto", "html", "markdown"]


class PreviewConfig(BaseModel):
    """Settings shared by every render performed with a renderer instance."""

    model_config = ConfigDict(extra="forbid")

    parser: str = "html.parser"
    content_type: ContentTypeHint = "auto"
    link_target: str = "_blank"
    link_rel: str = "noopener noreferrer"
    normalize_links: bool = True
    markdown_extensions: list[str] | None = None
    original_src_attribute: str = "data-original-src"

    @field_validator("link_rel", "link_target", "original_src_attribute")
    @classmethod
    def _require_value(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("value must not be empty")
        return stripped

    @field_validator("markdown_extensions", mode="before")
    @classmethod
    def _split_names(cls, value: Any) -> Any:
        if value is None:
            return None
        return deduplicate_markdown_extensions(normalize_markdown_extensions(value))


__all__ = ["ContentTypeHint", "PreviewConfig"]
