"""Preview commands exposed by the ``previewsmith`` CLI."""

from __future__ import annotations

from typing import Annotated, get_args

import typer

from previewsmith.adapters.handlers.media import export_markup
from previewsmith.adapters.html.renderer import PreviewRenderer
from previewsmith.adapters.markdown import resolve_markdown_extensions
from previewsmith.core.classifier import classify as classify_content, matched_signatures
from previewsmith.core.config import ContentTypeHint, PreviewConfig
from previewsmith.core.images import ORIGINAL_SRC_ATTRIBUTE

from .._options import (
    OUTPUT_PANEL,
    ContentTypeOption,
    DebugOption,
    DisableMarkdownExtensionsOption,
    MarkdownExtensionsOption,
    OutputPathOption,
    ParserOption,
    SourceArgument,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, render_message, set_cli_state
from ..utils import deliver, read_source


_CONTENT_TYPES = get_args(ContentTypeHint)


def _load(source: str) -> str:
    try:
        return read_source(source)
    except OSError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


def classify(
    ctx: typer.Context,
    source: SourceArgument = "-",
    verbose: VerboseOption = 0,
) -> None:
    """Print whether the input looks like HTML or Markdown."""
    set_cli_state(ctx=ctx, verbosity=verbose)
    text = _load(source)
    verdict = classify_content(text)
    signatures = matched_signatures(text)
    if signatures:
        render_message("info", "Markdown signatures: " + ", ".join(signatures))
    typer.echo(verdict.value)


def render(
    ctx: typer.Context,
    source: SourceArgument = "-",
    content_type: ContentTypeOption = "auto",
    output: OutputPathOption = None,
    parser: ParserOption = None,
    markdown_extensions: MarkdownExtensionsOption = None,
    disable_markdown_extensions: DisableMarkdownExtensionsOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Render a document into preview HTML."""
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)
    hint = content_type.strip().lower()
    if hint not in _CONTENT_TYPES:
        emit_error(
            f"Unknown content type '{content_type}', expected one of: {', '.join(_CONTENT_TYPES)}."
        )
        raise typer.Exit(code=2)

    text = _load(source)
    extensions = resolve_markdown_extensions(markdown_extensions, disable_markdown_extensions)
    render_message("info", f"Extensions: {', '.join(extensions) or '(none)'}")
    config = PreviewConfig(content_type=hint, markdown_extensions=extensions)
    renderer = PreviewRenderer(config, parser=parser, emitter=CliEmitter(state=state))
    tree = renderer.render(text)
    render_message(
        "info", f"Rendered {len(tree.nodes)} node(s) with '{renderer.parser_backend}'."
    )
    deliver(tree.to_html(), output)


def export(
    ctx: typer.Context,
    source: SourceArgument = "-",
    output: OutputPathOption = None,
    original_attribute: Annotated[
        str,
        typer.Option(
            "--original-attribute",
            help="Attribute holding the canonical URL of on-screen images.",
            rich_help_panel=OUTPUT_PANEL,
        ),
    ] = ORIGINAL_SRC_ATTRIBUTE,
    verbose: VerboseOption = 0,
) -> None:
    """Serialise a live document so images point at their canonical URLs."""
    set_cli_state(ctx=ctx, verbosity=verbose)
    text = _load(source)
    deliver(export_markup(text, original_attribute=original_attribute), output)


__all__ = ["classify", "export", "render"]
