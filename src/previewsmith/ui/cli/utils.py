"""Utility helpers shared across CLI commands."""

from __future__ import annotations

from pathlib import Path
import sys

import typer


STDIN_MARKER = "-"


def read_source(source: str) -> str:
    """Return the text of ``source``, reading standard input for ``"-"``."""
    if source == STDIN_MARKER:
        stream = sys.stdin
        if stream is None or stream.closed:
            return ""
        return stream.read()
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Failed to read input '{path}': {exc}") from exc


def write_output_file(target: Path, content: str) -> None:
    """Persist rendered content to disk, creating parent directories as needed."""
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors
        raise OSError(f"Failed to write output to '{target}': {exc}") from exc


def deliver(content: str, output: Path | None) -> None:
    """Write ``content`` to ``output`` or echo it on stdout."""
    if output is None:
        typer.echo(content)
        return
    write_output_file(output, content)


__all__ = ["STDIN_MARKER", "deliver", "read_source", "write_output_file"]
