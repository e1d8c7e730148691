"""Public CLI exports for previewsmith."""

from __future__ import annotations

from .app import app, main
from .commands import classify, export, render
from .state import debug_enabled, emit_error, emit_warning, get_cli_state


__all__ = [
    "app",
    "classify",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "export",
    "get_cli_state",
    "main",
    "render",
]
