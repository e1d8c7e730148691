"""CLI command implementations."""

from __future__ import annotations

from .preview import classify, export, render


__all__ = ["classify", "export", "render"]
