"""HTML preview rendering adapter."""

from __future__ import annotations

from .renderer import PreviewRenderer, render


__all__ = ["PreviewRenderer", "render"]
