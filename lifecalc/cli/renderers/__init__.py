"""Rich renderers for CLI output."""

from .trajectory_renderer import render_comparison, render_tax, render_trajectory

__all__ = ["render_comparison", "render_tax", "render_trajectory"]
