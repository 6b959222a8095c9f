"""Manifest template rendering."""

from .render import RenderData, RenderError, render_dir, render_template

__all__ = ["RenderData", "RenderError", "render_dir", "render_template"]
