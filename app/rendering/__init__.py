from .pdf_renderer import PLACEHOLDER_TEXT, RenderStyle, render_sections

__all__ = ["PLACEHOLDER_TEXT", "RenderStyle", "render_sections"]
