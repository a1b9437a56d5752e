"""Headless-browser rendering of Mermaid diagrams."""

from mermaid_png.renderer.models import BoundingBox, RenderSpec
from mermaid_png.renderer.renderer import MermaidRenderer, build_page_html
from mermaid_png.renderer.session import RenderSession

__all__ = [
    "BoundingBox",
    "MermaidRenderer",
    "RenderSession",
    "RenderSpec",
    "build_page_html",
]
