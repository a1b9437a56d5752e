"""Markdown conversion subsystem."""

from mermaid_png.converter.blocks import (
    extract_mermaid_blocks,
    image_file_name,
    image_reference,
    rewrite_blocks,
)
from mermaid_png.converter.converter import convert_markdown_file
from mermaid_png.converter.inputs import validate_input
from mermaid_png.converter.models import ConversionOptions, ConversionResult, DiagramBlock

__all__ = [
    "ConversionOptions",
    "ConversionResult",
    "DiagramBlock",
    "convert_markdown_file",
    "extract_mermaid_blocks",
    "image_file_name",
    "image_reference",
    "rewrite_blocks",
    "validate_input",
]
