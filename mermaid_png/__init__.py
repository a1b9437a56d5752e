"""mermaid-png: render Mermaid blocks in markdown to images."""

__version__ = "0.1.0"
