"""Validation of user-supplied paths and options before conversion."""

from __future__ import annotations

import os
from pathlib import Path

from mermaid_png.config.models import OutputConfig
from mermaid_png.converter.models import ConversionOptions

MARKDOWN_EXTENSIONS = (".md", ".markdown")


def validate_input(
    markdown_file: str | Path,
    defaults: OutputConfig | None = None,
    *,
    output: str | None = None,
    format: str | None = None,
    quality: int | str | None = None,
    scale: float | str | None = None,
    verbose: bool = False,
    validate_only: bool = False,
    auto_fix: bool = False,
) -> ConversionOptions:
    """Check the input file and option ranges.

    Unset options fall back to *defaults*. Raises ValueError with a
    user-facing message on the first problem found.
    """
    defaults = defaults or OutputConfig()
    path = Path(markdown_file)

    if not path.exists() or not os.access(path, os.R_OK):
        raise ValueError(f"Cannot read markdown file: {markdown_file}")
    if not path.is_file():
        raise ValueError(f"{markdown_file} is not a file")
    if path.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise ValueError("Input file must be a markdown file (.md or .markdown)")

    fmt = (format or defaults.format).lower()
    if fmt not in ("png", "jpeg"):
        raise ValueError('Format must be either "png" or "jpeg"')

    try:
        quality_value = int(quality if quality is not None else defaults.quality)
    except (TypeError, ValueError):
        quality_value = 0
    if not 1 <= quality_value <= 100:
        # PNG screenshots take no quality setting.
        if fmt == "jpeg":
            raise ValueError("JPEG quality must be between 1 and 100")
        quality_value = defaults.quality

    try:
        scale_value = float(scale if scale is not None else defaults.scale)
    except (TypeError, ValueError):
        scale_value = 0.0
    if not 1 <= scale_value <= 5:
        raise ValueError("Scale must be between 1 and 5")

    return ConversionOptions(
        output=str(Path(output or defaults.directory).resolve()),
        format=fmt,
        quality=quality_value,
        scale=scale_value,
        verbose=verbose,
        validate_only=validate_only,
        auto_fix=auto_fix,
    )
