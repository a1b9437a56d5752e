"""Pydantic models for the conversion subsystem."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class DiagramBlock(BaseModel):
    """A fenced Mermaid block located in a document.

    Offsets index into the document the block was extracted from;
    ``full_match`` is exactly ``document[start_index:end_index]``.
    """

    content: str
    start_index: int
    end_index: int
    full_match: str


class ConversionOptions(BaseModel):
    """Validated settings handed to the converter."""

    output: str
    format: Literal["png", "jpeg"] = "png"
    quality: int = Field(default=85, ge=1, le=100)
    scale: float = Field(default=2.0, ge=1, le=5)
    verbose: bool = False
    validate_only: bool = False
    auto_fix: bool = False


class ConversionResult(BaseModel):
    """Summary of one markdown conversion."""

    source_file: str
    output_file: str | None = None
    image_directory: str
    converted_count: int = 0
    image_files: list[str] = Field(default_factory=list)
    fixed_file: str | None = None
    issues: dict[int, list[str]] = Field(default_factory=dict)  # 1-based block index
    fixes: dict[int, list[str]] = Field(default_factory=dict)

    @property
    def issue_count(self) -> int:
        return sum(len(v) for v in self.issues.values())
