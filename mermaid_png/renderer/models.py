"""Pydantic models for the rendering subsystem."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class RenderSpec(BaseModel):
    """Per-diagram render request. Bounds are checked upstream."""

    diagram_source: str
    output_path: str
    format: Literal["png", "jpeg"] = "png"
    quality: int = 85
    scale: float = 2.0
    verbose: bool = False


class BoundingBox(BaseModel):
    x: float
    y: float
    width: float
    height: float

    def expanded(self, margin: float) -> BoundingBox:
        """Grow the box by *margin* on all four sides."""
        return BoundingBox(
            x=self.x - margin,
            y=self.y - margin,
            width=self.width + 2 * margin,
            height=self.height + 2 * margin,
        )

    def as_clip(self) -> dict[str, Any]:
        return self.model_dump()
