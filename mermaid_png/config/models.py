from pydantic import BaseModel, Field
from typing import Literal

MERMAID_CDN_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"


class RenderConfig(BaseModel):
    viewport_width: int = Field(default=2400, gt=0)
    viewport_height: int = Field(default=1600, gt=0)
    page_timeout_ms: int = Field(default=60_000, gt=0)
    render_timeout_ms: int = Field(default=45_000, gt=0)
    settle_timeout_ms: int = Field(default=15_000, gt=0)
    clip_margin: int = Field(default=10, ge=0)
    mermaid_url: str = MERMAID_CDN_URL
    theme: str = "default"
    theme_variables: dict[str, str] = Field(default_factory=lambda: {
        "primaryColor": "#fff",
        "primaryTextColor": "#000",
        "primaryBorderColor": "#000",
        "lineColor": "#000",
        "secondaryColor": "#f5f5f5",
        "tertiaryColor": "#f0f0f0",
    })
    security_level: Literal["strict", "loose", "antiscript", "sandbox"] = "loose"
    headless: bool = True
    browser_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )


class OutputConfig(BaseModel):
    directory: str = "./images"
    format: Literal["png", "jpeg"] = "png"
    quality: int = Field(default=85, ge=1, le=100)
    scale: float = Field(default=2.0, ge=1, le=5)
    converted_suffix: str = "-converted"
    fixed_suffix: str = "-fixed"


class MermaidPngConfig(BaseModel):
    render: RenderConfig = Field(default_factory=RenderConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
