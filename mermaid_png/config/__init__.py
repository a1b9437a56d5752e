from .loader import load_config
from .models import MermaidPngConfig, OutputConfig, RenderConfig

__all__ = [
    "MermaidPngConfig",
    "OutputConfig",
    "RenderConfig",
    "load_config",
]
