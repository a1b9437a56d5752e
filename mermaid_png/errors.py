"""Exception hierarchy shared by the converter and renderer."""

from __future__ import annotations

from pathlib import Path


class MermaidPngError(Exception):
    """Base class for every failure that aborts a conversion."""


class InputError(MermaidPngError):
    """The document has nothing to convert."""


class RenderError(MermaidPngError):
    """A single diagram could not be rendered."""


class RenderTimeoutError(RenderError):
    """The page did not signal completion in time."""


class RenderEngineError(RenderError):
    """Mermaid itself reported a failure."""

    def __init__(self, message: str) -> None:
        self.engine_message = message
        super().__init__(f"Mermaid render failed: {message}")


class ElementNotFoundError(RenderError):
    """The diagram container is missing from the page."""


class DimensionError(RenderError):
    """The diagram container has no measurable bounding box."""


class PersistenceError(MermaidPngError):
    """Wraps filesystem errors with the path that failed."""

    def __init__(self, path: str | Path, cause: OSError) -> None:
        self.path = str(path)
        super().__init__(f"Failed to write {path}: {cause}")
        self.__cause__ = cause
