"""Locate Mermaid blocks in markdown and splice replacements into place."""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from pathlib import Path

from mermaid_png.converter.models import DiagramBlock

# The lazy body stops at the first closing fence, so matches never overlap.
# An opening fence with no closing fence produces no block.
MERMAID_FENCE = re.compile(r"```mermaid[ \t]*\r?\n(.*?)```", re.DOTALL)


def extract_mermaid_blocks(document: str) -> list[DiagramBlock]:
    """Return every Mermaid block in *document*, in document order."""
    return [
        DiagramBlock(
            content=m.group(1).strip(),
            start_index=m.start(),
            end_index=m.end(),
            full_match=m.group(0),
        )
        for m in MERMAID_FENCE.finditer(document)
    ]


def rewrite_blocks(
    document: str,
    blocks: Sequence[DiagramBlock],
    replacements: Sequence[str],
) -> str:
    """Replace each block span in *document* with its replacement.

    *blocks* must carry offsets into *document* in ascending order. Every
    splice shifts later offsets by ``len(replacement) - len(full_match)``;
    the running offset corrects for that instead of searching the partially
    rewritten text again.
    """
    if len(blocks) != len(replacements):
        raise ValueError(
            f"Got {len(replacements)} replacements for {len(blocks)} blocks"
        )

    rewritten = document
    offset = 0
    for block, replacement in zip(blocks, replacements):
        start = block.start_index + offset
        end = block.end_index + offset
        rewritten = rewritten[:start] + replacement + rewritten[end:]
        offset += len(replacement) - len(block.full_match)
    return rewritten


def format_mermaid_block(source: str) -> str:
    """Wrap diagram source back into a Mermaid fence."""
    return f"```mermaid\n{source}\n```"


def image_file_name(markdown_file: str | Path, index: int, fmt: str) -> str:
    """``{stem}-diagram-{index}.{fmt}`` for the 1-based block *index*."""
    return f"{Path(markdown_file).stem}-diagram-{index}.{fmt}"


def image_reference(markdown_file: str | Path, image_path: str | Path, index: int) -> str:
    """Markdown image line pointing at *image_path* relative to the document."""
    relative = os.path.relpath(image_path, Path(markdown_file).parent)
    return f"![Mermaid Diagram {index}]({Path(relative).as_posix()})"


def sibling_path(
    markdown_file: str | Path, suffix: str, extension: str | None = None
) -> Path:
    """Path next to *markdown_file* with *suffix* appended to its stem.

    The extension defaults to the source file's own.
    """
    path = Path(markdown_file)
    ext = extension if extension is not None else (path.suffix or ".md")
    return path.with_name(f"{path.stem}{suffix}{ext}")
