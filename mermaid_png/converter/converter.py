"""Markdown conversion: extract, optionally fix, render, rewrite, persist."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from mermaid_png.config.models import OutputConfig
from mermaid_png.converter.blocks import (
    extract_mermaid_blocks,
    format_mermaid_block,
    image_file_name,
    image_reference,
    rewrite_blocks,
    sibling_path,
)
from mermaid_png.converter.models import ConversionOptions, ConversionResult, DiagramBlock
from mermaid_png.errors import InputError, PersistenceError
from mermaid_png.fixer import fix_mermaid_syntax, validate_mermaid_syntax
from mermaid_png.renderer import MermaidRenderer, RenderSpec

logger = logging.getLogger(__name__)


async def _read_text(path: Path) -> str:
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def _write_text(path: Path, content: str) -> None:
    try:
        await asyncio.to_thread(path.write_text, content, encoding="utf-8")
    except OSError as e:
        raise PersistenceError(path, e) from e
    logger.info("wrote %s (%d bytes)", path, len(content))


def _apply_fixes(
    content: str, blocks: list[DiagramBlock], result: ConversionResult
) -> str | None:
    """Run the fixer on every block; return the patched document if anything changed."""
    replacements: list[str] = []
    changed = False
    for index, block in enumerate(blocks, start=1):
        fix = fix_mermaid_syntax(block.content)
        if fix.changes:
            result.fixes[index] = fix.changes
            changed = True
            replacements.append(format_mermaid_block(fix.fixed))
            logger.info("diagram %d: %s", index, "; ".join(fix.changes))
        else:
            replacements.append(block.full_match)
    if not changed:
        return None
    return rewrite_blocks(content, blocks, replacements)


async def convert_markdown_file(
    markdown_file: str | Path,
    options: ConversionOptions,
    renderer: MermaidRenderer,
    output_config: OutputConfig | None = None,
) -> ConversionResult:
    """Convert every Mermaid block in *markdown_file* to an image reference.

    Diagrams render one at a time on *renderer*'s shared browser. Any
    failure aborts the whole document; nothing is written until every
    diagram has rendered.
    """
    output_config = output_config or OutputConfig()
    source_path = Path(markdown_file)
    content = await _read_text(source_path)

    blocks = extract_mermaid_blocks(content)
    if not blocks:
        raise InputError("No Mermaid diagrams found in the markdown file")
    logger.debug("found %d mermaid block(s) in %s", len(blocks), source_path)

    result = ConversionResult(
        source_file=str(source_path),
        image_directory=options.output,
    )

    if options.validate_only or options.auto_fix:
        for index, block in enumerate(blocks, start=1):
            issues = validate_mermaid_syntax(block.content)
            if issues:
                result.issues[index] = issues

    patched: str | None = None
    if options.auto_fix:
        patched = _apply_fixes(content, blocks, result)
        if patched is not None:
            # Offsets are stale once blocks change length.
            content = patched
            blocks = extract_mermaid_blocks(content)

    if options.validate_only:
        return result

    image_dir = Path(options.output)
    try:
        image_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError(image_dir, e) from e

    references: list[str] = []
    for index, block in enumerate(blocks, start=1):
        image_path = image_dir / image_file_name(source_path, index, options.format)
        logger.info("rendering diagram %d/%d -> %s", index, len(blocks), image_path)
        await renderer.render(
            RenderSpec(
                diagram_source=block.content,
                output_path=str(image_path),
                format=options.format,
                quality=options.quality,
                scale=options.scale,
                verbose=options.verbose,
            )
        )
        result.image_files.append(str(image_path))
        references.append(image_reference(source_path, image_path, index))

    output_file = sibling_path(source_path, output_config.converted_suffix, ".md")
    await _write_text(output_file, rewrite_blocks(content, blocks, references))
    result.output_file = str(output_file)
    result.converted_count = len(blocks)

    if patched is not None:
        fixed_file = sibling_path(source_path, output_config.fixed_suffix)
        await _write_text(fixed_file, patched)
        result.fixed_file = str(fixed_file)

    return result
