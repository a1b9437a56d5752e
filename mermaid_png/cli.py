"""CLI entry point for mermaid-png."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from mermaid_png.config import MermaidPngConfig, load_config
from mermaid_png.config.loader import DEFAULT_CONFIG_TEMPLATE
from mermaid_png.converter import (
    ConversionOptions,
    ConversionResult,
    convert_markdown_file,
    validate_input,
)
from mermaid_png.errors import MermaidPngError
from mermaid_png.renderer import MermaidRenderer, RenderSession

app = typer.Typer(
    name="mermaid-png",
    help="Convert Mermaid diagrams in markdown files to PNG or JPEG images.",
)

config_app = typer.Typer(help="Manage mermaid-png configuration.")
app.add_typer(config_app, name="config")

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Global state
_config: MermaidPngConfig | None = None


def _get_config() -> MermaidPngConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to mermaid-png.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _setup_logging(cfg: MermaidPngConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else _LOG_LEVELS[cfg.log_level]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


async def _run(
    markdown_file: str, options: ConversionOptions, cfg: MermaidPngConfig
) -> ConversionResult:
    async with RenderSession(cfg.render) as session:
        renderer = MermaidRenderer(session, cfg.render)
        return await convert_markdown_file(markdown_file, options, renderer, cfg.output)


def _display_issues(result: ConversionResult) -> None:
    table = Table(title=f"Syntax check: {escape(result.source_file)}")
    table.add_column("Diagram", justify="right", style="cyan")
    table.add_column("Issues", style="yellow")
    table.add_column("Fixes", style="green")
    for index in sorted(set(result.issues) | set(result.fixes)):
        table.add_row(
            str(index),
            escape("\n".join(result.issues.get(index, []))) or "-",
            escape("\n".join(result.fixes.get(index, []))) or "-",
        )
    rprint(table)


def _convert(
    markdown_file: str,
    *,
    output: str | None,
    format: str | None,
    quality: str | None,
    scale: str | None,
    verbose: bool,
    validate_only: bool,
    auto_fix: bool,
) -> ConversionResult:
    cfg = _get_config()
    _setup_logging(cfg, verbose)
    try:
        options = validate_input(
            markdown_file,
            cfg.output,
            output=output,
            format=format,
            quality=quality,
            scale=scale,
            verbose=verbose,
            validate_only=validate_only,
            auto_fix=auto_fix,
        )
        return asyncio.run(_run(markdown_file, options, cfg))
    except (MermaidPngError, ValueError) as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def convert(
    markdown_file: str = typer.Argument(..., help="Markdown file containing Mermaid diagrams"),
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Directory to save the generated images")
    ] = None,
    format: Annotated[
        str | None, typer.Option("--format", "-f", help="Image format (png or jpeg)")
    ] = None,
    quality: Annotated[
        str | None, typer.Option("--quality", "-q", help="JPEG quality (1-100)")
    ] = None,
    scale: Annotated[
        str | None, typer.Option("--scale", "-s", help="Device scale factor (1-5)")
    ] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    validate_only: bool = typer.Option(
        False, "--validate-only", help="Check diagram syntax without rendering"
    ),
    auto_fix: bool = typer.Option(
        False, "--auto-fix", help="Repair known-bad Mermaid patterns before rendering"
    ),
) -> None:
    """Render every Mermaid block and write a converted markdown file."""
    rprint(f"[bold]Converting[/bold] {escape(markdown_file)}...")
    result = _convert(
        markdown_file,
        output=output,
        format=format,
        quality=quality,
        scale=scale,
        verbose=verbose,
        validate_only=validate_only,
        auto_fix=auto_fix,
    )

    if result.issues or result.fixes:
        _display_issues(result)

    if validate_only:
        rprint(
            f"[yellow]{result.issue_count} issue(s)[/yellow] across "
            f"{len(result.issues)} diagram(s). Nothing rendered."
        )
        return

    lines = [
        f"[dim]Diagrams:[/dim]  {result.converted_count}",
        f"[dim]Output:[/dim]    {escape(str(result.output_file))}",
        f"[dim]Images:[/dim]    {escape(result.image_directory)}",
    ]
    if result.fixed_file:
        lines.append(f"[dim]Fixed:[/dim]     {escape(result.fixed_file)}")
    rprint(Panel("\n".join(lines), title="Conversion Complete", border_style="green"))


@app.command()
def check(
    markdown_file: str = typer.Argument(..., help="Markdown file containing Mermaid diagrams"),
    fix: bool = typer.Option(False, "--fix", help="Also show what --auto-fix would change"),
) -> None:
    """Check Mermaid syntax without rendering anything."""
    result = _convert(
        markdown_file,
        output=None,
        format=None,
        quality=None,
        scale=None,
        verbose=False,
        validate_only=True,
        auto_fix=fix,
    )
    if not result.issues and not result.fixes:
        rprint("[green]No known problem patterns found.[/green]")
        return
    _display_issues(result)
    if result.issues:
        raise typer.Exit(1)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default mermaid-png.yaml in current directory."""
    target = Path("mermaid-png.yaml")
    if target.exists() and not force:
        rprint("[yellow]mermaid-png.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {escape(str(target))}")


if __name__ == "__main__":
    app()
