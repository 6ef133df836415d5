"""
Main CLI application for md-zapper.

Provides a Typer-based command-line interface for picking elements out of
HTML documents and turning them into clean markdown.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..config import get_config_manager, load_config
from ..converters.cleanup import cleanup_markdown
from ..core.document_model import HostDocument
from ..picker.collaborators import (
    ConfigSettingsStore,
    ConsoleHintOverlay,
    MemorySettingsStore,
    NullOverlay,
    PyperclipSink,
)
from ..picker.commands import CommandRouter
from ..picker.state_machine import Click, Picker, PointerMove
from .session import InteractiveSession, SessionConfig

# Initialize Typer app
app = typer.Typer(
    name="md-zapper",
    help="Pick elements from HTML documents and copy them out as clean markdown",
    add_completion=False,
    rich_markup_mode="rich"
)

# Global console for rich output
console = Console()

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else load_config().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_document(file_path: Path, base_url: Optional[str]) -> HostDocument:
    if not file_path.exists():
        console.print(f"[red]Error: File not found: {file_path}[/red]")
        raise typer.Exit(1)
    return HostDocument.from_file(file_path, location=base_url or load_config().base_url)


async def _pick_markdown(
    document: HostDocument,
    selectors: List[str],
    cleanup: bool,
    copy: bool,
) -> dict:
    """Drive a picker over every element matching ``selectors``."""
    picker = Picker(document, MemorySettingsStore(cleanup), PyperclipSink(), NullOverlay())
    router = CommandRouter(picker)
    await router.handle({"type": "TOGGLE_ZAP"})

    picked = 0
    for selector in selectors:
        for node in document.query_selector_all(selector):
            if node in picker.selection:
                continue
            await document.dispatch_event(PointerMove(node))
            if picker.hover != node:
                logger.info(f"Skipping ineligible element {node.describe()}")
                continue
            await document.dispatch_event(Click(node, shift=picked > 0))
            picked += 1

    result = await router.handle({"type": "COPY_MD" if copy else "GET_MD"})
    result["picked"] = picked
    return result


@app.command()
def convert(
    file_path: Path = typer.Argument(..., help="HTML document to pick from"),
    selectors: List[str] = typer.Option(..., "--select", "-s", help="CSS selector of elements to pick (repeatable)"),
    base_url: Optional[str] = typer.Option(None, "--base-url", "-b", help="Document URL for resolving links and images"),
    cleanup: Optional[bool] = typer.Option(None, "--cleanup/--no-cleanup", help="Apply markdown cleanup (default: from config)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write markdown to a file"),
    copy: bool = typer.Option(False, "--copy", "-c", help="Copy markdown to the clipboard"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
    """
    Pick elements by CSS selector and print their markdown.

    Each match is hovered and clicked exactly as in an interactive session,
    so ineligible elements (hidden, system or root nodes) are skipped.
    """
    _setup_logging(verbose)
    document = _load_document(file_path, base_url)
    if cleanup is None:
        cleanup = load_config().cleanup_markdown

    if copy and output:
        console.print("[red]Error: --copy and --output are mutually exclusive[/red]")
        raise typer.Exit(1)

    result = asyncio.run(_pick_markdown(document, selectors, cleanup, copy))

    if verbose:
        stats = document.get_stats()
        info_table = Table(title="Document Information", show_header=False)
        info_table.add_column("Property", style="cyan")
        info_table.add_column("Value", style="green")
        info_table.add_row("File", str(file_path))
        info_table.add_row("Location", str(stats['location']))
        info_table.add_row("Elements", str(stats['element_count']))
        info_table.add_row("Picked", str(result['picked']))
        info_table.add_row("Cleanup", "on" if cleanup else "off")
        console.print(info_table)

    if not result["ok"]:
        console.print(f"[red]Error: {result['error']}[/red]")
        raise typer.Exit(1)

    if copy:
        console.print(f"[green]Copied markdown for {result['picked']} element(s) to the clipboard[/green]")
        return

    markdown = result.get("md", "")
    if not markdown:
        console.print("[yellow]Nothing selected[/yellow]")
        raise typer.Exit(1)

    if output:
        output.write_text(markdown, encoding="utf-8")
        console.print(f"[green]Markdown saved to {output}[/green]")
    else:
        typer.echo(markdown, nl=not markdown.endswith("\n"))


@app.command()
def cleanup(
    file_path: Path = typer.Argument(..., help="Markdown file to normalize"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result to a file"),
) -> None:
    """
    Run the markdown cleanup pipeline over an existing file.
    """
    if not file_path.exists():
        console.print(f"[red]Error: File not found: {file_path}[/red]")
        raise typer.Exit(1)

    cleaned = cleanup_markdown(file_path.read_text(encoding="utf-8"))

    if output:
        output.write_text(cleaned, encoding="utf-8")
        console.print(f"[green]Cleaned markdown saved to {output}[/green]")
    else:
        typer.echo(cleaned, nl=False)


@app.command()
def interactive(
    file_path: Path = typer.Argument(..., help="HTML document to pick from"),
    base_url: Optional[str] = typer.Option(None, "--base-url", "-b", help="Document URL for resolving links and images"),
    render: bool = typer.Option(False, "--render", help="Render markdown previews instead of showing raw text"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
    """
    Start an interactive picking session on a document.
    """
    _setup_logging(verbose)
    document = _load_document(file_path, base_url)
    config = load_config()

    settings = ConfigSettingsStore(get_config_manager())
    overlay = ConsoleHintOverlay(console) if config.show_hints else NullOverlay()
    picker = Picker(document, settings, PyperclipSink(), overlay)
    session = InteractiveSession(
        document,
        picker,
        settings,
        config=SessionConfig(render_markdown=render),
        console=console,
    )

    try:
        asyncio.run(session.start_session())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interactive session ended[/yellow]")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    create_default: bool = typer.Option(False, "--create-default", help="Create default config file"),
    set_cleanup: Optional[bool] = typer.Option(None, "--cleanup/--no-cleanup", help="Enable or disable markdown cleanup"),
    set_base_url: Optional[str] = typer.Option(None, "--set-base-url", help="Default document URL for relative links"),
) -> None:
    """
    Manage md-zapper configuration.
    """
    config_manager = get_config_manager()

    if create_default:
        config_manager.create_default_config()
        console.print(f"[green]Created default configuration at {config_manager.config_file}[/green]")
        return

    if show:
        config_info = config_manager.get_config_info()
        config_display = f"""[bold]md-zapper Configuration[/bold]

[bold cyan]Conversion:[/bold cyan]
• Cleanup: {'✓' if config_info['cleanup_markdown'] else '✗'}
• Base URL: {config_info['base_url'] or '-'}

[bold yellow]Session:[/bold yellow]
• Show Hints: {'✓' if config_info['show_hints'] else '✗'}
• Log Level: {config_info['log_level']}

[bold magenta]Files:[/bold magenta]
• Config File: {config_info['config_file']}
• Exists: {'Yes' if config_info['config_exists'] else 'No'}"""

        console.print(Panel(config_display, border_style="green"))
        return

    if set_cleanup is not None or set_base_url is not None:
        current_config = config_manager.load_config()

        if set_cleanup is not None:
            current_config.cleanup_markdown = set_cleanup
            console.print(f"[green]Set cleanup to {'on' if set_cleanup else 'off'}[/green]")

        if set_base_url is not None:
            current_config.base_url = set_base_url or None
            console.print(f"[green]Set base URL to {set_base_url or '-'}[/green]")

        try:
            config_manager.save_config(current_config)
        except OSError as e:
            console.print(f"[red]Error saving configuration: {e}[/red]")
            raise typer.Exit(1)
        console.print("[green]Configuration saved[/green]")
        return

    # Default: show basic info
    console.print("Use [cyan]md-zapper config --show[/cyan] to see full configuration")
    console.print("Use [cyan]md-zapper config --create-default[/cyan] to create a default config file")


@app.command()
def info() -> None:
    """
    Show information about md-zapper.
    """
    config_info = get_config_manager().get_config_info()

    info_text = f"""[bold cyan]md-zapper - Element Picker to Markdown[/bold cyan]

Pick parts of an HTML page and copy them out as portable markdown.

[bold]Current Configuration:[/bold]
• Cleanup: {'✓ On' if config_info['cleanup_markdown'] else '✗ Off'}
• Config File: {'✓ Exists' if config_info['config_exists'] else '✗ Not Found'}

[bold]Conversion Rules:[/bold]
• Scripts, styles and noscript blocks are dropped
• <pre><code class="language-x"> becomes a fenced block tagged x
• Images without an http(s) source become <IMAGE WAS HERE>
• Relative links and images resolve against the document URL

[bold]Commands:[/bold]
• [cyan]md-zapper convert <file> -s <css>[/cyan] - Pick by selector
• [cyan]md-zapper interactive <file>[/cyan] - Pick interactively
• [cyan]md-zapper cleanup <file.md>[/cyan] - Normalize markdown
• [cyan]md-zapper config --show[/cyan] - Show configuration
    """

    console.print(Panel(info_text, border_style="blue"))


if __name__ == "__main__":
    app()
