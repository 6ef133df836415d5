"""
Interactive picking session for md-zapper.

A line-oriented stand-in for the browser: plain lines become input events
(pointer moves, clicks, keys) dispatched to the document, and slash lines go
through the command router the same way a toolbar button would.
"""

from __future__ import annotations

import asyncio
import shlex
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..core.document_model import HostDocument
from ..picker.collaborators import SettingsStore
from ..picker.commands import CommandRouter
from ..picker.state_machine import Click, KeyDown, Picker, PointerMove


@dataclass
class SessionConfig:
    """Configuration for interactive sessions."""

    render_markdown: bool = False
    show_hover_changes: bool = True


# Plain-line inputs and the key events they stand for
KEY_INPUTS: Dict[str, KeyDown] = {
    "enter": KeyDown("Enter"),
    "shift-enter": KeyDown("Enter", shift=True),
    "up": KeyDown("ArrowUp"),
    "down": KeyDown("ArrowDown"),
    "esc": KeyDown("Escape"),
    "copy": KeyDown("c", ctrl=True),
}

HELP_TEXT = """
**Input events** (need the zapper enabled, see `/toggle`):

- `point <css>` move the pointer over the first match
- `point! <css>` same, holding Alt (smart container)
- `click` / `shift-click` click the hovered element
- `enter` / `shift-enter` select the hovered element
- `up` / `down` hover the parent / first child
- `copy` Ctrl+C, copy markdown and clear the selection
- `esc` exit the zapper

**Commands:**

- `/toggle` enable or disable the zapper
- `/md` show the markdown for the selection
- `/copy` copy the markdown to the clipboard
- `/clear` clear the selection
- `/cleanup on|off` switch markdown cleanup
- `/ping`, `/status`, `/help`, `/quit`
"""


class InteractiveSession:
    """Read-eval loop driving a Picker over one document."""

    def __init__(
        self,
        document: HostDocument,
        picker: Picker,
        settings: SettingsStore,
        config: Optional[SessionConfig] = None,
        console: Optional[Console] = None,
    ):
        self.document = document
        self.picker = picker
        self.settings = settings
        self.router = CommandRouter(picker)
        self.config = config or SessionConfig()
        self.console = console or Console()
        self.is_running = False

        self._commands: Dict[str, Callable[[List[str]], Awaitable[None]]] = {
            "/toggle": self._cmd_toggle,
            "/md": self._cmd_markdown,
            "/copy": self._cmd_copy,
            "/clear": self._cmd_clear,
            "/ping": self._cmd_ping,
            "/cleanup": self._cmd_cleanup,
            "/status": self._cmd_status,
            "/help": self._cmd_help,
            "/quit": self._cmd_quit,
            "/exit": self._cmd_quit,
        }

    async def start_session(self) -> None:
        """Run until the user quits or input ends."""
        self.is_running = True
        self.console.print(Panel.fit(
            f"[bold cyan]md-zapper[/bold cyan] on {self.document.location or 'document'}\n"
            "Type [cyan]/toggle[/cyan] to start picking, [cyan]/help[/cyan] for help.",
            border_style="blue",
        ))

        try:
            await self._interaction_loop()
        except KeyboardInterrupt:
            self.console.print("\n[yellow]Session interrupted by user[/yellow]")
        finally:
            self.picker.disable()

    async def _interaction_loop(self) -> None:
        while self.is_running:
            try:
                loop = asyncio.get_running_loop()
                user_input = await loop.run_in_executor(None, self.console.input, "[bold green]zap>[/bold green] ")
            except EOFError:
                break
            await self.process_line(user_input)

    async def process_line(self, line: str) -> None:
        """Handle one line of user input."""
        line = line.strip()
        if not line:
            return

        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]Could not parse input: {e}[/red]")
            return

        if parts[0].startswith("/"):
            handler = self._commands.get(parts[0].lower())
            if handler is None:
                self.console.print(f"[red]Unknown command: {parts[0]}[/red]")
                return
            await handler(parts[1:])
            return

        await self._handle_input_event(parts[0].lower(), parts[1:])

    async def _handle_input_event(self, name: str, args: List[str]) -> None:
        if not self.picker.enabled:
            self.console.print("[yellow]Zapper is off. Use /toggle to enable it.[/yellow]")
            return

        previous_hover = self.picker.hover

        if name in ("point", "point!"):
            if not args:
                self.console.print("[red]Usage: point <css selector>[/red]")
                return
            target = self.document.query_selector(" ".join(args))
            if target is None:
                self.console.print(f"[yellow]No element matches {' '.join(args)}[/yellow]")
                return
            await self.document.dispatch_event(PointerMove(target, alt=name == "point!"))
        elif name in ("click", "shift-click"):
            target = self.picker.hover or self.document.body
            if target is None:
                return
            await self.document.dispatch_event(Click(target, shift=name == "shift-click"))
            self._show_selection()
        elif name in KEY_INPUTS:
            event = KEY_INPUTS[name]
            await self.document.dispatch_event(event)
            if event.key == "Enter":
                self._show_selection()
            elif event.is_copy_shortcut:
                self.console.print("[green]Copied (selection cleared)[/green]")
        else:
            self.console.print(f"[red]Unknown input: {name}[/red] (try /help)")
            return

        if self.config.show_hover_changes and self.picker.hover is not None and self.picker.hover != previous_hover:
            self.console.print(f"[cyan]hover:[/cyan] {self.picker.hover.describe()}")
        if not self.picker.enabled:
            self.console.print("[yellow]Zapper disabled[/yellow]")

    def _show_selection(self) -> None:
        selected = self.picker.selection.in_document_order(self.document)
        labels = ", ".join(node.describe() for node in selected) or "nothing"
        self.console.print(f"[magenta]selected:[/magenta] {labels}")

    def _show_markdown(self, markdown: str) -> None:
        if not markdown:
            self.console.print("[yellow]Nothing selected[/yellow]")
            return
        body = Markdown(markdown) if self.config.render_markdown else markdown
        self.console.print(Panel(body, title="Markdown", border_style="green"))

    async def _cmd_toggle(self, args: List[str]) -> None:
        response = await self.router.handle({"type": "TOGGLE_ZAP"})
        state = "enabled" if response.get("enabled") else "disabled"
        self.console.print(f"[blue]Zapper {state}[/blue]")

    async def _cmd_markdown(self, args: List[str]) -> None:
        response = await self.router.handle({"type": "GET_MD"})
        self._show_markdown(response.get("md", ""))

    async def _cmd_copy(self, args: List[str]) -> None:
        response = await self.router.handle({"type": "COPY_MD"})
        if response["ok"]:
            self.console.print("[green]Markdown copied to clipboard[/green]")
        else:
            self.console.print(f"[red]{response['error']}[/red]")

    async def _cmd_clear(self, args: List[str]) -> None:
        await self.router.handle({"type": "CLEAR_SELECTION"})
        self.console.print("[blue]Selection cleared[/blue]")

    async def _cmd_ping(self, args: List[str]) -> None:
        response = await self.router.handle({"type": "PING"})
        self.console.print("pong" if response["ok"] else "[red]no answer[/red]")

    async def _cmd_cleanup(self, args: List[str]) -> None:
        if args and args[0].lower() in ("on", "off"):
            await self.settings.set_cleanup_enabled(args[0].lower() == "on")
        enabled = await self.settings.get_cleanup_enabled()
        self.console.print(f"Cleanup is [bold]{'on' if enabled else 'off'}[/bold]")

    async def _cmd_status(self, args: List[str]) -> None:
        table = Table(title="Zapper Status", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        session = self.picker.session
        table.add_row("State", self.picker.state.value)
        table.add_row("Session", session.session_id if session else "-")
        table.add_row("Hover", self.picker.hover.describe() if self.picker.hover else "-")
        table.add_row("Selected", str(len(self.picker.selection)))
        table.add_row("Cleanup", "on" if await self.settings.get_cleanup_enabled() else "off")
        self.console.print(table)

    async def _cmd_help(self, args: List[str]) -> None:
        self.console.print(Panel(Markdown(HELP_TEXT.strip()), title="Help", border_style="blue"))

    async def _cmd_quit(self, args: List[str]) -> None:
        self.is_running = False
