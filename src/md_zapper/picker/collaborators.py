"""
External collaborators of the picker: settings, clipboard and hint overlay.

The picker only talks to these through small protocols so it can run against
the real clipboard and config file, or against in-memory stand-ins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol, Tuple

import pyperclip
from rich.console import Console
from rich.table import Table

from ..config import ConfigManager, get_config_manager

logger = logging.getLogger(__name__)


class ClipboardError(RuntimeError):
    """Raised when the clipboard sink rejects a write."""


class SettingsStore(Protocol):
    async def get_cleanup_enabled(self) -> bool: ...

    async def set_cleanup_enabled(self, value: bool) -> None: ...


class ClipboardSink(Protocol):
    async def write_text(self, text: str) -> None: ...


class HintOverlay(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...


class ConfigSettingsStore:
    """Settings persisted in the md-zapper config file, re-read on every access."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        self.config_manager = config_manager or get_config_manager()

    async def get_cleanup_enabled(self) -> bool:
        return self.config_manager.load_config(refresh=True).cleanup_markdown

    async def set_cleanup_enabled(self, value: bool) -> None:
        config = self.config_manager.load_config(refresh=True)
        config.cleanup_markdown = value
        self.config_manager.save_config(config)


class MemorySettingsStore:
    def __init__(self, cleanup_enabled: bool = True):
        self.cleanup_enabled = cleanup_enabled

    async def get_cleanup_enabled(self) -> bool:
        return self.cleanup_enabled

    async def set_cleanup_enabled(self, value: bool) -> None:
        self.cleanup_enabled = value


class PyperclipSink:
    """Writes to the system clipboard via pyperclip."""

    async def write_text(self, text: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Clipboard unavailable: {e}") from e
        logger.info(f"Copied {len(text)} characters to the clipboard")


SHORTCUTS: Tuple[Tuple[str, str], ...] = (
    ("Esc", "Exit zapper"),
    ("Click", "Select element"),
    ("Enter", "Select hovered"),
    ("Shift+Enter", "Multi-select"),
    ("Cmd/Ctrl+C", "Copy markdown"),
    ("↑", "Parent element"),
    ("↓", "Child element"),
    ("Alt+Hover", "Smart container"),
)


class ConsoleHintOverlay:
    """Prints the shortcut table when picking starts."""

    def __init__(self, console: Optional[Console] = None, shortcuts: Tuple[Tuple[str, str], ...] = SHORTCUTS):
        self.console = console or Console()
        self.shortcuts = shortcuts
        self.visible = False

    def show(self) -> None:
        if self.visible:
            return
        table = Table(title="Zapper Shortcuts", show_header=False, title_style="bold cyan")
        table.add_column("Key", style="green")
        table.add_column("Action", style="white", justify="right")
        for key, description in self.shortcuts:
            table.add_row(key, description)
        self.console.print(table)
        self.visible = True

    def hide(self) -> None:
        if self.visible:
            self.console.print("[dim]Zapper disabled[/dim]")
        self.visible = False


class NullOverlay:
    def __init__(self):
        self.events: List[str] = []

    def show(self) -> None:
        self.events.append("show")

    def hide(self) -> None:
        self.events.append("hide")
