"""
Element picking state machine.

The picker is either DISABLED or ENABLED. While enabled it owns a
PickerSession (hover, selection and the cached markdown) and listens for
input events on the host document. Which handler runs for which event is
decided by a single transition table keyed by (state, event type).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Tuple, Type

from ..converters.cleanup import cleanup_markdown
from ..converters.html_to_markdown import convert_nodes
from ..core.document_model import HostDocument
from ..core.node_ref import HOVER_CLASS, SELECTED_CLASS, SoupNodeRef
from .collaborators import ClipboardError, ClipboardSink, HintOverlay, NullOverlay, SettingsStore
from .eligibility import find_content_container, is_valid_target
from .selection import SelectionStore

logger = logging.getLogger(__name__)


class PickerState(Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"


@dataclass
class PointerMove:
    """Pointer moved over ``target``; ``alt`` asks for the enclosing container."""
    target: SoupNodeRef
    alt: bool = False


@dataclass
class Click:
    """Primary click; ``shift`` adds to the selection instead of replacing it."""
    target: SoupNodeRef
    shift: bool = False


@dataclass
class KeyDown:
    key: str
    shift: bool = False
    ctrl: bool = False
    meta: bool = False
    alt: bool = False

    @property
    def is_copy_shortcut(self) -> bool:
        return self.key.lower() == "c" and (self.ctrl or self.meta)


@dataclass
class PickerSession:
    """State that exists only while picking is enabled."""
    session_id: str = field(default_factory=lambda: f"zap_{uuid.uuid4().hex[:8]}")
    hover: Optional[SoupNodeRef] = None
    selection: SelectionStore = field(default_factory=SelectionStore)
    markdown: str = ""


class Picker:
    """
    Hover/selection state machine over a host document.

    Handlers are coroutines: recomputing markdown awaits the settings store
    and the copy shortcut awaits the clipboard sink. ``enable`` and
    ``disable`` are synchronous.
    """

    def __init__(
        self,
        document: HostDocument,
        settings: SettingsStore,
        clipboard: ClipboardSink,
        overlay: Optional[HintOverlay] = None,
    ):
        self.document = document
        self.settings = settings
        self.clipboard = clipboard
        self.overlay = overlay or NullOverlay()

        self.session: Optional[PickerSession] = None

        self._transitions: Dict[Tuple[PickerState, Type], Callable[[object], Awaitable[bool]]] = {
            (PickerState.ENABLED, PointerMove): self._on_pointer_move,
            (PickerState.ENABLED, Click): self._on_click,
            (PickerState.ENABLED, KeyDown): self._on_key_down,
        }
        self._key_handlers: Dict[str, Callable[[KeyDown], Awaitable[bool]]] = {
            "Escape": self._on_escape,
            "Enter": self._on_enter,
            "ArrowUp": self._on_arrow_up,
            "ArrowDown": self._on_arrow_down,
        }

    @property
    def state(self) -> PickerState:
        return PickerState.ENABLED if self.session is not None else PickerState.DISABLED

    @property
    def enabled(self) -> bool:
        return self.session is not None

    @property
    def hover(self) -> Optional[SoupNodeRef]:
        return self.session.hover if self.session else None

    @property
    def selection(self) -> SelectionStore:
        return self.session.selection if self.session else SelectionStore()

    @property
    def markdown(self) -> str:
        """The cached markdown for the current selection."""
        return self.session.markdown if self.session else ""

    # Lifecycle

    def enable(self) -> None:
        if self.session is not None:
            return
        self.session = PickerSession()
        self.overlay.show()
        self.document.add_event_listener(self.handle)
        logger.info(f"Picker enabled ({self.session.session_id})")

    def disable(self) -> None:
        if self.session is None:
            return
        session_id = self.session.session_id
        self._set_hover(None)
        self.clear_selection()
        self.overlay.hide()
        self.document.remove_event_listener(self.handle)
        self.session = None
        logger.info(f"Picker disabled ({session_id})")

    def toggle(self) -> bool:
        """Flip between enabled and disabled; returns the new enabled flag."""
        if self.enabled:
            self.disable()
        else:
            self.enable()
        return self.enabled

    # Event dispatch

    async def handle(self, event: object) -> bool:
        """Run the transition for ``event``; False when the event is ignored."""
        handler = self._transitions.get((self.state, type(event)))
        if handler is None:
            return False
        return await handler(event)

    async def _on_pointer_move(self, event: PointerMove) -> bool:
        if event.target.is_ignored():
            return False
        candidate = find_content_container(event.target) if event.alt else event.target
        if not is_valid_target(candidate) or candidate == self.session.hover:
            return False
        self._set_hover(candidate)
        return True

    async def _on_click(self, event: Click) -> bool:
        if event.target.is_ignored():
            return False
        if self.session.hover is None:
            return True
        await self.toggle_select(self.session.hover, multi=event.shift)
        return True

    async def _on_key_down(self, event: KeyDown) -> bool:
        handler = self._key_handlers.get(event.key)
        if handler is not None:
            return await handler(event)
        if event.is_copy_shortcut:
            await self._copy_and_clear()
            return True
        return False

    async def _on_escape(self, event: KeyDown) -> bool:
        self.disable()
        return True

    async def _on_enter(self, event: KeyDown) -> bool:
        if self.session.hover is not None:
            await self.toggle_select(self.session.hover, multi=event.shift)
        return True

    async def _on_arrow_up(self, event: KeyDown) -> bool:
        if self.session.hover is None:
            return True
        parent = self.session.hover.parent
        while parent is not None and not is_valid_target(parent):
            parent = parent.parent
        if parent is not None:
            self._set_hover(parent)
        return True

    async def _on_arrow_down(self, event: KeyDown) -> bool:
        if self.session.hover is None:
            return True
        child = next((c for c in self.session.hover.children if is_valid_target(c)), None)
        if child is not None:
            self._set_hover(child)
        return True

    async def _copy_and_clear(self) -> None:
        # Unlike COPY_MD, the shortcut drops the selection even when the write fails
        markdown = await self.get_markdown()
        if not markdown:
            return
        try:
            await self.clipboard.write_text(markdown)
        except ClipboardError as e:
            logger.warning(f"Copy shortcut failed: {e}")
        self.clear_selection()

    # Hover and selection

    def _set_hover(self, node: Optional[SoupNodeRef]) -> None:
        session = self.session
        if session.hover == node:
            return
        if session.hover is not None:
            session.hover.remove_class(HOVER_CLASS)
        session.hover = node
        if node is not None:
            node.add_class(HOVER_CLASS)
            logger.debug(f"Hover -> {node!r}")

    async def toggle_select(self, node: SoupNodeRef, multi: bool) -> None:
        """
        Flip ``node``'s membership and recompute the markdown.

        In replace mode (``multi`` False) every other selected node is
        dropped first, and the clicked node ends up selected unless it was
        the only selection.
        """
        session = self.session
        if session is None:
            return
        selection = session.selection
        was_selected = node in selection
        if not was_selected and not is_valid_target(node):
            return

        select = not was_selected
        if not multi:
            others = [other for other in selection.clear() if other != node]
            for other in others:
                other.remove_class(SELECTED_CLASS)
            if others:
                select = True

        if not select:
            selection.discard(node)
            node.remove_class(SELECTED_CLASS)
        else:
            selection.add(node)
            node.add_class(SELECTED_CLASS)

        session.markdown = await self.build_markdown()

    def clear_selection(self) -> None:
        if self.session is None:
            return
        for node in self.session.selection.clear():
            node.remove_class(SELECTED_CLASS)
        self.session.markdown = ""

    # Markdown

    async def build_markdown(self) -> str:
        """Convert the current selection, in document order, to markdown."""
        if self.session is None or len(self.session.selection) == 0:
            return ""

        nodes = self.session.selection.in_document_order(self.document)
        joined = convert_nodes(nodes, base_url=self.document.location)
        if not joined:
            return ""

        if await self.settings.get_cleanup_enabled():
            return cleanup_markdown(joined)
        return joined

    async def get_markdown(self) -> str:
        """Cached markdown, or a fresh conversion when the cache is empty."""
        if self.session is not None and self.session.markdown:
            return self.session.markdown
        return await self.build_markdown()
