"""
Host document model: the parsed HTML tree the picker works against.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
from uuid import uuid4

from bs4 import BeautifulSoup, Tag

from .node_ref import SoupNodeRef

logger = logging.getLogger(__name__)

EventListener = Callable[[Any], Awaitable[bool]]


class HostDocument:
    """
    A rendered document as seen by the picker.

    Wraps a BeautifulSoup tree together with the document location (used to
    resolve relative links and images) and a listener registry standing in
    for the browser's capturing event listeners.
    """

    def __init__(
        self,
        soup: BeautifulSoup,
        location: Optional[str] = None,
        source_path: Optional[Path] = None,
    ):
        self.document_id = str(uuid4())
        self.soup = soup
        self.location = location
        self.source_path = source_path
        self.loaded_at = datetime.now()

        self._listeners: List[EventListener] = []

    @classmethod
    def from_html(cls, html: str, location: Optional[str] = None) -> HostDocument:
        """Parse an HTML string into a document."""
        return cls(BeautifulSoup(html, "html.parser"), location=location)

    @classmethod
    def from_file(cls, path: Path, location: Optional[str] = None) -> HostDocument:
        """Load a document from an HTML file on disk."""
        if not path.exists():
            raise FileNotFoundError(f"HTML file not found: {path}")

        html = path.read_text(encoding="utf-8", errors="replace")
        if location is None:
            location = path.resolve().as_uri()
        document = cls(BeautifulSoup(html, "html.parser"), location=location, source_path=path)
        logger.debug(f"Loaded {path} ({len(html)} chars) as document {document.document_id}")
        return document

    # Node lookup

    def wrap(self, tag: Tag) -> SoupNodeRef:
        return SoupNodeRef(tag, self.soup)

    @property
    def body(self) -> Optional[SoupNodeRef]:
        body = self.soup.body
        return self.wrap(body) if body is not None else None

    def query_selector(self, selector: str) -> Optional[SoupNodeRef]:
        tag = self.soup.select_one(selector)
        return self.wrap(tag) if tag is not None else None

    def query_selector_all(self, selector: str) -> List[SoupNodeRef]:
        return [self.wrap(tag) for tag in self.soup.select(selector)]

    def in_document_order(self, nodes: Iterable[SoupNodeRef]) -> List[SoupNodeRef]:
        """
        Sort nodes by their position in the document.

        Nodes no longer attached to this document are dropped.
        """
        positions: Dict[int, int] = {
            id(tag): index for index, tag in enumerate(self.soup.find_all(True))
        }
        attached = []
        for node in nodes:
            if node.is_attached() and id(node.element) in positions:
                attached.append(node)
            else:
                logger.debug(f"Dropping detached node {node!r}")
        return sorted(attached, key=lambda node: positions[id(node.element)])

    # Event listeners

    def add_event_listener(self, listener: EventListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_event_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def dispatch_event(self, event: Any) -> bool:
        """Deliver an input event to every listener; True if any handled it."""
        handled = False
        for listener in list(self._listeners):
            if await listener(event):
                handled = True
        return handled

    def get_stats(self) -> Dict[str, Any]:
        """Get document statistics."""
        elements = self.soup.find_all(True)
        text = self.soup.get_text(" ", strip=True)
        return {
            "document_id": self.document_id,
            "location": self.location,
            "element_count": len(elements),
            "heading_count": len(self.soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])),
            "code_block_count": len(self.soup.find_all("pre")),
            "image_count": len(self.soup.find_all("img")),
            "link_count": len(self.soup.find_all("a")),
            "word_count": len(text.split()),
            "loaded_at": self.loaded_at.isoformat(),
        }
