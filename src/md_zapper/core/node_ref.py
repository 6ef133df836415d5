"""
Node references into the host document tree.

The picker never owns the tree it works on. It only holds NodeRefs, which
expose the small set of capabilities the picker and converter need.
"""

from __future__ import annotations

import copy
import re
from typing import Iterator, List, Optional, Protocol, runtime_checkable

from bs4 import BeautifulSoup, Tag


HOVER_CLASS = "zap-hover"
SELECTED_CLASS = "zap-selected"
IGNORE_ATTRIBUTE = "data-zap-ignore"

ROOT_CONTAINER_TAGS = frozenset({"html", "body"})

# Elements the browser never renders a box for
NON_RENDERED_TAGS = frozenset({
    "head", "meta", "link", "title", "script", "style", "noscript", "template", "base",
})

_DISPLAY_NONE = re.compile(r"(?:^|;)\s*display\s*:\s*none\b", re.IGNORECASE)
_VISIBILITY = re.compile(r"(?:^|;)\s*visibility\s*:\s*([a-z]+)", re.IGNORECASE)


@runtime_checkable
class NodeRef(Protocol):
    """Capability interface over a node in the host document."""

    @property
    def tag(self) -> str: ...

    @property
    def parent(self) -> Optional[NodeRef]: ...

    @property
    def children(self) -> List[NodeRef]: ...

    @property
    def class_list(self) -> List[str]: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    def add_class(self, name: str) -> None: ...

    def remove_class(self, name: str) -> None: ...

    def is_visible(self) -> bool: ...

    def is_ignored(self) -> bool: ...

    def is_root_container(self) -> bool: ...

    def is_attached(self) -> bool: ...

    def clone(self) -> NodeRef: ...


class SoupNodeRef:
    """
    NodeRef backed by a BeautifulSoup ``Tag``.

    Two refs are equal when they wrap the very same tag object. BeautifulSoup
    compares tags structurally, so identical markup in two places would
    otherwise collapse into one selection entry.
    """

    def __init__(self, tag: Tag, root: Optional[BeautifulSoup] = None):
        self._tag = tag
        self._root = root

    @property
    def element(self) -> Tag:
        """The wrapped tag."""
        return self._tag

    @property
    def tag(self) -> str:
        return self._tag.name.lower()

    @property
    def parent(self) -> Optional[SoupNodeRef]:
        parent = self._tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return SoupNodeRef(parent, self._root)

    @property
    def children(self) -> List[SoupNodeRef]:
        return [SoupNodeRef(child, self._root) for child in self._tag.children if isinstance(child, Tag)]

    @property
    def class_list(self) -> List[str]:
        classes = self._tag.get("class")
        if classes is None:
            return []
        if isinstance(classes, str):
            return classes.split()
        return list(classes)

    def ancestors(self) -> Iterator[SoupNodeRef]:
        """Yield parents from the nearest outwards."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def add_class(self, name: str) -> None:
        classes = self.class_list
        if name not in classes:
            classes.append(name)
            self._tag["class"] = classes

    def remove_class(self, name: str) -> None:
        classes = self.class_list
        if name not in classes:
            return
        classes = [c for c in classes if c != name]
        if classes:
            self._tag["class"] = classes
        else:
            del self._tag["class"]

    def is_visible(self) -> bool:
        """
        Approximate the computed visibility of the element.

        Only inline styles and the ``hidden`` attribute are considered:
        ``display: none`` anywhere up the chain hides the element, while
        ``visibility`` is inherited from the nearest element declaring it.
        """
        visibility: Optional[str] = None
        node: Optional[SoupNodeRef] = self
        while node is not None:
            if node.tag in NON_RENDERED_TAGS or node.get_attribute("hidden") is not None:
                return False
            style = node.get_attribute("style") or ""
            if _DISPLAY_NONE.search(style):
                return False
            if visibility is None:
                match = _VISIBILITY.search(style)
                if match:
                    visibility = match.group(1).lower()
            node = node.parent
        return visibility not in ("hidden", "collapse")

    def is_ignored(self) -> bool:
        """True for nodes flagged as system nodes, or living inside one."""
        return any(node.get_attribute(IGNORE_ATTRIBUTE) is not None for node in [self, *self.ancestors()])

    def is_root_container(self) -> bool:
        return self.tag in ROOT_CONTAINER_TAGS

    def is_attached(self) -> bool:
        """
        Check the node is still reachable from its document root.

        Without a known root, any enclosing parsed document counts.
        """
        top = self._tag
        while top.parent is not None:
            top = top.parent
        if self._root is None:
            return isinstance(top, BeautifulSoup)
        return top is self._root

    def clone(self) -> SoupNodeRef:
        """Deep, detached copy of the subtree."""
        return SoupNodeRef(copy.copy(self._tag))

    def describe(self) -> str:
        """Short CSS-like label, e.g. ``div#main.content``."""
        label = self.tag
        element_id = self.get_attribute("id")
        if element_id:
            label += f"#{element_id}"
        classes = [c for c in self.class_list if c not in (HOVER_CLASS, SELECTED_CLASS)]
        if classes:
            label += "." + ".".join(classes)
        return label

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SoupNodeRef):
            return NotImplemented
        return self._tag is other._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"SoupNodeRef({self.describe()})"
