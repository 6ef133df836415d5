"""
Which nodes the picker may point at, and how a pointer can be widened.
"""

from __future__ import annotations

from typing import Optional

from ..core.node_ref import NodeRef

CONTAINER_TAGS = frozenset({"article", "main", "section"})
CONTAINER_CLASS_HINTS = ("content", "article", "post", "main")


def is_valid_target(node: Optional[NodeRef]) -> bool:
    """
    Eligibility of a node for hover and selection.

    System nodes, the root containers and anything not rendered are excluded.
    """
    if node is None or node.is_ignored():
        return False
    if node.is_root_container():
        return False
    return node.is_visible()


def _looks_like_container(node: NodeRef) -> bool:
    if node.tag in CONTAINER_TAGS:
        return True
    class_attr = (node.get_attribute("class") or "").lower()
    return any(hint in class_attr for hint in CONTAINER_CLASS_HINTS)


def find_content_container(node: NodeRef) -> NodeRef:
    """
    Nearest ancestor that looks like a content container.

    Stops before the document's root containers and falls back to ``node``
    itself when nothing matches.
    """
    ancestor = node.parent
    while ancestor is not None and not ancestor.is_root_container():
        if _looks_like_container(ancestor):
            return ancestor
        ancestor = ancestor.parent
    return node
