"""
Selection store: the set of picked nodes.
"""

from __future__ import annotations

from typing import Dict, Iterator, List

from ..core.document_model import HostDocument
from ..core.node_ref import SoupNodeRef


class SelectionStore:
    """
    Set of selected nodes, unique by node identity.

    Membership order is irrelevant; output order comes from the document.
    """

    def __init__(self):
        self._nodes: Dict[SoupNodeRef, None] = {}

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[SoupNodeRef]:
        return iter(list(self._nodes))

    def add(self, node: SoupNodeRef) -> None:
        self._nodes[node] = None

    def discard(self, node: SoupNodeRef) -> None:
        self._nodes.pop(node, None)

    def clear(self) -> List[SoupNodeRef]:
        """Empty the store, returning what was in it."""
        removed = list(self._nodes)
        self._nodes.clear()
        return removed

    def in_document_order(self, document: HostDocument) -> List[SoupNodeRef]:
        return document.in_document_order(self._nodes)
