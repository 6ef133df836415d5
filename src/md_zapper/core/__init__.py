"""
Core document handling: the host tree and references into it.
"""

from .document_model import HostDocument
from .node_ref import (
    HOVER_CLASS,
    IGNORE_ATTRIBUTE,
    SELECTED_CLASS,
    NodeRef,
    SoupNodeRef,
)

__all__ = [
    "HostDocument",
    "NodeRef",
    "SoupNodeRef",
    "HOVER_CLASS",
    "SELECTED_CLASS",
    "IGNORE_ATTRIBUTE",
]
