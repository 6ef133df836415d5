"""
HTML to markdown conversion and markdown cleanup.
"""

from .cleanup import CLEANUP_STAGES, LineKind, classify_line, cleanup_markdown
from .html_to_markdown import (
    DEFAULT_RULES,
    IMAGE_PLACEHOLDER,
    PART_SEPARATOR,
    ConversionRule,
    ZapMarkdownConverter,
    convert_node,
    convert_nodes,
)

__all__ = [
    "CLEANUP_STAGES",
    "LineKind",
    "classify_line",
    "cleanup_markdown",
    "DEFAULT_RULES",
    "IMAGE_PLACEHOLDER",
    "PART_SEPARATOR",
    "ConversionRule",
    "ZapMarkdownConverter",
    "convert_node",
    "convert_nodes",
]
