"""
Text-level normalization of converted markdown.

Fenced code regions are swapped out for placeholder tokens before any other
stage runs and swapped back in at the end, so code survives byte-for-byte.
The blank-line stages work on a typed line-kind sequence rather than on
raw regular expressions over the whole text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

_FENCED_CODE = re.compile(r"```[\s\S]*?```")
_PLACEHOLDER = re.compile(r"\x00ZAP_CODE_BLOCK_([0-9a-f]+)_(\d+)\x00")

_BULLET_LINE = re.compile(r"^[-*+]\s+\S")
_ORDERED_LINE = re.compile(r"^\d+\.\s+\S")
_QUOTE_LINE = re.compile(r"^>\s+\S")

_NON_PLAIN_LEADERS = "#-*+>"


class LineKind(Enum):
    """Classification of a single markdown line."""
    BLANK = "blank"
    BULLET = "bullet"
    ORDERED = "ordered"
    QUOTE = "quote"
    CODE = "code"
    PLAIN = "plain"
    OTHER = "other"


LIST_FAMILIES = frozenset({LineKind.BULLET, LineKind.ORDERED, LineKind.QUOTE})


def classify_line(line: str) -> LineKind:
    if not line:
        return LineKind.BLANK
    if _PLACEHOLDER.match(line):
        return LineKind.CODE
    if _BULLET_LINE.match(line):
        return LineKind.BULLET
    if _ORDERED_LINE.match(line):
        return LineKind.ORDERED
    if _QUOTE_LINE.match(line):
        return LineKind.QUOTE

    first = line[0]
    if first in _NON_PLAIN_LEADERS or first.isdigit() or first.isspace():
        return LineKind.OTHER
    return LineKind.PLAIN


@dataclass
class ProtectedText:
    """
    Text with its fenced code regions replaced by placeholders.

    Tokens carry a per-call nonce; placeholder-shaped text already present
    in the input is left alone on restore.
    """
    text: str
    code_blocks: List[str] = field(default_factory=list)
    nonce: str = field(default_factory=lambda: uuid4().hex[:8])


def protect_code_blocks(text: str) -> ProtectedText:
    protected = ProtectedText(text="")

    def _substitute(match: re.Match) -> str:
        protected.code_blocks.append(match.group(0))
        return f"\x00ZAP_CODE_BLOCK_{protected.nonce}_{len(protected.code_blocks) - 1}\x00"

    protected.text = _FENCED_CODE.sub(_substitute, text)
    return protected


def restore_code_blocks(protected: ProtectedText) -> str:
    def _restore(match: re.Match) -> str:
        index = int(match.group(2))
        if match.group(1) != protected.nonce or index >= len(protected.code_blocks):
            return match.group(0)
        return protected.code_blocks[index]

    return _PLACEHOLDER.sub(_restore, protected.text)


def normalize_characters(text: str) -> str:
    return text.replace("\u200b", "").replace("\u00a0", " ")


def trim_whitespace(text: str) -> str:
    """Strip trailing blanks from every line and leading blanks from the text."""
    return "\n".join(line.rstrip(" \t") for line in text.split("\n")).lstrip()


def collapse_blank_runs(text: str) -> str:
    return re.sub(r"\n{3,}", "\n\n", text)


def _drop_single_blanks(text: str, joins: Callable[[LineKind, LineKind], bool]) -> str:
    """Remove lone blank lines whose neighbours satisfy ``joins``."""
    lines = text.split("\n")
    kinds = [classify_line(line) for line in lines]

    kept: List[str] = []
    for index, line in enumerate(lines):
        if (
            kinds[index] is LineKind.BLANK
            and 0 < index < len(lines) - 1
            and kinds[index - 1] is not LineKind.BLANK
            and kinds[index + 1] is not LineKind.BLANK
            and joins(kinds[index - 1], kinds[index + 1])
        ):
            continue
        kept.append(line)
    return "\n".join(kept)


def tighten_list_runs(text: str) -> str:
    """Join same-family list or quote lines split by one blank line."""
    return _drop_single_blanks(
        text, lambda before, after: before is after and before in LIST_FAMILIES
    )


def merge_soft_wrapped_paragraphs(text: str) -> str:
    """Join plain lines split by one blank line into one paragraph."""
    return _drop_single_blanks(
        text, lambda before, after: before is LineKind.PLAIN and after is LineKind.PLAIN
    )


def finalize(text: str) -> str:
    return text.strip() + "\n"


# Stages that run between protect and restore, in order
CLEANUP_STAGES: Tuple[Callable[[str], str], ...] = (
    normalize_characters,
    trim_whitespace,
    collapse_blank_runs,
    tighten_list_runs,
    merge_soft_wrapped_paragraphs,
)


def cleanup_markdown(markdown: str, stages: Optional[Tuple[Callable[[str], str], ...]] = None) -> str:
    """Run the full cleanup pipeline over converted markdown."""
    protected = protect_code_blocks(markdown)
    for stage in stages if stages is not None else CLEANUP_STAGES:
        protected.text = stage(protected.text)
    return finalize(restore_code_blocks(protected))
