"""
Converter from selected HTML subtrees to markdown.

Conversion happens in two layers:
1. An ordered table of ConversionRules, tried top-down per element
2. markdownify's structural renderer for everything the rules don't claim

Each selected node is cloned and scrubbed of picker markers, inline styles
and system nodes before it is rendered, so the live document is never touched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter, chomp

from ..core.node_ref import HOVER_CLASS, IGNORE_ATTRIBUTE, SELECTED_CLASS, SoupNodeRef

logger = logging.getLogger(__name__)

IMAGE_PLACEHOLDER = "<IMAGE WAS HERE>"
PART_SEPARATOR = "\n\n---\n\n"

_LANGUAGE_CLASS = re.compile(r"language-(\w+)")


def resolve_url(url: str, base_url: Optional[str]) -> str:
    """Resolve ``url`` against the document location, if there is one."""
    if not base_url:
        return url
    try:
        return urljoin(base_url, url)
    except ValueError:
        return url


def _title_suffix(el: Tag) -> str:
    title = el.get("title")
    return f' "{title}"' if title else ""


def _class_string(el: Tag) -> str:
    classes = el.get("class") or []
    if isinstance(classes, str):
        return classes
    return " ".join(classes)


@dataclass(frozen=True)
class ConversionRule:
    """A (predicate, renderer) pair claiming some elements before the default renderer."""

    name: str
    tags: FrozenSet[str]
    predicate: Callable[[Tag], bool]
    render: Callable[["ZapMarkdownConverter", Tag, str], str]

    def matches(self, el: Tag) -> bool:
        return el.name in self.tags and self.predicate(el)


def _render_nothing(converter: ZapMarkdownConverter, el: Tag, text: str) -> str:
    return ""


def _has_code_child(el: Tag) -> bool:
    return el.find("code") is not None


def _render_code_block(converter: ZapMarkdownConverter, el: Tag, text: str) -> str:
    code = el.find("code")
    match = _LANGUAGE_CLASS.search(_class_string(code))
    language = match.group(1) if match else ""
    return f"\n\n```{language}\n{code.get_text()}\n```\n\n"


def _render_preformatted(converter: ZapMarkdownConverter, el: Tag, text: str) -> str:
    return f"\n\n```\n{el.get_text()}\n```\n\n"


def _render_image(converter: ZapMarkdownConverter, el: Tag, text: str) -> str:
    src = el.get("src") or ""
    if not src or src.startswith("data:"):
        return IMAGE_PLACEHOLDER

    absolute_src = resolve_url(src, converter.base_url)
    if urlparse(absolute_src).scheme not in ("http", "https"):
        return IMAGE_PLACEHOLDER

    alt = el.get("alt") or ""
    return f"![{alt}]({absolute_src}{_title_suffix(el)})"


def _has_href(el: Tag) -> bool:
    return bool(el.get("href"))


def _render_link(converter: ZapMarkdownConverter, el: Tag, text: str) -> str:
    href = el.get("href")
    if href.startswith("#") or href.lower().startswith("javascript:"):
        target = href
    else:
        target = resolve_url(href, converter.base_url)

    prefix, suffix, text = chomp(text)
    return f"{prefix}[{text}]({target}{_title_suffix(el)}){suffix}"


# First matching rule wins
DEFAULT_RULES: Tuple[ConversionRule, ...] = (
    ConversionRule("suppressed", frozenset({"script", "style", "noscript"}), lambda el: True, _render_nothing),
    ConversionRule("code_block", frozenset({"pre"}), _has_code_child, _render_code_block),
    ConversionRule("preserved_whitespace", frozenset({"pre"}), lambda el: True, _render_preformatted),
    ConversionRule("image", frozenset({"img"}), lambda el: True, _render_image),
    ConversionRule("link", frozenset({"a"}), _has_href, _render_link),
)


class ZapMarkdownConverter(MarkdownConverter):
    """
    markdownify converter that consults the rule table first.

    Escaping of markdown-significant characters is turned off: text is
    reproduced verbatim.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        rules: Sequence[ConversionRule] = DEFAULT_RULES,
        **options,
    ):
        options.setdefault("heading_style", ATX)
        options.setdefault("bullets", "-")
        options.setdefault("escape_asterisks", False)
        options.setdefault("escape_underscores", False)
        options.setdefault("escape_misc", False)
        super().__init__(**options)
        self.base_url = base_url
        self.rules = tuple(rules)

    def get_conv_fn(self, tag_name):
        """Wrap markdownify's renderer for ``tag_name`` with the rules naming that tag."""
        default = super().get_conv_fn(tag_name)
        if not self.should_convert_tag(tag_name):
            return default

        rules = [rule for rule in self.rules if tag_name.lower() in rule.tags]
        if not rules:
            return default

        def convert_with_rules(el, text, parent_tags):
            for rule in rules:
                if rule.matches(el):
                    return rule.render(self, el, text)
            if default is None:
                return text
            return default(el, text, parent_tags=parent_tags)

        return convert_with_rules

    def convert_em(self, el, text, parent_tags):
        if "_noformat" in parent_tags:
            return text
        prefix, suffix, text = chomp(text)
        if not text:
            return ""
        return f"{prefix}_{text}_{suffix}"

    convert_i = convert_em


def scrub_clone(node: SoupNodeRef) -> SoupNodeRef:
    """
    Detached copy of ``node`` ready for conversion.

    Picker markers, inline styles and system nodes are removed from the copy.
    """
    clone = node.clone()
    root = clone.element

    for el in [root] + root.find_all(True):
        if el.decomposed:
            continue
        if el is not root and el.get(IGNORE_ATTRIBUTE) is not None:
            el.decompose()
            continue
        wrapped = SoupNodeRef(el)
        wrapped.remove_class(HOVER_CLASS)
        wrapped.remove_class(SELECTED_CLASS)
        if el.has_attr("style"):
            del el["style"]

    return clone


def convert_node(node: SoupNodeRef, base_url: Optional[str] = None, converter: Optional[ZapMarkdownConverter] = None) -> str:
    """Render one selected node to trimmed markdown."""
    converter = converter or ZapMarkdownConverter(base_url=base_url)
    clone = scrub_clone(node)

    # The clone goes into a fresh document so its own tag is converted too
    document = BeautifulSoup("", "html.parser")
    document.append(clone.element)
    return converter.convert_soup(document).strip()


def convert_nodes(nodes: Iterable[SoupNodeRef], base_url: Optional[str] = None) -> str:
    """
    Render nodes (already in document order) and join them with a rule.

    Nodes rendering to nothing are left out of the join.
    """
    converter = ZapMarkdownConverter(base_url=base_url)
    parts: List[str] = []
    for node in nodes:
        markdown = convert_node(node, converter=converter)
        if markdown:
            parts.append(markdown)
        else:
            logger.debug(f"Node {node!r} rendered to empty markdown")
    return PART_SEPARATOR.join(parts)
