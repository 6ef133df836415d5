"""
Eligibility and container heuristic tests.
"""

import pytest

from md_zapper.core.document_model import HostDocument
from md_zapper.picker.eligibility import find_content_container, is_valid_target


def test_none_is_not_a_target():
    assert is_valid_target(None) is False


@pytest.mark.parametrize("selector", ["#title", "#leaf", "#snippet", "#wrapper"])
def test_visible_content_is_valid(document, selector):
    assert is_valid_target(document.query_selector(selector))


@pytest.mark.parametrize("selector", ["html", "body", "#hidden-box", "#hidden-text", "#toolbar", "#tool-button", "title"])
def test_ineligible_nodes(document, selector):
    assert not is_valid_target(document.query_selector(selector))


@pytest.mark.parametrize(
    "style, visible",
    [
        ("display:none", False),
        ("DISPLAY: None;", False),
        ("color: red; display: none", False),
        ("visibility: hidden", False),
        ("visibility: collapse", False),
        ("visibility: visible", True),
        ("display: block", True),
    ],
)
def test_inline_styles_decide_visibility(style, visible):
    document = HostDocument.from_html(f'<div style="{style}"><p id="p">text</p></div>')
    assert is_valid_target(document.query_selector("#p")) is visible


def test_nearest_visibility_declaration_wins():
    document = HostDocument.from_html(
        '<div style="visibility:hidden"><section style="visibility:visible"><p id="p">x</p></section></div>'
    )
    assert is_valid_target(document.query_selector("#p"))


class TestFindContentContainer:
    def test_finds_article_ancestor(self, document):
        container = find_content_container(document.query_selector("#leaf"))
        assert container == document.query_selector("#post")

    @pytest.mark.parametrize("class_name", ["main-content", "Article-Body", "blog-post", "mainColumn"])
    def test_matches_class_hints(self, class_name):
        document = HostDocument.from_html(
            f'<body><div id="box" class="{class_name}"><div><p id="p">x</p></div></div></body>'
        )
        assert find_content_container(document.query_selector("#p")) == document.query_selector("#box")

    def test_start_node_itself_is_not_considered(self):
        document = HostDocument.from_html('<body><div id="outer"><main id="m">x</main></div></body>')
        main = document.query_selector("#m")
        assert find_content_container(main) == main

    def test_stops_at_body(self):
        document = HostDocument.from_html('<body class="main"><div><p id="p">x</p></div></body>')
        node = document.query_selector("#p")
        assert find_content_container(node) == node

    def test_nearest_match_wins(self):
        document = HostDocument.from_html(
            '<main id="outer"><section id="inner"><p id="p">x</p></section></main>'
        )
        assert find_content_container(document.query_selector("#p")) == document.query_selector("#inner")
