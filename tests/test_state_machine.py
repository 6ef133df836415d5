"""
Picker state machine tests.
"""

import pytest

from md_zapper.core.document_model import HostDocument
from md_zapper.core.node_ref import HOVER_CLASS, SELECTED_CLASS
from md_zapper.picker.collaborators import MemorySettingsStore, NullOverlay
from md_zapper.picker.state_machine import Click, KeyDown, Picker, PickerState, PointerMove

TITLE_MD = "## Getting started\n"
SECOND_MD = "Second paragraph.\n"


async def _hover(document, selector, alt=False):
    return await document.dispatch_event(PointerMove(document.query_selector(selector), alt=alt))


async def _click(document, selector, shift=False):
    await _hover(document, selector)
    return await document.dispatch_event(Click(document.query_selector(selector), shift=shift))


class TestLifecycle:
    def test_starts_disabled(self, picker):
        assert picker.state is PickerState.DISABLED
        assert picker.hover is None
        assert len(picker.selection) == 0

    def test_enable_registers_listener_and_shows_hints(self, picker, document, overlay):
        picker.enable()

        assert picker.state is PickerState.ENABLED
        assert document.listener_count == 1
        assert overlay.events == ["show"]
        assert picker.session.session_id.startswith("zap_")

    def test_enable_twice_is_a_no_op(self, picker, document, overlay):
        picker.enable()
        session = picker.session
        picker.enable()

        assert picker.session is session
        assert document.listener_count == 1
        assert overlay.events == ["show"]

    def test_toggle_flips_state(self, picker, document):
        assert picker.toggle() is True
        assert picker.toggle() is False
        assert document.listener_count == 0

    @pytest.mark.asyncio
    async def test_disable_removes_all_markers(self, picker, document, overlay):
        picker.enable()
        await _click(document, "#title")
        await _hover(document, "#second")

        picker.disable()

        assert document.soup.select(f".{HOVER_CLASS}") == []
        assert document.soup.select(f".{SELECTED_CLASS}") == []
        assert document.listener_count == 0
        assert overlay.events == ["show", "hide"]
        assert picker.markdown == ""

    @pytest.mark.asyncio
    async def test_events_ignored_while_disabled(self, picker, document):
        node = document.query_selector("#title")

        assert await document.dispatch_event(PointerMove(node)) is False
        assert await picker.handle(PointerMove(node)) is False
        assert await picker.handle(KeyDown("Enter")) is False
        assert HOVER_CLASS not in node.class_list


class TestHover:
    @pytest.mark.asyncio
    async def test_pointer_move_marks_hover(self, picker, document):
        picker.enable()

        assert await _hover(document, "#title") is True
        title = document.query_selector("#title")
        assert picker.hover == title
        assert HOVER_CLASS in title.class_list

    @pytest.mark.asyncio
    async def test_hover_moves_marker(self, picker, document):
        picker.enable()
        await _hover(document, "#title")
        await _hover(document, "#second")

        assert HOVER_CLASS not in document.query_selector("#title").class_list
        assert HOVER_CLASS in document.query_selector("#second").class_list

    @pytest.mark.asyncio
    async def test_same_target_is_not_a_transition(self, picker, document):
        picker.enable()
        await _hover(document, "#title")

        assert await _hover(document, "#title") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("selector", ["#tool-button", "#toolbar", "#hidden-text", "body"])
    async def test_ineligible_nodes_never_hovered(self, picker, document, selector):
        picker.enable()
        await _hover(document, "#title")

        assert await _hover(document, selector) is False
        assert picker.hover == document.query_selector("#title")

    @pytest.mark.asyncio
    async def test_alt_hover_widens_to_container(self, picker, document):
        picker.enable()

        await _hover(document, "#leaf", alt=True)

        assert picker.hover == document.query_selector("#post")

    @pytest.mark.asyncio
    async def test_alt_hover_without_container_uses_target(self, picker, document):
        picker.enable()

        await _hover(document, "#wrapper", alt=True)

        assert picker.hover == document.query_selector("#wrapper")


class TestSelection:
    @pytest.mark.asyncio
    async def test_click_selects_hovered(self, picker, document):
        picker.enable()

        await _click(document, "#title")

        title = document.query_selector("#title")
        assert title in picker.selection
        assert SELECTED_CLASS in title.class_list
        assert picker.markdown == TITLE_MD

    @pytest.mark.asyncio
    async def test_click_replaces_selection(self, picker, document):
        picker.enable()
        await _click(document, "#title")
        await _click(document, "#second")

        assert list(picker.selection) == [document.query_selector("#second")]
        assert SELECTED_CLASS not in document.query_selector("#title").class_list
        assert picker.markdown == SECOND_MD

    @pytest.mark.asyncio
    async def test_shift_click_adds_in_document_order(self, picker, document):
        picker.enable()
        await _click(document, "#second")
        await _click(document, "#title", shift=True)

        assert len(picker.selection) == 2
        assert picker.markdown == "## Getting started\n\n---\n\nSecond paragraph.\n"

    @pytest.mark.asyncio
    async def test_output_order_ignores_selection_order(self, picker, document):
        picker.enable()
        await _click(document, "#second")
        await _click(document, "#first", shift=True)
        await _click(document, "#title", shift=True)

        markdown = await picker.get_markdown()

        title_at = markdown.index("Getting started")
        first_at = markdown.index("First paragraph")
        second_at = markdown.index("Second paragraph")
        assert title_at < first_at < second_at

    @pytest.mark.asyncio
    async def test_second_click_deselects(self, picker, document):
        picker.enable()
        await _click(document, "#title")
        await _click(document, "#title")

        assert len(picker.selection) == 0
        assert await picker.get_markdown() == ""

    @pytest.mark.asyncio
    async def test_shift_click_deselects_one(self, picker, document):
        picker.enable()
        await _click(document, "#title")
        await _click(document, "#second", shift=True)
        await _click(document, "#title", shift=True)

        assert list(picker.selection) == [document.query_selector("#second")]
        assert picker.markdown == SECOND_MD

    @pytest.mark.asyncio
    async def test_click_on_member_of_larger_selection_keeps_only_it(self, picker, document):
        picker.enable()
        await _click(document, "#title")
        await _click(document, "#second", shift=True)
        await _click(document, "#second")

        assert list(picker.selection) == [document.query_selector("#second")]
        assert SELECTED_CLASS not in document.query_selector("#title").class_list
        assert SELECTED_CLASS in document.query_selector("#second").class_list
        assert picker.markdown == SECOND_MD

    @pytest.mark.asyncio
    async def test_click_on_ignored_node_is_dropped(self, picker, document):
        picker.enable()
        await _hover(document, "#title")

        handled = await document.dispatch_event(Click(document.query_selector("#tool-button")))

        assert handled is False
        assert len(picker.selection) == 0

    @pytest.mark.asyncio
    async def test_click_without_hover_selects_nothing(self, picker, document):
        picker.enable()

        await document.dispatch_event(Click(document.query_selector("#title")))

        assert len(picker.selection) == 0

    @pytest.mark.asyncio
    async def test_toggle_select_rejects_ineligible_node(self, picker, document):
        picker.enable()

        await picker.toggle_select(document.query_selector("#hidden-text"), multi=False)

        assert len(picker.selection) == 0

    @pytest.mark.asyncio
    async def test_links_resolve_against_location(self, picker, document):
        picker.enable()
        await _click(document, "#first")

        assert picker.markdown == (
            'First paragraph with [the setup docs](https://example.com/guide/docs/setup.html "Setup").\n'
        )

    @pytest.mark.asyncio
    async def test_selected_code_block_is_fenced(self, picker, document):
        picker.enable()
        await _click(document, "#snippet")

        assert picker.markdown == "```js\nconst x=1;\n```\n"

    @pytest.mark.asyncio
    async def test_markers_do_not_leak_into_markdown(self, document, clipboard):
        picker = Picker(document, MemorySettingsStore(cleanup_enabled=False), clipboard)
        picker.enable()
        await _click(document, "#wrapper")

        markdown = picker.markdown
        assert "zap-" not in markdown
        assert "Zap" not in markdown
        assert "color" not in markdown
        assert markdown.startswith("## Getting started")

    @pytest.mark.asyncio
    async def test_cleanup_disabled_returns_raw_join(self, document, clipboard):
        picker = Picker(document, MemorySettingsStore(cleanup_enabled=False), clipboard)
        picker.enable()
        await _click(document, "#title")

        assert picker.markdown == "## Getting started"

    @pytest.mark.asyncio
    async def test_detached_nodes_are_dropped(self, picker, document):
        picker.enable()
        await _click(document, "#title")
        await _click(document, "#second", shift=True)

        document.query_selector("#second").element.extract()

        assert await picker.build_markdown() == TITLE_MD

    @pytest.mark.asyncio
    async def test_all_nodes_detached_gives_empty_markdown(self, picker, document):
        picker.enable()
        await _click(document, "#second")

        document.query_selector("#second").element.extract()

        assert await picker.build_markdown() == ""

    @pytest.mark.asyncio
    async def test_clear_selection_removes_markers(self, picker, document):
        picker.enable()
        await _click(document, "#title")

        picker.clear_selection()

        assert len(picker.selection) == 0
        assert picker.markdown == ""
        assert SELECTED_CLASS not in document.query_selector("#title").class_list


class TestKeys:
    @pytest.mark.asyncio
    async def test_enter_selects_hovered(self, picker, document):
        picker.enable()
        await _hover(document, "#title")

        assert await document.dispatch_event(KeyDown("Enter")) is True
        assert picker.markdown == TITLE_MD

    @pytest.mark.asyncio
    async def test_shift_enter_adds(self, picker, document):
        picker.enable()
        await _hover(document, "#title")
        await document.dispatch_event(KeyDown("Enter"))
        await _hover(document, "#second")
        await document.dispatch_event(KeyDown("Enter", shift=True))

        assert len(picker.selection) == 2

    @pytest.mark.asyncio
    async def test_escape_disables(self, picker, document):
        picker.enable()
        await _click(document, "#title")

        await document.dispatch_event(KeyDown("Escape"))

        assert picker.state is PickerState.DISABLED
        assert document.soup.select(f".{SELECTED_CLASS}") == []

    @pytest.mark.asyncio
    async def test_arrow_up_moves_to_parent(self, picker, document):
        picker.enable()
        await _hover(document, "#leaf")

        await document.dispatch_event(KeyDown("ArrowUp"))
        assert picker.hover == document.query_selector("div.inner")

        await document.dispatch_event(KeyDown("ArrowUp"))
        assert picker.hover == document.query_selector("#post")

    @pytest.mark.asyncio
    async def test_arrow_up_stops_below_root(self, picker, document):
        picker.enable()
        await _hover(document, "#wrapper")

        await document.dispatch_event(KeyDown("ArrowUp"))

        assert picker.hover == document.query_selector("#wrapper")

    @pytest.mark.asyncio
    async def test_arrow_up_skips_invisible_parent(self, clipboard):
        document = HostDocument.from_html(
            '<div id="outer"><div id="ghost" style="visibility: hidden">'
            '<p id="inner" style="visibility: visible">shown</p></div></div>'
        )
        picker = Picker(document, MemorySettingsStore(), clipboard)
        picker.enable()
        await _hover(document, "#inner")

        await document.dispatch_event(KeyDown("ArrowUp"))

        assert picker.hover == document.query_selector("#outer")

    @pytest.mark.asyncio
    async def test_arrow_down_picks_first_eligible_child(self, clipboard):
        document = HostDocument.from_html(
            '<div id="list"><span id="gone" hidden>no</span>'
            '<span id="shown">yes</span><span id="later">later</span></div>'
        )
        picker = Picker(document, MemorySettingsStore(), clipboard)
        picker.enable()
        await _hover(document, "#list")

        await document.dispatch_event(KeyDown("ArrowDown"))

        assert picker.hover == document.query_selector("#shown")

    @pytest.mark.asyncio
    async def test_arrow_down_on_leaf_keeps_hover(self, picker, document):
        picker.enable()
        await _hover(document, "#leaf")

        await document.dispatch_event(KeyDown("ArrowDown"))

        assert picker.hover == document.query_selector("#leaf")

    @pytest.mark.asyncio
    async def test_unbound_key_is_ignored(self, picker, document):
        picker.enable()

        assert await document.dispatch_event(KeyDown("x")) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("event", [KeyDown("c", ctrl=True), KeyDown("C", meta=True)])
    async def test_copy_shortcut_copies_and_clears(self, picker, document, clipboard, event):
        picker.enable()
        await _click(document, "#title")

        await document.dispatch_event(event)

        assert clipboard.writes == [TITLE_MD]
        assert len(picker.selection) == 0
        assert picker.state is PickerState.ENABLED

    @pytest.mark.asyncio
    async def test_copy_shortcut_clears_even_when_clipboard_fails(self, document, settings, failing_clipboard):
        clipboard = failing_clipboard
        picker = Picker(document, settings, clipboard, NullOverlay())
        picker.enable()
        await _click(document, "#title")

        await document.dispatch_event(KeyDown("c", ctrl=True))

        assert clipboard.writes == []
        assert len(picker.selection) == 0

    @pytest.mark.asyncio
    async def test_copy_shortcut_with_empty_selection_writes_nothing(self, picker, document, clipboard):
        picker.enable()

        await document.dispatch_event(KeyDown("c", ctrl=True))

        assert clipboard.writes == []
