"""Tests for wikiterm.viewport — clamping, node scrolling and re-layout."""

import pytest

from wikiterm.errors import AnchorLost
from wikiterm.layout import layout
from wikiterm.models import Document, Paragraph, Text
from wikiterm.viewport import Viewport


def _doc(paragraphs=20, words=12):
    nodes = tuple(
        Paragraph((Text(" ".join(f"p{i}w{j}" for j in range(words))),))
        for i in range(paragraphs)
    )
    return Document(ref="long", nodes=nodes)


@pytest.fixture
def doc():
    return _doc()


class TestScroll:
    @pytest.mark.parametrize("height", [1, 3, 10, 500])
    def test_clamped_after_any_scroll(self, doc, height):
        state = layout(doc, 30)
        vp = Viewport(state, height)
        upper = max(0, len(state.lines) - height)
        for delta in [5, -2, 40, 1000, -1000, 7, 3, -1, 250]:
            vp.scroll(delta)
            assert 0 <= vp.top_line <= upper

    def test_page_down_and_up(self, doc):
        vp = Viewport(layout(doc, 30), 5)
        vp.page_down()
        assert vp.top_line == 5
        vp.page_up()
        assert vp.top_line == 0

    def test_empty_layout(self):
        vp = Viewport(layout(Document(ref="x"), 30), 5)
        vp.scroll(10)
        assert vp.top_line == 0
        assert vp.visible_lines() == []

    def test_visible_lines_window(self, doc):
        state = layout(doc, 30)
        vp = Viewport(state, 4)
        vp.scroll(3)
        assert vp.visible_lines() == list(state.lines[3:7])
        assert vp.visible_lines(2) == list(state.lines[3:5])

    def test_resize_reclamps(self, doc):
        state = layout(doc, 30)
        vp = Viewport(state, 5)
        vp.scroll(10_000)
        vp.resize(len(state.lines) + 10)
        assert vp.top_line == 0


class TestScrollToNode:
    def test_moves_to_first_line_of_node(self, doc):
        state = layout(doc, 30)
        vp = Viewport(state, 5)
        vp.scroll_to_node(4)
        assert vp.top_line == state.line_of_node[4]
        assert vp.anchor_node == 4

    def test_missing_node_leaves_state(self, doc):
        vp = Viewport(layout(doc, 30), 5)
        vp.scroll(7)
        with pytest.raises(AnchorLost):
            vp.scroll_to_node(99)
        assert vp.top_line == 7

    def test_blank_line_anchors_next_node(self, doc):
        state = layout(doc, 30)
        vp = Viewport(state, 5)
        blank = state.line_of_node[3] - 1
        assert state.lines[blank].spans == ()
        vp.scroll(blank)
        assert vp.anchor_node == 3

    def test_mid_paragraph_anchors_that_paragraph(self, doc):
        state = layout(doc, 30)
        vp = Viewport(state, 5)
        vp.scroll(state.line_of_node[2] + 1)
        assert vp.anchor_node == 2


class TestReveal:
    def test_line_below_scrolls_minimally(self, doc):
        vp = Viewport(layout(doc, 30), 5)
        vp.reveal(12)
        assert vp.top_line == 8

    def test_line_above_scrolls_minimally(self, doc):
        vp = Viewport(layout(doc, 30), 5)
        vp.scroll(20)
        vp.reveal(15)
        assert vp.top_line == 15

    def test_visible_line_does_not_scroll(self, doc):
        vp = Viewport(layout(doc, 30), 5)
        vp.scroll(10)
        vp.reveal(12)
        assert vp.top_line == 10


class TestRelayout:
    def test_resize_keeps_anchor_node(self, doc):
        vp = Viewport(layout(doc, 40), 5)
        vp.scroll_to_node(6)
        assert vp.anchor_node == 6

        narrow = layout(doc, 20)
        vp.set_layout(narrow)
        assert vp.top_line == narrow.line_of_node[6]
        assert vp.anchor_node == 6

    def test_resize_does_not_carry_raw_line_number(self, doc):
        wide = layout(doc, 40)
        vp = Viewport(wide, 5)
        vp.scroll_to_node(6)
        old_top = vp.top_line

        narrow = layout(doc, 20)
        vp.set_layout(narrow)
        assert narrow.line_of_node[6] != old_top
        assert vp.top_line == narrow.line_of_node[6]

    def test_lost_anchor_falls_back_to_top(self, doc):
        vp = Viewport(layout(doc, 30), 5)
        vp.scroll_to_node(15)
        vp.set_layout(layout(_doc(paragraphs=3), 30))
        assert vp.top_line == 0

    def test_set_layout_with_new_height(self, doc):
        vp = Viewport(layout(doc, 40), 5)
        vp.scroll_to_node(6)
        narrow = layout(doc, 20)
        vp.set_layout(narrow, height=8)
        assert vp.height == 8
        assert vp.top_line == narrow.line_of_node[6]
