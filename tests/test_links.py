"""Tests for wikiterm.links — focus cycling, activation and focus styling."""

import pytest

from wikiterm.layout import layout
from wikiterm.links import LinkNavigator
from wikiterm.models import Document, Link, Paragraph, Style, Text


@pytest.fixture
def doc():
    return Document(ref="Cat", nodes=(
        Paragraph((Text("See "), Link("dogs", "Dog"), Text(" and "), Link("mice", "Mouse"), Text("."))),
        Paragraph((Text("Also "), Link("lions", "Lion"), Text("."))),
    ))


@pytest.fixture
def state(doc):
    return layout(doc, 40)


@pytest.fixture
def nav(state):
    return LinkNavigator(state)


class TestFocusCycling:
    def test_starts_unfocused(self, nav):
        assert nav.focused() is None
        assert nav.focused_index is None

    def test_next_from_none_is_first(self, nav):
        assert nav.focus_next().target == "Dog"

    def test_previous_from_none_is_last(self, nav):
        assert nav.focus_previous().target == "Lion"

    def test_next_in_document_order(self, nav):
        targets = [nav.focus_next().target for _ in range(3)]
        assert targets == ["Dog", "Mouse", "Lion"]

    def test_cycles_back_after_n(self, nav):
        nav.focus_next()
        start = nav.focused_index
        for _ in range(len(nav.links)):
            nav.focus_next()
        assert nav.focused_index == start

    def test_previous_cycles_back_after_n(self, nav):
        nav.focus_next()
        for _ in range(len(nav.links)):
            nav.focus_previous()
        assert nav.focused_index == 0

    def test_previous_wraps_to_last(self, nav):
        nav.focus_next()
        assert nav.focus_previous().target == "Lion"

    def test_no_links(self):
        nav = LinkNavigator(layout(Document(ref="x", nodes=(Paragraph((Text("none"),)),)), 40))
        assert nav.focus_next() is None
        assert nav.focus_previous() is None
        assert nav.focused_index is None


class TestActivate:
    def test_nothing_focused(self, nav):
        assert nav.activate() is None

    def test_returns_target(self, nav):
        nav.focus_next()
        nav.focus_next()
        assert nav.activate() == "Mouse"


class TestRelayout:
    def test_new_document_clears_focus(self, nav, doc):
        nav.focus_next()
        nav.set_layout(layout(doc, 20))
        assert nav.focused() is None

    def test_keep_focus_on_same_document(self, nav, doc):
        nav.focus_next()
        nav.focus_next()
        narrow = layout(doc, 10)
        nav.set_layout(narrow, keep_focus=True)
        assert nav.focused_index == 1
        assert nav.focused().target == "Mouse"
        assert nav.focused().line == narrow.links[1].line

    def test_keep_focus_out_of_range_clears(self, nav):
        nav.focus_previous()
        fewer = Document(ref="x", nodes=(Paragraph((Link("one", "One"),)),))
        nav.set_layout(layout(fewer, 40), keep_focus=True)
        assert nav.focused_index is None


class TestDecorate:
    def test_focused_span_restyled(self, nav, state):
        link = nav.focus_next()
        line = state.lines[link.line]
        styled = nav.decorate(link.line, line)
        assert styled.spans[link.span].style is Style.LINK_FOCUSED
        assert styled.text == line.text

    def test_other_rows_untouched(self, nav, state):
        link = nav.focus_next()
        line = state.lines[link.line]
        assert nav.decorate(link.line + 1, line) is line

    def test_unfocused_untouched(self, nav, state):
        line = state.lines[0]
        assert nav.decorate(0, line) is line

    def test_only_one_span_focused(self, nav, state):
        link = nav.focus_next()
        styled = nav.decorate(link.line, state.lines[link.line])
        focused = [s for s in styled.spans if s.style is Style.LINK_FOCUSED]
        assert len(focused) == 1
        assert focused[0].text == "dogs"
