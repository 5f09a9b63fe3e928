"""Tests for wikiterm.models — document and rendered-line models."""

import pytest

from wikiterm.models import (
    GAP,
    MARKER,
    Document,
    Heading,
    Link,
    ListBlock,
    Paragraph,
    RenderedLine,
    Section,
    SpanSource,
    Style,
    StyledSpan,
    Text,
    block_items,
    inline_text,
)


class TestHeading:
    def test_valid_levels(self):
        for level in range(1, 7):
            assert Heading(level).level == level

    @pytest.mark.parametrize("level", [0, 7, -1])
    def test_invalid_level(self, level):
        with pytest.raises(ValueError, match="between 1 and 6"):
            Heading(level)


class TestDocument:
    def test_links_in_document_order(self):
        doc = Document(ref="x", nodes=(
            Heading(1, (Link("A", "a"),)),
            Paragraph((Text("t "), Link("B", "b"))),
            ListBlock(False, ((Link("C", "c"),), (Text("no link"),))),
        ))
        assert [lk.target for lk in doc.links()] == ["a", "b", "c"]

    def test_is_immutable(self):
        doc = Document(ref="x")
        with pytest.raises(AttributeError):
            doc.ref = "y"

    def test_block_items(self):
        para = Paragraph((Text("a"),))
        lst = ListBlock(True, ((Text("1"),), (Text("2"),)))
        assert block_items(para) == ((Text("a"),),)
        assert len(block_items(lst)) == 2

    def test_inline_text(self):
        assert inline_text(Text("plain")) == "plain"
        assert inline_text(Link("label", "Target")) == "label"


class TestSections:
    DOC = Document(ref="x", nodes=(
        Heading(1, (Text("Cats"),)),
        Paragraph((Text("intro"),)),
        Heading(2, (Text("Cat "), Link("behavior", "Ethology"))),
        Heading(3, (Text("Sleep"),)),
        Paragraph((Text("naps"),)),
        Heading(2, (Text("Behavior"),)),
        Paragraph((Text("hunts"),)),
    ))

    def test_sections_in_order(self):
        assert self.DOC.sections() == [
            Section(0, 1, "Cats"),
            Section(2, 2, "Cat behavior"),
            Section(3, 3, "Sleep"),
            Section(5, 2, "Behavior"),
        ]

    def test_exact_name_wins_over_substring(self):
        assert self.DOC.find_section("BEHAVIOR") == Section(5, 2, "Behavior")

    def test_substring_match(self):
        assert self.DOC.find_section("slee") == Section(3, 3, "Sleep")

    def test_unknown_or_blank_name(self):
        assert self.DOC.find_section("diet") is None
        assert self.DOC.find_section("  ") is None

    def test_section_end_stops_at_same_or_higher_level(self):
        assert self.DOC.section_end(Section(2, 2, "Cat behavior")) == 5
        assert self.DOC.section_end(Section(3, 3, "Sleep")) == 5
        assert self.DOC.section_end(Section(5, 2, "Behavior")) == 7
        assert self.DOC.section_end(Section(0, 1, "Cats")) == 7


class TestRenderedLine:
    def test_text_and_width(self):
        line = RenderedLine((
            StyledSpan("• ", Style.PLAIN, SpanSource(0, MARKER, 0, 0)),
            StyledSpan("cat", Style.PLAIN, SpanSource(0, 0, 0, 3)),
            StyledSpan(" ", Style.PLAIN, SpanSource(0, GAP, 0, 0)),
            StyledSpan("nap", Style.LINK, SpanSource(0, 1, 0, 3)),
        ))
        assert line.text == "• cat nap"
        assert line.width == 9
        assert len(line) == 4

    def test_decoration_flag(self):
        assert SpanSource(0, MARKER, 0, 0).is_decoration
        assert SpanSource(0, GAP, 0, 0).is_decoration
        assert not SpanSource(0, 0, 0, 1).is_decoration

    def test_style_values(self):
        assert Style.LINK_FOCUSED.value == "link-focused"
        assert Style.SEARCH_MATCH.value == "search-match"
