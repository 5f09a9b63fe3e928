"""Data models for articles and their rendered form."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from rich.cells import cell_len

# A DocumentRef is an article title or URL; only compared and displayed.
DocumentRef = str

# Reserved inline indices for spans that do not come from an inline.
MARKER = -1  # indents and list markers
GAP = -2     # the space between two words


# ------------------------------------------------------------------
# Document model
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Text:
    """Plain running text."""
    string: str


@dataclass(frozen=True)
class Link:
    """A hyperlink to another document."""
    label: str
    target: DocumentRef


Inline = Union[Text, Link]


@dataclass(frozen=True)
class Heading:
    level: int
    text: tuple[Inline, ...] = ()

    def __post_init__(self):
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be between 1 and 6, got {self.level}")


@dataclass(frozen=True)
class Paragraph:
    text: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class ListBlock:
    ordered: bool
    items: tuple[tuple[Inline, ...], ...] = ()


Block = Union[Heading, Paragraph, ListBlock]


def block_items(node: Block) -> tuple[tuple[Inline, ...], ...]:
    """Return the inline runs of a block, one per list item (one for others)."""
    if isinstance(node, ListBlock):
        return node.items
    return (node.text,)


def inline_text(inline: Inline) -> str:
    if isinstance(inline, Link):
        return inline.label
    return inline.string


@dataclass(frozen=True)
class Document:
    """An article: an immutable sequence of content nodes."""
    ref: DocumentRef
    title: str = ""
    nodes: tuple[Block, ...] = ()

    def links(self) -> list[Link]:
        """All links in document order."""
        found = []
        for node in self.nodes:
            for item in block_items(node):
                found.extend(i for i in item if isinstance(i, Link))
        return found

    def sections(self) -> list[Section]:
        """The headings of the article in document order."""
        return [
            Section(idx, node.level, "".join(inline_text(i) for i in node.text).strip())
            for idx, node in enumerate(self.nodes)
            if isinstance(node, Heading)
        ]

    def find_section(self, name: str) -> Section | None:
        """Find a heading by name: exact match first, then substring (case-insensitive)."""
        name_lower = name.strip().lower()
        if not name_lower:
            return None
        sections = self.sections()
        for s in sections:
            if s.title.lower() == name_lower:
                return s
        for s in sections:
            if name_lower in s.title.lower():
                return s
        return None

    def section_end(self, section: Section) -> int:
        """Index of the first node after ``section``'s body.

        The body runs until the next heading of the same or a higher level.
        """
        for idx in range(section.node + 1, len(self.nodes)):
            node = self.nodes[idx]
            if isinstance(node, Heading) and node.level <= section.level:
                return idx
        return len(self.nodes)


@dataclass(frozen=True)
class Section:
    """A heading of an article, by node index."""
    node: int
    level: int
    title: str


# ------------------------------------------------------------------
# Rendered form
# ------------------------------------------------------------------

class Style(str, Enum):
    PLAIN = "plain"
    HEADING = "heading"
    LINK = "link"
    LINK_FOCUSED = "link-focused"
    SEARCH_MATCH = "search-match"


@dataclass(frozen=True)
class SpanSource:
    """Where a rendered span came from: node, item, inline and char range."""
    node: int
    inline: int
    start: int
    end: int
    item: int = 0

    @property
    def is_decoration(self) -> bool:
        return self.inline < 0


@dataclass(frozen=True)
class StyledSpan:
    text: str
    style: Style
    source: SpanSource

    @property
    def width(self) -> int:
        return cell_len(self.text)


@dataclass(frozen=True)
class RenderedLine:
    """One terminal row."""
    spans: tuple[StyledSpan, ...] = ()

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)

    @property
    def width(self) -> int:
        return sum(s.width for s in self.spans)

    def __len__(self) -> int:
        return len(self.spans)


@dataclass(frozen=True)
class LinkLocation:
    """A link span's position in a layout."""
    line: int
    span: int
    node: int
    item: int
    inline: int
    target: DocumentRef


@dataclass(frozen=True)
class LayoutState:
    width: int
    lines: tuple[RenderedLine, ...] = ()
    line_of_node: dict[int, int] = field(default_factory=dict)
    links: tuple[LinkLocation, ...] = ()

    def line_of_position(self, node: int, item: int, inline: int, offset: int) -> int | None:
        """Find the first line showing a source position of a node.

        Positions that fall on collapsed whitespace resolve to the line of the
        following word. Returns None when the node is not laid out.
        """
        start = self.line_of_node.get(node)
        if start is None:
            return None
        target = (item, inline, offset)
        last = start
        for idx in range(start, len(self.lines)):
            for span in self.lines[idx].spans:
                src = span.source
                if src.is_decoration:
                    continue
                if src.node > node:
                    return last
                if src.node < node:
                    continue
                last = idx
                if target < (src.item, src.inline, src.end):
                    return idx
        return last
