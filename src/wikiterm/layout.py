"""Lay out a document into terminal rows of a fixed width.

Every block is turned into a token stream: plain text yields one token per
whitespace-delimited word, a link yields one indivisible token for its whole
label.  Tokens are wrapped greedily.  A link never straddles two rows; a plain
word wider than the row is chopped into row-sized chunks.

Layout is a pure function of (document, width).  It is recomputed in full on
every resize or document change; there is no incremental update.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from rich.cells import cell_len

from wikiterm.models import (
    GAP,
    MARKER,
    Block,
    Document,
    Heading,
    Inline,
    LayoutState,
    Link,
    LinkLocation,
    ListBlock,
    RenderedLine,
    SpanSource,
    Style,
    StyledSpan,
    block_items,
)

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\S+")

HEADING_INDENT = 2  # cells per heading level below 1
BULLET = "• "


@dataclass
class _Token:
    text: str
    inline: int
    start: int
    end: int
    item: int
    space_before: bool
    target: str | None = None

    @property
    def width(self) -> int:
        return cell_len(self.text)


def _tokenize(inlines: tuple[Inline, ...], item: int) -> list[_Token]:
    """Split one run of inlines into wrap tokens."""
    tokens: list[_Token] = []
    prev_ws = False  # did the stream so far end in whitespace?
    for idx, inline in enumerate(inlines):
        if isinstance(inline, Link):
            label = inline.label
            shown = " ".join(label.split())
            if shown:
                start = len(label) - len(label.lstrip())
                tokens.append(_Token(
                    text=shown,
                    inline=idx,
                    start=start,
                    end=len(label.rstrip()),
                    item=item,
                    space_before=prev_ws or label[0].isspace(),
                    target=inline.target,
                ))
            if label:
                prev_ws = label[-1].isspace()
            continue

        s = inline.string
        for m in _WORD_RE.finditer(s):
            tokens.append(_Token(
                text=m.group(0),
                inline=idx,
                start=m.start(),
                end=m.end(),
                item=item,
                space_before=m.start() > 0 or prev_ws,
            ))
        if s:
            prev_ws = s[-1].isspace()
    return tokens


class _Typesetter:
    """Accumulates spans into rows of at most ``width`` cells."""

    def __init__(self, width: int):
        self.width = width
        self.lines: list[RenderedLine] = []
        self.links: list[LinkLocation] = []
        self._spans: list[StyledSpan] = []
        self._used = 0
        self._has_words = False
        self._cont_prefix = ""
        self._node = 0
        self._item = 0

    # -- row management --

    def _push(self, span: StyledSpan) -> None:
        self._spans.append(span)
        self._used += span.width

    def _prefix(self, text: str) -> None:
        if text:
            self._push(StyledSpan(text, Style.PLAIN, SpanSource(self._node, MARKER, 0, 0, self._item)))

    def flush(self) -> None:
        if self._spans:
            self.lines.append(RenderedLine(tuple(self._spans)))
        self._spans = []
        self._used = 0
        self._has_words = False

    def blank(self) -> None:
        self.flush()
        self.lines.append(RenderedLine())

    def _newline(self) -> None:
        self.flush()
        self._prefix(self._cont_prefix)

    def _drop_prefix(self) -> None:
        """Clear the indent or marker of a row that has no words yet."""
        self._spans = []
        self._used = 0

    def begin(self, node: int, item: int, marker: str, hang: int) -> None:
        """Start a fresh row for a block or list item."""
        self.flush()
        self._node = node
        self._item = item
        # A prefix that leaves no room for text is dropped.
        if cell_len(marker) >= self.width or hang >= self.width:
            marker, hang = "", 0
        self._cont_prefix = " " * hang
        self._prefix(marker)

    # -- token placement --

    def place(self, token: _Token, style: Style) -> None:
        gap = self._has_words and token.space_before
        need = token.width + (1 if gap else 0)
        if self._has_words and self._used + need > self.width:
            self._newline()
            gap = False

        if not self._has_words and self._used + token.width > self.width:
            if token.target is None:
                self._chop(token, style)
                return
            # A link keeps its label whole and gives up the row prefix instead.
            self._drop_prefix()
            if token.width > self.width:
                logger.debug("link %r wider than %d cells", token.text, self.width)

        if gap:
            self._push(StyledSpan(" ", Style.PLAIN, SpanSource(self._node, GAP, 0, 0, self._item)))
        self._emit(token, style)

    def _emit(self, token: _Token, style: Style) -> None:
        if token.target is not None:
            self.links.append(LinkLocation(
                line=len(self.lines),
                span=len(self._spans),
                node=self._node,
                item=token.item,
                inline=token.inline,
                target=token.target,
            ))
            style = Style.LINK
        self._push(StyledSpan(
            token.text,
            style,
            SpanSource(self._node, token.inline, token.start, token.end, token.item),
        ))
        self._has_words = True

    def _chop(self, token: _Token, style: Style) -> None:
        """Split an unbreakable plain word over as many rows as it needs."""
        text = token.text
        pos = 0
        while pos < len(text):
            room = self.width - self._used
            if self._used and cell_len(text[pos]) > room:
                self._drop_prefix()
                room = self.width
            end = pos
            cells = 0
            while end < len(text):
                w = cell_len(text[end])
                if cells + w > room and end > pos:
                    break
                cells += w
                end += 1
            piece = _Token(
                text=text[pos:end],
                inline=token.inline,
                start=token.start + pos,
                end=token.start + end,
                item=token.item,
                space_before=False,
            )
            self._emit(piece, style)
            pos = end
            if pos < len(text):
                self._newline()


def _block_shape(node: Block) -> tuple[Style, list[tuple[str, int]]]:
    """Return the word style and a (marker, hanging indent) per item."""
    if isinstance(node, Heading):
        indent = " " * (HEADING_INDENT * (node.level - 1))
        return Style.HEADING, [(indent, len(indent))]
    if isinstance(node, ListBlock):
        shapes = []
        for i in range(len(node.items)):
            marker = f"{i + 1}. " if node.ordered else BULLET
            shapes.append((marker, cell_len(marker)))
        return Style.PLAIN, shapes
    return Style.PLAIN, [("", 0)]


def layout(document: Document, width: int) -> LayoutState:
    """Lay out ``document`` into rows of at most ``width`` cells."""
    if width <= 0:
        raise ValueError(f"viewport width must be positive, got {width}")

    setter = _Typesetter(width)
    line_of_node: dict[int, int] = {}
    unplaced: list[int] = []
    after_heading = False

    for node_idx, node in enumerate(document.nodes):
        style, shapes = _block_shape(node)
        items = [
            (item_idx, _tokenize(inlines, item_idx), shapes[item_idx])
            for item_idx, inlines in enumerate(block_items(node))
        ]
        items = [entry for entry in items if entry[1]]
        if not items:
            unplaced.append(node_idx)
            continue

        setter.flush()
        if setter.lines and not after_heading:
            setter.blank()
        first_line = len(setter.lines)
        line_of_node[node_idx] = first_line
        for pending in unplaced:
            line_of_node[pending] = first_line
        unplaced = []

        for item_idx, tokens, (marker, hang) in items:
            setter.begin(node_idx, item_idx, marker, hang)
            for token in tokens:
                setter.place(token, style)
        after_heading = isinstance(node, Heading)

    setter.flush()
    if unplaced:
        tail = max(0, len(setter.lines) - 1)
        for pending in unplaced:
            line_of_node[pending] = tail

    return LayoutState(
        width=width,
        lines=tuple(setter.lines),
        line_of_node=line_of_node,
        links=tuple(setter.links),
    )
