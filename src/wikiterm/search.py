"""Incremental text search over a document.

Each content node is flattened into one character stream (inline texts and
link labels concatenated, list items joined by a newline).  Matches are
case-insensitive substrings found at every starting offset of a stream, so
overlapping matches are all reported.  Matches are expressed in stream offsets
and mapped back onto rendered rows through span provenance.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass

from wikiterm.models import (
    GAP,
    Document,
    LayoutState,
    RenderedLine,
    SpanSource,
    Style,
    StyledSpan,
    block_items,
    inline_text,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Match:
    """A match: node index and [start, end) offsets into the node's stream."""
    node: int
    start: int
    end: int


class SearchIndex:
    """Per-node text streams with offsets back to (item, inline)."""

    def __init__(self, document: Document):
        self.streams: list[str] = []
        self._bases: list[list[tuple[int, int, int]]] = []  # (offset, item, inline)
        self._lookup: list[dict[tuple[int, int], int]] = []
        for node in document.nodes:
            parts: list[str] = []
            bases: list[tuple[int, int, int]] = []
            pos = 0
            for item_idx, inlines in enumerate(block_items(node)):
                if item_idx:
                    parts.append("\n")
                    pos += 1
                for inline_idx, inline in enumerate(inlines):
                    text = inline_text(inline)
                    bases.append((pos, item_idx, inline_idx))
                    parts.append(text)
                    pos += len(text)
            self.streams.append("".join(parts))
            self._bases.append(bases)
            self._lookup.append({(item, inline): off for off, item, inline in bases})

    def offset(self, node: int, item: int, inline: int) -> int:
        """Stream offset at which an inline starts."""
        return self._lookup[node][(item, inline)]

    def locate(self, node: int, offset: int) -> tuple[int, int, int]:
        """Map a stream offset to (item, inline, offset within inline)."""
        bases = self._bases[node]
        if not bases:
            return 0, 0, 0
        idx = bisect.bisect_right([b[0] for b in bases], offset) - 1
        base, item, inline = bases[max(0, idx)]
        return item, inline, offset - base

    def find(self, query: str) -> list[Match]:
        if not query:
            return []
        needle = query.lower()
        size = len(query)
        matches: list[Match] = []
        for node, stream in enumerate(self.streams):
            lowered = stream.lower()
            if len(lowered) == len(stream):
                pos = lowered.find(needle)
                while pos != -1:
                    matches.append(Match(node, pos, pos + size))
                    pos = lowered.find(needle, pos + 1)
            else:
                # Lowercasing changed the length; compare slice by slice.
                for pos in range(len(stream) - size + 1):
                    if stream[pos:pos + size].lower() == needle:
                        matches.append(Match(node, pos, pos + size))
        return matches


class SearchEngine:
    """Query state: the query, its sorted matches and the current match."""

    def __init__(self, document: Document | None = None):
        self.query = ""
        self.matches: list[Match] = []
        self.current: int | None = None
        self._by_node: dict[int, list[Match]] = {}
        self.index = SearchIndex(document or Document(ref=""))

    # ------------------------------------------------------------------
    # Query state
    # ------------------------------------------------------------------

    def set_document(self, document: Document) -> None:
        """Rebuild the index; the query carries over to the new document."""
        self.index = SearchIndex(document)
        self._refresh()

    def set_query(self, query: str) -> None:
        self.query = query
        self._refresh()

    def _refresh(self) -> None:
        self.matches = sorted(self.index.find(self.query))
        self.current = None
        self._by_node = {}
        for m in self.matches:
            self._by_node.setdefault(m.node, []).append(m)
        logger.debug("query %r: %d matches", self.query, len(self.matches))

    def current_match(self) -> Match | None:
        if self.current is None:
            return None
        return self.matches[self.current]

    def next_match(self) -> Match | None:
        if not self.matches:
            return None
        self.current = 0 if self.current is None else (self.current + 1) % len(self.matches)
        return self.current_match()

    def previous_match(self) -> Match | None:
        if not self.matches:
            return None
        if self.current is None:
            self.current = len(self.matches) - 1
        else:
            self.current = (self.current - 1) % len(self.matches)
        return self.current_match()

    def current_highlight(self) -> tuple[int, tuple[int, int]] | None:
        match = self.current_match()
        if match is None:
            return None
        return match.node, (match.start, match.end)

    # ------------------------------------------------------------------
    # Mapping onto a layout
    # ------------------------------------------------------------------

    def line_of(self, match: Match, layout: LayoutState) -> int | None:
        item, inline, local = self.index.locate(match.node, match.start)
        return layout.line_of_position(match.node, item, inline, local)

    def select_from(self, line: int, layout: LayoutState) -> Match | None:
        """Make the first match on or after ``line`` current, wrapping around."""
        if not self.matches:
            return None
        self.current = 0
        for idx, match in enumerate(self.matches):
            found = self.line_of(match, layout)
            if found is not None and found >= line:
                self.current = idx
                break
        return self.current_match()

    def _stream_range(self, source: SpanSource) -> tuple[int, int]:
        base = self.index.offset(source.node, source.item, source.inline)
        return base + source.start, base + source.end

    def decorate(self, line: RenderedLine) -> RenderedLine:
        """Split spans so that matched characters carry the match style."""
        if not self._by_node or not line.spans:
            return line
        spans = line.spans
        out: list[StyledSpan] = []
        for pos, span in enumerate(spans):
            src = span.source
            node_matches = self._by_node.get(src.node)
            if not node_matches:
                out.append(span)
                continue
            if src.inline == GAP:
                out.append(self._decorate_gap(span, spans, pos, node_matches))
            elif src.is_decoration:
                out.append(span)
            else:
                out.extend(self._decorate_word(span, node_matches))
        return RenderedLine(tuple(out))

    def _decorate_gap(self, span, spans, pos, node_matches) -> StyledSpan:
        if pos == 0 or pos + 1 >= len(spans):
            return span
        _, left = self._stream_range(spans[pos - 1].source)
        right, _ = self._stream_range(spans[pos + 1].source)
        for m in node_matches:
            if m.start < left and m.end > right:
                return StyledSpan(span.text, Style.SEARCH_MATCH, span.source)
        return span

    def _decorate_word(self, span: StyledSpan, node_matches: list[Match]) -> list[StyledSpan]:
        src = span.source
        lo, hi = self._stream_range(src)
        hits = [(max(m.start, lo) - lo, min(m.end, hi) - lo)
                for m in node_matches if m.start < hi and m.end > lo]
        if not hits:
            return [span]
        if len(span.text) != src.end - src.start:
            # Display text differs from the source (collapsed link label).
            return [StyledSpan(span.text, Style.SEARCH_MATCH, src)]

        marked = [False] * len(span.text)
        for a, b in hits:
            for i in range(a, b):
                marked[i] = True
        pieces: list[StyledSpan] = []
        start = 0
        for i in range(1, len(marked) + 1):
            if i == len(marked) or marked[i] != marked[start]:
                style = Style.SEARCH_MATCH if marked[start] else span.style
                pieces.append(StyledSpan(
                    span.text[start:i],
                    style,
                    SpanSource(src.node, src.inline, src.start + start, src.start + i, src.item),
                ))
                start = i
        return pieces
