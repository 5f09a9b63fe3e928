"""Scroll state over a laid-out document."""

from __future__ import annotations

import bisect
import logging

from wikiterm.errors import AnchorLost
from wikiterm.models import LayoutState, RenderedLine

logger = logging.getLogger(__name__)


class Viewport:
    """The visible window into a layout.

    ``anchor_node`` remembers which content node sits at the top of the
    window.  After a re-layout the window is re-positioned on that node rather
    than on the old row number, so rewrapping does not move the text the user
    was reading.
    """

    def __init__(self, layout: LayoutState, height: int = 1):
        self.layout = layout
        self.height = max(1, height)
        self.top_line = 0
        self.anchor_node = 0
        self._index_layout()
        self._update_anchor()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def max_top(self) -> int:
        return max(0, len(self.layout.lines) - self.height)

    def visible_lines(self, height: int | None = None) -> list[RenderedLine]:
        height = self.height if height is None else height
        return list(self.layout.lines[self.top_line:self.top_line + height])

    def is_visible(self, line: int) -> bool:
        return self.top_line <= line < self.top_line + self.height

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def _set_top(self, line: int) -> None:
        self.top_line = min(max(0, line), self.max_top)
        self._update_anchor()

    def scroll(self, delta: int) -> None:
        self._set_top(self.top_line + delta)

    def page_down(self) -> None:
        self.scroll(self.height)

    def page_up(self) -> None:
        self.scroll(-self.height)

    def scroll_to_node(self, node: int) -> None:
        """Put the first row of ``node`` at the top of the window.

        Raises AnchorLost, leaving the state untouched, when the node is not
        part of the current layout.
        """
        line = self.layout.line_of_node.get(node)
        if line is None:
            raise AnchorLost(node)
        self._set_top(line)

    def reveal(self, line: int) -> None:
        """Scroll the shortest distance that brings ``line`` into view."""
        if line < self.top_line:
            self._set_top(line)
        elif line >= self.top_line + self.height:
            self._set_top(line - self.height + 1)

    # ------------------------------------------------------------------
    # Re-layout
    # ------------------------------------------------------------------

    def resize(self, height: int) -> None:
        self.height = max(1, height)
        self._set_top(self.top_line)

    def set_layout(self, layout: LayoutState, height: int | None = None) -> None:
        """Swap in a new layout, keeping the anchor node at the top."""
        anchor = self.anchor_node
        self.layout = layout
        if height is not None:
            self.height = max(1, height)
        self._index_layout()
        try:
            self.scroll_to_node(anchor)
        except AnchorLost:
            logger.debug("anchor node %d lost after re-layout, back to top", anchor)
            self._set_top(0)

    def _index_layout(self) -> None:
        pairs = sorted((line, node) for node, line in self.layout.line_of_node.items())
        self._starts = [line for line, _ in pairs]
        self._nodes = [node for _, node in pairs]

    def _update_anchor(self) -> None:
        if not self._starts:
            self.anchor_node = 0
            return
        idx = bisect.bisect_right(self._starts, self.top_line) - 1
        lines = self.layout.lines
        on_blank = self.top_line < len(lines) and not lines[self.top_line].spans
        if (idx < 0 or on_blank) and idx + 1 < len(self._starts):
            idx += 1
        self.anchor_node = self._nodes[max(0, idx)]
