"""Link focus: which link is selected and where it goes."""

from __future__ import annotations

import logging
from dataclasses import replace

from wikiterm.models import DocumentRef, LayoutState, LinkLocation, RenderedLine, Style

logger = logging.getLogger(__name__)


class LinkNavigator:
    """Moves focus circularly over the links of a layout, in document order."""

    def __init__(self, layout: LayoutState):
        self.links: tuple[LinkLocation, ...] = layout.links
        self.focused_index: int | None = None

    def set_layout(self, layout: LayoutState, keep_focus: bool = False) -> None:
        """Adopt the link list of a new layout.

        With ``keep_focus`` (same document re-laid out) the focused index is
        kept when it still exists; otherwise focus is cleared.
        """
        self.links = layout.links
        if not keep_focus or (self.focused_index is not None and self.focused_index >= len(self.links)):
            self.focused_index = None

    def focused(self) -> LinkLocation | None:
        if self.focused_index is None:
            return None
        return self.links[self.focused_index]

    def focus_next(self) -> LinkLocation | None:
        if not self.links:
            return None
        if self.focused_index is None:
            self.focused_index = 0
        else:
            self.focused_index = (self.focused_index + 1) % len(self.links)
        return self.focused()

    def focus_previous(self) -> LinkLocation | None:
        if not self.links:
            return None
        if self.focused_index is None:
            self.focused_index = len(self.links) - 1
        else:
            self.focused_index = (self.focused_index - 1) % len(self.links)
        return self.focused()

    def activate(self) -> DocumentRef | None:
        """Return the focused link's target, or None when nothing is focused."""
        link = self.focused()
        if link is None:
            return None
        logger.info("activating link to %r", link.target)
        return link.target

    def decorate(self, line_index: int, line: RenderedLine) -> RenderedLine:
        """Restyle the focused link span if it sits on ``line_index``."""
        link = self.focused()
        if link is None or link.line != line_index:
            return line
        spans = list(line.spans)
        spans[link.span] = replace(spans[link.span], style=Style.LINK_FOCUSED)
        return RenderedLine(tuple(spans))
