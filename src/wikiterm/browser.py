"""The reading session: one open document and everything derived from it.

The session owns the current Document together with its layout, scroll,
focus and search state, and is only ever touched from the UI thread.
Documents arrive as FetchResults tagged with a sequence number; only the
result of the most recent request is applied.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from wikiterm.errors import NavigationError, WikiError
from wikiterm.fetcher import FetchRequest, FetchResult
from wikiterm.layout import layout
from wikiterm.links import LinkNavigator
from wikiterm.models import Document, DocumentRef, LayoutState, RenderedLine, Section
from wikiterm.search import Match, SearchEngine
from wikiterm.viewport import Viewport

logger = logging.getLogger(__name__)

_EMPTY = Document(ref="")


class View(str, Enum):
    """What the document area currently shows."""
    EMPTY = "empty"
    DOCUMENT = "document"
    LOADING = "loading"
    ERROR = "error"


class Browser:
    def __init__(
        self,
        width: int = 80,
        height: int = 24,
        requester: Callable[[FetchRequest], None] | None = None,
    ):
        self.width = max(1, width)
        self.document: Document | None = None
        self.layout: LayoutState = layout(_EMPTY, self.width)
        self.viewport = Viewport(self.layout, height)
        self.links = LinkNavigator(self.layout)
        self.search = SearchEngine()
        self.pending: FetchRequest | None = None
        self.error: WikiError | None = None
        self._requester = requester
        self._seq = 0

    @property
    def height(self) -> int:
        return self.viewport.height

    @property
    def view(self) -> View:
        if self.pending is not None:
            return View.LOADING
        if self.error is not None:
            return View.ERROR
        if self.document is None:
            return View.EMPTY
        return View.DOCUMENT

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def open(self, ref: DocumentRef) -> FetchRequest:
        """Request a document; supersedes any request still in flight."""
        self._seq += 1
        request = FetchRequest(self._seq, ref)
        if self.pending is not None:
            logger.info("request #%d supersedes #%d", request.seq, self.pending.seq)
        self.pending = request
        self.error = None
        if self._requester is not None:
            self._requester(request)
        return request

    def follow_link(self) -> FetchRequest:
        """Open the focused link. Raises NavigationError when none is focused."""
        ref = self.links.activate()
        if ref is None:
            raise NavigationError("no link has focus")
        return self.open(ref)

    def receive(self, result: FetchResult) -> bool:
        """Apply a fetch result. Returns False when it was stale and dropped."""
        if self.pending is None or result.seq != self.pending.seq:
            logger.debug("dropping stale result #%d for %r", result.seq, result.ref)
            return False
        self.pending = None
        if result.error is not None:
            # Keep the current document, scroll and focus for a retry.
            logger.warning("%s", result.error)
            self.error = result.error
            return True
        self.show(result.document)
        return True

    def show(self, document: Document) -> None:
        """Replace the current document.

        The scroll position is carried over as "same node index as before"
        and falls back to the top when that node does not exist.
        """
        self.document = document
        self.error = None
        self.layout = layout(document, self.width)
        self.viewport.set_layout(self.layout)
        self.links.set_layout(self.layout, keep_focus=False)
        self.search.set_document(document)
        logger.info("showing %r: %d nodes, %d lines", document.ref, len(document.nodes), len(self.layout.lines))

    def dismiss_error(self) -> None:
        self.error = None

    def resize(self, width: int, height: int) -> None:
        width = max(1, width)
        if width == self.width:
            self.viewport.resize(height)
            return
        self.width = width
        self.layout = layout(self.document or _EMPTY, width)
        self.viewport.set_layout(self.layout, height=height)
        self.links.set_layout(self.layout, keep_focus=True)

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def scroll(self, delta: int) -> None:
        self.viewport.scroll(delta)

    def page_down(self) -> None:
        self.viewport.page_down()

    def page_up(self) -> None:
        self.viewport.page_up()

    def jump_to_section(self, name: str) -> Section:
        """Scroll the named heading to the top of the window.

        Raises NavigationError when no document is open or no heading matches.
        """
        if self.document is None:
            raise NavigationError("no document is open")
        section = self.document.find_section(name)
        if section is None:
            raise NavigationError(f"section {name!r} not found")
        self.viewport.scroll_to_node(section.node)
        logger.debug("jumped to section %r at node %d", section.title, section.node)
        return section

    def focus_next(self) -> None:
        link = self.links.focus_next()
        if link is not None:
            self.viewport.reveal(link.line)

    def focus_previous(self) -> None:
        link = self.links.focus_previous()
        if link is not None:
            self.viewport.reveal(link.line)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _reveal_match(self, match: Match | None) -> None:
        if match is None:
            return
        line = self.search.line_of(match, self.layout)
        if line is not None:
            self.viewport.reveal(line)

    def update_query(self, query: str) -> None:
        """Live search: jump to the first match at or below the window top."""
        self.search.set_query(query)
        if query:
            self._reveal_match(self.search.select_from(self.viewport.top_line, self.layout))

    def next_match(self) -> None:
        self._reveal_match(self.search.next_match())

    def previous_match(self) -> None:
        self._reveal_match(self.search.previous_match())

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def visible_lines(self) -> list[RenderedLine]:
        """The visible rows with focus and match styles applied."""
        top = self.viewport.top_line
        return [
            self.search.decorate(self.links.decorate(top + offset, line))
            for offset, line in enumerate(self.viewport.visible_lines())
        ]

    def status(self) -> str:
        parts = ["wikiterm"]
        if self.document is not None:
            parts.append(f"Page '{self.document.title or self.document.ref}'")
            total = len(self.layout.lines)
            parts.append(f"line {min(self.viewport.top_line + 1, total)}/{total}")
        if self.pending is not None:
            parts.append(f"loading '{self.pending.ref}'")
        focused = self.links.focused()
        if focused is not None:
            parts.append(f"-> {focused.target}")
        if self.search.query:
            current = self.search.current
            position = f"{current + 1}/" if current is not None else ""
            parts.append(f"/{self.search.query} [{position}{len(self.search.matches)}]")
        return " | ".join(parts)
