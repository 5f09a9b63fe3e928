"""Map key events onto the reading session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from wikiterm.browser import Browser
from wikiterm.errors import NavigationError

logger = logging.getLogger(__name__)

BACKSPACE_CHARS = {"\x7f", "\x08"}


class Action(str, Enum):
    SCROLL_UP = "scroll-up"
    SCROLL_DOWN = "scroll-down"
    SCROLL_PAGE_UP = "scroll-page-up"
    SCROLL_PAGE_DOWN = "scroll-page-down"
    FOCUS_NEXT_LINK = "focus-next-link"
    FOCUS_PREVIOUS_LINK = "focus-previous-link"
    ACTIVATE = "activate"
    ENTER_SEARCH = "enter-search"
    SEARCH_CHAR = "search-char"
    SEARCH_CONFIRM = "search-confirm"
    SEARCH_CANCEL = "search-cancel"
    SEARCH_NEXT = "search-next"
    SEARCH_PREVIOUS = "search-previous"
    RESIZE = "resize"


@dataclass(frozen=True)
class KeyEvent:
    action: Action
    char: str = ""    # SEARCH_CHAR only
    width: int = 0    # RESIZE only
    height: int = 0   # RESIZE only


class Mode(str, Enum):
    BROWSING = "browsing"
    SEARCHING = "searching"


class Dispatcher:
    """Two-mode key handling: browsing, and typing a search query."""

    def __init__(self, browser: Browser):
        self.browser = browser
        self.mode = Mode.BROWSING
        self.pending_query = ""

    def handle(self, event: KeyEvent) -> None:
        if event.action is Action.RESIZE:
            self.browser.resize(event.width, event.height)
            return

        if self.browser.error is not None:
            self.browser.dismiss_error()

        if self.mode is Mode.SEARCHING:
            self._handle_search(event)
        else:
            self._handle_browse(event)

    def _handle_search(self, event: KeyEvent) -> None:
        action = event.action
        if action is Action.SEARCH_CHAR:
            if event.char in BACKSPACE_CHARS:
                self.pending_query = self.pending_query[:-1]
            else:
                self.pending_query += event.char
            self.browser.update_query(self.pending_query)
        elif action is Action.SEARCH_CONFIRM:
            self.mode = Mode.BROWSING
        elif action is Action.SEARCH_CANCEL:
            self.pending_query = ""
            self.browser.update_query("")
            self.mode = Mode.BROWSING
        else:
            logger.debug("ignoring %s while searching", action.value)

    def _handle_browse(self, event: KeyEvent) -> None:
        action = event.action
        browser = self.browser
        if action is Action.SCROLL_UP:
            browser.scroll(-1)
        elif action is Action.SCROLL_DOWN:
            browser.scroll(1)
        elif action is Action.SCROLL_PAGE_UP:
            browser.page_up()
        elif action is Action.SCROLL_PAGE_DOWN:
            browser.page_down()
        elif action is Action.FOCUS_NEXT_LINK:
            browser.focus_next()
        elif action is Action.FOCUS_PREVIOUS_LINK:
            browser.focus_previous()
        elif action is Action.ACTIVATE:
            try:
                browser.follow_link()
            except NavigationError:
                logger.debug("activate with no focused link")
        elif action is Action.ENTER_SEARCH:
            self.mode = Mode.SEARCHING
            self.pending_query = ""
        elif action is Action.SEARCH_NEXT:
            browser.next_match()
        elif action is Action.SEARCH_PREVIOUS:
            browser.previous_match()
        else:
            logger.debug("ignoring %s while browsing", action.value)
