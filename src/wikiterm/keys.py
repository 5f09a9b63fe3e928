"""Translate raw terminal keys (as read by click.getchar) into key events."""

from __future__ import annotations

from wikiterm.dispatcher import BACKSPACE_CHARS, Action, KeyEvent, Mode

QUIT_KEYS = {"q", "Q"}

ESCAPE = "\x1b"
ENTER_KEYS = {"\r", "\n"}

_BROWSE_KEYS: dict[str, Action] = {
    "j": Action.SCROLL_DOWN,
    "\x1b[B": Action.SCROLL_DOWN,
    "\xe0P": Action.SCROLL_DOWN,
    "k": Action.SCROLL_UP,
    "\x1b[A": Action.SCROLL_UP,
    "\xe0H": Action.SCROLL_UP,
    " ": Action.SCROLL_PAGE_DOWN,
    "f": Action.SCROLL_PAGE_DOWN,
    "\x1b[6~": Action.SCROLL_PAGE_DOWN,
    "\xe0Q": Action.SCROLL_PAGE_DOWN,
    "b": Action.SCROLL_PAGE_UP,
    "\x1b[5~": Action.SCROLL_PAGE_UP,
    "\xe0I": Action.SCROLL_PAGE_UP,
    "\t": Action.FOCUS_NEXT_LINK,
    "l": Action.FOCUS_NEXT_LINK,
    "\x1b[C": Action.FOCUS_NEXT_LINK,
    "\xe0M": Action.FOCUS_NEXT_LINK,
    "\x1b[Z": Action.FOCUS_PREVIOUS_LINK,
    "h": Action.FOCUS_PREVIOUS_LINK,
    "\x1b[D": Action.FOCUS_PREVIOUS_LINK,
    "\xe0K": Action.FOCUS_PREVIOUS_LINK,
    "\r": Action.ACTIVATE,
    "\n": Action.ACTIVATE,
    "/": Action.ENTER_SEARCH,
    "n": Action.SEARCH_NEXT,
    "N": Action.SEARCH_PREVIOUS,
}

KEY_HELP = "q:quit j/k:scroll space/b:page tab/S-tab:link enter:open /:search n/N:match"


def is_quit(raw: str, mode: Mode) -> bool:
    return mode is Mode.BROWSING and raw in QUIT_KEYS


def translate(raw: str, mode: Mode) -> KeyEvent | None:
    """Map one raw key to an event for the current mode, or None if unbound."""
    if mode is Mode.SEARCHING:
        if raw in ENTER_KEYS:
            return KeyEvent(Action.SEARCH_CONFIRM)
        if raw == ESCAPE:
            return KeyEvent(Action.SEARCH_CANCEL)
        if len(raw) == 1 and (raw.isprintable() or raw in BACKSPACE_CHARS):
            return KeyEvent(Action.SEARCH_CHAR, char=raw)
        return None

    action = _BROWSE_KEYS.get(raw)
    if action is None:
        return None
    return KeyEvent(action)
