"""The interactive full-screen reader.

Everything the session owns is touched only by the main loop.  Two producers
feed it through one queue: a key reader thread and the fetch worker.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass

import click
from rich.console import Console

from wikiterm.browser import Browser, View
from wikiterm.dispatcher import Action, Dispatcher, KeyEvent
from wikiterm.errors import NavigationError
from wikiterm.fetcher import FetchResult, FetchWorker
from wikiterm.keys import is_quit, translate
from wikiterm.renderer import CHROME_ROWS, render_screen

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.2  # seconds between terminal size checks


@dataclass(frozen=True)
class RawKey:
    key: str


class Quit:
    """Posted by the key reader when the terminal closes or on Ctrl-C."""


def _read_keys(channel: queue.Queue) -> None:
    while True:
        try:
            key = click.getchar()
        except (KeyboardInterrupt, EOFError):
            channel.put(Quit())
            return
        channel.put(RawKey(key))


def _body_size(console: Console) -> tuple[int, int]:
    width, height = console.size
    return max(1, width), max(1, height - CHROME_ROWS)


def _receive(browser: Browser, result: FetchResult, section: str | None) -> str | None:
    """Apply a fetch result and make a pending section jump.

    Returns the section still waiting for a document, or None once the jump
    has been tried.
    """
    if not browser.receive(result) or section is None or browser.view is not View.DOCUMENT:
        return section
    try:
        browser.jump_to_section(section)
    except NavigationError as e:
        logger.warning("%s", e)
    return None


def run(ref: str, console: Console | None = None, section: str | None = None) -> None:
    """Open ``ref`` and run the reader until the user quits.

    With ``section``, the window jumps to that heading once the article has
    loaded.
    """
    console = console or Console()
    channel: queue.Queue = queue.Queue()
    worker = FetchWorker(channel)

    width, height = _body_size(console)
    browser = Browser(width, height, requester=worker.submit)
    dispatcher = Dispatcher(browser)
    reader = threading.Thread(target=_read_keys, args=(channel,), name="wikiterm-keys", daemon=True)

    browser.open(ref)
    try:
        with console.screen(hide_cursor=True) as screen:
            reader.start()
            screen.update(render_screen(browser, dispatcher))
            size = (width, height)
            while True:
                current = _body_size(console)
                if current != size:
                    size = current
                    dispatcher.handle(KeyEvent(Action.RESIZE, width=current[0], height=current[1]))
                    screen.update(render_screen(browser, dispatcher))

                try:
                    message = channel.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue

                if isinstance(message, Quit):
                    break
                if isinstance(message, FetchResult):
                    section = _receive(browser, message, section)
                elif isinstance(message, RawKey):
                    if is_quit(message.key, dispatcher.mode):
                        break
                    event = translate(message.key, dispatcher.mode)
                    if event is None:
                        continue
                    dispatcher.handle(event)
                screen.update(render_screen(browser, dispatcher))
    finally:
        worker.close()
