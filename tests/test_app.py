"""Tests for wikiterm.app — the key reader, screen sizing and result handling."""

import logging
import queue
from unittest.mock import MagicMock, patch

from wikiterm.app import Quit, RawKey, _body_size, _read_keys, _receive
from wikiterm.browser import Browser
from wikiterm.errors import FetchError
from wikiterm.fetcher import FetchResult
from wikiterm.models import Document, Heading, Paragraph, Text
from wikiterm.renderer import CHROME_ROWS


class TestReadKeys:
    @patch("wikiterm.app.click.getchar")
    def test_posts_keys_then_quit(self, mock_getchar):
        mock_getchar.side_effect = ["j", "/", KeyboardInterrupt]
        channel = queue.Queue()
        _read_keys(channel)
        messages = [channel.get_nowait() for _ in range(3)]
        assert messages[:2] == [RawKey("j"), RawKey("/")]
        assert isinstance(messages[2], Quit)
        assert channel.empty()

    @patch("wikiterm.app.click.getchar", side_effect=EOFError)
    def test_closed_terminal_quits(self, mock_getchar):
        channel = queue.Queue()
        _read_keys(channel)
        assert isinstance(channel.get_nowait(), Quit)


class TestBodySize:
    def test_reserves_chrome_rows(self):
        console = MagicMock()
        console.size = (100, 30)
        assert _body_size(console) == (100, 30 - CHROME_ROWS)

    def test_tiny_terminal(self):
        console = MagicMock()
        console.size = (0, 1)
        assert _body_size(console) == (1, 1)


class TestReceive:
    DOC = Document(ref="Cat", title="Cat", nodes=tuple(
        [Paragraph((Text(f"para {i}"),)) for i in range(10)]
        + [Heading(2, (Text("Diet"),))]
        + [Paragraph((Text(f"more {i}"),)) for i in range(10)]
    ))

    def test_jumps_once_loaded(self):
        browser = Browser(width=40, height=4)
        request = browser.open("Cat")
        left = _receive(browser, FetchResult(request.seq, request.ref, document=self.DOC), "diet")
        assert left is None
        assert browser.viewport.top_line == browser.layout.line_of_node[10]

    def test_stale_result_keeps_section(self):
        browser = Browser(width=40, height=4)
        browser.open("Dog")
        request = browser.open("Cat")
        stale = FetchResult(request.seq - 1, "Dog", document=self.DOC)
        assert _receive(browser, stale, "diet") == "diet"
        assert browser.viewport.top_line == 0

    def test_failed_fetch_keeps_section(self):
        browser = Browser(width=40, height=4)
        request = browser.open("Cat")
        failed = FetchResult(request.seq, request.ref, error=FetchError("Cat", "HTTP 500"))
        assert _receive(browser, failed, "diet") == "diet"

    def test_unknown_section_is_logged(self, caplog):
        browser = Browser(width=40, height=4)
        request = browser.open("Cat")
        with caplog.at_level(logging.WARNING, logger="wikiterm.app"):
            left = _receive(browser, FetchResult(request.seq, request.ref, document=self.DOC), "history")
        assert left is None
        assert browser.viewport.top_line == 0
        assert "not found" in caplog.text
