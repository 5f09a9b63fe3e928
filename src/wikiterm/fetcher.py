"""Fetch articles from a MediaWiki API and deliver them off the UI thread."""

from __future__ import annotations

import logging
import queue
import re
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable
from urllib.parse import unquote

import httpx
from tenacity import retry, retry_if_result, stop_after_attempt, wait_exponential

from wikiterm.config import get_api_url, get_timeout
from wikiterm.errors import FetchError, ParseError, WikiError
from wikiterm.models import Document, DocumentRef
from wikiterm.parser import parse_html

logger = logging.getLogger(__name__)

USER_AGENT = "wikiterm/0.1 (terminal article reader)"

RETRY_STATUSES = {429, 502, 503, 504}

# https://en.wikipedia.org/wiki/Title or en.m.wikipedia.org/wiki/Title
_ARTICLE_URL_RE = re.compile(r"^https?://[^/]+/wiki/([^?#]+)")


def resolve_title(ref: DocumentRef) -> str:
    """Extract an article title from a title or an article URL."""
    ref = ref.strip()
    m = _ARTICLE_URL_RE.match(ref)
    if m:
        ref = unquote(m.group(1))
    return ref.replace("_", " ").strip()


@retry(
    retry=retry_if_result(lambda r: r.status_code in RETRY_STATUSES),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry_error_callback=lambda state: state.outcome.result(),
)
def _get(url: str, **kwargs) -> httpx.Response:
    return httpx.get(url, **kwargs)


def fetch_document(ref: DocumentRef) -> Document:
    """Download and parse one article.

    Raises FetchError for transport failures and missing pages, ParseError
    when the response cannot be turned into a document.
    """
    title = resolve_title(ref)
    if not title:
        raise FetchError(ref, "empty article title")

    logger.info("fetching %r", title)
    try:
        resp = _get(
            get_api_url(),
            params={
                "action": "parse",
                "page": title,
                "prop": "text",
                "format": "json",
                "formatversion": "2",
                "redirects": "1",
                "disableeditsection": "1",
            },
            headers={"User-Agent": USER_AGENT},
            timeout=get_timeout(),
            follow_redirects=True,
        )
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise FetchError(ref, str(e)) from e

    try:
        data = resp.json()
    except ValueError as e:
        raise ParseError(ref, "response is not JSON") from e

    if "error" in data:
        err = data["error"] or {}
        raise FetchError(ref, err.get("info") or err.get("code") or "API error")

    parsed = data.get("parse") or {}
    html = parsed.get("text")
    if not isinstance(html, str):
        raise ParseError(ref, "response has no article text")
    return parse_html(html, ref=ref, title=parsed.get("title") or title)


# ------------------------------------------------------------------
# Background delivery
# ------------------------------------------------------------------

@dataclass(frozen=True)
class FetchRequest:
    """A document request tagged with its sequence number."""
    seq: int
    ref: DocumentRef


@dataclass(frozen=True)
class FetchResult:
    """The outcome of a request: a document or an error."""
    seq: int
    ref: DocumentRef
    document: Document | None = None
    error: WikiError | None = None


class FetchWorker:
    """Runs fetches on a thread pool and posts results to a channel.

    Submitting a new request cancels the previous one if it has not started
    yet.  A request that is already running finishes and posts its result;
    the consumer drops it by sequence number.
    """

    def __init__(
        self,
        channel: queue.Queue,
        fetch: Callable[[DocumentRef], Document] = fetch_document,
        max_workers: int = 2,
    ):
        self._channel = channel
        self._fetch = fetch
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="wikiterm-fetch")
        self._pending: Future | None = None

    def submit(self, request: FetchRequest) -> None:
        if self._pending is not None and self._pending.cancel():
            logger.debug("cancelled queued request before #%d", request.seq)
        self._pending = self._executor.submit(self._run, request)

    def _run(self, request: FetchRequest) -> None:
        try:
            result = FetchResult(request.seq, request.ref, document=self._fetch(request.ref))
        except WikiError as e:
            result = FetchResult(request.seq, request.ref, error=e)
        except Exception as e:
            logger.exception("unexpected failure fetching %r", request.ref)
            result = FetchResult(request.seq, request.ref, error=FetchError(request.ref, str(e)))
        self._channel.put(result)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
