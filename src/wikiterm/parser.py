"""Turn MediaWiki article HTML into a Document.

Only headings, paragraphs, lists and hatnotes survive.  Tables, figures,
references, navigation boxes and edit links are dropped.  Links to other
articles become Link inlines; red links, anchors, external links and links
into special namespaces are kept as plain text.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from wikiterm.errors import ParseError
from wikiterm.models import Block, Document, Heading, Inline, Link, ListBlock, Paragraph, Text

logger = logging.getLogger(__name__)

_HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

_SKIP_TAGS = {"table", "figure", "style", "script", "img", "audio", "video", "link", "meta", "math"}

_SKIP_CLASSES = {
    "reference", "reflist", "references", "mw-references-wrap",
    "navbox", "navbox-styles", "mw-editsection", "infobox", "thumb",
    "metadata", "noprint", "mw-empty-elt", "toc", "sistersitebox",
    "ambox", "shortdescription", "gallery", "mwe-math-element",
}

_BLOCK_CLASSES = {"hatnote", "dablink", "rellink"}

# Namespaces whose pages are not articles.
_SPECIAL_NAMESPACES = {
    "file", "image", "media", "special", "category", "help", "template",
    "template talk", "wikipedia", "portal", "talk", "user", "user talk",
    "module", "draft", "mediawiki",
}

_WS_RE = re.compile(r"\s+")


def _classes(tag: Tag) -> set[str]:
    return set(tag.get("class") or [])


def _skipped(tag: Tag) -> bool:
    if tag.name in _SKIP_TAGS:
        return True
    if tag.get("role") == "navigation" or tag.get("style", "").replace(" ", "").startswith("display:none"):
        return True
    return bool(_classes(tag) & _SKIP_CLASSES)


def link_target(href: str, classes: set[str] | None = None) -> str | None:
    """Return the article title an href points to, or None if not an article link."""
    if classes and "new" in classes:
        return None
    if href.startswith("/wiki/"):
        path = href[len("/wiki/"):]
    elif href.startswith("./"):
        path = href[2:]
    else:
        return None
    title = unquote(path.split("#", 1)[0].split("?", 1)[0]).replace("_", " ").strip()
    if not title:
        return None
    if ":" in title and title.split(":", 1)[0].strip().lower() in _SPECIAL_NAMESPACES:
        return None
    return title


# ------------------------------------------------------------------
# Inline content
# ------------------------------------------------------------------

def _collect(node: Tag, out: list[Inline]) -> None:
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            out.append(Text(str(child)))
            continue
        if not isinstance(child, Tag) or _skipped(child):
            continue
        if child.name in ("ul", "ol", "dl"):
            continue
        if child.name == "br":
            out.append(Text(" "))
            continue
        if child.name == "a":
            label = child.get_text()
            target = link_target(child.get("href", ""), _classes(child))
            if target and label.strip():
                out.append(Link(_WS_RE.sub(" ", label), target))
            else:
                out.append(Text(label))
            continue
        _collect(child, out)


def _normalize(raw: list[Inline]) -> tuple[Inline, ...]:
    """Merge adjacent text runs and collapse whitespace."""
    merged: list[Inline] = []
    for inline in raw:
        if isinstance(inline, Text):
            text = _WS_RE.sub(" ", inline.string)
            if merged and isinstance(merged[-1], Text):
                text = _WS_RE.sub(" ", merged[-1].string + text)
                merged[-1] = Text(text)
            elif text:
                merged.append(Text(text))
        else:
            merged.append(inline)
    return tuple(merged)


def inlines_of(tag: Tag) -> tuple[Inline, ...]:
    raw: list[Inline] = []
    _collect(tag, raw)
    return _normalize(raw)


def _has_words(inlines: tuple[Inline, ...]) -> bool:
    for inline in inlines:
        text = inline.label if isinstance(inline, Link) else inline.string
        if text.strip():
            return True
    return False


# ------------------------------------------------------------------
# Block content
# ------------------------------------------------------------------

def _list_items(tag: Tag) -> list[tuple[Inline, ...]]:
    items: list[tuple[Inline, ...]] = []
    for li in tag.find_all("li", recursive=False):
        if _skipped(li):
            continue
        inlines = inlines_of(li)
        if _has_words(inlines):
            items.append(inlines)
        # Nested lists are flattened into the items that follow.
        for nested in li.find_all(["ul", "ol"], recursive=False):
            items.extend(_list_items(nested))
    return items


def _blocks(container: Tag, out: list[Block]) -> None:
    for child in container.children:
        if not isinstance(child, Tag) or _skipped(child):
            continue
        name = child.name
        if name in _HEADING_TAGS:
            inlines = inlines_of(child)
            if _has_words(inlines):
                out.append(Heading(_HEADING_TAGS[name], inlines))
        elif name == "p" or _classes(child) & _BLOCK_CLASSES:
            inlines = inlines_of(child)
            if _has_words(inlines):
                out.append(Paragraph(inlines))
        elif name in ("ul", "ol"):
            items = _list_items(child)
            if items:
                out.append(ListBlock(ordered=name == "ol", items=tuple(items)))
        elif name == "dl":
            for entry in child.find_all(["dt", "dd"], recursive=False):
                inlines = inlines_of(entry)
                if _has_words(inlines):
                    out.append(Paragraph(inlines))
        elif name in ("div", "section", "blockquote", "main", "article", "body"):
            _blocks(child, out)


def parse_html(html: str, ref: str, title: str = "") -> Document:
    """Build a Document from article HTML.

    A level-1 heading with ``title`` is prepended when a title is given.
    Raises ParseError when no readable content is found.
    """
    soup = BeautifulSoup(html, "html.parser")
    root = soup.select_one("div.mw-parser-output") or soup.body or soup

    nodes: list[Block] = []
    _blocks(root, nodes)
    if not nodes:
        raise ParseError(ref, "no readable content in article")

    if title:
        nodes.insert(0, Heading(1, (Text(title),)))
    logger.debug("parsed %r into %d nodes", ref, len(nodes))
    return Document(ref=ref, title=title, nodes=tuple(nodes))
