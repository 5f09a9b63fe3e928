"""Error kinds raised by the reader."""

from __future__ import annotations


class WikiError(Exception):
    """Base class for recoverable reader errors."""


class FetchError(WikiError):
    """The article could not be retrieved (network or transport failure)."""

    def __init__(self, ref: str, reason: str):
        super().__init__(f"Could not fetch {ref!r}: {reason}")
        self.ref = ref
        self.reason = reason


class ParseError(WikiError):
    """The retrieved markup could not be turned into a document."""

    def __init__(self, ref: str, reason: str):
        super().__init__(f"Could not parse {ref!r}: {reason}")
        self.ref = ref
        self.reason = reason


class NavigationError(WikiError):
    """A link was activated while no link has focus."""


class AnchorLost(WikiError):
    """A scroll target node does not exist in the current layout."""

    def __init__(self, node: int):
        super().__init__(f"Node {node} is not part of the current layout")
        self.node = node
