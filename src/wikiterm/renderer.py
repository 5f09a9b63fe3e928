"""Rich terminal output for rendered articles."""

from __future__ import annotations

from rich.console import Console, Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text
from rich.tree import Tree

from wikiterm.browser import Browser, View
from wikiterm.dispatcher import Dispatcher, Mode
from wikiterm.keys import KEY_HELP
from wikiterm.layout import layout
from wikiterm.models import Document, LayoutState, RenderedLine, Section, Style
from wikiterm.search import SearchEngine

console = Console()

STYLES: dict[Style, str] = {
    Style.PLAIN: "",
    Style.HEADING: "bold red",
    Style.LINK: "underline cyan",
    Style.LINK_FOCUSED: "bold reverse cyan",
    Style.SEARCH_MATCH: "black on yellow",
}

# Rows below the document area: status bar and prompt.
CHROME_ROWS = 2


def line_to_text(line: RenderedLine) -> Text:
    text = Text(no_wrap=True, overflow="crop")
    for span in line.spans:
        text.append(span.text, style=STYLES[span.style])
    return text


def render_body(browser: Browser) -> RenderableType:
    """The document area: article rows, the in-flight indicator or an error."""
    view = browser.view
    if view is View.LOADING:
        return Panel(
            Text(f"Loading '{browser.pending.ref}'...", style="bold"),
            border_style="blue",
            padding=(0, 2),
        )
    if view is View.ERROR:
        return Panel(
            Text.assemble(
                (str(browser.error), "bold"), "\n",
                ("Press any key to return to the article.", "dim"),
            ),
            title="Error",
            border_style="red",
            padding=(0, 2),
        )
    if view is View.EMPTY:
        return Text("No article open.", style="dim")

    rows = [line_to_text(line) for line in browser.visible_lines()]
    rows.extend(Text() for _ in range(browser.height - len(rows)))
    return Group(*rows)


def render_screen(browser: Browser, dispatcher: Dispatcher) -> RenderableType:
    status = Text(f" {browser.status()} ", style="reverse", no_wrap=True, overflow="ellipsis")
    if dispatcher.mode is Mode.SEARCHING:
        prompt = Text(f"/{dispatcher.pending_query}", no_wrap=True)
    else:
        prompt = Text(KEY_HELP, style="dim", no_wrap=True, overflow="ellipsis")
    return Group(render_body(browser), status, prompt)


# ------------------------------------------------------------------
# Non-interactive output
# ------------------------------------------------------------------

def _section_rows(doc: Document, state: LayoutState, section: Section) -> range:
    """Rows from a heading up to the next heading of the same or higher level."""
    start = state.line_of_node.get(section.node, len(state.lines))
    end_node = doc.section_end(section)
    end = state.line_of_node.get(end_node, len(state.lines)) if end_node < len(doc.nodes) else len(state.lines)
    while end > start and not state.lines[end - 1].spans:
        end -= 1
    return range(start, end)


def render_document(doc: Document, width: int, numbers: bool = False,
                    section: Section | None = None) -> LayoutState:
    """Print a whole article, or one section of it, laid out at ``width`` cells."""
    state = layout(doc, width)
    rows = range(len(state.lines)) if section is None else _section_rows(doc, state, section)
    pad = len(str(len(state.lines)))
    for idx in rows:
        text = line_to_text(state.lines[idx])
        if numbers:
            text = Text.assemble((f"{idx + 1:>{pad}} ", "dim"), text)
        console.print(text, soft_wrap=True)
    return state


def render_outline(doc: Document) -> None:
    """Print the heading tree."""
    sections = doc.sections()
    if not sections:
        console.print("[dim]No headings.[/dim]")
        return

    tree = Tree(f"[bold]{escape(doc.title or doc.ref)}[/bold]", guide_style="dim")
    # Track tree nodes by level for nesting
    level_nodes: dict[int, Tree] = {}

    for section in sections:
        label = escape(section.title)
        if section.level == 1:
            label = f"[bold]{label}[/bold]"
        parent = tree
        for lvl in range(1, section.level):
            if lvl in level_nodes:
                parent = level_nodes[lvl]

        node = parent.add(label)
        level_nodes[section.level] = node
        for lvl in list(level_nodes):
            if lvl > section.level:
                del level_nodes[lvl]

    console.print(tree)
    console.print()


def render_links(doc: Document, width: int) -> None:
    """Print every link of an article in document order."""
    state = layout(doc, width)
    if not state.links:
        console.print("[dim]No links.[/dim]")
        return
    for idx, link in enumerate(state.links, 1):
        label = state.lines[link.line].spans[link.span].text
        console.print(Text.assemble(
            (f"{idx:>4}. ", "dim"),
            (label, STYLES[Style.LINK]),
            (f"  -> {link.target}", "dim"),
        ), soft_wrap=True)
    console.print()
    console.print(f"[dim]{len(state.links)} links[/dim]")


def render_matches(doc: Document, query: str, width: int) -> int:
    """Print every row holding a match of ``query``; returns the match count."""
    state = layout(doc, width)
    search = SearchEngine(doc)
    search.set_query(query)
    if not search.matches:
        console.print(f"[yellow]No matches for \"{escape(query)}\".[/yellow]")
        return 0

    shown: set[int] = set()
    for match in search.matches:
        line = search.line_of(match, state)
        if line is None or line in shown:
            continue
        shown.add(line)
        console.print(Text.assemble(
            (f"{line + 1:>5}: ", "dim"),
            line_to_text(search.decorate(state.lines[line])),
        ), soft_wrap=True)

    console.print()
    console.print(f"[dim]{len(search.matches)} matches for \"{escape(query)}\"[/dim]")
    return len(search.matches)
