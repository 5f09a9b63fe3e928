"""CLI entry point for the wikiterm reader."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from wikiterm.config import configure_logging
from wikiterm.errors import WikiError
from wikiterm.fetcher import fetch_document
from wikiterm.renderer import render_document, render_links, render_matches, render_outline

console = Console()


def _load(title: str):
    """Fetch + parse an article, exiting with an error message on failure."""
    try:
        return fetch_document(title)
    except WikiError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


def _width(width: int | None) -> int:
    if width is not None:
        if width < 1:
            raise click.BadParameter("width must be positive", param_hint="--width")
        return width
    return console.size.width


@click.group()
@click.version_option(package_name="wikiterm")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Log progress to stderr (non-interactive commands).")
@click.pass_context
def cli(ctx, verbose: bool):
    """wikiterm - read, search and follow Wikipedia articles in the terminal."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command("open")
@click.argument("title")
@click.option("--section", "-s", default=None, help="Start at this heading (e.g., \"Behavior\").")
def open_article(title: str, section: str | None):
    """Open an article in the interactive reader.

    TITLE: article title or URL (e.g., "Cat", https://en.wikipedia.org/wiki/Cat)
    """
    from wikiterm.app import run

    configure_logging(interactive=True)
    run(title, section=section)


@cli.command()
@click.argument("title")
@click.option("--section", "-s", default=None, help="Print only this section (e.g., \"Behavior\").")
@click.option("--width", "-w", default=None, type=int, help="Wrap width (default: terminal width).")
@click.option("--numbers", "-n", is_flag=True, default=False, help="Prefix rows with line numbers.")
@click.pass_context
def read(ctx, title: str, section: str | None, width: int | None, numbers: bool):
    """Print a whole article or one of its sections.

    TITLE: article title or URL
    """
    configure_logging(verbose=ctx.obj.get("verbose", False))
    doc = _load(title)
    matched = None
    if section:
        matched = doc.find_section(section)
        if matched is None:
            console.print(f"[red]Section \"{escape(section)}\" not found.[/red]")
            console.print("[dim]Available sections:[/dim]")
            for s in doc.sections():
                console.print(f"  {'  ' * (s.level - 1)}{escape(s.title)}")
            raise SystemExit(1)
    render_document(doc, _width(width), numbers=numbers, section=matched)


@cli.command()
@click.argument("title")
@click.pass_context
def outline(ctx, title: str):
    """Show the headings of an article.

    TITLE: article title or URL
    """
    configure_logging(verbose=ctx.obj.get("verbose", False))
    doc = _load(title)
    render_outline(doc)


@cli.command()
@click.argument("title")
@click.argument("query")
@click.option("--width", "-w", default=None, type=int, help="Wrap width (default: terminal width).")
@click.pass_context
def find(ctx, title: str, query: str, width: int | None):
    """Search an article for QUERY (case-insensitive).

    TITLE: article title or URL
    """
    configure_logging(verbose=ctx.obj.get("verbose", False))
    doc = _load(title)
    if render_matches(doc, query, _width(width)) == 0:
        raise SystemExit(1)


@cli.command()
@click.argument("title")
@click.pass_context
def links(ctx, title: str):
    """List the links of an article in reading order.

    TITLE: article title or URL
    """
    configure_logging(verbose=ctx.obj.get("verbose", False))
    doc = _load(title)
    render_links(doc, _width(None))


@cli.group(invoke_without_command=True)
@click.pass_context
def env(ctx):
    """Show or configure settings.

    Run without arguments to see current status.
    Use `wikiterm env set KEY value` to save a setting to ~/.wikiterm/.env.
    """
    if ctx.invoked_subcommand is not None:
        return

    from wikiterm.config import PERSISTENT_ENV, check_env

    console.print("Settings:")
    console.print()
    for var, is_set, description in check_env():
        status = "[green]set[/green]" if is_set else "[dim]default[/dim]"
        console.print(f"  {var}: {status}")
        console.print(f"    {description}", style="dim")
    console.print()
    console.print(f"Config file: {PERSISTENT_ENV}", style="dim")


@env.command("set")
@click.argument("key")
@click.argument("value")
def env_set(key: str, value: str):
    """Save a setting to ~/.wikiterm/.env.

    KEY: one of WIKI_LANGUAGE, WIKI_API_URL, WIKI_TIMEOUT, WIKI_LOG_FILE, WIKI_LOG_LEVEL
    VALUE: the setting's value
    """
    from wikiterm.config import VALID_KEYS, save_key

    key = key.upper()
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key: {key}[/red]")
        console.print(f"Valid keys: {', '.join(sorted(VALID_KEYS))}")
        raise SystemExit(1)

    path = save_key(key, value)
    console.print(f"Saved {key} to {path}")
