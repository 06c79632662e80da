"""
posql command line interface.

Commands:
- parse:   Parse a query and print its canonical encoding
- tokens:  Show the token stream of a query
- check:   Report whether a query parses
- grammar: Print the EBNF grammar reference
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from posql import __version__
from posql.core.codec import digest, encode
from posql.core.config import ParserLimits, load_limits, load_limits_file
from posql.core.errors import ParseError, format_error
from posql.core.lexer import tokenize
from posql.core.parser import parse

app = typer.Typer(
    help="posql - parser for a restricted, verifiable SQL dialect",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        console.print(f"posql {__version__}")
        console.print(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="TOML file with a [limits] table"
    ),
) -> None:
    """posql CLI main callback for global options."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if config is not None:
        try:
            limits = load_limits_file(config)
        except (OSError, ValueError) as e:
            err_console.print(f"[red]Could not load config:[/red] {e}")
            raise typer.Exit(2) from e
    else:
        limits = load_limits()
    ctx.obj = limits


def _read_query(query: str | None, file: Path | None) -> str | bytes:
    if file is not None:
        try:
            return file.read_bytes()
        except OSError as e:
            err_console.print(f"[red]Could not read {file}:[/red] {e}")
            raise typer.Exit(2) from e
    if query is None:
        err_console.print("[red]Provide a QUERY argument or --file[/red]")
        raise typer.Exit(2)
    return query


def _source_text(source: str | bytes) -> str:
    if isinstance(source, bytes):
        return source.decode("utf-8", errors="replace")
    return source


def _fail(error: ParseError, source: str | bytes) -> typer.Exit:
    err_console.print(
        format_error(error, _source_text(source)), markup=False, highlight=False, soft_wrap=True
    )
    return typer.Exit(1)


@app.command(name="parse")
def parse_command(
    ctx: typer.Context,
    query: str | None = typer.Argument(None, help="Query text"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Read the query from a file"),
    sql: bool = typer.Option(False, "--sql", help="Print canonical SQL instead of JSON"),
    show_digest: bool = typer.Option(
        False, "--digest", help="Print the SHA-256 digest of the canonical encoding"
    ),
) -> None:
    """Parse a query and print its canonical encoding."""
    limits: ParserLimits = ctx.obj
    source = _read_query(query, file)
    try:
        result = parse(source, limits=limits)
    except ParseError as e:
        raise _fail(e, source) from e

    if show_digest:
        typer.echo(digest(result))
    elif sql:
        typer.echo(str(result))
    else:
        typer.echo(encode(result).decode("utf-8"))


@app.command(name="tokens")
def tokens_command(
    query: str = typer.Argument(..., help="Query text"),
) -> None:
    """Show the token stream of a query."""
    try:
        tokens = tokenize(query)
    except ParseError as e:
        raise _fail(e, query) from e

    table = Table(title="Tokens")
    table.add_column("Kind", style="cyan")
    table.add_column("Value")
    table.add_column("Line:Col", justify="right")
    table.add_column("Bytes", justify="right", style="dim")
    for tok in tokens:
        table.add_row(
            tok.kind.value,
            tok.value,
            f"{tok.span.line}:{tok.span.column}",
            f"{tok.span.start}-{tok.span.end}",
        )
    console.print(table)


@app.command(name="check")
def check_command(
    ctx: typer.Context,
    query: str | None = typer.Argument(None, help="Query text"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Read the query from a file"),
) -> None:
    """Report whether a query parses."""
    limits: ParserLimits = ctx.obj
    source = _read_query(query, file)
    try:
        parse(source, limits=limits)
    except ParseError as e:
        console.print(
            f"[red]{e.kind.value} error[/red] {escape(f'[{e.code}] at {e.span}: {e.message}')}",
            highlight=False,
        )
        raise typer.Exit(1) from e
    console.print("[green]OK[/green]")


@app.command(name="grammar")
def grammar_command() -> None:
    """Print the EBNF grammar reference."""
    from posql.core.grammar_gen import generate_grammar

    typer.echo(generate_grammar(), nl=False)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)
