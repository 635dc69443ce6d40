"""yamlines command line."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable
from pathlib import Path

import click
from pygments.token import Generic

from yamlines import __version__
from yamlines.config import YamlinesConfig, resolve_config
from yamlines.errors import DiagnosticRenderer, Severity, diagnostics_for
from yamlines.find import Finder, standard_normalizer
from yamlines.lexer import tokenize_documents
from yamlines.lines import Annotation, Lines
from yamlines.position import Position, Range
from yamlines.revision import Revision
from yamlines.source import Source
from yamlines.styles import type_style
from yamlines.tokens import Token


def _config(ctx: click.Context) -> YamlinesConfig:
    return ctx.obj["config"]


@click.group()
@click.version_option(__version__, prog_name="yamlines")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False),
    default=None, help="Path to a yamlines.toml file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """Line-oriented views of YAML token streams."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = resolve_config(Path(config_path) if config_path else None)
    except tomllib.TOMLDecodeError as e:
        click.echo(f"error: invalid config: {e}", err=True)
        raise SystemExit(1)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def lines(file: str) -> None:
    """Print a file as numbered lines."""
    click.echo(str(Source.from_file(file)))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--parts", is_flag=True, help="Show per-line parts instead of source tokens.")
def tokens(file: str, parts: bool) -> None:
    """Dump the tokens of a file."""
    source = Source.from_file(file)
    if parts:
        for line in source.lines:
            for tk in line.tokens():
                click.echo(_format_token(tk))
        return
    for tk in source.tokens():
        click.echo(_format_token(tk))


def _format_token(tk: Token) -> str:
    pos = tk.position
    loc = f"{pos.line}:{pos.column}" if pos is not None else "-:-"
    return f"{loc:>8} {tk.type.name:<16} {tk.value!r:<20} {tk.origin!r}"


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def check(ctx: click.Context, files: tuple[str, ...]) -> None:
    """Report lexer and line-integrity errors."""
    renderer = DiagnosticRenderer(context=_config(ctx).render.context)
    had_errors = False

    for file in files:
        source = Source.from_file(file)
        diags = diagnostics_for(source)
        for diag in diags:
            click.echo(renderer.render(diag, source.lines, source.name), err=True)
            if diag.severity == Severity.ERROR:
                had_errors = True
        if not diags:
            click.echo(f"checked {source.name}: no errors")

    if had_errors:
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("col", type=click.IntRange(min=1))
def at(file: str, line: int, col: int) -> None:
    """Show the token at LINE and COL (both 1-indexed)."""
    source = Source.from_file(file)
    idx = source.lines.line_index(line)
    if idx is None:
        click.echo(f"error: no line {line} in {source.name}", err=True)
        raise SystemExit(1)

    pos = Position(idx, col - 1)
    tk = source.token_at(pos)
    if tk is None:
        click.echo(f"no token at {line}:{col}")
        return

    click.echo(f"{tk.type.name} {tk.value!r}")
    _echo_marked(source.lines, type_style(tk), source.token_position_ranges(pos))


def _echo_marked(lines: Lines, kind: object, ranges: Iterable[Range]) -> None:
    """Echo every line *ranges* touch, with carets under the overlaid columns."""
    shown = lines.clone()
    shown.add_overlay(kind, *ranges)
    for row in shown:
        if not row.overlays:
            continue
        for overlay in row.overlays:
            row.add_annotation(Annotation("^" * len(overlay.cols), col=overlay.cols.start))
        click.echo(str(row))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("search")
@click.option("-i", "--ignore-case", is_flag=True, help="Ignore case and diacritics.")
def find(file: str, search: str, ignore_case: bool) -> None:
    """Show every occurrence of SEARCH in a file."""
    source = Source.from_file(file)
    finder = Finder(standard_normalizer if ignore_case else None)
    finder.load(source.lines)
    ranges = finder.find(search)
    if not ranges:
        click.echo(f"no match for {search!r} in {source.name}")
        raise SystemExit(1)
    for r in ranges:
        click.echo(f"{source.lines[r.start.line].number}:{r.start.col + 1}")
    _echo_marked(source.lines, Generic.Emph, ranges)


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--full", is_flag=True, help="Show every line, not only the changed hunks.")
@click.option("-U", "--context", type=click.IntRange(min=0), default=None,
              help="Unchanged lines shown around each change.")
@click.pass_context
def diff(ctx: click.Context, files: tuple[str, ...], full: bool, context: int | None) -> None:
    """Diff each file against the one before it."""
    if len(files) < 2:
        click.echo("error: diff needs at least two files", err=True)
        raise SystemExit(1)
    if context is None:
        context = _config(ctx).diff.context

    tip = Revision(Source.from_file(files[0]))
    for file in files[1:]:
        tip = tip.append(Source.from_file(file))

    for rev in tip.origin().next:
        click.echo(f"--- {rev.prev.name}")
        click.echo(f"+++ {rev.name}")
        changes = rev.diff(None if full else context)
        if changes:
            click.echo(str(changes))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--reset-positions/--keep-positions", default=None,
              help="Renumber each document from line 1.")
@click.pass_context
def docs(ctx: click.Context, file: str, reset_positions: bool | None) -> None:
    """List the documents in a file."""
    if reset_positions is None:
        reset_positions = _config(ctx).documents.reset_positions
    text = Path(file).read_text(encoding="utf-8")
    for i, doc in enumerate(tokenize_documents(text, reset_positions=reset_positions)):
        source = Source.from_tokens(doc, name=f"{file}#{i}")
        first, last = source.lines[0].number, source.lines[-1].number
        click.echo(f"document {i}: {len(doc)} tokens, lines {first}-{last}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--style", default=None, help="Pygments style name.")
@click.pass_context
def highlight(ctx: click.Context, file: str, style: str | None) -> None:
    """Print a file with syntax highlighting."""
    from pygments import highlight as pyg_highlight
    from pygments.formatters import Terminal256Formatter
    from pygments.util import ClassNotFound

    from pygments_yamlines import YamlinesLexer

    style = style or _config(ctx).highlight.style
    try:
        formatter = Terminal256Formatter(style=style)
    except ClassNotFound:
        click.echo(f"error: unknown style '{style}'", err=True)
        raise SystemExit(1)
    text = Path(file).read_text(encoding="utf-8")
    click.echo(pyg_highlight(text, YamlinesLexer(), formatter), nl=False)


@main.command()
def lsp() -> None:
    """Start the yamlines language server."""
    from yamlines.lsp import main as lsp_main

    lsp_main()
