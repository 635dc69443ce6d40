"""yamlines language server: pygls-based LSP for YAML files.

Provides diagnostics, hover and document highlights via stdio transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from yamlines import __version__
from yamlines.errors import Diagnostic, Severity, diagnostics_for
from yamlines.lines import Lines
from yamlines.position import Position, Range
from yamlines.source import Source

log = logging.getLogger(__name__)

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}


def to_lsp_range(lines: Lines, r: Range) -> lsp.Range:
    """Convert a Lines range (line indexes) to a 0-indexed LSP range."""

    def conv(pos: Position) -> lsp.Position:
        if 0 <= pos.line < len(lines):
            return lsp.Position(line=lines[pos.line].number - 1, character=pos.col)
        return lsp.Position(line=max(pos.line, 0), character=pos.col)

    return lsp.Range(start=conv(r.start), end=conv(r.end))


def from_lsp_position(lines: Lines, pos: lsp.Position) -> Position | None:
    """Map an LSP cursor to a Lines position, if its line exists."""
    idx = lines.line_index(pos.line + 1)
    if idx is None:
        return None
    return Position(idx, pos.character)


def to_lsp_diagnostic(lines: Lines, d: Diagnostic) -> lsp.Diagnostic:
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if d.labels:
        span_range = to_lsp_range(lines, d.labels[0].range)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="yamlines",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: Source | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "yamlines-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, text: str) -> DocumentState:
    """Lex and build lines, cache results, return state."""
    source = Source.from_string(text, name=uri)
    ds = DocumentState(source=source)
    ds.diagnostics = [to_lsp_diagnostic(source.lines, d) for d in diagnostics_for(source)]
    log.debug("%s: %d diagnostics", uri, len(ds.diagnostics))
    _state[uri] = ds
    return ds


def _hover_text(source: Source, pos: Position) -> str | None:
    tk = source.token_at(pos)
    if tk is None:
        return None
    text = f"**{tk.type.name.lower()}**"
    if tk.value:
        text += f" `{tk.value}`"
    if tk.position is not None:
        text += f"\n\nline {tk.position.line}, column {tk.position.column}"
    return text


def _highlights(source: Source, pos: Position) -> list[lsp.DocumentHighlight]:
    return [
        lsp.DocumentHighlight(range=to_lsp_range(source.lines, r), kind=lsp.DocumentHighlightKind.Text)
        for r in source.token_position_ranges(pos)
    ]


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: the last change holds the whole text
    text = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.source is None:
        return None
    pos = from_lsp_position(ds.source.lines, params.position)
    if pos is None:
        return None
    text = _hover_text(ds.source, pos)
    if text is None:
        return None
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=text,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_HIGHLIGHT)
def document_highlight(params: lsp.DocumentHighlightParams) -> list[lsp.DocumentHighlight] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.source is None:
        return None
    pos = from_lsp_position(ds.source.lines, params.position)
    if pos is None:
        return None
    return _highlights(ds.source, pos) or None


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the yamlines language server on stdio."""
    server.start_io()
