"""Exceptions and Rust-style diagnostic rendering over Lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yamlines.lines import Lines
    from yamlines.position import Range
    from yamlines.source import Source


class YamlinesError(Exception):
    """Base class for yamlines errors."""


class BuilderConsumedError(YamlinesError, RuntimeError):
    """A LinesBuilder was used after build()."""


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# Diagnostic codes
INVALID_TOKEN = "E100"
LINE_NUMBER_NOT_INCREASING = "E200"
LINE_NUMBER_MISMATCH = "E201"
COLUMN_NOT_INCREASING = "E202"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a range in a Lines value."""

    range: Range
    message: str = ""


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics with a numbered source excerpt and carets."""

    def __init__(self, *, context: int = 2) -> None:
        self.context = context

    def render(self, diag: Diagnostic, lines: Lines | None = None, name: str = "<input>") -> str:
        out: list[str] = [f"{diag.severity.value}[{diag.code}]: {diag.message}"]

        for label in diag.labels:
            start = label.range.start
            number = start.line + 1
            if lines is not None and 0 <= start.line < len(lines):
                number = lines[start.line].number
            out.append(f"  --> {name}:{number}:{start.col + 1}")
            if lines is not None:
                out.append("       |")
                out.extend("  " + row for row in self._excerpt(lines, label))

        for note in diag.notes:
            out.append(f"  = note: {note}")

        return "\n".join(out)

    def _excerpt(self, lines: Lines, label: DiagnosticLabel) -> list[str]:
        # Work on a copy so annotations never leak into the caller's lines.
        from yamlines.lines import Annotation

        r = label.range
        if not 0 <= r.start.line < len(lines):
            return []
        first = max(0, r.start.line - self.context)
        last = min(len(lines) - 1, max(r.start.line, r.end.line) + self.context)
        excerpt = lines[first:last + 1].clone()

        host = excerpt[r.start.line - first]
        if r.end.line == r.start.line:
            width = max(1, r.end.col - r.start.col)
        else:
            width = max(1, host.width() - r.start.col)
        caret = "^" * width
        if label.message:
            caret += " " + label.message
        host.add_annotation(Annotation(caret, col=r.start.col))
        return str(excerpt).split("\n")


def diagnostics_for(source: Source) -> list[Diagnostic]:
    """Collect lexer and line-integrity diagnostics for *source*."""
    from yamlines.lines import ValidationKind
    from yamlines.position import Position, Range

    diags: list[Diagnostic] = []

    for tk in source.invalid_tokens():
        labels: list[DiagnosticLabel] = []
        for pos in source.lines.token_positions(tk):
            ranges = source.lines.content_position_ranges_at(pos)
            if len(ranges) and source.lines.token_at(pos) == tk:
                labels = [DiagnosticLabel(ranges.values()[0])]
                break
        diags.append(Diagnostic(
            severity=Severity.ERROR,
            code=INVALID_TOKEN,
            message=tk.error or "invalid token",
            labels=labels,
        ))

    result = source.validate()
    if not result.ok:
        code = {
            ValidationKind.LINE_NUMBER_NOT_INCREASING: LINE_NUMBER_NOT_INCREASING,
            ValidationKind.LINE_NUMBER_MISMATCH: LINE_NUMBER_MISMATCH,
            ValidationKind.COLUMN_NOT_INCREASING: COLUMN_NOT_INCREASING,
        }[result.kind]
        start = Position(result.line_index, 0)
        diags.append(Diagnostic(
            severity=Severity.ERROR,
            code=code,
            message=result.message,
            labels=[DiagnosticLabel(Range(start, start))],
        ))

    return diags
