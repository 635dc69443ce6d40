"""Split a token stream into YAML documents."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace

from yamlines.tokens import Token, TokenType, link_tokens


def split_documents(
    tokens: Iterable[Token], *, reset_positions: bool = False,
) -> Iterator[list[Token]]:
    """Yield the tokens of each document in turn.

    A ``---`` header opens a new document and belongs to it. Blank lines in
    front of the first header stay with that header's document. With
    *reset_positions* each document is cloned, relinked and shifted so its
    first token sits at line 1, column 1, offset 1.
    """
    current: list[Token] = []
    for tk in tokens:
        if tk.type == TokenType.DOCUMENT_HEADER and _has_content(current):
            yield _rebase(current) if reset_positions else current
            current = []
        current.append(tk)
    if current:
        yield _rebase(current) if reset_positions else current


def _has_content(doc: list[Token]) -> bool:
    return any(tk.type != TokenType.SPACE for tk in doc)


def _rebase(doc: list[Token]) -> list[Token]:
    clones = [tk.clone() for tk in doc]
    first = next((tk.position for tk in clones if tk.position is not None), None)
    if first is not None:
        line_delta = first.line - 1
        offset_delta = first.offset - 1
        col_delta = first.column - 1
        for tk in clones:
            pos = tk.position
            if pos is None:
                continue
            tk.position = replace(
                pos,
                line=pos.line - line_delta,
                column=pos.column - col_delta if pos.line == first.line else pos.column,
                offset=pos.offset - offset_delta,
            )
    return link_tokens(clones)
