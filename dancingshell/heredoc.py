"""Here-document collection."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from dancingshell.models import ShellSyntaxError, Token, TokenType
from dancingshell.syntax import syntax_message


def write_heredoc(
    delimiter: str,
    lines: Iterable[str],
    output: TextIO,
    err: TextIO | None = None,
) -> int:
    """Copy lines to output up to the delimiter line; return how many were written.

    When the lines run out before the delimiter is seen, a warning naming the
    line count is written to err.
    """
    err = sys.stderr if err is None else err
    written = 0
    for raw in lines:
        line = raw[:-1] if raw.endswith("\n") else raw
        if line == delimiter:
            return written
        output.write(line + "\n")
        written += 1
    err.write(
        f"warning: here-document at line {written + 1} "
        f"delimited by end-of-file (wanted'{delimiter}')\n"
    )
    return written


def heredoc_delimiters(tokens: Iterable[Token]) -> list[str]:
    """Return the delimiter of every << in order.

    Blanks after << are skipped; anything but a word or quoted string there
    raises ShellSyntaxError.
    """
    tokens = list(tokens)
    delimiters: list[str] = []
    for index, token in enumerate(tokens):
        if token.type is not TokenType.HERE_DOC:
            continue
        target = next(
            (t for t in tokens[index + 1:] if t.type is not TokenType.SPC), None
        )
        if target is None or not target.type.is_text():
            raise ShellSyntaxError("heredoc", syntax_message("heredoc"))
        delimiters.append(target.content)
    return delimiters