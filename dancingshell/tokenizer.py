"""Split a command line into tokens."""

from __future__ import annotations

import re
from collections.abc import Iterator

from dancingshell.models import ShellSyntaxError, Token, TokenType
from dancingshell.syntax import syntax_message

_SPACES = " \t\n\v\f\r"

_TOKEN_RE = re.compile(
    "(?P<space>[" + _SPACES + "]+)"
    r"|(?P<double_pipe>\|\|)"
    r"|(?P<append>>>)"
    r"|(?P<heredoc><<)"
    r"|(?P<pipe>\|)"
    r"|(?P<output>>)"
    r"|(?P<input><)"
    r'|"(?P<dq>[^"]*)"?'
    r"|'(?P<sq>[^']*)'?"
    "|(?P<word>[^" + _SPACES + "|<>'\"]+)"
)

_OPERATORS = {
    "append": TokenType.APPEND,
    "heredoc": TokenType.HERE_DOC,
    "pipe": TokenType.PIPE,
    "output": TokenType.OUTPUT,
    "input": TokenType.INPUT,
}

_QUOTES = {"dq": TokenType.DQ_STR, "sq": TokenType.SQ_STR}


def _scan(prompt: str) -> Iterator[Token]:
    for match in _TOKEN_RE.finditer(prompt):
        kind = match.lastgroup
        if kind == "space":
            yield Token(TokenType.SPC, " ")
        elif kind == "double_pipe":
            raise ShellSyntaxError("||", syntax_message("||"))
        elif kind in _OPERATORS:
            yield Token(_OPERATORS[kind], "")
        elif kind in _QUOTES:
            yield Token(_QUOTES[kind], match.group(kind))
        else:
            yield Token(TokenType.WORD, match.group())


def tokenize(prompt: str) -> list[Token]:
    """Return the tokens of prompt.

    Runs of blanks become one space token, an unclosed quote runs to the end
    of the line, and "||" raises ShellSyntaxError.
    """
    return list(_scan(prompt))