"""Syntax checks run on a token list before execution."""

from __future__ import annotations

from collections.abc import Iterable

from dancingshell.models import SYNTAX_ERROR_PREFIX, ShellSyntaxError, Token, TokenType

MAX_HEREDOCS = 16

_SYMBOLS = {
    TokenType.PIPE: "|",
    TokenType.HERE_DOC: "<<",
    TokenType.OUTPUT: ">",
    TokenType.APPEND: ">>",
    TokenType.INPUT: "<",
}


def syntax_message(text: str) -> str:
    """Return the error line printed for an unexpected token."""
    return f"{SYNTAX_ERROR_PREFIX}{text}'\n"


def _fail(text: str) -> None:
    raise ShellSyntaxError(text, syntax_message(text))


def _is_operator(token: Token | None) -> bool:
    return token is not None and TokenType.PIPE <= token.type <= TokenType.HERE_DOC


def check_syntax(tokens: Iterable[Token]) -> list[Token]:
    """Return the tokens unchanged if well formed, else raise ShellSyntaxError."""
    tokens = list(tokens)
    if sum(t.type is TokenType.HERE_DOC for t in tokens) > MAX_HEREDOCS:
        _fail(f"<<{MAX_HEREDOCS}")

    before: list[Token | None] = [None, *tokens[:-1]]
    after: list[Token | None] = [*tokens[1:], None]

    for prev, token, nxt in zip(before, tokens, after):
        if token.type is TokenType.PIPE and (
            prev is None or nxt is None or _is_operator(prev) or _is_operator(nxt)
        ):
            _fail("|")

    for token, nxt in zip(tokens, after):
        if token.type.is_redirection():
            if nxt is None:
                _fail("newline")
            elif nxt.type.is_redirection():
                _fail(_SYMBOLS[nxt.type])
    return tokens