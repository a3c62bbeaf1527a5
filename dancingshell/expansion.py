"""Variable expansion of words and double-quoted strings."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import replace

from dancingshell.environment import Environment
from dancingshell.models import Token, TokenType
from dancingshell.tokenizer import tokenize

_SPACES = " \t\n\v\f\r"

# A '$' followed by anything starts a reference; the name runs up to a blank
# or another '$', and a single blank ending the name is swallowed with it.
_VARIABLE_RE = re.compile(
    r"\$(?=.)(?P<key>[^$" + _SPACES + "]*)[" + _SPACES + "]?",
    re.DOTALL,
)


def expand_string(text: str, env: Environment, last_status: int) -> str:
    """Replace $NAME and $? references in text."""

    def substitute(match: re.Match[str]) -> str:
        key = match.group("key")
        if key in ("", "?"):
            return str(last_status)
        return env.get(key) or ""

    return _VARIABLE_RE.sub(substitute, text)


def expand_tokens(
    tokens: Iterable[Token], env: Environment, last_status: int
) -> list[Token]:
    """Expand words and double-quoted strings.

    A non-empty expanded word that is not the last token is split again
    into tokens.
    """
    tokens = list(tokens)
    result: list[Token] = []
    for position, token in enumerate(tokens):
        if token.type in (TokenType.WORD, TokenType.DQ_STR) and "$" in token.content:
            content = expand_string(token.content, env, last_status)
            if (
                token.type is TokenType.WORD
                and content
                and position + 1 < len(tokens)
            ):
                result.extend(tokenize(content))
                continue
            token = replace(token, content=content)
        result.append(token)
    return result